from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Iterable, Optional, Union

from mutagen import File as MutagenFile
from mutagen import MutagenError

from .errors import MetadataExtractionError
from .records import TrackMetadata

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown Artist"

# Easy-tag keys first, then raw ID3 frames and MP4 atoms for containers mutagen cannot wrap as "easy"
_TITLE_KEYS = ("title", "TIT2", "\xa9nam")
_ARTIST_KEYS = ("artist", "TPE1", "albumartist", "TPE2", "\xa9ART", "aART")

_LAST_EXTENSION = re.compile(r"\.[^/.]+$")


class MetadataExtractor:
    """Interface for reading tag metadata from a stored audio file."""

    def extract(self, path: Union[str, Path]) -> TrackMetadata:  # pragma: no cover - interface
        raise NotImplementedError


class MutagenMetadataExtractor(MetadataExtractor):
    def extract(self, path: Union[str, Path]) -> TrackMetadata:
        try:
            audio = MutagenFile(str(path), easy=True)
        except (MutagenError, OSError) as e:
            logger.warning("Failed to read audio tags for %s: %s", path, e)
            raise MetadataExtractionError(f"Could not read audio metadata: {e}") from e

        if audio is None:
            raise MetadataExtractionError("Could not read audio metadata: unrecognised audio format")

        length = getattr(getattr(audio, "info", None), "length", None)
        duration = float(length) if length and length > 0 else None
        tags = getattr(audio, "tags", None)
        return TrackMetadata(
            title=_first_tag(tags, _TITLE_KEYS),
            artist=_first_tag(tags, _ARTIST_KEYS),
            duration_seconds=duration,
        )


def _first_tag(tags, keys: Iterable[str]) -> Optional[str]:
    if not tags:
        return None
    for key in keys:
        try:
            values = tags.get(key)
        except (KeyError, ValueError):
            continue
        if not values:
            continue
        # ID3 frames carry their values in .text
        values = getattr(values, "text", values)
        if isinstance(values, (list, tuple)):
            values = values[0] if values else None
        text = str(values).strip() if values is not None else ""
        if text:
            return text
    return None


def strip_extension(filename: str) -> str:
    return _LAST_EXTENSION.sub("", filename or "")


def format_duration(seconds: Optional[float]) -> str:
    """``m:ss`` with whole minutes and zero-padded whole seconds."""
    total = seconds if seconds and seconds > 0 else 0
    minutes = math.floor(total / 60)
    rest = math.floor(total % 60)
    return f"{minutes}:{rest:02d}"


def resolve_title(metadata: TrackMetadata, original_filename: str) -> str:
    return metadata.title or strip_extension(original_filename)


def resolve_artist(metadata: TrackMetadata) -> str:
    return metadata.artist or UNKNOWN_ARTIST


__all__ = [
    "MetadataExtractor",
    "MutagenMetadataExtractor",
    "UNKNOWN_ARTIST",
    "format_duration",
    "resolve_title",
    "resolve_artist",
    "strip_extension",
]
