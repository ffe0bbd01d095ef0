"""Shared test stubs for the metadata extractor and audio payloads."""

import io
import wave
from pathlib import Path
from typing import List, Optional

from tunebox.domain.library.metadata import MetadataExtractor
from tunebox.domain.library.records import TrackMetadata


class StubMetadataExtractor(MetadataExtractor):
    """Returns canned metadata (or raises) and records the paths it was given."""

    def __init__(self, metadata: Optional[TrackMetadata] = None, error: Optional[Exception] = None):
        self.metadata = metadata or TrackMetadata()
        self.error = error
        self.calls: List[Path] = []
        self.existed: List[bool] = []

    def extract(self, path):
        path = Path(path)
        self.calls.append(path)
        self.existed.append(path.is_file())
        if self.error is not None:
            raise self.error
        return self.metadata


def silent_wav_bytes(seconds: float, sample_rate: int = 8000) -> bytes:
    """Untagged mono 8-bit PCM WAV of the given length."""
    frames = int(seconds * sample_rate)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(1)
        wav.setframerate(sample_rate)
        wav.writeframes(b"\x80" * frames)
    return buf.getvalue()
