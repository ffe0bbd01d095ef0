"""Checks an upload must pass before any of its bytes are persisted."""

from __future__ import annotations

import logging
import os
import re
from typing import Iterable, Optional

from .errors import PayloadTooLarge, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_EXTENSIONS = ("mp3", "wav", "ogg", "m4a")
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


def file_extension(filename: str) -> str:
    """Return the lowercased final extension without its dot ('' when absent)."""
    ext = os.path.splitext(filename or "")[1]
    return ext[1:].lower() if ext else ""


class UploadPolicy:
    def __init__(self, allowed_extensions: Optional[Iterable[str]] = None, max_bytes: int = DEFAULT_MAX_BYTES):
        exts = allowed_extensions or DEFAULT_ALLOWED_EXTENSIONS
        self.allowed_extensions = frozenset(e.strip().lower().lstrip(".") for e in exts if e and e.strip())
        if not self.allowed_extensions:
            raise ValueError("At least one audio extension must be allowed")
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        self.max_bytes = max_bytes
        self._mime_pattern = re.compile(
            "|".join(re.escape(e) for e in sorted(self.allowed_extensions)),
            re.IGNORECASE,
        )

    def is_allowed_extension(self, filename: str) -> bool:
        return file_extension(filename) in self.allowed_extensions

    def is_allowed_mime(self, mime_type: Optional[str]) -> bool:
        # audio/* always passes; otherwise the type must name an allowed format (application/ogg)
        mime = (mime_type or "").strip().lower()
        if not mime:
            return False
        return mime.startswith("audio/") or bool(self._mime_pattern.search(mime))

    def check(self, filename: str, mime_type: Optional[str], size: int) -> None:
        """Raise ``ValidationError`` or ``PayloadTooLarge`` when the upload is not acceptable."""
        if not (self.is_allowed_extension(filename) and self.is_allowed_mime(mime_type)):
            logger.info("Rejected upload %r (%s): not an allowed audio type", filename, mime_type)
            raise ValidationError("Only audio files are allowed")
        if size > self.max_bytes:
            logger.info("Rejected upload %r: %s bytes exceeds cap of %s", filename, size, self.max_bytes)
            raise PayloadTooLarge(f"File too large: limit is {self.max_bytes} bytes")


__all__ = ["UploadPolicy", "file_extension", "DEFAULT_ALLOWED_EXTENSIONS", "DEFAULT_MAX_BYTES"]
