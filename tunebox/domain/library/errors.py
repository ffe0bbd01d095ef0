"""Error kinds raised by the library service and its collaborators."""

from __future__ import annotations


class LibraryError(Exception):
    """Base error; ``status_code`` is the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(LibraryError):
    """Missing or invalid input, including a disallowed file type."""

    status_code = 400


class PayloadTooLarge(LibraryError):
    status_code = 413


class NotFound(LibraryError):
    status_code = 404


class MetadataExtractionError(LibraryError):
    """The extractor could not read a stored blob."""


class StorageError(LibraryError):
    """Record store or blob store I/O failed."""


__all__ = [
    "LibraryError",
    "ValidationError",
    "PayloadTooLarge",
    "NotFound",
    "MetadataExtractionError",
    "StorageError",
]
