"""Playlist library domain: records, stores, metadata extraction and the service."""

from .blob_store import BlobStore
from .errors import (
    LibraryError,
    MetadataExtractionError,
    NotFound,
    PayloadTooLarge,
    StorageError,
    ValidationError,
)
from .metadata import MetadataExtractor, MutagenMetadataExtractor
from .repository import PlaylistRepository, SongRepository
from .service import LibraryService
from .upload_policy import UploadPolicy

__all__ = [
    "BlobStore",
    "LibraryError",
    "MetadataExtractionError",
    "NotFound",
    "PayloadTooLarge",
    "StorageError",
    "ValidationError",
    "MetadataExtractor",
    "MutagenMetadataExtractor",
    "PlaylistRepository",
    "SongRepository",
    "LibraryService",
    "UploadPolicy",
]
