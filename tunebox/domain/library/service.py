import logging
import time
from typing import List, Optional

from tunebox.observability import metrics

from .blob_store import BlobStore
from .errors import (
    LibraryError,
    MetadataExtractionError,
    NotFound,
    PayloadTooLarge,
    StorageError,
    ValidationError,
)
from .metadata import MetadataExtractor, MutagenMetadataExtractor, format_duration, resolve_artist, resolve_title
from .records import ClearSummary, PlaylistDetail, PlaylistRecord, PlaylistSummary, SongRecord, TrackMetadata
from .repository import PlaylistRepository, SongRepository
from .upload_policy import UploadPolicy

logger = logging.getLogger(__name__)


def _coerce_id(value, label):
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be an integer id")
    if isinstance(value, int):
        return value
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError(f"{label} is required")
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"{label} must be an integer id")


class LibraryService:
    def __init__(
        self,
        blob_store: BlobStore,
        playlists: Optional[PlaylistRepository] = None,
        songs: Optional[SongRepository] = None,
        extractor: Optional[MetadataExtractor] = None,
        upload_policy: Optional[UploadPolicy] = None,
        require_existing_playlist: bool = True,
    ):
        """Playlist and song operations over injected stores.

        :param blob_store: Where uploaded audio bytes live.
        :param require_existing_playlist: When False, uploads naming an unknown
            playlist are stored anyway and become orphans.
        """
        self.blob_store = blob_store
        self.playlists = playlists or PlaylistRepository()
        self.songs = songs or SongRepository()
        self.extractor = extractor or MutagenMetadataExtractor()
        self.upload_policy = upload_policy or UploadPolicy()
        self.require_existing_playlist = require_existing_playlist

    # --- Playlists ---

    def create_playlist(self, name, creator=None) -> PlaylistRecord:
        name = str(name).strip() if name is not None else ""
        if not name:
            raise ValidationError("Playlist name is required")
        creator = (str(creator).strip() or None) if creator is not None else None

        playlist = self.playlists.insert({"name": name, "creator": creator})
        metrics.record_playlist_created()
        logger.info("New playlist created: %s (id=%s)", playlist.name, playlist.id)
        return playlist

    def list_playlists(self) -> List[PlaylistSummary]:
        return self.playlists.summaries()

    def get_playlist(self, playlist_id) -> PlaylistRecord:
        playlist = self.playlists.find_by_id(_coerce_id(playlist_id, "playlistId"))
        if playlist is None:
            raise NotFound("Playlist not found")
        return playlist

    def get_playlist_with_songs(self, playlist_id) -> PlaylistDetail:
        playlist = self.get_playlist(playlist_id)
        songs = self.songs.find_where(playlist_id=playlist.id)
        return PlaylistDetail(playlist=playlist, songs=songs)

    def delete_playlist(self, playlist_id) -> PlaylistRecord:
        """Delete a playlist, then its songs' blobs, then the song rows.

        Not transactional: a crash between steps leaves orphaned song rows
        that ``purge_orphans`` removes later.
        """
        pid = _coerce_id(playlist_id, "playlistId")
        playlist = self.playlists.delete_by_id(pid)
        if playlist is None:
            raise NotFound("Playlist not found")

        songs = self.songs.find_where(playlist_id=pid)
        for song in songs:
            self._discard_blob(song.audio_file)
        removed = self.songs.delete_where(playlist_id=pid)
        metrics.record_songs_deleted(removed)

        logger.info("Playlist deleted: %s (id=%s, %d song(s))", playlist.name, pid, removed)
        return playlist

    # --- Songs ---

    def add_song(self, playlist_id, file_bytes, original_filename, declared_mime_type) -> SongRecord:
        if not file_bytes or not original_filename:
            metrics.record_upload_rejected("missing_file")
            raise ValidationError("No audio file uploaded")
        try:
            pid = _coerce_id(playlist_id, "playlistId")
            self.upload_policy.check(original_filename, declared_mime_type, len(file_bytes))
        except PayloadTooLarge:
            metrics.record_upload_rejected("too_large")
            raise
        except ValidationError:
            metrics.record_upload_rejected("invalid")
            raise

        if self.require_existing_playlist and self.playlists.find_by_id(pid) is None:
            metrics.record_upload_rejected("unknown_playlist")
            raise NotFound("Playlist not found")

        reference = self.blob_store.store(file_bytes, original_filename)
        try:
            metadata = self._extract(reference)
            song = self.songs.insert(
                {
                    "title": resolve_title(metadata, original_filename),
                    "artist": resolve_artist(metadata),
                    "duration": format_duration(metadata.duration_seconds),
                    "audio_file": reference,
                    "playlist_id": pid,
                }
            )
        except LibraryError:
            # Second phase failed: the row never landed, so the blob must not outlive it
            self._discard_blob(reference)
            metrics.record_upload_failed()
            raise

        metrics.record_song_uploaded()
        logger.info("New song added: %s by %s to playlist id %s", song.title, song.artist, pid)
        return song

    def delete_song(self, song_id) -> SongRecord:
        sid = _coerce_id(song_id, "songId")
        song = self.songs.find_by_id(sid)
        if song is None:
            raise NotFound("Song not found")
        self._discard_blob(song.audio_file)
        deleted = self.songs.delete_by_id(sid)
        if deleted is None:
            # Lost a race with another delete
            raise NotFound("Song not found")
        metrics.record_songs_deleted(1)
        logger.info("Song deleted: %s (id=%s)", song.title, sid)
        return deleted

    # --- Administration ---

    def clear_all(self) -> ClearSummary:
        songs_deleted = self.songs.delete_where()
        playlists_deleted = self.playlists.delete_where()
        files_deleted = self.blob_store.clear()
        metrics.record_songs_deleted(songs_deleted)
        logger.warning(
            "Library cleared: %d playlist(s), %d song(s), %d file(s)",
            playlists_deleted, songs_deleted, files_deleted,
        )
        return ClearSummary(
            songs_deleted=songs_deleted,
            playlists_deleted=playlists_deleted,
            files_deleted=files_deleted,
        )

    def find_orphaned_songs(self) -> List[SongRecord]:
        return self.songs.find_orphans()

    def purge_orphans(self) -> int:
        orphans = self.songs.find_orphans()
        removed = 0
        for song in orphans:
            self._discard_blob(song.audio_file)
            if self.songs.delete_by_id(song.id) is not None:
                removed += 1
        if removed:
            metrics.record_songs_deleted(removed)
            logger.info("Purged %d orphaned song(s)", removed)
        return removed

    def _extract(self, reference) -> TrackMetadata:
        path = self.blob_store.resolve(reference)
        started = time.perf_counter()
        try:
            metadata = self.extractor.extract(path)
        except MetadataExtractionError:
            raise
        except Exception as e:
            logger.error("Metadata extractor failed on %s: %s", path, e, exc_info=True)
            raise MetadataExtractionError(f"Could not read audio metadata: {e}") from e
        metrics.observe_extraction_time(time.perf_counter() - started)
        return metadata

    def _discard_blob(self, reference) -> None:
        """Best-effort blob removal; failures are logged, never raised."""
        if not reference:
            return
        try:
            self.blob_store.delete(reference)
        except StorageError as e:
            metrics.record_blob_cleanup_failure()
            logger.warning("Could not delete blob %s: %s", reference, e)


__all__ = ["LibraryService"]
