#!/usr/bin/env python
"""
Pydantic records for the playlist library.

Rows never leave the repository layer; callers receive these records instead.
Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class PlaylistRecord(_Record):
    id: int
    name: str = Field(min_length=1)
    creator: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")


class SongRecord(_Record):
    id: int
    title: str
    artist: str
    duration: str
    audio_file: Optional[str] = Field(default=None, alias="audioFile")
    playlist_id: int = Field(alias="playlistId")


class PlaylistSummary(PlaylistRecord):
    """Playlist listing entry; ``song_count`` is counted from song rows."""

    song_count: int = Field(default=0, ge=0, alias="songCount")


class PlaylistDetail(_Record):
    playlist: PlaylistRecord
    songs: List[SongRecord] = Field(default_factory=list)


class TrackMetadata(BaseModel):
    """Best-effort tags read from an audio file; every field may be absent."""

    title: Optional[str] = None
    artist: Optional[str] = None
    duration_seconds: Optional[float] = Field(default=None, ge=0)


class ClearSummary(_Record):
    songs_deleted: int = Field(alias="songsDeleted")
    playlists_deleted: int = Field(alias="playlistsDeleted")
    files_deleted: int = Field(alias="filesDeleted")


__all__ = [
    "PlaylistRecord",
    "SongRecord",
    "PlaylistSummary",
    "PlaylistDetail",
    "TrackMetadata",
    "ClearSummary",
]
