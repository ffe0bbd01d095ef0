from __future__ import annotations

import logging
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from tunebox.database.db_manager import db, Playlist, Song

from .errors import StorageError
from .records import PlaylistRecord, PlaylistSummary, SongRecord


logger = logging.getLogger(__name__)

R = TypeVar("R")


class RecordStore(Generic[R]):
    """Interface for one persisted collection.

    Every call commits on its own; nothing spans collections.
    """

    def insert(self, fields: Dict[str, Any]) -> R:  # pragma: no cover - interface
        raise NotImplementedError

    def find_by_id(self, record_id: int) -> Optional[R]:  # pragma: no cover - interface
        raise NotImplementedError

    def find_all(self, order_by: Sequence[str] = ()) -> List[R]:  # pragma: no cover - interface
        raise NotImplementedError

    def find_where(self, order_by: Sequence[str] = (), **filters: Any) -> List[R]:  # pragma: no cover - interface
        raise NotImplementedError

    def delete_by_id(self, record_id: int) -> Optional[R]:  # pragma: no cover - interface
        raise NotImplementedError

    def delete_where(self, **filters: Any) -> int:  # pragma: no cover - interface
        raise NotImplementedError


class SqlAlchemyRecordStore(RecordStore[R]):
    model: Type[db.Model]
    record_type: Type[R]

    def _to_record(self, row) -> R:
        return self.record_type.model_validate(row.to_dict())

    def _column(self, name: str):
        column = getattr(self.model, name, None)
        if column is None or not hasattr(column, "desc"):
            raise ValueError(f"{self.model.__name__} has no column {name!r}")
        return column

    def _ordering(self, order_by: Sequence[str]):
        # Insertion order unless told otherwise
        if not order_by:
            return [self.model.id.asc()]
        clauses = []
        for key in order_by:
            if key.startswith("-"):
                clauses.append(self._column(key[1:]).desc())
            else:
                clauses.append(self._column(key).asc())
        return clauses

    def _filtered(self, filters: Dict[str, Any]):
        query = self.model.query
        for name, value in filters.items():
            query = query.filter(self._column(name) == value)
        return query

    def insert(self, fields: Dict[str, Any]) -> R:
        try:
            row = self.model(**fields)
            db.session.add(row)
            db.session.commit()
            return self._to_record(row)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to insert %s row: %s", self.model.__name__, e, exc_info=True)
            raise StorageError(f"Could not save {self.model.__name__.lower()}: {e}") from e

    def find_by_id(self, record_id: int) -> Optional[R]:
        try:
            row = db.session.get(self.model, record_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not load {self.model.__name__.lower()}: {e}") from e
        return self._to_record(row) if row is not None else None

    def find_all(self, order_by: Sequence[str] = ()) -> List[R]:
        return self.find_where(order_by=order_by)

    def find_where(self, order_by: Sequence[str] = (), **filters: Any) -> List[R]:
        try:
            rows = self._filtered(filters).order_by(*self._ordering(order_by)).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not query {self.model.__tablename__}: {e}") from e
        return [self._to_record(row) for row in rows]

    def delete_by_id(self, record_id: int) -> Optional[R]:
        try:
            row = db.session.get(self.model, record_id)
            if row is None:
                return None
            record = self._to_record(row)
            db.session.delete(row)
            db.session.commit()
            return record
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to delete %s %s: %s", self.model.__name__, record_id, e, exc_info=True)
            raise StorageError(f"Could not delete {self.model.__name__.lower()}: {e}") from e

    def delete_where(self, **filters: Any) -> int:
        try:
            count = self._filtered(filters).delete(synchronize_session=False)
            db.session.commit()
            return count
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed bulk delete on %s: %s", self.model.__tablename__, e, exc_info=True)
            raise StorageError(f"Could not delete from {self.model.__tablename__}: {e}") from e


class PlaylistRepository(SqlAlchemyRecordStore[PlaylistRecord]):
    model = Playlist
    record_type = PlaylistRecord

    def summaries(self) -> List[PlaylistSummary]:
        """Every playlist, newest first, with its song count computed from song rows."""
        counts = (
            db.session.query(Song.playlist_id, func.count(Song.id).label("song_count"))
            .group_by(Song.playlist_id)
            .subquery()
        )
        try:
            rows = (
                db.session.query(Playlist, func.coalesce(counts.c.song_count, 0))
                .outerjoin(counts, counts.c.playlist_id == Playlist.id)
                .order_by(Playlist.created_at.desc(), Playlist.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not list playlists: {e}") from e
        return [
            PlaylistSummary.model_validate({**playlist.to_dict(), "songCount": int(count)})
            for playlist, count in rows
        ]


class SongRepository(SqlAlchemyRecordStore[SongRecord]):
    model = Song
    record_type = SongRecord

    def find_orphans(self) -> List[SongRecord]:
        """Songs whose playlist row no longer exists."""
        try:
            rows = (
                Song.query.outerjoin(Playlist, Playlist.id == Song.playlist_id)
                .filter(Playlist.id.is_(None))
                .order_by(Song.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not query songs: {e}") from e
        return [self._to_record(row) for row in rows]


__all__ = [
    "RecordStore",
    "SqlAlchemyRecordStore",
    "PlaylistRepository",
    "SongRepository",
]
