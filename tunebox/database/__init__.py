from .db_manager import db, Playlist, Song, initialize_database  # noqa: F401
