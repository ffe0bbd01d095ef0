"""Route blueprints exposed via Flask."""

from .playlist import playlist_bp
from .song import song_bp
from .admin import admin_bp
from .media import media_bp
from .health import health_bp

__all__ = [
    "playlist_bp",
    "song_bp",
    "admin_bp",
    "media_bp",
    "health_bp",
]
