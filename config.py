#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


# Multipart framing around the audio part; the exact byte cap is enforced by the service.
MULTIPART_SLACK_BYTES = 1024 * 1024


class Config:
    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'tunebox.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Uploaded audio blobs
    UPLOAD_DIR = os.getenv('UPLOAD_DIR', os.path.join(basedir, 'uploads'))
    MAX_UPLOAD_BYTES = max(1, _get_int('MAX_UPLOAD_BYTES', 10 * 1024 * 1024))
    # Werkzeug rejects whole requests above this before the route runs
    MAX_CONTENT_LENGTH = MAX_UPLOAD_BYTES + MULTIPART_SLACK_BYTES
    ALLOWED_AUDIO_EXTENSIONS = _get_csv_list('ALLOWED_AUDIO_EXTENSIONS', 'mp3,wav,ogg,m4a')

    # Song uploads must target a playlist that exists; off accepts orphaned songs
    REQUIRE_EXISTING_PLAYLIST = _get_bool('REQUIRE_EXISTING_PLAYLIST', True)
    # Administrative wipe endpoint (DELETE /api/clear-all)
    ALLOW_CLEAR_ALL = _get_bool('ALLOW_CLEAR_ALL', True)

    # HTTP
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')
    PORT = _get_int('PORT', 3000)

    # Runtime behavior
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
