from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

PLAYLISTS_CREATED = Counter(
    "tunebox_playlists_created_total",
    "Total number of playlists created.",
)
SONGS_UPLOADED = Counter(
    "tunebox_songs_uploaded_total",
    "Total number of songs stored with extracted metadata.",
)
UPLOADS_REJECTED = Counter(
    "tunebox_upload_rejections_total",
    "Uploads refused before any bytes were stored.",
    ["reason"],
)
UPLOADS_FAILED = Counter(
    "tunebox_upload_failures_total",
    "Uploads that failed after the blob was stored (extraction or insert).",
)
SONGS_DELETED = Counter(
    "tunebox_songs_deleted_total",
    "Song rows deleted individually, by cascade or by purge.",
)
BLOB_CLEANUP_FAILURES = Counter(
    "tunebox_blob_cleanup_failures_total",
    "Blob deletions that failed and were skipped.",
)
EXTRACTION_TIME = Histogram(
    "tunebox_metadata_extraction_seconds",
    "Time spent reading tags from a stored upload.",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, float("inf")),
)


def record_playlist_created() -> None:
    PLAYLISTS_CREATED.inc()


def record_song_uploaded() -> None:
    SONGS_UPLOADED.inc()


def record_upload_rejected(reason: str) -> None:
    UPLOADS_REJECTED.labels(reason=reason).inc()


def record_upload_failed() -> None:
    UPLOADS_FAILED.inc()


def record_songs_deleted(count: int) -> None:
    if count > 0:
        SONGS_DELETED.inc(count)


def record_blob_cleanup_failure() -> None:
    BLOB_CLEANUP_FAILURES.inc()


def observe_extraction_time(seconds: float) -> None:
    EXTRACTION_TIME.observe(seconds)


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
