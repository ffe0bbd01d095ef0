"""Read-only access to stored audio blobs under the reference prefix."""

from __future__ import annotations

from flask import Blueprint, current_app, send_from_directory


media_bp = Blueprint('media_bp', __name__)


@media_bp.route('/uploads/<path:filename>', methods=['GET'])
def serve_upload(filename: str):
    blob_store = current_app.extensions['blob_store']
    # send_from_directory refuses paths that escape the directory (404)
    return send_from_directory(blob_store.base_dir, filename, conditional=True)


__all__ = ['media_bp']
