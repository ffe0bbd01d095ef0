"""Playlist CRUD routes."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from tunebox.domain.library import LibraryService


playlist_bp = Blueprint('playlist_bp', __name__, url_prefix='/api/playlists')


def _service() -> LibraryService:
    return current_app.extensions['library_service']


@playlist_bp.route('', methods=['GET'])
def list_playlists():
    playlists = _service().list_playlists()
    return jsonify([playlist.to_json() for playlist in playlists]), 200


@playlist_bp.route('', methods=['POST'])
def create_playlist():
    payload = request.get_json(silent=True) or {}
    playlist = _service().create_playlist(payload.get('name'), payload.get('creator'))
    return jsonify(playlist.to_json()), 201


@playlist_bp.route('/<int:playlist_id>', methods=['GET'])
def get_playlist(playlist_id: int):
    detail = _service().get_playlist_with_songs(playlist_id)
    return jsonify(detail.to_json()), 200


@playlist_bp.route('/<int:playlist_id>', methods=['DELETE'])
def delete_playlist(playlist_id: int):
    _service().delete_playlist(playlist_id)
    return jsonify({'message': 'Playlist and all songs deleted successfully'}), 200


__all__ = ['playlist_bp']
