"""Song upload and removal routes."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request


song_bp = Blueprint('song_bp', __name__, url_prefix='/api/songs')


@song_bp.route('', methods=['POST'])
def add_song():
    upload = request.files.get('audioFile')
    if upload is None or not upload.filename:
        return jsonify({'error': 'No audio file uploaded'}), 400

    song = current_app.extensions['library_service'].add_song(
        request.form.get('playlistId'),
        upload.read(),
        upload.filename,
        upload.mimetype,
    )
    return jsonify(song.to_json()), 201


@song_bp.route('/<int:song_id>', methods=['DELETE'])
def delete_song(song_id: int):
    current_app.extensions['library_service'].delete_song(song_id)
    return jsonify({'message': 'Song deleted successfully'}), 200


__all__ = ['song_bp']
