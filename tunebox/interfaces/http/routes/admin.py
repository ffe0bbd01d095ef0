"""Administrative wipe of every playlist, song and uploaded file."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify


admin_bp = Blueprint('admin_bp', __name__, url_prefix='/api')


@admin_bp.route('/clear-all', methods=['DELETE'])
def clear_all():
    if not current_app.config.get('ALLOW_CLEAR_ALL', True):
        current_app.logger.warning("Blocked clear-all request: disabled by configuration")
        return jsonify({'error': 'Clearing all data is disabled on this deployment'}), 403

    summary = current_app.extensions['library_service'].clear_all()
    return jsonify({'message': 'All data cleared successfully', **summary.to_json()}), 200


__all__ = ['admin_bp']
