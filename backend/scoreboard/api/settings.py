from flask import Blueprint, current_app, jsonify, request

from scoreboard.models import InvalidUpdate
from scoreboard.services.match.store import get_match_store
from scoreboard.services.storage import TEAM_KEYS

settings = Blueprint('settings', __name__)


def _storage():
    return current_app.extensions['settings_storage']


@settings.route('/shortcuts', methods=['GET'])
def get_shortcuts():
    return jsonify(_storage().load_shortcuts())


@settings.route('/shortcuts', methods=['POST'])
def save_shortcuts():
    data = request.get_json(silent=True)
    if not isinstance(data, list):
        return jsonify({'success': False, 'error': 'Shortcuts must be a list'}), 400
    if not _storage().save_shortcuts(data):
        return jsonify({'success': False, 'error': 'Failed to save shortcuts'}), 500
    return jsonify({'success': True})


@settings.route('/team-defaults', methods=['GET'])
def get_team_defaults():
    return jsonify(_storage().load_team_defaults())


@settings.route('/team-defaults', methods=['POST'])
def save_team_defaults():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not any(k in data for k in TEAM_KEYS):
        return jsonify({'success': False, 'error': 'homeTeam or awayTeam is required'}), 400
    if not _storage().save_team_defaults(data):
        return jsonify({'success': False, 'error': 'Failed to save team defaults'}), 500
    return jsonify({'success': True, 'defaults': _storage().load_team_defaults()})


@settings.route('/team-presets', methods=['GET'])
def get_team_presets():
    return jsonify(_storage().load_team_presets())


@settings.route('/team-presets', methods=['POST'])
def save_team_preset():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        return jsonify({'success': False, 'error': 'Preset name is required'}), 400
    presets = _storage().upsert_team_preset(name, data.get('homeTeam'), data.get('awayTeam'))
    if presets is None:
        return jsonify({'success': False, 'error': 'Failed to save preset'}), 500
    return jsonify({'success': True, 'presets': presets})


@settings.route('/team-presets/<string:name>', methods=['DELETE'])
def delete_team_preset(name):
    presets = _storage().delete_team_preset(name)
    if presets is None:
        return jsonify({'success': False, 'error': 'Failed to delete preset'}), 500
    return jsonify({'success': True, 'presets': presets})


@settings.route('/team-presets/<string:name>/apply', methods=['POST'])
def apply_team_preset(name):
    preset = _storage().find_team_preset(name)
    if not preset:
        return jsonify({'success': False, 'error': 'Preset not found'}), 404
    try:
        snapshot = get_match_store().apply_team_identity(preset.get('homeTeam'), preset.get('awayTeam'))
    except InvalidUpdate as exc:
        current_app.logger.warning(f"[preset-apply] name={name} rejected: {exc}")
        return jsonify({'success': False, 'error': str(exc)}), 400
    current_app.logger.info(f"[preset-apply] name={preset['name']}")
    return jsonify({'success': True, 'gameState': snapshot})
