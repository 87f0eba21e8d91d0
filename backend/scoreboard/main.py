from flask import Blueprint, jsonify

from scoreboard.services.match.store import get_match_store

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Scoreboard server is running.'})


@main.route('/api/state')
def get_state():
    """Current snapshot, for observers that poll instead of subscribing."""
    return jsonify(get_match_store().snapshot())
