from flask import Blueprint, current_app, jsonify

rooms = Blueprint('rooms', __name__)


@rooms.route('/<path:room_key>', methods=['GET'])
def get_room_state(room_key):
    snapshot = current_app.extensions['room_registry'].snapshot(room_key)
    if snapshot is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(snapshot)
