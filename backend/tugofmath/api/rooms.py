from flask import Blueprint, current_app, jsonify

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:code>/state', methods=['GET'])
def get_room_state(code):
    """Returns the public state of a live room (never the correct answer)."""
    state = current_app.extensions['match'].room_state(code)
    if state is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(state)
