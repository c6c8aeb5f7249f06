from flask import Blueprint, current_app, jsonify

from tileroom.sessions import InvalidInput, normalize_room_code

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room_state(room_code):
    """
    Returns the current snapshot of an active room.
    """
    try:
        code = normalize_room_code(room_code)
    except InvalidInput as exc:
        return jsonify({'error': str(exc)}), 400

    snapshot = current_app.extensions['room_store'].get_snapshot(code)
    if snapshot is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify({'roomCode': code, 'roomState': snapshot}), 200
