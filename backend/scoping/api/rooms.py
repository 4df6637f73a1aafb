from flask import Blueprint, jsonify, current_app
from scoping import get_router
from scoping.models import SESSION_DURATION_SEC

rooms = Blueprint('rooms', __name__)


@rooms.route('', methods=['GET'])
def list_rooms():
    router = get_router()
    return jsonify({'rooms': router.store.codes()})


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room(room_code):
    room = get_router().store.get(room_code)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    with room.lock:
        return jsonify(room.to_dict(include_connections=True))


@rooms.route('/<string:room_code>/state', methods=['GET'])
def get_room_state(room_code):
    payload = get_router().snapshot(room_code)
    if payload is None:
        return jsonify({'error': 'Room not found'}), 404
    # Include clock settings so clients can render the countdown
    cfg = current_app.config
    payload['durations'] = {
        'session': int(cfg.get('SESSION_DURATION_SEC', SESSION_DURATION_SEC)),
        'tick': float(cfg.get('TICK_INTERVAL_SEC', 1)),
    }
    return jsonify(payload)
