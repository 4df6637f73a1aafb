from flask import Blueprint, jsonify, request, Response
from scoping import get_router
from scoping.services.workshop import InvalidPayload, UnknownEvent, parse_event

events = Blueprint('events', __name__)


@events.route('', methods=['GET'])
def socket_status():
    return Response('Socket.IO server is running', status=200, mimetype='text/plain')


@events.route('', methods=['POST'])
def post_event():
    """Apply a workshop event over plain HTTP.

    Body: ``{"event": "<name>", ...payload}``. No connection is bound, so
    every event other than a reflection needs an explicit ``roomCode``.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Expected a JSON object'}), 400
    payload = dict(data)
    name = payload.pop('event', None)
    try:
        event = parse_event(name, payload)
    except UnknownEvent:
        return Response('Unknown event', status=400, mimetype='text/plain')
    except InvalidPayload as exc:
        return jsonify({'error': str(exc), 'event': name}), 400

    router = get_router()
    room = router.dispatch(event)
    game_state = router.snapshot(room.code) if room is not None else None
    return jsonify({'success': True, 'gameState': game_state})
