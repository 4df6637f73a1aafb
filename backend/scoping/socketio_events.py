from flask import request
from flask_socketio import emit
from scoping import socketio, get_router
from scoping.services.workshop import InvalidPayload, parse_event
from scoping.services.workshop.events import EVENT_NAMES


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _dispatch(event_name, data):
    try:
        event = parse_event(event_name, data)
    except InvalidPayload as exc:
        # Only the sender hears about its malformed payload
        emit('error', exc.to_dict())
        return None
    return get_router().dispatch(event, sid=_get_sid())


def handle_connect(auth=None):
    get_router().connect(_get_sid())
    emit('connected', {'sid': _get_sid()})
    # The web client passes its seat in the connection query string
    room_code = request.args.get('roomCode')
    role = request.args.get('role')
    name = request.args.get('name')
    if room_code and role and name:
        _dispatch('joinRoom', {'roomCode': room_code, 'role': role, 'name': name})


def handle_disconnect(reason=None):
    get_router().disconnect(_get_sid())


def handle_ping(data=None):
    emit('pong', data or {})


def _event_handler(event_name):
    def handler(data=None):
        _dispatch(event_name, data)
    handler.__name__ = f'handle_{event_name}'
    return handler


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
    for event_name in EVENT_NAMES:
        socketio.on_event(event_name, _event_handler(event_name), namespace=namespace)
