from flask import current_app, request
from flask_socketio import emit

from tugofmath import socketio
from tugofmath.models import normalize_code
from tugofmath.services.match.broadcast import NAMESPACE


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _machine():
    return current_app.extensions['match']


def _require_code(data):
    # Payloads come straight from the client and may not be objects at all
    if not isinstance(data, dict):
        data = {}
    code = normalize_code(data.get('code'))
    if not code:
        emit('room_error', {'error': 'BadRequest', 'message': 'code is required', 'code': None})
        return None
    return code


def handle_connect(auth=None):
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(*args):
    _machine().disconnect(_get_sid())


def handle_create(data=None):
    _machine().create_room(_get_sid())


def handle_join(data=None):
    code = _require_code(data)
    if code:
        _machine().join_room(code, _get_sid())


def handle_ready(data=None):
    code = _require_code(data)
    if code:
        _machine().submit_ready(code, _get_sid())


def handle_answer(data=None):
    code = _require_code(data)
    if code:
        _machine().submit_answer(code, _get_sid(), data.get('selected'))


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = NAMESPACE) -> None:
    """Register the player intent handlers on `namespace`."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create', handle_create, namespace=namespace)
    socketio.on_event('join', handle_join, namespace=namespace)
    socketio.on_event('ready', handle_ready, namespace=namespace)
    socketio.on_event('answer', handle_answer, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
