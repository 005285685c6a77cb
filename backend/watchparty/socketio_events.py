from flask import current_app, request
from flask_socketio import emit

from watchparty import socketio
from watchparty.broadcast import WS_NAMESPACE


def _registry():
    return current_app.extensions['room_registry']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*_args):
    rooms = _registry().disconnect(_get_sid())
    if rooms:
        current_app.logger.debug(f"[disconnect] sid={_get_sid()} rooms={rooms}")


def handle_join_room(data):
    data = _payload(data)
    _registry().join(data.get('room'), data.get('name'), _get_sid(), data.get('match'))


def handle_leave_room(data):
    _registry().leave(_payload(data).get('room'), _get_sid())


def handle_chat_message(data):
    data = _payload(data)
    _registry().chat(data.get('room'), data.get('name'), data.get('text'))


def handle_ready_for_media(data):
    data = _payload(data)
    _registry().declare_ready(data.get('room'), data.get('name'), _get_sid())


def handle_signal(data):
    data = _payload(data)
    _registry().relay_signal(data.get('room'), data.get('from'), data.get('to'), data.get('payload'))


def handle_create_bet(data):
    data = _payload(data)
    _registry().create_bet(
        data.get('room'),
        data.get('creator'),
        data.get('target'),
        data.get('title'),
        data.get('stake'),
        data.get('pick'),
    )


def handle_accept_bet(data):
    data = _payload(data)
    _registry().accept_bet(data.get('room'), data.get('betId'), data.get('name'),
                           data.get('pick'), data.get('stake'))


def handle_cancel_bet(data):
    data = _payload(data)
    _registry().cancel_bet(data.get('room'), data.get('betId'), data.get('name'))


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = WS_NAMESPACE) -> None:
    """Register Socket.IO event handlers on the room namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_room', handle_join_room, namespace=namespace)
    socketio.on_event('leave_room', handle_leave_room, namespace=namespace)
    socketio.on_event('chat_message', handle_chat_message, namespace=namespace)
    socketio.on_event('ready_for_media', handle_ready_for_media, namespace=namespace)
    socketio.on_event('signal', handle_signal, namespace=namespace)
    socketio.on_event('create_bet', handle_create_bet, namespace=namespace)
    socketio.on_event('accept_bet', handle_accept_bet, namespace=namespace)
    socketio.on_event('cancel_bet', handle_cancel_bet, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
