import time

WS_NAMESPACE = '/ws'


def room_channel(room_key: str) -> str:
    return f"room:{room_key}"


class SocketIONotifier:
    """Pushes registry changes out over Flask-SocketIO.

    Uses the server-level emit so it works both inside handlers and from
    the settlement background task.
    """

    def __init__(self, sio, namespace: str = WS_NAMESPACE):
        self.sio = sio
        self.namespace = namespace

    def subscribe(self, sid, room_key):
        self.sio.server.enter_room(sid, room_channel(room_key), namespace=self.namespace)

    def unsubscribe(self, sid, room_key):
        self.sio.server.leave_room(sid, room_channel(room_key), namespace=self.namespace)

    def room_state(self, room_key, snapshot):
        self.sio.emit('room_state', snapshot, to=room_channel(room_key), namespace=self.namespace)

    def chat(self, room_key, sender, text):
        payload = {'sender': sender, 'text': text, 'at': time.time()}
        self.sio.emit('chat_message', payload, to=room_channel(room_key), namespace=self.namespace)

    def to_room(self, room_key, event, data):
        self.sio.emit(event, data, to=room_channel(room_key), namespace=self.namespace)

    def to_sid(self, sid, event, data):
        self.sio.emit(event, data, to=sid, namespace=self.namespace)
