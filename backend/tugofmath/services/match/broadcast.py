from typing import Any, Dict

NAMESPACE = '/ws'


def room_channel(code: str) -> str:
    return f"room:{code}"


class Broadcaster:
    """Outbound notifications for a room's members."""

    def add_member(self, conn_id: str, code: str) -> None:
        raise NotImplementedError

    def to_room(self, code: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    def to_connection(self, conn_id: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    def close(self, code: str) -> None:
        raise NotImplementedError


class SocketIOBroadcaster(Broadcaster):
    # socketio.emit works both inside handlers and from background tasks
    def __init__(self, socketio, namespace: str = NAMESPACE):
        self.socketio = socketio
        self.namespace = namespace

    def add_member(self, conn_id, code):
        self.socketio.server.enter_room(conn_id, room_channel(code), namespace=self.namespace)

    def to_room(self, code, event, payload):
        self.socketio.emit(event, payload, to=room_channel(code), namespace=self.namespace)

    def to_connection(self, conn_id, event, payload):
        self.socketio.emit(event, payload, to=conn_id, namespace=self.namespace)

    def close(self, code):
        self.socketio.close_room(room_channel(code), namespace=self.namespace)
