from flask import current_app

from tileroom import socketio
from tileroom.services.rooms import RoomStore


def room_channel(room_code: str) -> str:
    return f"room:{room_code}"


def broadcast_room(store: RoomStore, room_code: str) -> None:
    """Push the current snapshot of ``room_code`` to everyone in it.

    Callers hold the room lock so the snapshot sent is the one their
    mutation produced. Deleted rooms are skipped.
    """
    snapshot = store.get_snapshot(room_code)
    if snapshot is None:
        return
    namespace = current_app.config.get('SOCKETIO_NAMESPACE', '/')
    socketio.emit('roomUpdate', snapshot, to=room_channel(room_code), namespace=namespace)
    current_app.logger.debug(f"[room-broadcast] code={room_code} players={len(snapshot['players'])}")
