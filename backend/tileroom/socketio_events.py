from typing import Any, Dict, Optional

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from tileroom import socketio
from tileroom.broadcast import broadcast_room, room_channel
from tileroom.models import ConnectionId
from tileroom.services.rooms import AlreadyInRoom, LeaveResult, RoomNotFound, RoomStore
from tileroom.sessions import (
    InvalidInput,
    normalize_player_name,
    normalize_room_code,
    normalize_tile_id,
)

ROOM_NOT_FOUND = 'Room not found'
ALREADY_IN_ROOM = 'Already in another room'
CONNECTION_CLOSED = 'Connection closed'


def handle_connect(auth=None):
    emit('connected', {'id': _get_sid()})


def handle_disconnect(reason=None):
    sid = _get_sid()
    code = _leave_current_room(sid)
    current_app.logger.info(f"[disconnect] sid={sid} room={code} reason={reason}")


def handle_create_room(data):
    data = _payload(data)
    sid = _get_sid()
    name = normalize_player_name(data.get('playerName'))
    map_id = data.get('mapId')
    if not isinstance(map_id, str):
        map_id = None

    # One room per connection: leave the current one first so it gets its own update
    _leave_current_room(sid, leave_channel=True)

    store = _store()
    try:
        code, _ = store.create_room(map_id, name, sid)
    except AlreadyInRoom:
        current_app.logger.warning(f"[room-create-conflict] sid={sid}")
        return {'error': ALREADY_IN_ROOM}
    try:
        with store.lock_room(code):
            if not _still_connected(sid):
                # disconnect arrived before the room existed; close it again
                _leave_locked(sid, code, announce=False)
                return {'error': CONNECTION_CLOSED}
            join_room(room_channel(code))
            broadcast_room(store, code)
            snapshot = store.get_snapshot(code)
    except RoomNotFound:
        return {'error': ROOM_NOT_FOUND}
    current_app.logger.info(f"[room-create] code={code} map={snapshot['mapId']} sid={sid}")
    return {'roomCode': code, 'roomState': snapshot}


def handle_join_room(data):
    data = _payload(data)
    sid = _get_sid()
    try:
        code = normalize_room_code(data.get('roomCode'))
    except InvalidInput as exc:
        return {'error': str(exc)}
    name = normalize_player_name(data.get('playerName'))

    store = _store()
    previous = store.room_of(sid)
    held = {code} if previous is None else {code, previous}
    # Both rooms stay locked until the join commits, so a failed join
    # leaves the previous membership untouched.
    with store.lock_rooms(held):
        if code not in store.codes():
            current_app.logger.info(f"[room-join-miss] code={code} sid={sid}")
            return {'error': ROOM_NOT_FOUND}
        if store.room_of(sid) != previous:
            current_app.logger.warning(f"[room-join-conflict] code={code} sid={sid}")
            return {'error': ALREADY_IN_ROOM}
        if previous is not None and previous != code:
            _leave_locked(sid, previous, leave_channel=True)
        store.join_room(code, name, sid)
        if not _still_connected(sid):
            _leave_locked(sid, code, announce=False)
            return {'error': CONNECTION_CLOSED}
        join_room(room_channel(code))
        broadcast_room(store, code)
        snapshot = store.get_snapshot(code)
    current_app.logger.info(f"[room-join] code={code} sid={sid} players={len(snapshot['players'])}")
    return {'roomCode': code, 'roomState': snapshot}


def handle_click_tile(data):
    sid = _get_sid()
    if not isinstance(data, dict):
        current_app.logger.debug(f"[click-drop] sid={sid} reason=bad-payload")
        return
    try:
        code = normalize_room_code(data.get('roomCode'))
    except InvalidInput:
        current_app.logger.debug(f"[click-drop] sid={sid} reason=no-room-code")
        return
    tile_id = normalize_tile_id(data.get('tileId'))
    if tile_id is None:
        current_app.logger.debug(f"[click-drop] code={code} sid={sid} reason=no-tile-id")
        return

    store = _store()
    try:
        with store.lock_room(code):
            snapshot = store.apply_tile_click(code, sid, tile_id)
            if snapshot is None:
                current_app.logger.debug(f"[click-noop] code={code} sid={sid} tile={tile_id}")
                return
            broadcast_room(store, code)
    except RoomNotFound:
        current_app.logger.debug(f"[click-drop] code={code} sid={sid} reason=no-room")


def handle_leave_room(data=None):
    code = _leave_current_room(_get_sid(), leave_channel=True)
    return {'left': code}


def handle_ping(data=None):
    emit('pong', data or {})


def _get_sid() -> ConnectionId:
    # type: ignore: request.sid exists in Socket.IO context
    return ConnectionId(request.sid)  # type: ignore


def _store() -> RoomStore:
    return current_app.extensions['room_store']


def _payload(data: Any) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


def _still_connected(sid: ConnectionId) -> bool:
    # False as soon as the transport starts processing this client's disconnect
    namespace = current_app.config.get('SOCKETIO_NAMESPACE', '/')
    return socketio.server.manager.is_connected(sid, namespace)


def _leave_locked(sid: ConnectionId, code: str, leave_channel: bool = False,
                  announce: bool = True) -> Optional[LeaveResult]:
    """Remove ``sid`` from room ``code``; the caller holds that room's lock."""
    store = _store()
    result = store.leave_room(sid, code=code)
    if result is None:
        return None
    if leave_channel:
        leave_room(room_channel(code))
    if result.room_deleted:
        current_app.logger.info(f"[room-close] code={code} last_sid={sid}")
    else:
        if announce:
            broadcast_room(store, code)
        current_app.logger.info(f"[room-leave] code={code} sid={sid}")
    return result


def _leave_current_room(sid: ConnectionId, leave_channel: bool = False) -> Optional[str]:
    """Detach ``sid`` from whatever room the store says it is in.

    The store's membership index is the only record, and removing an
    entry happens once under its lock, so a disconnect racing an explicit
    leave or a join removes the player exactly once.
    """
    store = _store()
    while True:
        code = store.room_of(sid)
        if code is None:
            return None
        try:
            with store.lock_room(code):
                if _leave_locked(sid, code, leave_channel=leave_channel) is not None:
                    return code
        except RoomNotFound:
            pass


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the room event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('clickTile', handle_click_tile, namespace=namespace)
    socketio.on_event('leaveRoom', handle_leave_room, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
