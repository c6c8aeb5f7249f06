"""In-memory room table and the operations that mutate it.

Every room has its own re-entrant lock; the table lock only guards the
code -> room map and the connection -> room index, which is the single
record of which room a connection is in. Room locks are taken before the
table lock, and several rooms are always locked in code order.
"""

import copy
import random
import threading
from collections import namedtuple
from contextlib import contextmanager
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from tileroom.models import ConnectionId, MapTemplate, Player, Room

from .codes import allocate_room_code

Snapshot = Dict[str, Any]

LeaveResult = namedtuple('LeaveResult', ['code', 'room_deleted'])


class RoomError(Exception):
    """Base class for room-domain errors."""


class RoomNotFound(RoomError):
    """No active room has the requested code."""


class AlreadyInRoom(RoomError):
    """The connection is already a member of a different room."""


def _normalize_code(code: Any) -> str:
    if not isinstance(code, str):
        return ''
    return code.strip().upper()


class RoomStore:
    def __init__(self, templates: Mapping[str, MapTemplate], default_map_id: str,
                 rng: Optional[random.Random] = None, code_length: int = 4) -> None:
        if default_map_id not in templates:
            raise ValueError(f'default map {default_map_id!r} is not among the templates')
        self._templates = dict(templates)
        self._default_map_id = default_map_id
        self._rng = rng
        self._code_length = code_length
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        self._room_locks: Dict[str, threading.RLock] = {}
        self._member_room: Dict[ConnectionId, str] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    @property
    def templates(self) -> List[MapTemplate]:
        return list(self._templates.values())

    def map_ids(self) -> List[str]:
        return list(self._templates)

    def codes(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._rooms)

    def room_of(self, conn_id: ConnectionId) -> Optional[str]:
        """Return the code of the room this connection belongs to, if any."""
        with self._lock:
            return self._member_room.get(conn_id)

    @contextmanager
    def lock_room(self, code: str) -> Iterator[None]:
        """Hold one room's write lock; raises RoomNotFound for unknown codes.

        The room may be deleted while waiting for the lock, so operations
        run under it still re-check that the room exists.
        """
        key = _normalize_code(code)
        with self._lock:
            lock = self._room_locks.get(key)
        if lock is None:
            raise RoomNotFound(f'room {key!r} not found')
        with lock:
            yield

    @contextmanager
    def lock_rooms(self, codes: Iterable[str]) -> Iterator[None]:
        """Hold the locks of several rooms, acquired in code order.

        Codes with no active room are skipped; callers re-check existence
        under the locks.
        """
        keys = sorted({_normalize_code(code) for code in codes})
        with self._lock:
            locks = [self._room_locks[key] for key in keys if key in self._room_locks]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()

    def create_room(self, map_id: Optional[str], creator_name: str,
                    conn_id: ConnectionId) -> Tuple[str, Snapshot]:
        """Open a new room on ``map_id`` with the creator as its only player.

        Unknown map ids fall back to the default template's board, but the
        room keeps the id it was asked for.
        """
        template = self._templates.get(map_id) if map_id is not None else None
        if template is None:
            template = self._templates[self._default_map_id]
        board = copy.deepcopy(list(template.tiles))
        room_map_id = map_id if map_id is not None else template.map_id

        with self._lock:
            current = self._member_room.get(conn_id)
            if current is not None:
                raise AlreadyInRoom(f'connection is already in room {current!r}')
            code = allocate_room_code(self._rooms.keys(), rng=self._rng, length=self._code_length)
            room = Room(code=code, map_id=room_map_id, board=board)
            room.players[conn_id] = Player(id=conn_id, name=creator_name)
            self._rooms[code] = room
            self._room_locks[code] = threading.RLock()
            self._member_room[conn_id] = code
            return code, room.to_dict()

    def join_room(self, code: str, player_name: str, conn_id: ConnectionId) -> Snapshot:
        """Add ``conn_id`` to the room as a fresh player.

        Joining a room the connection is already in replaces its Player, so
        the score starts again from 0 while tiles it owns keep their owner.
        """
        key = _normalize_code(code)
        with self.lock_room(key):
            with self._lock:
                room = self._rooms.get(key)
                if room is None:
                    raise RoomNotFound(f'room {key!r} not found')
                current = self._member_room.get(conn_id)
                if current is not None and current != key:
                    raise AlreadyInRoom(f'connection is already in room {current!r}')
                room.players[conn_id] = Player(id=conn_id, name=player_name)
                self._member_room[conn_id] = key
            return room.to_dict()

    def leave_room(self, conn_id: ConnectionId, code: Optional[str] = None) -> Optional[LeaveResult]:
        """Remove the connection from its room, deleting the room once empty.

        Returns None when the connection is in no room, or not in ``code``
        when one is given. The membership is removed under the table lock,
        so of several concurrent leaves for one connection only one gets a
        result. Tiles the player owned keep their owner.
        """
        expected = _normalize_code(code) if code is not None else None
        while True:
            current = self.room_of(conn_id)
            if current is None or (expected is not None and current != expected):
                return None
            try:
                with self.lock_room(current):
                    with self._lock:
                        if self._member_room.get(conn_id) != current:
                            # moved while we waited for the lock
                            continue
                        del self._member_room[conn_id]
                        room = self._rooms[current]
                        room.players.pop(conn_id, None)
                        if not room.players:
                            del self._rooms[current]
                            del self._room_locks[current]
                            return LeaveResult(current, True)
                    return LeaveResult(current, False)
            except RoomNotFound:
                continue

    def apply_tile_click(self, code: str, conn_id: ConnectionId, tile_id: int) -> Optional[Snapshot]:
        """Claim or release a tile for ``conn_id``.

        Returns the new snapshot, or None when nothing changed: unknown
        room, player or tile, or a tile owned by somebody else.
        """
        key = _normalize_code(code)
        try:
            with self.lock_room(key):
                with self._lock:
                    room = self._rooms.get(key)
                if room is None:
                    return None
                player = room.players.get(conn_id)
                tile = room.find_tile(tile_id)
                if player is None or tile is None:
                    return None
                if tile.owner_id is None:
                    tile.owner_id = conn_id
                    player.score += 1
                elif tile.owner_id == conn_id:
                    tile.owner_id = None
                    player.score -= 1
                else:
                    # owned by another player; reserved for trade/attack rules
                    return None
                return room.to_dict()
        except RoomNotFound:
            return None

    def get_snapshot(self, code: str) -> Optional[Snapshot]:
        key = _normalize_code(code)
        try:
            with self.lock_room(key):
                with self._lock:
                    room = self._rooms.get(key)
                return room.to_dict() if room is not None else None
        except RoomNotFound:
            return None
