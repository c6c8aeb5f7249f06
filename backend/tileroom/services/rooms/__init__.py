from .board import build_map_templates, generate_map
from .codes import ROOM_CODE_ALPHABET, RoomCodeSpaceExhausted, allocate_room_code
from .store import AlreadyInRoom, LeaveResult, RoomError, RoomNotFound, RoomStore

__all__ = [
    'AlreadyInRoom',
    'LeaveResult',
    'ROOM_CODE_ALPHABET',
    'RoomCodeSpaceExhausted',
    'RoomError',
    'RoomNotFound',
    'RoomStore',
    'allocate_room_code',
    'build_map_templates',
    'generate_map',
]
