from typing import Any, Optional

from tileroom.models import DEFAULT_PLAYER_NAME


class InvalidInput(ValueError):
    """A client request was rejected before reaching the room store."""


def normalize_player_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return DEFAULT_PLAYER_NAME
    return value.strip()


def normalize_room_code(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput('Enter a room code.')
    return value.strip().upper()


def normalize_tile_id(value: Any) -> Optional[int]:
    # bool is an int subclass but never a tile id
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
