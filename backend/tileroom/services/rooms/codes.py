import random
from typing import AbstractSet, Optional

# 32 symbols; 0/O and 1/I are left out so codes read back unambiguously
ROOM_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


class RoomCodeSpaceExhausted(RuntimeError):
    """Every code of the configured length is already in use."""


def _in_keyspace(code: str, length: int) -> bool:
    return len(code) == length and all(ch in ROOM_CODE_ALPHABET for ch in code)


def allocate_room_code(existing_codes: AbstractSet[str], rng: Optional[random.Random] = None, length: int = 4) -> str:
    """Generate a room code that is not in ``existing_codes``."""
    rng = rng or random
    capacity = len(ROOM_CODE_ALPHABET) ** length
    taken = sum(1 for code in existing_codes if _in_keyspace(code, length))
    if taken >= capacity:
        raise RoomCodeSpaceExhausted(f'all {capacity} room codes of length {length} are taken')
    while True:
        code = ''.join(rng.choices(ROOM_CODE_ALPHABET, k=length))
        if code not in existing_codes:
            return code
