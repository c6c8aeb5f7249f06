import random

import pytest

from tileroom.services.rooms import ROOM_CODE_ALPHABET, RoomCodeSpaceExhausted, allocate_room_code


class ScriptedRng:
    """Hands out pre-set codes, one per choices() call."""

    def __init__(self, codes):
        self.codes = list(codes)
        self.calls = 0

    def choices(self, population, k):
        code = self.codes.pop(0)
        assert len(code) == k
        assert all(ch in population for ch in code)
        self.calls += 1
        return list(code)


def test_alphabet_has_32_unambiguous_symbols():
    assert len(ROOM_CODE_ALPHABET) == 32
    assert len(set(ROOM_CODE_ALPHABET)) == 32
    for ambiguous in '0O1I':
        assert ambiguous not in ROOM_CODE_ALPHABET


def test_code_shape():
    code = allocate_room_code(set(), rng=random.Random(3))
    assert len(code) == 4
    assert all(ch in ROOM_CODE_ALPHABET for ch in code)


def test_retries_until_code_is_free():
    rng = ScriptedRng(['ABCD', 'WXYZ', 'K2M9'])
    code = allocate_room_code({'ABCD', 'WXYZ'}, rng=rng)
    assert code == 'K2M9'
    assert rng.calls == 3


def test_never_returns_existing_code():
    rng = random.Random(11)
    existing = set()
    for _ in range(500):
        code = allocate_room_code(existing, rng=rng)
        assert code not in existing
        existing.add(code)


def test_last_free_code_is_found():
    existing = set(ROOM_CODE_ALPHABET[:-1])
    assert allocate_room_code(existing, rng=random.Random(5), length=1) == ROOM_CODE_ALPHABET[-1]


def test_full_keyspace_is_fatal():
    with pytest.raises(RoomCodeSpaceExhausted):
        allocate_room_code(set(ROOM_CODE_ALPHABET), length=1)
