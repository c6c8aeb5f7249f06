import os


def _parse_map_radii(value):
    """Parse 'small:3,medium:4' into an ordered {map_id: radius} dict."""
    radii = {}
    for item in value.split(','):
        if not item.strip():
            continue
        map_id, _, radius = item.partition(':')
        radii[map_id.strip()] = int(radius)
    return radii


def _optional_int(value):
    return int(value) if value not in (None, '') else None


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000'
    ).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Boards available to createRoom; unknown ids fall back to DEFAULT_MAP_ID
    MAP_RADII = _parse_map_radii(os.environ.get('MAP_RADII', 'small:3,medium:4,large:5'))
    DEFAULT_MAP_ID = os.environ.get('DEFAULT_MAP_ID', 'small')
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    # Optional: seed for reproducible boards and room codes. Unset uses system randomness.
    BOARD_SEED = _optional_int(os.environ.get('BOARD_SEED'))
