import os
import random
import sys
import pytest

# Ensure the backend root (containing the `tileroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tileroom import create_app, socketio
from tileroom.services.rooms import RoomStore, build_map_templates


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = []
    SOCKETIO_NAMESPACE = '/'
    MAP_RADII = {'small': 3, 'medium': 4, 'large': 5}
    DEFAULT_MAP_ID = 'small'
    ROOM_CODE_LENGTH = 4
    BOARD_SEED = 1234


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def room_store(flask_app):
    return flask_app.extensions['room_store']


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for Socket.IO test clients; all are disconnected on teardown."""
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
        )
        # Flush the 'connected' greeting
        test_client.get_received()
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()


@pytest.fixture()
def store():
    """A standalone store, independent of any Flask app."""
    rng = random.Random(42)
    templates = build_map_templates({'small': 1, 'medium': 2}, rng=rng)
    return RoomStore(templates, 'small', rng=rng)
