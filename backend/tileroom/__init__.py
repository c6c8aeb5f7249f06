import random

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Room state lives on the app so every app (and every test) gets its own
    from tileroom.services.rooms import RoomStore, build_map_templates

    seed = flask_app.config.get('BOARD_SEED')
    rng = random.Random(seed) if seed is not None else None
    templates = build_map_templates(flask_app.config['MAP_RADII'], rng=rng)
    flask_app.extensions['room_store'] = RoomStore(
        templates,
        flask_app.config['DEFAULT_MAP_ID'],
        rng=rng,
        code_length=flask_app.config.get('ROOM_CODE_LENGTH', 4),
    )

    from tileroom.main import main
    flask_app.register_blueprint(main)

    from tileroom.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Importing here ensures the handlers bind to the initialized socketio instance
    from tileroom.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    @click.command('maps')
    def maps_command():
        """Lists the board templates rooms can be created on."""
        store = flask_app.extensions['room_store']
        default_map = flask_app.config['DEFAULT_MAP_ID']
        for template in store.templates:
            marker = ' (default)' if template.map_id == default_map else ''
            click.echo(f'{template.map_id}: radius={template.radius} tiles={len(template.tiles)}{marker}')

    flask_app.cli.add_command(maps_command)

    flask_app.logger.info(
        f"[app-init] maps={','.join(templates)} default_map={flask_app.config['DEFAULT_MAP_ID']} seeded={seed is not None}"
    )
    return flask_app
