from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from quizroom.config import Config

from quizroom.services.rooms import RoomCoordinator, RoomRegistry

dev_origins = [
    "http://localhost:5173",
    "http://localhost:3000",
]
socketio = SocketIO(async_mode=None)


def allowed_origins(config):
    return dev_origins + ([config['CORS_ORIGIN']] if config.get('CORS_ORIGIN') else [])


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = allowed_origins(flask_app.config)
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One in-memory registry per app; room state lives only in this process
    registry = RoomRegistry(
        code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6),
        max_attempts=flask_app.config.get('ROOM_CODE_MAX_ATTEMPTS', 20),
    )
    flask_app.extensions['rooms'] = RoomCoordinator(
        registry, default_game_mode=flask_app.config.get('DEFAULT_GAME_MODE'))

    from quizroom.main import main
    flask_app.register_blueprint(main)

    from quizroom.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    @click.command('serve')
    @click.option('--host', default=None, help='Interface to bind (defaults to HOST).')
    @click.option('--port', default=None, type=int, help='Port to bind (defaults to PORT).')
    def serve_command(host, port):
        """Runs the Socket.IO game server."""
        host = host or flask_app.config.get('HOST', '0.0.0.0')
        port = port or flask_app.config.get('PORT', 3001)
        flask_app.logger.info(f"Realtime game server listening on {host}:{port}")
        socketio.run(flask_app, host=host, port=port)

    flask_app.cli.add_command(serve_command)

    return flask_app
