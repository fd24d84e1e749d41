import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Extra origin allowed on top of the local dev servers (e.g. the deployed frontend)
    CORS_ORIGIN = os.environ.get('CORS_ORIGIN')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Room codes
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    ROOM_CODE_MAX_ATTEMPTS = int(os.environ.get('ROOM_CODE_MAX_ATTEMPTS', '20'))
    # Echoed back in game-started when a client creates a room without one
    DEFAULT_GAME_MODE = os.environ.get('DEFAULT_GAME_MODE', 'classic')
    # Bind address for `flask serve`
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3001'))
