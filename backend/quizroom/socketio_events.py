from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from quizroom import socketio
from quizroom.services.rooms import Broadcast, JoinGroup, LeaveGroup, Unicast

_namespace = '/'


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _coordinator():
    return current_app.extensions['rooms']


def _deliver(effects) -> None:
    """Carry coordinator effects out over Socket.IO, in order."""
    for effect in effects:
        if isinstance(effect, JoinGroup):
            join_room(effect.code, sid=effect.connection_id, namespace=_namespace)
        elif isinstance(effect, LeaveGroup):
            leave_room(effect.code, sid=effect.connection_id, namespace=_namespace)
        elif isinstance(effect, Unicast):
            socketio.emit(effect.name, effect.payload, to=effect.connection_id, namespace=_namespace)
        elif isinstance(effect, Broadcast):
            socketio.emit(effect.name, effect.payload, to=effect.code, namespace=_namespace)
        else:
            raise TypeError(f"Unknown effect {effect!r}")


def _apply(intent: str, data=None) -> None:
    _coordinator().apply(intent, _get_sid(), data, _deliver)


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'connectionId': _get_sid()})


def handle_disconnect(reason=None):
    current_app.logger.info(f"[disconnect] sid={_get_sid()} reason={reason}")
    _apply('disconnect')


def handle_create_room(data=None):
    _apply('createRoom', data)


def handle_join_room(data=None):
    _apply('joinRoom', data)


def handle_start_game(data=None):
    _apply('startGame', data)


def handle_player_finished(data=None):
    _apply('playerFinished', data)


def handle_leave_room(data=None):
    _apply('leaveRoom', data)


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Client intents keep the camelCase names the browser client emits.
    """
    global _namespace
    _namespace = namespace
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('startGame', handle_start_game, namespace=namespace)
    socketio.on_event('playerFinished', handle_player_finished, namespace=namespace)
    socketio.on_event('leaveRoom', handle_leave_room, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
