"""Event handling for quiz rooms.

Each inbound client intent is validated against the current room state,
applied, and turned into a list of effects (see ``events``). Validation
always completes before the first mutation, so a rejected intent leaves
the registry untouched and produces a single ``error`` to the caller.
"""

import logging
import math
import numbers
from typing import Any, Callable, Dict, List, Optional

from quizroom.models import LOBBY, PLAYING, Room
from . import events
from .codes import normalize_room_code
from .errors import GameAlreadyStarted, InvalidRequest, NameTaken, NotHost, RoomError, RoomNotFound
from .events import Broadcast, JoinGroup, LeaveGroup, Unicast
from .registry import RoomRegistry

# Child of the Flask app logger ("quizroom"); works without an app context
logger = logging.getLogger(__name__)

DISCONNECT = 'disconnect'


def _field(data: Dict[str, Any], *names: str) -> Any:
    for name in names:
        if data.get(name) is not None:
            return data[name]
    return None


def _require_name(display_name: Any) -> str:
    if not isinstance(display_name, str) or not display_name.strip():
        raise InvalidRequest('displayName is required')
    return display_name


def _require_code(code: Any) -> str:
    normalized = normalize_room_code(code)
    if not normalized:
        raise InvalidRequest('code is required')
    return normalized


def _valid_finish_time(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value) and value >= 0


class RoomCoordinator:
    def __init__(self, registry: Optional[RoomRegistry] = None, default_game_mode: Optional[str] = None):
        self.registry = registry if registry is not None else RoomRegistry()
        self.default_game_mode = default_game_mode
        self._intents: Dict[str, Callable[[str, Dict[str, Any]], List[Any]]] = {
            'createRoom': lambda cid, data: self.create_room(
                cid,
                _field(data, 'displayName', 'playerName'),
                questions=data.get('questions'),
                game_mode=data.get('gameMode'),
            ),
            'joinRoom': lambda cid, data: self.join_room(
                cid, _field(data, 'displayName', 'playerName'), _field(data, 'code', 'roomCode')),
            'startGame': lambda cid, data: self.start_game(cid, _field(data, 'code', 'roomCode')),
            'playerFinished': lambda cid, data: self.player_finished(
                cid, _field(data, 'code', 'roomCode'), data.get('finishTime')),
            'leaveRoom': lambda cid, data: self.leave_room(cid, _field(data, 'code', 'roomCode')),
            DISCONNECT: lambda cid, data: self.connection_lost(cid),
        }

    # ---- entry points ----

    def dispatch(self, intent: str, connection_id: str, data: Any = None) -> List[Any]:
        """Run one intent and return its effects.

        A rejected intent yields a single ``error`` unicast to the caller.
        """
        handler = self._intents.get(intent)
        if handler is None:
            logger.warning(f"[unknown-intent] intent={intent} sid={connection_id}")
            return []
        payload = data if isinstance(data, dict) else {}
        with self.registry.lock:
            try:
                return handler(connection_id, payload)
            except RoomError as exc:
                logger.info(f"[rejected] intent={intent} sid={connection_id} reason={exc.reason}")
                return [Unicast(connection_id, events.ERROR, exc.reason)]

    def apply(self, intent: str, connection_id: str, data: Any,
              deliver: Callable[[List[Any]], None]) -> List[Any]:
        """Dispatch and hand the effects to ``deliver`` inside the same critical section.

        Holding the lock through delivery keeps every room's broadcasts in
        commit order even when the transport runs handlers concurrently.
        """
        with self.registry.lock:
            effects = self.dispatch(intent, connection_id, data)
            if effects:
                deliver(effects)
            return effects

    # ---- intents ----

    def create_room(self, connection_id: str, display_name: Any,
                    questions: Any = None, game_mode: Any = None) -> List[Any]:
        display_name = _require_name(display_name)
        if questions is None:
            questions = []
        if not isinstance(questions, list):
            raise InvalidRequest('questions must be a list')
        if game_mode is None:
            game_mode = self.default_game_mode

        room = self.registry.create(connection_id, display_name, questions=questions, game_mode=game_mode)
        logger.info(
            f"[room-created] code={room.code} host={connection_id} questions={len(room.questions)} mode={room.game_mode}"
        )
        return [
            JoinGroup(connection_id, room.code),
            Unicast(connection_id, events.ROOM_CREATED, room.to_dict()),
        ]

    def join_room(self, connection_id: str, display_name: Any, code: Any) -> List[Any]:
        display_name = _require_name(display_name)
        room = self.registry.get(_require_code(code))
        if room.state != LOBBY:
            raise GameAlreadyStarted()
        if room.has_player(connection_id):
            raise InvalidRequest('You are already in this room')
        if room.name_taken(display_name):
            raise NameTaken()

        room.add_player(connection_id, display_name)
        logger.info(
            f"[player-joined] code={room.code} sid={connection_id} name={display_name} players={len(room.players)}"
        )
        return [
            JoinGroup(connection_id, room.code),
            Unicast(connection_id, events.JOIN_SUCCESS, room.to_dict()),
            Broadcast(room.code, events.UPDATE_PLAYER_LIST, room.players_dict()),
        ]

    def start_game(self, connection_id: str, code: Any) -> List[Any]:
        room = self.registry.get(_require_code(code))
        if room.host_connection_id != connection_id:
            raise NotHost()
        if room.state != LOBBY:
            raise GameAlreadyStarted()

        room.begin()
        logger.info(f"[game-started] code={room.code} players={len(room.progress)}")
        return [
            Broadcast(room.code, events.GAME_STARTED, {
                'questions': list(room.questions),
                'gameMode': room.game_mode,
            }),
        ]

    def player_finished(self, connection_id: str, code: Any, finish_time: Any) -> List[Any]:
        # Fire-and-forget: unknown rooms and stray reports are dropped without an error
        try:
            room = self.registry.get(normalize_room_code(code))
        except RoomNotFound:
            return []
        if room.state != PLAYING:
            logger.info(f"[finish-ignored] code={room.code} sid={connection_id} state={room.state}")
            return []
        if not _valid_finish_time(finish_time):
            logger.warning(f"[finish-ignored] code={room.code} sid={connection_id} finish_time={finish_time!r}")
            return []

        entry = room.find_progress(connection_id)
        if entry is not None:
            # Last write wins if a client reports twice
            entry.finish_time = finish_time
        effects = [Broadcast(room.code, events.UPDATE_PROGRESS, room.progress_dict())]
        return effects + self._finish_if_complete(room)

    def leave_room(self, connection_id: str, code: Any) -> List[Any]:
        room = self.registry.get(_require_code(code))
        if not room.has_player(connection_id):
            raise InvalidRequest('You are not in this room')
        return [LeaveGroup(connection_id, room.code)] + self._remove_player(room, connection_id) + [
            Unicast(connection_id, events.LEFT, {'code': room.code}),
        ]

    def connection_lost(self, connection_id: str) -> List[Any]:
        effects: List[Any] = []
        # A connection normally sits in at most one room; scan them all anyway
        for room in self.registry.rooms_for_connection(connection_id):
            effects.extend(self._remove_player(room, connection_id))
        return effects

    # ---- helpers ----

    def _remove_player(self, room: Room, connection_id: str) -> List[Any]:
        removed = room.remove_player(connection_id)
        if removed is None:
            return []
        logger.info(f"[player-left] code={room.code} sid={connection_id} name={removed.display_name}")

        if room.is_empty:
            self.registry.delete(room.code)
            logger.info(f"[room-closed] code={room.code}")
            return []

        # Finished entries stay for the ranking; an unfinished one would block completion
        progress_changed = room.state == PLAYING and room.discard_unfinished_progress(connection_id)

        effects: List[Any] = [Broadcast(room.code, events.UPDATE_PLAYER_LIST, room.players_dict())]
        if removed.is_host:
            logger.info(f"[host-changed] code={room.code} new_host={room.host_connection_id}")
            effects.append(Broadcast(room.code, events.HOST_CHANGED, {
                'newHostId': room.host_connection_id,
                'players': room.players_dict(),
            }))
        if progress_changed:
            effects.append(Broadcast(room.code, events.UPDATE_PROGRESS, room.progress_dict()))
            effects.extend(self._finish_if_complete(room))
        return effects

    def _finish_if_complete(self, room: Room) -> List[Any]:
        if room.state != PLAYING or not room.all_finished:
            return []
        room.advance(PLAYING)
        leaderboard = [entry.to_dict() for entry in room.leaderboard()]
        logger.info(f"[game-finished] code={room.code} winner={leaderboard[0]['displayName']}")
        return [Broadcast(room.code, events.GAME_FINISHED, leaderboard)]
