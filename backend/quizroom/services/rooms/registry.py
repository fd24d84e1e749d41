import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from quizroom.models import Room
from .codes import generate_room_code
from .errors import RoomCodesExhausted, RoomNotFound

# Child of the Flask app logger ("quizroom"); works without an app context
logger = logging.getLogger(__name__)


class RoomRegistry:
    """Process-wide map of live room code -> Room.

    Every read and mutation of the map, and of the rooms in it, happens
    under ``lock``. The lock is re-entrant so the coordinator can hold it
    across a whole event (validate, mutate, deliver) while still calling
    back into the registry.
    """

    def __init__(self, code_length: int = 6, max_attempts: int = 20,
                 code_factory: Optional[Callable[[int], str]] = None):
        self.lock = threading.RLock()
        self.code_length = code_length
        self.max_attempts = max_attempts
        self._code_factory = code_factory or generate_room_code
        self._rooms: Dict[str, Room] = {}

    def __len__(self):
        with self.lock:
            return len(self._rooms)

    def __contains__(self, code):
        with self.lock:
            return code in self._rooms

    def codes(self) -> List[str]:
        with self.lock:
            return list(self._rooms)

    def _allocate_code(self) -> str:
        for attempt in range(1, self.max_attempts + 1):
            code = self._code_factory(self.code_length)
            if code not in self._rooms:
                return code
            logger.warning(f"[code-collision] code={code} attempt={attempt}/{self.max_attempts}")
        raise RoomCodesExhausted()

    def create(self, connection_id: str, display_name: str,
               questions: Optional[List[Any]] = None, game_mode: Optional[str] = None) -> Room:
        with self.lock:
            code = self._allocate_code()
            room = Room(code, connection_id, display_name, questions=questions, game_mode=game_mode)
            self._rooms[code] = room
            return room

    def get(self, code: Optional[str]) -> Room:
        with self.lock:
            room = self._rooms.get(code) if code else None
            if room is None:
                raise RoomNotFound()
            return room

    def delete(self, code: str) -> None:
        with self.lock:
            self._rooms.pop(code, None)

    def rooms_for_connection(self, connection_id: str) -> List[Room]:
        with self.lock:
            return [room for room in self._rooms.values() if room.has_player(connection_id)]
