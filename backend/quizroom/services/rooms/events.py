"""Outbound effects produced by the coordinator.

The transport delivers them in list order: group changes before the
broadcasts that depend on them.
"""

from dataclasses import dataclass
from typing import Any

# Server -> client event names
ROOM_CREATED = 'room-created'
JOIN_SUCCESS = 'join-success'
UPDATE_PLAYER_LIST = 'update-player-list'
GAME_STARTED = 'game-started'
UPDATE_PROGRESS = 'update-progress'
GAME_FINISHED = 'game-finished'
HOST_CHANGED = 'host-changed'
LEFT = 'left'
ERROR = 'error'


@dataclass(frozen=True)
class Unicast:
    """Send ``name`` to a single connection."""

    connection_id: str
    name: str
    payload: Any


@dataclass(frozen=True)
class Broadcast:
    """Send ``name`` to every connection in the room's group."""

    code: str
    name: str
    payload: Any


@dataclass(frozen=True)
class JoinGroup:
    connection_id: str
    code: str


@dataclass(frozen=True)
class LeaveGroup:
    connection_id: str
    code: str
