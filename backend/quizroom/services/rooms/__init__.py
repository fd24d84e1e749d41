"""Room domain services: code generation, registry and event coordination.

Pure in-memory logic, imported by the Socket.IO handlers. Nothing in here
knows about Flask or the transport; outbound traffic is returned as
effects for the caller to deliver.
"""

from .codes import generate_room_code
from .coordinator import RoomCoordinator
from .errors import (
    GameAlreadyStarted,
    InvalidRequest,
    NameTaken,
    NotHost,
    RoomCodesExhausted,
    RoomError,
    RoomNotFound,
)
from .events import Broadcast, JoinGroup, LeaveGroup, Unicast
from .registry import RoomRegistry

__all__ = [
    'generate_room_code',
    'RoomCoordinator',
    'RoomRegistry',
    'RoomError',
    'RoomNotFound',
    'GameAlreadyStarted',
    'NameTaken',
    'NotHost',
    'InvalidRequest',
    'RoomCodesExhausted',
    'Unicast',
    'Broadcast',
    'JoinGroup',
    'LeaveGroup',
]
