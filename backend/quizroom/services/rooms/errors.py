class RoomError(Exception):
    """A rejected client intent. ``reason`` is sent back to the caller as-is."""

    reason = 'Request rejected'

    def __init__(self, reason=None):
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


class RoomNotFound(RoomError):
    reason = 'Room does not exist'


class GameAlreadyStarted(RoomError):
    reason = 'Game already started'


class NameTaken(RoomError):
    reason = 'Player name already taken'


class NotHost(RoomError):
    reason = 'Only host can start the game'


class InvalidRequest(RoomError):
    reason = 'Invalid request'


class RoomCodesExhausted(RoomError):
    reason = 'Could not allocate a room code, try again'
