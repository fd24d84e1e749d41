from typing import Any, List, Optional

LOBBY = 'LOBBY'
PLAYING = 'PLAYING'
FINISHED = 'FINISHED'

# Forward-only lifecycle: lobby -> playing -> finished
_NEXT_STATE = {LOBBY: PLAYING, PLAYING: FINISHED}


class Player:
    def __init__(self, connection_id: str, display_name: str, is_host: bool = False):
        self.connection_id = connection_id
        self.display_name = display_name
        self.is_host = is_host

    def to_dict(self):
        return {
            'connectionId': self.connection_id,
            'displayName': self.display_name,
            'isHost': self.is_host,
        }


class Progress:
    def __init__(self, connection_id: str, display_name: str, finish_time: Optional[float] = None):
        self.connection_id = connection_id
        self.display_name = display_name
        self.finish_time = finish_time

    @property
    def finished(self) -> bool:
        return self.finish_time is not None

    def to_dict(self):
        return {
            'connectionId': self.connection_id,
            'displayName': self.display_name,
            'finishTime': self.finish_time,
        }


class Room:
    """One quiz session: roster, question set and per-player progress.

    The roster keeps join order. The first player is the creator and starts
    out as host; when the host leaves, the earliest remaining joiner takes
    over (see ``remove_player``).
    """

    def __init__(self, code: str, host_connection_id: str, host_name: str,
                 questions: Optional[List[Any]] = None, game_mode: Optional[str] = None):
        self._code = code
        self.host_connection_id = host_connection_id
        self.players: List[Player] = [Player(host_connection_id, host_name, is_host=True)]
        self.questions = list(questions or [])
        self.game_mode = game_mode
        self.state = LOBBY
        self.progress: List[Progress] = []

    @property
    def code(self) -> str:
        return self._code

    def __repr__(self):
        return f'<Room {self.code} state={self.state} players={len(self.players)}>'

    # ---- roster ----

    def find_player(self, connection_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.connection_id == connection_id), None)

    def has_player(self, connection_id: str) -> bool:
        return self.find_player(connection_id) is not None

    def name_taken(self, display_name: str) -> bool:
        return any(p.display_name == display_name for p in self.players)

    def add_player(self, connection_id: str, display_name: str) -> Player:
        player = Player(connection_id, display_name)
        self.players.append(player)
        return player

    def remove_player(self, connection_id: str) -> Optional[Player]:
        """Drop a player from the roster, handing host to the next in line.

        Returns the removed player, or None if the id is not on the roster.
        """
        player = self.find_player(connection_id)
        if player is None:
            return None
        self.players.remove(player)
        if player.is_host and self.players:
            successor = self.players[0]
            successor.is_host = True
            self.host_connection_id = successor.connection_id
        return player

    @property
    def is_empty(self) -> bool:
        return not self.players

    # ---- lifecycle ----

    def advance(self, expected: str) -> None:
        if self.state != expected or expected not in _NEXT_STATE:
            raise ValueError(f'Room {self.code} cannot leave state {self.state} (expected {expected})')
        self.state = _NEXT_STATE[expected]

    def begin(self) -> None:
        self.advance(LOBBY)
        self.progress = [Progress(p.connection_id, p.display_name) for p in self.players]

    def find_progress(self, connection_id: str) -> Optional[Progress]:
        return next((e for e in self.progress if e.connection_id == connection_id), None)

    def discard_unfinished_progress(self, connection_id: str) -> bool:
        entry = self.find_progress(connection_id)
        if entry is None or entry.finished:
            return False
        self.progress.remove(entry)
        return True

    @property
    def all_finished(self) -> bool:
        return bool(self.progress) and all(e.finished for e in self.progress)

    def leaderboard(self) -> List[Progress]:
        # sorted() is stable, so ties keep roster order
        return sorted(self.progress, key=lambda e: e.finish_time)

    # ---- serialization ----

    def players_dict(self):
        return [p.to_dict() for p in self.players]

    def progress_dict(self):
        return [e.to_dict() for e in self.progress]

    def to_dict(self):
        return {
            'code': self.code,
            'hostConnectionId': self.host_connection_id,
            'players': self.players_dict(),
            'questions': list(self.questions),
            'state': self.state,
            'progress': self.progress_dict(),
            'gameMode': self.game_mode,
        }
