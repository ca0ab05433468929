import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Optional, List

from shared.errors import DuplicatePlayerName
from .models import Match, Player
from .store import Store


class InMemoryStore(Store):
    """
    Store that keeps transient model instances in process memory.

    A single re-entrant lock serializes transactions, which is what makes
    the roster's capacity check and append atomic. On an exception the
    snapshot taken at the start of the outermost transaction is restored.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._matches: List[Match] = []
        self._players: List[Player] = []
        self._next_match_id = 1
        self._next_player_id = 1
        self._depth = 0

    def _snapshot(self):
        return (
            list(self._matches),
            list(self._players),
            {id(m): (m.state, list(m.players)) for m in self._matches},
        )

    def _restore(self, snapshot):
        matches, players, rosters = snapshot
        self._matches = matches
        self._players = players
        for match in self._matches:
            state, roster = rosters[id(match)]
            match.state = state
            match.players[:] = roster

    @contextmanager
    def transaction(self):
        with self._lock:
            outermost = self._depth == 0
            snapshot = self._snapshot() if outermost else None
            self._depth += 1
            try:
                yield
            except Exception:
                if outermost:
                    self._restore(snapshot)
                raise
            finally:
                self._depth -= 1

    def get_match(self, match_id: int, for_update: bool = False) -> Optional[Match]:
        with self._lock:
            for match in self._matches:
                if match.id == match_id:
                    return match
        return None

    def latest_match(self) -> Optional[Match]:
        with self._lock:
            return self._matches[-1] if self._matches else None

    def add_match(self, match: Match) -> Match:
        with self._lock:
            match.id = self._next_match_id
            self._next_match_id += 1
            if match.created_at is None:
                match.created_at = datetime.utcnow()
            self._matches.append(match)
        return match

    def list_matches(self) -> List[Match]:
        with self._lock:
            return list(self._matches)

    def find_player(self, name: str) -> Optional[Player]:
        with self._lock:
            for player in self._players:
                if player.name == name:
                    return player
        return None

    def add_player(self, player: Player) -> Player:
        with self._lock:
            if self.find_player(player.name) is not None:
                raise DuplicatePlayerName(player.name)
            player.id = self._next_player_id
            self._next_player_id += 1
            if player.created_at is None:
                player.created_at = datetime.utcnow()
            self._players.append(player)
        return player

    def list_players(self) -> List[Player]:
        with self._lock:
            return list(self._players)
