import logging
from typing import Optional, List

from shared.errors import DuplicatePlayerName, PersistenceFailure
from .models import Player
from .store import Store

logger = logging.getLogger(__name__)


class PlayerDirectory:
    """
    Name-based player identity.

    A player *is* their name: lookups are exact and case-sensitive, and
    the store keeps names unique.
    """

    def __init__(self, store: Store):
        self.store = store

    def find(self, name: str) -> Optional[Player]:
        """Exact-name lookup, no side effects."""
        return self.store.find_player(name)

    def resolve_or_create(self, name: str, external_id: int = None) -> Player:
        """Return the player called ``name``, creating it if nobody has that name yet."""
        if not name:
            raise ValueError("Player name is required")

        with self.store.transaction():
            player = self.store.find_player(name)
            if player:
                return player

            try:
                player = self.store.add_player(Player(name=name, external_id=external_id))
            except DuplicatePlayerName:
                # Lost a race with a concurrent creator; their row is ours too.
                player = self.store.find_player(name)
                if player is None:
                    raise PersistenceFailure(f"Failed to resolve player '{name}'")
                return player

        logger.info(f"Created player '{name}' (id={player.id})")
        return player

    def register(self, name: str, external_id: int = None) -> Player:
        """Create a player explicitly. Raises DuplicatePlayerName if the name is taken."""
        if not name:
            raise ValueError("Player name is required")

        with self.store.transaction():
            player = self.store.add_player(Player(name=name, external_id=external_id))

        logger.info(f"Registered player '{name}' (id={player.id}, telegram_id={external_id})")
        return player

    def list_players(self) -> List[Player]:
        return self.store.list_players()
