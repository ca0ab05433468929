import logging

from shared.errors import CapacityExceeded, NotFound, PlayerNotFound
from shared.state_machine import MatchStateMachine
from .models import Match
from .player_directory import PlayerDirectory
from .store import Store

logger = logging.getLogger(__name__)


class MatchRoster:
    """
    Roster membership and lifecycle of a single match.

    Each operation runs in one store transaction with the match row locked,
    so the capacity check and the append cannot interleave with another
    join on the same match.
    """

    def __init__(self, store: Store, directory: PlayerDirectory = None):
        self.store = store
        self.directory = directory or PlayerDirectory(store)

    def _lock_match(self, match_id: int) -> Match:
        match = self.store.get_match(match_id, for_update=True)
        if match is None:
            raise NotFound(match_id=match_id)
        return match

    def join(self, match_id: int, player_name: str, external_id: int = None) -> Match:
        """Add a player to the roster. Joining twice is a no-op."""
        with self.store.transaction():
            match = self._lock_match(match_id)

            # Checked before identity resolution so a rejected joiner never creates a player.
            if len(match.players) >= match.max_players:
                logger.warning(
                    f"Rejected '{player_name}' for match {match_id}: "
                    f"roster full ({len(match.players)}/{match.max_players})"
                )
                raise CapacityExceeded(match_id=match_id, max_players=match.max_players)

            player = self.directory.resolve_or_create(player_name, external_id=external_id)
            added = self.store.add_member(match, player)

        if added:
            logger.info(f"Player '{player_name}' joined match {match_id}")
        else:
            logger.debug(f"Player '{player_name}' already on match {match_id}")
        return match

    def leave(self, match_id: int, player_name: str) -> Match:
        """Remove a player from the roster. The name must belong to a known player."""
        with self.store.transaction():
            match = self._lock_match(match_id)

            player = self.directory.find(player_name)
            if player is None:
                raise PlayerNotFound(player_name)

            removed = self.store.remove_member(match, player)

        if removed:
            logger.info(f"Player '{player_name}' left match {match_id}")
        return match

    def cancel(self, match_id: int) -> Match:
        return self._apply(match_id, 'cancel')

    def restore(self, match_id: int) -> Match:
        return self._apply(match_id, 'restore')

    def _apply(self, match_id: int, action: str) -> Match:
        with self.store.transaction():
            match = self._lock_match(match_id)

            sm = MatchStateMachine.from_state_string(match.state)
            old_state = sm.state
            new_state = sm.transition(action)
            self.store.set_state(match, new_state)

        if old_state != new_state:
            logger.info(f"Match {match_id} {old_state.value} -> {new_state.value}")
        return match
