import logging
from datetime import datetime, timezone
from typing import List

from shared.errors import NotFound
from shared.state_machine import MatchState
from .models import Match
from .store import Store

logger = logging.getLogger(__name__)

DEFAULT_VENUE_NAME = 'Nova Sports Soccer Field'
DEFAULT_MIN_PLAYERS = 10
DEFAULT_MAX_PLAYERS = 12


class MatchCatalog:
    """
    Creates matches and answers catalog queries.

    Missing venue, min and max are filled in independently. The venue is
    inherited from the most recently created match so organizers who always
    play at the same place never have to retype it.
    """

    def __init__(self, store: Store, default_venue: str = DEFAULT_VENUE_NAME):
        self.store = store
        self.default_venue = default_venue

    def create_match(
        self,
        date: datetime,
        location: str = '',
        venue_name: str = None,
        map_link: str = None,
        min_players: int = None,
        max_players: int = None
    ) -> Match:
        """Create a new, active match with an empty roster."""
        # Stored as naive UTC; naive input is taken to be UTC already.
        if date.tzinfo is not None:
            date = date.astimezone(timezone.utc).replace(tzinfo=None)

        # min <= max is deliberately not checked; organizers may set either freely.
        with self.store.transaction():
            if not venue_name:
                last_match = self.store.latest_match()
                venue_name = last_match.venue_name if last_match else self.default_venue

            match = Match(
                date=date,
                location=location or '',
                venue_name=venue_name,
                map_link=map_link or None,
                min_players=min_players or DEFAULT_MIN_PLAYERS,
                max_players=max_players or DEFAULT_MAX_PLAYERS,
                state=MatchState.ACTIVE.value,
            )
            self.store.add_match(match)

        logger.info(
            f"Created match {match.id} at '{match.venue_name}' on {match.date} "
            f"({match.min_players}-{match.max_players} players)"
        )
        return match

    def get_match(self, match_id: int) -> Match:
        match = self.store.get_match(match_id)
        if match is None:
            raise NotFound(match_id=match_id)
        return match

    def list_matches(self) -> List[Match]:
        """All matches, cancelled ones included, with rosters loaded."""
        return self.store.list_matches()
