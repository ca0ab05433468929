import logging
import threading
from contextlib import contextmanager
from typing import Optional, List

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from shared.errors import DuplicatePlayerName, PersistenceFailure
from shared.state_machine import MatchState
from .models import Match, Player

logger = logging.getLogger(__name__)


class Store:
    """
    Persistence boundary for matches, players and roster membership.

    Everything the roster does between ``transaction()`` entry and exit is
    applied as one unit: either all of it becomes visible or none of it.
    Transactions nest; only the outermost block commits or rolls back.
    """

    def transaction(self):
        raise NotImplementedError

    def get_match(self, match_id: int, for_update: bool = False) -> Optional[Match]:
        raise NotImplementedError

    def latest_match(self) -> Optional[Match]:
        raise NotImplementedError

    def add_match(self, match: Match) -> Match:
        raise NotImplementedError

    def list_matches(self) -> List[Match]:
        raise NotImplementedError

    def find_player(self, name: str) -> Optional[Player]:
        raise NotImplementedError

    def add_player(self, player: Player) -> Player:
        """Persist a new player. Raises DuplicatePlayerName if the name is taken."""
        raise NotImplementedError

    def list_players(self) -> List[Player]:
        raise NotImplementedError

    def add_member(self, match: Match, player: Player) -> bool:
        """Put a player on a roster. Returns False if already a member."""
        if match.has_player(player):
            return False
        match.players.append(player)
        return True

    def remove_member(self, match: Match, player: Player) -> bool:
        """Take a player off a roster. Returns False if not a member."""
        for p in list(match.players):
            if p is player or p.id == player.id:
                match.players.remove(p)
                return True
        return False

    def set_state(self, match: Match, state: MatchState):
        match.state = state.value


class SqlAlchemyStore(Store):
    """Store backed by the Flask-SQLAlchemy session of the current app context."""

    def __init__(self, database):
        self.db = database
        self._local = threading.local()

    @property
    def session(self):
        return self.db.session

    @contextmanager
    def _translate_errors(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Database error while trying to {action}: {e}")
            raise PersistenceFailure(f"Failed to {action}") from e

    @contextmanager
    def transaction(self):
        depth = getattr(self._local, 'depth', 0)
        self._local.depth = depth + 1
        outermost = depth == 0
        try:
            with self._translate_errors("complete transaction"):
                yield
                if outermost:
                    self.session.commit()
        except Exception:
            if outermost:
                self.session.rollback()
            raise
        finally:
            self._local.depth = depth

    def get_match(self, match_id: int, for_update: bool = False) -> Optional[Match]:
        with self._translate_errors("load match"):
            query = Match.query.filter_by(id=match_id)
            if for_update:
                # Row lock held until the enclosing transaction ends.
                query = query.with_for_update().populate_existing()
            return query.first()

    def latest_match(self) -> Optional[Match]:
        with self._translate_errors("load latest match"):
            return Match.query.order_by(Match.created_at.desc(), Match.id.desc()).first()

    def add_match(self, match: Match) -> Match:
        with self._translate_errors("create match"):
            self.session.add(match)
            self.session.flush()
        return match

    def list_matches(self) -> List[Match]:
        with self._translate_errors("fetch matches"):
            return (
                Match.query
                .options(selectinload(Match.players))
                .order_by(Match.id)
                .all()
            )

    def find_player(self, name: str) -> Optional[Player]:
        with self._translate_errors("load player"):
            return Player.query.filter_by(name=name).first()

    def add_player(self, player: Player) -> Player:
        try:
            # Savepoint: a unique-name violation must not abort the outer transaction.
            with self.session.begin_nested():
                self.session.add(player)
        except IntegrityError as e:
            logger.debug(f"Player name '{player.name}' already taken: {e.orig}")
            raise DuplicatePlayerName(player.name) from e
        except SQLAlchemyError as e:
            logger.error(f"Database error while creating player '{player.name}': {e}")
            raise PersistenceFailure("Failed to create player") from e
        return player

    def list_players(self) -> List[Player]:
        with self._translate_errors("fetch players"):
            return Player.query.order_by(Player.id).all()


def enable_sqlite_savepoints(engine):
    """
    Let SQLAlchemy own transaction boundaries on pysqlite.

    The sqlite3 driver defers BEGIN until the first write, so a SAVEPOINT
    issued earlier opens the outer transaction itself and its RELEASE
    commits everything. Emitting BEGIN explicitly keeps savepoints nested.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")
