"""
Error taxonomy for roster operations.

    RosterError
    +-- NotFound               (match does not exist)
    |   +-- PlayerNotFound     (no player with that name anywhere)
    +-- CapacityExceeded       (roster already at max_players)
    +-- PersistenceFailure     (store unavailable or write failed)
        +-- DuplicatePlayerName

Each carries the status code the HTTP layer answers with.
"""


class RosterError(Exception):
    status_code = 400
    default_message = "Roster operation failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(RosterError):
    status_code = 404
    default_message = "Match not found"

    def __init__(self, message: str = None, match_id=None):
        self.match_id = match_id
        super().__init__(message)


class PlayerNotFound(NotFound):
    default_message = "Player not found"

    def __init__(self, name: str = None):
        self.name = name
        super().__init__()


class CapacityExceeded(RosterError):
    status_code = 400
    default_message = "Match is full"

    def __init__(self, match_id=None, max_players: int = None):
        self.match_id = match_id
        self.max_players = max_players
        super().__init__()


class PersistenceFailure(RosterError):
    status_code = 500
    default_message = "Storage operation failed"


class DuplicatePlayerName(PersistenceFailure):
    status_code = 409

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Player '{name}' already exists")
