import logging
from typing import Optional

from shared.errors import RosterError
from .match_catalog import MatchCatalog
from .match_roster import MatchRoster

logger = logging.getLogger(__name__)

WELCOME_TEXT = "Welcome to Sport Manager! Use /help for available commands."

HELP_TEXT = """Available commands:
/matches - show upcoming matches
/join [ID] - join a match
/leave [ID] - leave a match"""


class BotCommandHandler:
    """
    Turns chat-bot text commands into roster calls and replies with text.

    Transport-agnostic: the caller supplies the message text and the
    sender's display name, and sends back whatever string is returned.
    """

    def __init__(self, catalog: MatchCatalog, roster: MatchRoster):
        self.catalog = catalog
        self.roster = roster
        self.commands = {
            'start': self.cmd_start,
            'help': self.cmd_help,
            'matches': self.cmd_matches,
            'join': self.cmd_join,
            'leave': self.cmd_leave,
        }

    @staticmethod
    def parse(text: str):
        """Split '/join@SomeBot 3' into ('join', ['3']). Returns None for plain text."""
        if not text or not text.startswith('/'):
            return None
        parts = text.strip().split()
        command = parts[0][1:].split('@', 1)[0].lower()
        return command, parts[1:]

    def handle(self, text: str, player_name: str = None, external_id: int = None) -> Optional[str]:
        parsed = self.parse(text)
        if parsed is None:
            return None

        command, args = parsed
        handler = self.commands.get(command)
        if handler is None:
            return f"Unknown command /{command}. Use /help for available commands."

        try:
            return handler(args, player_name, external_id)
        except RosterError as e:
            logger.info(f"Bot command /{command} by '{player_name}' failed: {e.message}")
            return e.message

    def cmd_start(self, args, player_name, external_id):
        return WELCOME_TEXT

    def cmd_help(self, args, player_name, external_id):
        return HELP_TEXT

    def cmd_matches(self, args, player_name, external_id):
        matches = [m for m in self.catalog.list_matches() if m.active]
        if not matches:
            return "No upcoming matches."

        lines = []
        for m in matches:
            when = m.date.strftime('%a %d %b %H:%M') if m.date else '?'
            lines.append(
                f"#{m.id} {when} - {m.venue_name} ({len(m.players)}/{m.max_players})"
            )
        return "\n".join(lines)

    def _match_id(self, args):
        if not args or not args[0].isdigit():
            return None
        return int(args[0])

    def cmd_join(self, args, player_name, external_id):
        match_id = self._match_id(args)
        if match_id is None:
            return "Usage: /join [ID]"
        if not player_name:
            return "Cannot join without a name."

        self.roster.join(match_id, player_name, external_id=external_id)
        return f"{player_name} joined match #{match_id}"

    def cmd_leave(self, args, player_name, external_id):
        match_id = self._match_id(args)
        if match_id is None:
            return "Usage: /leave [ID]"
        if not player_name:
            return "Cannot leave without a name."

        self.roster.leave(match_id, player_name)
        return f"{player_name} left match #{match_id}"
