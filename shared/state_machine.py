import logging
from enum import Enum
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class MatchState(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class TransitionError(Exception):
    def __init__(self, from_state: str, to_state: str, reason: str = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason or f"Cannot transition from {from_state} to {to_state}"
        super().__init__(self.reason)


@dataclass
class Transition:
    from_state: MatchState
    to_state: MatchState
    action: str


class MatchStateMachine:
    # Re-applying cancel/restore is allowed and leaves the state unchanged.
    TRANSITIONS = [
        Transition(MatchState.ACTIVE, MatchState.CANCELLED, "cancel"),
        Transition(MatchState.ACTIVE, MatchState.ACTIVE, "restore"),
        Transition(MatchState.CANCELLED, MatchState.ACTIVE, "restore"),
        Transition(MatchState.CANCELLED, MatchState.CANCELLED, "cancel"),
    ]

    def __init__(self, initial_state: MatchState = MatchState.ACTIVE):
        self._state = initial_state

    @property
    def state(self) -> MatchState:
        return self._state

    def transition(self, action: str) -> MatchState:
        for t in self.TRANSITIONS:
            if t.from_state == self._state and t.action == action:
                self._state = t.to_state
                return self._state

        raise TransitionError(
            self._state.value,
            "unknown",
            f"No valid transition for action '{action}' from state '{self._state.value}'"
        )

    @classmethod
    def from_state_string(cls, state_str: str) -> "MatchStateMachine":
        try:
            state = MatchState(state_str)
        except ValueError:
            logger.warning(f"Unknown match state '{state_str}', treating as {MatchState.ACTIVE.value}")
            state = MatchState.ACTIVE
        return cls(initial_state=state)
