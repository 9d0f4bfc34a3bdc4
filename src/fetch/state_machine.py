"""Execution phase state machine for one fetch."""

from enum import Enum, auto
from typing import ClassVar

from src.fetch.errors import FetchStateError
from src.fetch.models import ModificationStatus
from src.observability.logging import get_logger


logger = get_logger(__name__)


class FetchPhase(Enum):
    """Phases of a single execute() call.

    State transitions:
        IDLE -> EXECUTING: Request sent
        EXECUTING -> NOT_MODIFIED: 304, or 200 with matching validators
        EXECUTING -> MODIFIED: 200 with changed or missing validators
        EXECUTING -> UNCHECKED: Any other status
        EXECUTING -> FAILED: Transport or sink failure
    """

    IDLE = auto()
    EXECUTING = auto()
    NOT_MODIFIED = auto()
    MODIFIED = auto()
    UNCHECKED = auto()
    FAILED = auto()


_OUTCOME_PHASES: dict[ModificationStatus, FetchPhase] = {
    ModificationStatus.NOT_MODIFIED: FetchPhase.NOT_MODIFIED,
    ModificationStatus.MODIFIED: FetchPhase.MODIFIED,
    ModificationStatus.UNCHECKED: FetchPhase.UNCHECKED,
}


def phase_for(status: ModificationStatus) -> FetchPhase:
    """Map a modification outcome to its terminal phase."""
    return _OUTCOME_PHASES[status]


class FetchStateMachine:
    """State machine for one execution.

    Enforces valid phase transitions and logs invariant violations.
    """

    VALID_TRANSITIONS: ClassVar[dict[FetchPhase, set[FetchPhase]]] = {
        FetchPhase.IDLE: {FetchPhase.EXECUTING},
        FetchPhase.EXECUTING: {
            FetchPhase.NOT_MODIFIED,
            FetchPhase.MODIFIED,
            FetchPhase.UNCHECKED,
            FetchPhase.FAILED,
        },
        FetchPhase.NOT_MODIFIED: set(),  # Terminal state
        FetchPhase.MODIFIED: set(),  # Terminal state
        FetchPhase.UNCHECKED: set(),  # Terminal state
        FetchPhase.FAILED: set(),  # Terminal state
    }

    def __init__(self) -> None:
        """Initialize the state machine in IDLE phase."""
        self._state = FetchPhase.IDLE
        self._log = logger

    @property
    def state(self) -> FetchPhase:
        """Get the current phase."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if the machine reached a terminal phase."""
        return not self.VALID_TRANSITIONS[self._state]

    def can_transition(self, to_state: FetchPhase) -> bool:
        """Check if a transition to the given phase is valid."""
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: FetchPhase) -> None:
        """Transition to a new phase.

        Args:
            to_state: The target phase.

        Raises:
            FetchStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise FetchStateError(self._state.name, to_state.name)

        old_state = self._state
        self._state = to_state
        self._log.debug(
            "fetch_state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )
