"""Unit tests for the execution phase state machine."""

import pytest

from src.fetch.errors import FetchStateError
from src.fetch.models import ModificationStatus
from src.fetch.state_machine import FetchPhase, FetchStateMachine, phase_for


class TestFetchStateMachine:
    """Tests for phase transitions."""

    def test_initial_state(self) -> None:
        """Test that a new machine starts IDLE."""
        machine = FetchStateMachine()

        assert machine.state == FetchPhase.IDLE
        assert machine.is_terminal is False

    @pytest.mark.parametrize(
        "terminal",
        [
            FetchPhase.NOT_MODIFIED,
            FetchPhase.MODIFIED,
            FetchPhase.UNCHECKED,
            FetchPhase.FAILED,
        ],
    )
    def test_executing_to_terminal(self, terminal: FetchPhase) -> None:
        """Test every valid path through the machine."""
        machine = FetchStateMachine()

        machine.transition(FetchPhase.EXECUTING)
        machine.transition(terminal)

        assert machine.state == terminal
        assert machine.is_terminal is True

    def test_cannot_skip_executing(self) -> None:
        """Test that IDLE cannot jump to an outcome."""
        machine = FetchStateMachine()

        assert machine.can_transition(FetchPhase.MODIFIED) is False
        with pytest.raises(FetchStateError) as exc_info:
            machine.transition(FetchPhase.MODIFIED)

        assert exc_info.value.from_state == "IDLE"
        assert exc_info.value.to_state == "MODIFIED"
        assert machine.state == FetchPhase.IDLE

    def test_terminal_is_final(self) -> None:
        """Test that terminal phases allow no further transitions."""
        machine = FetchStateMachine()
        machine.transition(FetchPhase.EXECUTING)
        machine.transition(FetchPhase.FAILED)

        with pytest.raises(FetchStateError):
            machine.transition(FetchPhase.EXECUTING)


class TestPhaseFor:
    """Tests for outcome to phase mapping."""

    @pytest.mark.parametrize(
        ("status", "phase"),
        [
            (ModificationStatus.NOT_MODIFIED, FetchPhase.NOT_MODIFIED),
            (ModificationStatus.MODIFIED, FetchPhase.MODIFIED),
            (ModificationStatus.UNCHECKED, FetchPhase.UNCHECKED),
        ],
    )
    def test_mapping(self, status: ModificationStatus, phase: FetchPhase) -> None:
        """Test that each outcome maps to its phase."""
        assert phase_for(status) == phase
