"""Phase state machine for the Ten-Second City round.

Manages phase transitions:
- IDLE -> RUNNING when a round starts
- RUNNING -> CALCULATING when the countdown reaches zero
- CALCULATING -> FINISHED when the score reveal completes
- Any phase -> RUNNING on restart

The phase machine enforces valid transitions and provides
the conditions for when timed transitions should occur.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from core.constants import Phase

if TYPE_CHECKING:
    from core.round_state import RoundState


# Valid phase transitions. Every phase may restart into RUNNING.
PHASE_TRANSITIONS: dict[Phase, list[Phase]] = {
    Phase.IDLE: [Phase.RUNNING],
    Phase.RUNNING: [Phase.CALCULATING, Phase.RUNNING],
    Phase.CALCULATING: [Phase.FINISHED, Phase.RUNNING],
    Phase.FINISHED: [Phase.RUNNING],
}


@dataclass
class PhaseTransitionResult:
    """Result of a phase transition attempt.

    Attributes:
        success: Whether the transition was successful.
        new_phase: The new phase if successful, None otherwise.
        reason: Description of why the transition failed (if it did).
    """

    success: bool
    new_phase: Optional[Phase]
    reason: Optional[str] = None


class PhaseMachine:
    """State machine for round phase transitions.

    The phase machine tracks the current phase and rejects transitions
    outside PHASE_TRANSITIONS. It does not modify round state directly;
    it only answers whether a timed transition is due.

    Phases:
        - IDLE: No round has been played yet
        - RUNNING: Countdown active, placements accepted
        - CALCULATING: Final score fixed, reveal in progress
        - FINISHED: Reveal complete; waits for a restart
    """

    def __init__(self, initial_phase: Phase = Phase.IDLE):
        """Initialize the phase machine.

        Args:
            initial_phase: The starting phase (default: IDLE).
        """
        self._phase = initial_phase

    @property
    def phase(self) -> Phase:
        """Get the current phase."""
        return self._phase

    def get_valid_transitions(self) -> list[Phase]:
        """Get the list of valid next phases from the current phase."""
        return PHASE_TRANSITIONS.get(self._phase, [])

    def can_transition_to(self, target_phase: Phase) -> bool:
        """Check if a transition to the target phase is valid."""
        return target_phase in self.get_valid_transitions()

    def transition_to(self, target_phase: Phase) -> PhaseTransitionResult:
        """Attempt to transition to a new phase.

        Args:
            target_phase: The phase to transition to.

        Returns:
            PhaseTransitionResult indicating success or failure.
        """
        if not self.can_transition_to(target_phase):
            valid = self.get_valid_transitions()
            return PhaseTransitionResult(
                success=False,
                new_phase=None,
                reason=f"Cannot transition from {self._phase.value} to {target_phase.value}. "
                f"Valid transitions: {[p.value for p in valid]}",
            )

        self._phase = target_phase
        return PhaseTransitionResult(success=True, new_phase=target_phase)

    def is_idle(self) -> bool:
        """Check if no round has started."""
        return self._phase == Phase.IDLE

    def is_running(self) -> bool:
        """Check if placements are currently accepted."""
        return self._phase == Phase.RUNNING

    def is_calculating(self) -> bool:
        """Check if the score reveal is in progress."""
        return self._phase == Phase.CALCULATING

    def is_finished(self) -> bool:
        """Check if the round has ended."""
        return self._phase == Phase.FINISHED

    # -------------------------------------------------------------------------
    # Timed transition conditions
    # -------------------------------------------------------------------------

    def should_start_calculating(self, state: RoundState) -> bool:
        """The running phase ends the instant the countdown reaches zero."""
        if self._phase != Phase.RUNNING:
            return False
        return state.remaining_seconds <= 0

    def should_finish(self, state: RoundState) -> bool:
        """The calculating phase ends once the reveal shows the final score."""
        if self._phase != Phase.CALCULATING or state.final_score is None:
            return False
        return state.display_score == state.final_score

    def __str__(self) -> str:
        """Return string representation of the phase machine."""
        return f"PhaseMachine(phase={self._phase.value})"

    def __repr__(self) -> str:
        """Return detailed representation of the phase machine."""
        return f"PhaseMachine(phase={self._phase!r})"
