"""Round state for the Ten-Second City puzzle.

RoundState is the single source of truth for one round. It is mutated
only by the round engine; everything else reads a RoundSnapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Any

from .board import Board, Cell
from .constants import BuildingType, Phase, ROUND_DURATION_SEC


@dataclass(frozen=True)
class RoundSnapshot:
    """Read-only view of a round at one instant.

    Attributes:
        phase: Current phase.
        board: Row-major cells.
        selected: Currently selected building type, if any.
        remaining_seconds: Seconds left on the countdown.
        display_score: Score value currently revealed to the player.
        final_score: Authoritative score, set once on entering calculating.
    """

    phase: Phase
    board: tuple[Cell, ...]
    selected: Optional[BuildingType]
    remaining_seconds: int
    display_score: int
    final_score: Optional[int]

    def to_dict(self) -> dict[str, Any]:
        """Convert the snapshot to a JSON-compatible dictionary."""
        return {
            "phase": self.phase.value,
            "board": [None if cell is None else cell.value for cell in self.board],
            "selected": None if self.selected is None else self.selected.value,
            "remaining_seconds": self.remaining_seconds,
            "display_score": self.display_score,
            "final_score": self.final_score,
        }


@dataclass
class RoundState:
    """Mutable state of a single round.

    Attributes:
        board: The 3x3 grid.
        selected: Building type that the next placement will use.
        remaining_seconds: Seconds left on the countdown.
        final_score: Authoritative score; None until calculating begins.
        display_score: Revealed score, moving from 0 toward final_score.
        phase: Current phase.
    """

    board: Board = field(default_factory=Board)
    selected: Optional[BuildingType] = None
    remaining_seconds: int = ROUND_DURATION_SEC
    final_score: Optional[int] = None
    display_score: int = 0
    phase: Phase = Phase.IDLE

    def reset(self, duration_sec: int) -> None:
        """Discard everything from the previous round.

        The phase is left for the caller to set.
        """
        self.board.clear()
        self.selected = None
        self.remaining_seconds = duration_sec
        self.final_score = None
        self.display_score = 0

    def snapshot(self) -> RoundSnapshot:
        """Return an immutable view of the current state."""
        return RoundSnapshot(
            phase=self.phase,
            board=self.board.as_tuple(),
            selected=self.selected,
            remaining_seconds=self.remaining_seconds,
            display_score=self.display_score,
            final_score=self.final_score,
        )

