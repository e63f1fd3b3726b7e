"""Round engine for the Ten-Second City puzzle.

The RoundEngine is the primary interface for playing a round. It provides:
- start(): Begin a fresh round from any phase
- select(): Choose the building type for the next placement
- place(): Put the selected building on an empty cell
- Read-only observables: phase, board, remaining_seconds, display_score,
  final_score, selected, snapshot()

The engine owns every timer it schedules. A timer only lives while its
phase does: the countdown during RUNNING, the reveal and finish delay
during CALCULATING. Every transition, restart and close() cancels them.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from core.board import Cell, CellIndex, validate_index
from core.constants import BuildingType, Phase
from core.round_state import RoundSnapshot, RoundState
from core.rules import RuleSet

from .config import RoundConfig, DEFAULT_ROUND_CONFIG
from .phase_machine import PhaseMachine
from .scheduler import Scheduler, TimerHandle
from .scoring import score

logger = logging.getLogger(__name__)

RoundListener = Callable[[RoundSnapshot], None]


class RoundEngine:
    """State machine driving a single timed round.

    Invalid gameplay actions (placing outside RUNNING, with nothing
    selected, or on an occupied cell) are silent no-ops. Only contract
    violations raise: an off-board cell index or a selection that is not
    a BuildingType.

    Usage:
        scheduler = VirtualScheduler()
        engine = RoundEngine(scheduler)
        engine.start()
        engine.select(BuildingType.HOUSE)
        engine.place(4)
        scheduler.advance(12_000)
        assert engine.phase == Phase.FINISHED
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: RoundConfig = DEFAULT_ROUND_CONFIG,
        rules: Optional[RuleSet] = None,
    ):
        """Initialize the engine in the IDLE phase.

        Args:
            scheduler: Source of countdown and reveal timers.
            config: Round timing configuration.
            rules: Scoring rules. Defaults to the bundled rules.
        """
        self._scheduler = scheduler
        self._config = config
        self._rules = rules

        self._state = RoundState(remaining_seconds=config.duration_sec)
        self._phase_machine = PhaseMachine(initial_phase=Phase.IDLE)

        self._countdown_timer: Optional[TimerHandle] = None
        self._reveal_timer: Optional[TimerHandle] = None
        self._finish_timer: Optional[TimerHandle] = None
        self._reveal_step = 1

        self._listeners: list[RoundListener] = []

    # -------------------------------------------------------------------------
    # Observables
    # -------------------------------------------------------------------------

    @property
    def config(self) -> RoundConfig:
        return self._config

    @property
    def phase(self) -> Phase:
        """Get the current phase."""
        return self._state.phase

    @property
    def board(self) -> tuple[Cell, ...]:
        """Row-major cells of the current board."""
        return self._state.board.as_tuple()

    @property
    def selected(self) -> Optional[BuildingType]:
        return self._state.selected

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def display_score(self) -> int:
        """Score value revealed so far."""
        return self._state.display_score

    @property
    def final_score(self) -> Optional[int]:
        """Authoritative score, None until the round starts calculating."""
        return self._state.final_score

    def snapshot(self) -> RoundSnapshot:
        """Return an immutable view of the round."""
        return self._state.snapshot()

    def add_listener(self, listener: RoundListener) -> None:
        """Register a callback invoked with a snapshot after every change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: RoundListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Player actions
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start a fresh round, discarding any previous one."""
        self._cancel_timers()
        self._state.reset(self._config.duration_sec)
        self._transition(Phase.RUNNING)

        self._countdown_timer = self._scheduler.call_repeating(
            self._config.countdown_interval_ms, self._on_countdown_tick
        )
        self._notify()

    def select(self, building_type: BuildingType) -> None:
        """Set the building type used by the next placement.

        Raises:
            ValueError: If building_type is not a BuildingType.
        """
        if not isinstance(building_type, BuildingType):
            raise ValueError(f"Invalid building type: {building_type!r}")

        if self._state.phase != Phase.RUNNING:
            logger.debug("Selection of %s recorded outside running phase", building_type.value)
        self._state.selected = building_type
        self._notify()

    def place(self, index: CellIndex) -> bool:
        """Place the selected building on a cell.

        Returns:
            True if the board changed. False (no-op) when the round is not
            running, nothing is selected, or the cell is occupied.

        Raises:
            ValueError: If index is off the board.
        """
        validate_index(index)

        if self._state.phase != Phase.RUNNING:
            logger.debug("Ignoring placement at %d: phase is %s", index, self._state.phase.value)
            return False

        selected = self._state.selected
        if selected is None:
            logger.debug("Ignoring placement at %d: nothing selected", index)
            return False

        if not self._state.board.place(index, selected):
            logger.debug("Ignoring placement at %d: cell occupied", index)
            return False

        self._notify()
        return True

    def close(self) -> None:
        """Tear down the round: cancel every timer and drop listeners."""
        self._cancel_timers()
        self._listeners.clear()

    # -------------------------------------------------------------------------
    # Timer callbacks
    # -------------------------------------------------------------------------

    def _on_countdown_tick(self) -> None:
        if not self._phase_machine.is_running():
            logger.debug("Stale countdown tick in phase %s", self._state.phase.value)
            return

        if self._state.remaining_seconds > 0:
            self._state.remaining_seconds -= 1

        if self._phase_machine.should_start_calculating(self._state):
            self._begin_calculating()

        self._notify()

    def _begin_calculating(self) -> None:
        self._cancel_timers()
        self._transition(Phase.CALCULATING)

        # Scored exactly once per round; the reveal never touches final_score
        final = score(self._state.board, self._rules)
        self._state.final_score = final
        self._state.display_score = 0
        self._reveal_step = max(1, math.ceil(final / self._config.reveal_steps))
        logger.info("Round scored %d", final)

        self._reveal_timer = self._scheduler.call_repeating(
            self._config.reveal_interval_ms, self._on_reveal_tick
        )

    def _on_reveal_tick(self) -> None:
        if not self._phase_machine.is_calculating():
            logger.debug("Stale reveal tick in phase %s", self._state.phase.value)
            return

        final = self._state.final_score
        # Clamp the last step so the display never overshoots
        self._state.display_score = min(self._state.display_score + self._reveal_step, final)

        if self._phase_machine.should_finish(self._state):
            self._cancel_timers()
            self._finish_timer = self._scheduler.call_later(
                self._config.finish_delay_ms, self._on_finish
            )

        self._notify()

    def _on_finish(self) -> None:
        if not self._phase_machine.is_calculating():
            logger.debug("Stale finish timer in phase %s", self._state.phase.value)
            return

        self._finish_timer = None
        self._transition(Phase.FINISHED)
        self._notify()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _transition(self, target: Phase) -> None:
        previous = self._state.phase
        result = self._phase_machine.transition_to(target)
        if not result.success:
            raise RuntimeError(result.reason)
        self._state.phase = target
        logger.info("Round phase %s -> %s", previous.value, target.value)

    def _cancel_timers(self) -> None:
        for timer in (self._countdown_timer, self._reveal_timer, self._finish_timer):
            if timer is not None:
                timer.cancel()
        self._countdown_timer = None
        self._reveal_timer = None
        self._finish_timer = None

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self._state.snapshot()
        for listener in list(self._listeners):
            # Listener errors are logged, never propagated into timer callbacks
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Round listener %r failed", listener)

    def __repr__(self) -> str:
        return (
            f"RoundEngine(phase={self._state.phase.value}, "
            f"remaining={self._state.remaining_seconds}, "
            f"display={self._state.display_score}, final={self._state.final_score})"
        )
