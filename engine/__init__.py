"""Round engine for the Ten-Second City puzzle.

This module provides the game logic including:
- Scoring engine for finished boards
- Phase state machine for round flow control
- Schedulers for countdown and reveal timers
- Round engine coordinating a single timed round
"""

from .phase_machine import (
    PhaseMachine,
    PhaseTransitionResult,
    PHASE_TRANSITIONS,
)

from .scoring import (
    ScoreBreakdown,
    score,
    score_breakdown,
    base_score,
    adjacency_bonus,
    synergy_bonus,
    line_bonus,
    diversity_bonus,
    tier_bonus,
)

from .scheduler import (
    Scheduler,
    TimerHandle,
    VirtualScheduler,
    AsyncioScheduler,
)

from .config import RoundConfig, DEFAULT_ROUND_CONFIG

from .round_engine import RoundEngine

__all__ = [
    # Phase machine
    "PhaseMachine",
    "PhaseTransitionResult",
    "PHASE_TRANSITIONS",
    # Scoring
    "ScoreBreakdown",
    "score",
    "score_breakdown",
    "base_score",
    "adjacency_bonus",
    "synergy_bonus",
    "line_bonus",
    "diversity_bonus",
    "tier_bonus",
    # Scheduling
    "Scheduler",
    "TimerHandle",
    "VirtualScheduler",
    "AsyncioScheduler",
    # Round
    "RoundConfig",
    "DEFAULT_ROUND_CONFIG",
    "RoundEngine",
]
