"""Core data models for the Ten-Second City puzzle."""

from .constants import (
    BuildingType,
    Phase,
    GRID_SIZE,
    NUM_CELLS,
    SAME_TYPE_ADJACENCY_BONUS,
    LINE_BONUS,
    DIVERSITY_THRESHOLD,
    DIVERSITY_BONUS,
    TIERED_BUILDING_TYPE,
    TIER_BONUSES,
    ROUND_DURATION_SEC,
    COUNTDOWN_INTERVAL_MS,
    REVEAL_INTERVAL_MS,
    REVEAL_STEPS,
    REVEAL_FINISH_DELAY_MS,
)

from .board import (
    CellIndex,
    Cell,
    PairKey,
    make_pair_key,
    row_of,
    col_of,
    validate_index,
    ADJACENT_PAIRS,
    LINES,
    Board,
)

from .rules import BuildingInfo, RuleSet

from .round_state import RoundSnapshot, RoundState

__all__ = [
    # Constants
    "BuildingType",
    "Phase",
    "GRID_SIZE",
    "NUM_CELLS",
    "SAME_TYPE_ADJACENCY_BONUS",
    "LINE_BONUS",
    "DIVERSITY_THRESHOLD",
    "DIVERSITY_BONUS",
    "TIERED_BUILDING_TYPE",
    "TIER_BONUSES",
    "ROUND_DURATION_SEC",
    "COUNTDOWN_INTERVAL_MS",
    "REVEAL_INTERVAL_MS",
    "REVEAL_STEPS",
    "REVEAL_FINISH_DELAY_MS",
    # Board
    "CellIndex",
    "Cell",
    "PairKey",
    "make_pair_key",
    "row_of",
    "col_of",
    "validate_index",
    "ADJACENT_PAIRS",
    "LINES",
    "Board",
    # Rules
    "BuildingInfo",
    "RuleSet",
    # Round state
    "RoundSnapshot",
    "RoundState",
]
