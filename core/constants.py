"""Constants and enums for the Ten-Second City puzzle."""

from enum import Enum


class BuildingType(Enum):
    """Types of buildings that can be placed on the grid."""

    HOUSE = "house"
    OFFICE = "office"
    SHOP = "shop"
    PARK = "park"
    FACTORY = "factory"
    SKYSCRAPER = "skyscraper"
    SCHOOL = "school"
    HOSPITAL = "hospital"
    STADIUM = "stadium"
    LIBRARY = "library"


class Phase(Enum):
    """Round lifecycle phases."""

    IDLE = "idle"
    RUNNING = "running"
    CALCULATING = "calculating"
    FINISHED = "finished"


# Grid topology
GRID_SIZE = 3
NUM_CELLS = GRID_SIZE * GRID_SIZE

# Scoring bonuses
SAME_TYPE_ADJACENCY_BONUS = 2  # Per orthogonal pair of identical buildings
LINE_BONUS = 5  # Per full row or column of one type (no diagonals)
DIVERSITY_THRESHOLD = 6  # Distinct building types needed for the diversity bonus
DIVERSITY_BONUS = 5

# Tiered bonus on the count of one distinguished type.
# (min_count, bonus) pairs, checked from highest to lowest; first match wins.
TIERED_BUILDING_TYPE = BuildingType.PARK
TIER_BONUSES = (
    (4, 8),
    (3, 5),
    (2, 2),
)

# Round timing
ROUND_DURATION_SEC = 10
COUNTDOWN_INTERVAL_MS = 1000
REVEAL_INTERVAL_MS = 50
REVEAL_STEPS = 20  # Roughly this many increments regardless of magnitude
REVEAL_FINISH_DELAY_MS = 500  # Hold on the final value before finishing
