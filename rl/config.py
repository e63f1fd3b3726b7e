"""Configuration constants for the Ten-Second City RL environment.

This module defines the observation and action space sizes and the
environment's timing.
"""

from dataclasses import dataclass, field
from typing import ClassVar

from core.constants import BuildingType, Phase, NUM_CELLS
from engine.config import RoundConfig


@dataclass(frozen=True)
class ObservationConfig:
    """Configuration for observation tensor dimensions.

    Layout:
    1. Cells [NUM_CELLS x CELL_STATES] one-hot (empty + one per building type)
    2. Remaining time [1] normalized to [0, 1]
    3. Phase [PHASES] one-hot
    """

    NUM_CELLS: int = NUM_CELLS
    CELL_STATES: int = len(BuildingType) + 1
    PHASES: int = len(Phase)

    TIME_FEATURE_DIM: ClassVar[int] = 1

    @property
    def board_features_size(self) -> int:
        """Total size of the cell features."""
        return self.NUM_CELLS * self.CELL_STATES

    @property
    def total_observation_dim(self) -> int:
        """Total dimension of the flat observation tensor."""
        return self.board_features_size + self.TIME_FEATURE_DIM + self.PHASES


@dataclass(frozen=True)
class ActionSpaceConfig:
    """Configuration for the discrete action space.

    Action index = cell * BUILDING_TYPES + building type index.
    """

    NUM_CELLS: int = NUM_CELLS
    BUILDING_TYPES: int = len(BuildingType)

    @property
    def total_actions(self) -> int:
        """Total number of discrete actions."""
        return self.NUM_CELLS * self.BUILDING_TYPES


@dataclass(frozen=True)
class EnvConfig:
    """Timing of the environment.

    Attributes:
        round_config: Round timing used by the underlying engine.
        think_time_ms: Virtual time that passes after each placement.
        drain_step_ms: Virtual time step used to run out the clock
            once no more placements can be made.
    """

    round_config: RoundConfig = field(default_factory=RoundConfig)
    think_time_ms: int = 1000
    drain_step_ms: int = 1000


DEFAULT_OBS_CONFIG = ObservationConfig()
DEFAULT_ACTION_CONFIG = ActionSpaceConfig()
DEFAULT_ENV_CONFIG = EnvConfig()
