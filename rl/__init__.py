"""Reinforcement Learning module for the Ten-Second City puzzle.

This module provides a Gymnasium-compatible environment for training
placement agents with MaskablePPO and action masking.

Key components:
- CityEnv: Core Gymnasium environment
- ObservationEncoder: Snapshot to tensor encoding
- ActionMapping: Flat index to placement mapping
- ActionMaskGenerator: Legal placement masks
"""

from .config import (
    ObservationConfig,
    ActionSpaceConfig,
    EnvConfig,
    DEFAULT_OBS_CONFIG,
    DEFAULT_ACTION_CONFIG,
    DEFAULT_ENV_CONFIG,
)
from .observation import ObservationEncoder
from .action_space import ActionMapping, BUILDING_ORDER
from .action_masking import ActionMaskGenerator
from .city_env import CityEnv, make_city_env

__all__ = [
    # Config
    "ObservationConfig",
    "ActionSpaceConfig",
    "EnvConfig",
    "DEFAULT_OBS_CONFIG",
    "DEFAULT_ACTION_CONFIG",
    "DEFAULT_ENV_CONFIG",
    # Components
    "ObservationEncoder",
    "ActionMapping",
    "BUILDING_ORDER",
    "ActionMaskGenerator",
    # Environment
    "CityEnv",
    "make_city_env",
]
