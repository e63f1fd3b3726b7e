"""Observation encoding for the Ten-Second City RL environment.

Encodes a RoundSnapshot into a flat numpy array suitable for
neural network input.
"""

from __future__ import annotations

import numpy as np

from core.constants import BuildingType, Phase
from core.round_state import RoundSnapshot
from .config import ObservationConfig, DEFAULT_OBS_CONFIG

_TYPE_INDEX = {building_type: i + 1 for i, building_type in enumerate(BuildingType)}
_PHASE_INDEX = {phase: i for i, phase in enumerate(Phase)}


class ObservationEncoder:
    """Encodes RoundSnapshot into flat observation tensor.

    All features are in the [0, 1] range.
    """

    def __init__(self, config: ObservationConfig = DEFAULT_OBS_CONFIG, duration_sec: int = 10):
        """Initialize the encoder.

        Args:
            config: Observation configuration defining tensor dimensions.
            duration_sec: Round length used to normalize remaining time.
        """
        self.config = config
        self.duration_sec = duration_sec

    @property
    def observation_dim(self) -> int:
        """Total dimension of the flat observation tensor."""
        return self.config.total_observation_dim

    def encode(self, snapshot: RoundSnapshot) -> np.ndarray:
        """Encode a snapshot.

        Returns:
            Flat numpy array of shape (total_observation_dim,) with dtype float32.
        """
        obs = np.zeros(self.config.total_observation_dim, dtype=np.float32)

        cells = obs[:self.config.board_features_size].reshape(
            self.config.NUM_CELLS, self.config.CELL_STATES
        )
        for i, cell in enumerate(snapshot.board):
            cells[i, 0 if cell is None else _TYPE_INDEX[cell]] = 1.0

        offset = self.config.board_features_size
        obs[offset] = np.clip(snapshot.remaining_seconds / self.duration_sec, 0.0, 1.0)
        offset += self.config.TIME_FEATURE_DIM

        obs[offset + _PHASE_INDEX[snapshot.phase]] = 1.0
        return obs

    def decode_board(self, obs: np.ndarray) -> list:
        """Recover the board cells from an observation (for debugging)."""
        building_types = list(BuildingType)
        cells = obs[:self.config.board_features_size].reshape(
            self.config.NUM_CELLS, self.config.CELL_STATES
        )
        board = []
        for row in cells:
            idx = int(np.argmax(row))
            board.append(None if idx == 0 else building_types[idx - 1])
        return board
