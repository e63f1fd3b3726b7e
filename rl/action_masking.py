"""Action masking for the Ten-Second City RL environment.

Generates boolean masks indicating which placements are legal. Required
for MaskablePPO to ensure only legal actions are sampled.
"""

from __future__ import annotations

import numpy as np

from core.constants import Phase
from core.round_state import RoundSnapshot
from .config import ActionSpaceConfig, DEFAULT_ACTION_CONFIG


class ActionMaskGenerator:
    """Generates action masks from a round snapshot.

    The mask is a boolean array of shape (total_actions,) where True
    indicates a placement on an empty cell during RUNNING.
    """

    def __init__(self, config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG):
        self.config = config

    def generate_mask(self, snapshot: RoundSnapshot) -> np.ndarray:
        """Generate boolean mask for valid placements."""
        mask = np.zeros(
            (self.config.NUM_CELLS, self.config.BUILDING_TYPES), dtype=np.bool_
        )

        if snapshot.phase == Phase.RUNNING:
            for cell, content in enumerate(snapshot.board):
                if content is None:
                    mask[cell, :] = True

        mask = mask.reshape(-1)

        # Terminal state -> allow everything so the policy has a legal action
        if not mask.any():
            mask[:] = True

        return mask

    def count_valid_actions(self, mask: np.ndarray) -> int:
        return int(mask.sum())

    def is_action_valid(self, action_idx: int, mask: np.ndarray) -> bool:
        return 0 <= action_idx < len(mask) and bool(mask[action_idx])
