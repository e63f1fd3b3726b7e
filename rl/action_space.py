"""Discrete action space for the Ten-Second City RL environment.

Every action is a (building type, cell) placement flattened into one index.
"""

from __future__ import annotations

from core.board import CellIndex, validate_index
from core.constants import BuildingType
from .config import ActionSpaceConfig, DEFAULT_ACTION_CONFIG

BUILDING_ORDER: tuple[BuildingType, ...] = tuple(BuildingType)


class ActionMapping:
    """Bidirectional mapping between action indices and placements."""

    def __init__(self, config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG):
        self.config = config

    def index_to_action(self, index: int) -> tuple[BuildingType, CellIndex]:
        """Convert a flat index to (building_type, cell_index).

        Raises:
            ValueError: If the index is out of range.
        """
        if not 0 <= index < self.config.total_actions:
            raise ValueError(
                f"Action index {index} out of range 0..{self.config.total_actions - 1}"
            )
        cell, type_idx = divmod(int(index), self.config.BUILDING_TYPES)
        return BUILDING_ORDER[type_idx], cell

    def action_to_index(self, building_type: BuildingType, cell: CellIndex) -> int:
        """Convert a placement to its flat index.

        Raises:
            ValueError: If the cell is off the board.
        """
        validate_index(cell)
        return cell * self.config.BUILDING_TYPES + BUILDING_ORDER.index(building_type)
