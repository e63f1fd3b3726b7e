"""Rule tables for scoring: building catalog, synergy table and bonuses.

A RuleSet is an immutable value built once (normally by data.loader from
default_rules.json) and shared read-only by every scoring call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .board import PairKey, make_pair_key
from .constants import (
    BuildingType,
    SAME_TYPE_ADJACENCY_BONUS,
    LINE_BONUS,
    DIVERSITY_THRESHOLD,
    DIVERSITY_BONUS,
    TIERED_BUILDING_TYPE,
    TIER_BONUSES,
)


@dataclass(frozen=True)
class BuildingInfo:
    """Catalog entry for a building type.

    Attributes:
        building_type: The building type this entry describes.
        base_score: Points awarded for each placed building (positive).
        glyph: Display glyph for front ends.
    """

    building_type: BuildingType
    base_score: int
    glyph: str


@dataclass(frozen=True)
class RuleSet:
    """Complete scoring rules.

    Attributes:
        catalog: BuildingType -> BuildingInfo, one entry per type.
        synergy: Canonical pair key -> bonus (negative for penalties).
        adjacency_bonus: Bonus per adjacent pair of identical buildings.
        line_bonus: Bonus per full row or column of one type.
        diversity_threshold: Distinct types needed for the diversity bonus.
        diversity_bonus: Bonus for reaching the diversity threshold.
        tiered_type: Building type counted for the tiered bonus.
        tier_bonuses: (min_count, bonus) pairs, highest threshold first.
    """

    catalog: dict[BuildingType, BuildingInfo]
    synergy: dict[PairKey, int] = field(default_factory=dict)
    adjacency_bonus: int = SAME_TYPE_ADJACENCY_BONUS
    line_bonus: int = LINE_BONUS
    diversity_threshold: int = DIVERSITY_THRESHOLD
    diversity_bonus: int = DIVERSITY_BONUS
    tiered_type: BuildingType = TIERED_BUILDING_TYPE
    tier_bonuses: tuple[tuple[int, int], ...] = TIER_BONUSES

    def base_score(self, building_type: BuildingType) -> int:
        """Return the base score of a building type."""
        return self.catalog[building_type].base_score

    def glyph(self, building_type: Optional[BuildingType]) -> str:
        """Return the display glyph for a cell (empty string if empty)."""
        if building_type is None:
            return ""
        return self.catalog[building_type].glyph

    def synergy_between(self, type_a: BuildingType, type_b: BuildingType) -> int:
        """Return the synergy value for an unordered pair (0 if unlisted)."""
        return self.synergy.get(make_pair_key(type_a, type_b), 0)

    def tier_bonus_for(self, count: int) -> int:
        """Return the single tier bonus that applies to a count."""
        for min_count, bonus in sorted(self.tier_bonuses, reverse=True):
            if count >= min_count:
                return bonus
        return 0
