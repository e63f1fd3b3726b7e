"""Scoring engine for the Ten-Second City puzzle.

Scores a finished board as the sum of six independent terms:
- Base: catalog base score of every building
- Adjacency: bonus per orthogonal pair of identical buildings
- Synergy: table bonus/penalty per orthogonal pair of different buildings
- Lines: bonus per row or column filled with one type
- Diversity: one-off bonus for enough distinct types
- Tier: bonus on the count of the tiered type, one tier only

Every function here is pure: no state, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional

from core.board import Board
from core.rules import RuleSet
from data.loader import load_default_rules


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-term contributions to a board's score."""

    base: int = 0
    adjacency: int = 0
    synergy: int = 0
    lines: int = 0
    diversity: int = 0
    tier: int = 0

    @property
    def total(self) -> int:
        """Total score for the board."""
        return (
            self.base
            + self.adjacency
            + self.synergy
            + self.lines
            + self.diversity
            + self.tier
        )

    def to_dict(self) -> dict[str, int]:
        """Convert to a dictionary including the total."""
        result = asdict(self)
        result["total"] = self.total
        return result


def _resolve(rules: Optional[RuleSet]) -> RuleSet:
    return rules if rules is not None else load_default_rules()


def base_score(board: Board, rules: Optional[RuleSet] = None) -> int:
    """Sum of base scores over all non-empty cells."""
    rules = _resolve(rules)
    return sum(rules.base_score(cell) for cell in board.occupied())


def adjacency_bonus(board: Board, rules: Optional[RuleSet] = None) -> int:
    """Bonus for each unordered orthogonal pair of identical buildings."""
    rules = _resolve(rules)
    pairs = sum(
        1 for a, b in board.adjacent_cells()
        if a is not None and a == b
    )
    return pairs * rules.adjacency_bonus


def synergy_bonus(board: Board, rules: Optional[RuleSet] = None) -> int:
    """Synergy table value for each orthogonal pair of different buildings.

    May be negative.
    """
    rules = _resolve(rules)
    return sum(
        rules.synergy_between(a, b)
        for a, b in board.adjacent_cells()
        if a is not None and b is not None and a != b
    )


def line_bonus(board: Board, rules: Optional[RuleSet] = None) -> int:
    """Bonus for each row or column holding three of the same building."""
    rules = _resolve(rules)
    complete = sum(
        1 for cells in board.line_cells()
        if cells[0] is not None and all(cell == cells[0] for cell in cells)
    )
    return complete * rules.line_bonus


def diversity_bonus(board: Board, rules: Optional[RuleSet] = None) -> int:
    """One-off bonus when enough distinct building types are present."""
    rules = _resolve(rules)
    if len(board.distinct_types()) >= rules.diversity_threshold:
        return rules.diversity_bonus
    return 0


def tier_bonus(board: Board, rules: Optional[RuleSet] = None) -> int:
    """Bonus for the single tier reached by the tiered building's count."""
    rules = _resolve(rules)
    return rules.tier_bonus_for(board.count(rules.tiered_type))


def score_breakdown(board: Board, rules: Optional[RuleSet] = None) -> ScoreBreakdown:
    """Compute every scoring term for a board.

    Args:
        board: The board to score.
        rules: Rule tables to use. Defaults to the bundled rules.

    Returns:
        ScoreBreakdown whose total is the board's score.
    """
    rules = _resolve(rules)
    return ScoreBreakdown(
        base=base_score(board, rules),
        adjacency=adjacency_bonus(board, rules),
        synergy=synergy_bonus(board, rules),
        lines=line_bonus(board, rules),
        diversity=diversity_bonus(board, rules),
        tier=tier_bonus(board, rules),
    )


def score(board: Board, rules: Optional[RuleSet] = None) -> int:
    """Compute the final score of a board.

    An all-empty board scores 0; a single building scores its base value.
    """
    return score_breakdown(board, rules).total
