"""Tests for engine/scoring.py - the board scoring engine.

Tests cover:
1. Each scoring term in isolation
2. Pair counting (once per unordered pair, no diagonals)
3. Thresholds for lines, diversity and tiers
4. Additivity of the terms
5. Non-negative totals under the default rules
"""

import itertools
import random
from dataclasses import replace

import pytest

from core.board import Board, ADJACENT_PAIRS
from core.constants import BuildingType, NUM_CELLS
from data.loader import load_default_rules
from engine.scoring import (
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


H = BuildingType.HOUSE
O = BuildingType.OFFICE
S = BuildingType.SHOP
P = BuildingType.PARK
F = BuildingType.FACTORY
K = BuildingType.SKYSCRAPER
SC = BuildingType.SCHOOL
HO = BuildingType.HOSPITAL
ST = BuildingType.STADIUM
L = BuildingType.LIBRARY


def make_board(placements: dict) -> Board:
    """Build a board from {cell_index: BuildingType}."""
    cells = [None] * NUM_CELLS
    for index, building_type in placements.items():
        cells[index] = building_type
    return Board(cells)


@pytest.fixture
def rules():
    return load_default_rules()


# =============================================================================
# Base Score Tests
# =============================================================================

class TestBaseScore:
    """Test base scores and trivial boards."""

    def test_empty_board_scores_zero(self):
        board = Board()
        assert score(board) == 0
        assert score_breakdown(board) == ScoreBreakdown()

    @pytest.mark.parametrize("building_type", list(BuildingType))
    def test_single_building_scores_base(self, rules, building_type):
        board = make_board({4: building_type})
        assert score(board) == rules.base_score(building_type)

    def test_base_sum(self):
        board = make_board({0: H, 4: P, 8: F})
        assert base_score(board) == 3 + 5 + 4


# =============================================================================
# Adjacency Tests
# =============================================================================

class TestAdjacency:
    """Test the same-type adjacency bonus."""

    def test_horizontal_pair_counted_once(self):
        """Two adjacent houses score 2*3 + 2, never + 4."""
        board = make_board({0: H, 1: H})
        assert adjacency_bonus(board) == 2
        assert score(board) == 2 * 3 + 2

    def test_vertical_pair_counted_once(self):
        board = make_board({0: H, 3: H})
        assert adjacency_bonus(board) == 2
        assert score(board) == 8

    def test_diagonal_not_adjacent(self):
        board = make_board({0: H, 4: H})
        assert adjacency_bonus(board) == 0
        assert score(board) == 6

    def test_row_wrap_not_adjacent(self):
        """Cell 2 (end of row 0) is not next to cell 3 (start of row 1)."""
        board = make_board({2: H, 3: H})
        assert adjacency_bonus(board) == 0

    def test_different_types_no_adjacency_bonus(self):
        board = make_board({0: H, 1: P})
        assert adjacency_bonus(board) == 0

    def test_full_board_of_one_type(self):
        """All twelve pairs qualify."""
        board = Board([H] * NUM_CELLS)
        assert adjacency_bonus(board) == 2 * len(ADJACENT_PAIRS)


# =============================================================================
# Synergy Tests
# =============================================================================

class TestSynergy:
    """Test the synergy bonus and penalty."""

    def test_house_park_synergy(self):
        board = make_board({0: H, 1: P})
        assert synergy_bonus(board) == 2
        assert score(board) == 3 + 5 + 2

    def test_synergy_symmetric_across_swap(self):
        """A left of B scores the same as B left of A."""
        for a, b in [(H, P), (S, O), (F, P), (SC, L)]:
            left = make_board({0: a, 1: b})
            right = make_board({0: b, 1: a})
            assert score(left) == score(right)

    def test_synergy_counted_once_per_pair(self):
        board = make_board({4: S, 5: O})
        assert synergy_bonus(board) == 1

    def test_negative_synergy(self):
        board = make_board({0: F, 1: P})
        assert synergy_bonus(board) == -2
        assert score(board) == 4 + 5 - 2

    def test_unlisted_pair_contributes_zero(self):
        board = make_board({0: ST, 1: L})
        assert synergy_bonus(board) == 0

    def test_diagonal_no_synergy(self):
        board = make_board({0: H, 4: P})
        assert synergy_bonus(board) == 0

    def test_same_type_no_synergy(self):
        board = make_board({0: P, 1: P})
        assert synergy_bonus(board) == 0

    def test_multiple_neighbours(self):
        """A centre park touching four houses gets four synergies."""
        board = make_board({4: P, 1: H, 3: H, 5: H, 7: H})
        assert synergy_bonus(board) == 4 * 2


# =============================================================================
# Line Tests
# =============================================================================

class TestLines:
    """Test the full row/column bonus."""

    def test_full_row(self):
        board = make_board({0: H, 1: H, 2: H})
        assert line_bonus(board) == 5
        assert score(board) == 9 + 2 * 2 + 5

    def test_full_column(self):
        board = make_board({1: S, 4: S, 7: S})
        assert line_bonus(board) == 5

    def test_mixed_row_no_bonus(self):
        board = make_board({0: H, 1: H, 2: P})
        assert line_bonus(board) == 0

    def test_partial_row_no_bonus(self):
        board = make_board({0: H, 1: H})
        assert line_bonus(board) == 0

    def test_diagonals_excluded(self):
        """Both diagonals filled with one type add nothing."""
        board = make_board({0: H, 2: H, 4: H, 6: H, 8: H})
        assert line_bonus(board) == 0
        assert score(board) == 5 * 3

    def test_lines_additive(self):
        """A full board of one type completes all six lines."""
        board = Board([H] * NUM_CELLS)
        assert line_bonus(board) == 6 * 5
        assert score(board) == 27 + 24 + 30


# =============================================================================
# Diversity Tests
# =============================================================================

class TestDiversity:
    """Test the distinct-type bonus."""

    def test_five_types_no_bonus(self):
        board = make_board({0: H, 2: O, 4: S, 6: P, 8: F})
        assert diversity_bonus(board) == 0

    def test_six_types_bonus(self):
        board = make_board({0: H, 1: O, 2: S, 3: P, 4: F, 5: K})
        assert diversity_bonus(board) == 5

    def test_bonus_awarded_once(self):
        board = Board([H, O, S, P, F, K, SC, HO, ST])
        assert diversity_bonus(board) == 5

    def test_repeats_do_not_count(self):
        board = Board([H, H, H, O, O, O, S, S, S])
        assert diversity_bonus(board) == 0


# =============================================================================
# Tier Tests
# =============================================================================

class TestTiers:
    """Test the park-count tier bonus."""

    @pytest.mark.parametrize("parks,expected", [
        (0, 0), (1, 0), (2, 2), (3, 5), (4, 8), (5, 8), (9, 8),
    ])
    def test_tiers(self, parks, expected):
        board = make_board({i: P for i in range(parks)})
        assert tier_bonus(board) == expected

    def test_tiers_mutually_exclusive(self):
        """Three parks award +5, never +2+5."""
        board = make_board({0: P, 4: P, 8: P})
        assert score_breakdown(board).tier == 5

    def test_other_types_not_counted(self):
        board = make_board({0: H, 1: H, 2: H, 3: H})
        assert tier_bonus(board) == 0


# =============================================================================
# Whole-Board Tests
# =============================================================================

class TestWholeBoard:
    """Test complete boards and the additivity law."""

    def test_end_to_end_example(self):
        """[house, house, -, park, -, -, -, -, -] scores 15."""
        board = Board([H, H, None, P, None, None, None, None, None])
        breakdown = score_breakdown(board)
        assert breakdown.base == 11
        assert breakdown.adjacency == 2
        assert breakdown.synergy == 2
        assert breakdown.lines == 0
        assert breakdown.diversity == 0
        assert breakdown.tier == 0
        assert score(board) == 15

    def test_mixed_full_board(self):
        board = Board([H, H, P, P, SC, L, F, P, O])
        breakdown = score_breakdown(board)
        assert breakdown.base == 33
        assert breakdown.adjacency == 2
        assert breakdown.synergy == 5
        assert breakdown.lines == 0
        assert breakdown.diversity == 5
        assert breakdown.tier == 5
        assert score(board) == 50

    def test_additivity_on_random_boards(self):
        rng = random.Random(1234)
        choices = [None] + list(BuildingType)
        for _ in range(300):
            board = Board(rng.choice(choices) for _ in range(NUM_CELLS))
            expected = (
                base_score(board)
                + adjacency_bonus(board)
                + synergy_bonus(board)
                + line_bonus(board)
                + diversity_bonus(board)
                + tier_bonus(board)
            )
            assert score(board) == expected

    def test_deterministic(self):
        board = Board([H, O, S, P, F, K, SC, HO, ST])
        assert score(board) == score(board.clone())

    def test_scoring_does_not_mutate_board(self):
        board = Board([H, P, None, None, F, None, None, None, None])
        before = board.as_tuple()
        score(board)
        assert board.as_tuple() == before

    def test_breakdown_to_dict(self):
        data = score_breakdown(make_board({0: H, 1: H})).to_dict()
        assert data["total"] == 8
        assert data["adjacency"] == 2

    def test_custom_rules(self, rules):
        custom = replace(rules, line_bonus=100)
        board = make_board({0: H, 1: H, 2: H})
        assert score(board, custom) == score(board, rules) - 5 + 100


# =============================================================================
# Non-negativity Tests
# =============================================================================

class TestNonNegative:
    """Totals stay non-negative for every reachable board."""

    def test_per_cell_bound(self, rules):
        """Each cell's base covers half of four worst-case penalties.

        Splitting every pair's synergy evenly between its two cells, a cell
        contributes at least base + 4 * (worst / 2). All other terms are
        non-negative, so this bound holding for every type proves every
        board totals >= 0.
        """
        for building_type in BuildingType:
            worst = min(
                [0] + [rules.synergy_between(building_type, other)
                       for other in BuildingType if other != building_type]
            )
            assert rules.base_score(building_type) + 2 * worst >= 0

    def test_non_synergy_terms_non_negative(self, rules):
        assert rules.adjacency_bonus >= 0
        assert rules.line_bonus >= 0
        assert rules.diversity_bonus >= 0
        assert all(bonus >= 0 for _, bonus in rules.tier_bonuses)

    def test_exhaustive_factory_park_boards(self):
        """Every board of factories, parks and gaps scores >= 0."""
        for cells in itertools.product([None, F, P], repeat=NUM_CELLS):
            assert score(Board(cells)) >= 0

    def test_random_boards_non_negative(self):
        rng = random.Random(99)
        choices = [None] + list(BuildingType)
        for _ in range(2000):
            board = Board(rng.choice(choices) for _ in range(NUM_CELLS))
            assert score(board) >= 0
