"""Board model for the Ten-Second City puzzle.

The board is a fixed 3x3 grid stored as a flat, row-major list of cells:
- Index i maps to row i // 3 and column i % 3
- Each cell holds a BuildingType or None (empty)
- Topology is immutable; only occupancy changes, and a filled cell
  is never overwritten until the board is cleared for a new round
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from .constants import BuildingType, GRID_SIZE, NUM_CELLS


# Type aliases for clarity
CellIndex = int
Cell = Optional[BuildingType]
PairKey = tuple[BuildingType, BuildingType]  # Canonical form: sorted by value


def make_pair_key(type_a: BuildingType, type_b: BuildingType) -> PairKey:
    """Create a canonical key for an unordered pair of building types.

    Keys are always stored with the smaller enum value first so that
    lookups give the same result regardless of direction.
    """
    if type_a.value <= type_b.value:
        return (type_a, type_b)
    return (type_b, type_a)


def row_of(index: CellIndex) -> int:
    """Return the row of a cell index."""
    return index // GRID_SIZE


def col_of(index: CellIndex) -> int:
    """Return the column of a cell index."""
    return index % GRID_SIZE


def validate_index(index: CellIndex) -> None:
    """Check that a cell index is on the board.

    Raises:
        ValueError: If the index is outside 0..NUM_CELLS-1.
    """
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < NUM_CELLS:
        raise ValueError(f"Invalid cell index: {index!r} (expected 0..{NUM_CELLS - 1})")


def _build_adjacent_pairs() -> tuple[tuple[CellIndex, CellIndex], ...]:
    pairs = []
    for i in range(NUM_CELLS):
        if col_of(i) < GRID_SIZE - 1:
            pairs.append((i, i + 1))
        if row_of(i) < GRID_SIZE - 1:
            pairs.append((i, i + GRID_SIZE))
    return tuple(pairs)


def _build_lines() -> tuple[tuple[CellIndex, ...], ...]:
    rows = [
        tuple(r * GRID_SIZE + c for c in range(GRID_SIZE))
        for r in range(GRID_SIZE)
    ]
    cols = [
        tuple(r * GRID_SIZE + c for r in range(GRID_SIZE))
        for c in range(GRID_SIZE)
    ]
    return tuple(rows + cols)


# Each unordered orthogonal neighbour pair exactly once (right and bottom
# neighbours only). Diagonals are not adjacent.
ADJACENT_PAIRS = _build_adjacent_pairs()

# Rows then columns. Diagonals are not lines.
LINES = _build_lines()


class Board:
    """The 3x3 building grid.

    Placement is write-once: a cell that holds a building keeps it until
    clear() is called at the start of a new round.
    """

    def __init__(self, cells: Optional[Iterable[Cell]] = None):
        """Initialize the board.

        Args:
            cells: Optional row-major sequence of NUM_CELLS cells. Empty if None.

        Raises:
            ValueError: If the sequence has the wrong length or holds a
                value that is not a BuildingType or None.
        """
        if cells is None:
            self._cells: list[Cell] = [None] * NUM_CELLS
            return

        cells = list(cells)
        if len(cells) != NUM_CELLS:
            raise ValueError(f"Board needs {NUM_CELLS} cells, got {len(cells)}")
        for cell in cells:
            if cell is not None and not isinstance(cell, BuildingType):
                raise ValueError(f"Invalid cell value: {cell!r}")
        self._cells = cells

    @classmethod
    def from_values(cls, values: Iterable[Optional[str]]) -> Board:
        """Build a board from building type values ("house", ..., or None)."""
        return cls(None if v is None else BuildingType(v) for v in values)

    # -------------------------------------------------------------------------
    # Cell access
    # -------------------------------------------------------------------------

    def get(self, index: CellIndex) -> Cell:
        """Return the building at a cell, or None if empty."""
        validate_index(index)
        return self._cells[index]

    def is_empty(self, index: CellIndex) -> bool:
        """Check if a cell has no building."""
        return self.get(index) is None

    def place(self, index: CellIndex, building_type: BuildingType) -> bool:
        """Place a building in an empty cell.

        Returns:
            True if the building was placed, False if the cell was occupied.

        Raises:
            ValueError: If the index is off the board.
        """
        if not self.is_empty(index):
            return False
        self._cells[index] = building_type
        return True

    def clear(self) -> None:
        """Empty every cell."""
        self._cells = [None] * NUM_CELLS

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def empty_indices(self) -> list[CellIndex]:
        """Return indices of all empty cells."""
        return [i for i, cell in enumerate(self._cells) if cell is None]

    def occupied(self) -> list[BuildingType]:
        """Return the buildings on the board in cell order."""
        return [cell for cell in self._cells if cell is not None]

    def count(self, building_type: BuildingType) -> int:
        """Count cells holding a specific building type."""
        return sum(1 for cell in self._cells if cell == building_type)

    def distinct_types(self) -> set[BuildingType]:
        """Return the set of building types present."""
        return set(self.occupied())

    def is_full(self) -> bool:
        """Check if every cell holds a building."""
        return all(cell is not None for cell in self._cells)

    def adjacent_cells(self) -> Iterator[tuple[Cell, Cell]]:
        """Yield the contents of each unordered orthogonal neighbour pair once."""
        for a, b in ADJACENT_PAIRS:
            yield self._cells[a], self._cells[b]

    def line_cells(self) -> Iterator[tuple[Cell, ...]]:
        """Yield the contents of each row and column."""
        for line in LINES:
            yield tuple(self._cells[i] for i in line)

    # -------------------------------------------------------------------------
    # Copying and conversion
    # -------------------------------------------------------------------------

    def clone(self) -> Board:
        """Create an independent copy of this board."""
        return Board(self._cells)

    def as_tuple(self) -> tuple[Cell, ...]:
        """Return the cells as an immutable tuple."""
        return tuple(self._cells)

    def to_values(self) -> list[Optional[str]]:
        """Return the cells as building type values for serialization."""
        return [None if cell is None else cell.value for cell in self._cells]

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    def __len__(self) -> int:
        return NUM_CELLS

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        return f"Board({self.to_values()!r})"
