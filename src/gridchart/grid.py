from __future__ import annotations

from collections.abc import Iterable

from .types import SIDE_STEPS, Document

# ============================================================================
# Grid index: coordinate -> node index lookup over the ragged source rows
# ============================================================================


class Grid:
    """Dense row/column view of the chart; short rows are padded with empty cells."""

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = rows
        self.cols = cols
        self._cells: dict[tuple[int, int], int] = {}

    @classmethod
    def from_positions(
        cls, positions: Iterable[tuple[int, int]], rows: int, cols: int
    ) -> Grid:
        """Build a grid whose n-th position holds node index n."""
        grid = cls(rows, cols)
        for index, (row, col) in enumerate(positions):
            grid.place(row, col, index)
        return grid

    def place(self, row: int, col: int, index: int) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(f"cell ({row}, {col}) is outside a {self.rows}x{self.cols} grid")
        self._cells[(row, col)] = index

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> int | None:
        """Node index at a cell, or None for empty and out-of-range cells."""
        return self._cells.get((row, col))

    def neighbor(self, row: int, col: int, direction: str) -> int | None:
        """Node index in the cell immediately next to (row, col), if any."""
        d_row, d_col = SIDE_STEPS[direction]
        return self.get(row + d_row, col + d_col)

    def __len__(self) -> int:
        return len(self._cells)


def document_size(document: Document) -> tuple[int, int]:
    """Row and column count of a document's grid, padding ragged rows."""
    rows = len(document.rows)
    cols = max((len(row) for row in document.rows), default=0)
    return rows, cols
