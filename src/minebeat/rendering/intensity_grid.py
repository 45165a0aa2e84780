from __future__ import annotations

from typing import Callable, List, Protocol

from minebeat.components.board import Board
from minebeat.constants import BASE_INTENSITY


class CellSink(Protocol):
    """Where the wavefront animator writes per-cell brightness."""

    def set_intensity(self, row: int, col: int, value: float) -> None: ...

    def intensity(self, row: int, col: int) -> float: ...

    def is_revealed(self, row: int, col: int) -> bool: ...


class IntensityGrid:
    """Row-major intensity buffer the board renderer multiplies cell colours by.

    ``board_provider`` is called on every ``is_revealed`` query so the grid
    always reads the current board, even after a restart replaced it.
    """

    def __init__(self, rows: int, cols: int, board_provider: Callable[[], Board] | None = None):
        self._board_provider = board_provider
        self.rows = 0
        self.cols = 0
        self._values: List[float] = []
        self.resize(rows, cols)

    def resize(self, rows: int, cols: int) -> None:
        self.rows = rows
        self.cols = cols
        self._values = [BASE_INTENSITY] * (rows * cols)

    def reset(self) -> None:
        self._values = [BASE_INTENSITY] * (self.rows * self.cols)

    def _index(self, row: int, col: int) -> int | None:
        if row < 0 or row >= self.rows or col < 0 or col >= self.cols:
            return None
        return row * self.cols + col

    def set_intensity(self, row: int, col: int, value: float) -> None:
        idx = self._index(row, col)
        if idx is not None:
            self._values[idx] = value

    def intensity(self, row: int, col: int) -> float:
        idx = self._index(row, col)
        if idx is None:
            return BASE_INTENSITY
        return self._values[idx]

    def is_revealed(self, row: int, col: int) -> bool:
        if self._board_provider is None:
            return False
        board = self._board_provider()
        if not board.in_bounds(row, col):
            return False
        return board.cells[row][col].revealed
