from dataclasses import dataclass, field
from typing import List


@dataclass(slots=True)
class Cell:
    """Single board cell.

    ``number`` counts mine neighbours and is only meaningful once hazards are placed.
    A mine's own ``number`` stays 0.
    """
    is_mine: bool = False
    revealed: bool = False
    flagged: bool = False
    muted: bool = False
    number: int = 0


@dataclass(slots=True)
class Board:
    rows: int
    cols: int
    mine_count: int
    cells: List[List[Cell]] = field(default_factory=list)
    hazards_placed: bool = False

    def __post_init__(self):
        if not self.cells:
            self.cells = [[Cell() for _ in range(self.cols)] for _ in range(self.rows)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]
