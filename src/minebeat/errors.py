"""Errors raised by the board engine."""


class InvalidCoordinate(IndexError):
    """A row/column pair outside the board was passed to a board operation."""

    def __init__(self, row: int, col: int, rows: int, cols: int):
        super().__init__(f"cell ({row}, {col}) is outside a {rows}x{cols} board")
        self.row = row
        self.col = col


class InfeasibleMineCount(ValueError):
    """The mine count cannot be placed outside every possible first-move avoid-set."""
