from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List

from minebeat.components.board import Board
from minebeat.systems import grid_ops
from minebeat.systems.grid_ops import Position

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RevealResult:
    hit_mine: bool
    revealed: List[Position] = field(default_factory=list)


class GridEngine:
    """Owns one board: deferred hazard placement, reveal/flag transitions and win check.

    Mines are placed on the first ``reveal_cell`` call, never inside the
    clipped 3x3 neighbourhood of that first cell. After a mine is hit the
    caller must not reveal further cells until ``reset``.
    """

    def __init__(self, rows: int, cols: int, mine_count: int, *, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self.board: Board = grid_ops.create_board(rows, cols, mine_count)

    def reset(self, rows: int | None = None, cols: int | None = None, mine_count: int | None = None) -> Board:
        self.board = grid_ops.create_board(
            self.board.rows if rows is None else rows,
            self.board.cols if cols is None else cols,
            self.board.mine_count if mine_count is None else mine_count,
        )
        return self.board

    def reveal_cell(self, row: int, col: int) -> RevealResult:
        board = self.board
        grid_ops.require_in_bounds(board, row, col)
        cell = board.cells[row][col]
        if cell.revealed or cell.flagged:
            return RevealResult(hit_mine=False)

        if not board.hazards_placed:
            grid_ops.place_hazards(board, row, col, self.rng)
            logger.debug(
                "placed %d mines on %dx%d board avoiding (%d, %d)",
                board.mine_count, board.rows, board.cols, row, col,
            )

        cell.revealed = True
        cell.flagged = False
        if cell.is_mine:
            return RevealResult(hit_mine=True, revealed=[(row, col)])
        if cell.number == 0:
            return RevealResult(hit_mine=False, revealed=grid_ops.flood_reveal(board, row, col))
        return RevealResult(hit_mine=False, revealed=[(row, col)])

    def toggle_flag(self, row: int, col: int) -> bool:
        grid_ops.require_in_bounds(self.board, row, col)
        cell = self.board.cells[row][col]
        if not cell.revealed:
            cell.flagged = not cell.flagged
        return cell.flagged

    def toggle_mute(self, row: int, col: int) -> bool:
        grid_ops.require_in_bounds(self.board, row, col)
        cell = self.board.cells[row][col]
        if not cell.revealed:
            cell.muted = not cell.muted
        return cell.muted

    def check_win(self) -> bool:
        return grid_ops.is_won(self.board)

    def revealed_count(self) -> int:
        return grid_ops.revealed_count(self.board)

    def flagged_count(self) -> int:
        return grid_ops.flagged_count(self.board)

    def mines_remaining(self) -> int:
        return self.board.mine_count - self.flagged_count()
