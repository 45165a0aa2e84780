from __future__ import annotations

import random
from collections import deque
from typing import Iterator, List, Set, Tuple

from minebeat.components.board import Board
from minebeat.errors import InfeasibleMineCount, InvalidCoordinate

Position = Tuple[int, int]

NEIGHBOR_OFFSETS: Tuple[Position, ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


def max_avoid_size(rows: int, cols: int) -> int:
    """Largest clipped 3x3 avoid-set a first move can produce on this board."""
    return min(3, rows) * min(3, cols)


def validate_board_config(rows: int, cols: int, mine_count: int) -> None:
    if rows < 1 or cols < 1:
        raise InfeasibleMineCount(f"board must have at least one row and column, got {rows}x{cols}")
    if mine_count < 0:
        raise InfeasibleMineCount(f"mine count must be non-negative, got {mine_count}")
    capacity = rows * cols - max_avoid_size(rows, cols)
    if mine_count > capacity:
        raise InfeasibleMineCount(
            f"{mine_count} mines do not fit on a {rows}x{cols} board "
            f"outside the first-move avoid-set (at most {capacity})"
        )


def create_board(rows: int, cols: int, mine_count: int) -> Board:
    """Empty board with hazards not yet placed."""
    validate_board_config(rows, cols, mine_count)
    return Board(rows=rows, cols=cols, mine_count=mine_count)


def require_in_bounds(board: Board, row: int, col: int) -> None:
    if not board.in_bounds(row, col):
        raise InvalidCoordinate(row, col, board.rows, board.cols)


def neighbors(board: Board, row: int, col: int) -> Iterator[Position]:
    for dr, dc in NEIGHBOR_OFFSETS:
        rr, cc = row + dr, col + dc
        if 0 <= rr < board.rows and 0 <= cc < board.cols:
            yield rr, cc


def avoid_set(board: Board, row: int, col: int) -> Set[Position]:
    """The first move and its neighbours, clipped at the board edges."""
    avoided = {(row, col)}
    avoided.update(neighbors(board, row, col))
    return avoided


def place_hazards(board: Board, safe_row: int, safe_col: int, rng: random.Random) -> List[Position]:
    """Mine ``board.mine_count`` cells chosen uniformly outside the avoid-set.

    Shuffles the eligible cells and takes a prefix, so it always terminates.
    """
    avoided = avoid_set(board, safe_row, safe_col)
    candidates = [
        (r, c)
        for r in range(board.rows)
        for c in range(board.cols)
        if (r, c) not in avoided
    ]
    if board.mine_count > len(candidates):
        raise InfeasibleMineCount(
            f"only {len(candidates)} cells are eligible for {board.mine_count} mines"
        )
    rng.shuffle(candidates)
    mines = candidates[:board.mine_count]
    for r, c in mines:
        board.cells[r][c].is_mine = True
    compute_numbers(board)
    board.hazards_placed = True
    return mines


def compute_numbers(board: Board) -> None:
    for r in range(board.rows):
        for c in range(board.cols):
            cell = board.cells[r][c]
            if cell.is_mine:
                continue
            cell.number = sum(1 for rr, cc in neighbors(board, r, c) if board.cells[rr][cc].is_mine)


def flood_reveal(board: Board, row: int, col: int) -> List[Position]:
    """Breadth-first reveal of the zero region around (row, col).

    Flagged cells are never entered; numbered cells are revealed but stop the
    spread. Returns the positions visited, in visit order.
    """
    queue = deque([(row, col)])
    visited: Set[Position] = set()
    order: List[Position] = []
    while queue:
        r, c = queue.popleft()
        if (r, c) in visited:
            continue
        visited.add((r, c))
        cell = board.cells[r][c]
        cell.revealed = True
        cell.flagged = False
        order.append((r, c))
        if cell.number != 0:
            continue
        for rr, cc in neighbors(board, r, c):
            neighbor = board.cells[rr][cc]
            if not neighbor.revealed and not neighbor.flagged:
                queue.append((rr, cc))
    return order


def is_won(board: Board) -> bool:
    for row in board.cells:
        for cell in row:
            if not cell.is_mine and not cell.revealed:
                return False
    return True


def revealed_count(board: Board) -> int:
    return sum(1 for row in board.cells for cell in row if cell.revealed)


def flagged_count(board: Board) -> int:
    return sum(1 for row in board.cells for cell in row if cell.flagged)


def mine_positions(board: Board) -> List[Position]:
    return [
        (r, c)
        for r in range(board.rows)
        for c in range(board.cols)
        if board.cells[r][c].is_mine
    ]
