"""Local mine-probability heuristic.

This is not a constraint solver: each revealed number is looked at on its own
and the most pessimistic of those local ratios wins. It can both over- and
under-estimate the exact probability.
"""
from __future__ import annotations

from typing import List, Optional

from minebeat.components.board import Board
from minebeat.systems.grid_ops import flagged_count, neighbors, require_in_bounds, revealed_count


def baseline_probability(board: Board) -> float:
    flagged = flagged_count(board)
    unknown = board.rows * board.cols - revealed_count(board) - flagged
    return (board.mine_count - flagged) / max(1, unknown)


def compute_mine_probability(board: Board, row: int, col: int, *, baseline: float | None = None) -> Optional[float]:
    require_in_bounds(board, row, col)
    cell = board.cells[row][col]
    if cell.revealed or cell.flagged:
        return None

    local: float | None = None
    for nr, nc in neighbors(board, row, col):
        hint = board.cells[nr][nc]
        if not hint.revealed or hint.number <= 0:
            continue
        flagged_around = 0
        unknown_around = 0
        for rr, cc in neighbors(board, nr, nc):
            other = board.cells[rr][cc]
            if other.flagged:
                flagged_around += 1
            elif not other.revealed:
                unknown_around += 1
        remaining = hint.number - flagged_around
        if unknown_around > 0 and remaining > 0:
            estimate = remaining / unknown_around
            if local is None or estimate > local:
                local = estimate

    if local is None:
        local = baseline_probability(board) if baseline is None else baseline
    return max(0.0, min(1.0, local))


def probability_map(board: Board) -> List[List[Optional[float]]]:
    """Estimate for every cell; the baseline is computed once for the whole board."""
    baseline = baseline_probability(board)
    return [
        [compute_mine_probability(board, r, c, baseline=baseline) for c in range(board.cols)]
        for r in range(board.rows)
    ]
