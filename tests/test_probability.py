import pytest

from minebeat.errors import InvalidCoordinate
from minebeat.systems.probability import baseline_probability, compute_mine_probability, probability_map
from tests.helpers import board_from_layout


def test_single_candidate_next_to_a_one_is_certain():
    board = board_from_layout([
        "*..",
        "...",
        "...",
    ])
    for r in range(3):
        for c in range(3):
            if (r, c) != (0, 0):
                board.cells[r][c].revealed = True
    # (0,1) reads 1 and (0,0) is its only hidden neighbour
    assert board.cells[0][1].number == 1
    assert compute_mine_probability(board, 0, 0) == 1.0


def test_revealed_and_flagged_cells_have_no_estimate():
    board = board_from_layout([
        "*..",
        "...",
    ])
    board.cells[1][2].revealed = True
    board.cells[0][0].flagged = True
    assert compute_mine_probability(board, 1, 2) is None
    assert compute_mine_probability(board, 0, 0) is None


def test_baseline_used_without_informative_neighbours():
    board = board_from_layout([
        "*...",
        "....",
        "...*",
    ])
    expected = 2 / 12
    assert baseline_probability(board) == pytest.approx(expected)
    assert compute_mine_probability(board, 1, 1) == pytest.approx(expected)


def test_baseline_discounts_flags():
    board = board_from_layout([
        "*...",
        "....",
        "...*",
    ])
    board.cells[0][0].flagged = True
    assert baseline_probability(board) == pytest.approx(1 / 11)


def test_highest_local_ratio_wins():
    board = board_from_layout([
        "*.*",
        "...",
        "...",
    ])
    board.cells[1][1].revealed = True   # reads 2, 7 hidden neighbours
    board.cells[0][1].revealed = True   # reads 2, hidden: (0,0), (0,2), (1,0), (1,2)
    value = compute_mine_probability(board, 0, 0)
    assert value == pytest.approx(2 / 4)


def test_every_estimate_is_a_probability():
    board = board_from_layout([
        "*....",
        "..*..",
        ".....",
        "*...*",
    ])
    board.cells[2][2].revealed = True
    board.cells[0][4].revealed = True
    board.cells[3][2].flagged = True
    grid = probability_map(board)
    for r in range(board.rows):
        for c in range(board.cols):
            cell = board.cells[r][c]
            value = grid[r][c]
            if cell.revealed or cell.flagged:
                assert value is None
            else:
                assert 0.0 <= value <= 1.0


def test_out_of_range_query_raises():
    board = board_from_layout(["*.."])
    with pytest.raises(InvalidCoordinate):
        compute_mine_probability(board, 1, 0)
