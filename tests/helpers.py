"""Shared fixtures-by-hand for the test suite."""
from __future__ import annotations

import random
from concurrent.futures import Future
from typing import Any, Dict, List, Sequence, Tuple

from minebeat.components.board import Board
from minebeat.events.bus import EventBus
from minebeat.systems.board import BoardSystem
from minebeat.systems.grid_ops import compute_numbers
from minebeat.world import create_world, replace_board


class DummyWindow:
    def __init__(self, width=960, height=760):
        self.width = width
        self.height = height


class DummySink:
    """CellSink that records writes; ``revealed`` marks cells the animator must skip."""

    def __init__(self, rows: int, cols: int, revealed: Sequence[Tuple[int, int]] = ()):
        self.rows = rows
        self.cols = cols
        self.values: Dict[Tuple[int, int], float] = {}
        self.revealed = set(revealed)
        self.writes: List[Tuple[int, int, float]] = []
        self.resized: List[Tuple[int, int]] = []

    def set_intensity(self, row, col, value):
        self.values[(row, col)] = value
        self.writes.append((row, col, value))

    def intensity(self, row, col):
        return self.values.get((row, col), 1.0)

    def is_revealed(self, row, col):
        return (row, col) in self.revealed

    def resize(self, rows, cols):
        self.rows = rows
        self.cols = cols
        self.values.clear()
        self.resized.append((rows, cols))


class FakeBackend:
    def __init__(self):
        self.notes: List[Tuple[float, float]] = []
        self.samples: List[Tuple[Any, float]] = []
        self.loads: Dict[str, Future] = {}

    def play_synthesized_note(self, frequency, params, volume=1.0):
        self.notes.append((frequency, volume))

    def play_sample(self, buffer, volume=1.0):
        self.samples.append((buffer, volume))

    def load_sample(self, ref):
        future: Future = Future()
        self.loads[ref] = future
        return future


def board_from_layout(layout: Sequence[str]) -> Board:
    """Build a hazard-placed board from strings where '*' marks a mine."""
    rows = len(layout)
    cols = len(layout[0])
    mines = sum(line.count('*') for line in layout)
    board = Board(rows=rows, cols=cols, mine_count=mines)
    for r, line in enumerate(layout):
        for c, ch in enumerate(line):
            board.cells[r][c].is_mine = ch == '*'
    compute_numbers(board)
    board.hazards_placed = True
    return board


def make_game(board_mode: str = "small", seed: int = 7):
    bus = EventBus()
    world = create_world(bus, board_mode=board_mode, rng=random.Random(seed))
    board_system = BoardSystem(world, bus)
    return bus, world, board_system


def install_board(world, board_system: BoardSystem, board: Board) -> Board:
    board_system.engine.board = board
    replace_board(world, board)
    return board


def record(bus: EventBus, name: str) -> List[Dict[str, Any]]:
    received: List[Dict[str, Any]] = []
    bus.subscribe(name, lambda sender, **payload: received.append(payload))
    return received
