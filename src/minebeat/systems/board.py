from __future__ import annotations

import logging

from esper import World

from minebeat.components.game_state import GameMode
from minebeat.constants import BOARD_MODES
from minebeat.events.bus import (
    EVENT_BOARD_CHANGED,
    EVENT_BOARD_RESTART_REQUEST,
    EVENT_BOARD_RESTARTED,
    EVENT_CELL_FLAG_REQUEST,
    EVENT_CELL_MUTE_REQUEST,
    EVENT_CELL_REVEAL_REQUEST,
    EVENT_FIRST_REVEAL,
    EVENT_GAME_LOST,
    EVENT_GAME_WON,
    EventBus,
)
from minebeat.systems.grid_engine import GridEngine, RevealResult
from minebeat.systems.grid_ops import require_in_bounds
from minebeat.utils.resources import get_board, get_game_state, get_game_timer
from minebeat.world import replace_board

logger = logging.getLogger(__name__)


class BoardSystem:
    """Routes board commands from the bus to the GridEngine and announces the outcome."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        current = get_board(world)
        self.engine = GridEngine(
            current.rows,
            current.cols,
            current.mine_count,
            rng=getattr(world, "random", None),
        )
        replace_board(world, self.engine.board)
        self.event_bus.subscribe(EVENT_CELL_REVEAL_REQUEST, self.on_reveal_request)
        self.event_bus.subscribe(EVENT_CELL_FLAG_REQUEST, self.on_flag_request)
        self.event_bus.subscribe(EVENT_CELL_MUTE_REQUEST, self.on_mute_request)
        self.event_bus.subscribe(EVENT_BOARD_RESTART_REQUEST, self.on_restart_request)

    def on_reveal_request(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.reveal(row, col)

    def on_flag_request(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.toggle_flag(row, col)

    def on_mute_request(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.toggle_mute(row, col)

    def on_restart_request(self, sender, **kwargs):
        self.restart(kwargs.get('mode'))

    def reveal(self, row: int, col: int) -> RevealResult | None:
        state = get_game_state(self.world)
        if state.finished:
            return None
        first = not self.engine.board.hazards_placed
        result = self.engine.reveal_cell(row, col)
        if not result.revealed:
            return result
        if first:
            state.mode = GameMode.PLAYING
            self.event_bus.emit(EVENT_FIRST_REVEAL, row=row, col=col)
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason='reveal', positions=result.revealed)
        if result.hit_mine:
            state.mode = GameMode.LOST
            state.lost_at = (row, col)
            logger.info("mine hit at (%d, %d)", row, col)
            self.event_bus.emit(EVENT_GAME_LOST, row=row, col=col)
        elif self.engine.check_win():
            state.mode = GameMode.WON
            timer = get_game_timer(self.world)
            self.event_bus.emit(EVENT_GAME_WON, elapsed=timer.elapsed)
        return result

    def toggle_flag(self, row: int, col: int) -> bool | None:
        if get_game_state(self.world).finished:
            return None
        require_in_bounds(self.engine.board, row, col)
        was_flagged = self.engine.board.cells[row][col].flagged
        flagged = self.engine.toggle_flag(row, col)
        if flagged != was_flagged:
            self.event_bus.emit(EVENT_BOARD_CHANGED, reason='flag', positions=[(row, col)])
        return flagged

    def toggle_mute(self, row: int, col: int) -> bool | None:
        if get_game_state(self.world).finished:
            return None
        require_in_bounds(self.engine.board, row, col)
        was_muted = self.engine.board.cells[row][col].muted
        muted = self.engine.toggle_mute(row, col)
        if muted != was_muted:
            self.event_bus.emit(EVENT_BOARD_CHANGED, reason='mute', positions=[(row, col)])
        return muted

    def restart(self, mode: str | None = None) -> None:
        state = get_game_state(self.world)
        if mode is not None:
            if mode not in BOARD_MODES:
                raise ValueError(f"unknown board mode {mode!r}")
            state.board_mode = mode
        rows, cols, mines = BOARD_MODES[state.board_mode]
        board = self.engine.reset(rows, cols, mines)
        replace_board(self.world, board)
        state.mode = GameMode.READY
        state.lost_at = None
        self.event_bus.emit(
            EVENT_BOARD_RESTARTED,
            rows=rows,
            cols=cols,
            mines=mines,
            mode=state.board_mode,
        )
