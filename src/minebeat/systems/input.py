from __future__ import annotations

import logging

from minebeat.constants import BOARD_MODES
from minebeat.events.bus import (
    EVENT_BOARD_RESTART_REQUEST,
    EVENT_CELL_CLICK,
    EVENT_CELL_FLAG_REQUEST,
    EVENT_CELL_MUTE_REQUEST,
    EVENT_CELL_REVEAL_REQUEST,
    EVENT_MOUSE_PRESS,
    EventBus,
)
from minebeat.ui.layout import cell_at_point
from minebeat.utils.resources import get_board, get_game_state

logger = logging.getLogger(__name__)

MOUSE_LEFT = 1
MOUSE_MIDDLE = 2
MOUSE_RIGHT = 4

BPM_NUDGE = 5
MODE_KEYS = tuple(BOARD_MODES)  # number keys 1..4 in declaration order


class InputSystem:
    def __init__(self, event_bus: EventBus, window, world, *, clock=None, animator=None, router=None, settings=None):
        self.event_bus = event_bus
        self.window = window
        self.world = world
        self.clock = clock
        self.animator = animator
        self.router = router
        self.settings = settings
        self.selected_row: int | None = None
        self._auto_started = False
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)

    def on_mouse_press(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        button = kwargs.get('button')
        if x is None or y is None:
            return
        self._start_on_first_gesture()
        if get_game_state(self.world).finished:
            self.event_bus.emit(EVENT_BOARD_RESTART_REQUEST, mode=None)
            return
        board = get_board(self.world)
        hit = cell_at_point(x, y, self.window.width, self.window.height, board.rows, board.cols)
        if hit is None:
            return
        row, col = hit
        self.selected_row = row
        self.event_bus.emit(EVENT_CELL_CLICK, row=row, col=col, button=button)
        if button == MOUSE_LEFT:
            self.event_bus.emit(EVENT_CELL_REVEAL_REQUEST, row=row, col=col)
        elif button == MOUSE_RIGHT:
            self.event_bus.emit(EVENT_CELL_FLAG_REQUEST, row=row, col=col)
        elif button == MOUSE_MIDDLE:
            self.event_bus.emit(EVENT_CELL_MUTE_REQUEST, row=row, col=col)

    def _start_on_first_gesture(self):
        if self._auto_started or self.clock is None:
            return
        self._auto_started = True
        self.clock.start()

    def handle_key_press(self, symbol: int, modifiers: int = 0):
        # Local import keeps tests headless.
        from arcade import key

        if symbol == key.SPACE:
            self.toggle_playback()
        elif symbol == key.R:
            self.restart()
        elif key.KEY_1 <= symbol < key.KEY_1 + len(MODE_KEYS):
            index = symbol - key.KEY_1
            if modifiers & key.MOD_CTRL:
                self.save_slot(index + 1)
            elif modifiers & key.MOD_SHIFT:
                self.load_slot(index + 1)
            else:
                self.restart(MODE_KEYS[index])
        elif symbol == key.Q:
            self.cycle_quality()
        elif symbol == key.P:
            self.toggle_probabilities()
        elif symbol == key.UP:
            self.nudge_bpm(BPM_NUDGE)
        elif symbol == key.DOWN:
            self.nudge_bpm(-BPM_NUDGE)
        elif symbol == key.X:
            self.randomize_rows()
        elif symbol == key.S:
            self.randomize_rows(smart=True)
        elif symbol == key.C:
            self.clear_row_sounds()
        elif symbol == key.BRACKETRIGHT:
            self.cycle_selected_row(1)
        elif symbol == key.BRACKETLEFT:
            self.cycle_selected_row(-1)
        elif symbol == key.DELETE:
            self.reset_selected_row()
        elif symbol == key.BACKSPACE:
            self.reset_synth_params()
        elif symbol == key.E:
            self.export_configs()
        elif symbol == key.I:
            self.import_configs()

    def toggle_playback(self):
        if self.clock is None:
            return
        self._auto_started = True
        self.clock.toggle()

    def restart(self, mode: str | None = None):
        self.event_bus.emit(EVENT_BOARD_RESTART_REQUEST, mode=mode)

    def cycle_quality(self):
        if self.animator is not None:
            self.animator.cycle_quality()

    def toggle_probabilities(self):
        state = get_game_state(self.world)
        state.show_probabilities = not state.show_probabilities

    def nudge_bpm(self, delta: float):
        if self.clock is not None:
            self.clock.update_interval(self.clock.state.bpm + delta)

    # Row sounds

    def randomize_rows(self, smart: bool = False):
        if self.router is not None:
            self.router.randomize_rows(smart=smart)

    def clear_row_sounds(self):
        if self.router is not None:
            self.router.reset_all_rows()

    def cycle_selected_row(self, step: int):
        if self.router is None or self.selected_row is None:
            return
        config = self.router.cycle_row_sound(self.selected_row, step)
        logger.info("row %d now plays %s", self.selected_row, config.sample_ref or "synth")

    def reset_selected_row(self):
        if self.router is not None and self.selected_row is not None:
            self.router.reset_row(self.selected_row)

    # Synth configs

    def reset_synth_params(self):
        if self.settings is not None:
            self.settings.reset_params()

    def save_slot(self, slot: int):
        if self.settings is not None:
            self.settings.save_config(f"slot {slot}")
            logger.info("saved synth config to slot %d", slot)

    def load_slot(self, slot: int):
        if self.settings is not None and not self.settings.load_config(f"slot {slot}"):
            logger.info("slot %d is empty", slot)

    def export_configs(self):
        if self.settings is not None:
            paths = self.settings.export_configs()
            logger.info("exported %d configs to %s", len(paths), self.settings.config_dir)

    def import_configs(self):
        if self.settings is not None:
            names = self.settings.import_configs()
            logger.info("imported %d configs from %s", len(names), self.settings.config_dir)
