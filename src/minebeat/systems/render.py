from __future__ import annotations

from esper import World

from minebeat.components.game_state import GameMode
from minebeat.constants import TOP_MARGIN
from minebeat.events.bus import (
    EVENT_AUDIO_WARNING,
    EVENT_BOARD_CHANGED,
    EVENT_BOARD_RESTARTED,
    EVENT_TICK,
    EventBus,
)
from minebeat.rendering.board_renderer import BoardRenderer
from minebeat.rendering.intensity_grid import IntensityGrid
from minebeat.systems.grid_ops import flagged_count
from minebeat.systems.probability import probability_map
from minebeat.ui.layout import compute_board_geometry
from minebeat.utils.resources import (
    get_board,
    get_game_state,
    get_game_timer,
    get_ripple_settings,
    get_sequencer_state,
)

WARNING_SECONDS = 4.0
STATUS_TEXT = {
    GameMode.READY: "Click to reveal. Right click flags a note.",
    GameMode.PLAYING: "",
    GameMode.WON: "Cleared! Click to play again.",
    GameMode.LOST: "Boom. Click to restart.",
}


class RenderSystem:
    def __init__(self, world: World, event_bus: EventBus, window, intensity: IntensityGrid):
        self.world = world
        self.event_bus = event_bus
        self.window = window
        self.intensity = intensity
        self._board_renderer = BoardRenderer(self, intensity)
        self._last_cell_layout: dict = {}
        self._warning: str | None = None
        self._warning_left = 0.0
        self._probabilities = None
        self._probabilities_board = None
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_AUDIO_WARNING, self.on_audio_warning)
        self.event_bus.subscribe(EVENT_BOARD_RESTARTED, self.on_board_restarted)
        self.event_bus.subscribe(EVENT_BOARD_CHANGED, self.on_board_changed)

    def on_tick(self, sender, **kwargs):
        if self._warning_left > 0:
            self._warning_left -= float(kwargs.get('dt', 1/60))
            if self._warning_left <= 0:
                self._warning = None

    def on_audio_warning(self, sender, **kwargs):
        self._warning = f"Sample {kwargs.get('ref')} unavailable, using synth"
        self._warning_left = WARNING_SECONDS

    def on_board_restarted(self, sender, **kwargs):
        self._last_cell_layout = {}
        self._probabilities = None

    def on_board_changed(self, sender, **kwargs):
        self._probabilities = None

    def probabilities(self, board):
        """Mine estimates for ``board``, recomputed only after the board changes."""
        if not board.hazards_placed:
            return None
        if self._probabilities is None or self._probabilities_board is not board:
            self._probabilities = probability_map(board)
            self._probabilities_board = board
        return self._probabilities

    def hud_lines(self) -> list[str]:
        board = get_board(self.world)
        state = get_game_state(self.world)
        seq = get_sequencer_state(self.world)
        timer = get_game_timer(self.world)
        left = f"Mines {board.mine_count - flagged_count(board)}   Time {int(timer.elapsed)}s"
        right = (
            f"{state.board_mode}  {seq.bpm:g} bpm  "
            f"{'playing' if seq.running else 'stopped'}  ripple {get_ripple_settings(self.world).quality}"
        )
        status = self._warning or STATUS_TEXT.get(state.mode, "")
        return [left, right, status]

    def process(self):
        # Local import keeps tests headless without creating a window.
        import arcade
        headless = False
        try:
            arcade.get_window()
        except Exception:
            headless = True
        board = get_board(self.world)
        state = get_game_state(self.world)
        seq = get_sequencer_state(self.world)
        geometry = compute_board_geometry(self.window.width, self.window.height, board.rows, board.cols)
        playhead = seq.last_step if seq.running else None
        self._board_renderer.render(
            arcade,
            board,
            geometry,
            playhead=playhead,
            lost_at=state.lost_at,
            probabilities=self.probabilities(board) if state.show_probabilities else None,
            headless=headless,
        )
        if headless:
            return
        left, right, status = self.hud_lines()
        top = self.window.height - TOP_MARGIN / 2
        arcade.draw_text(left, 16, top, arcade.color.WHITE, 14, anchor_y="center")
        arcade.draw_text(right, self.window.width - 16, top, arcade.color.WHITE, 14, anchor_x="right", anchor_y="center")
        if status:
            arcade.draw_text(status, self.window.width / 2, top - 24, arcade.color.LIGHT_GRAY, 12, anchor_x="center", anchor_y="center")
