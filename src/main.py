"""Entry point for Minebeat, a minesweeper board played as a step sequencer.

Sets up the ECS world, event bus, systems, and Arcade window.
"""
import logging

from arcade import Window, run, set_background_color, color
from minebeat.world import create_world
from minebeat.constants import WINDOW_HEIGHT, WINDOW_WIDTH
from minebeat.events.bus import EVENT_MOUSE_PRESS, EVENT_TICK, EventBus
from minebeat.audio.backend import ArcadeAudioBackend
from minebeat.rendering.intensity_grid import IntensityGrid
from minebeat.systems.audio_router import AudioTriggerRouter
from minebeat.systems.board import BoardSystem
from minebeat.systems.game_timer_system import GameTimerSystem
from minebeat.systems.input import InputSystem
from minebeat.systems.render import RenderSystem
from minebeat.systems.settings_system import SettingsSystem
from minebeat.systems.step_clock import StepClock
from minebeat.systems.wavefront import WavefrontAnimator
from minebeat.utils.resources import get_board, get_game_state, get_synth_params

logger = logging.getLogger(__name__)


class MinebeatWindow(Window):
    def __init__(self):
        super().__init__(WINDOW_WIDTH, WINDOW_HEIGHT, "Minebeat", resizable=True)
        self.set_update_rate(1/60)
        self.event_bus = EventBus()
        self.world = create_world(self.event_bus)

        # Persistence first so the board mode and sounds are known before the board is built.
        self.settings_system = SettingsSystem(self.world, self.event_bus)

        # Board and timing systems
        self.board_system = BoardSystem(self.world, self.event_bus)
        self.game_timer_system = GameTimerSystem(self.world, self.event_bus)
        self.step_clock = StepClock(self.world, self.event_bus)
        self.step_clock.update_interval(get_synth_params(self.world).bpm)

        # Visual and audio systems
        board = get_board(self.world)
        self.intensity = IntensityGrid(board.rows, board.cols, lambda: get_board(self.world))
        self.animator = WavefrontAnimator(self.world, self.event_bus, self.intensity)
        self.audio_backend = ArcadeAudioBackend()
        self.audio_router = AudioTriggerRouter(self.world, self.event_bus, self.audio_backend, self.animator)
        self.render_system = RenderSystem(self.world, self.event_bus, self, self.intensity)

        # Input systems
        self.input_system = InputSystem(
            self.event_bus, self, self.world,
            clock=self.step_clock, animator=self.animator,
            router=self.audio_router, settings=self.settings_system,
        )

        # Build the stored board mode; the router preloads stored samples on this restart.
        self.board_system.restart(get_game_state(self.world).board_mode)
        self.audio_router.on_row_audio_changed(self)
        logger.info("minebeat ready: %s board", get_game_state(self.world).board_mode)

        set_background_color(color.BLACK)

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_update(self, delta_time: float):
        self.audio_router.poll()
        self.event_bus.emit(EVENT_TICK, dt=delta_time)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        self.event_bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=button)

    def on_key_press(self, symbol: int, modifiers: int):
        self.input_system.handle_key_press(symbol, modifiers)

    def on_close(self):
        self.step_clock.stop()
        self.settings_system.save_settings()
        self.audio_backend.shutdown()
        super().on_close()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    window = MinebeatWindow()
    run()

if __name__ == "__main__":
    main()
