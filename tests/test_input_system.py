import json

from minebeat.components.row_audio import AudioMode
from minebeat.events.bus import (
    EVENT_BOARD_RESTART_REQUEST,
    EVENT_CELL_CLICK,
    EVENT_CELL_FLAG_REQUEST,
    EVENT_CELL_MUTE_REQUEST,
    EVENT_CELL_REVEAL_REQUEST,
    EVENT_MOUSE_PRESS,
    EVENT_ROW_AUDIO_CHANGED,
)
from minebeat.components.game_state import GameMode
from minebeat.systems.audio_router import AudioTriggerRouter
from minebeat.systems.input import MOUSE_LEFT, MOUSE_MIDDLE, MOUSE_RIGHT, InputSystem
from minebeat.systems.settings_system import SettingsSystem
from minebeat.systems.step_clock import StepClock
from minebeat.systems.wavefront import WavefrontAnimator
from minebeat.ui.layout import cell_at_point, compute_board_geometry
from minebeat.utils.resources import get_game_state, get_row_audio, get_sequencer_state, get_synth_params
from tests.helpers import DummySink, DummyWindow, FakeBackend, make_game, record


def centre_of(window, row, col, rows=9, cols=9):
    tile, start_x, start_y = compute_board_geometry(window.width, window.height, rows, cols)
    return start_x + col * tile + tile / 2, start_y + (rows - 1 - row) * tile + tile / 2


def test_layout_maps_top_row_to_top_of_window():
    tile, start_x, start_y = compute_board_geometry(960, 760, 9, 9)
    assert cell_at_point(start_x + 1, start_y + 1, 960, 760, 9, 9) == (8, 0)
    assert cell_at_point(start_x + 9 * tile - 1, start_y + 9 * tile - 1, 960, 760, 9, 9) == (0, 8)
    assert cell_at_point(start_x - 1, start_y + 1, 960, 760, 9, 9) is None
    assert cell_at_point(start_x + 1, start_y + 9 * tile + 1, 960, 760, 9, 9) is None


def test_mouse_buttons_map_to_board_commands():
    bus, world, _ = make_game()
    window = DummyWindow()
    InputSystem(bus, window, world)
    clicks = record(bus, EVENT_CELL_CLICK)
    reveals = record(bus, EVENT_CELL_REVEAL_REQUEST)
    flags = record(bus, EVENT_CELL_FLAG_REQUEST)
    mutes = record(bus, EVENT_CELL_MUTE_REQUEST)

    x, y = centre_of(window, 0, 0)
    bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=MOUSE_RIGHT)
    x, y = centre_of(window, 3, 5)
    bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=MOUSE_MIDDLE)
    bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=MOUSE_LEFT)

    assert clicks[0] == {"row": 0, "col": 0, "button": MOUSE_RIGHT}
    assert flags == [{"row": 0, "col": 0}]
    assert mutes == [{"row": 3, "col": 5}]
    assert reveals == [{"row": 3, "col": 5}]
    assert get_game_state(world).mode in (GameMode.PLAYING, GameMode.WON)


def test_clicks_off_board_are_ignored():
    bus, world, _ = make_game()
    InputSystem(bus, DummyWindow(), world)
    clicks = record(bus, EVENT_CELL_CLICK)
    bus.emit(EVENT_MOUSE_PRESS, x=1, y=1, button=MOUSE_LEFT)
    bus.emit(EVENT_MOUSE_PRESS, button=MOUSE_LEFT)
    assert clicks == []


def test_any_click_after_game_over_restarts():
    bus, world, _ = make_game()
    InputSystem(bus, DummyWindow(), world)
    restarts = record(bus, EVENT_BOARD_RESTART_REQUEST)
    get_game_state(world).mode = GameMode.LOST
    bus.emit(EVENT_MOUSE_PRESS, x=1, y=1, button=MOUSE_RIGHT)
    assert restarts == [{"mode": None}]
    assert get_game_state(world).mode == GameMode.READY


def test_first_click_starts_the_sequencer_once():
    bus, world, _ = make_game()
    clock = StepClock(world, bus)
    window = DummyWindow()
    system = InputSystem(bus, window, world, clock=clock)
    x, y = centre_of(window, 0, 0)
    bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=MOUSE_RIGHT)
    assert clock.running
    system.toggle_playback()
    assert not clock.running
    bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=MOUSE_RIGHT)
    assert not clock.running


def test_keyboard_actions():
    bus, world, _ = make_game()
    clock = StepClock(world, bus)
    animator = WavefrontAnimator(world, bus, DummySink(9, 9))
    system = InputSystem(bus, DummyWindow(), world, clock=clock, animator=animator)
    restarts = record(bus, EVENT_BOARD_RESTART_REQUEST)

    system.nudge_bpm(5)
    assert get_sequencer_state(world).bpm == 105
    system.nudge_bpm(-500)
    assert get_sequencer_state(world).bpm == 20
    system.cycle_quality()
    assert animator.quality == "performance"
    system.toggle_probabilities()
    assert get_game_state(world).show_probabilities
    system.restart("classic")
    assert restarts[-1] == {"mode": "classic"}


def sound_controls(tmp_path):
    bus, world, _ = make_game()
    settings = SettingsSystem(world, bus, save_path=tmp_path / "settings.json")
    backend = FakeBackend()
    router = AudioTriggerRouter(world, bus, backend)
    window = DummyWindow()
    system = InputSystem(bus, window, world, router=router, settings=settings)
    return bus, world, backend, settings, window, system


def test_randomizing_rows_preloads_and_saves(tmp_path):
    bus, world, backend, settings, _, system = sound_controls(tmp_path)
    changes = record(bus, EVENT_ROW_AUDIO_CHANGED)

    system.randomize_rows(smart=True)

    assert changes == [{"row": None}]
    configs = get_row_audio(world).rows
    sample_refs = {c.sample_ref for c in configs.values() if c.mode == AudioMode.SAMPLE}
    assert sample_refs
    assert set(backend.loads) == sample_refs
    with settings.save_path.open("r", encoding="utf-8") as handle:
        assert json.load(handle)["row_audio"] == get_row_audio(world).to_dict()

    system.clear_row_sounds()
    system.clear_row_sounds()
    assert get_row_audio(world).rows == {}
    assert changes[1:] == [{"row": None}]


def test_clicked_row_sound_can_be_cycled_and_reset(tmp_path):
    bus, world, backend, _, window, system = sound_controls(tmp_path)
    system.cycle_selected_row(1)
    assert get_row_audio(world).rows == {}

    x, y = centre_of(window, 3, 0)
    bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=MOUSE_RIGHT)
    assert system.selected_row == 3

    system.cycle_selected_row(1)
    assert get_row_audio(world).get(3).sample_ref == "high-coin"
    assert "high-coin" in backend.loads
    system.cycle_selected_row(-1)
    assert get_row_audio(world).get(3).mode == AudioMode.SYNTHESIZED
    system.cycle_selected_row(-1)
    assert get_row_audio(world).get(3).sample_ref == "mid-jump"

    system.reset_selected_row()
    assert 3 not in get_row_audio(world).rows


def test_config_slots_and_exchange(tmp_path):
    bus, world, _, settings, _, system = sound_controls(tmp_path)
    settings.set_synth_params(bpm=140, waveform="square")
    system.save_slot(1)
    system.reset_synth_params()
    assert get_synth_params(world).bpm == 100

    system.load_slot(2)
    assert get_synth_params(world).bpm == 100
    system.load_slot(1)
    assert get_synth_params(world).bpm == 140
    assert get_synth_params(world).waveform == "square"

    system.export_configs()
    exported = settings.config_dir / "slot 1.json"
    assert exported.exists()
    (settings.config_dir / "broken.json").write_text("{nope", encoding="utf-8")
    settings.delete_config("slot 1")
    system.import_configs()
    assert settings.config_names() == ["slot 1"]
