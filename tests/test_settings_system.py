import json

import pytest

from minebeat.components.row_audio import AudioMode
from minebeat.events.bus import EVENT_RIPPLE_QUALITY_CHANGED, EVENT_ROW_AUDIO_CHANGED
from minebeat.systems.settings_system import SettingsSystem
from minebeat.systems.step_clock import StepClock
from minebeat.utils.resources import get_game_state, get_ripple_settings, get_row_audio, get_synth_params
from tests.helpers import make_game


def read(path):
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def test_missing_file_is_created_with_defaults(tmp_path):
    bus, world, _ = make_game()
    path = tmp_path / "settings.json"
    SettingsSystem(world, bus, save_path=path)
    payload = read(path)
    assert payload["synth_params"]["bpm"] == 100
    assert payload["row_audio"] == {}
    assert payload["ripple_quality"] == "balanced"
    assert payload["configs"] == {}


def test_corrupt_file_falls_back_to_defaults(tmp_path, caplog):
    bus, world, _ = make_game()
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    SettingsSystem(world, bus, save_path=path)
    assert "corrupt" in caplog.text
    assert read(path)["synth_params"]["waveform"] == "triangle"


def test_settings_are_restored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "synth_params": {"bpm": 132, "waveform": "square"},
        "row_audio": {"2": {"mode": "sample", "sample_ref": "high-coin", "volume": 0.6}},
        "ripple_quality": "performance",
        "board_mode": "large",
        "configs": {"lead": {"params": {"bpm": 90}, "timestamp": 1.0}, "junk": 3},
    }), encoding="utf-8")
    bus, world, _ = make_game()
    system = SettingsSystem(world, bus, save_path=path)
    assert get_synth_params(world).bpm == 132
    assert get_synth_params(world).waveform == "square"
    assert get_row_audio(world).get(2).mode == AudioMode.SAMPLE
    assert get_ripple_settings(world).quality == "performance"
    assert get_game_state(world).board_mode == "large"
    assert system.config_names() == ["lead"]


def test_changes_are_saved(tmp_path):
    bus, world, _ = make_game()
    path = tmp_path / "settings.json"
    system = SettingsSystem(world, bus, save_path=path)
    get_row_audio(world).set(5, volume=0.25)
    bus.emit(EVENT_ROW_AUDIO_CHANGED, row=5)
    assert read(path)["row_audio"]["5"]["volume"] == 0.25

    get_ripple_settings(world).quality = "high"
    bus.emit(EVENT_RIPPLE_QUALITY_CHANGED, quality="high")
    assert read(path)["ripple_quality"] == "high"

    system.set_synth_params(attack=0.2)
    assert read(path)["synth_params"]["attack"] == 0.2


def test_board_restart_saves_mode(tmp_path):
    bus, world, board_system = make_game()
    path = tmp_path / "settings.json"
    SettingsSystem(world, bus, save_path=path)
    board_system.restart("huge")
    assert read(path)["board_mode"] == "huge"


def test_named_config_library(tmp_path):
    bus, world, _ = make_game()
    system = SettingsSystem(world, bus, save_path=tmp_path / "settings.json")
    system.set_synth_params(bpm=150, waveform="sawtooth")
    system.save_config("fast saw")
    system.reset_params()
    assert get_synth_params(world).bpm == 100
    assert get_synth_params(world).waveform == "triangle"

    assert system.load_config("fast saw") is True
    assert get_synth_params(world).bpm == 150
    assert get_synth_params(world).waveform == "sawtooth"
    assert system.load_config("missing") is False

    assert system.delete_config("fast saw") is True
    assert system.delete_config("fast saw") is False
    assert read(tmp_path / "settings.json")["configs"] == {}
    with pytest.raises(ValueError):
        system.save_config("   ")


def test_export_then_import_config(tmp_path):
    bus, world, _ = make_game()
    system = SettingsSystem(world, bus, save_path=tmp_path / "settings.json")
    system.set_synth_params(bpm=111)
    system.save_config("mine")
    exported = system.export_config("mine", tmp_path / "out" / "mine.json")
    assert read(exported)["bpm"] == 111

    name = system.import_config(exported, name="copy")
    assert name == "copy"
    assert system.configs["copy"]["params"]["bpm"] == 111
    assert system.import_config(exported) == "mine"
    with pytest.raises(KeyError):
        system.export_config("nope", tmp_path / "x.json")


def test_import_requires_bpm(tmp_path):
    bus, world, _ = make_game()
    system = SettingsSystem(world, bus, save_path=tmp_path / "settings.json")
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"attack": 0.1}), encoding="utf-8")
    with pytest.raises(ValueError):
        system.import_config(bad)
    bad.write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(ValueError):
        system.import_config(bad)


def test_wrongly_typed_synth_values_fall_back_to_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"synth_params": {"bpm": None, "attack": 0.3}}), encoding="utf-8")
    bus, world, _ = make_game()
    clock = StepClock(world, bus)
    SettingsSystem(world, bus, save_path=path)
    assert "ignoring stored synth params" in caplog.text
    assert get_synth_params(world).bpm == 100
    assert get_synth_params(world).attack == 0.01
    assert clock.state.bpm == 100


def test_non_object_sections_are_ignored(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "synth_params": {"bpm": "90"},
        "row_audio": ["sample"],
        "configs": [1, 2],
    }), encoding="utf-8")
    bus, world, _ = make_game()
    system = SettingsSystem(world, bus, save_path=path)
    assert get_synth_params(world).bpm == 90.0
    assert get_row_audio(world).rows == {}
    assert system.config_names() == []
    assert "ignoring stored row audio" in caplog.text
    assert "ignoring stored configs" in caplog.text


def test_stored_configs_with_bad_params_are_dropped(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "configs": {
            "good": {"params": {"bpm": 120}, "timestamp": 2.0},
            "slow": {"params": {"bpm": "slow"}},
            "empty": {"timestamp": 1.0},
        },
    }), encoding="utf-8")
    bus, world, _ = make_game()
    system = SettingsSystem(world, bus, save_path=path)
    assert system.config_names() == ["good"]
    assert system.load_config("good") is True
    assert get_synth_params(world).bpm == 120


def test_import_rejects_values_that_are_not_numbers(tmp_path):
    bus, world, _ = make_game()
    system = SettingsSystem(world, bus, save_path=tmp_path / "settings.json")
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"bpm": "fast"}), encoding="utf-8")
    with pytest.raises(ValueError):
        system.import_config(bad)
    assert "bad" not in system.configs
    assert read(tmp_path / "settings.json")["configs"] == {}
