from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List

from esper import World

from minebeat.components.row_audio import RowAudioConfigs
from minebeat.components.synth_params import SynthParams
from minebeat.constants import BOARD_MODES, DEFAULT_RIPPLE_QUALITY
from minebeat.events.bus import (
    EVENT_BOARD_RESTARTED,
    EVENT_BPM_CHANGED,
    EVENT_RIPPLE_QUALITY_CHANGED,
    EVENT_ROW_AUDIO_CHANGED,
    EVENT_SYNTH_PARAMS_CHANGED,
    EventBus,
)
from minebeat.utils.resources import (
    get_game_state,
    get_ripple_settings,
    get_row_audio,
    get_synth_params,
)

logger = logging.getLogger(__name__)


class SettingsSystem:
    """Persists synth, row audio and display settings plus a library of named synth configs."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        save_path: Path | None = None,
        load_existing: bool = True,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self._save_path = Path(save_path) if save_path is not None else self._default_save_path()
        self.configs: Dict[str, Dict[str, Any]] = {}
        self._loading = False

        self.event_bus.subscribe(EVENT_ROW_AUDIO_CHANGED, self._on_settings_changed)
        self.event_bus.subscribe(EVENT_SYNTH_PARAMS_CHANGED, self._on_settings_changed)
        self.event_bus.subscribe(EVENT_RIPPLE_QUALITY_CHANGED, self._on_settings_changed)
        self.event_bus.subscribe(EVENT_BPM_CHANGED, self._on_settings_changed)
        self.event_bus.subscribe(EVENT_BOARD_RESTARTED, self._on_settings_changed)

        if load_existing:
            self.load_settings()
        else:
            self.save_settings()

    @staticmethod
    def _default_save_path() -> Path:
        return Path(__file__).resolve().parents[3] / "data" / "settings.json"

    @property
    def save_path(self) -> Path:
        return self._save_path

    def load_settings(self) -> None:
        try:
            with self._save_path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            self.configs = {}
            self.save_settings()
            return
        except json.JSONDecodeError as exc:
            logger.warning("settings file %s is corrupt (%s); using defaults", self._save_path, exc)
            self.configs = {}
            self.save_settings()
            return
        if not isinstance(payload, dict):
            logger.warning("settings file %s does not hold an object; using defaults", self._save_path)
            self.configs = {}
            self.save_settings()
            return

        self._loading = True
        try:
            self._apply(payload)
        finally:
            self._loading = False

    def _apply(self, payload: Dict[str, Any]) -> None:
        synth = get_synth_params(self.world)
        try:
            synth.update(payload.get("synth_params") or {})
        except ValueError as exc:
            logger.warning("ignoring stored synth params: %s", exc)

        row_audio = get_row_audio(self.world)
        stored_rows = payload.get("row_audio") or {}
        if isinstance(stored_rows, dict):
            row_audio.rows = RowAudioConfigs.from_dict(stored_rows).rows
        else:
            logger.warning("ignoring stored row audio: expected an object, got %s", type(stored_rows).__name__)
            row_audio.reset()

        quality = payload.get("ripple_quality", DEFAULT_RIPPLE_QUALITY)
        get_ripple_settings(self.world).quality = quality if isinstance(quality, str) else DEFAULT_RIPPLE_QUALITY

        board_mode = payload.get("board_mode")
        if board_mode in BOARD_MODES:
            get_game_state(self.world).board_mode = board_mode

        configs = payload.get("configs") or {}
        if not isinstance(configs, dict):
            logger.warning("ignoring stored configs: expected an object, got %s", type(configs).__name__)
            configs = {}
        self.configs = {}
        for name, entry in configs.items():
            params = entry.get("params") if isinstance(entry, dict) else None
            if not isinstance(params, dict):
                logger.warning("dropping stored config %r: no params object", name)
                continue
            try:
                checked = SynthParams.from_dict(params)
            except ValueError as exc:
                logger.warning("dropping stored config %r: %s", name, exc)
                continue
            self.configs[name] = {"params": checked.to_dict(), "timestamp": entry.get("timestamp", 0.0)}

        self.event_bus.emit(EVENT_SYNTH_PARAMS_CHANGED, params=synth.to_dict())
        self.event_bus.emit(EVENT_ROW_AUDIO_CHANGED, row=None)

    def save_settings(self) -> None:
        self._save_path.parent.mkdir(parents=True, exist_ok=True)
        with self._save_path.open("w", encoding="utf-8") as handle:
            json.dump({
                "synth_params": get_synth_params(self.world).to_dict(),
                "row_audio": get_row_audio(self.world).to_dict(),
                "ripple_quality": get_ripple_settings(self.world).quality,
                "board_mode": get_game_state(self.world).board_mode,
                "configs": self.configs,
            }, handle, indent=2)

    # Synth parameters ---------------------------------------------------

    def set_synth_params(self, **changes: Any) -> SynthParams:
        synth = get_synth_params(self.world)
        synth.update(changes)
        self.event_bus.emit(EVENT_SYNTH_PARAMS_CHANGED, params=synth.to_dict())
        return synth

    def reset_params(self) -> SynthParams:
        synth = get_synth_params(self.world)
        synth.update(SynthParams().to_dict())
        self.event_bus.emit(EVENT_SYNTH_PARAMS_CHANGED, params=synth.to_dict())
        return synth

    # Named configs ------------------------------------------------------

    def config_names(self) -> List[str]:
        return sorted(self.configs)

    def save_config(self, name: str) -> Dict[str, Any]:
        name = name.strip()
        if not name:
            raise ValueError("config name must not be empty")
        entry = {"params": get_synth_params(self.world).to_dict(), "timestamp": time.time()}
        self.configs[name] = entry
        self.save_settings()
        return entry

    def load_config(self, name: str) -> bool:
        entry = self.configs.get(name)
        if entry is None:
            return False
        self.set_synth_params(**entry["params"])
        return True

    def delete_config(self, name: str) -> bool:
        if self.configs.pop(name, None) is None:
            return False
        self.save_settings()
        return True

    def export_config(self, name: str, path: Path) -> Path:
        entry = self.configs.get(name)
        if entry is None:
            raise KeyError(name)
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(entry["params"], handle, indent=2)
        return path

    def import_config(self, path: Path, name: str | None = None) -> str:
        """Read exported synth params from ``path`` and store them as a named config."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict) or "bpm" not in payload:
            raise ValueError(f"{path} is not a synth config (missing 'bpm')")
        try:
            params = SynthParams.from_dict(payload)
        except ValueError as exc:
            raise ValueError(f"{path} is not a valid synth config: {exc}") from exc
        name = name or path.stem
        self.configs[name] = {"params": params.to_dict(), "timestamp": time.time()}
        self.save_settings()
        return name

    @property
    def config_dir(self) -> Path:
        return self._save_path.parent / "configs"

    def export_configs(self, directory: Path | None = None) -> List[Path]:
        """Write every named config to ``directory`` as ``<name>.json``."""
        directory = Path(directory) if directory is not None else self.config_dir
        return [self.export_config(name, directory / f"{name}.json") for name in self.config_names()]

    def import_configs(self, directory: Path | None = None) -> List[str]:
        """Import each ``*.json`` in ``directory``; unreadable files are logged and skipped."""
        directory = Path(directory) if directory is not None else self.config_dir
        imported = []
        for path in sorted(directory.glob("*.json")):
            try:
                imported.append(self.import_config(path))
            except (OSError, ValueError) as exc:
                logger.warning("skipping config file %s: %s", path, exc)
        return imported

    # Event handlers -----------------------------------------------------

    def _on_settings_changed(self, sender, **payload) -> None:
        if self._loading:
            return
        self.save_settings()
