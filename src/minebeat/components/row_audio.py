from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict

MIN_ROW_VOLUME = 0.0
MAX_ROW_VOLUME = 2.0


class AudioMode(Enum):
    SYNTHESIZED = "synth"
    SAMPLE = "sample"


def _clamp_volume(value: Any) -> float:
    try:
        volume = float(value)
    except (TypeError, ValueError):
        return 1.0
    return max(MIN_ROW_VOLUME, min(volume, MAX_ROW_VOLUME))


@dataclass(frozen=True, slots=True)
class RowAudioConfig:
    """How one board row sounds when its flags are triggered."""
    mode: AudioMode = AudioMode.SYNTHESIZED
    sample_ref: str | None = None
    volume: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": self.mode.value, "sample_ref": self.sample_ref, "volume": self.volume}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RowAudioConfig":
        try:
            mode = AudioMode(payload.get("mode", AudioMode.SYNTHESIZED.value))
        except ValueError:
            mode = AudioMode.SYNTHESIZED
        sample_ref = payload.get("sample_ref")
        if not isinstance(sample_ref, str) or not sample_ref:
            sample_ref = None
        return cls(mode=mode, sample_ref=sample_ref, volume=_clamp_volume(payload.get("volume", 1.0)))


DEFAULT_ROW_AUDIO = RowAudioConfig()


@dataclass(slots=True)
class RowAudioConfigs:
    """Per-row audio configuration, keyed by row index.

    Rows without an entry use ``DEFAULT_ROW_AUDIO``. Entries for rows that no
    longer exist are dropped by ``prune`` when the board shrinks.
    """
    rows: Dict[int, RowAudioConfig] = field(default_factory=dict)

    def get(self, row: int) -> RowAudioConfig:
        return self.rows.get(row, DEFAULT_ROW_AUDIO)

    def set(self, row: int, **fields: Any) -> RowAudioConfig:
        if row < 0:
            raise ValueError(f"row must be non-negative, got {row}")
        if "mode" in fields and not isinstance(fields["mode"], AudioMode):
            fields["mode"] = AudioMode(fields["mode"])
        if "volume" in fields:
            fields["volume"] = _clamp_volume(fields["volume"])
        config = replace(DEFAULT_ROW_AUDIO, **fields)
        self.rows[row] = config
        return config

    def clear(self, row: int) -> bool:
        return self.rows.pop(row, None) is not None

    def reset(self) -> None:
        self.rows.clear()

    def prune(self, max_rows: int) -> bool:
        allowed = max(0, int(max_rows))
        stale = [row for row in self.rows if row < 0 or row >= allowed]
        for row in stale:
            del self.rows[row]
        return bool(stale)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {str(row): config.to_dict() for row, config in sorted(self.rows.items())}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RowAudioConfigs":
        rows: Dict[int, RowAudioConfig] = {}
        for key, value in (payload or {}).items():
            try:
                row = int(key)
            except (TypeError, ValueError):
                continue
            if row < 0 or not isinstance(value, dict):
                continue
            rows[row] = RowAudioConfig.from_dict(value)
        return cls(rows=rows)
