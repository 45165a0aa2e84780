from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

WAVEFORMS = ("sine", "square", "sawtooth", "triangle")


@dataclass(slots=True)
class SynthParams:
    """Timbre and transport parameters shared by the synthesizer and the step clock."""
    bpm: float = 100
    volume: float = 0.5

    attack: float = 0.01
    decay: float = 0.20
    sustain: float = 0.40
    release: float = 0.30

    waveform: str = "triangle"

    filter_cutoff: float = 8000
    filter_q: float = 1

    reverb_decay: float = 2.5
    reverb_mix: float = 0.30
    reverb_low_cut: float = 400
    reverb_high_cut: float = 8000

    def __post_init__(self):
        if self.waveform not in WAVEFORMS:
            raise ValueError(f"unknown waveform {self.waveform!r}; expected one of {WAVEFORMS}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def update(self, payload: Dict[str, Any]) -> None:
        """Copy known keys from payload; unknown keys are ignored.

        Every value is checked before any is stored, so a rejected payload
        leaves the params untouched.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"synth params must be an object, got {type(payload).__name__}")
        staged: Dict[str, Any] = {}
        for f in fields(self):
            if f.name not in payload:
                continue
            value = payload[f.name]
            if f.name == "waveform":
                if value not in WAVEFORMS:
                    raise ValueError(f"unknown waveform {value!r}; expected one of {WAVEFORMS}")
                staged[f.name] = value
                continue
            if isinstance(value, bool):
                raise ValueError(f"{f.name} must be a number, got {value!r}")
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise ValueError(f"{f.name} must be a number, got {value!r}") from None
            if not math.isfinite(number):
                raise ValueError(f"{f.name} must be finite, got {value!r}")
            staged[f.name] = number
        for key, value in staged.items():
            setattr(self, key, value)

    def cache_key(self) -> tuple:
        """Timbre fields only (bpm and master volume do not change the rendered note)."""
        return (
            self.attack, self.decay, self.sustain, self.release, self.waveform,
            self.filter_cutoff, self.filter_q,
            self.reverb_decay, self.reverb_mix, self.reverb_low_cut, self.reverb_high_cut,
        )

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SynthParams":
        params = cls()
        params.update(payload or {})
        return params
