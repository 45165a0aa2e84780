from __future__ import annotations

import logging
import tempfile
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Protocol, Tuple

import soundfile as sf

from minebeat.audio.synth import SAMPLE_RATE, build_reverb_impulse, render_pluck
from minebeat.components.synth_params import SynthParams

logger = logging.getLogger(__name__)

# Built-in one-shots shipped with arcade, grouped by register for the row randomizers.
BUILTIN_SAMPLES: Dict[str, Dict[str, str]] = {
    "low-thud": {"name": "Explosion", "ref": ":resources:sounds/explosion1.wav", "group": "low"},
    "low-rock": {"name": "Rock hit", "ref": ":resources:sounds/rockHit2.wav", "group": "low"},
    "low-fall": {"name": "Fall", "ref": ":resources:sounds/fall1.wav", "group": "low"},
    "mid-hit": {"name": "Hit", "ref": ":resources:sounds/hit1.wav", "group": "mid"},
    "mid-hurt": {"name": "Hurt", "ref": ":resources:sounds/hurt1.wav", "group": "mid"},
    "mid-jump": {"name": "Jump", "ref": ":resources:sounds/jump1.wav", "group": "mid"},
    "high-coin": {"name": "Coin", "ref": ":resources:sounds/coin1.wav", "group": "high"},
    "high-laser": {"name": "Laser", "ref": ":resources:sounds/laser1.wav", "group": "high"},
    "high-upgrade": {"name": "Upgrade", "ref": ":resources:sounds/upgrade1.wav", "group": "high"},
    "high-secret": {"name": "Secret", "ref": ":resources:sounds/secret2.wav", "group": "high"},
    "high-phase": {"name": "Phase jump", "ref": ":resources:sounds/phaseJump1.wav", "group": "high"},
}


def resolve_sample_ref(ref: str) -> str:
    """Map a builtin sample id to its arcade handle; paths and handles pass through."""
    entry = BUILTIN_SAMPLES.get(ref)
    return entry["ref"] if entry else ref


class AudioBackend(Protocol):
    def play_synthesized_note(self, frequency: float, params: SynthParams, volume: float = 1.0) -> None: ...

    def play_sample(self, buffer: Any, volume: float = 1.0) -> None: ...

    def load_sample(self, ref: str) -> "Future[Any]": ...


class ArcadeAudioBackend:
    """Plays rendered notes and one-shot samples through arcade's sound API.

    Notes are rendered once per (frequency, timbre) and cached as WAV files;
    arcade loads sounds from files. Sample loading runs on a small thread pool.
    """

    def __init__(self, cache_dir: Path | None = None, max_workers: int = 2):
        self.cache_dir = Path(cache_dir) if cache_dir else Path(tempfile.mkdtemp(prefix="minebeat-"))
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="minebeat-audio")
        self._notes: Dict[Tuple[float, tuple], Any] = {}
        self._impulse_key: tuple | None = None
        self._impulse = None

    def _reverb_impulse(self, params: SynthParams):
        key = (params.reverb_decay, params.reverb_low_cut, params.reverb_high_cut)
        if key != self._impulse_key:
            self._impulse = build_reverb_impulse(*key)
            self._impulse_key = key
        return self._impulse

    def _note_sound(self, frequency: float, params: SynthParams):
        import arcade
        key = (round(frequency, 2), params.cache_key())
        sound = self._notes.get(key)
        if sound is None:
            samples = render_pluck(frequency, params, SAMPLE_RATE, impulse=self._reverb_impulse(params))
            path = self.cache_dir / f"note_{len(self._notes):04d}.wav"
            sf.write(str(path), samples, SAMPLE_RATE, subtype="FLOAT")
            sound = arcade.load_sound(path)
            self._notes[key] = sound
            logger.debug("rendered %.2f Hz to %s", frequency, path.name)
        return sound

    def play_synthesized_note(self, frequency: float, params: SynthParams, volume: float = 1.0) -> None:
        import arcade
        sound = self._note_sound(frequency, params)
        arcade.play_sound(sound, volume=max(0.0, params.volume * volume))

    def play_sample(self, buffer: Any, volume: float = 1.0) -> None:
        import arcade
        arcade.play_sound(buffer, volume=max(0.0, volume))

    def load_sample(self, ref: str) -> "Future[Any]":
        return self._executor.submit(self._load, resolve_sample_ref(ref))

    @staticmethod
    def _load(ref: str):
        import arcade
        return arcade.load_sound(ref)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
