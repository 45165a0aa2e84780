"""Offline rendering of the pluck voice.

A note is rendered to a mono float32 buffer: oscillator, resonant low-pass,
ADSR, then a convolution reverb blended dry/wet and peak limited.
"""
from __future__ import annotations

import math
from functools import lru_cache
from typing import Tuple

import numpy as np
from numpy.typing import NDArray
from scipy import signal as sps

from minebeat.components.synth_params import SynthParams

SAMPLE_RATE = 44100
SUSTAIN_HOLD = 0.15  # seconds the pluck body holds at sustain level
TAIL = 0.05
PEAK_LIMIT = 0.89  # about -1 dBFS

FloatArray = NDArray[np.float32]


def oscillator(waveform: str, frequency: float, duration: float, sr: int = SAMPLE_RATE) -> FloatArray:
    t = np.arange(int(duration * sr), dtype=np.float64) / sr
    phase = 2 * np.pi * frequency * t
    if waveform == "sine":
        wave = np.sin(phase)
    elif waveform == "square":
        wave = sps.square(phase)
    elif waveform == "sawtooth":
        wave = sps.sawtooth(phase)
    elif waveform == "triangle":
        wave = sps.sawtooth(phase, width=0.5)
    else:
        raise ValueError(f"unknown waveform {waveform!r}")
    return wave.astype(np.float32)


@lru_cache(maxsize=64)
def _biquad(kind: str, cutoff: float, q: float, sr: int) -> Tuple[np.ndarray, np.ndarray]:
    # RBJ cookbook coefficients, same response as a WebAudio BiquadFilterNode.
    nyquist = sr / 2
    f0 = min(max(cutoff, 10.0), nyquist * 0.99)
    w0 = 2 * math.pi * f0 / sr
    alpha = math.sin(w0) / (2 * max(q, 1e-4))
    cos_w0 = math.cos(w0)
    if kind == "lowpass":
        b = np.array([(1 - cos_w0) / 2, 1 - cos_w0, (1 - cos_w0) / 2])
    elif kind == "highpass":
        b = np.array([(1 + cos_w0) / 2, -(1 + cos_w0), (1 + cos_w0) / 2])
    else:
        raise ValueError(f"unknown filter kind {kind!r}")
    a = np.array([1 + alpha, -2 * cos_w0, 1 - alpha])
    return b / a[0], a / a[0]


def biquad(samples: np.ndarray, kind: str, cutoff: float, q: float = 0.7071, sr: int = SAMPLE_RATE) -> FloatArray:
    b, a = _biquad(kind, round(float(cutoff), 1), round(float(q), 3), sr)
    return sps.lfilter(b, a, samples).astype(np.float32)


def adsr(length: int, params: SynthParams, sr: int = SAMPLE_RATE) -> FloatArray:
    a = max(0.0, params.attack)
    d = max(0.0, params.decay)
    s = min(max(params.sustain, 0.0), 1.0)
    r = max(0.0, params.release)
    times = [0.0, a, a + d, a + d + SUSTAIN_HOLD, a + d + SUSTAIN_HOLD + r]
    levels = [0.0001, 1.0, s, s, 0.0001]
    t = np.arange(length, dtype=np.float64) / sr
    env = np.interp(t, times, levels, right=0.0)
    return env.astype(np.float32)


def build_reverb_impulse(
    decay: float,
    low_cut: float = 400,
    high_cut: float = 8000,
    sr: int = SAMPLE_RATE,
    rng: np.random.Generator | None = None,
) -> FloatArray:
    """Noise shaped by (1 - t)^3 over ``decay`` seconds, band-limited to the reverb cuts."""
    rng = rng or np.random.default_rng()
    length = max(500, int(sr * decay))
    t = np.arange(length, dtype=np.float64) / length
    impulse = rng.uniform(-1.0, 1.0, length) * (1 - t) ** 3
    impulse = biquad(impulse, "highpass", low_cut, sr=sr)
    impulse = biquad(impulse, "lowpass", high_cut, sr=sr)
    norm = float(np.sqrt(np.sum(impulse.astype(np.float64) ** 2)))
    if norm > 0:
        impulse = impulse / norm
    return impulse.astype(np.float32)


def note_duration(params: SynthParams) -> float:
    return max(0.0, params.attack) + max(0.0, params.decay) + SUSTAIN_HOLD + max(0.0, params.release) + TAIL


def render_pluck(
    frequency: float,
    params: SynthParams,
    sample_rate: int = SAMPLE_RATE,
    impulse: np.ndarray | None = None,
) -> FloatArray:
    dry = oscillator(params.waveform, frequency, note_duration(params), sample_rate)
    dry = biquad(dry, "lowpass", params.filter_cutoff, params.filter_q, sample_rate)
    dry = dry * adsr(len(dry), params, sample_rate)

    mix = min(max(params.reverb_mix, 0.0), 1.0)
    if mix > 0:
        if impulse is None:
            impulse = build_reverb_impulse(
                params.reverb_decay, params.reverb_low_cut, params.reverb_high_cut, sample_rate
            )
        wet = sps.fftconvolve(dry, impulse)
        out = np.zeros(len(wet), dtype=np.float32)
        out[: len(dry)] += dry * (1 - mix)
        out += wet.astype(np.float32) * mix
    else:
        out = dry

    peak = float(np.max(np.abs(out))) if out.size else 0.0
    if peak > PEAK_LIMIT:
        out = out * (PEAK_LIMIT / peak)
    return out.astype(np.float32)
