from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Tuple

from esper import World

from minebeat.components.wavefront import PendingRevert, Wavefront
from minebeat.constants import DEFAULT_MAX_WAVEFRONTS, DEFAULT_RIPPLE_QUALITY
from minebeat.events.bus import (
    EVENT_BOARD_RESTARTED,
    EVENT_RIPPLE_QUALITY_CHANGED,
    EVENT_TICK,
    EventBus,
)
from minebeat.rendering.intensity_grid import CellSink
from minebeat.utils.resources import get_board, get_ripple_settings

Position = Tuple[int, int]

MIN_REVERT_MS = 60
MAX_REVERT_MS = 220
SAMPLE_DIAGONAL = 32  # board diagonal (cells) per extra subsampling stride


@dataclass(frozen=True, slots=True)
class RipplePreset:
    radius_factor: float = 1.0
    radius_step: float = 1.0
    wave_width: float = 1.6
    sigma: float = 1.0
    brightness_scale: float = 0.6
    revert_ms: float = 140
    cutoff: float = 0.02
    sample_step: float = 1.0
    disabled: bool = False


RIPPLE_PRESETS: Dict[str, RipplePreset] = {
    "ultra": RipplePreset(
        radius_factor=1.25, radius_step=0.8, wave_width=2.2, sigma=1.2,
        brightness_scale=0.85, revert_ms=180, cutoff=0.015,
    ),
    "high": RipplePreset(
        radius_factor=1.1, radius_step=1, wave_width=1.8, sigma=1.05,
        brightness_scale=0.75, revert_ms=160, cutoff=0.02,
    ),
    "balanced": RipplePreset(
        radius_factor=1, radius_step=1.2, wave_width=1.6, sigma=0.9,
        brightness_scale=0.6, revert_ms=140, cutoff=0.02,
    ),
    "performance": RipplePreset(
        radius_factor=0.7, radius_step=1.8, wave_width=1.2, sigma=0.9,
        brightness_scale=0.45, revert_ms=100, cutoff=0.03,
    ),
    "off": RipplePreset(disabled=True),
}
QUALITY_ORDER = ("ultra", "high", "balanced", "performance", "off")


@dataclass(frozen=True, slots=True)
class WavefrontParams:
    radius_step: float
    wave_width: float
    sigma: float
    brightness_scale: float
    cutoff: float
    sample_step: int
    max_age: float
    revert_ms: float


@dataclass(slots=True)
class Pulse:
    cell: Position
    intensity: float
    revert_ms: float


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def derive_wavefront_params(preset: RipplePreset, rows: int, cols: int) -> WavefrontParams:
    """Scale a preset to the board: bigger boards subsample more and travel further."""
    diag = math.sqrt(rows * rows + cols * cols)
    base_sample = max(1, _round_half_up(diag / SAMPLE_DIAGONAL))
    return WavefrontParams(
        radius_step=max(1.0, preset.radius_step),
        wave_width=preset.wave_width,
        sigma=preset.sigma,
        brightness_scale=preset.brightness_scale,
        cutoff=preset.cutoff,
        sample_step=max(1, math.floor(preset.sample_step * base_sample)),
        max_age=max(2, math.ceil(diag * preset.radius_factor)),
        revert_ms=max(MIN_REVERT_MS, min(MAX_REVERT_MS, preset.revert_ms)),
    )


def step_wavefront(wave: Wavefront, rows: int, cols: int, sink: CellSink, pulses: List[Pulse]) -> bool:
    """Advance one frame and record the cells lit by the ring. Returns False once expired."""
    wave.age += wave.radius_step
    radius = wave.age
    reach = radius + wave.wave_width
    min_r = max(0, math.floor(wave.origin_row - reach))
    max_r = min(rows - 1, math.ceil(wave.origin_row + reach))
    min_c = max(0, math.floor(wave.origin_col - reach))
    max_c = min(cols - 1, math.ceil(wave.origin_col + reach))

    for rr in range(min_r, max_r + 1):
        for cc in range(min_c, max_c + 1):
            is_origin = rr == wave.origin_row and cc == wave.origin_col
            if wave.sample_step > 1 and not is_origin and (rr + cc) % wave.sample_step != 0:
                continue
            distance = math.hypot(rr - wave.origin_row, cc - wave.origin_col)
            brightness = math.exp(-(((distance - radius) / wave.sigma) ** 2))
            if brightness <= wave.cutoff:
                continue
            if sink.is_revealed(rr, cc):
                continue
            pulses.append(Pulse((rr, cc), 1 + brightness * wave.brightness_scale, wave.revert_ms))

    return wave.age <= wave.max_age


class WavefrontAnimator:
    """Bounded set of decaying radial pulses written into a CellSink.

    At most ``max_wavefronts`` run at once; flashing at capacity evicts the
    oldest. Each frame expires due reverts, advances every wavefront and then
    applies the new pulses. A cell's value before its first pulse is kept
    until the revert fires, so overlapping pulses unwind to the right value.
    The animator listens to ``tick`` only while something is animating.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        sink: CellSink,
        *,
        max_wavefronts: int = DEFAULT_MAX_WAVEFRONTS,
        quality: str | None = None,
    ):
        if max_wavefronts < 1:
            raise ValueError("max_wavefronts must be at least 1")
        self.world = world
        self.event_bus = event_bus
        self.sink = sink
        self.max_wavefronts = max_wavefronts
        self.wavefronts: Deque[Wavefront] = deque()
        self.reverts: Dict[Position, PendingRevert] = {}
        self.now_ms = 0.0
        self.running = False
        if quality is not None:
            self.set_quality(quality)
        self.event_bus.subscribe(EVENT_BOARD_RESTARTED, self.on_board_restarted)

    @property
    def quality(self) -> str:
        return get_ripple_settings(self.world).quality

    def set_quality(self, quality: str) -> str:
        settings = get_ripple_settings(self.world)
        settings.quality = quality if quality in RIPPLE_PRESETS else DEFAULT_RIPPLE_QUALITY
        self.event_bus.emit(EVENT_RIPPLE_QUALITY_CHANGED, quality=settings.quality)
        return settings.quality

    def cycle_quality(self) -> str:
        idx = QUALITY_ORDER.index(self.quality) if self.quality in QUALITY_ORDER else 0
        return self.set_quality(QUALITY_ORDER[(idx + 1) % len(QUALITY_ORDER)])

    def preset(self) -> RipplePreset:
        return RIPPLE_PRESETS.get(self.quality, RIPPLE_PRESETS[DEFAULT_RIPPLE_QUALITY])

    def flash(self, row: int, col: int) -> Wavefront | None:
        preset = self.preset()
        if preset.disabled:
            return None
        board = get_board(self.world)
        if len(self.wavefronts) >= self.max_wavefronts:
            self.wavefronts.popleft()
        params = derive_wavefront_params(preset, board.rows, board.cols)
        wave = Wavefront(
            origin_row=row,
            origin_col=col,
            radius_step=params.radius_step,
            wave_width=params.wave_width,
            sigma=params.sigma,
            brightness_scale=params.brightness_scale,
            cutoff=params.cutoff,
            sample_step=params.sample_step,
            max_age=params.max_age,
            revert_ms=params.revert_ms,
        )
        self.wavefronts.append(wave)
        self._resume()
        return wave

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        self.now_ms += float(dt) * 1000.0
        self.step_frame()

    def step_frame(self) -> None:
        now = self.now_ms
        for cell, revert in list(self.reverts.items()):
            if revert.deadline <= now:
                self.sink.set_intensity(cell[0], cell[1], revert.previous_value)
                del self.reverts[cell]

        board = get_board(self.world)
        pulses: List[Pulse] = []
        survivors: Deque[Wavefront] = deque()
        for wave in self.wavefronts:
            if step_wavefront(wave, board.rows, board.cols, self.sink, pulses):
                survivors.append(wave)
        self.wavefronts = survivors

        brightest: Dict[Position, Pulse] = {}
        for pulse in pulses:
            current = brightest.get(pulse.cell)
            if current is None or pulse.intensity > current.intensity:
                brightest[pulse.cell] = pulse

        for pulse in brightest.values():
            row, col = pulse.cell
            revert = self.reverts.get(pulse.cell)
            if revert is None:
                revert = PendingRevert(pulse.cell, 0.0, self.sink.intensity(row, col))
                self.reverts[pulse.cell] = revert
            self.sink.set_intensity(row, col, pulse.intensity)
            revert.deadline = now + pulse.revert_ms

        if not self.wavefronts and not self.reverts:
            self._suspend()

    def cancel_all(self) -> None:
        """Drop every wavefront and put every pulsed cell back immediately."""
        for cell, revert in self.reverts.items():
            self.sink.set_intensity(cell[0], cell[1], revert.previous_value)
        self.reverts.clear()
        self.wavefronts.clear()
        self._suspend()

    def on_board_restarted(self, sender, **kwargs):
        self.cancel_all()
        rows = kwargs.get('rows')
        cols = kwargs.get('cols')
        resize = getattr(self.sink, 'resize', None)
        if rows is not None and cols is not None and resize is not None:
            resize(rows, cols)

    def _resume(self) -> None:
        if not self.running:
            self.running = True
            self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    def _suspend(self) -> None:
        if self.running:
            self.running = False
            self.event_bus.unsubscribe(EVENT_TICK, self.on_tick)
