from __future__ import annotations

import logging
import random
from concurrent.futures import Future
from typing import Any, Dict, Optional, Set

from esper import World

from minebeat.audio.backend import BUILTIN_SAMPLES, AudioBackend
from minebeat.audio.pitch import compute_pitch_overrides, row_frequency
from minebeat.audio.row_presets import randomize_all_rows, smart_randomize_all_rows
from minebeat.components.row_audio import AudioMode, RowAudioConfig
from minebeat.events.bus import (
    EVENT_AUDIO_WARNING,
    EVENT_BOARD_RESTARTED,
    EVENT_ROW_AUDIO_CHANGED,
    EVENT_STEP_TRIGGER,
    EventBus,
)
from minebeat.systems.wavefront import WavefrontAnimator
from minebeat.utils.resources import get_board, get_row_audio, get_synth_params

logger = logging.getLogger(__name__)

PLAYED_SAMPLE = "sample"
PLAYED_SYNTH = "synth"


class AudioTriggerRouter:
    """Turns step triggers into sound and a ripple.

    Sample rows play their buffer once it has loaded; until then, or when the
    load failed, they fall back to the row's pentatonic note. Every trigger
    also flashes the animator whichever path was taken.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        backend: AudioBackend,
        animator: WavefrontAnimator | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.backend = backend
        self.animator = animator
        self.pitch_overrides: Dict[int, int] = compute_pitch_overrides(get_board(world).rows)
        self._buffers: Dict[str, Any] = {}
        self._pending: Dict[str, Future] = {}
        self._failed: Set[str] = set()
        self._warned: Set[str] = set()
        self.event_bus.subscribe(EVENT_STEP_TRIGGER, self.on_step_trigger)
        self.event_bus.subscribe(EVENT_BOARD_RESTARTED, self.on_board_restarted)
        self.event_bus.subscribe(EVENT_ROW_AUDIO_CHANGED, self.on_row_audio_changed)

    def on_step_trigger(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.trigger(row, col)

    def trigger(self, row: int, col: int) -> str:
        config = get_row_audio(self.world).get(row)
        played = PLAYED_SYNTH
        buffer = None
        if config.mode == AudioMode.SAMPLE and config.sample_ref:
            buffer = self._buffer_for(row, config.sample_ref)
        if buffer is not None:
            self.backend.play_sample(buffer, config.volume)
            played = PLAYED_SAMPLE
        else:
            board = get_board(self.world)
            frequency = row_frequency(row, board.rows, self.pitch_overrides)
            self.backend.play_synthesized_note(frequency, get_synth_params(self.world), config.volume)
        if self.animator is not None:
            self.animator.flash(row, col)
        return played

    def configure_row(self, row: int, **fields: Any) -> RowAudioConfig:
        config = get_row_audio(self.world).set(row, **fields)
        if config.sample_ref:
            self._failed.discard(config.sample_ref)
            self._warned.discard(config.sample_ref)
        self.event_bus.emit(EVENT_ROW_AUDIO_CHANGED, row=row)
        return config

    def reset_row(self, row: int) -> None:
        if get_row_audio(self.world).clear(row):
            self.event_bus.emit(EVENT_ROW_AUDIO_CHANGED, row=row)

    def cycle_row_sound(self, row: int, step: int = 1) -> RowAudioConfig:
        """Move ``row`` through synthesis and then each builtin sample in turn."""
        choices = [None] + sorted(BUILTIN_SAMPLES)
        current = get_row_audio(self.world).get(row)
        index = choices.index(current.sample_ref) if current.sample_ref in choices else 0
        pick = choices[(index + step) % len(choices)]
        if pick is None:
            return self.configure_row(row, mode=AudioMode.SYNTHESIZED, volume=current.volume)
        return self.configure_row(row, mode=AudioMode.SAMPLE, sample_ref=pick, volume=current.volume)

    def randomize_rows(self, *, smart: bool = False) -> None:
        configs = get_row_audio(self.world)
        rows = get_board(self.world).rows
        rng = getattr(self.world, "random", None) or random.Random()
        if smart:
            smart_randomize_all_rows(configs, rows, rng)
        else:
            randomize_all_rows(configs, rows, rng)
        logger.info("row sounds %srandomized for %d rows", "smart-" if smart else "", rows)
        self.event_bus.emit(EVENT_ROW_AUDIO_CHANGED, row=None)

    def reset_all_rows(self) -> None:
        configs = get_row_audio(self.world)
        if configs.rows:
            configs.reset()
            self.event_bus.emit(EVENT_ROW_AUDIO_CHANGED, row=None)

    def preload(self, ref: str) -> None:
        if ref in self._buffers or ref in self._pending or ref in self._failed:
            return
        try:
            self._pending[ref] = self.backend.load_sample(ref)
        except Exception as exc:
            self._fail(None, ref, str(exc))

    def poll(self) -> None:
        """Collect any sample loads that finished since the last call."""
        for ref in [ref for ref, future in self._pending.items() if future.done()]:
            self._collect(None, ref)

    def is_loaded(self, ref: str) -> bool:
        return ref in self._buffers

    def has_failed(self, ref: str) -> bool:
        return ref in self._failed

    def _buffer_for(self, row: int, ref: str) -> Optional[Any]:
        if ref in self._buffers:
            return self._buffers[ref]
        if ref in self._failed:
            return None
        if ref not in self._pending:
            self.preload(ref)
        future = self._pending.get(ref)
        if future is None or not future.done():
            return None
        return self._collect(row, ref)

    def _collect(self, row: int | None, ref: str) -> Optional[Any]:
        future = self._pending.pop(ref)
        try:
            buffer = future.result()
        except Exception as exc:
            self._fail(row, ref, str(exc) or exc.__class__.__name__)
            return None
        if buffer is None:
            self._fail(row, ref, "sample decoded to an empty buffer")
            return None
        self._buffers[ref] = buffer
        return buffer

    def _fail(self, row: int | None, ref: str, message: str) -> None:
        self._failed.add(ref)
        if ref in self._warned:
            return
        self._warned.add(ref)
        logger.warning("sample %r failed to load (%s); row %s falls back to synthesis", ref, message, row)
        self.event_bus.emit(EVENT_AUDIO_WARNING, row=row, ref=ref, message=message)

    def on_row_audio_changed(self, sender, **kwargs):
        for config in list(get_row_audio(self.world).rows.values()):
            if config.mode == AudioMode.SAMPLE and config.sample_ref:
                self.preload(config.sample_ref)

    def on_board_restarted(self, sender, **kwargs):
        rows = kwargs.get('rows')
        if rows is None:
            rows = get_board(self.world).rows
        self.pitch_overrides = compute_pitch_overrides(rows)
        if get_row_audio(self.world).prune(rows):
            self.event_bus.emit(EVENT_ROW_AUDIO_CHANGED, row=None)
