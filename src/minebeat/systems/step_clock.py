from __future__ import annotations

import logging

from esper import World

from minebeat.components.sequencer_state import SequencerState, interval_for_bpm
from minebeat.constants import MAX_BPM, MIN_BPM
from minebeat.events.bus import (
    EVENT_BOARD_RESTARTED,
    EVENT_BPM_CHANGED,
    EVENT_SEQUENCER_STARTED,
    EVENT_SEQUENCER_STEP,
    EVENT_SEQUENCER_STOPPED,
    EVENT_STEP_TRIGGER,
    EVENT_SYNTH_PARAMS_CHANGED,
    EVENT_TICK,
    EventBus,
)
from minebeat.utils.resources import get_board, get_sequencer_state, get_synth_params

logger = logging.getLogger(__name__)


def clamp_bpm(bpm: float) -> float:
    return max(MIN_BPM, min(float(bpm), MAX_BPM))


class StepClock:
    """Fixed-rate sequencer clock: one board column per sixteenth note.

    The timer is the bus ``tick`` event. The clock only listens to it while
    running; ``stop`` disconnects and drops the partial interval, so no step
    fires after it returns. Each full interval of accumulated time fires
    exactly one step, even when that step triggers nothing.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_BOARD_RESTARTED, self.on_board_restarted)
        self.event_bus.subscribe(EVENT_SYNTH_PARAMS_CHANGED, self.on_synth_params_changed)

    @property
    def state(self) -> SequencerState:
        return get_sequencer_state(self.world)

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def counter(self) -> int:
        return self.state.counter

    @property
    def interval_ms(self) -> float:
        return self.state.interval_ms

    def start(self) -> None:
        state = self.state
        if state.running:
            return
        state.running = True
        state.counter = 0
        state.elapsed_ms = 0.0
        state.last_step = None
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        logger.debug("sequencer started at %s bpm (%.2f ms/step)", state.bpm, state.interval_ms)
        self.event_bus.emit(EVENT_SEQUENCER_STARTED, bpm=state.bpm, interval_ms=state.interval_ms)

    def stop(self) -> None:
        state = self.state
        if not state.running:
            return
        state.running = False
        state.elapsed_ms = 0.0
        self.event_bus.unsubscribe(EVENT_TICK, self.on_tick)
        logger.debug("sequencer stopped after %d steps", state.counter)
        self.event_bus.emit(EVENT_SEQUENCER_STOPPED, counter=state.counter)

    def toggle(self) -> bool:
        if self.running:
            self.stop()
        else:
            self.start()
        return self.running

    def reset_position(self) -> None:
        self.state.counter = 0

    def update_interval(self, bpm: float) -> float:
        """Apply a new tempo. A running clock is re-armed with a fresh interval."""
        state = self.state
        state.bpm = clamp_bpm(bpm)
        state.interval_ms = interval_for_bpm(state.bpm)
        get_synth_params(self.world).bpm = state.bpm
        if state.running:
            state.elapsed_ms = 0.0
        self.event_bus.emit(EVENT_BPM_CHANGED, bpm=state.bpm, interval_ms=state.interval_ms)
        return state.interval_ms

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        state = self.state
        if not state.running:
            return
        state.elapsed_ms += float(dt) * 1000.0
        while state.running and state.elapsed_ms >= state.interval_ms:
            state.elapsed_ms -= state.interval_ms
            self.step()

    def step(self) -> int:
        """Fire one step: trigger every flagged, unmuted cell in the active column."""
        state = self.state
        board = get_board(self.world)
        step = state.counter % board.cols
        state.last_step = step
        self.event_bus.emit(EVENT_SEQUENCER_STEP, step=step, counter=state.counter)
        for row in range(board.rows):
            cell = board.cells[row][step]
            if cell.flagged and not cell.muted:
                self.event_bus.emit(EVENT_STEP_TRIGGER, row=row, col=step)
        state.counter += 1
        return step

    def on_synth_params_changed(self, sender, **kwargs):
        bpm = get_synth_params(self.world).bpm
        if clamp_bpm(bpm) != self.state.bpm:
            self.update_interval(bpm)

    def on_board_restarted(self, sender, **kwargs):
        # New board, possibly with a different column count: restart the bar.
        state = self.state
        state.counter = 0
        state.elapsed_ms = 0.0
        state.last_step = None
