from dataclasses import dataclass

from minebeat.constants import DEFAULT_BPM, STEPS_PER_BEAT


def interval_for_bpm(bpm: float) -> float:
    """Milliseconds between steps; one step is a sixteenth note."""
    return 60000 / bpm / STEPS_PER_BEAT


@dataclass(slots=True)
class SequencerState:
    """Step clock state shared with the renderer (playhead column)."""
    bpm: float = DEFAULT_BPM
    running: bool = False
    counter: int = 0
    interval_ms: float = interval_for_bpm(DEFAULT_BPM)
    elapsed_ms: float = 0.0
    last_step: int | None = None
