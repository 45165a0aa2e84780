from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods alive for systems nobody else holds on to.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"  # payload: dt=float (seconds)


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_MOUSE_PRESS = "mouse_press"  # payload: x, y, button
EVENT_CELL_CLICK = "cell_click"    # payload: row, col, button


# ============================================================================
# BOARD COMMANDS
# ============================================================================
EVENT_CELL_REVEAL_REQUEST = "cell_reveal_request"      # payload: row, col
EVENT_CELL_FLAG_REQUEST = "cell_flag_request"          # payload: row, col
EVENT_CELL_MUTE_REQUEST = "cell_mute_request"          # payload: row, col
EVENT_BOARD_RESTART_REQUEST = "board_restart_request"  # payload: mode=str|None


# ============================================================================
# BOARD LIFECYCLE
# ============================================================================
EVENT_BOARD_RESTARTED = "board_restarted"  # payload: rows, cols, mines, mode=str
EVENT_FIRST_REVEAL = "first_reveal"        # payload: row, col
EVENT_BOARD_CHANGED = "board_changed"      # payload: reason=str, positions=list[(r,c)]
EVENT_GAME_WON = "game_won"                # payload: elapsed=float|None
EVENT_GAME_LOST = "game_lost"              # payload: row, col


# ============================================================================
# SEQUENCER
# ============================================================================
EVENT_SEQUENCER_STARTED = "sequencer_started"  # payload: bpm, interval_ms
EVENT_SEQUENCER_STOPPED = "sequencer_stopped"  # payload: counter
EVENT_SEQUENCER_STEP = "sequencer_step"        # payload: step=int, counter=int
EVENT_STEP_TRIGGER = "step_trigger"            # payload: row, col
EVENT_BPM_CHANGED = "bpm_changed"              # payload: bpm, interval_ms


# ============================================================================
# AUDIO & VISUAL SETTINGS
# ============================================================================
EVENT_SYNTH_PARAMS_CHANGED = "synth_params_changed"        # payload: params=dict
EVENT_ROW_AUDIO_CHANGED = "row_audio_changed"              # payload: row=int|None
EVENT_RIPPLE_QUALITY_CHANGED = "ripple_quality_changed"    # payload: quality=str
EVENT_AUDIO_WARNING = "audio_warning"                      # payload: row, ref, message
