# Board modes: name -> (rows, cols, mines)
BOARD_MODES = {
    "small": (9, 9, 10),
    "classic": (16, 16, 40),
    "large": (24, 24, 99),
    "huge": (32, 32, 180),
}
DEFAULT_BOARD_MODE = "classic"

# Sequencer timing. One tick is a sixteenth note.
DEFAULT_BPM = 100
MIN_BPM = 20
MAX_BPM = 300
STEPS_PER_BEAT = 4

# Wavefront animator
DEFAULT_MAX_WAVEFRONTS = 3
DEFAULT_RIPPLE_QUALITY = "balanced"
BASE_INTENSITY = 1.0

# Pitch mapping (MIDI note numbers)
BASE_NOTE = 60
MAX_NOTE = 96
PENTATONIC_OFFSETS = (0, 2, 4, 7, 9)

# Window / layout
WINDOW_WIDTH = 960
WINDOW_HEIGHT = 760
BOTTOM_MARGIN = 20
TOP_MARGIN = 70  # room for the HUD strip above the board
MIN_TILE_SIZE = 12
CELL_PADDING = 1

# Board maximum footprint relative to window (percentage of window width/height).
BOARD_MAX_WIDTH_PCT = 0.90
BOARD_MAX_HEIGHT_PCT = 0.95
