from dataclasses import dataclass
from typing import Tuple


@dataclass(slots=True)
class Wavefront:
    """Expanding radial pulse centred on a triggered cell."""
    origin_row: int
    origin_col: int
    radius_step: float
    wave_width: float
    sigma: float
    brightness_scale: float
    cutoff: float
    sample_step: int
    max_age: float
    revert_ms: float
    age: float = 0.0


@dataclass(slots=True)
class PendingRevert:
    """Restores a cell's displayed intensity once ``deadline`` (ms) has passed."""
    cell: Tuple[int, int]
    deadline: float
    previous_value: float


@dataclass(slots=True)
class RippleSettings:
    quality: str = "balanced"
