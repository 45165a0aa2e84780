from dataclasses import dataclass


@dataclass(slots=True)
class GameTimer:
    """Seconds elapsed since the first reveal of the current round."""
    elapsed: float = 0.0
    running: bool = False
