"""Game state resource describing the active round."""
from dataclasses import dataclass
from enum import Enum, auto

from minebeat.constants import DEFAULT_BOARD_MODE


class GameMode(Enum):
    """Round phases. READY means no cell has been revealed yet."""
    READY = auto()
    PLAYING = auto()
    WON = auto()
    LOST = auto()


@dataclass
class GameState:
    """Singleton component storing the round phase and presentation toggles."""
    mode: GameMode = GameMode.READY
    board_mode: str = DEFAULT_BOARD_MODE
    show_probabilities: bool = False
    lost_at: tuple[int, int] | None = None

    @property
    def finished(self) -> bool:
        return self.mode in (GameMode.WON, GameMode.LOST)
