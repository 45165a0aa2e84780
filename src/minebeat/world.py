import random

from esper import World
from .events.bus import EventBus
from minebeat.components.board import Board
from minebeat.components.game_state import GameState
from minebeat.components.game_timer import GameTimer
from minebeat.components.row_audio import RowAudioConfigs
from minebeat.components.sequencer_state import SequencerState, interval_for_bpm
from minebeat.components.synth_params import SynthParams
from minebeat.components.wavefront import RippleSettings
from minebeat.constants import BOARD_MODES, DEFAULT_BOARD_MODE, DEFAULT_RIPPLE_QUALITY
from minebeat.systems.grid_ops import create_board


def create_world(
    event_bus: EventBus,
    *,
    board_mode: str = DEFAULT_BOARD_MODE,
    rng: random.Random | None = None,
) -> World:
    """Build the world with every singleton resource the systems expect.

    The board starts empty (mines unplaced); ``BoardSystem`` replaces it on restart.
    """
    if board_mode not in BOARD_MODES:
        raise ValueError(f"unknown board mode {board_mode!r}")
    world = World()
    setattr(world, "random", rng or random.Random())

    rows, cols, mines = BOARD_MODES[board_mode]
    world.create_entity(create_board(rows, cols, mines))

    synth = SynthParams()
    world.create_entity(
        GameState(board_mode=board_mode),
        GameTimer(),
        synth,
        SequencerState(bpm=synth.bpm, interval_ms=interval_for_bpm(synth.bpm)),
        RowAudioConfigs(),
        RippleSettings(quality=DEFAULT_RIPPLE_QUALITY),
    )
    return world


def replace_board(world: World, board: Board) -> None:
    for entity, _ in world.get_component(Board):
        world.add_component(entity, board)
        return
    world.create_entity(board)
