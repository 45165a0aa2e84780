"""Lookups for the singleton components stored in the world."""
from __future__ import annotations

from typing import Type, TypeVar

from esper import World

from minebeat.components.board import Board
from minebeat.components.game_state import GameState
from minebeat.components.game_timer import GameTimer
from minebeat.components.row_audio import RowAudioConfigs
from minebeat.components.sequencer_state import SequencerState
from minebeat.components.synth_params import SynthParams
from minebeat.components.wavefront import RippleSettings

T = TypeVar("T")


def _singleton(world: World, component_type: Type[T]) -> T:
    for _, component in world.get_component(component_type):
        return component
    raise RuntimeError(f"{component_type.__name__} resource not found")


def get_board(world: World) -> Board:
    return _singleton(world, Board)


def get_game_state(world: World) -> GameState:
    return _singleton(world, GameState)


def get_sequencer_state(world: World) -> SequencerState:
    return _singleton(world, SequencerState)


def get_synth_params(world: World) -> SynthParams:
    return _singleton(world, SynthParams)


def get_row_audio(world: World) -> RowAudioConfigs:
    return _singleton(world, RowAudioConfigs)


def get_ripple_settings(world: World) -> RippleSettings:
    return _singleton(world, RippleSettings)


def get_game_timer(world: World) -> GameTimer:
    return _singleton(world, GameTimer)


def board_entity(world: World) -> int:
    for entity, _ in world.get_component(Board):
        return entity
    raise RuntimeError("Board resource not found")
