import pytest

from minebeat.events.bus import EVENT_TICK
from minebeat.systems.game_timer_system import GameTimerSystem
from minebeat.utils.resources import get_game_timer
from tests.helpers import board_from_layout, install_board, make_game


def test_timer_runs_from_first_reveal_until_loss():
    bus, world, board_system = make_game("small")
    GameTimerSystem(world, bus)
    timer = get_game_timer(world)
    bus.emit(EVENT_TICK, dt=1.0)
    assert timer.elapsed == 0.0

    board_system.reveal(4, 4)
    if board_system.engine.check_win():
        pytest.skip("seed cleared the board in one click")
    assert timer.running
    bus.emit(EVENT_TICK, dt=0.5)
    bus.emit(EVENT_TICK, dt=0.25)
    assert timer.elapsed == pytest.approx(0.75)

    mine = next(
        (r, c) for r in range(9) for c in range(9)
        if board_system.engine.board.cells[r][c].is_mine
    )
    board_system.reveal(*mine)
    assert not timer.running
    bus.emit(EVENT_TICK, dt=3.0)
    assert timer.elapsed == pytest.approx(0.75)


def test_win_reports_elapsed_and_restart_clears():
    bus, world, board_system = make_game("small")
    GameTimerSystem(world, bus)
    timer = get_game_timer(world)
    install_board(world, board_system, board_from_layout([
        "*...",
        "....",
        "....",
    ]))
    timer.running = True
    bus.emit(EVENT_TICK, dt=2.0)
    won = []
    bus.subscribe("game_won", lambda sender, **payload: won.append(payload))
    board_system.reveal(2, 3)
    assert won == [{"elapsed": pytest.approx(2.0)}]
    assert not timer.running

    board_system.restart()
    assert timer.elapsed == 0.0
    assert not timer.running
