from esper import World

from minebeat.events.bus import (
    EVENT_BOARD_RESTARTED,
    EVENT_FIRST_REVEAL,
    EVENT_GAME_LOST,
    EVENT_GAME_WON,
    EVENT_TICK,
    EventBus,
)
from minebeat.utils.resources import get_game_timer


class GameTimerSystem:
    """Counts seconds from the first reveal until the round is won or lost."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_FIRST_REVEAL, self.on_first_reveal)
        self.event_bus.subscribe(EVENT_GAME_WON, self.on_round_over)
        self.event_bus.subscribe(EVENT_GAME_LOST, self.on_round_over)
        self.event_bus.subscribe(EVENT_BOARD_RESTARTED, self.on_board_restarted)

    def on_tick(self, sender, **kwargs):
        timer = get_game_timer(self.world)
        if timer.running:
            timer.elapsed += float(kwargs.get('dt', 1/60))

    def on_first_reveal(self, sender, **kwargs):
        timer = get_game_timer(self.world)
        timer.elapsed = 0.0
        timer.running = True

    def on_round_over(self, sender, **kwargs):
        get_game_timer(self.world).running = False

    def on_board_restarted(self, sender, **kwargs):
        timer = get_game_timer(self.world)
        timer.elapsed = 0.0
        timer.running = False
