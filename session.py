"""
Stateful front for the scoreboard, used by the referee shell.

The session holds the authoritative in-memory state for the current run and
asks the persistence gateway to save after every change.
"""

import logging
from typing import Optional, Tuple

from state import GameState, RoundRecord, Statistics, initialize_game
from storage import MemoryStore, PersistenceGateway
from tools import clear_history, parse_choice, play_round, reset_statistics

logger = logging.getLogger(__name__)


class GameSession:
    """
    A single player's game against the bot.

    Args:
        gateway: Where state is loaded from and saved to (defaults to an
            in-memory store)
        rng: Randomness source for the bot's choices
        clock: Returns timestamps in epoch milliseconds
    """

    def __init__(self, gateway: Optional[PersistenceGateway] = None, rng=None, clock=None):
        self.gateway = gateway if gateway is not None else PersistenceGateway(MemoryStore())
        self.rng = rng
        self.clock = clock

        loaded = self.gateway.load_state()
        if loaded is None:
            logger.info("No saved game found, starting fresh")
            self.state = initialize_game()
        else:
            self.state = loaded

    def play_round(self, choice) -> RoundRecord:
        """
        Play a round with the given choice and save the result.

        Raises:
            ValueError: if choice is not rock, paper or scissors
        """
        player_choice = parse_choice(choice)
        record, self.state = play_round(player_choice, self.state, rng=self.rng, clock=self.clock)
        self.gateway.save_state(self.state)
        return record

    def get_statistics(self) -> Statistics:
        return self.state.stats

    def get_history(self) -> Tuple[RoundRecord, ...]:
        return self.state.history

    @property
    def last_round(self) -> Optional[RoundRecord]:
        return self.state.history[0] if self.state.history else None

    def reset_all(self) -> None:
        """Wipe statistics and history, both in memory and in storage."""
        self.state = GameState(stats=reset_statistics(), history=clear_history())
        self.gateway.clear_state()
        self.gateway.save_state(self.state)
