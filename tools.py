"""
Game logic tools for the Rock-Paper-Scissors scoreboard.

All game logic is deterministic given the opponent's choice and lives in
these functions. Every transition returns new values; nothing here touches
storage or the terminal.
"""

import logging
import random
import time
from typing import Callable, Dict, Optional, Tuple

from state import (
    BEATS,
    CHOICE_EMOJIS,
    CHOICE_NAMES,
    HISTORY_LIMIT,
    POINTS,
    RESULT_LABELS,
    RESULT_MESSAGES,
    Choice,
    GameState,
    Outcome,
    RoundRecord,
    Statistics,
)

logger = logging.getLogger(__name__)

VALID_MOVES = tuple(choice.value for choice in Choice)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def parse_choice(value) -> Choice:
    """
    Normalize a choice given as a Choice or a case-insensitive name.

    Raises:
        ValueError: if the value is not one of rock, paper, scissors
    """
    if isinstance(value, Choice):
        return value
    normalized = str(value or "").strip().lower()
    try:
        return Choice(normalized)
    except ValueError:
        raise ValueError(
            f"invalid move: {value!r}. valid moves: {', '.join(VALID_MOVES)}"
        ) from None


def validate_move(user_input: str) -> Dict:
    """
    Validate and normalize user input.

    Args:
        user_input: Raw user input string

    Returns:
        {
            "valid": bool,
            "move": str | None,
            "reason": str | None
        }
    """
    try:
        choice = parse_choice(user_input)
    except ValueError:
        return {
            "valid": False,
            "move": None,
            "reason": f"Invalid move. Valid moves are: {', '.join(VALID_MOVES)}"
        }

    return {
        "valid": True,
        "move": choice.value,
        "reason": None
    }


def select_opponent_choice(rng=None) -> Choice:
    """
    Pick the bot's choice uniformly at random.

    Args:
        rng: Source of randomness with a ``choice`` method (defaults to the
            ``random`` module)
    """
    source = rng if rng is not None else random
    return source.choice(tuple(Choice))


def resolve(player: Choice, opponent: Choice) -> Outcome:
    """Decide the outcome of a round for the human player."""
    if player == opponent:
        return Outcome.TIE
    if BEATS[player] == opponent:
        return Outcome.WIN
    return Outcome.LOSE


def record_outcome(stats: Statistics, outcome: Outcome) -> Statistics:
    """
    Return new statistics with one more game of the given outcome.

    Args:
        stats: Current statistics (left untouched)
        outcome: Outcome of the finished round

    Returns:
        Updated Statistics
    """
    return Statistics(
        wins=stats.wins + (1 if outcome == Outcome.WIN else 0),
        losses=stats.losses + (1 if outcome == Outcome.LOSE else 0),
        ties=stats.ties + (1 if outcome == Outcome.TIE else 0),
        total_games=stats.total_games + 1,
        points=stats.points + POINTS[outcome],
    )


def reset_statistics() -> Statistics:
    return Statistics()


def append_history(
    history: Tuple[RoundRecord, ...],
    record: RoundRecord
) -> Tuple[RoundRecord, ...]:
    """Prepend a record, keeping only the most recent HISTORY_LIMIT rounds."""
    return ((record,) + tuple(history))[:HISTORY_LIMIT]


def clear_history() -> Tuple[RoundRecord, ...]:
    return ()


def play_round(
    player_choice: Choice,
    state: GameState,
    rng=None,
    clock: Optional[Callable[[], int]] = None
) -> Tuple[RoundRecord, GameState]:
    """
    Play one round against the bot.

    Args:
        player_choice: The human player's choice
        state: Current game state (left untouched)
        rng: Randomness source for the bot's choice
        clock: Returns the round's timestamp in epoch milliseconds

    Returns:
        (record, new_state)
    """
    opponent_choice = select_opponent_choice(rng)
    outcome = resolve(player_choice, opponent_choice)
    record = RoundRecord(
        player_choice=player_choice,
        opponent_choice=opponent_choice,
        outcome=outcome,
        occurred_at=(clock or now_ms)(),
    )
    new_state = GameState(
        stats=record_outcome(state.stats, outcome),
        history=append_history(state.history, record),
    )
    logger.debug(
        "Round played: %s vs %s -> %s",
        player_choice.value, opponent_choice.value, outcome.value
    )
    return record, new_state


def describe_round(record: RoundRecord) -> str:
    """One-line, human-readable description of a round."""
    return (
        f"You played {CHOICE_EMOJIS[record.player_choice]} {CHOICE_NAMES[record.player_choice]}, "
        f"Bot played {CHOICE_EMOJIS[record.opponent_choice]} {CHOICE_NAMES[record.opponent_choice]} "
        f"→ {RESULT_MESSAGES[record.outcome]} (+{record.points_earned} points)"
    )


def get_game_summary(state: GameState) -> str:
    """
    Generate a human-readable scoreboard.

    Args:
        state: Current game state

    Returns:
        Formatted summary string
    """
    stats = state.stats
    summary = "\n=== SCOREBOARD ===\n"
    summary += (
        f"Points: {stats.points} | Wins: {stats.wins} | Losses: {stats.losses} "
        f"| Ties: {stats.ties} | Win rate: {stats.win_rate}%\n"
    )
    summary += f"Games played: {stats.total_games}\n"

    if state.history:
        summary += "\nRecent Games:\n"
        for record in state.history:
            summary += (
                f"  {CHOICE_EMOJIS[record.player_choice]} vs "
                f"{CHOICE_EMOJIS[record.opponent_choice]} → {RESULT_LABELS[record.outcome]}\n"
            )

    return summary
