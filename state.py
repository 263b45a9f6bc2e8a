"""
Game state for the Rock-Paper-Scissors scoreboard.

Holds the choice/outcome model, the scoring table and the immutable
records that make up a player's running state.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


class Choice(str, Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


class Outcome(str, Enum):
    """Result of a round from the human player's side."""
    WIN = "win"
    LOSE = "lose"
    TIE = "tie"


# Each choice mapped to the choice it defeats
BEATS: Dict[Choice, Choice] = {
    Choice.ROCK: Choice.SCISSORS,
    Choice.PAPER: Choice.ROCK,
    Choice.SCISSORS: Choice.PAPER,
}

POINTS: Dict[Outcome, int] = {
    Outcome.WIN: 3,
    Outcome.TIE: 1,
    Outcome.LOSE: 0,
}

HISTORY_LIMIT = 10

CHOICE_NAMES: Dict[Choice, str] = {
    Choice.ROCK: "Rock",
    Choice.PAPER: "Paper",
    Choice.SCISSORS: "Scissors",
}

CHOICE_EMOJIS: Dict[Choice, str] = {
    Choice.ROCK: "🪨",
    Choice.PAPER: "📄",
    Choice.SCISSORS: "✂️",
}

RESULT_MESSAGES: Dict[Outcome, str] = {
    Outcome.WIN: "🎉 You Win!",
    Outcome.LOSE: "😅 Bot Wins!",
    Outcome.TIE: "🤝 It's a Tie!",
}

RESULT_LABELS: Dict[Outcome, str] = {
    Outcome.WIN: "Won",
    Outcome.LOSE: "Lost",
    Outcome.TIE: "Tie",
}


def _outcome_for(player: Choice, opponent: Choice) -> Outcome:
    if player == opponent:
        return Outcome.TIE
    return Outcome.WIN if BEATS[player] == opponent else Outcome.LOSE


@dataclass(frozen=True)
class RoundRecord:
    """One resolved round. occurred_at is epoch milliseconds."""
    player_choice: Choice
    opponent_choice: Choice
    outcome: Outcome
    occurred_at: int

    @property
    def points_earned(self) -> int:
        return POINTS[self.outcome]

    def to_dict(self) -> dict:
        return {
            "playerChoice": self.player_choice.value,
            "botChoice": self.opponent_choice.value,
            "result": self.outcome.value,
            "timestamp": self.occurred_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RoundRecord":
        """
        Build a record from its serialized form.

        Raises:
            KeyError, ValueError, TypeError: if the dict does not match the schema
        """
        timestamp = data["timestamp"]
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise TypeError(f"timestamp must be a number, got {timestamp!r}")
        if not math.isfinite(timestamp):
            raise ValueError(f"timestamp must be finite, got {timestamp!r}")

        record = cls(
            player_choice=Choice(data["playerChoice"]),
            opponent_choice=Choice(data["botChoice"]),
            outcome=Outcome(data["result"]),
            occurred_at=int(timestamp),
        )
        if record.outcome != _outcome_for(record.player_choice, record.opponent_choice):
            raise ValueError(
                f"result {record.outcome.value!r} does not match "
                f"{record.player_choice.value} vs {record.opponent_choice.value}"
            )
        return record


@dataclass(frozen=True)
class Statistics:
    """
    Running totals for a player.

    wins + losses + ties always equals total_games, and points always
    equals 3 * wins + ties.
    """
    wins: int = 0
    losses: int = 0
    ties: int = 0
    total_games: int = 0
    points: int = 0

    @property
    def win_rate(self) -> int:
        """Whole-number percentage of games won, 0 before the first game."""
        if self.total_games > 0:
            return round(100 * self.wins / self.total_games)
        return 0

    def to_dict(self) -> dict:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "totalGames": self.total_games,
            "points": self.points,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Statistics":
        """
        Build statistics from their serialized form.

        Raises:
            KeyError, TypeError, ValueError: if a counter is missing, not an
                integer, negative, or the counters are inconsistent
        """
        values = {}
        for attr, key in (
            ("wins", "wins"),
            ("losses", "losses"),
            ("ties", "ties"),
            ("total_games", "totalGames"),
            ("points", "points"),
        ):
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{key} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{key} must be non-negative, got {value}")
            values[attr] = value

        stats = cls(**values)
        if stats.wins + stats.losses + stats.ties != stats.total_games:
            raise ValueError("wins + losses + ties does not match totalGames")
        if stats.points != POINTS[Outcome.WIN] * stats.wins + POINTS[Outcome.TIE] * stats.ties:
            raise ValueError("points do not match wins and ties")
        return stats


@dataclass(frozen=True)
class GameState:
    """
    Complete state of a player's scoreboard.

    History is most-recent-first and never longer than HISTORY_LIMIT.
    """
    stats: Statistics = field(default_factory=Statistics)
    history: Tuple[RoundRecord, ...] = ()

    def to_dict(self) -> dict:
        """Convert state to dictionary for serialization."""
        return {
            "stats": self.stats.to_dict(),
            "history": [record.to_dict() for record in self.history],
        }


def initialize_game() -> GameState:
    """Initialize an empty game state."""
    return GameState()
