"""Unit tests for the round resolution and scoring tools."""
import random

import pytest

from conftest import ScriptedRng
from state import BEATS, HISTORY_LIMIT, Choice, GameState, Outcome, RoundRecord, Statistics
from tools import (
    append_history,
    clear_history,
    describe_round,
    get_game_summary,
    parse_choice,
    play_round,
    record_outcome,
    reset_statistics,
    resolve,
    select_opponent_choice,
    validate_move,
)


def _record(n):
    return RoundRecord(Choice.ROCK, Choice.PAPER, Outcome.LOSE, occurred_at=n)


def test_beats_relation():
    assert BEATS[Choice.ROCK] == Choice.SCISSORS
    assert BEATS[Choice.PAPER] == Choice.ROCK
    assert BEATS[Choice.SCISSORS] == Choice.PAPER
    for choice in Choice:
        assert BEATS[choice] != choice
    assert set(BEATS.values()) == set(Choice)


def test_resolve_tie():
    for choice in Choice:
        assert resolve(choice, choice) == Outcome.TIE


def test_resolve_win_cases():
    assert resolve(Choice.ROCK, Choice.SCISSORS) == Outcome.WIN
    assert resolve(Choice.PAPER, Choice.ROCK) == Outcome.WIN
    assert resolve(Choice.SCISSORS, Choice.PAPER) == Outcome.WIN


def test_resolve_lose_cases():
    assert resolve(Choice.ROCK, Choice.PAPER) == Outcome.LOSE
    assert resolve(Choice.PAPER, Choice.SCISSORS) == Outcome.LOSE
    assert resolve(Choice.SCISSORS, Choice.ROCK) == Outcome.LOSE


def test_resolve_is_mirrored():
    mirror = {Outcome.WIN: Outcome.LOSE, Outcome.LOSE: Outcome.WIN, Outcome.TIE: Outcome.TIE}
    for a in Choice:
        for b in Choice:
            assert resolve(b, a) == mirror[resolve(a, b)]


def test_record_outcome_keeps_totals_consistent():
    rng = random.Random(7)
    stats = Statistics()
    for n in range(1, 51):
        stats = record_outcome(stats, rng.choice(list(Outcome)))
        assert stats.wins + stats.losses + stats.ties == n == stats.total_games
        assert stats.points == 3 * stats.wins + stats.ties


def test_record_outcome_does_not_mutate_input():
    before = Statistics()
    after = record_outcome(before, Outcome.WIN)
    assert before == Statistics()
    assert after == Statistics(wins=1, total_games=1, points=3)


def test_reset_statistics_is_idempotent():
    assert reset_statistics() == reset_statistics() == Statistics(0, 0, 0, 0, 0)


def test_win_rate():
    assert Statistics().win_rate == 0
    assert Statistics(wins=1, losses=2, total_games=3, points=3).win_rate == 33
    assert Statistics(wins=2, losses=1, total_games=3, points=6).win_rate == 67


def test_append_history_caps_length_and_keeps_newest_first():
    history = clear_history()
    for n in range(15):
        history = append_history(history, _record(n))
    assert len(history) == HISTORY_LIMIT
    assert history[0].occurred_at == 14
    assert history[-1].occurred_at == 5


def test_clear_history():
    assert clear_history() == ()


def test_select_opponent_choice_uses_injected_rng():
    assert select_opponent_choice(ScriptedRng(Choice.PAPER)) == Choice.PAPER


def test_select_opponent_choice_covers_all_choices():
    rng = random.Random(1234)
    counts = {choice: 0 for choice in Choice}
    for _ in range(3000):
        counts[select_opponent_choice(rng)] += 1
    for count in counts.values():
        assert 800 < count < 1200


def test_rock_beats_forced_scissors(always_scissors, clock):
    record, state = play_round(Choice.ROCK, GameState(), rng=always_scissors, clock=clock)
    assert record.outcome == Outcome.WIN
    assert record.opponent_choice == Choice.SCISSORS
    assert state.stats == Statistics(wins=1, losses=0, ties=0, total_games=1, points=3)
    assert state.history == (record,)


def test_paper_ties_forced_paper(clock):
    record, state = play_round(Choice.PAPER, GameState(), rng=ScriptedRng(Choice.PAPER), clock=clock)
    assert record.outcome == Outcome.TIE
    assert state.stats == Statistics(wins=0, losses=0, ties=1, total_games=1, points=1)


def test_scissors_loses_to_forced_rock(clock):
    record, state = play_round(Choice.SCISSORS, GameState(), rng=ScriptedRng(Choice.ROCK), clock=clock)
    assert record.outcome == Outcome.LOSE
    assert state.stats == Statistics(wins=0, losses=1, ties=0, total_games=1, points=0)


def test_play_round_leaves_input_state_alone(always_scissors, clock):
    start = GameState()
    play_round(Choice.ROCK, start, rng=always_scissors, clock=clock)
    assert start == GameState()


def test_play_round_stamps_record_with_clock(always_scissors):
    record, _ = play_round(Choice.ROCK, GameState(), rng=always_scissors, clock=lambda: 42)
    assert record.occurred_at == 42
    assert record.points_earned == 3


def test_parse_choice():
    assert parse_choice(" Rock ") == Choice.ROCK
    assert parse_choice(Choice.PAPER) == Choice.PAPER
    with pytest.raises(ValueError):
        parse_choice("lizard")
    with pytest.raises(ValueError):
        parse_choice(None)


def test_validate_move():
    assert validate_move("SCISSORS") == {"valid": True, "move": "scissors", "reason": None}
    result = validate_move("bomb")
    assert result["valid"] is False
    assert result["move"] is None
    assert "rock" in result["reason"]


def test_summaries_mention_result(always_scissors, clock):
    record, state = play_round(Choice.ROCK, GameState(), rng=always_scissors, clock=clock)
    assert "You Win!" in describe_round(record)
    assert "+3 points" in describe_round(record)
    summary = get_game_summary(state)
    assert "Points: 3" in summary
    assert "Win rate: 100%" in summary
    assert "Won" in summary
