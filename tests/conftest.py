"""Shared fixtures for the scoreboard tests."""
import itertools

import pytest

from state import Choice


class ScriptedRng:
    """Hands out the given bot choices in order, repeating the last cycle."""

    def __init__(self, *choices):
        self._choices = itertools.cycle(choices)

    def choice(self, seq):
        picked = next(self._choices)
        assert picked in seq
        return picked


class FailingStore:
    """Store whose every operation fails like a full or read-only disk."""

    def get(self, key):
        raise OSError("disk unavailable")

    def set(self, key, value):
        raise OSError("disk unavailable")

    def set_many(self, items):
        raise OSError("disk unavailable")

    def delete(self, key):
        raise OSError("disk unavailable")


@pytest.fixture
def always_scissors():
    return ScriptedRng(Choice.SCISSORS)


@pytest.fixture
def clock():
    ticks = itertools.count(1_700_000_000_000, 1000)
    return lambda: next(ticks)
