"""
Persistence for the Rock-Paper-Scissors scoreboard.

The game only needs a tiny key-value store with synchronous get/set. The
gateway owns the serialized form of the state and keeps storage failures
away from the game: a broken store never stops a round from being played.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from state import HISTORY_LIMIT, GameState, RoundRecord, Statistics

logger = logging.getLogger(__name__)

STATS_KEY = "rps-stats"
HISTORY_KEY = "rps-history"

# Anything that can go wrong while reading, parsing or writing a blob
STORE_ERRORS = (OSError, ValueError, TypeError, KeyError, AttributeError)


class KeyValueStore(Protocol):
    """Minimal string key-value store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def set_many(self, items: Dict[str, str]) -> None:
        """Write several keys at once; either all land or none do."""
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def set_many(self, items: Dict[str, str]) -> None:
        self.data.update(items)

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """
    Keeps every key in a single JSON object on disk.

    Writes go to a temp file that replaces the original, so a crash mid-write
    leaves the previous file intact.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=self.path.name, dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except Exception:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, items: Dict[str, str]) -> None:
        data = self._read()
        data.update(items)
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


def _load_stats(raw: Optional[str]) -> Statistics:
    if raw is None:
        return Statistics()
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise TypeError("stats blob is not an object")
    return Statistics.from_dict(data)


def _load_history(raw: Optional[str]):
    if raw is None:
        return ()
    data = json.loads(raw)
    if not isinstance(data, list):
        raise TypeError("history blob is not a list")
    return tuple(RoundRecord.from_dict(item) for item in data[:HISTORY_LIMIT])


class PersistenceGateway:
    """Loads the game state at start-up and saves it after every change."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load_state(self) -> Optional[GameState]:
        """
        Load the saved state.

        Returns:
            The saved GameState, or None on first run or when the saved
            data cannot be used
        """
        try:
            raw_stats = self.store.get(STATS_KEY)
            raw_history = self.store.get(HISTORY_KEY)
        except STORE_ERRORS as e:
            logger.warning("Could not read saved game state: %s", e)
            return None

        if raw_stats is None and raw_history is None:
            return None

        try:
            return GameState(stats=_load_stats(raw_stats), history=_load_history(raw_history))
        except STORE_ERRORS as e:
            logger.warning("Discarding malformed saved game state: %s", e)
            return None

    def save_state(self, state: GameState) -> bool:
        """Persist the state. Returns False if the store rejected the write."""
        serialized = state.to_dict()
        try:
            self.store.set_many({
                STATS_KEY: json.dumps(serialized["stats"]),
                HISTORY_KEY: json.dumps(serialized["history"]),
            })
        except STORE_ERRORS as e:
            logger.warning("Could not save game state: %s", e)
            return False
        return True

    def clear_state(self) -> bool:
        """Remove the saved state. Returns False if the store failed."""
        try:
            self.store.delete(STATS_KEY)
            self.store.delete(HISTORY_KEY)
        except STORE_ERRORS as e:
            logger.warning("Could not clear saved game state: %s", e)
            return False
        return True
