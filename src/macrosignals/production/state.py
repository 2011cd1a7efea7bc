"""Durable state for the signal engine.

This module provides a small key-value persistence contract with in-memory,
JSON and SQLite backends, and the RegimeTrackerState record that the regime
change tracker keeps in it across process restarts.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from macrosignals.regime.types import MarketRegime

logger = logging.getLogger(__name__)

REGIME_KEY = "last_market_regime"
LAST_CHANGE_KEY = "last_regime_change"
NOTIFICATIONS_ENABLED_KEY = "regime_notifications_enabled"


@dataclass(frozen=True)
class RegimeTrackerState:
    """Persisted regime tracking state.

    Attributes:
        last_known_regime: Regime seen on the last confirmed observation.
        last_change_timestamp: When last_known_regime was recorded.
        notifications_enabled: Whether transitions produce alerts.
    """

    last_known_regime: Optional[MarketRegime] = None
    last_change_timestamp: Optional[datetime] = None
    notifications_enabled: bool = True

    @property
    def is_tracking(self) -> bool:
        return self.last_known_regime is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert state to dictionary for serialization.

        Returns:
            Dictionary representation of the state.
        """
        return {
            "last_known_regime": self.last_known_regime.value if self.last_known_regime else None,
            "last_change_timestamp": (
                self.last_change_timestamp.isoformat() if self.last_change_timestamp else None
            ),
            "notifications_enabled": self.notifications_enabled,
        }


class KeyValueStore(ABC):
    """Abstract base class for key-value persistence.

    Values are JSON-compatible: scalars, None, or lists and dicts of them.
    Implementations must make a value written by set() or set_many() visible
    to get() after a process restart, except for the in-memory store.
    set_many() writes all of its values in one step.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Read a value.

        Args:
            key: Key to read.
            default: Returned when the key was never written.

        Returns:
            Stored value or default.
        """

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Write a value, overwriting any previous one.

        Args:
            key: Key to write.
            value: JSON-compatible value.
        """

    @abstractmethod
    def set_many(self, values: dict[str, Any]) -> None:
        """Write several values at once, so either all or none are stored.

        Args:
            values: Mapping of key to JSON-compatible value.
        """

    @abstractmethod
    def contains(self, key: str) -> bool:
        """Return True if the key has ever been written."""

    def __contains__(self, key: str) -> bool:
        return self.contains(key)


class InMemoryKeyValueStore(KeyValueStore):
    """In-memory store for testing.

    Stores values in a dict without any persistence.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def set_many(self, values: dict[str, Any]) -> None:
        self._values.update(values)

    def contains(self, key: str) -> bool:
        return key in self._values

    def clear(self) -> None:
        """Remove all stored values."""
        self._values.clear()


class JSONKeyValueStore(KeyValueStore):
    """JSON file-based store.

    Keeps every key in a single human-readable JSON object. Writes go to a
    temporary file that then replaces the original, so a crash mid-write
    leaves the previous contents intact.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """Initialize JSON store.

        Args:
            path: Path to the JSON file. Parent directories are created.
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        logger.info(f"JSONKeyValueStore initialized at {self.path}")

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt state file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"State file {self.path} does not hold an object, ignoring")
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, Any]) -> None:
        with self._lock:
            data = self._read()
            data.update(values)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w") as f:
                json.dump(data, f, indent=2)
            tmp_path.replace(self.path)
        logger.debug(f"Saved {', '.join(values)} to {self.path}")

    def contains(self, key: str) -> bool:
        return key in self._read()


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-based store for production use.

    Values are stored JSON-encoded in a single two-column table.
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        """Initialize SQLite store.

        Creates the database and table if they don't exist.

        Args:
            db_path: Path to SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()
        logger.info(f"SQLiteKeyValueStore initialized at {self.db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_state (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.commit()

    def get(self, key: str, default: Any = None) -> Any:
        with self._get_connection() as conn:
            row = conn.execute("SELECT value FROM kv_state WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, Any]) -> None:
        updated_at = datetime.now().isoformat()
        with self._get_connection() as conn:
            conn.executemany(
                """
                INSERT OR REPLACE INTO kv_state (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                [(key, json.dumps(value), updated_at) for key, value in values.items()],
            )
            conn.commit()
        logger.debug(f"Saved {', '.join(values)} to SQLite")

    def contains(self, key: str) -> bool:
        with self._get_connection() as conn:
            row = conn.execute("SELECT 1 FROM kv_state WHERE key = ?", (key,)).fetchone()
        return row is not None


def create_store(path: Optional[Union[str, Path]]) -> KeyValueStore:
    """Pick a store backend from a path.

    Args:
        path: None for in-memory, a .db/.sqlite path for SQLite, anything else
            for JSON.

    Returns:
        Configured KeyValueStore.
    """
    if path is None:
        return InMemoryKeyValueStore()
    path = Path(path)
    if path.suffix in (".db", ".sqlite", ".sqlite3"):
        return SQLiteKeyValueStore(path)
    return JSONKeyValueStore(path)


def load_tracker_state(store: KeyValueStore) -> RegimeTrackerState:
    """Read RegimeTrackerState fields from a store.

    Unreadable values are logged and treated as absent rather than raised.
    """
    regime: Optional[MarketRegime] = None
    raw_regime = store.get(REGIME_KEY)
    if raw_regime is not None:
        try:
            regime = MarketRegime(raw_regime)
        except ValueError:
            logger.warning(f"Ignoring unknown persisted regime: {raw_regime!r}")

    changed_at: Optional[datetime] = None
    raw_changed = store.get(LAST_CHANGE_KEY)
    if raw_changed is not None:
        try:
            changed_at = datetime.fromisoformat(raw_changed)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unreadable regime change timestamp: {raw_changed!r}")

    return RegimeTrackerState(
        last_known_regime=regime,
        last_change_timestamp=changed_at,
        notifications_enabled=bool(store.get(NOTIFICATIONS_ENABLED_KEY, True)),
    )


def save_tracker_state(store: KeyValueStore, state: RegimeTrackerState) -> None:
    """Write all RegimeTrackerState fields to a store."""
    data = state.to_dict()
    store.set_many(
        {
            REGIME_KEY: data["last_known_regime"],
            LAST_CHANGE_KEY: data["last_change_timestamp"],
            NOTIFICATIONS_ENABLED_KEY: data["notifications_enabled"],
        }
    )
