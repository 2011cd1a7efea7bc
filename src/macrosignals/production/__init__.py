"""Durable state and the end-to-end signal pipeline.

The pipeline lives in macrosignals.production.pipeline and is not
re-exported here, since it depends on macrosignals.monitoring which in turn
depends on this package's state module.
"""

from .state import (
    LAST_CHANGE_KEY,
    NOTIFICATIONS_ENABLED_KEY,
    REGIME_KEY,
    InMemoryKeyValueStore,
    JSONKeyValueStore,
    KeyValueStore,
    RegimeTrackerState,
    SQLiteKeyValueStore,
    create_store,
    load_tracker_state,
    save_tracker_state,
)

__all__ = [
    # Persisted keys
    "REGIME_KEY",
    "LAST_CHANGE_KEY",
    "NOTIFICATIONS_ENABLED_KEY",
    # Stores
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JSONKeyValueStore",
    "SQLiteKeyValueStore",
    "create_store",
    # Tracker state
    "RegimeTrackerState",
    "load_tracker_state",
    "save_tracker_state",
]
