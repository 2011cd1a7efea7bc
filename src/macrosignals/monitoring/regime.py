"""Regime change tracking.

This module keeps the last known market regime in durable storage, detects
transitions and decides whether a transition should raise an alert.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from macrosignals.monitoring.alerts import AlertManager
from macrosignals.production.state import (
    LAST_CHANGE_KEY,
    NOTIFICATIONS_ENABLED_KEY,
    REGIME_KEY,
    InMemoryKeyValueStore,
    KeyValueStore,
    RegimeTrackerState,
    load_tracker_state,
)
from macrosignals.regime.types import MarketRegime

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AlertPayload:
    """A confirmed regime transition worth notifying about.

    Attributes:
        from_regime: Regime before the transition.
        to_regime: Regime after the transition.
        changed_at: When the transition was observed.
    """

    from_regime: MarketRegime
    to_regime: MarketRegime
    changed_at: datetime

    @property
    def title(self) -> str:
        return self.to_regime.notification_title

    @property
    def body(self) -> str:
        return self.to_regime.notification_body

    def to_dict(self) -> dict[str, Any]:
        return {
            "from_regime": self.from_regime.value,
            "to_regime": self.to_regime.value,
            "changed_at": self.changed_at.isoformat(),
            "title": self.title,
            "body": self.body,
        }


class RegimeChangeTracker:
    """Track the market regime across observations and flag transitions.

    States are Uninitialized (nothing persisted) and Tracking(regime).
    observe() behaves as follows:
    - NO_DATA: ignored, state untouched
    - Uninitialized: start tracking the regime, no alert
    - same regime as tracked: nothing happens
    - different regime: track the new regime and, if notifications are
      enabled, return (and emit) exactly one AlertPayload

    observe() is serialized with a lock so concurrent callers cannot
    interleave the read of the previous regime with the write of the new one.

    Example:
        >>> tracker = RegimeChangeTracker(InMemoryKeyValueStore())
        >>> tracker.observe(MarketRegime.RISK_ON) is None
        True
        >>> tracker.observe(MarketRegime.RISK_OFF).to_regime
        <MarketRegime.RISK_OFF: 'RISK-OFF'>
    """

    # Ordering used to pick an alert level for a transition
    REGIME_SEVERITY = {
        MarketRegime.RISK_ON: 0,
        MarketRegime.MIXED: 1,
        MarketRegime.RISK_OFF: 2,
    }

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        alert_manager: Optional[AlertManager] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize tracker.

        Args:
            store: Durable key-value store. Defaults to an in-memory store.
            alert_manager: Optional AlertManager that receives an alert for
                every payload observe() returns.
            clock: Returns the current time. Defaults to UTC now.
        """
        self._store = store if store is not None else InMemoryKeyValueStore()
        self._alert_manager = alert_manager
        self._clock = clock or _utcnow
        self._lock = threading.Lock()

        # Only the very first initialization turns notifications on
        if not self._store.contains(NOTIFICATIONS_ENABLED_KEY):
            self._store.set(NOTIFICATIONS_ENABLED_KEY, True)

    @property
    def state(self) -> RegimeTrackerState:
        return load_tracker_state(self._store)

    @property
    def last_known_regime(self) -> Optional[MarketRegime]:
        return self.state.last_known_regime

    @property
    def last_change_timestamp(self) -> Optional[datetime]:
        return self.state.last_change_timestamp

    @property
    def notifications_enabled(self) -> bool:
        return bool(self._store.get(NOTIFICATIONS_ENABLED_KEY, True))

    @notifications_enabled.setter
    def notifications_enabled(self, enabled: bool) -> None:
        with self._lock:
            self._store.set(NOTIFICATIONS_ENABLED_KEY, bool(enabled))
        logger.info(f"Regime change notifications {'enabled' if enabled else 'disabled'}")

    def observe(self, regime: MarketRegime) -> Optional[AlertPayload]:
        """Record a newly classified regime.

        Args:
            regime: Latest classification.

        Returns:
            AlertPayload for a confirmed transition when notifications are
            enabled, otherwise None.
        """
        if regime == MarketRegime.NO_DATA:
            return None

        with self._lock:
            state = load_tracker_state(self._store)
            previous = state.last_known_regime

            if previous == regime:
                return None

            now = self._clock()
            self._store.set_many({REGIME_KEY: regime.value, LAST_CHANGE_KEY: now.isoformat()})

            if previous is None:
                logger.info(f"Tracking market regime {regime.value}")
                return None

            logger.info(f"Market regime changed from {previous.value} to {regime.value}")

            if not state.notifications_enabled:
                return None

            payload = AlertPayload(from_regime=previous, to_regime=regime, changed_at=now)
            self._emit(payload)
            return payload

    def _get_alert_level(self, old_regime: MarketRegime, new_regime: MarketRegime) -> str:
        old_severity = self.REGIME_SEVERITY.get(old_regime, 0)
        new_severity = self.REGIME_SEVERITY.get(new_regime, 0)

        if new_severity > old_severity and new_regime == MarketRegime.RISK_OFF:
            return "WARNING"
        return "INFO"

    def _emit(self, payload: AlertPayload) -> None:
        if self._alert_manager is None:
            return
        self._alert_manager.notify(
            level=self._get_alert_level(payload.from_regime, payload.to_regime),
            category="REGIME",
            title=payload.title,
            body=payload.body,
            data={
                "previous_regime": payload.from_regime.value,
                "new_regime": payload.to_regime.value,
                "changed_at": payload.changed_at.isoformat(),
            },
        )
