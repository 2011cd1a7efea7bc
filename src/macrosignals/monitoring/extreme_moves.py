"""Extreme move monitoring for macro indicators.

Raises alerts when an indicator's z-score reaches the significant or extreme
tier, with a per-(indicator, direction) cooldown so a reading that stays
extreme does not alert on every refresh.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional

from macrosignals.monitoring.alerts import AlertManager
from macrosignals.production.state import InMemoryKeyValueStore, KeyValueStore
from macrosignals.zscore.classifier import (
    MarketImplication,
    ZScoreAnnotation,
    ZScoreDirection,
    ZScoreTier,
)

logger = logging.getLogger(__name__)

EXTREME_ALERTS_ENABLED_KEY = "extreme_alerts_enabled"
SIGNIFICANT_ALERTS_ENABLED_KEY = "significant_alerts_enabled"
LAST_ALERT_TIMES_KEY = "extreme_move_last_alert_times"
HISTORY_KEY = "extreme_move_history"

DEFAULT_COOLDOWN = timedelta(hours=4)
MAX_HISTORY_SIZE = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ExtremeMove:
    """A detected significant or extreme reading."""

    indicator: str
    z_score: float
    current_value: float
    direction: ZScoreDirection
    severity: ZScoreTier
    detected_at: datetime
    interpretation: str
    implication: MarketImplication

    @property
    def formatted_z_score(self) -> str:
        return f"{self.z_score:+.1f}σ"

    @property
    def title(self) -> str:
        label = "Extreme" if self.severity == ZScoreTier.EXTREME else "Significant"
        return f"{label} {self.indicator} Move: {self.formatted_z_score}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "indicator": self.indicator,
            "z_score": self.z_score,
            "current_value": self.current_value,
            "direction": self.direction.value,
            "severity": self.severity.value,
            "detected_at": self.detected_at.isoformat(),
            "interpretation": self.interpretation,
            "implication": self.implication.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtremeMove:
        return cls(
            indicator=data["indicator"],
            z_score=float(data["z_score"]),
            current_value=float(data["current_value"]),
            direction=ZScoreDirection(data["direction"]),
            severity=ZScoreTier(data["severity"]),
            detected_at=datetime.fromisoformat(data["detected_at"]),
            interpretation=data["interpretation"],
            implication=MarketImplication(data["implication"]),
        )


class ExtremeMoveMonitor:
    """Decides which z-score annotations become extreme-move alerts.

    Extreme readings alert by default; significant readings only when
    significant alerts are switched on. Both settings, the last alert time
    per (indicator, direction) and the newest alerts are persisted in the
    key-value store, so a restarted process keeps honoring the cooldown.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        alert_manager: Optional[AlertManager] = None,
        cooldown: timedelta = DEFAULT_COOLDOWN,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store if store is not None else InMemoryKeyValueStore()
        self._alert_manager = alert_manager
        self.cooldown = cooldown
        self._clock = clock or _utcnow
        self._lock = threading.Lock()
        self._last_alert_times = self._load_last_alert_times()
        self._history = self._load_history()

    def _load_last_alert_times(self) -> dict[tuple[str, ZScoreDirection], datetime]:
        raw = self._store.get(LAST_ALERT_TIMES_KEY) or {}
        times: dict[tuple[str, ZScoreDirection], datetime] = {}
        for key, value in raw.items():
            indicator, _, direction = key.rpartition(":")
            try:
                times[(indicator, ZScoreDirection(direction))] = datetime.fromisoformat(value)
            except (TypeError, ValueError) as e:
                logger.warning(f"Ignoring stored alert time {key}={value!r}: {e}")
        return times

    def _load_history(self) -> list[ExtremeMove]:
        history = []
        for entry in self._store.get(HISTORY_KEY) or []:
            try:
                history.append(ExtremeMove.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring stored extreme move {entry!r}: {e}")
        return history[-MAX_HISTORY_SIZE:]

    def _persist(self) -> None:
        self._store.set_many(
            {
                LAST_ALERT_TIMES_KEY: {
                    f"{indicator}:{direction.value}": at.isoformat()
                    for (indicator, direction), at in self._last_alert_times.items()
                },
                HISTORY_KEY: [move.to_dict() for move in self._history],
            }
        )

    @property
    def extreme_alerts_enabled(self) -> bool:
        return bool(self._store.get(EXTREME_ALERTS_ENABLED_KEY, True))

    @extreme_alerts_enabled.setter
    def extreme_alerts_enabled(self, enabled: bool) -> None:
        self._store.set(EXTREME_ALERTS_ENABLED_KEY, bool(enabled))

    @property
    def significant_alerts_enabled(self) -> bool:
        return bool(self._store.get(SIGNIFICANT_ALERTS_ENABLED_KEY, False))

    @significant_alerts_enabled.setter
    def significant_alerts_enabled(self, enabled: bool) -> None:
        self._store.set(SIGNIFICANT_ALERTS_ENABLED_KEY, bool(enabled))

    def is_in_cooldown(self, indicator: str, direction: ZScoreDirection) -> bool:
        last = self._last_alert_times.get((indicator, direction))
        if last is None:
            return False
        return self._clock() - last < self.cooldown

    def check(self, annotation: ZScoreAnnotation) -> Optional[ExtremeMove]:
        """Check one annotation and alert if it qualifies.

        Args:
            annotation: Classified z-score reading.

        Returns:
            The recorded ExtremeMove, or None if no alert was raised.
        """
        if annotation.tier == ZScoreTier.EXTREME:
            enabled = self.extreme_alerts_enabled
        elif annotation.tier == ZScoreTier.SIGNIFICANT:
            enabled = self.significant_alerts_enabled
        else:
            return None

        if not enabled or annotation.direction is None:
            return None

        indicator = annotation.indicator_key

        with self._lock:
            if self.is_in_cooldown(indicator, annotation.direction):
                logger.info(f"Skipping alert for {indicator} - in cooldown")
                return None

            now = self._clock()
            move = ExtremeMove(
                indicator=indicator,
                z_score=annotation.stat.z_score,
                current_value=annotation.stat.current_value,
                direction=annotation.direction,
                severity=annotation.tier,
                detected_at=now,
                interpretation=annotation.interpretation,
                implication=annotation.implication,
            )
            self._last_alert_times[(indicator, annotation.direction)] = now
            self._history.append(move)
            if len(self._history) > MAX_HISTORY_SIZE:
                self._history = self._history[-MAX_HISTORY_SIZE:]
            self._persist()

        logger.info(f"Extreme move alert triggered for {indicator}: {move.formatted_z_score}")

        if self._alert_manager is not None:
            self._alert_manager.notify(
                level="CRITICAL" if move.severity == ZScoreTier.EXTREME else "WARNING",
                category="EXTREME_MOVE",
                title=move.title,
                body=move.interpretation,
                data=move.to_dict(),
            )
        return move

    def check_all(self, annotations: Iterable[ZScoreAnnotation]) -> list[ExtremeMove]:
        moves = []
        for annotation in annotations:
            move = self.check(annotation)
            if move is not None:
                moves.append(move)
        return moves

    def get_history(self) -> list[ExtremeMove]:
        """Alert history, newest first."""
        return sorted(self._history, key=lambda m: m.detected_at, reverse=True)

    def clear_history(self) -> None:
        """Forget past alerts. Cooldowns stay in force."""
        with self._lock:
            self._history.clear()
            self._persist()
