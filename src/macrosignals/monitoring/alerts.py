"""Alert delivery for regime changes and extreme indicator moves.

The signal engine only decides whether to alert and with what payload.
Delivery belongs to AlertHandler implementations registered on an
AlertManager; a push-notification bridge is just another handler.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)

VALID_LEVELS = {"INFO", "WARNING", "CRITICAL"}
VALID_CATEGORIES = {"REGIME", "EXTREME_MOVE", "DATA_QUALITY", "SYSTEM"}


@dataclass(frozen=True)
class Alert:
    """Immutable alert record.

    Attributes:
        timestamp: When the alert was generated.
        level: Severity level (INFO, WARNING, CRITICAL).
        category: Alert category (REGIME, EXTREME_MOVE, DATA_QUALITY, SYSTEM).
        title: Short notification title.
        body: Notification body text.
        data: Additional structured data for the alert.
    """

    timestamp: datetime
    level: str
    category: str
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.level not in VALID_LEVELS:
            raise ValueError(f"Invalid alert level: {self.level}. Must be one of {VALID_LEVELS}")
        if self.category not in VALID_CATEGORIES:
            raise ValueError(
                f"Invalid alert category: {self.category}. Must be one of {VALID_CATEGORIES}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level,
            "category": self.category,
            "title": self.title,
            "body": self.body,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Alert:
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            level=data["level"],
            category=data["category"],
            title=data["title"],
            body=data["body"],
            data=data.get("data", {}),
        )

    def format(self) -> str:
        """Format alert as a single human-readable line."""
        ts = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        return f"[{ts}] [{self.level}] [{self.category}] {self.title}: {self.body}"


class AlertHandler(ABC):
    """Abstract base class for alert handlers.

    Handlers receive alerts and deliver them (log, file, push, banner...).
    """

    @abstractmethod
    def send(self, alert: Alert) -> None:
        """Send an alert through this handler.

        Args:
            alert: Alert to send.
        """


class ConsoleAlertHandler(AlertHandler):
    """Handler that writes alerts through Python logging."""

    def __init__(self, logger_name: str = "macrosignals.monitoring.alerts") -> None:
        self._logger = logging.getLogger(logger_name)

    def send(self, alert: Alert) -> None:
        log_level = {
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "CRITICAL": logging.CRITICAL,
        }.get(alert.level, logging.INFO)

        self._logger.log(log_level, alert.format())


class FileAlertHandler(AlertHandler):
    """Handler that appends alerts to a JSON-lines file."""

    def __init__(self, log_path: Union[str, Path]) -> None:
        """Initialize file handler.

        Args:
            log_path: Path to the alert log file.
        """
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def send(self, alert: Alert) -> None:
        with open(self.log_path, "a") as f:
            f.write(json.dumps(alert.to_dict()) + "\n")

    def read_alerts(self, limit: int = 100) -> list[Alert]:
        """Read recent alerts from the log file.

        Args:
            limit: Maximum number of recent alerts to return.

        Returns:
            List of Alert objects, most recent first.
        """
        if not self.log_path.exists():
            return []

        alerts: list[Alert] = []
        with open(self.log_path) as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    alerts.append(Alert.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning(f"Skipping unreadable alert line in {self.log_path}: {e}")

        return alerts[-limit:][::-1]


class InMemoryAlertHandler(AlertHandler):
    """Handler that keeps alerts in memory.

    Useful for tests and for in-app banners that query recent alerts.
    """

    def __init__(self, max_alerts: int = 1000) -> None:
        self.max_alerts = max_alerts
        self._alerts: list[Alert] = []

    def send(self, alert: Alert) -> None:
        self._alerts.append(alert)
        if len(self._alerts) > self.max_alerts:
            self._alerts = self._alerts[-self.max_alerts :]

    def get_alerts(
        self,
        level: str | None = None,
        category: str | None = None,
        since: datetime | None = None,
    ) -> list[Alert]:
        """Get stored alerts with optional filters.

        Args:
            level: Filter by alert level.
            category: Filter by category.
            since: Filter alerts at or after this timestamp.

        Returns:
            List of matching alerts, oldest first.
        """
        result = self._alerts.copy()

        if level:
            result = [a for a in result if a.level == level]
        if category:
            result = [a for a in result if a.category == category]
        if since:
            result = [a for a in result if a.timestamp >= since]

        return result

    def clear(self) -> None:
        self._alerts.clear()


class AlertManager:
    """Routes alerts to registered handlers.

    A failing handler is logged and skipped so it cannot block delivery
    through the others or break the component that raised the alert.
    """

    def __init__(self, handlers: list[AlertHandler] | None = None) -> None:
        self._handlers: list[AlertHandler] = handlers if handlers is not None else []

    @property
    def handlers(self) -> list[AlertHandler]:
        return self._handlers.copy()

    def add_handler(self, handler: AlertHandler) -> None:
        self._handlers.append(handler)

    def remove_handler(self, handler: AlertHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, alert: Alert) -> None:
        """Emit an alert to all registered handlers.

        Args:
            alert: Alert to emit.
        """
        for handler in self._handlers:
            try:
                handler.send(alert)
            except Exception as e:
                logger.error(f"Failed to send alert via {type(handler).__name__}: {e}")

    def notify(
        self,
        level: str,
        category: str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> Alert:
        """Build, emit and return an alert stamped with the current UTC time."""
        alert = Alert(
            timestamp=datetime.now(timezone.utc),
            level=level,
            category=category,
            title=title,
            body=body,
            data=data or {},
        )
        self.emit(alert)
        return alert


def create_default_alert_manager(
    log_path: Union[str, Path] | None = None,
    console: bool = True,
) -> AlertManager:
    """Create an AlertManager with default handlers.

    Args:
        log_path: Optional path for JSON-lines file logging.
        console: Whether to include the logging handler.

    Returns:
        Configured AlertManager.
    """
    handlers: list[AlertHandler] = []

    if console:
        handlers.append(ConsoleAlertHandler())

    if log_path:
        handlers.append(FileAlertHandler(log_path))

    return AlertManager(handlers=handlers)
