"""Monitoring and alerts for the signal engine.

This module provides:
- Alert system with pluggable handlers
- Market regime change tracking
- Extreme z-score move alerts

Example:
    >>> from macrosignals.monitoring import AlertManager, RegimeChangeTracker
    >>> from macrosignals.production import InMemoryKeyValueStore
    >>> from macrosignals.regime import MarketRegime
    >>>
    >>> alert_manager = AlertManager()
    >>> tracker = RegimeChangeTracker(InMemoryKeyValueStore(), alert_manager)
    >>> tracker.observe(MarketRegime.RISK_ON)
"""

from macrosignals.monitoring.alerts import (
    Alert,
    AlertHandler,
    AlertManager,
    ConsoleAlertHandler,
    FileAlertHandler,
    InMemoryAlertHandler,
    create_default_alert_manager,
)
from macrosignals.monitoring.extreme_moves import (
    DEFAULT_COOLDOWN,
    ExtremeMove,
    ExtremeMoveMonitor,
)
from macrosignals.monitoring.regime import (
    AlertPayload,
    RegimeChangeTracker,
)

__all__ = [
    # Alerts
    "Alert",
    "AlertHandler",
    "AlertManager",
    "ConsoleAlertHandler",
    "FileAlertHandler",
    "InMemoryAlertHandler",
    "create_default_alert_manager",
    # Regime change tracking
    "AlertPayload",
    "RegimeChangeTracker",
    # Extreme moves
    "DEFAULT_COOLDOWN",
    "ExtremeMove",
    "ExtremeMoveMonitor",
]
