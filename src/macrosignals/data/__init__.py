from .snapshot import (
    IndicatorHistoryProvider,
    MacroSnapshot,
    SnapshotBuilder,
    latest_value,
    percent_change,
    series_from_samples,
)

__all__ = [
    "IndicatorHistoryProvider",
    "MacroSnapshot",
    "SnapshotBuilder",
    "latest_value",
    "percent_change",
    "series_from_samples",
]
