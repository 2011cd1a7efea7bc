"""Macro snapshot assembly for regime classification.

Fetches VIX, DXY and M2 history in parallel and reduces it to the three
readings the regime classifier needs. A failed or empty fetch leaves its
reading as None so classification can still proceed on the others.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import pandas as pd

from macrosignals.series.index import nearest
from macrosignals.types import IndicatorSample, IndicatorType

logger = logging.getLogger(__name__)


class IndicatorHistoryProvider(ABC):
    """Source of indicator history (network API, cache, fixture...)."""

    @abstractmethod
    def fetch_indicator_history(self, indicator: IndicatorType, days: int) -> list[IndicatorSample]:
        """Fetch recent history for an indicator.

        Args:
            indicator: Indicator to fetch
            days: Calendar days of history wanted

        Returns:
            Samples sorted ascending by timestamp

        Raises:
            Any exception on failure; callers substitute an empty history.
        """


@dataclass(frozen=True)
class MacroSnapshot:
    """Latest readings handed to the regime classifier.

    Attributes:
        vix: Latest VIX level
        dxy_change_pct: DXY percent change over the change window
        m2_change_pct: M2 percent change over the change window
        as_of: Timestamp of the newest sample used (UTC), if any
    """

    vix: Optional[float] = None
    dxy_change_pct: Optional[float] = None
    m2_change_pct: Optional[float] = None
    as_of: Optional[datetime] = None

    @property
    def available_count(self) -> int:
        return sum(v is not None for v in (self.vix, self.dxy_change_pct, self.m2_change_pct))

    def to_dict(self) -> dict:
        return {
            "vix": self.vix,
            "dxy_change_pct": self.dxy_change_pct,
            "m2_change_pct": self.m2_change_pct,
            "as_of": self.as_of.isoformat() if self.as_of else None,
        }


def series_from_samples(samples: Sequence[IndicatorSample]) -> pd.Series:
    """Convert samples to a float Series indexed by timestamp."""
    if not samples:
        return pd.Series(dtype=float)
    return pd.Series(
        [s.value for s in samples],
        index=pd.DatetimeIndex([s.timestamp for s in samples]),
        dtype=float,
    )


def as_utc(ts: datetime) -> datetime:
    """Treat naive timestamps as UTC and convert aware ones to UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def latest_value(samples: Sequence[IndicatorSample]) -> Optional[float]:
    if not samples:
        return None
    return float(samples[-1].value)


def percent_change(
    samples: Sequence[IndicatorSample],
    window: timedelta,
) -> Optional[float]:
    """Percent change from the sample nearest to (latest - window) to the latest.

    Returns None when there are fewer than two samples, when the nearest
    reference sample is the latest one itself, or when the reference value
    is zero.
    """
    if len(samples) < 2:
        return None

    latest = samples[-1]
    reference = nearest(samples, latest.timestamp - window)
    if reference is None or reference is latest or reference.value == 0:
        return None

    return (latest.value / reference.value - 1) * 100


class SnapshotBuilder:
    """Builds a MacroSnapshot from an IndicatorHistoryProvider.

    Usage:
        builder = SnapshotBuilder(provider)
        snapshot = builder.build()
        regime = RegimeClassifier().classify_snapshot(snapshot)
    """

    def __init__(
        self,
        provider: IndicatorHistoryProvider,
        lookback_days: int = 90,
        change_window_days: int = 30,
        max_workers: int = 3,
    ):
        """Initialize builder.

        Args:
            provider: Source of indicator history
            lookback_days: Days of history to request per indicator
            change_window_days: Window for the DXY and M2 percent change
            max_workers: Parallel fetches
        """
        if change_window_days >= lookback_days:
            raise ValueError(
                f"change_window_days ({change_window_days}) must be shorter than "
                f"lookback_days ({lookback_days})"
            )
        self.provider = provider
        self.lookback_days = lookback_days
        self.change_window = timedelta(days=change_window_days)
        self.max_workers = max_workers

    def _fetch_safe(self, indicator: IndicatorType) -> list[IndicatorSample]:
        try:
            return list(self.provider.fetch_indicator_history(indicator, self.lookback_days))
        except Exception as e:
            logger.warning(f"Failed to fetch {indicator.value} history: {e}")
            return []

    def fetch_all(self) -> dict[IndicatorType, list[IndicatorSample]]:
        """Fetch every indicator in parallel; failures come back empty."""
        indicators = list(IndicatorType)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            histories = list(executor.map(self._fetch_safe, indicators))
        return dict(zip(indicators, histories))

    def build_from_histories(
        self,
        histories: dict[IndicatorType, Sequence[IndicatorSample]],
    ) -> MacroSnapshot:
        vix = histories.get(IndicatorType.VIX, [])
        dxy = histories.get(IndicatorType.DXY, [])
        m2 = histories.get(IndicatorType.M2, [])

        timestamps = [as_utc(h[-1].timestamp) for h in (vix, dxy, m2) if h]

        snapshot = MacroSnapshot(
            vix=latest_value(vix),
            dxy_change_pct=percent_change(dxy, self.change_window),
            m2_change_pct=percent_change(m2, self.change_window),
            as_of=max(timestamps) if timestamps else None,
        )
        if snapshot.available_count < 3:
            logger.info(f"Partial macro snapshot: {snapshot.to_dict()}")
        return snapshot

    def build(self) -> MacroSnapshot:
        return self.build_from_histories(self.fetch_all())
