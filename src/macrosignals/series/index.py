"""Downsampling and nearest-timestamp lookup for chart series.

Interactive charts redraw on every pointer move, so both queries are kept
independent of history length: downsampling is bounded by the output size and
lookup is a binary search. Input sequences must already be sorted ascending
by timestamp; this is not validated.
"""

from __future__ import annotations

import math
from bisect import bisect_left
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

import numpy as np
import pandas as pd

T = TypeVar("T")

DEFAULT_MAX_POINTS = 250


def _timestamp_of(point: Any) -> Any:
    return point.timestamp


def _stride_indices(n: int, max_points: int) -> list[int]:
    """Input indices kept when reducing n points to max_points."""
    step = (n - 1) / (max_points - 1)
    # Round half up so the pick does not depend on banker's rounding
    middle = [int(math.floor(i * step + 0.5)) for i in range(1, max_points - 1)]
    return [0] + middle + [n - 1]


def downsample(points: Sequence[T], max_points: int = DEFAULT_MAX_POINTS) -> list[T]:
    """Uniformly downsample a sequence, keeping the first and last points.

    Uses stride sampling, so a single-sample spike that falls between two
    chosen indices will not appear in the output.

    Args:
        points: Sequence sorted ascending by timestamp
        max_points: Maximum number of points to return. Values below 2 are
            treated as "no downsampling".

    Returns:
        List of at most max_points points (the input itself, as a list, when
        it is already small enough)
    """
    n = len(points)
    if max_points < 2 or n <= max_points:
        return list(points)
    return [points[i] for i in _stride_indices(n, max_points)]


def nearest(
    points: Sequence[T],
    target: Any,
    key: Optional[Callable[[T], Any]] = None,
) -> Optional[T]:
    """Find the point whose timestamp is closest to target.

    Ties go to the earlier point.

    Args:
        points: Sequence sorted ascending by timestamp
        target: Timestamp to look up (same type as the points' timestamps)
        key: Extracts the timestamp from a point. Defaults to ``.timestamp``.

    Returns:
        The nearest point, or None for an empty sequence
    """
    if not points:
        return None

    key = key or _timestamp_of
    idx = bisect_left(points, target, key=key)

    if idx == 0:
        return points[0]
    if idx == len(points):
        return points[-1]

    before = points[idx - 1]
    after = points[idx]
    if abs(key(before) - target) <= abs(key(after) - target):
        return before
    return after


class TimeSeriesIndex(Generic[T]):
    """Query wrapper around a sorted sequence of timestamped points.

    Usage:
        index = TimeSeriesIndex(history)
        visible = index.downsample(250)
        point = index.nearest(drag_timestamp)
    """

    def __init__(
        self,
        points: Sequence[T],
        key: Optional[Callable[[T], Any]] = None,
    ):
        self._points = points
        self._key = key

    def __len__(self) -> int:
        return len(self._points)

    @property
    def points(self) -> Sequence[T]:
        return self._points

    def downsample(self, max_points: int = DEFAULT_MAX_POINTS) -> list[T]:
        return downsample(self._points, max_points)

    def nearest(self, target: Any) -> Optional[T]:
        return nearest(self._points, target, key=self._key)


def downsample_series(series: pd.Series, max_points: int = DEFAULT_MAX_POINTS) -> pd.Series:
    """Downsample a time-indexed Series with the same stride as downsample()."""
    n = len(series)
    if max_points < 2 or n <= max_points:
        return series
    positions = np.asarray(_stride_indices(n, max_points), dtype=int)
    return series.iloc[positions]


def nearest_in_series(series: pd.Series, target: Any) -> Optional[tuple[pd.Timestamp, float]]:
    """Find the (timestamp, value) pair nearest to target in a sorted Series.

    Args:
        series: Series indexed by ascending DatetimeIndex
        target: Anything pandas can convert to a Timestamp

    Returns:
        (timestamp, value) tuple, or None if the Series is empty
    """
    if series.empty:
        return None

    target = pd.Timestamp(target)
    idx = int(series.index.searchsorted(target, side="left"))

    if idx == 0:
        pos = 0
    elif idx == len(series):
        pos = idx - 1
    else:
        before = series.index[idx - 1]
        after = series.index[idx]
        pos = idx - 1 if abs(before - target) <= abs(after - target) else idx

    return series.index[pos], float(series.iloc[pos])
