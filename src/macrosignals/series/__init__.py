"""Chart series access: stride downsampling and nearest-timestamp lookup."""

from .index import (
    DEFAULT_MAX_POINTS,
    TimeSeriesIndex,
    downsample,
    downsample_series,
    nearest,
    nearest_in_series,
)

__all__ = [
    "DEFAULT_MAX_POINTS",
    "TimeSeriesIndex",
    "downsample",
    "downsample_series",
    "nearest",
    "nearest_in_series",
]
