"""Macro derived-signal engine for crypto dashboards.

This package provides modular components for:
- chart series downsampling and nearest-timestamp lookup
- z-score tiering and qualitative readings
- weekly/monthly trend synthesis from a daily trend
- macro regime classification
- regime change tracking and alerting
"""

from .types import (
    ChartPoint,
    CorrelationStrength,
    IndicatorCorrelation,
    IndicatorSample,
    IndicatorStat,
    IndicatorType,
)

__version__ = "0.1.0"
