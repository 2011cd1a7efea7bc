"""Daily trend classification and weekly/monthly trend synthesis."""

from .daily import DAYS_IN_TREND, determine_daily_trend
from .synthesizer import TrendSynthesizer
from .types import SMAFlags, Timeframe, TrendAnalysis, TrendDirection, TrendStrength

__all__ = [
    "DAYS_IN_TREND",
    "SMAFlags",
    "Timeframe",
    "TrendAnalysis",
    "TrendDirection",
    "TrendStrength",
    "TrendSynthesizer",
    "determine_daily_trend",
]
