from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class IndicatorCorrelation(Enum):
    """How an indicator tends to move relative to crypto prices."""

    POSITIVE = "positive"
    INVERSE = "inverse"
    NEUTRAL = "neutral"


class IndicatorType(Enum):
    """Macro indicators tracked by the signal engine."""

    VIX = "VIX"
    DXY = "DXY"
    M2 = "M2"

    @property
    def display_name(self) -> str:
        return {
            IndicatorType.VIX: "VIX",
            IndicatorType.DXY: "US Dollar",
            IndicatorType.M2: "M2 Supply",
        }[self]

    @property
    def full_name(self) -> str:
        return {
            IndicatorType.VIX: "CBOE Volatility Index",
            IndicatorType.DXY: "US Dollar Index",
            IndicatorType.M2: "M2 Money Supply",
        }[self]

    @property
    def crypto_correlation(self) -> IndicatorCorrelation:
        # High VIX and a strong dollar weigh on crypto, liquidity lifts it
        return {
            IndicatorType.VIX: IndicatorCorrelation.INVERSE,
            IndicatorType.DXY: IndicatorCorrelation.INVERSE,
            IndicatorType.M2: IndicatorCorrelation.POSITIVE,
        }[self]


class CorrelationStrength(Enum):
    """Externally supplied belief about how closely an indicator tracks crypto."""

    WEAK = 1
    MODERATE = 2
    STRONG = 3
    VERY_STRONG = 4

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def description(self) -> str:
        return {
            CorrelationStrength.WEAK: "Historical correlation currently weak",
            CorrelationStrength.MODERATE: "Moderate historical correlation",
            CorrelationStrength.STRONG: "Strong historical correlation",
            CorrelationStrength.VERY_STRONG: "Very strong correlation observed",
        }[self]

    def __lt__(self, other: CorrelationStrength) -> bool:
        if not isinstance(other, CorrelationStrength):
            return NotImplemented
        return self.value < other.value


@dataclass(frozen=True)
class IndicatorSample:
    """A single observation of an indicator."""
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class ChartPoint:
    """A point on an interactive chart."""
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class IndicatorStat:
    """Precomputed statistics for the latest reading of an indicator.

    Attributes:
        current_value: Latest observed value
        mean: Historical mean of the lookback window
        standard_deviation: Historical standard deviation of the window
        z_score: Standardized distance of current_value from the mean
        rarity: Approximate "1 in N observations" frequency, when known
    """

    current_value: float
    mean: float
    standard_deviation: float
    z_score: float
    rarity: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "current_value": self.current_value,
            "mean": self.mean,
            "standard_deviation": self.standard_deviation,
            "z_score": self.z_score,
            "rarity": self.rarity,
        }
