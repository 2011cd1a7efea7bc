"""Trend analysis types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TrendDirection(Enum):
    """Ordinal trend direction, weakest to strongest."""

    STRONG_DOWNTREND = -2
    DOWNTREND = -1
    SIDEWAYS = 0
    UPTREND = 1
    STRONG_UPTREND = 2

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()

    def __lt__(self, other: TrendDirection) -> bool:
        if not isinstance(other, TrendDirection):
            return NotImplemented
        return self.value < other.value


class TrendStrength(Enum):
    WEAK = 1
    MODERATE = 2
    STRONG = 3

    @property
    def label(self) -> str:
        return self.name.title()


class Timeframe(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def short_label(self) -> str:
        return {Timeframe.DAILY: "1D", Timeframe.WEEKLY: "1W", Timeframe.MONTHLY: "1M"}[self]


@dataclass(frozen=True)
class TrendAnalysis:
    """Trend estimate for one timeframe.

    Attributes:
        direction: Trend direction
        strength: Trend strength tier
        days_in_trend: Approximate age of the trend in days
        higher_highs: Whether price is making higher highs
        higher_lows: Whether price is making higher lows
    """

    direction: TrendDirection
    strength: TrendStrength
    days_in_trend: int
    higher_highs: bool
    higher_lows: bool

    @property
    def description(self) -> str:
        return self.direction.label

    def to_dict(self) -> dict:
        return {
            "direction": self.direction.name.lower(),
            "strength": self.strength.name.lower(),
            "days_in_trend": self.days_in_trend,
            "higher_highs": self.higher_highs,
            "higher_lows": self.higher_lows,
        }


@dataclass(frozen=True)
class SMAFlags:
    """Price position relative to the 21/50/200-period simple moving averages.

    Attributes:
        above_21: Price above the 21-period SMA
        above_50: Price above the 50-period SMA
        above_200: Price above the 200-period SMA
        golden_cross: 50-period SMA above the 200-period SMA
        death_cross: 50-period SMA below the 200-period SMA
    """

    above_21: bool
    above_50: bool
    above_200: bool
    golden_cross: bool = False
    death_cross: bool = False

    def __post_init__(self) -> None:
        if self.golden_cross and self.death_cross:
            raise ValueError("golden_cross and death_cross cannot both be active")

    @classmethod
    def from_values(cls, price: float, sma21: float, sma50: float, sma200: float) -> SMAFlags:
        return cls(
            above_21=price > sma21,
            above_50=price > sma50,
            above_200=price > sma200,
            golden_cross=sma50 > sma200,
            death_cross=sma50 < sma200,
        )

    @property
    def above_count(self) -> int:
        return sum([self.above_21, self.above_50, self.above_200])
