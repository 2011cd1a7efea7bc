"""Regime classification types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MarketRegime(Enum):
    """Synthesized macro conditions for risk assets.

    A pure classification value; detection lives in RegimeClassifier and
    change tracking in RegimeChangeTracker.
    """

    RISK_ON = "RISK-ON"
    RISK_OFF = "RISK-OFF"
    MIXED = "MIXED"
    NO_DATA = "NO DATA"

    @property
    def description(self) -> str:
        return {
            MarketRegime.RISK_ON: "Favorable conditions for risk assets",
            MarketRegime.RISK_OFF: "Defensive positioning recommended",
            MarketRegime.MIXED: "Conflicting signals across indicators",
            MarketRegime.NO_DATA: "Awaiting market data",
        }[self]

    @property
    def notification_title(self) -> str:
        if self == MarketRegime.NO_DATA:
            return "Market Data Unavailable"
        return f"Market Regime: {self.value}"

    @property
    def notification_body(self) -> str:
        return {
            MarketRegime.RISK_ON: (
                "Macro conditions have shifted bullish. Low volatility and "
                "expanding liquidity favor risk assets."
            ),
            MarketRegime.RISK_OFF: (
                "Macro conditions have shifted bearish. Elevated VIX and dollar "
                "strength may pressure crypto."
            ),
            MarketRegime.MIXED: (
                "Macro signals are now conflicting. Consider reducing position "
                "sizes until clarity emerges."
            ),
            MarketRegime.NO_DATA: "Unable to determine market conditions.",
        }[self]


class Vote(Enum):
    """Single-indicator opinion on risk appetite."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class RegimeThresholds:
    """Cutoffs for the per-indicator regime votes.

    Attributes:
        vix_bullish_below: VIX level below which VIX votes bullish (default 15)
        vix_bearish_above: VIX level above which VIX votes bearish (default 25)
        dxy_bullish_below: DXY monthly % change below which DXY votes bullish
        dxy_bearish_above: DXY monthly % change above which DXY votes bearish
        m2_bullish_above: M2 monthly % change above which M2 votes bullish
        m2_bearish_below: M2 monthly % change below which M2 votes bearish
        min_indicators: Indicators required before a regime is called
    """

    vix_bullish_below: float = 15.0
    vix_bearish_above: float = 25.0
    dxy_bullish_below: float = -0.3
    dxy_bearish_above: float = 0.3
    m2_bullish_above: float = 1.0
    m2_bearish_below: float = -1.0
    min_indicators: int = 2

    def __post_init__(self) -> None:
        if self.vix_bullish_below > self.vix_bearish_above:
            raise ValueError(
                f"vix_bullish_below ({self.vix_bullish_below}) must not exceed "
                f"vix_bearish_above ({self.vix_bearish_above})"
            )
        if self.dxy_bullish_below > self.dxy_bearish_above:
            raise ValueError(
                f"dxy_bullish_below ({self.dxy_bullish_below}) must not exceed "
                f"dxy_bearish_above ({self.dxy_bearish_above})"
            )
        if self.m2_bearish_below > self.m2_bullish_above:
            raise ValueError(
                f"m2_bearish_below ({self.m2_bearish_below}) must not exceed "
                f"m2_bullish_above ({self.m2_bullish_above})"
            )
        if not 1 <= self.min_indicators <= 3:
            raise ValueError(f"min_indicators must be between 1 and 3: {self.min_indicators}")
