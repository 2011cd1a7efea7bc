"""Multi-timeframe trend synthesis.

Weekly and monthly trends are approximated from the daily trend and the
price's position against its moving averages, so one daily fetch is enough to
show all three timeframes. This is an estimate, not a recomputation from
weekly or monthly candles.
"""

from __future__ import annotations

import logging

from .types import SMAFlags, Timeframe, TrendAnalysis, TrendDirection, TrendStrength

logger = logging.getLogger(__name__)

WEEKLY_DAYS_FACTOR = 7
MONTHLY_DAYS_FACTOR = 30


class TrendSynthesizer:
    """Derives weekly and monthly trend estimates from a daily trend.

    Weekly:
    - Above SMA50 and SMA200: UPTREND (STRONG_UPTREND if daily already is)
    - Below both: DOWNTREND (STRONG_DOWNTREND if daily already is)
    - Otherwise: SIDEWAYS
    - days x7; strength and higher highs/lows carried over from daily

    Monthly:
    - Above SMA200 with golden cross: STRONG_UPTREND, without: UPTREND
    - Below SMA200 with death cross: STRONG_DOWNTREND, without: DOWNTREND
    - days x30; STRONG if the SMA50 and SMA200 flags agree, else MODERATE
    - higher_highs and higher_lows both follow the SMA200 flag
    """

    def derive_weekly(self, daily: TrendAnalysis, sma: SMAFlags) -> TrendAnalysis:
        if sma.above_50 and sma.above_200:
            direction = (
                TrendDirection.STRONG_UPTREND
                if daily.direction == TrendDirection.STRONG_UPTREND
                else TrendDirection.UPTREND
            )
        elif not sma.above_50 and not sma.above_200:
            direction = (
                TrendDirection.STRONG_DOWNTREND
                if daily.direction == TrendDirection.STRONG_DOWNTREND
                else TrendDirection.DOWNTREND
            )
        else:
            direction = TrendDirection.SIDEWAYS

        return TrendAnalysis(
            direction=direction,
            strength=daily.strength,
            days_in_trend=daily.days_in_trend * WEEKLY_DAYS_FACTOR,
            higher_highs=daily.higher_highs,
            higher_lows=daily.higher_lows,
        )

    def derive_monthly(self, daily: TrendAnalysis, sma: SMAFlags) -> TrendAnalysis:
        if sma.above_200 and sma.golden_cross:
            direction = TrendDirection.STRONG_UPTREND
        elif sma.above_200:
            direction = TrendDirection.UPTREND
        elif sma.death_cross:
            direction = TrendDirection.STRONG_DOWNTREND
        else:
            direction = TrendDirection.DOWNTREND

        strength = (
            TrendStrength.STRONG if sma.above_50 == sma.above_200 else TrendStrength.MODERATE
        )

        # Both flags follow the SMA200 position; display code relies on this
        return TrendAnalysis(
            direction=direction,
            strength=strength,
            days_in_trend=daily.days_in_trend * MONTHLY_DAYS_FACTOR,
            higher_highs=sma.above_200,
            higher_lows=sma.above_200,
        )

    def derive_all(self, daily: TrendAnalysis, sma: SMAFlags) -> dict[Timeframe, TrendAnalysis]:
        """Daily, weekly and monthly trends from a single daily input."""
        trends = {
            Timeframe.DAILY: daily,
            Timeframe.WEEKLY: self.derive_weekly(daily, sma),
            Timeframe.MONTHLY: self.derive_monthly(daily, sma),
        }
        logger.debug(
            "Synthesized trends: "
            + ", ".join(f"{tf.short_label}={t.direction.label}" for tf, t in trends.items())
        )
        return trends
