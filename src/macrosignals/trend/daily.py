"""Daily trend estimate from price and moving averages."""

from __future__ import annotations

from .types import SMAFlags, TrendAnalysis, TrendDirection, TrendStrength

# Without candle history the trend age is estimated from its strength
DAYS_IN_TREND = {
    TrendStrength.STRONG: 14,
    TrendStrength.MODERATE: 7,
    TrendStrength.WEAK: 3,
}


def determine_daily_trend(
    price: float,
    sma21: float,
    sma50: float,
    sma200: float,
) -> TrendAnalysis:
    """Classify the daily trend from the price's position against its SMAs.

    higher_highs is approximated as price > SMA21 > SMA50 and higher_lows as
    SMA50 > SMA200.

    Args:
        price: Current price
        sma21: 21-period simple moving average
        sma50: 50-period simple moving average
        sma200: 200-period simple moving average

    Returns:
        TrendAnalysis for the daily timeframe
    """
    above_count = SMAFlags.from_values(price, sma21, sma50, sma200).above_count
    higher_highs = price > sma21 and sma21 > sma50
    higher_lows = sma50 > sma200

    if above_count == 3 and higher_highs and higher_lows:
        direction, strength = TrendDirection.STRONG_UPTREND, TrendStrength.STRONG
    elif above_count >= 2 and higher_highs:
        direction = TrendDirection.UPTREND
        strength = TrendStrength.STRONG if above_count == 3 else TrendStrength.MODERATE
    elif above_count == 0 and not higher_highs and not higher_lows:
        direction, strength = TrendDirection.STRONG_DOWNTREND, TrendStrength.STRONG
    elif above_count <= 1 and not higher_highs:
        direction = TrendDirection.DOWNTREND
        strength = TrendStrength.STRONG if above_count == 0 else TrendStrength.MODERATE
    else:
        direction, strength = TrendDirection.SIDEWAYS, TrendStrength.WEAK

    return TrendAnalysis(
        direction=direction,
        strength=strength,
        days_in_trend=DAYS_IN_TREND[strength],
        higher_highs=higher_highs,
        higher_lows=higher_lows,
    )
