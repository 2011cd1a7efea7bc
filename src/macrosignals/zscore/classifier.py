"""Z-score classification for macro indicators.

Classifies a precomputed IndicatorStat into normal / significant / extreme
and attaches a qualitative reading. The reading comes from a lookup table
keyed by (indicator, direction, tier), so supporting a new indicator means
registering table entries rather than changing the classifier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from macrosignals.types import IndicatorCorrelation, IndicatorStat, IndicatorType

logger = logging.getLogger(__name__)

IndicatorKey = Union[IndicatorType, str]


class ZScoreTier(Enum):
    NORMAL = "normal"
    SIGNIFICANT = "significant"
    EXTREME = "extreme"


class ZScoreDirection(Enum):
    HIGH = "high"
    LOW = "low"


class MarketImplication(Enum):
    """What a z-score reading implies for crypto risk appetite."""

    BULLISH = "bullish"
    FAVORABLE = "favorable"
    NEUTRAL = "neutral"
    CAUTIOUS = "cautious"
    BEARISH = "bearish"

    @property
    def description(self) -> str:
        return {
            MarketImplication.BULLISH: "Bullish for crypto",
            MarketImplication.FAVORABLE: "Favorable conditions",
            MarketImplication.NEUTRAL: "Neutral conditions",
            MarketImplication.CAUTIOUS: "Exercise caution",
            MarketImplication.BEARISH: "Bearish for crypto",
        }[self]


@dataclass(frozen=True)
class ZScoreThresholds:
    """Absolute z-score cutoffs for one indicator.

    Attributes:
        significant: |z| at or above this is significant (default 2.0)
        extreme: |z| at or above this is extreme (default 2.5)
    """

    significant: float = 2.0
    extreme: float = 2.5

    def __post_init__(self) -> None:
        if self.significant <= 0:
            raise ValueError(f"Significant threshold must be positive: {self.significant}")
        if self.extreme < self.significant:
            raise ValueError(
                f"Extreme threshold ({self.extreme}) must be >= "
                f"significant threshold ({self.significant})"
            )


@dataclass(frozen=True)
class Interpretation:
    text: str
    implication: MarketImplication


def _indicator_key(indicator: IndicatorKey) -> str:
    return indicator.value if isinstance(indicator, IndicatorType) else str(indicator)


def _display_name(indicator: IndicatorKey) -> str:
    return indicator.display_name if isinstance(indicator, IndicatorType) else str(indicator)


class InterpretationTable:
    """Lookup of qualitative readings keyed by (indicator, direction, tier).

    Normal readings are never looked up; they always read as "within normal
    historical range" with a neutral implication.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, ZScoreDirection, ZScoreTier], Interpretation] = {}

    def register(
        self,
        indicator: IndicatorKey,
        direction: ZScoreDirection,
        tier: ZScoreTier,
        interpretation: Interpretation,
    ) -> None:
        if tier == ZScoreTier.NORMAL:
            raise ValueError("Normal readings use the default interpretation")
        self._entries[(_indicator_key(indicator), direction, tier)] = interpretation

    def register_indicator(
        self,
        indicator: IndicatorKey,
        correlation: IndicatorCorrelation,
        high_text: str,
        low_text: str,
    ) -> None:
        """Register all four non-normal readings for an indicator at once.

        For an inversely correlated indicator a high reading is bearish for
        crypto; for a positively correlated one it is bullish. Significant
        readings get the softer cautious/favorable implication.
        """
        high_is_bearish = correlation == IndicatorCorrelation.INVERSE
        adverse = {ZScoreTier.EXTREME: MarketImplication.BEARISH, ZScoreTier.SIGNIFICANT: MarketImplication.CAUTIOUS}
        supportive = {ZScoreTier.EXTREME: MarketImplication.BULLISH, ZScoreTier.SIGNIFICANT: MarketImplication.FAVORABLE}

        for tier in (ZScoreTier.SIGNIFICANT, ZScoreTier.EXTREME):
            high = adverse[tier] if high_is_bearish else supportive[tier]
            low = supportive[tier] if high_is_bearish else adverse[tier]
            self.register(indicator, ZScoreDirection.HIGH, tier, Interpretation(high_text, high))
            self.register(indicator, ZScoreDirection.LOW, tier, Interpretation(low_text, low))

    def lookup(
        self,
        indicator: IndicatorKey,
        direction: Optional[ZScoreDirection],
        tier: ZScoreTier,
    ) -> Interpretation:
        if tier == ZScoreTier.NORMAL or direction is None:
            return Interpretation(
                f"{_display_name(indicator)} is within normal historical range",
                MarketImplication.NEUTRAL,
            )

        entry = self._entries.get((_indicator_key(indicator), direction, tier))
        if entry is None:
            logger.debug(f"No interpretation for {_indicator_key(indicator)} {direction.value} {tier.value}")
            return Interpretation(
                f"{_display_name(indicator)} is {tier.value}ly {direction.value} versus history",
                MarketImplication.NEUTRAL,
            )
        return entry

    def __contains__(self, indicator: IndicatorKey) -> bool:
        key = _indicator_key(indicator)
        return any(k[0] == key for k in self._entries)


def default_interpretations() -> InterpretationTable:
    """Interpretation table for VIX, DXY and M2."""
    table = InterpretationTable()
    table.register_indicator(
        IndicatorType.VIX,
        IndicatorType.VIX.crypto_correlation,
        high_text=(
            "Elevated fear in equity markets - historically bearish for crypto in "
            "short term but can signal capitulation bottoms"
        ),
        low_text=(
            "Complacency in equity markets - favorable for risk assets but watch "
            "for volatility expansion"
        ),
    )
    table.register_indicator(
        IndicatorType.DXY,
        IndicatorType.DXY.crypto_correlation,
        high_text="Unusually strong dollar - creates headwind for risk assets including crypto",
        low_text="Unusually weak dollar - historically bullish for crypto and risk assets",
    )
    table.register_indicator(
        IndicatorType.M2,
        IndicatorType.M2.crypto_correlation,
        high_text="Rapid liquidity expansion - historically bullish for crypto with 2-3 month lag",
        low_text="Liquidity contraction - historically creates headwinds for crypto",
    )
    return table


@dataclass(frozen=True)
class ZScoreAnnotation:
    """Classified z-score reading for one indicator.

    rarity is only carried for significant and extreme readings; a normal
    reading never makes a rarity claim even if the stat carries one.
    """

    indicator: IndicatorKey
    stat: IndicatorStat
    tier: ZScoreTier
    direction: Optional[ZScoreDirection]
    rarity: Optional[int]
    interpretation: str
    implication: MarketImplication

    @property
    def indicator_key(self) -> str:
        return _indicator_key(self.indicator)

    @property
    def is_significant(self) -> bool:
        return self.tier != ZScoreTier.NORMAL

    @property
    def is_extreme(self) -> bool:
        return self.tier == ZScoreTier.EXTREME

    @property
    def formatted_z_score(self) -> str:
        return f"{self.stat.z_score:+.1f}σ"

    def to_dict(self) -> dict:
        return {
            "indicator": self.indicator_key,
            "z_score": self.stat.z_score,
            "tier": self.tier.value,
            "direction": self.direction.value if self.direction else None,
            "rarity": self.rarity,
            "interpretation": self.interpretation,
            "implication": self.implication.value,
        }


@dataclass
class ZScoreClassifier:
    """Classifies indicator z-scores into tiers.

    Thresholds can be given per indicator; indicators without an entry use
    default_thresholds. Passing thresholds directly to classify() or
    annotate() overrides both.

    Example:
        >>> classifier = ZScoreClassifier()
        >>> stat = IndicatorStat(32.0, 18.0, 5.0, z_score=2.8, rarity=196)
        >>> classifier.classify(stat)
        <ZScoreTier.EXTREME: 'extreme'>
    """

    default_thresholds: ZScoreThresholds = field(default_factory=ZScoreThresholds)
    indicator_thresholds: dict[str, ZScoreThresholds] = field(default_factory=dict)
    interpretations: InterpretationTable = field(default_factory=default_interpretations)

    def thresholds_for(self, indicator: Optional[IndicatorKey]) -> ZScoreThresholds:
        if indicator is None:
            return self.default_thresholds
        return self.indicator_thresholds.get(_indicator_key(indicator), self.default_thresholds)

    def classify(
        self,
        stat: IndicatorStat,
        thresholds: Optional[ZScoreThresholds] = None,
    ) -> ZScoreTier:
        thresholds = thresholds or self.default_thresholds
        magnitude = abs(stat.z_score)

        if magnitude >= thresholds.extreme:
            return ZScoreTier.EXTREME
        if magnitude >= thresholds.significant:
            return ZScoreTier.SIGNIFICANT
        return ZScoreTier.NORMAL

    def annotate(
        self,
        indicator: IndicatorKey,
        stat: IndicatorStat,
        thresholds: Optional[ZScoreThresholds] = None,
    ) -> ZScoreAnnotation:
        """Classify a stat and attach direction, rarity and interpretation."""
        thresholds = thresholds or self.thresholds_for(indicator)
        tier = self.classify(stat, thresholds)

        direction: Optional[ZScoreDirection] = None
        rarity: Optional[int] = None
        if tier != ZScoreTier.NORMAL:
            direction = ZScoreDirection.HIGH if stat.z_score > 0 else ZScoreDirection.LOW
            rarity = stat.rarity

        reading = self.interpretations.lookup(indicator, direction, tier)

        return ZScoreAnnotation(
            indicator=indicator,
            stat=stat,
            tier=tier,
            direction=direction,
            rarity=rarity,
            interpretation=reading.text,
            implication=reading.implication,
        )

    def annotate_all(
        self,
        stats: dict[IndicatorKey, IndicatorStat],
    ) -> dict[IndicatorKey, ZScoreAnnotation]:
        return {indicator: self.annotate(indicator, stat) for indicator, stat in stats.items()}
