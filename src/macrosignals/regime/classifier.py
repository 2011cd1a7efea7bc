"""Macro regime classifier.

Combines the latest VIX level, DXY monthly change and M2 monthly change into
one MarketRegime. Each available indicator casts a bullish, bearish or
neutral vote. The combination is a unanimity rule, not a majority vote: a
single bearish vote blocks RISK_ON even when the other two are bullish.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from macrosignals.types import IndicatorType

from .types import MarketRegime, RegimeThresholds, Vote

if TYPE_CHECKING:
    from macrosignals.data.snapshot import MacroSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegimeVotes:
    """Per-indicator votes behind a classification (None = indicator missing)."""

    vix: Optional[Vote]
    dxy: Optional[Vote]
    m2: Optional[Vote]

    def present(self) -> dict[IndicatorType, Vote]:
        votes = {
            IndicatorType.VIX: self.vix,
            IndicatorType.DXY: self.dxy,
            IndicatorType.M2: self.m2,
        }
        return {k: v for k, v in votes.items() if v is not None}

    @property
    def bullish(self) -> int:
        return sum(1 for v in self.present().values() if v == Vote.BULLISH)

    @property
    def bearish(self) -> int:
        return sum(1 for v in self.present().values() if v == Vote.BEARISH)

    def to_dict(self) -> dict:
        return {
            "vix": self.vix.value if self.vix else None,
            "dxy": self.dxy.value if self.dxy else None,
            "m2": self.m2.value if self.m2 else None,
        }


class RegimeClassifier:
    """Classifies macro readings into RISK_ON / RISK_OFF / MIXED / NO_DATA.

    Rules:
    - VIX: bullish below 15, bearish above 25
    - DXY monthly change: bullish below -0.3%, bearish above +0.3%
    - M2 monthly change: bullish above +1.0%, bearish below -1.0%
    - Fewer than min_indicators (default 2) available: NO_DATA
    - At least min(2, min_indicators) bullish and no bearish: RISK_ON
    - At least min(2, min_indicators) bearish and no bullish: RISK_OFF
    - Anything else: MIXED
    """

    def __init__(self, thresholds: Optional[RegimeThresholds] = None):
        self.thresholds = thresholds or RegimeThresholds()

    def vote_vix(self, level: Optional[float]) -> Optional[Vote]:
        if level is None:
            return None
        if level < self.thresholds.vix_bullish_below:
            return Vote.BULLISH
        if level > self.thresholds.vix_bearish_above:
            return Vote.BEARISH
        return Vote.NEUTRAL

    def vote_dxy(self, change_pct: Optional[float]) -> Optional[Vote]:
        if change_pct is None:
            return None
        if change_pct < self.thresholds.dxy_bullish_below:
            return Vote.BULLISH
        if change_pct > self.thresholds.dxy_bearish_above:
            return Vote.BEARISH
        return Vote.NEUTRAL

    def vote_m2(self, change_pct: Optional[float]) -> Optional[Vote]:
        if change_pct is None:
            return None
        if change_pct > self.thresholds.m2_bullish_above:
            return Vote.BULLISH
        if change_pct < self.thresholds.m2_bearish_below:
            return Vote.BEARISH
        return Vote.NEUTRAL

    def votes(
        self,
        vix: Optional[float] = None,
        dxy: Optional[float] = None,
        m2: Optional[float] = None,
    ) -> RegimeVotes:
        return RegimeVotes(
            vix=self.vote_vix(vix),
            dxy=self.vote_dxy(dxy),
            m2=self.vote_m2(m2),
        )

    def combine(self, votes: RegimeVotes) -> MarketRegime:
        if len(votes.present()) < self.thresholds.min_indicators:
            return MarketRegime.NO_DATA

        required = min(2, self.thresholds.min_indicators)
        bullish, bearish = votes.bullish, votes.bearish
        if bullish >= required and bearish == 0:
            return MarketRegime.RISK_ON
        if bearish >= required and bullish == 0:
            return MarketRegime.RISK_OFF
        return MarketRegime.MIXED

    def classify(
        self,
        vix: Optional[float] = None,
        dxy: Optional[float] = None,
        m2: Optional[float] = None,
    ) -> MarketRegime:
        """Classify the latest readings.

        Args:
            vix: Latest VIX level
            dxy: DXY monthly percent change
            m2: M2 monthly percent change

        Returns:
            MarketRegime; NO_DATA when fewer than min_indicators readings are available
        """
        votes = self.votes(vix, dxy, m2)
        regime = self.combine(votes)
        logger.debug(f"Classified {votes.to_dict()} as {regime.value}")
        return regime

    def classify_snapshot(self, snapshot: "MacroSnapshot") -> MarketRegime:
        return self.classify(
            vix=snapshot.vix,
            dxy=snapshot.dxy_change_pct,
            m2=snapshot.m2_change_pct,
        )
