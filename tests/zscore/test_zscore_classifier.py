"""Tests for z-score classification."""

import pytest

from macrosignals.types import IndicatorCorrelation, IndicatorStat, IndicatorType
from macrosignals.zscore import (
    Interpretation,
    InterpretationTable,
    MarketImplication,
    ZScoreClassifier,
    ZScoreDirection,
    ZScoreThresholds,
    ZScoreTier,
)


def make_stat(z_score, rarity=None):
    return IndicatorStat(
        current_value=20.0 + z_score * 4.0,
        mean=20.0,
        standard_deviation=4.0,
        z_score=z_score,
        rarity=rarity,
    )


@pytest.fixture
def classifier():
    return ZScoreClassifier()


class TestZScoreThresholds:
    """Tests for ZScoreThresholds validation."""

    def test_defaults(self):
        thresholds = ZScoreThresholds()
        assert thresholds.significant == 2.0
        assert thresholds.extreme == 2.5

    def test_extreme_below_significant_raises(self):
        with pytest.raises(ValueError, match="Extreme threshold"):
            ZScoreThresholds(significant=3.0, extreme=2.0)

    def test_non_positive_significant_raises(self):
        with pytest.raises(ValueError, match="must be positive"):
            ZScoreThresholds(significant=0.0, extreme=1.0)


class TestClassify:
    """Tests for ZScoreClassifier.classify()."""

    @pytest.mark.parametrize(
        "z_score,tier",
        [
            (2.6, ZScoreTier.EXTREME),
            (2.1, ZScoreTier.SIGNIFICANT),
            (1.0, ZScoreTier.NORMAL),
            (0.0, ZScoreTier.NORMAL),
            (-2.6, ZScoreTier.EXTREME),
            (-2.1, ZScoreTier.SIGNIFICANT),
            (2.0, ZScoreTier.SIGNIFICANT),
            (2.5, ZScoreTier.EXTREME),
            (1.99, ZScoreTier.NORMAL),
        ],
    )
    def test_tiers(self, classifier, z_score, tier):
        assert classifier.classify(make_stat(z_score)) == tier

    def test_explicit_thresholds_override(self, classifier):
        strict = ZScoreThresholds(significant=3.0, extreme=4.0)
        assert classifier.classify(make_stat(2.6), strict) == ZScoreTier.NORMAL


class TestAnnotate:
    """Tests for ZScoreClassifier.annotate()."""

    def test_extreme_high_vix(self, classifier):
        """Extreme high VIX reads as bearish and keeps its rarity."""
        annotation = classifier.annotate(IndicatorType.VIX, make_stat(2.6, rarity=150))

        assert annotation.tier == ZScoreTier.EXTREME
        assert annotation.direction == ZScoreDirection.HIGH
        assert annotation.rarity == 150
        assert annotation.implication == MarketImplication.BEARISH
        assert annotation.interpretation.startswith("Elevated fear")
        assert annotation.is_extreme
        assert annotation.formatted_z_score == "+2.6σ"

    def test_significant_low_dxy(self, classifier):
        """A weak dollar is favorable at the significant tier."""
        annotation = classifier.annotate(IndicatorType.DXY, make_stat(-2.1, rarity=40))

        assert annotation.tier == ZScoreTier.SIGNIFICANT
        assert annotation.direction == ZScoreDirection.LOW
        assert annotation.implication == MarketImplication.FAVORABLE
        assert annotation.is_significant
        assert not annotation.is_extreme

    def test_extreme_low_m2_is_bearish(self, classifier):
        """M2 correlates positively, so contraction is bearish."""
        annotation = classifier.annotate(IndicatorType.M2, make_stat(-2.8))

        assert annotation.direction == ZScoreDirection.LOW
        assert annotation.implication == MarketImplication.BEARISH
        assert "contraction" in annotation.interpretation

    def test_extreme_high_m2_is_bullish(self, classifier):
        annotation = classifier.annotate(IndicatorType.M2, make_stat(2.8))
        assert annotation.implication == MarketImplication.BULLISH

    def test_normal_suppresses_rarity(self, classifier):
        """A normal reading never claims a rarity, even if the stat has one."""
        annotation = classifier.annotate(IndicatorType.VIX, make_stat(1.0, rarity=5))

        assert annotation.tier == ZScoreTier.NORMAL
        assert annotation.rarity is None
        assert annotation.direction is None
        assert annotation.implication == MarketImplication.NEUTRAL
        assert annotation.interpretation == "VIX is within normal historical range"
        assert not annotation.is_significant

    def test_per_indicator_thresholds(self):
        """Indicators with an override use it; others use the default."""
        classifier = ZScoreClassifier(
            indicator_thresholds={"VIX": ZScoreThresholds(significant=3.0, extreme=4.0)}
        )

        assert classifier.annotate(IndicatorType.VIX, make_stat(2.6)).tier == ZScoreTier.NORMAL
        assert classifier.annotate(IndicatorType.DXY, make_stat(2.6)).tier == ZScoreTier.EXTREME

    def test_unknown_indicator_falls_back(self, classifier):
        """Indicators without table entries still get a neutral reading."""
        annotation = classifier.annotate("BTC_DOMINANCE", make_stat(3.0, rarity=400))

        assert annotation.tier == ZScoreTier.EXTREME
        assert annotation.rarity == 400
        assert annotation.implication == MarketImplication.NEUTRAL
        assert annotation.interpretation == "BTC_DOMINANCE is extremely high versus history"

    def test_annotate_all(self, classifier):
        stats = {IndicatorType.VIX: make_stat(2.6), IndicatorType.DXY: make_stat(0.3)}

        annotations = classifier.annotate_all(stats)

        assert annotations[IndicatorType.VIX].tier == ZScoreTier.EXTREME
        assert annotations[IndicatorType.DXY].tier == ZScoreTier.NORMAL

    def test_to_dict(self, classifier):
        data = classifier.annotate(IndicatorType.VIX, make_stat(-2.7, rarity=90)).to_dict()

        assert data["indicator"] == "VIX"
        assert data["tier"] == "extreme"
        assert data["direction"] == "low"
        assert data["rarity"] == 90
        assert data["implication"] == "bullish"


class TestInterpretationTable:
    """Tests for InterpretationTable registration."""

    def test_register_new_indicator(self):
        """A new indicator is supported by registering entries only."""
        table = InterpretationTable()
        table.register_indicator(
            "GOLD",
            IndicatorCorrelation.POSITIVE,
            high_text="Gold rallying",
            low_text="Gold slumping",
        )
        classifier = ZScoreClassifier(interpretations=table)

        annotation = classifier.annotate("GOLD", make_stat(2.2))

        assert "GOLD" in table
        assert annotation.interpretation == "Gold rallying"
        assert annotation.implication == MarketImplication.FAVORABLE

    def test_register_single_entry(self):
        table = InterpretationTable()
        entry = Interpretation("Custom", MarketImplication.CAUTIOUS)
        table.register(IndicatorType.VIX, ZScoreDirection.LOW, ZScoreTier.EXTREME, entry)

        assert table.lookup(IndicatorType.VIX, ZScoreDirection.LOW, ZScoreTier.EXTREME) == entry

    def test_register_normal_rejected(self):
        table = InterpretationTable()
        with pytest.raises(ValueError):
            table.register(
                IndicatorType.VIX,
                ZScoreDirection.HIGH,
                ZScoreTier.NORMAL,
                Interpretation("x", MarketImplication.NEUTRAL),
            )
