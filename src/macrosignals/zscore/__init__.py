"""Z-score tiers and qualitative readings for macro indicators."""

from .classifier import (
    Interpretation,
    InterpretationTable,
    MarketImplication,
    ZScoreAnnotation,
    ZScoreClassifier,
    ZScoreDirection,
    ZScoreThresholds,
    ZScoreTier,
    default_interpretations,
)

__all__ = [
    "Interpretation",
    "InterpretationTable",
    "MarketImplication",
    "ZScoreAnnotation",
    "ZScoreClassifier",
    "ZScoreDirection",
    "ZScoreThresholds",
    "ZScoreTier",
    "default_interpretations",
]
