"""Macro regime classification.

Combines VIX level, DXY monthly change and M2 monthly change into a single
RISK-ON / RISK-OFF / MIXED / NO DATA reading.
"""

from .types import MarketRegime, RegimeThresholds, Vote
from .classifier import RegimeClassifier, RegimeVotes

__all__ = [
    "MarketRegime",
    "RegimeClassifier",
    "RegimeThresholds",
    "RegimeVotes",
    "Vote",
]
