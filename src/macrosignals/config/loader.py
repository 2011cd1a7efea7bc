"""Configuration loading for the signal engine."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

from macrosignals.regime.types import RegimeThresholds
from macrosignals.series.index import DEFAULT_MAX_POINTS
from macrosignals.zscore.classifier import ZScoreThresholds

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/signals.yaml")


@dataclass(frozen=True)
class SignalConfig:
    """Engine settings loaded from YAML.

    Attributes:
        regime: Regime vote thresholds
        zscore_default: Z-score thresholds for indicators without an override
        zscore: Per-indicator z-score threshold overrides, keyed by indicator
        chart_max_points: Point budget for downsampled charts
        state_path: Durable state file (None keeps state in memory)
        extreme_move_cooldown_hours: Cooldown between repeated extreme-move alerts
        lookback_days: History requested per indicator for a snapshot
        change_window_days: Window for DXY and M2 percent change
    """

    regime: RegimeThresholds = field(default_factory=RegimeThresholds)
    zscore_default: ZScoreThresholds = field(default_factory=ZScoreThresholds)
    zscore: Dict[str, ZScoreThresholds] = field(default_factory=dict)
    chart_max_points: int = DEFAULT_MAX_POINTS
    state_path: Optional[Path] = None
    extreme_move_cooldown_hours: float = 4.0
    lookback_days: int = 90
    change_window_days: int = 30

    def __post_init__(self):
        if self.chart_max_points < 2:
            raise ValueError(f"chart_max_points must be at least 2: {self.chart_max_points}")
        if self.extreme_move_cooldown_hours < 0:
            raise ValueError(
                f"extreme_move_cooldown_hours must be non-negative: {self.extreme_move_cooldown_hours}"
            )
        if self.change_window_days >= self.lookback_days:
            raise ValueError(
                f"change_window_days ({self.change_window_days}) must be shorter than "
                f"lookback_days ({self.lookback_days})"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "regime": {
                "vix": {
                    "bullish_below": self.regime.vix_bullish_below,
                    "bearish_above": self.regime.vix_bearish_above,
                },
                "dxy": {
                    "bullish_below": self.regime.dxy_bullish_below,
                    "bearish_above": self.regime.dxy_bearish_above,
                },
                "m2": {
                    "bullish_above": self.regime.m2_bullish_above,
                    "bearish_below": self.regime.m2_bearish_below,
                },
                "min_indicators": self.regime.min_indicators,
            },
            "zscore": {
                "default": {
                    "significant": self.zscore_default.significant,
                    "extreme": self.zscore_default.extreme,
                },
                "indicators": {
                    name: {"significant": t.significant, "extreme": t.extreme}
                    for name, t in self.zscore.items()
                },
            },
            "chart": {"max_points": self.chart_max_points},
            "state": {"path": str(self.state_path) if self.state_path else None},
            "alerts": {"extreme_move_cooldown_hours": self.extreme_move_cooldown_hours},
            "snapshot": {
                "lookback_days": self.lookback_days,
                "change_window_days": self.change_window_days,
            },
        }


def _parse_regime(data: Dict[str, Any]) -> RegimeThresholds:
    return RegimeThresholds(
        vix_bullish_below=data["vix"]["bullish_below"],
        vix_bearish_above=data["vix"]["bearish_above"],
        dxy_bullish_below=data["dxy"]["bullish_below"],
        dxy_bearish_above=data["dxy"]["bearish_above"],
        m2_bullish_above=data["m2"]["bullish_above"],
        m2_bearish_below=data["m2"]["bearish_below"],
        min_indicators=data.get("min_indicators", 2),
    )


def _parse_zscore(data: Dict[str, Any]) -> ZScoreThresholds:
    return ZScoreThresholds(significant=data["significant"], extreme=data["extreme"])


def load_config(path: Optional[Path] = None) -> SignalConfig:
    """Load engine settings from YAML.

    The regime section is required; every other section falls back to its
    defaults when omitted.

    Args:
        path: Path to signals.yaml. Uses default if not provided.

    Returns:
        SignalConfig with loaded settings

    Raises:
        ValueError: If config is malformed
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning(f"Signal config not found at {config_path}, using defaults")
        return SignalConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Signal config must be a mapping: {config_path}")

    try:
        regime = _parse_regime(data["regime"])

        zscore_data = data.get("zscore", {})
        zscore_default = _parse_zscore(zscore_data["default"]) if "default" in zscore_data else ZScoreThresholds()
        zscore = {
            name.upper(): _parse_zscore(values)
            for name, values in (zscore_data.get("indicators") or {}).items()
        }

        state_path = data.get("state", {}).get("path")
        snapshot = data.get("snapshot", {})

        return SignalConfig(
            regime=regime,
            zscore_default=zscore_default,
            zscore=zscore,
            chart_max_points=data.get("chart", {}).get("max_points", DEFAULT_MAX_POINTS),
            state_path=Path(state_path) if state_path else None,
            extreme_move_cooldown_hours=data.get("alerts", {}).get("extreme_move_cooldown_hours", 4.0),
            lookback_days=snapshot.get("lookback_days", 90),
            change_window_days=snapshot.get("change_window_days", 30),
        )
    except KeyError as e:
        raise ValueError(f"Missing required field in signal config: {e}")
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Malformed signal config {config_path}: {e}")
