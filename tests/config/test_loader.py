"""Tests for signal config loading."""

from pathlib import Path

import pytest
import yaml

from macrosignals.config import SignalConfig, load_config
from macrosignals.regime.types import RegimeThresholds
from macrosignals.zscore import ZScoreThresholds

REPO_CONFIG = Path(__file__).resolve().parents[2] / "configs" / "signals.yaml"

REGIME_SECTION = {
    "vix": {"bullish_below": 14.0, "bearish_above": 28.0},
    "dxy": {"bullish_below": -0.5, "bearish_above": 0.5},
    "m2": {"bullish_above": 1.5, "bearish_below": -1.5},
}


def write_config(tmp_path, data):
    path = tmp_path / "signals.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_repo_config_loads(self):
        """The shipped config matches the built-in defaults."""
        config = load_config(REPO_CONFIG)

        assert config.regime == RegimeThresholds()
        assert config.zscore_default == ZScoreThresholds()
        assert config.chart_max_points == 250
        assert config.state_path == Path("data/state/signals.json")

    def test_missing_file_uses_defaults(self, tmp_path, caplog):
        config = load_config(tmp_path / "missing.yaml")

        assert config == SignalConfig()
        assert "using defaults" in caplog.text

    def test_regime_only(self, tmp_path):
        config = load_config(write_config(tmp_path, {"regime": REGIME_SECTION}))

        assert config.regime.vix_bullish_below == 14.0
        assert config.regime.m2_bearish_below == -1.5
        assert config.regime.min_indicators == 2
        assert config.state_path is None
        assert config.lookback_days == 90

    def test_full_config(self, tmp_path):
        data = {
            "regime": dict(REGIME_SECTION, min_indicators=3),
            "zscore": {
                "default": {"significant": 1.8, "extreme": 2.4},
                "indicators": {"vix": {"significant": 2.2, "extreme": 3.0}},
            },
            "chart": {"max_points": 120},
            "state": {"path": "state.db"},
            "alerts": {"extreme_move_cooldown_hours": 2},
            "snapshot": {"lookback_days": 60, "change_window_days": 14},
        }

        config = load_config(write_config(tmp_path, data))

        assert config.regime.min_indicators == 3
        assert config.zscore_default == ZScoreThresholds(1.8, 2.4)
        assert config.zscore == {"VIX": ZScoreThresholds(2.2, 3.0)}
        assert config.chart_max_points == 120
        assert config.state_path == Path("state.db")
        assert config.extreme_move_cooldown_hours == 2
        assert config.change_window_days == 14

    def test_missing_regime_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Missing required field"):
            load_config(write_config(tmp_path, {"chart": {"max_points": 100}}))

    def test_missing_regime_key_raises(self, tmp_path):
        regime = {"vix": REGIME_SECTION["vix"], "dxy": REGIME_SECTION["dxy"]}
        with pytest.raises(ValueError, match="Missing required field"):
            load_config(write_config(tmp_path, {"regime": regime}))

    def test_inverted_thresholds_raise(self, tmp_path):
        regime = dict(REGIME_SECTION, vix={"bullish_below": 30.0, "bearish_above": 20.0})
        with pytest.raises(ValueError, match="vix_bullish_below"):
            load_config(write_config(tmp_path, {"regime": regime}))

    def test_non_mapping_raises(self, tmp_path):
        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(write_config(tmp_path, ["not", "a", "mapping"]))

    def test_to_dict_round_trip(self, tmp_path):
        original = SignalConfig(chart_max_points=100, state_path=Path("s.json"))

        reloaded = load_config(write_config(tmp_path, original.to_dict()))

        assert reloaded == original


class TestSignalConfig:
    """Tests for SignalConfig validation."""

    def test_chart_points(self):
        with pytest.raises(ValueError, match="chart_max_points"):
            SignalConfig(chart_max_points=1)

    def test_window(self):
        with pytest.raises(ValueError, match="change_window_days"):
            SignalConfig(lookback_days=20, change_window_days=30)
