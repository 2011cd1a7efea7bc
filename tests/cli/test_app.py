"""Tests for the command line interface."""

import json

import yaml
from typer.testing import CliRunner

from macrosignals.cli.app import app

runner = CliRunner()


class TestClassify:
    """Tests for the classify command."""

    def test_risk_on(self, tmp_path):
        result = runner.invoke(
            app,
            ["classify", "--vix", "12", "--dxy=-0.5", "--m2", "2", "--config", str(tmp_path / "none.yaml")],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["regime"] == "RISK-ON"
        assert data["votes"]["m2"] == "bullish"

    def test_no_data(self, tmp_path):
        result = runner.invoke(app, ["classify", "--vix", "12", "--config", str(tmp_path / "none.yaml")])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["regime"] == "NO DATA"


class TestObserve:
    """Tests for the observe and status commands."""

    def test_change_reported(self, tmp_path):
        state = str(tmp_path / "state.json")

        first = runner.invoke(app, ["observe", "risk-on", "--state", state])
        second = runner.invoke(app, ["observe", "RISK_OFF", "--state", state])

        assert first.exit_code == 0
        assert "No alert" in first.stdout
        assert second.exit_code == 0
        assert json.loads(second.stdout)["to_regime"] == "RISK-OFF"

        status = runner.invoke(app, ["status", "--state", state])
        assert json.loads(status.stdout)["last_known_regime"] == "RISK-OFF"

    def test_notifications_off(self, tmp_path):
        state = str(tmp_path / "state.json")
        runner.invoke(app, ["observe", "MIXED", "--state", state])

        runner.invoke(app, ["notifications", "--disable", "--state", state])
        result = runner.invoke(app, ["observe", "RISK-ON", "--state", state])

        assert "No alert" in result.stdout
        status = json.loads(runner.invoke(app, ["status", "--state", state]).stdout)
        assert status["notifications_enabled"] is False
        assert status["last_known_regime"] == "RISK-ON"

    def test_state_path_from_config(self, tmp_path):
        """Without --state, commands share the state file named in the config."""
        state = tmp_path / "state" / "signals.json"
        config = tmp_path / "signals.yaml"
        config.write_text(
            yaml.safe_dump(
                {
                    "regime": {
                        "vix": {"bullish_below": 15.0, "bearish_above": 25.0},
                        "dxy": {"bullish_below": -0.3, "bearish_above": 0.3},
                        "m2": {"bullish_above": 1.0, "bearish_below": -1.0},
                    },
                    "state": {"path": str(state)},
                }
            )
        )

        runner.invoke(app, ["observe", "RISK-ON", "--config", str(config)])
        result = runner.invoke(app, ["observe", "RISK-OFF", "--config", str(config)])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["from_regime"] == "RISK-ON"
        assert state.exists()
        status = runner.invoke(app, ["status", "--config", str(config)])
        assert json.loads(status.stdout)["last_known_regime"] == "RISK-OFF"

    def test_unknown_regime(self, tmp_path):
        result = runner.invoke(
            app, ["observe", "SIDEWAYS", "--config", str(tmp_path / "none.yaml")]
        )
        assert result.exit_code != 0


class TestPrintConfig:
    """Tests for the print-config command."""

    def test_prints_json(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("chart:\n  max_points: 100\n")

        result = runner.invoke(app, ["print-config", str(path)])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"chart": {"max_points": 100}}
