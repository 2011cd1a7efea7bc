from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
import yaml

from macrosignals.config.loader import DEFAULT_CONFIG_PATH, load_config
from macrosignals.monitoring.alerts import create_default_alert_manager
from macrosignals.monitoring.regime import RegimeChangeTracker
from macrosignals.production.state import create_store
from macrosignals.regime.classifier import RegimeClassifier
from macrosignals.regime.types import MarketRegime
from macrosignals.utils.logging import configure_logging

app = typer.Typer(help="Macro derived-signal engine CLI")


@app.callback()
def root(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level")) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _resolve_state(state: Optional[Path], config: Path) -> Optional[Path]:
    return state if state is not None else load_config(config).state_path


def _parse_regime(value: str) -> MarketRegime:
    normalized = value.strip().upper().replace("_", "-")
    if normalized == "NO-DATA":
        normalized = MarketRegime.NO_DATA.value
    try:
        return MarketRegime(normalized)
    except ValueError:
        choices = ", ".join(r.value for r in MarketRegime)
        raise typer.BadParameter(f"Unknown regime {value!r}, expected one of: {choices}")


@app.command()
def classify(
    vix: Optional[float] = typer.Option(None, help="Latest VIX level"),
    dxy: Optional[float] = typer.Option(None, help="DXY monthly % change"),
    m2: Optional[float] = typer.Option(None, help="M2 monthly % change"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Signal config YAML"),
) -> None:
    """Classify macro readings into a market regime."""
    settings = load_config(config)
    classifier = RegimeClassifier(settings.regime)
    votes = classifier.votes(vix=vix, dxy=dxy, m2=m2)
    regime = classifier.combine(votes)
    typer.echo(json.dumps({"regime": regime.value, "votes": votes.to_dict()}, indent=2))


@app.command()
def observe(
    regime: str = typer.Argument(..., help="RISK-ON, RISK-OFF, MIXED or NO-DATA"),
    state: Optional[Path] = typer.Option(None, help="State file (.json or .db), default from config"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Signal config YAML"),
    alert_log: Optional[Path] = typer.Option(None, help="Append alerts to this JSONL file"),
) -> None:
    """Feed a regime to the change tracker and report any alert."""
    parsed = _parse_regime(regime)
    tracker = RegimeChangeTracker(
        create_store(_resolve_state(state, config)),
        create_default_alert_manager(log_path=alert_log),
    )
    payload = tracker.observe(parsed)
    if payload is None:
        typer.echo("No alert")
    else:
        typer.echo(json.dumps(payload.to_dict(), indent=2))


@app.command()
def status(
    state: Optional[Path] = typer.Option(None, help="State file (.json or .db), default from config"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Signal config YAML"),
) -> None:
    """Show the persisted regime tracking state."""
    tracker = RegimeChangeTracker(create_store(_resolve_state(state, config)))
    typer.echo(json.dumps(tracker.state.to_dict(), indent=2))


@app.command()
def notifications(
    enabled: bool = typer.Option(..., "--enable/--disable", help="Turn notifications on or off"),
    state: Optional[Path] = typer.Option(None, help="State file (.json or .db), default from config"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Signal config YAML"),
) -> None:
    """Enable or disable regime change notifications."""
    tracker = RegimeChangeTracker(create_store(_resolve_state(state, config)))
    tracker.notifications_enabled = enabled
    typer.echo(f"Regime notifications {'enabled' if enabled else 'disabled'}")


@app.command()
def print_config(path: Path) -> None:
    """Print a YAML config file as JSON."""
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    typer.echo(json.dumps(obj, indent=2))


def main() -> None:
    configure_logging()
    app()


if __name__ == "__main__":
    main()
