"""End-to-end signal refresh with durable regime tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional

from macrosignals.config.loader import SignalConfig
from macrosignals.data.snapshot import IndicatorHistoryProvider, MacroSnapshot, SnapshotBuilder
from macrosignals.monitoring.alerts import AlertManager
from macrosignals.monitoring.extreme_moves import ExtremeMoveMonitor, ExtremeMove
from macrosignals.monitoring.regime import AlertPayload, RegimeChangeTracker
from macrosignals.production.state import KeyValueStore, create_store
from macrosignals.regime.classifier import RegimeClassifier, RegimeVotes
from macrosignals.regime.types import MarketRegime
from macrosignals.series.index import DEFAULT_MAX_POINTS, downsample
from macrosignals.types import IndicatorSample, IndicatorStat, IndicatorType
from macrosignals.zscore.classifier import IndicatorKey, ZScoreAnnotation, ZScoreClassifier

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one refresh."""

    snapshot: MacroSnapshot
    regime: MarketRegime
    votes: RegimeVotes
    regime_alert: Optional[AlertPayload] = None
    annotations: dict[IndicatorKey, ZScoreAnnotation] = field(default_factory=dict)
    extreme_moves: list[ExtremeMove] = field(default_factory=list)
    charts: dict[IndicatorType, list[IndicatorSample]] = field(default_factory=dict)

    @property
    def regime_changed(self) -> bool:
        return self.regime_alert is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "snapshot": self.snapshot.to_dict(),
            "regime": self.regime.value,
            "votes": self.votes.to_dict(),
            "regime_alert": self.regime_alert.to_dict() if self.regime_alert else None,
            "annotations": {
                annotation.indicator_key: annotation.to_dict()
                for annotation in self.annotations.values()
            },
            "extreme_moves": [move.to_dict() for move in self.extreme_moves],
            "charts": {
                indicator.value: [
                    {"timestamp": s.timestamp.isoformat(), "value": s.value} for s in samples
                ]
                for indicator, samples in self.charts.items()
            },
        }


class SignalPipeline:
    """Runs one refresh of the macro signals.

    This component:
    1. Fetches indicator history and builds a MacroSnapshot
    2. Classifies the snapshot into a MarketRegime
    3. Feeds the regime to the change tracker (persisted, may alert)
    4. Annotates any supplied z-score stats and checks them for extreme moves
    5. Downsamples the fetched history for charting

    Usage:
        pipeline = SignalPipeline.from_config(provider, load_config())
        result = pipeline.run(stats={IndicatorType.VIX: vix_stat})
        print(f"Current regime: {result.regime.value}")
    """

    def __init__(
        self,
        provider: IndicatorHistoryProvider,
        store: Optional[KeyValueStore] = None,
        alert_manager: Optional[AlertManager] = None,
        snapshot_builder: Optional[SnapshotBuilder] = None,
        regime_classifier: Optional[RegimeClassifier] = None,
        zscore_classifier: Optional[ZScoreClassifier] = None,
        extreme_move_monitor: Optional[ExtremeMoveMonitor] = None,
        regime_tracker: Optional[RegimeChangeTracker] = None,
        chart_max_points: int = DEFAULT_MAX_POINTS,
    ):
        """Initialize pipeline.

        Args:
            provider: Source of indicator history
            store: Durable state shared by the tracker and the extreme move monitor
            alert_manager: Receives regime and extreme move alerts
            snapshot_builder: Overrides the default builder around provider
            regime_classifier: Overrides the default regime thresholds
            zscore_classifier: Overrides the default z-score thresholds
            extreme_move_monitor: Overrides the default monitor
            regime_tracker: Overrides the default tracker
            chart_max_points: Point budget for each downsampled chart
        """
        self.store = store if store is not None else create_store(None)
        self.alert_manager = alert_manager
        self.chart_max_points = chart_max_points

        self.snapshot_builder = snapshot_builder or SnapshotBuilder(provider)
        self.regime_classifier = regime_classifier or RegimeClassifier()
        self.zscore_classifier = zscore_classifier or ZScoreClassifier()
        self.regime_tracker = regime_tracker or RegimeChangeTracker(self.store, alert_manager)
        self.extreme_move_monitor = extreme_move_monitor or ExtremeMoveMonitor(
            self.store, alert_manager
        )

    @classmethod
    def from_config(
        cls,
        provider: IndicatorHistoryProvider,
        config: SignalConfig,
        alert_manager: Optional[AlertManager] = None,
    ) -> "SignalPipeline":
        store = create_store(config.state_path)
        return cls(
            provider,
            store=store,
            alert_manager=alert_manager,
            snapshot_builder=SnapshotBuilder(
                provider,
                lookback_days=config.lookback_days,
                change_window_days=config.change_window_days,
            ),
            regime_classifier=RegimeClassifier(config.regime),
            zscore_classifier=ZScoreClassifier(
                default_thresholds=config.zscore_default,
                indicator_thresholds=dict(config.zscore),
            ),
            extreme_move_monitor=ExtremeMoveMonitor(
                store,
                alert_manager,
                cooldown=timedelta(hours=config.extreme_move_cooldown_hours),
            ),
            chart_max_points=config.chart_max_points,
        )

    def run(self, stats: Optional[dict[IndicatorKey, IndicatorStat]] = None) -> PipelineResult:
        """Run one refresh.

        Args:
            stats: Precomputed z-score stats per indicator, if any

        Returns:
            PipelineResult for this refresh
        """
        histories = self.snapshot_builder.fetch_all()
        snapshot = self.snapshot_builder.build_from_histories(histories)

        votes = self.regime_classifier.votes(
            vix=snapshot.vix,
            dxy=snapshot.dxy_change_pct,
            m2=snapshot.m2_change_pct,
        )
        regime = self.regime_classifier.combine(votes)
        logger.info(f"Current regime: {regime.value} ({snapshot.available_count}/3 indicators)")

        regime_alert = self.regime_tracker.observe(regime)

        annotations: dict[IndicatorKey, ZScoreAnnotation] = {}
        extreme_moves: list[ExtremeMove] = []
        if stats:
            annotations = self.zscore_classifier.annotate_all(stats)
            extreme_moves = self.extreme_move_monitor.check_all(annotations.values())

        return PipelineResult(
            snapshot=snapshot,
            regime=regime,
            votes=votes,
            regime_alert=regime_alert,
            annotations=annotations,
            extreme_moves=extreme_moves,
            charts={
                indicator: downsample(samples, self.chart_max_points)
                for indicator, samples in histories.items()
            },
        )
