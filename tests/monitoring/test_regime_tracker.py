"""Tests for regime change tracking."""

import threading

import pytest

from macrosignals.monitoring.regime import AlertPayload, RegimeChangeTracker
from macrosignals.production.state import (
    LAST_CHANGE_KEY,
    NOTIFICATIONS_ENABLED_KEY,
    REGIME_KEY,
    InMemoryKeyValueStore,
    JSONKeyValueStore,
    SQLiteKeyValueStore,
)
from macrosignals.regime.types import MarketRegime



class RecordingStore(InMemoryKeyValueStore):
    """Remembers the keys of every write, one entry per call."""

    def __init__(self):
        super().__init__()
        self.writes = []

    def set(self, key, value):
        self.writes.append({key})
        super().set(key, value)

    def set_many(self, values):
        self.writes.append(set(values))
        super().set_many(values)

@pytest.fixture
def tracker(store, alert_manager, clock):
    return RegimeChangeTracker(store, alert_manager, clock=clock)


class TestObserve:
    """Tests for RegimeChangeTracker.observe()."""

    def test_lifecycle(self, tracker, clock):
        """First regime is tracked silently, then only changes alert."""
        assert tracker.last_known_regime is None

        assert tracker.observe(MarketRegime.RISK_ON) is None
        assert tracker.last_known_regime == MarketRegime.RISK_ON

        assert tracker.observe(MarketRegime.RISK_ON) is None

        clock.advance(hours=6)
        payload = tracker.observe(MarketRegime.RISK_OFF)
        assert payload == AlertPayload(
            from_regime=MarketRegime.RISK_ON,
            to_regime=MarketRegime.RISK_OFF,
            changed_at=clock.now,
        )
        assert tracker.last_known_regime == MarketRegime.RISK_OFF

        assert tracker.observe(MarketRegime.NO_DATA) is None
        assert tracker.last_known_regime == MarketRegime.RISK_OFF

    def test_no_data_before_tracking_is_ignored(self, tracker, store):
        assert tracker.observe(MarketRegime.NO_DATA) is None
        assert tracker.last_known_regime is None
        assert not store.contains(REGIME_KEY)

    def test_change_timestamp_recorded(self, tracker, clock):
        tracker.observe(MarketRegime.MIXED)
        first = tracker.last_change_timestamp

        clock.advance(days=1)
        tracker.observe(MarketRegime.MIXED)
        assert tracker.last_change_timestamp == first

        tracker.observe(MarketRegime.RISK_ON)
        assert tracker.last_change_timestamp == clock.now

    def test_payload_texts(self, tracker):
        tracker.observe(MarketRegime.MIXED)
        payload = tracker.observe(MarketRegime.RISK_ON)

        assert payload.title == "Market Regime: RISK-ON"
        assert payload.body == MarketRegime.RISK_ON.notification_body
        assert payload.to_dict()["from_regime"] == "MIXED"


class TestNotifications:
    """Tests for the notifications switch."""

    def test_enabled_on_first_init(self, store):
        tracker = RegimeChangeTracker(store)

        assert tracker.notifications_enabled is True
        assert store.get(NOTIFICATIONS_ENABLED_KEY) is True

    def test_disabled_setting_survives_new_tracker(self, store):
        """Only the first initialization writes the default."""
        RegimeChangeTracker(store).notifications_enabled = False

        assert RegimeChangeTracker(store).notifications_enabled is False

    def test_disabled_suppresses_payload_but_tracks(self, tracker, alert_handler):
        tracker.observe(MarketRegime.RISK_ON)
        tracker.notifications_enabled = False

        assert tracker.observe(MarketRegime.RISK_OFF) is None
        assert tracker.last_known_regime == MarketRegime.RISK_OFF
        assert alert_handler.get_alerts() == []

        tracker.notifications_enabled = True
        assert tracker.observe(MarketRegime.RISK_OFF) is None
        assert tracker.observe(MarketRegime.MIXED) is not None


class TestAlerts:
    """Tests for alerts emitted through the AlertManager."""

    def test_risk_off_is_warning(self, tracker, alert_handler):
        tracker.observe(MarketRegime.RISK_ON)
        tracker.observe(MarketRegime.RISK_OFF)

        alerts = alert_handler.get_alerts(category="REGIME")
        assert len(alerts) == 1
        assert alerts[0].level == "WARNING"
        assert alerts[0].title == "Market Regime: RISK-OFF"
        assert alerts[0].data["previous_regime"] == "RISK-ON"
        assert alerts[0].data["new_regime"] == "RISK-OFF"

    def test_improvement_is_info(self, tracker, alert_handler):
        tracker.observe(MarketRegime.RISK_OFF)
        tracker.observe(MarketRegime.RISK_ON)

        alerts = alert_handler.get_alerts()
        assert len(alerts) == 1
        assert alerts[0].level == "INFO"

    def test_first_observation_does_not_alert(self, tracker, alert_handler):
        tracker.observe(MarketRegime.RISK_OFF)
        assert alert_handler.get_alerts() == []

    def test_works_without_alert_manager(self, store):
        tracker = RegimeChangeTracker(store)
        tracker.observe(MarketRegime.RISK_ON)
        assert tracker.observe(MarketRegime.MIXED) is not None


class TestPersistence:
    """Tests for state surviving a restart."""

    @pytest.fixture(params=["json", "sqlite"])
    def store_factory(self, request, tmp_path):
        if request.param == "json":
            return lambda: JSONKeyValueStore(tmp_path / "state.json")
        return lambda: SQLiteKeyValueStore(tmp_path / "state.db")

    def test_regime_survives_restart(self, store_factory):
        RegimeChangeTracker(store_factory()).observe(MarketRegime.RISK_ON)

        restarted = RegimeChangeTracker(store_factory())
        assert restarted.last_known_regime == MarketRegime.RISK_ON
        assert restarted.observe(MarketRegime.RISK_ON) is None

        payload = restarted.observe(MarketRegime.RISK_OFF)
        assert payload.from_regime == MarketRegime.RISK_ON

    def test_unknown_persisted_regime_treated_as_untracked(self):
        store = InMemoryKeyValueStore({REGIME_KEY: "SIDEWAYS"})
        tracker = RegimeChangeTracker(store)

        assert tracker.last_known_regime is None
        assert tracker.observe(MarketRegime.RISK_ON) is None
        assert tracker.last_known_regime == MarketRegime.RISK_ON

    def test_regime_and_timestamp_written_together(self, clock):
        """A crash can never leave a new regime with the previous change time."""
        store = RecordingStore()
        tracker = RegimeChangeTracker(store, clock=clock)
        store.writes.clear()

        tracker.observe(MarketRegime.RISK_ON)
        clock.advance(hours=1)
        tracker.observe(MarketRegime.MIXED)

        assert store.writes == [{REGIME_KEY, LAST_CHANGE_KEY}, {REGIME_KEY, LAST_CHANGE_KEY}]
        assert store.get(LAST_CHANGE_KEY) == clock.now.isoformat()


class TestConcurrency:
    """Tests for concurrent observe() calls."""

    def test_single_alert_for_concurrent_change(self, tracker):
        tracker.observe(MarketRegime.RISK_ON)

        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(tracker.observe(MarketRegime.RISK_OFF))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len([r for r in results if r is not None]) == 1
        assert tracker.last_known_regime == MarketRegime.RISK_OFF
