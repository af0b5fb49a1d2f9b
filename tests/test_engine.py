"""Tests for the measurement engine command surface."""

import pytest

from engine import MeasurementEngine, SignalStatus
from engine_config import EngineConfig
from errors import (
    InsufficientVertices,
    SessionNotActive,
    SourceFailure,
    SourceUnavailable,
)
from history import SessionKind
from models import GeoSample, MappingState
from units import AccuracyTier, UnitSystem

SQUARE_WALK = [
    (0.0, 0.0),
    (0.0, 0.00005),
    (0.0, 0.0001),
    (0.00005, 0.0001),
    (0.0001, 0.0001),
    (0.0001, 0.00005),
    (0.0001, 0.0),
    (0.00005, 0.0),
    (0.000005, 0.0),
]


@pytest.fixture()
def engine():
    return MeasurementEngine(units=UnitSystem.METRES)


def test_engine_starts_searching(engine):
    snapshot = engine.snapshot()
    assert snapshot.signal_status is SignalStatus.SEARCHING
    assert snapshot.track is None
    assert snapshot.mapping.state is MappingState.IDLE
    assert snapshot.accuracy_tier is None
    assert not snapshot.close_loop_available


def test_start_track_needs_a_fix(engine):
    with pytest.raises(SourceUnavailable):
        engine.start_track()


def test_track_follows_samples(engine):
    engine.handle_sample(GeoSample(0.0, 0.0, horizontal_accuracy=2.0))
    engine.start_track()
    engine.handle_sample(GeoSample(0.0, 0.0001, horizontal_accuracy=4.0))
    engine.add_pivot()
    engine.handle_sample(GeoSample(0.0001, 0.0001, horizontal_accuracy=4.0))

    metrics = engine.track_metrics()
    assert metrics.total_distance == pytest.approx(22.2, abs=0.5)
    assert metrics.pivot_count == 1
    assert engine.signal_status is SignalStatus.ACQUIRED
    assert engine.accuracy_tier() is AccuracyTier.FAIR
    assert len(engine.track_points()) == 3


def test_finish_track_files_history(engine):
    engine.start_track(GeoSample(0.0, 0.0))
    engine.handle_sample(GeoSample(0.0, 0.0001))
    record = engine.finish_track()
    assert record.kind is SessionKind.TRACK
    assert record.primary_value == "11.1m"
    assert engine.history.records() == [record]
    assert not engine.track.active

    engine.handle_sample(GeoSample(0.0, 0.001))
    assert engine.track_metrics().total_distance == pytest.approx(11.12, abs=0.05)


def test_source_failure_freezes_without_raising(engine):
    engine.start_track(GeoSample(0.0, 0.0))
    engine.handle_sample(GeoSample(0.0, 0.0001))
    before = engine.track_metrics()

    engine.handle_source_failure(SourceUnavailable(SourceFailure.SIGNAL_LOST))
    assert engine.signal_status is SignalStatus.LOST
    assert engine.track_metrics() == before

    engine.handle_source_failure(SourceUnavailable(SourceFailure.PERMISSION_DENIED))
    assert engine.signal_status is SignalStatus.DENIED

    engine.handle_sample(GeoSample(0.0, 0.0002))
    assert engine.signal_status is SignalStatus.ACQUIRED
    assert engine.track_metrics().total_distance > before.total_distance


def test_mapping_walk_closes_and_saves(engine):
    lat, lng = SQUARE_WALK[0]
    engine.start_mapping(GeoSample(lat, lng))
    for lat, lng in SQUARE_WALK[1:]:
        engine.handle_sample(GeoSample(lat, lng))
    assert engine.mapping.state is MappingState.CLOSED

    metrics = engine.green_metrics()
    assert metrics.area == pytest.approx(123.6, rel=0.05)
    assert len(engine.green_ring()) == len(SQUARE_WALK) + 1

    record = engine.save_green()
    assert record.kind is SessionKind.GREEN
    assert record.secondary_value == "Bunker: 0%"
    assert engine.mapping.state is MappingState.IDLE


def test_close_loop_hint_follows_position(engine):
    engine.start_mapping(GeoSample(0.0, 0.0))
    for lat, lng in SQUARE_WALK[1:6]:
        engine.handle_sample(GeoSample(lat, lng))
    assert not engine.close_loop_available()
    engine.handle_sample(GeoSample(0.00003, 0.0))
    assert engine.close_loop_available()


def test_bunker_toggle_and_force_close(engine):
    engine.start_mapping(GeoSample(0.0, 0.0))
    engine.handle_sample(GeoSample(0.0, 0.0001))
    with pytest.raises(InsufficientVertices):
        engine.force_close_mapping()
    engine.set_bunker_active(True)
    engine.handle_sample(GeoSample(0.0001, 0.0001))
    engine.set_bunker_active(False)
    engine.handle_sample(GeoSample(0.0001, 0.0))
    engine.force_close_mapping()
    assert engine.green_metrics().bunker_percentage == 25


def test_save_green_requires_session(engine):
    with pytest.raises(SessionNotActive):
        engine.save_green()
    engine.start_mapping(GeoSample(0.0, 0.0))
    engine.reset_mapping()
    assert engine.mapping.state is MappingState.IDLE


def test_history_limit_comes_from_config():
    engine = MeasurementEngine(EngineConfig(history_limit=2))
    for _ in range(3):
        engine.start_track(GeoSample(0.0, 0.0))
        engine.finish_track()
    assert len(engine.history) == 2


def test_finished_sessions_log_metrics(engine, isolated_logger):
    engine.start_track(GeoSample(0.0, 0.0))
    engine.add_pivot(GeoSample(0.0, 0.0001))
    engine.finish_track()
    engine.start_mapping(GeoSample(0.0, 0.0))
    for lat, lng in [(0.0, 0.0001), (0.0001, 0.0001)]:
        engine.handle_sample(GeoSample(lat, lng))
    engine.save_green()
    for handler in isolated_logger.logger.handlers:
        handler.flush()

    content = (isolated_logger.log_dir / "greenwalk.log").read_text(encoding="utf-8")
    assert '"category": "TRACK"' in content
    assert "METRICS: [MeasurementEngine] track" in content
    assert "METRICS: [MeasurementEngine] green" in content
    assert '"field_bunker_percentage": 0' in content
