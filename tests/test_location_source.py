"""Tests for simulated location sources and the throttled engine feed."""

import json

import pytest

pytest.importorskip("PySide6")

from engine import MeasurementEngine, SignalStatus
from errors import SourceFailure, SourceUnavailable
from location_source import EngineFeed, SimulatedLocationSource
from models import GeoSample


def test_simulated_source_manual_step():
    samples = [
        GeoSample(35.0, -83.0, altitude=400.0, horizontal_accuracy=3.0),
        GeoSample(35.0005, -83.0005, altitude=401.0, horizontal_accuracy=3.5),
    ]
    source = SimulatedLocationSource(samples, interval_ms=None)
    captured = []
    source.sample_received.connect(captured.append)
    source.start()

    for _ in samples:
        source.manual_step()

    assert captured == samples
    assert not source.is_active


def test_feed_failure_entries_are_emitted():
    source = SimulatedLocationSource.from_feed(
        [
            {"latitude": 44.0, "longitude": -85.0},
            {"error": "SignalLost", "detail": "tree cover"},
        ],
        interval_ms=None,
    )
    failures = []
    source.source_failed.connect(failures.append)
    source.start()
    source.manual_step()
    source.manual_step()

    assert len(failures) == 1
    assert failures[0].reason is SourceFailure.SIGNAL_LOST
    assert failures[0].detail == "tree cover"


def test_feed_from_json_file_spaces_timestamps(tmp_path):
    feed_file = tmp_path / "feed.json"
    feed_file.write_text(json.dumps({"samples": [
        {"lat": 0.0, "lng": 0.0},
        {"coordinate": {"lat": 0.0, "lng": 0.0001, "alt": 3.0}},
    ]}))
    entries = SimulatedLocationSource._normalize_feed(feed_file, spacing_ms=1000)

    assert [entry.longitude for entry in entries] == [0.0, 0.0001]
    assert entries[1].altitude == 3.0
    assert entries[1].timestamp - entries[0].timestamp == pytest.approx(1.0)


def test_unsupported_entries_raise_type_error():
    with pytest.raises(TypeError):
        SimulatedLocationSource._normalize_feed([42])
    with pytest.raises(TypeError):
        SimulatedLocationSource._normalize_feed([{"error": "Eclipse"}])


def test_engine_feed_throttles_fast_fixes():
    engine = MeasurementEngine()
    entries = [
        GeoSample(0.0, 0.0, timestamp=100.0),
        GeoSample(0.0, 0.00001, timestamp=100.2),
        GeoSample(0.0, 0.00002, timestamp=100.6),
        SourceUnavailable(SourceFailure.TIMEOUT),
    ]
    source = SimulatedLocationSource(entries, interval_ms=None)
    feed = EngineFeed(source, engine)
    source.start()
    for _ in entries:
        source.manual_step()

    assert feed.forwarded == 2
    assert feed.throttled == 1
    assert engine.position.timestamp == 100.6
    assert engine.signal_status is SignalStatus.LOST


def test_empty_source_stops_on_start():
    source = SimulatedLocationSource.from_feed([], interval_ms=None)
    source.start()

    assert not source.is_active
    source.manual_step()
    assert source.emitted == 0


def test_out_of_order_fix_does_not_rewind_throttle():
    engine = MeasurementEngine()
    entries = [
        GeoSample(0.0, 0.0, timestamp=100.0),
        GeoSample(0.0, 0.00001, timestamp=99.0),
        GeoSample(0.0, 0.00002, timestamp=100.3),
        GeoSample(0.0, 0.00003, timestamp=100.6),
    ]
    source = SimulatedLocationSource(entries, interval_ms=None)
    feed = EngineFeed(source, engine)
    source.start()
    for _ in entries:
        source.manual_step()

    assert feed.throttled == 1
    assert feed.forwarded == 3
    assert engine.position.timestamp == 100.6
