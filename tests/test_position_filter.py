"""Tests for movement-threshold admission."""

import pytest

import green_mapper
import track_session
from errors import SampleRejected
from models import GeoSample, MappingSession
from position_filter import admit, last_admitted_point, require_admission

# 0.2 m north of the equator origin
NEARBY = GeoSample(0.2 / 111_194.93, 0.0)


def test_first_sample_is_always_admitted():
    assert admit(None, GeoSample(0.0, 0.0), 0.5)
    assert admit(MappingSession.idle(), GeoSample(0.0, 0.0), 0.5)


def test_candidate_inside_threshold_is_rejected_for_mapping():
    session = green_mapper.start(GeoSample(0.0, 0.0))
    assert not admit(session, NEARBY, 0.5)
    updated = green_mapper.accept_sample(session, NEARBY)
    assert updated is session
    assert len(updated.vertices) == 1


def test_candidate_beyond_threshold_is_admitted():
    session = green_mapper.start(GeoSample(0.0, 0.0))
    assert admit(session, GeoSample(0.0, 0.00001), 0.5)


def test_track_filters_against_last_anchor_not_tip():
    session = track_session.start(GeoSample(0.0, 0.0))
    session = track_session.update_tip(session, GeoSample(0.0, 0.001))
    assert last_admitted_point(session) is session.start
    with pytest.raises(SampleRejected) as excinfo:
        require_admission(session, NEARBY, 0.5)
    assert excinfo.value.distance_m == pytest.approx(0.2, abs=1e-3)
    assert excinfo.value.threshold_m == 0.5
