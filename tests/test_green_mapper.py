"""Tests for walking and closing a green boundary."""

import pytest

import green_mapper
from engine_config import EngineConfig
from errors import InsufficientVertices, SessionNotActive
from models import GeoSample, MappingSession, MappingState, VertexTag

# Around an 11 m square, returning to within a metre of the start.
LOOP = [
    (0.0, 0.00005),
    (0.0, 0.0001),
    (0.00005, 0.0001),
    (0.0001, 0.0001),
    (0.0001, 0.00005),
    (0.0001, 0.0),
    (0.00005, 0.0),
    (0.000005, 0.0),
]


def walk(session, points, config=EngineConfig()):
    for lat, lng in points:
        session = green_mapper.accept_sample(session, GeoSample(lat, lng), config)
    return session


def test_start_creates_green_first_vertex():
    session = green_mapper.start(GeoSample(0.0, 0.0))
    assert session.state is MappingState.ACTIVE
    assert session.vertices[0].tag is VertexTag.GREEN


def test_idle_session_refuses_samples():
    with pytest.raises(SessionNotActive):
        green_mapper.accept_sample(MappingSession.idle(), GeoSample(0.0, 0.0))
    with pytest.raises(SessionNotActive):
        green_mapper.set_bunker_active(MappingSession.idle(), True)


def test_returning_to_start_closes_the_loop():
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), LOOP)
    assert session.closed
    assert session.state is MappingState.CLOSED
    assert len(session.vertices) == 9


def test_no_closure_before_enough_vertices():
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), [(0.0, 0.00005), (0.000005, 0.0)])
    assert not session.closed
    assert len(session.vertices) == 3


def test_closure_radius_is_configurable():
    tight = EngineConfig(closure_radius_m=0.4)
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), LOOP, tight)
    assert not session.closed


def test_closed_boundary_ignores_samples_and_toggles():
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), LOOP)
    assert green_mapper.accept_sample(session, GeoSample(0.0002, 0.0002)) is session
    assert green_mapper.set_bunker_active(session, True) is session


def test_bunker_mode_tags_following_vertices_only():
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), LOOP[:2])
    session = green_mapper.set_bunker_active(session, True)
    session = walk(session, LOOP[2:4])
    session = green_mapper.set_bunker_active(session, False)
    session = walk(session, LOOP[4:5])
    tags = [vertex.tag for vertex in session.vertices]
    assert tags == [
        VertexTag.GREEN,
        VertexTag.GREEN,
        VertexTag.GREEN,
        VertexTag.BUNKER,
        VertexTag.BUNKER,
        VertexTag.GREEN,
    ]


def test_force_close_needs_three_vertices():
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), LOOP[:1])
    with pytest.raises(InsufficientVertices):
        green_mapper.force_close(session)
    assert session.state is MappingState.ACTIVE

    session = walk(session, LOOP[1:2])
    closed = green_mapper.force_close(session)
    assert closed.closed
    assert not closed.bunker_mode_active


def test_reset_returns_to_idle():
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), LOOP)
    assert green_mapper.reset(session).state is MappingState.IDLE


def test_close_loop_hint_near_first_vertex():
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), LOOP[:4])
    near = GeoSample(0.00003, 0.0)
    far = GeoSample(0.0001, 0.0)
    assert green_mapper.close_loop_available(session, near, 6.0)
    assert not green_mapper.close_loop_available(session, far, 6.0)
    assert not green_mapper.close_loop_available(green_mapper.force_close(session), near, 6.0)


def test_export_ring_repeats_first_vertex():
    session = green_mapper.force_close(walk(green_mapper.start(GeoSample(0.0, 0.0)), LOOP[:3]))
    ring = green_mapper.export_ring(session)
    assert len(ring) == 5
    assert ring[0] == ring[-1]
    assert green_mapper.export_ring(MappingSession.idle()) == ()


# Six short steps (about 0.67 m each) that come back near the start.
STEP = 0.000006
SMALL_LOOP = [
    (0.0, STEP),
    (0.0, 2 * STEP),
    (STEP, 2 * STEP),
    (STEP, STEP),
    (STEP, 0.0),
    (0.0, 0.000001),
]


def test_short_loop_stays_open_below_minimum_perimeter():
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), SMALL_LOOP)
    assert not session.closed
    assert len(session.vertices) == 7


def test_short_loop_closes_with_lower_minimum_perimeter():
    relaxed = EngineConfig(min_closure_perimeter_m=3.0)
    session = walk(green_mapper.start(GeoSample(0.0, 0.0)), SMALL_LOOP, relaxed)
    assert session.closed
    assert len(session.vertices) == 6
