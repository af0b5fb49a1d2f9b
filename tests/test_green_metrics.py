"""Tests for perimeter, bunker coverage and area of a boundary."""

import pytest

import green_metrics
from errors import InsufficientVertices
from models import GeoSample, MappingSession, Vertex, VertexTag

CORNERS = [(0.0, 0.0), (0.0, 0.0001), (0.0001, 0.0001), (0.0001, 0.0)]


def square(tags=None):
    tags = tags or [VertexTag.GREEN] * len(CORNERS)
    return tuple(Vertex(GeoSample(lat, lng), tag) for (lat, lng), tag in zip(CORNERS, tags))


def test_closed_green_square():
    session = MappingSession(vertices=square(), closed=True)
    metrics = green_metrics.compute(session)
    assert metrics.perimeter == pytest.approx(44.4, abs=0.2)
    assert metrics.area == pytest.approx(123.6, abs=1.0)
    assert metrics.bunker_percentage == 0
    assert metrics.vertex_count == 4
    assert metrics.closed


def test_one_bunker_edge_is_a_quarter():
    tags = [VertexTag.GREEN, VertexTag.GREEN, VertexTag.BUNKER, VertexTag.GREEN]
    session = MappingSession(vertices=square(tags), closed=True)
    metrics = green_metrics.compute(session)
    assert metrics.bunker_length == pytest.approx(11.1, abs=0.1)
    assert metrics.bunker_percentage == 25


def test_all_bunker_closed_polygon_is_full_coverage():
    vertices = square([VertexTag.BUNKER] * 4)
    assert green_metrics.bunker_percentage(vertices, closed=True) == 100


def test_open_boundary_skips_closing_edge():
    vertices = square()
    assert green_metrics.perimeter(vertices) == pytest.approx(33.36, abs=0.1)
    assert green_metrics.perimeter(vertices, closed=True) == pytest.approx(44.48, abs=0.1)


def test_bunker_share_of_empty_boundary_is_zero():
    assert green_metrics.bunker_percentage(()) == 0
    assert green_metrics.bunker_percentage(square()[:1]) == 0


def test_area_needs_three_vertices():
    assert green_metrics.area(square()[:2]) == 0.0
    with pytest.raises(InsufficientVertices) as excinfo:
        green_metrics.area(square()[:2], strict=True)
    assert excinfo.value.vertex_count == 2


def test_area_ignores_winding_direction():
    vertices = square()
    assert green_metrics.area(vertices) == pytest.approx(green_metrics.area(vertices[::-1]))


def test_area_below_floor_snaps_to_zero():
    tiny = tuple(
        Vertex(GeoSample(lat * 0.05, lng * 0.05)) for lat, lng in CORNERS
    )
    assert 0 < green_metrics.area(tiny) < 1.0
    assert green_metrics.area(tiny, floor_m2=1.0) == 0.0


def test_area_far_from_meridian_matches_equator():
    shifted = tuple(Vertex(GeoSample(lat, lng + 170.0)) for lat, lng in CORNERS)
    assert green_metrics.area(shifted) == pytest.approx(green_metrics.area(square()), rel=1e-6)
