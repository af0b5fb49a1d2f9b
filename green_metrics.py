"""Perimeter, bunker coverage and area of a walked green boundary.

All functions are pure and recompute from the vertex sequence on every call.
A vertex tagged as bunker marks the edge that leads *to* it as bunker edge.
"""

from __future__ import annotations

from typing import Iterator, Sequence, Tuple

from errors import InsufficientVertices
from geodesy import distance, project_to_plane
from models import GreenMetrics, MappingSession, Vertex


def _edges(vertices: Sequence[Vertex], closed: bool) -> Iterator[Tuple[Vertex, Vertex]]:
    for index in range(1, len(vertices)):
        yield vertices[index - 1], vertices[index]
    if closed and len(vertices) > 1:
        yield vertices[-1], vertices[0]


def perimeter(vertices: Sequence[Vertex], closed: bool = False) -> float:
    """Length of the walked boundary, including the closing edge when ``closed``."""
    return sum(distance(origin, destination) for origin, destination in _edges(vertices, closed))


def bunker_length(vertices: Sequence[Vertex], closed: bool = False) -> float:
    """Length of the edges whose destination vertex is tagged as bunker."""
    return sum(
        distance(origin, destination)
        for origin, destination in _edges(vertices, closed)
        if destination.is_bunker
    )


def _share(part: float, total: float) -> int:
    if total <= 0:
        return 0
    return int(round(part / total * 100))


def bunker_percentage(vertices: Sequence[Vertex], closed: bool = False) -> int:
    """Bunker share of the perimeter as a whole percentage (0 for an empty boundary)."""
    return _share(bunker_length(vertices, closed), perimeter(vertices, closed))


def area(vertices: Sequence[Vertex], floor_m2: float = 0.0, strict: bool = False) -> float:
    """Enclosed area in square meters.

    Vertices are projected onto a tangent plane anchored at the first vertex's
    latitude and measured with the shoelace formula; the ring is always treated
    as closed. Results below ``floor_m2`` are reported as 0.

    Raises
    ------
    InsufficientVertices
        If ``strict`` is set and fewer than three vertices are given.
    """
    if len(vertices) < 3:
        if strict:
            raise InsufficientVertices(len(vertices))
        return 0.0
    projected = project_to_plane(vertices, vertices[0].latitude)
    # relative to the first vertex
    x0, y0 = projected[0]
    coordinates = [(x - x0, y - y0) for x, y in projected]
    count = len(coordinates)
    twice_area = 0.0
    for index, (x1, y1) in enumerate(coordinates):
        x2, y2 = coordinates[(index + 1) % count]
        twice_area += x1 * y2 - x2 * y1
    result = abs(twice_area) / 2
    if result < floor_m2:
        return 0.0
    return result


def compute(session: MappingSession, area_floor_m2: float = 0.0) -> GreenMetrics:
    """Derive every boundary metric for ``session`` in one pass over its state."""
    vertices = session.vertices
    closed = session.closed
    total = perimeter(vertices, closed)
    bunker = bunker_length(vertices, closed)
    return GreenMetrics(
        perimeter=total,
        bunker_length=bunker,
        bunker_percentage=_share(bunker, total),
        area=area(vertices, floor_m2=area_floor_m2),
        vertex_count=len(vertices),
        closed=closed,
    )
