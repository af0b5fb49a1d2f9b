"""Great-circle distance and local plane projection for GreenWalk.

``distance`` is the only distance formula used by the engine. Anything with
``latitude`` and ``longitude`` attributes (samples, vertices) can be measured.
"""

from __future__ import annotations

import math
from typing import List, Protocol, Sequence, Tuple

# Mean Earth radius in meters
EARTH_RADIUS_M = 6_371_000.0


class HasPosition(Protocol):
    latitude: float
    longitude: float


def distance(a: HasPosition, b: HasPosition) -> float:
    """Return the haversine distance in meters between two positions."""
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Rounding can push h marginally past 1 for antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, h)))
    return EARTH_RADIUS_M * c


def path_length(points: Sequence[HasPosition], closed: bool = False) -> float:
    """Sum the legs between consecutive points, plus the closing leg when ``closed``."""
    total = 0.0
    for previous, current in zip(points, points[1:]):
        total += distance(previous, current)
    if closed and len(points) > 1:
        total += distance(points[-1], points[0])
    return total


def project_to_plane(
    points: Sequence[HasPosition], anchor_latitude: float
) -> List[Tuple[float, float]]:
    """Project positions onto a tangent plane in meters.

    Longitudes are scaled by the cosine of ``anchor_latitude``. The projection
    is only meaningful for extents of a few hectares.
    """
    scale = math.cos(math.radians(anchor_latitude))
    coordinates = []
    for point in points:
        x = math.radians(point.longitude) * EARTH_RADIUS_M * scale
        y = math.radians(point.latitude) * EARTH_RADIUS_M
        coordinates.append((x, y))
    return coordinates


__all__ = ["EARTH_RADIUS_M", "distance", "path_length", "project_to_plane"]
