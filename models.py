"""Value types shared by the GreenWalk measurement engine.

Samples, vertices and sessions are frozen dataclasses. Commands in
``track_session`` and ``green_mapper`` return new session values instead of
mutating the ones they were given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class GeoSample:
    """A single position fix delivered by a location source."""

    latitude: float
    longitude: float
    altitude: Optional[float] = None
    horizontal_accuracy: float = 0.0
    vertical_accuracy: Optional[float] = None
    timestamp: float = field(default_factory=lambda: datetime.now().timestamp())

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")
        if self.horizontal_accuracy < 0:
            raise ValueError("Horizontal accuracy cannot be negative")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GeoSample":
        """Build a sample from a dictionary, accepting the short ``lat``/``lng`` keys too."""

        latitude = payload.get("latitude", payload.get("lat"))
        longitude = payload.get("longitude", payload.get("lng", payload.get("lon")))
        if latitude is None or longitude is None:
            raise ValueError("Sample payload requires latitude and longitude")
        accuracy = payload.get("horizontal_accuracy", payload.get("accuracy", 0.0))
        kwargs: Dict[str, Any] = {
            "latitude": float(latitude),
            "longitude": float(longitude),
            "altitude": _optional_float(payload.get("altitude", payload.get("alt"))),
            "horizontal_accuracy": float(accuracy or 0.0),
            "vertical_accuracy": _optional_float(
                payload.get("vertical_accuracy", payload.get("altAccuracy"))
            ),
        }
        timestamp = payload.get("timestamp")
        if timestamp is not None:
            kwargs["timestamp"] = float(timestamp)
        return cls(**kwargs)


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


class VertexTag(Enum):
    """Surface walked on the way to a boundary vertex."""

    GREEN = "green"
    BUNKER = "bunker"


@dataclass(frozen=True)
class Vertex:
    """A recorded boundary sample tagged with the surface it closes."""

    sample: GeoSample
    tag: VertexTag = VertexTag.GREEN

    @property
    def latitude(self) -> float:
        return self.sample.latitude

    @property
    def longitude(self) -> float:
        return self.sample.longitude

    @property
    def altitude(self) -> Optional[float]:
        return self.sample.altitude

    @property
    def is_bunker(self) -> bool:
        return self.tag is VertexTag.BUNKER


@dataclass(frozen=True)
class TrackSession:
    """Anchor chain of a distance track.

    ``anchors`` holds the start point followed by up to three pivots.
    ``anchored_distance`` caches the summed length of the anchor legs so a tip
    update only needs to measure the live leg.
    """

    anchors: Tuple[GeoSample, ...]
    live_tip: Optional[GeoSample] = None
    active: bool = True
    anchored_distance: float = 0.0

    def __post_init__(self):
        if not 1 <= len(self.anchors) <= 4:
            raise ValueError(
                f"A track holds between 1 and 4 anchors, got {len(self.anchors)}"
            )

    @property
    def start(self) -> GeoSample:
        return self.anchors[0]

    @property
    def last_anchor(self) -> GeoSample:
        return self.anchors[-1]

    @property
    def pivots(self) -> Tuple[GeoSample, ...]:
        return self.anchors[1:]

    @property
    def pivot_count(self) -> int:
        return len(self.anchors) - 1


class MappingState(Enum):
    """Lifecycle of a green mapping session."""

    IDLE = "idle"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass(frozen=True)
class MappingSession:
    """Ordered boundary vertices of a green being walked."""

    vertices: Tuple[Vertex, ...] = ()
    closed: bool = False
    bunker_mode_active: bool = False

    def __post_init__(self):
        if self.closed and len(self.vertices) < 3:
            raise ValueError("A closed boundary needs at least three vertices")

    @classmethod
    def idle(cls) -> "MappingSession":
        return cls()

    @property
    def state(self) -> MappingState:
        if not self.vertices:
            return MappingState.IDLE
        if self.closed:
            return MappingState.CLOSED
        return MappingState.ACTIVE

    @property
    def first_vertex(self) -> Optional[Vertex]:
        return self.vertices[0] if self.vertices else None

    @property
    def last_vertex(self) -> Optional[Vertex]:
        return self.vertices[-1] if self.vertices else None


@dataclass(frozen=True)
class TrackMetrics:
    """Derived distance figures for a track session."""

    total_distance: float
    leg_distance: float
    elevation_delta: Optional[float]
    pivot_count: int
    active: bool

    @property
    def has_elevation(self) -> bool:
        return self.elevation_delta is not None


@dataclass(frozen=True)
class GreenMetrics:
    """Derived boundary figures for a mapping session."""

    perimeter: float
    bunker_length: float
    bunker_percentage: int
    area: float
    vertex_count: int
    closed: bool
