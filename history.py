"""Recently finished tracks and greens, kept in memory for quick review."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from models import GeoSample, GreenMetrics, TrackMetrics
from units import UnitSystem, format_area, format_distance, format_elevation


class SessionKind(Enum):
    """Kind of finished session."""

    TRACK = "Trk"
    GREEN = "Grn"


@dataclass(frozen=True)
class SessionRecord:
    """Summary of a finished session with the points needed to redraw it."""

    kind: SessionKind
    primary_value: str
    secondary_value: Optional[str]
    points: Tuple[GeoSample, ...]
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:9])
    created_at: float = field(default_factory=lambda: datetime.now().timestamp())

    @property
    def created_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.created_at)


def summarize_track(
    metrics: TrackMetrics, points: Sequence[GeoSample], units: UnitSystem
) -> SessionRecord:
    """Build the history entry for a finished distance track."""
    secondary = None
    if metrics.elevation_delta is not None:
        secondary = format_elevation(metrics.elevation_delta, units)
    return SessionRecord(
        kind=SessionKind.TRACK,
        primary_value=format_distance(metrics.total_distance, units),
        secondary_value=secondary,
        points=tuple(points),
    )


def summarize_green(
    metrics: GreenMetrics, points: Sequence[GeoSample], units: UnitSystem
) -> SessionRecord:
    """Build the history entry for a mapped green."""
    return SessionRecord(
        kind=SessionKind.GREEN,
        primary_value=format_area(metrics.area, units),
        secondary_value=f"Bunker: {metrics.bunker_percentage}%",
        points=tuple(points),
    )


class SessionHistory:
    """Most-recent-first list of finished sessions, capped at ``limit`` entries."""

    def __init__(self, limit: int = 8) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._limit = limit
        self._records: List[SessionRecord] = []

    @property
    def limit(self) -> int:
        return self._limit

    def add(self, record: SessionRecord) -> SessionRecord:
        """Insert ``record`` at the front, dropping the oldest beyond the limit."""
        self._records.insert(0, record)
        del self._records[self._limit:]
        return record

    def remove(self, record_id: str) -> bool:
        """Delete the record with ``record_id``; returns whether one was found."""
        for index, record in enumerate(self._records):
            if record.id == record_id:
                del self._records[index]
                return True
        return False

    def get(self, record_id: str) -> Optional[SessionRecord]:
        return next((r for r in self._records if r.id == record_id), None)

    def records(self) -> List[SessionRecord]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SessionRecord]:
        return iter(list(self._records))
