"""Movement-threshold admission of permanently recorded points.

GPS jitter while standing still would otherwise fill tracks and boundaries
with zero-length segments. Only points that are kept (pivots and boundary
vertices) are filtered; the live tip of a track always follows the latest fix.
"""

from __future__ import annotations

from typing import Optional, Union

from errors import SampleRejected
from geodesy import HasPosition, distance
from models import GeoSample, MappingSession, TrackSession

Session = Union[TrackSession, MappingSession]


def last_admitted_point(session: Optional[Session]) -> Optional[HasPosition]:
    """Return the most recent permanently recorded point of ``session``."""
    if session is None:
        return None
    if isinstance(session, TrackSession):
        return session.last_anchor
    return session.last_vertex


def admit(session: Optional[Session], candidate: GeoSample, threshold_m: float) -> bool:
    """Return whether ``candidate`` is far enough from the last admitted point."""
    last = last_admitted_point(session)
    if last is None:
        return True
    return distance(last, candidate) >= threshold_m


def require_admission(
    session: Optional[Session], candidate: GeoSample, threshold_m: float
) -> None:
    """Raise :class:`SampleRejected` when :func:`admit` would refuse ``candidate``."""
    last = last_admitted_point(session)
    if last is None:
        return
    gap = distance(last, candidate)
    if gap < threshold_m:
        raise SampleRejected(gap, threshold_m)


__all__ = ["admit", "last_admitted_point", "require_admission"]
