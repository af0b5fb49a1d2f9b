"""Distance tracking from a start point through up to three pivots.

Each command takes the current :class:`TrackSession` and returns a new one.
Completed anchor legs are summed once when a pivot changes, so a tip update
only measures the live leg.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Tuple

from engine_config import DEFAULT_CONFIG
from errors import NoPivotToUndo, PivotLimitReached, SessionNotActive
from geodesy import distance, path_length
from models import GeoSample, TrackMetrics, TrackSession
from position_filter import require_admission

MAX_ANCHORS = 4


def start(first_sample: GeoSample) -> TrackSession:
    """Open a track anchored at ``first_sample``."""
    return TrackSession(anchors=(first_sample,), live_tip=first_sample, active=True)


def _require_active(session: Optional[TrackSession]) -> TrackSession:
    if session is None or not session.active:
        raise SessionNotActive("No distance track is running")
    return session


def add_pivot(
    session: Optional[TrackSession],
    sample: GeoSample,
    threshold_m: float = DEFAULT_CONFIG.movement_threshold_m,
    max_pivots: int = DEFAULT_CONFIG.max_pivots,
) -> TrackSession:
    """Fix ``sample`` as a new anchor and restart the live leg from it.

    Raises
    ------
    SessionNotActive
        If the track was never started or has been finished.
    PivotLimitReached
        If the track already carries ``max_pivots`` pivots.
    SampleRejected
        If ``sample`` is closer than ``threshold_m`` to the last anchor.
    """
    session = _require_active(session)
    limit = min(max_pivots, MAX_ANCHORS - 1)
    if session.pivot_count >= limit:
        raise PivotLimitReached(f"Track already has {session.pivot_count} pivots")
    require_admission(session, sample, threshold_m)
    leg = distance(session.last_anchor, sample)
    return replace(
        session,
        anchors=session.anchors + (sample,),
        live_tip=sample,
        anchored_distance=session.anchored_distance + leg,
    )


def undo_pivot(session: Optional[TrackSession]) -> TrackSession:
    """Drop the most recent pivot; the live tip is kept."""
    session = _require_active(session)
    if session.pivot_count == 0:
        raise NoPivotToUndo("Track has no pivots to remove")
    anchors = session.anchors[:-1]
    return replace(session, anchors=anchors, anchored_distance=path_length(anchors))


def update_tip(session: TrackSession, sample: GeoSample) -> TrackSession:
    """Move the live tip to ``sample``. Finished tracks are returned unchanged."""
    if not session.active:
        return session
    return replace(session, live_tip=sample)


def finish(session: Optional[TrackSession]) -> TrackSession:
    """Freeze the track so it can be exported."""
    session = _require_active(session)
    return replace(session, active=False)


def leg_distance(session: TrackSession) -> float:
    if session.live_tip is None:
        return 0.0
    return distance(session.last_anchor, session.live_tip)


def total_distance(session: TrackSession) -> float:
    return session.anchored_distance + leg_distance(session)


def elevation_delta(session: TrackSession) -> Optional[float]:
    """Altitude change from the start to the live tip, or ``None`` without data."""
    tip = session.live_tip
    if tip is None or tip.altitude is None or session.start.altitude is None:
        return None
    return tip.altitude - session.start.altitude


def metrics(session: TrackSession) -> TrackMetrics:
    leg = leg_distance(session)
    return TrackMetrics(
        total_distance=session.anchored_distance + leg,
        leg_distance=leg,
        elevation_delta=elevation_delta(session),
        pivot_count=session.pivot_count,
        active=session.active,
    )


def export_points(session: TrackSession) -> Tuple[GeoSample, ...]:
    """Start, pivots and end point in walking order.

    The end is the live tip unless it coincides with the last anchor.
    """
    points = session.anchors
    tip = session.live_tip
    if tip is not None and tip != session.last_anchor:
        points = points + (tip,)
    return points
