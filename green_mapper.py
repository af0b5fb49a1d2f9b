"""Recording the boundary of a green as it is walked.

The mapping session moves through three states:

* **Idle** - no vertices; only :func:`start` has an effect.
* **Active** - admitted samples are appended as vertices tagged with the
  current bunker mode, and the loop closes itself once the walker returns
  to the first vertex.
* **Closed** - the boundary is frozen until :func:`reset`.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Tuple

from engine_config import DEFAULT_CONFIG, EngineConfig
from errors import InsufficientVertices, SessionNotActive
from geodesy import distance
from green_metrics import perimeter
from models import GeoSample, MappingSession, MappingState, Vertex, VertexTag
from position_filter import admit


def start(first_sample: GeoSample) -> MappingSession:
    """Begin a boundary at ``first_sample``; the first vertex is always green."""
    return MappingSession(vertices=(Vertex(first_sample, VertexTag.GREEN),))


def _require_started(session: MappingSession) -> None:
    if session.state is MappingState.IDLE:
        raise SessionNotActive("No green mapping session is running")


def set_bunker_active(session: MappingSession, active: bool) -> MappingSession:
    """Choose the tag for vertices admitted from now on; earlier ones keep theirs."""
    _require_started(session)
    if session.closed or session.bunker_mode_active == active:
        return session
    return replace(session, bunker_mode_active=active)


def should_auto_close(session: MappingSession, config: EngineConfig = DEFAULT_CONFIG) -> bool:
    """Whether the open boundary has come back round to its first vertex.

    The vertex count and minimum perimeter guard against closing on GPS noise
    right after the walk starts.
    """
    vertices = session.vertices
    if session.closed or len(vertices) <= config.min_closure_vertices:
        return False
    if perimeter(vertices, closed=False) <= config.min_closure_perimeter_m:
        return False
    return distance(vertices[-1], vertices[0]) < config.closure_radius_m


def accept_sample(
    session: MappingSession, sample: GeoSample, config: EngineConfig = DEFAULT_CONFIG
) -> MappingSession:
    """Append ``sample`` as a vertex if it passes the movement filter.

    Returns ``session`` unchanged when the boundary is closed or the sample is
    filtered out.
    """
    _require_started(session)
    if session.closed:
        return session
    if not admit(session, sample, config.movement_threshold_m):
        return session
    tag = VertexTag.BUNKER if session.bunker_mode_active else VertexTag.GREEN
    updated = replace(session, vertices=session.vertices + (Vertex(sample, tag),))
    if should_auto_close(updated, config):
        updated = replace(updated, closed=True, bunker_mode_active=False)
    return updated


def force_close(session: MappingSession) -> MappingSession:
    """Close the loop manually.

    Raises
    ------
    SessionNotActive
        If no boundary has been started.
    InsufficientVertices
        If fewer than three vertices have been recorded.
    """
    _require_started(session)
    if session.closed:
        return session
    if len(session.vertices) < 3:
        raise InsufficientVertices(len(session.vertices))
    return replace(session, closed=True, bunker_mode_active=False)


def reset(session: MappingSession) -> MappingSession:
    """Discard every vertex and return to idle."""
    return MappingSession.idle()


def close_loop_available(
    session: MappingSession, position: GeoSample, hint_radius_m: float
) -> bool:
    """Whether the close-loop control should be offered at ``position``."""
    if session.state is not MappingState.ACTIVE or len(session.vertices) < 3:
        return False
    return distance(position, session.vertices[0]) <= hint_radius_m


def export_ring(session: MappingSession) -> Tuple[GeoSample, ...]:
    """Boundary samples in walking order with the first repeated at the end."""
    samples = tuple(vertex.sample for vertex in session.vertices)
    if not samples:
        return samples
    return samples + (samples[0],)
