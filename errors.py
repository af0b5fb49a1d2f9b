"""Error types raised by the GreenWalk measurement engine.

Every error here is locally recoverable: commands raise them synchronously and
leave the session they were applied to untouched.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class GreenWalkError(RuntimeError):
    """Base class for engine command failures."""


class SampleRejected(GreenWalkError):
    """Raised when a candidate point sits inside the movement threshold.

    This is a filtering outcome rather than a fault; callers that stream
    samples usually ignore it.
    """

    def __init__(self, distance_m: float, threshold_m: float) -> None:
        super().__init__(
            f"Sample {distance_m:.2f} m from the last admitted point "
            f"(threshold {threshold_m:.2f} m)"
        )
        self.distance_m = distance_m
        self.threshold_m = threshold_m


class PivotLimitReached(GreenWalkError):
    """Raised when a pivot is added to a track that already has the maximum."""


class NoPivotToUndo(GreenWalkError):
    """Raised when undo is requested on a track holding only its start anchor."""


class InsufficientVertices(GreenWalkError):
    """Raised when closing or measuring a boundary with fewer than three vertices."""

    def __init__(self, vertex_count: int, required: int = 3) -> None:
        super().__init__(
            f"At least {required} vertices are required, boundary has {vertex_count}"
        )
        self.vertex_count = vertex_count
        self.required = required


class SessionNotActive(GreenWalkError):
    """Raised when a mutating command targets a session that is not running."""


class SourceFailure(Enum):
    """Failure reasons reported by a location source."""

    PERMISSION_DENIED = "PermissionDenied"
    SIGNAL_LOST = "SignalLost"
    TIMEOUT = "Timeout"


class SourceUnavailable(GreenWalkError):
    """Raised by a location source when no usable fix can be delivered."""

    def __init__(self, reason: SourceFailure, detail: Optional[str] = None) -> None:
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)
        self.reason = reason
        self.detail = detail


class ConfigurationError(ValueError):
    """Raised when engine settings fail validation."""

    def __init__(self, issues) -> None:
        self.issues = list(issues)
        summary = "; ".join(f"{issue.field}: {issue.title}" for issue in self.issues)
        super().__init__(f"Invalid engine configuration ({summary})")


__all__ = [
    "ConfigurationError",
    "GreenWalkError",
    "InsufficientVertices",
    "NoPivotToUndo",
    "PivotLimitReached",
    "SampleRejected",
    "SessionNotActive",
    "SourceFailure",
    "SourceUnavailable",
]
