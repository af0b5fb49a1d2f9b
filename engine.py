"""Command surface of the GreenWalk measurement engine.

:class:`MeasurementEngine` owns the single distance track and the single
green mapping session of one player. A boundary adapter feeds it samples and
source failures; the presentation layer issues commands and reads
:class:`EngineSnapshot` values. Every call completes synchronously and the
engine performs no I/O of its own beyond logging.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional, Tuple

import green_mapper
import green_metrics
import track_session
from engine_config import DEFAULT_CONFIG, EngineConfig
from errors import SessionNotActive, SourceFailure, SourceUnavailable
from history import SessionHistory, SessionRecord, summarize_green, summarize_track
from logger import LogCategory, LoggableMixin
from models import (
    GeoSample,
    GreenMetrics,
    MappingSession,
    MappingState,
    TrackMetrics,
    TrackSession,
)
from units import AccuracyTier, UnitSystem, classify_accuracy


class SignalStatus(Enum):
    """Location signal state shown by the status indicator."""

    SEARCHING = "searching"
    ACQUIRED = "acquired"
    LOST = "lost"
    DENIED = "denied"


_FAILURE_STATUS = {
    SourceFailure.PERMISSION_DENIED: SignalStatus.DENIED,
    SourceFailure.SIGNAL_LOST: SignalStatus.LOST,
    SourceFailure.TIMEOUT: SignalStatus.LOST,
}


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only view of everything the presentation layer renders."""

    track: Optional[TrackSession]
    mapping: MappingSession
    position: Optional[GeoSample]
    signal_status: SignalStatus
    accuracy_tier: Optional[AccuracyTier]
    track_metrics: Optional[TrackMetrics]
    green_metrics: GreenMetrics
    close_loop_available: bool


class MeasurementEngine(LoggableMixin):
    """Route location samples into the track and mapping sessions."""

    def __init__(
        self,
        config: EngineConfig = DEFAULT_CONFIG,
        units: UnitSystem = UnitSystem.YARDS,
        history: Optional[SessionHistory] = None,
    ) -> None:
        self.config = config
        self.units = units
        self.history = history if history is not None else SessionHistory(config.history_limit)
        self._track: Optional[TrackSession] = None
        self._mapping: MappingSession = MappingSession.idle()
        self._position: Optional[GeoSample] = None
        self._signal_status = SignalStatus.SEARCHING

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    @property
    def track(self) -> Optional[TrackSession]:
        return self._track

    @property
    def mapping(self) -> MappingSession:
        return self._mapping

    @property
    def position(self) -> Optional[GeoSample]:
        return self._position

    @property
    def signal_status(self) -> SignalStatus:
        return self._signal_status

    def track_metrics(self) -> Optional[TrackMetrics]:
        if self._track is None:
            return None
        return track_session.metrics(self._track)

    def green_metrics(self) -> GreenMetrics:
        return green_metrics.compute(self._mapping, self.config.area_floor_m2)

    def close_loop_available(self) -> bool:
        if self._position is None:
            return False
        return green_mapper.close_loop_available(
            self._mapping, self._position, self.config.closure_hint_radius_m
        )

    def accuracy_tier(self) -> Optional[AccuracyTier]:
        if self._position is None:
            return None
        return classify_accuracy(
            self._position.horizontal_accuracy,
            good_below=self.config.accuracy_good_m,
            fair_up_to=self.config.accuracy_fair_m,
        )

    def track_points(self) -> Tuple[GeoSample, ...]:
        """Ordered start, pivot and end points for export."""
        if self._track is None:
            return ()
        return track_session.export_points(self._track)

    def green_ring(self) -> Tuple[GeoSample, ...]:
        """Closed boundary ring for export."""
        return green_mapper.export_ring(self._mapping)

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            track=self._track,
            mapping=self._mapping,
            position=self._position,
            signal_status=self._signal_status,
            accuracy_tier=self.accuracy_tier(),
            track_metrics=self.track_metrics(),
            green_metrics=self.green_metrics(),
            close_loop_available=self.close_loop_available(),
        )

    # ------------------------------------------------------------------
    # Inbound location events
    # ------------------------------------------------------------------
    def handle_sample(self, sample: GeoSample) -> None:
        """Apply one location fix to whichever sessions are running."""
        if self._signal_status is not SignalStatus.ACQUIRED:
            self.log_gps_event(
                "signal_acquired",
                sample.latitude,
                sample.longitude,
                sample.horizontal_accuracy,
                previous=self._signal_status.value,
            )
        self._signal_status = SignalStatus.ACQUIRED
        self._position = sample

        if self._track is not None and self._track.active:
            self._track = track_session.update_tip(self._track, sample)

        if self._mapping.state is MappingState.ACTIVE:
            before = len(self._mapping.vertices)
            self._mapping = green_mapper.accept_sample(self._mapping, sample, self.config)
            if len(self._mapping.vertices) == before:
                self.log_trace("Boundary sample filtered", category=LogCategory.MAPPING)
            elif self._mapping.closed:
                self.log_field_event(
                    "Green boundary closed automatically",
                    vertices=len(self._mapping.vertices),
                )

    def handle_source_failure(self, error: SourceUnavailable) -> None:
        """Freeze sessions at their last good sample until fixes resume."""
        status = _FAILURE_STATUS.get(error.reason, SignalStatus.LOST)
        if status is not self._signal_status:
            self.log_warning(
                "Location source unavailable",
                category=LogCategory.GPS,
                reason=error.reason.value,
                detail=error.detail,
            )
        self._signal_status = status

    def _require_position(self, sample: Optional[GeoSample]) -> GeoSample:
        if sample is not None:
            return sample
        if self._position is None:
            raise SourceUnavailable(SourceFailure.SIGNAL_LOST, "no position fix yet")
        return self._position

    # ------------------------------------------------------------------
    # Track commands
    # ------------------------------------------------------------------
    def start_track(self, sample: Optional[GeoSample] = None) -> TrackSession:
        """Start a new track at ``sample`` or the current position, discarding any old one."""
        origin = self._require_position(sample)
        self._track = track_session.start(origin)
        self.log_user_action(
            "track_started", {"latitude": origin.latitude, "longitude": origin.longitude}
        )
        return self._track

    def add_pivot(self, sample: Optional[GeoSample] = None) -> TrackSession:
        pivot = self._require_position(sample)
        self._track = track_session.add_pivot(
            self._track,
            pivot,
            threshold_m=self.config.movement_threshold_m,
            max_pivots=self.config.max_pivots,
        )
        self.log_user_action("pivot_added", {"pivots": self._track.pivot_count})
        self.log_debug("Anchored distance updated", category=LogCategory.TRACK,
                       anchored_distance_m=round(self._track.anchored_distance, 2))
        return self._track

    def undo_pivot(self) -> TrackSession:
        self._track = track_session.undo_pivot(self._track)
        self.log_user_action("pivot_undone", {"pivots": self._track.pivot_count})
        self.log_debug("Anchored distance updated", category=LogCategory.TRACK,
                       anchored_distance_m=round(self._track.anchored_distance, 2))
        return self._track

    def finish_track(self) -> SessionRecord:
        """Freeze the running track and file it in the history."""
        self._track = track_session.finish(self._track)
        metrics = track_session.metrics(self._track)
        self.log_metrics("track", asdict(metrics))
        record = self.history.add(
            summarize_track(metrics, track_session.export_points(self._track), self.units)
        )
        self.log_field_event(
            "Track finished",
            total_distance_m=round(metrics.total_distance, 2),
            elevation_delta_m=metrics.elevation_delta,
            pivots=metrics.pivot_count,
        )
        return record

    # ------------------------------------------------------------------
    # Mapping commands
    # ------------------------------------------------------------------
    def start_mapping(self, sample: Optional[GeoSample] = None) -> MappingSession:
        """Start a new green boundary, discarding any previous one."""
        origin = self._require_position(sample)
        self._mapping = green_mapper.start(origin)
        self.log_user_action(
            "mapping_started", {"latitude": origin.latitude, "longitude": origin.longitude}
        )
        return self._mapping

    def set_bunker_active(self, active: bool) -> MappingSession:
        self._mapping = green_mapper.set_bunker_active(self._mapping, active)
        self.log_debug("Bunker mode changed", category=LogCategory.MAPPING, active=active)
        return self._mapping

    def force_close_mapping(self) -> MappingSession:
        self._mapping = green_mapper.force_close(self._mapping)
        self.log_user_action("mapping_closed", {"vertices": len(self._mapping.vertices)})
        return self._mapping

    def reset_mapping(self) -> MappingSession:
        self._mapping = green_mapper.reset(self._mapping)
        self.log_user_action("mapping_reset")
        return self._mapping

    def save_green(self) -> SessionRecord:
        """Close the boundary if needed, file it in the history and return to idle.

        Raises
        ------
        SessionNotActive
            If no boundary has been started.
        InsufficientVertices
            If the boundary is still open with fewer than three vertices.
        """
        if self._mapping.state is MappingState.IDLE:
            raise SessionNotActive("No green mapping session to save")
        if not self._mapping.closed:
            self._mapping = green_mapper.force_close(self._mapping)
        metrics = self.green_metrics()
        self.log_metrics("green", asdict(metrics))
        record = self.history.add(
            summarize_green(metrics, green_mapper.export_ring(self._mapping), self.units)
        )
        self.log_field_event(
            "Green saved",
            area_m2=round(metrics.area, 1),
            perimeter_m=round(metrics.perimeter, 2),
            bunker_percentage=metrics.bunker_percentage,
        )
        self._mapping = MappingSession.idle()
        return record
