"""
Location sources for GreenWalk.
Qt signal based providers that deliver position fixes and failures, plus the
feed that throttles them into a :class:`engine.MeasurementEngine`.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from PySide6.QtCore import QObject, QTimer, Signal

from errors import SourceFailure, SourceUnavailable
from logger import LogCategory, LoggableMixin, LogLevel
from models import GeoSample

FeedEntry = Union[GeoSample, SourceUnavailable]


class BaseLocationSource(QObject, LoggableMixin):
    """Base class for location sources with common lifecycle management."""
    sample_received = Signal(object)  # GeoSample
    source_failed = Signal(object)  # SourceUnavailable
    def __init__(self):
        QObject.__init__(self)
        self._active = False
    @property
    def is_active(self) -> bool:
        """Return whether the source is currently emitting updates."""
        return self._active
    def start(self):
        """Start emitting location updates."""
        if not self._active:
            self._active = True
            self._on_start()
    def stop(self):
        """Stop emitting location updates."""
        if self._active:
            self._active = False
            self._on_stop()
    def _on_start(self):
        raise NotImplementedError
    def _on_stop(self):
        raise NotImplementedError


class SimulatedLocationSource(BaseLocationSource):
    """Source that replays recorded fixes and failures, for practice rounds and tests."""
    def __init__(
        self,
        entries: Sequence[FeedEntry],
        interval_ms: Optional[int] = 1000,
        loop: bool = False,
    ):
        super().__init__()
        self._entries = list(entries)
        self._interval_ms = interval_ms
        self._loop = loop
        self._index = 0
        self._timer = None if interval_ms is None else QTimer()
        if self._timer is not None:
            self._timer.setInterval(interval_ms)
            self._timer.timeout.connect(self._emit_next)
    def _on_start(self):
        self._index = 0 if self._index >= len(self._entries) else self._index
        if not self._entries:
            self.log_warning("Simulated location source started without entries",
                             category=LogCategory.GPS)
            self.stop()
            return
        if self._timer is not None:
            self._timer.start()
        self.log_info("Simulated location source started",
                      category=LogCategory.GPS, entries=len(self._entries))
    def _on_stop(self):
        if self._timer is not None:
            self._timer.stop()
        if self._entries:
            self.log_info("Simulated location source stopped",
                          category=LogCategory.GPS, emitted=self._index)
    @property
    def emitted(self) -> int:
        """Number of entries emitted since the last rewind."""
        return self._index
    def manual_step(self):
        """Emit the next entry immediately (useful for tests)."""
        if self.is_active:
            self._emit_next()
    def _emit_next(self):
        if not self._entries:
            return
        if self._index >= len(self._entries):
            if self._loop:
                self._index = 0
            else:
                self.stop()
                return
        entry = self._entries[self._index]
        self._index += 1
        if isinstance(entry, SourceUnavailable):
            self.source_failed.emit(entry)
        else:
            self.sample_received.emit(entry)
        if not self._loop and self._index >= len(self._entries):
            # Stop automatically after the final entry has been emitted.
            self.stop()
    @staticmethod
    def from_feed(
        feed_source: Union[Sequence[FeedEntry], Sequence[Dict[str, Any]], Path, str],
        interval_ms: Optional[int] = 1000,
        loop: bool = False,
    ) -> "SimulatedLocationSource":
        """Create a simulated source from samples, dictionaries or a JSON file."""
        entries = SimulatedLocationSource._normalize_feed(feed_source, interval_ms or 1000)
        return SimulatedLocationSource(entries, interval_ms=interval_ms, loop=loop)
    @staticmethod
    def _normalize_feed(feed_source, spacing_ms: int = 1000) -> List[FeedEntry]:
        """Turn a feed into samples and failures.

        Dictionaries without a ``timestamp`` are stamped ``spacing_ms`` apart
        starting from now, so replayed fixes are not all seen as simultaneous.
        """
        if isinstance(feed_source, (str, Path)):
            data = json.loads(Path(feed_source).read_text(encoding="utf-8"))
            if isinstance(data, dict):
                data = data.get("samples", data.get("points", [data]))
            return SimulatedLocationSource._normalize_feed(data, spacing_ms)
        clock = datetime.now().timestamp()
        entries: List[FeedEntry] = []
        for entry in feed_source:
            if isinstance(entry, (GeoSample, SourceUnavailable)):
                entries.append(entry)
            elif isinstance(entry, dict):
                if "error" in entry:
                    try:
                        reason = SourceFailure(entry["error"])
                    except ValueError as exc:
                        raise TypeError(
                            f"Unknown location failure in simulated feed: {entry['error']!r}"
                        ) from exc
                    entries.append(SourceUnavailable(reason, entry.get("detail")))
                    continue
                payload = entry.get("coordinate", entry)
                if not isinstance(payload, dict):
                    raise TypeError("Unsupported dictionary structure in simulated feed")
                if "timestamp" not in payload:
                    payload = dict(payload, timestamp=clock)
                try:
                    sample = GeoSample.from_payload(payload)
                except ValueError as exc:
                    raise TypeError(f"Invalid sample in simulated feed: {exc}") from exc
                entries.append(sample)
                clock = sample.timestamp + spacing_ms / 1000.0
            else:
                raise TypeError(
                    "Unsupported feed entry type for simulated location source: "
                    f"{type(entry)!r}"
                )
        return entries


class EngineFeed(LoggableMixin):
    """Connect a location source to an engine, dropping fixes that arrive too quickly.

    Fixes closer than ``min_interval_ms`` to the previously forwarded one (by
    sample timestamp) are discarded. Failures are always forwarded.
    """
    def __init__(self, source: BaseLocationSource, engine, min_interval_ms: Optional[int] = None):
        self.source = source
        self.engine = engine
        if min_interval_ms is None:
            min_interval_ms = engine.config.min_update_interval_ms
        self.min_interval_ms = min_interval_ms
        self._last_forwarded: Optional[float] = None
        self.forwarded = 0
        self.throttled = 0
        source.sample_received.connect(self._on_sample)
        source.source_failed.connect(self._on_failure)
    def _on_sample(self, sample: GeoSample):
        if self._last_forwarded is not None:
            elapsed_ms = (sample.timestamp - self._last_forwarded) * 1000.0
            if 0 <= elapsed_ms < self.min_interval_ms:
                self.throttled += 1
                return
        if self._last_forwarded is None or sample.timestamp > self._last_forwarded:
            self._last_forwarded = sample.timestamp
        self.forwarded += 1
        self.log_gps_event("fix", sample.latitude, sample.longitude,
                           sample.horizontal_accuracy, level=LogLevel.TRACE.value)
        self.engine.handle_sample(sample)
    def _on_failure(self, error: SourceUnavailable):
        self.engine.handle_source_failure(error)
    def disconnect(self):
        """Stop forwarding events from the source."""
        self.source.sample_received.disconnect(self._on_sample)
        self.source.source_failed.disconnect(self._on_failure)
