"""Tunable thresholds for the GreenWalk engine and their validation rules.

Field deployments of the app disagreed on filter and closure distances, so
every threshold is a named value on :class:`EngineConfig` rather than a
constant buried in the algorithms.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Mapping

from errors import ConfigurationError


@dataclass(frozen=True)
class ValidationIssue:
    """Represents a configuration validation problem."""

    field: str
    title: str
    message: str


@dataclass(frozen=True)
class EngineConfig:
    """Thresholds consumed by the filter, mapper, metrics and feed adapter."""

    movement_threshold_m: float = 0.5
    closure_radius_m: float = 1.0
    min_closure_vertices: int = 5
    min_closure_perimeter_m: float = 5.0
    area_floor_m2: float = 1.0
    closure_hint_radius_m: float = 6.0
    max_pivots: int = 3
    accuracy_good_m: float = 2.5
    accuracy_fair_m: float = 6.0
    min_update_interval_ms: int = 500
    history_limit: int = 8

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> "EngineConfig":
        """Build a config from ``settings``, falling back to defaults for missing keys.

        Raises
        ------
        ConfigurationError
            If any value fails :func:`validate_engine_config`.
        """

        merged = {**asdict(cls()), **{k: v for k, v in settings.items() if v is not None}}
        issues = validate_engine_config(merged)
        if issues:
            raise ConfigurationError(issues)
        values = {}
        for spec in fields(cls):
            raw = merged[spec.name]
            values[spec.name] = int(raw) if spec.type in ("int", int) else float(raw)
        return cls(**values)

    def to_mapping(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce_float(value: Any) -> float | None:
    """Best-effort conversion to ``float`` returning ``None`` on failure."""

    if isinstance(value, bool):
        return None
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def _coerce_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _check_positive(
    issues: List[ValidationIssue], settings: Mapping[str, Any], key: str, label: str
) -> float | None:
    value = _coerce_float(settings.get(key))
    if value is None:
        issues.append(
            ValidationIssue(
                field=key,
                title=f"{label} Invalid",
                message=f"{label} must be a number of meters greater than zero.",
            )
        )
        return None
    if value <= 0:
        issues.append(
            ValidationIssue(
                field=key,
                title=f"{label} Out of Range",
                message=f"{label} must be greater than zero.",
            )
        )
        return None
    return value


def validate_engine_config(settings: Mapping[str, Any]) -> List[ValidationIssue]:
    """Validate an engine settings payload.

    Parameters
    ----------
    settings:
        Mapping of :class:`EngineConfig` field names to raw values, typically
        read back from persisted settings.

    Returns
    -------
    list[ValidationIssue]
        A collection of validation issues. An empty list denotes success.
    """

    issues: List[ValidationIssue] = []

    _check_positive(issues, settings, "movement_threshold_m", "Movement Filter")
    closure = _check_positive(issues, settings, "closure_radius_m", "Closure Radius")
    hint = _check_positive(issues, settings, "closure_hint_radius_m", "Close Loop Hint Radius")
    _check_positive(issues, settings, "min_closure_perimeter_m", "Minimum Closure Perimeter")

    if closure is not None and hint is not None and closure > hint:
        issues.append(
            ValidationIssue(
                field="closure_radius_m",
                title="Closure Radius Exceeds Hint",
                message=(
                    "The automatic closure radius must not be larger than the radius at which "
                    "the close-loop prompt appears."
                ),
            )
        )

    floor = _coerce_float(settings.get("area_floor_m2"))
    if floor is None or floor < 0:
        issues.append(
            ValidationIssue(
                field="area_floor_m2",
                title="Area Floor Invalid",
                message="The area floor must be zero or a positive number of square meters.",
            )
        )

    vertices = _coerce_int(settings.get("min_closure_vertices"))
    if vertices is None or vertices < 3:
        issues.append(
            ValidationIssue(
                field="min_closure_vertices",
                title="Closure Vertex Count Too Low",
                message="Automatic closure needs a vertex count of at least 3.",
            )
        )

    pivots = _coerce_int(settings.get("max_pivots"))
    if pivots is None or not 0 <= pivots <= 3:
        issues.append(
            ValidationIssue(
                field="max_pivots",
                title="Pivot Limit Out of Range",
                message="A track supports between 0 and 3 pivots.",
            )
        )

    good = _coerce_float(settings.get("accuracy_good_m"))
    fair = _coerce_float(settings.get("accuracy_fair_m"))
    if good is None or fair is None or good <= 0 or fair <= 0:
        issues.append(
            ValidationIssue(
                field="accuracy_good_m",
                title="Accuracy Bands Invalid",
                message="Accuracy bands must be positive numbers of meters.",
            )
        )
    elif good >= fair:
        issues.append(
            ValidationIssue(
                field="accuracy_good_m",
                title="Accuracy Bands Overlap",
                message="The good accuracy band must be tighter than the fair band.",
            )
        )

    interval = _coerce_int(settings.get("min_update_interval_ms"))
    if interval is None or interval < 0:
        issues.append(
            ValidationIssue(
                field="min_update_interval_ms",
                title="Update Interval Invalid",
                message="The minimum update interval must be zero or a positive number of milliseconds.",
            )
        )

    history = _coerce_int(settings.get("history_limit"))
    if history is None or not 1 <= history <= 50:
        issues.append(
            ValidationIssue(
                field="history_limit",
                title="History Limit Out of Range",
                message="Keep between 1 and 50 finished sessions in history.",
            )
        )

    return issues


DEFAULT_CONFIG = EngineConfig()
