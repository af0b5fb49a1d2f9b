"""Persistence of engine thresholds and display preferences in ``QSettings``."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from PySide6.QtCore import QSettings

from engine_config import EngineConfig
from errors import ConfigurationError
from logger import LogCategory, get_logger
from units import UnitSystem

ORGANIZATION = "GreenWalk"
APPLICATION = "GreenWalk"

# EngineConfig field -> (settings group, key)
SETTINGS_KEYS: Dict[str, Tuple[str, str]] = {
    "movement_threshold_m": ("filter", "movement_threshold_m"),
    "closure_radius_m": ("closure", "radius_m"),
    "min_closure_vertices": ("closure", "min_vertices"),
    "min_closure_perimeter_m": ("closure", "min_perimeter_m"),
    "closure_hint_radius_m": ("closure", "hint_radius_m"),
    "area_floor_m2": ("metrics", "area_floor_m2"),
    "max_pivots": ("metrics", "max_pivots"),
    "accuracy_good_m": ("signal", "accuracy_good_m"),
    "accuracy_fair_m": ("signal", "accuracy_fair_m"),
    "min_update_interval_ms": ("signal", "min_update_interval_ms"),
    "history_limit": ("history", "limit"),
}

UNITS_KEY = "display/units"


def default_settings() -> QSettings:
    """Return the application's settings store."""
    return QSettings(ORGANIZATION, APPLICATION)


def load_engine_config(settings: Optional[QSettings] = None) -> EngineConfig:
    """Read thresholds from ``settings``; unset keys keep their defaults.

    Raises
    ------
    ConfigurationError
        If a stored value fails validation.
    """
    settings = settings if settings is not None else default_settings()
    raw = {}
    for name, (group, key) in SETTINGS_KEYS.items():
        raw[name] = settings.value(f"{group}/{key}", None)
    try:
        config = EngineConfig.from_mapping(raw)
    except ConfigurationError as exc:
        get_logger().error("Stored engine settings are invalid", exception=exc,
                           category=LogCategory.CONFIG,
                           fields=[issue.field for issue in exc.issues])
        raise
    get_logger().debug("Engine settings loaded", category=LogCategory.CONFIG,
                       **config.to_mapping())
    return config


def save_engine_config(settings: QSettings, config: EngineConfig) -> None:
    """Write every threshold of ``config`` under its group."""
    values = config.to_mapping()
    for name, (group, key) in SETTINGS_KEYS.items():
        settings.beginGroup(group)
        settings.setValue(key, values[name])
        settings.endGroup()
    settings.sync()
    get_logger().info("Engine settings saved", category=LogCategory.CONFIG)


def load_unit_system(settings: QSettings) -> UnitSystem:
    """Stored display units, defaulting to yards for unknown values."""
    stored = settings.value(UNITS_KEY, UnitSystem.YARDS.value)
    try:
        return UnitSystem(stored)
    except ValueError:
        get_logger().warning("Unknown unit system in settings", category=LogCategory.CONFIG,
                             value=stored)
        return UnitSystem.YARDS


def save_unit_system(settings: QSettings, units: UnitSystem) -> None:
    settings.setValue(UNITS_KEY, units.value)
    settings.sync()
