"""Unit conversion and display formatting for GreenWalk measurements.

The engine works in SI units throughout; these helpers convert for display.
Conversion factors use the exact international yard and foot so round trips
are lossless up to floating point rounding.
"""

from __future__ import annotations

from enum import Enum

METERS_PER_YARD = 0.9144
METERS_PER_FOOT = 0.3048
SQUARE_METERS_PER_SQUARE_YARD = METERS_PER_YARD * METERS_PER_YARD


class UnitSystem(Enum):
    """Display unit systems offered to the player."""

    METRES = "Metres"
    YARDS = "Yards"


class AccuracyTier(Enum):
    """Quality band of a GPS fix, used for the accuracy indicator."""

    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


def meters_to_yards(meters: float) -> float:
    """Convert meters to yards."""
    return meters / METERS_PER_YARD


def yards_to_meters(yards: float) -> float:
    """Convert yards to meters."""
    return yards * METERS_PER_YARD


def meters_to_feet(meters: float) -> float:
    """Convert meters to feet."""
    return meters / METERS_PER_FOOT


def feet_to_meters(feet: float) -> float:
    """Convert feet to meters."""
    return feet * METERS_PER_FOOT


def square_meters_to_square_yards(square_meters: float) -> float:
    """Convert square meters to square yards."""
    return square_meters / SQUARE_METERS_PER_SQUARE_YARD


def square_yards_to_square_meters(square_yards: float) -> float:
    """Convert square yards to square meters."""
    return square_yards * SQUARE_METERS_PER_SQUARE_YARD



def distance_unit_label(units: UnitSystem) -> str:
    return "yd" if units is UnitSystem.YARDS else "m"


def format_distance(meters: float, units: UnitSystem) -> str:
    """Format a horizontal distance with one decimal place."""
    value = meters_to_yards(meters) if units is UnitSystem.YARDS else meters
    return f"{value:.1f}{distance_unit_label(units)}"


def format_elevation(meters: float, units: UnitSystem) -> str:
    """Format an elevation change with an explicit sign.

    Yards users read elevation in feet, matching how yardage books print it.
    """
    if units is UnitSystem.YARDS:
        value, suffix = meters_to_feet(meters), "ft"
    else:
        value, suffix = meters, "m"
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.1f}{suffix}"


def format_area(square_meters: float, units: UnitSystem) -> str:
    """Format an area rounded to the nearest whole unit."""
    if units is UnitSystem.YARDS:
        return f"{round(square_meters_to_square_yards(square_meters))}yd²"
    return f"{round(square_meters)}m²"



def classify_accuracy(
    horizontal_accuracy: float, good_below: float = 2.5, fair_up_to: float = 6.0
) -> AccuracyTier:
    """Place a horizontal accuracy radius into a quality band."""
    if horizontal_accuracy < good_below:
        return AccuracyTier.GOOD
    if horizontal_accuracy <= fair_up_to:
        return AccuracyTier.FAIR
    return AccuracyTier.POOR
