"""
Unit Converter Module

Functions for converting lengths, areas and volumes between real-world units.

Conversions always go through meters so that relabelling a value with a new
unit also converts the number.
"""

import logging
import re
from typing import Tuple

from ..constants import (
    METERS_PER_INCH,
    METERS_PER_FOOT,
    METERS_PER_YARD,
)

logger = logging.getLogger(__name__)

# Meters per one unit of each canonical linear unit
METERS_PER_UNIT = {
    "m": 1.0,
    "cm": 0.01,
    "mm": 0.001,
    "ft": METERS_PER_FOOT,
    "in": METERS_PER_INCH,
    "yd": METERS_PER_YARD,
}

UNIT_ALIASES = {
    "m": "m", "meter": "m", "meters": "m", "metre": "m", "metres": "m",
    "cm": "cm", "centimeter": "cm", "centimeters": "cm",
    "mm": "mm", "millimeter": "mm", "millimeters": "mm",
    "ft": "ft", "foot": "ft", "feet": "ft", "'": "ft",
    "in": "in", "inch": "in", "inches": "in", '"': "in",
    "yd": "yd", "yard": "yd", "yards": "yd",
}


def normalize_unit(unit: str) -> str:
    """
    Normalize a unit name to its canonical short form.

    Args:
        unit: Unit name such as "feet", "Meters", "in"

    Returns:
        Canonical unit ("m", "cm", "mm", "ft", "in", "yd")

    Raises:
        ValueError: If the unit is not recognized
    """
    if unit is None:
        raise ValueError("Unit is required")

    key = unit.strip().lower()
    if key not in UNIT_ALIASES:
        raise ValueError(f"Unknown unit: '{unit}'")
    return UNIT_ALIASES[key]


def is_known_unit(unit: str) -> bool:
    """Check whether a unit name can be converted."""
    return unit is not None and unit.strip().lower() in UNIT_ALIASES


def convert_length(value: float, from_unit: str, to_unit: str) -> float:
    """
    Convert a length between units.

    Args:
        value: Length in from_unit
        from_unit: Source unit
        to_unit: Target unit

    Returns:
        Length in to_unit
    """
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    if source == target:
        return value
    return value * METERS_PER_UNIT[source] / METERS_PER_UNIT[target]


def convert_area(value: float, from_unit: str, to_unit: str) -> float:
    """
    Convert an area between units.

    Note: Area conversion uses the linear factor squared.

    Args:
        value: Area in square from_unit
        from_unit: Source linear unit
        to_unit: Target linear unit

    Returns:
        Area in square to_unit
    """
    factor = convert_length(1.0, from_unit, to_unit)
    return value * factor ** 2


def convert_volume(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a volume between cubic units (linear factor cubed)."""
    factor = convert_length(1.0, from_unit, to_unit)
    return value * factor ** 3


def depth_to_meters(depth: float, depth_unit: str) -> float:
    """
    Convert a configured depth to meters.

    Examples:
        8 inches -> 0.2032
        2 feet -> 0.6096
    """
    return convert_length(depth, depth_unit, "m")


def format_length(length: float, unit: str) -> str:
    """Format a length with its unit, e.g. "20.00 m"."""
    return f"{length:.2f} {unit}"


def format_area(area: float, unit: str) -> str:
    """
    Format an area with unit.

    Args:
        area: Area value
        unit: Linear unit the area was measured in

    Returns:
        Formatted string like "150.5 SF" or "14.0 m²"
    """
    if unit == "ft":
        return f"{area:.1f} SF"
    elif unit == "m":
        return f"{area:.1f} m²"
    else:
        return f"{area:.1f} sq {unit}"


def format_volume(volume: float, label: str = "CY") -> str:
    """Format a volume, e.g. "4.44 CY"."""
    return f"{volume:.2f} {label}"


def parse_calibration_string(calib_string: str) -> Tuple[Tuple[float, float], Tuple[float, float], float, str]:
    """
    Parse a calibration string in format "x1,y1:x2,y2=LENGTH UNIT".

    Args:
        calib_string: Calibration string like "100,200:300,200=10m"

    Returns:
        Tuple of (point1, point2, length, unit)

    Raises:
        ValueError: If string format is invalid
    """
    # Pattern: x1,y1:x2,y2=LENGTHunit
    pattern = (
        r"\s*(-?\d+(?:\.\d+)?),(-?\d+(?:\.\d+)?):(-?\d+(?:\.\d+)?),(-?\d+(?:\.\d+)?)"
        r"=(\d+(?:\.\d+)?)\s*([a-zA-Z]+)?\s*$"
    )

    match = re.match(pattern, calib_string)
    if not match:
        raise ValueError(f"Invalid calibration format: {calib_string}")

    x1, y1, x2, y2, length, unit = match.groups()

    point1 = (float(x1), float(y1))
    point2 = (float(x2), float(y2))
    real_length = float(length)
    length_unit = normalize_unit(unit or "ft")

    return point1, point2, real_length, length_unit
