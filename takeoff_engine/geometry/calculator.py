"""
Geometry Calculator Module

Pure functions for lengths, areas and hit tests in pixel space, plus the
scale conversions that turn them into real-world quantities.
"""

import logging
import math
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from shapely.geometry import Point

from ..constants import DEFAULT_HIT_TOLERANCE_PX
from .shapes import GeometryKind

logger = logging.getLogger(__name__)


def _as_array(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Convert (x, y) pairs to an (N, 2) float array."""
    if len(points) == 0:
        return np.zeros((0, 2), dtype=float)
    return np.asarray(points, dtype=float).reshape(-1, 2)


def distance(p1: Tuple[float, float], p2: Tuple[float, float]) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def polyline_length(points: Sequence[Sequence[float]]) -> float:
    """
    Calculate the length of an open polyline.

    Sum of the Euclidean distances between consecutive points. Every captured
    point is used, so dense freehand paths integrate their full length.

    Args:
        points: Ordered (x, y) pairs

    Returns:
        Length in the units of the coordinates (0.0 for fewer than 2 points)
    """
    coords = _as_array(points)
    if len(coords) < 2:
        return 0.0

    deltas = np.diff(coords, axis=0)
    return float(np.hypot(deltas[:, 0], deltas[:, 1]).sum())


def ring_perimeter(points: Sequence[Sequence[float]]) -> float:
    """Perimeter of a closed ring (includes the edge back to the start)."""
    coords = _as_array(points)
    if len(coords) < 2:
        return 0.0

    closed = np.vstack([coords, coords[:1]])
    return polyline_length(closed)


def signed_polygon_area(points: Sequence[Sequence[float]]) -> float:
    """
    Calculate the signed shoelace area of a closed ring.

    Positive for counter-clockwise winding in a y-up frame, negative for
    clockwise. The ring is closed implicitly.

    Args:
        points: Polygon vertices (x, y), not repeating the first vertex

    Returns:
        Signed area (0.0 for fewer than 3 points)
    """
    coords = _as_array(points)
    if len(coords) < 3:
        return 0.0

    x = coords[:, 0]
    y = coords[:, 1]
    x_next = np.roll(x, -1)
    y_next = np.roll(y, -1)
    return float((x * y_next - x_next * y).sum() / 2.0)


def polygon_area(points: Sequence[Sequence[float]]) -> float:
    """Unsigned polygon area (independent of winding and start vertex)."""
    return abs(signed_polygon_area(points))


def scale_length(length_pixels: float, scale: float) -> float:
    """
    Convert a pixel length to real units.

    Args:
        length_pixels: Length in pixels
        scale: Real units per pixel

    Returns:
        Length in real units
    """
    return length_pixels * scale


def scale_area(area_sq_pixels: float, scale: float) -> float:
    """
    Convert a pixel area to real units.

    Note: Area conversion uses scale squared.
    """
    return area_sq_pixels * scale ** 2


def hit_test(
    point: Tuple[float, float],
    measurements: Iterable,
    zoom: float = 1.0,
    tolerance: float = DEFAULT_HIT_TOLERANCE_PX
) -> Optional[str]:
    """
    Find the measurement under a click.

    Vertices are checked first for every measurement, then paths and polygon
    interiors. The tolerance is given in screen pixels and divided by the
    zoom level so selection feels the same at every zoom.

    Args:
        point: Click position in drawing pixels
        measurements: Objects with `id` and `geometry` attributes
        zoom: Current zoom factor
        tolerance: Screen-pixel tolerance

    Returns:
        Id of the first matching measurement, or None
    """
    adjusted_tolerance = tolerance / zoom if zoom > 0 else tolerance
    candidates = list(measurements)

    for measurement in candidates:
        for vertex in measurement.geometry.coordinates:
            if distance(point, vertex) < adjusted_tolerance:
                return measurement.id

    click = Point(point)
    for measurement in candidates:
        geometry = measurement.geometry
        if geometry.kind is GeometryKind.POINT:
            continue
        shape = geometry.to_shapely()
        if geometry.kind is GeometryKind.POLYGON:
            if shape.covers(click):
                return measurement.id
            shape = shape.exterior
        if shape.distance(click) < adjusted_tolerance:
            return measurement.id

    return None
