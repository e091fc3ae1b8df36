"""
Geometry Shapes Module

Point, LineString and Polygon geometries in drawing (pixel) coordinates.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Sequence

from shapely import geometry as shapely_geometry

from ..constants import (
    MIN_POINTS_POINT,
    MIN_POINTS_LINESTRING,
    MIN_POINTS_POLYGON,
)

logger = logging.getLogger(__name__)

Coordinate = Tuple[float, float]


class InvalidGeometry(ValueError):
    """Raised when a point sequence does not fit its geometry kind."""
    pass


class GeometryKind(Enum):
    """Shape class of a measurement's geometry."""
    POINT = "Point"
    LINESTRING = "LineString"
    POLYGON = "Polygon"

    @property
    def min_points(self) -> int:
        """Minimum number of captured points for this kind."""
        if self is GeometryKind.POINT:
            return MIN_POINTS_POINT
        if self is GeometryKind.LINESTRING:
            return MIN_POINTS_LINESTRING
        return MIN_POINTS_POLYGON


@dataclass(frozen=True)
class Geometry:
    """
    Immutable geometry in pixel coordinates.

    A Point holds exactly one coordinate, a LineString an ordered sequence of
    at least two, a Polygon an open ring of at least three (the closing edge
    back to the first vertex is implied).
    """
    kind: GeometryKind
    coordinates: Tuple[Coordinate, ...]

    def __post_init__(self):
        count = len(self.coordinates)
        if self.kind is GeometryKind.POINT and count != 1:
            raise InvalidGeometry(f"Point needs exactly 1 coordinate, got {count}")
        if count < self.kind.min_points:
            raise InvalidGeometry(
                f"{self.kind.value} needs at least {self.kind.min_points} coordinates, got {count}"
            )

    @classmethod
    def from_points(cls, kind: GeometryKind, points: Sequence[Sequence[float]]) -> "Geometry":
        """Build a geometry from any sequence of (x, y) pairs."""
        coordinates = tuple((float(p[0]), float(p[1])) for p in points)
        return cls(kind=kind, coordinates=coordinates)

    @classmethod
    def point(cls, x: float, y: float) -> "Geometry":
        return cls(kind=GeometryKind.POINT, coordinates=((float(x), float(y)),))

    def to_shapely(self):
        """Return the equivalent shapely geometry."""
        if self.kind is GeometryKind.POINT:
            return shapely_geometry.Point(self.coordinates[0])
        if self.kind is GeometryKind.LINESTRING:
            return shapely_geometry.LineString(self.coordinates)
        return shapely_geometry.Polygon(self.coordinates)

    def to_dict(self) -> dict:
        """GeoJSON-style mapping."""
        return {
            "type": self.kind.value,
            "coordinates": [list(c) for c in self.coordinates],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Geometry":
        return cls.from_points(GeometryKind(data["type"]), data["coordinates"])
