# Geometry shapes and calculations module

from .shapes import (
    Coordinate,
    InvalidGeometry,
    GeometryKind,
    Geometry,
)

from .calculator import (
    distance,
    polyline_length,
    ring_perimeter,
    signed_polygon_area,
    polygon_area,
    scale_length,
    scale_area,
    hit_test,
)

__all__ = [
    # Shapes
    "Coordinate",
    "InvalidGeometry",
    "GeometryKind",
    "Geometry",
    # Calculator
    "distance",
    "polyline_length",
    "ring_perimeter",
    "signed_polygon_area",
    "polygon_area",
    "scale_length",
    "scale_area",
    "hit_test",
]
