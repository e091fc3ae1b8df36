"""
Tool Types Module

Enums for drawing tools, measurement types and hydro-excavation variants.

A tool is what the user picks on the toolbar; a measurement type is what a
committed gesture becomes. They match one to one except for the
hydro-excavation tool, whose configuration decides between a trench, a hole
and a pothole measurement.
"""

import logging
from enum import Enum

from ..geometry.shapes import GeometryKind

logger = logging.getLogger(__name__)


class UnsupportedToolType(ValueError):
    """Raised for a tool or measurement tag outside the closed set."""
    pass


class Tool(Enum):
    """
    Drawing tools selectable by the host.

    Values:
        TRENCH: Open-cut trench run
        BORE_SHOT: Directional bore run
        CONDUIT: Conduit path
        HYDRO_EXCAVATION: Vacuum excavation (trench, hole or pothole)
        VAULT: Vault / handhole placement
        AREA: Area or yardage polygon
        NOTE: Free text marker
    """
    TRENCH = "trench"
    BORE_SHOT = "bore-shot"
    CONDUIT = "conduit"
    HYDRO_EXCAVATION = "hydro-excavation"
    VAULT = "vault"
    AREA = "area"
    NOTE = "note"

    @classmethod
    def from_string(cls, value) -> "Tool":
        """
        Parse a tool identifier (case-insensitive, with legacy aliases).

        Examples:
            >>> Tool.from_string("Bore-Shot")
            Tool.BORE_SHOT
            >>> Tool.from_string("yardage")
            Tool.AREA

        Raises:
            UnsupportedToolType: If the value names no known tool
        """
        if isinstance(value, Tool):
            return value
        if value is None:
            raise UnsupportedToolType("Tool identifier is required")

        normalized = str(value).strip().lower().replace("_", "-")
        normalized = TOOL_ALIASES.get(normalized, normalized)

        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedToolType(f"Unsupported tool type: '{value}'") from None

    @property
    def requires_configuration(self) -> bool:
        """Tools that cannot derive quantities without a configuration."""
        return self in (
            Tool.TRENCH,
            Tool.BORE_SHOT,
            Tool.CONDUIT,
            Tool.HYDRO_EXCAVATION,
            Tool.VAULT,
        )


TOOL_ALIASES = {
    "yardage": "area",
    "notes": "note",
    "boreshot": "bore-shot",
    "hydro": "hydro-excavation",
}


class MeasurementType(Enum):
    """Closed set of committed measurement tags."""
    TRENCH = "trench"
    BORE_SHOT = "bore-shot"
    CONDUIT = "conduit"
    VAULT = "vault"
    HYDRO_EXCAVATION_TRENCH = "hydro-excavation-trench"
    HYDRO_EXCAVATION_HOLE = "hydro-excavation-hole"
    HYDRO_EXCAVATION_POTHOLE = "hydro-excavation-pothole"
    AREA = "area"
    NOTE = "note"

    @classmethod
    def from_string(cls, value) -> "MeasurementType":
        """Parse a measurement tag, accepting "yardage" for area."""
        if isinstance(value, MeasurementType):
            return value
        if value is None:
            raise UnsupportedToolType("Measurement type is required")

        normalized = str(value).strip().lower()
        normalized = TOOL_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedToolType(f"Unsupported measurement type: '{value}'") from None

    @property
    def geometry_kind(self) -> GeometryKind:
        """Shape class a measurement of this type is drawn as."""
        if self is MeasurementType.AREA:
            return GeometryKind.POLYGON
        if self in (
            MeasurementType.TRENCH,
            MeasurementType.BORE_SHOT,
            MeasurementType.CONDUIT,
            MeasurementType.HYDRO_EXCAVATION_TRENCH,
        ):
            return GeometryKind.LINESTRING
        return GeometryKind.POINT


class HydroExcavationType(Enum):
    """Kind of hydro-excavation selected in the tool configuration."""
    TRENCH = "trench"
    HOLE = "hole"
    POTHOLING = "potholing"

    @property
    def measurement_type(self) -> MeasurementType:
        if self is HydroExcavationType.TRENCH:
            return MeasurementType.HYDRO_EXCAVATION_TRENCH
        if self is HydroExcavationType.HOLE:
            return MeasurementType.HYDRO_EXCAVATION_HOLE
        return MeasurementType.HYDRO_EXCAVATION_POTHOLE


class HoleShape(Enum):
    """Plan shape of a hydro-excavated hole."""
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
