"""
Measurement Data Structure Module

Defines the committed Measurement record and the per-type field payloads.

Each measurement type carries exactly one payload class, so a trench can
never hold vault volumes and a note can never hold a length. Measurements are
frozen: type, geometry and unit are fixed at commit time and only the notes
are edited afterwards (by replacing the record in the store).
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple, Union

from ..calibration.unit_converter import convert_length, convert_area, is_known_unit
from ..constants import CSV_DECIMAL_PLACES
from ..geometry.shapes import Geometry
from ..tools.config import (
    ConduitSpec,
    Dimensions,
    HoleDimensions,
    PotholingData,
    config_to_dict,
)
from ..tools.types import MeasurementType, HoleShape

logger = logging.getLogger(__name__)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _conduits(items) -> Tuple[ConduitSpec, ...]:
    return tuple(ConduitSpec.from_dict(item) for item in (items or ()))


# =============================================================================
# TYPE-SPECIFIC PAYLOADS
# =============================================================================

@dataclass(frozen=True)
class RemovalQuantity:
    """Pavement removal band with its derived volume."""
    width: float
    thickness: float
    volume: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RemovalQuantity":
        return cls(
            width=float(data["width"]),
            thickness=float(data["thickness"]),
            volume=float(data["volume"]),
        )


@dataclass(frozen=True)
class BackfillQuantity:
    """Backfill material, cross-section and derived volume."""
    material: str
    width: float
    depth: float
    volume: float
    custom_material: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackfillQuantity":
        return cls(
            material=str(data["material"]),
            width=float(data["width"]),
            depth=float(data["depth"]),
            volume=float(data["volume"]),
            custom_material=data.get("custom_material"),
        )


@dataclass(frozen=True)
class TrenchFields:
    """Trench cross-section and excavation volumes (cubic yards)."""
    width: float
    depth: float
    spoil_volume: float
    asphalt_removal: Optional[RemovalQuantity] = None
    concrete_removal: Optional[RemovalQuantity] = None
    backfill: Optional[BackfillQuantity] = None
    conduits: Tuple[ConduitSpec, ...] = ()
    soil_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrenchFields":
        asphalt = data.get("asphalt_removal")
        concrete = data.get("concrete_removal")
        backfill = data.get("backfill")
        return cls(
            width=float(data["width"]),
            depth=float(data["depth"]),
            spoil_volume=float(data["spoil_volume"]),
            asphalt_removal=RemovalQuantity.from_dict(asphalt) if asphalt else None,
            concrete_removal=RemovalQuantity.from_dict(concrete) if concrete else None,
            backfill=BackfillQuantity.from_dict(backfill) if backfill else None,
            conduits=_conduits(data.get("conduits")),
            soil_type=data.get("soil_type"),
        )


@dataclass(frozen=True)
class ConduitRunFields:
    """Conduits along a bore shot or conduit path."""
    conduits: Tuple[ConduitSpec, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConduitRunFields":
        return cls(conduits=_conduits(data.get("conduits")))


@dataclass(frozen=True)
class VaultFields:
    """Vault dimensions and estimator-entered volumes (cubic yards)."""
    dimensions: Optional[Dimensions] = None
    hole_size: Optional[Dimensions] = None
    spoil_volume: Optional[float] = None
    asphalt_removal_volume: Optional[float] = None
    concrete_removal_volume: Optional[float] = None
    asphalt_restoration_volume: Optional[float] = None
    concrete_restoration_volume: Optional[float] = None
    backfill_volume: Optional[float] = None
    backfill_type: Optional[str] = None
    traffic_rated: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VaultFields":
        dimensions = data.get("dimensions")
        hole_size = data.get("hole_size")
        return cls(
            dimensions=Dimensions.from_dict(dimensions) if dimensions else None,
            hole_size=Dimensions.from_dict(hole_size) if hole_size else None,
            spoil_volume=_optional_float(data.get("spoil_volume")),
            asphalt_removal_volume=_optional_float(data.get("asphalt_removal_volume")),
            concrete_removal_volume=_optional_float(data.get("concrete_removal_volume")),
            asphalt_restoration_volume=_optional_float(data.get("asphalt_restoration_volume")),
            concrete_restoration_volume=_optional_float(data.get("concrete_restoration_volume")),
            backfill_volume=_optional_float(data.get("backfill_volume")),
            backfill_type=data.get("backfill_type"),
            traffic_rated=bool(data.get("traffic_rated", False)),
        )


@dataclass(frozen=True)
class HydroTrenchFields:
    """Hydro-excavated trench; the cross-section is optional."""
    width: Optional[float] = None
    depth: Optional[float] = None
    spoil_volume: Optional[float] = None
    conduits: Tuple[ConduitSpec, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HydroTrenchFields":
        return cls(
            width=_optional_float(data.get("width")),
            depth=_optional_float(data.get("depth")),
            spoil_volume=_optional_float(data.get("spoil_volume")),
            conduits=_conduits(data.get("conduits")),
        )


@dataclass(frozen=True)
class HydroHoleFields:
    """Hydro-excavated hole with its volume in cubic feet."""
    hole_shape: HoleShape
    dimensions: HoleDimensions
    volume: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HydroHoleFields":
        return cls(
            hole_shape=HoleShape(data["hole_shape"]),
            dimensions=HoleDimensions.from_dict(data["dimensions"]),
            volume=float(data["volume"]),
        )


@dataclass(frozen=True)
class PotholeFields:
    """Pothole with its cylinder volume in cubic meters."""
    potholing: PotholingData
    depth_m: float
    bore_radius_m: float
    volume: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PotholeFields":
        return cls(
            potholing=PotholingData.from_dict(data["potholing"]),
            depth_m=float(data["depth_m"]),
            bore_radius_m=float(data["bore_radius_m"]),
            volume=float(data["volume"]),
        )


@dataclass(frozen=True)
class AreaFields:
    """Area/yardage extras; volume is area x height when a height is set."""
    height: Optional[float] = None
    volume: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AreaFields":
        return cls(
            height=_optional_float(data.get("height")),
            volume=_optional_float(data.get("volume")),
        )


@dataclass(frozen=True)
class NoteFields:
    """Free text note."""
    text: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NoteFields":
        return cls(text=str(data.get("text", "")))


TypeSpecificFields = Union[
    TrenchFields,
    ConduitRunFields,
    VaultFields,
    HydroTrenchFields,
    HydroHoleFields,
    PotholeFields,
    AreaFields,
    NoteFields,
]

FIELDS_BY_TYPE = {
    MeasurementType.TRENCH: TrenchFields,
    MeasurementType.BORE_SHOT: ConduitRunFields,
    MeasurementType.CONDUIT: ConduitRunFields,
    MeasurementType.VAULT: VaultFields,
    MeasurementType.HYDRO_EXCAVATION_TRENCH: HydroTrenchFields,
    MeasurementType.HYDRO_EXCAVATION_HOLE: HydroHoleFields,
    MeasurementType.HYDRO_EXCAVATION_POTHOLE: PotholeFields,
    MeasurementType.AREA: AreaFields,
    MeasurementType.NOTE: NoteFields,
}


# =============================================================================
# MEASUREMENT
# =============================================================================

@dataclass(frozen=True)
class Measurement:
    """
    Committed result of one drawing gesture.

    Identity is assigned by the MeasurementStore; a measurement built by the
    derivation engine has no id until it is added.
    """
    # Core (fixed at commit time)
    type: MeasurementType
    geometry: Geometry
    unit: str
    fields: TypeSpecificFields

    # Identification
    id: Optional[str] = None
    label: str = ""

    # Derived metrics in `unit` / square `unit`
    length: Optional[float] = None
    area: Optional[float] = None

    # Editable
    notes: str = ""

    # Display and provenance
    color: str = ""
    page: Optional[int] = None
    created_at: str = ""

    def __post_init__(self):
        expected_fields = FIELDS_BY_TYPE[self.type]
        if not isinstance(self.fields, expected_fields):
            raise TypeError(
                f"{self.type.value} measurement needs {expected_fields.__name__}, "
                f"got {type(self.fields).__name__}"
            )
        if self.geometry.kind is not self.type.geometry_kind:
            raise TypeError(
                f"{self.type.value} measurement needs {self.type.geometry_kind.value} geometry, "
                f"got {self.geometry.kind.value}"
            )

    def with_id(self, measurement_id: Optional[str]) -> "Measurement":
        return replace(self, id=measurement_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert measurement to dictionary for JSON serialization (unrounded)."""
        return {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "geometry": self.geometry.to_dict(),
            "unit": self.unit,
            "length": self.length,
            "area": self.area,
            "notes": self.notes,
            "color": self.color,
            "page": self.page,
            "created_at": self.created_at,
            "fields": config_to_dict(self.fields),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Measurement":
        """Rebuild a measurement from `to_dict` output."""
        measurement_type = MeasurementType.from_string(data["type"])
        fields_class = FIELDS_BY_TYPE[measurement_type]
        page = data.get("page")
        return cls(
            type=measurement_type,
            geometry=Geometry.from_dict(data["geometry"]),
            unit=str(data["unit"]),
            fields=fields_class.from_dict(data.get("fields") or {}),
            id=data.get("id"),
            label=data.get("label", ""),
            length=_optional_float(data.get("length")),
            area=_optional_float(data.get("area")),
            notes=data.get("notes") or "",
            color=data.get("color", ""),
            page=None if page is None else int(page),
            created_at=data.get("created_at", ""),
        )

    def to_csv_row(self, display_unit: Optional[str] = None) -> List[Any]:
        """
        Convert measurement to CSV row values.

        Args:
            display_unit: Optional unit to present length/area in; values are
                converted numerically, not relabelled. A measurement in a unit
                with no conversion factor keeps its own unit and values.

        Returns:
            Row matching `csv_header()`
        """
        unit = self.unit
        length = self.length
        area = self.area

        if display_unit and display_unit != self.unit and is_known_unit(self.unit):
            if length is not None:
                length = convert_length(length, self.unit, display_unit)
            if area is not None:
                area = convert_area(area, self.unit, display_unit)
            unit = display_unit

        return [
            self.id or "",
            self.type.value,
            self.label,
            "" if length is None else round(length, CSV_DECIMAL_PLACES),
            "" if area is None else round(area, CSV_DECIMAL_PLACES),
            unit,
            self.notes,
            "" if self.page is None else self.page,
        ]

    @staticmethod
    def csv_header() -> List[str]:
        """Return CSV header row."""
        return [
            "id",
            "type",
            "label",
            "length",
            "area",
            "unit",
            "notes",
            "page",
        ]
