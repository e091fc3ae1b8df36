"""
Tool Configuration Module

Immutable configuration objects supplied by the host before a gesture is
drawn. Each configurable tool has one configuration class; all of them can
be built from plain mappings (settings file, replay scripts) and turned back
into mappings for export.

Configurations are frozen and hold tuples, so a Measurement that copies
values out of one can never be changed by a later configuration edit.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple

from ..constants import DEFAULT_DEPTH_UNIT
from .types import Tool, HydroExcavationType, HoleShape, MeasurementType

logger = logging.getLogger(__name__)


class InvalidToolConfiguration(ValueError):
    """Raised when a mapping cannot be turned into a tool configuration."""
    pass


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


# =============================================================================
# SHARED PARTS
# =============================================================================

@dataclass(frozen=True)
class ConduitSpec:
    """One conduit line in a run: size, count and material."""
    size_in: str
    count: int = 1
    material: str = "PVC"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConduitSpec":
        return cls(
            size_in=str(data.get("size_in", "1")),
            count=int(data.get("count", 1)),
            material=str(data.get("material", "PVC")),
        )


def _conduits_from(items) -> Tuple[ConduitSpec, ...]:
    return tuple(
        item if isinstance(item, ConduitSpec) else ConduitSpec.from_dict(item)
        for item in (items or ())
    )


@dataclass(frozen=True)
class RemovalSpec:
    """Pavement removal band along a trench (asphalt or concrete)."""
    width: float
    thickness: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RemovalSpec":
        return cls(width=float(data["width"]), thickness=float(data["thickness"]))


@dataclass(frozen=True)
class BackfillSpec:
    """Backfill material and cross-section along a trench."""
    material: str
    width: float
    depth: float
    custom_material: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackfillSpec":
        return cls(
            material=str(data.get("material", "native")),
            width=float(data["width"]),
            depth=float(data["depth"]),
            custom_material=data.get("custom_material"),
        )


@dataclass(frozen=True)
class Dimensions:
    """Length x width x depth box."""
    length: float
    width: float
    depth: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dimensions":
        return cls(
            length=float(data["length"]),
            width=float(data["width"]),
            depth=float(data["depth"]),
        )


@dataclass(frozen=True)
class HoleDimensions:
    """
    Hydro-excavated hole size.

    Plan dimensions are in feet; depth is in depth_unit ("inches" or "feet").
    Rectangles use length and width, circles use diameter.
    """
    depth: float
    depth_unit: str = "feet"
    length: Optional[float] = None
    width: Optional[float] = None
    diameter: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HoleDimensions":
        return cls(
            depth=float(data.get("depth", 0.0)),
            depth_unit=str(data.get("depth_unit", "feet")),
            length=_optional_float(data.get("length")),
            width=_optional_float(data.get("width")),
            diameter=_optional_float(data.get("diameter")),
        )


@dataclass(frozen=True)
class PotholingData:
    """Pothole survey parameters."""
    average_depth: float
    depth_unit: str = DEFAULT_DEPTH_UNIT
    surface_type: str = "dirt"  # "asphalt", "concrete" or "dirt"
    include_restoration: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PotholingData":
        return cls(
            average_depth=float(data.get("average_depth", 0.0)),
            depth_unit=str(data.get("depth_unit", DEFAULT_DEPTH_UNIT)),
            surface_type=str(data.get("surface_type", "dirt")),
            include_restoration=bool(data.get("include_restoration", False)),
        )


# =============================================================================
# TOOL CONFIGURATIONS
# =============================================================================

@dataclass(frozen=True)
class TrenchConfig:
    """Trench cross-section, pavement removal, backfill and conduits."""
    width: float
    depth: float
    soil_type: Optional[str] = None
    asphalt_removal: Optional[RemovalSpec] = None
    concrete_removal: Optional[RemovalSpec] = None
    backfill: Optional[BackfillSpec] = None
    conduits: Tuple[ConduitSpec, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrenchConfig":
        asphalt = data.get("asphalt_removal")
        concrete = data.get("concrete_removal")
        backfill = data.get("backfill")
        return cls(
            width=float(data["width"]),
            depth=float(data["depth"]),
            soil_type=data.get("soil_type"),
            asphalt_removal=RemovalSpec.from_dict(asphalt) if asphalt else None,
            concrete_removal=RemovalSpec.from_dict(concrete) if concrete else None,
            backfill=BackfillSpec.from_dict(backfill) if backfill else None,
            conduits=_conduits_from(data.get("conduits")),
        )


@dataclass(frozen=True)
class BoreShotConfig:
    """Conduits pulled through a directional bore."""
    conduits: Tuple[ConduitSpec, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoreShotConfig":
        return cls(conduits=_conduits_from(data.get("conduits")))


@dataclass(frozen=True)
class ConduitConfig:
    """Conduits laid along a conduit path."""
    conduits: Tuple[ConduitSpec, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConduitConfig":
        return cls(conduits=_conduits_from(data.get("conduits")))


@dataclass(frozen=True)
class HydroExcavationConfig:
    """
    Hydro-excavation parameters.

    The excavation type picks the measurement produced by a gesture:
    trench (path, optional cross-section), hole (configured box or cylinder)
    or potholing (configured depth, fixed bore radius).
    """
    excavation_type: HydroExcavationType = HydroExcavationType.TRENCH
    hole_shape: HoleShape = HoleShape.RECTANGLE
    hole_dimensions: Optional[HoleDimensions] = None
    potholing: Optional[PotholingData] = None
    trench_width: Optional[float] = None
    trench_depth: Optional[float] = None
    conduits: Tuple[ConduitSpec, ...] = ()

    @property
    def measurement_type(self) -> MeasurementType:
        return self.excavation_type.measurement_type

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HydroExcavationConfig":
        hole = data.get("hole_dimensions")
        potholing = data.get("potholing")
        return cls(
            excavation_type=HydroExcavationType(data.get("excavation_type", "trench")),
            hole_shape=HoleShape(data.get("hole_shape", "rectangle")),
            hole_dimensions=HoleDimensions.from_dict(hole) if hole else None,
            potholing=PotholingData.from_dict(potholing) if potholing else None,
            trench_width=_optional_float(data.get("trench_width")),
            trench_depth=_optional_float(data.get("trench_depth")),
            conduits=_conduits_from(data.get("conduits")),
        )


@dataclass(frozen=True)
class VaultConfig:
    """
    Vault placement quantities.

    Volumes are entered by the estimator (cubic yards), not derived from the
    drawing; a gesture only places the vault.
    """
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
    def from_dict(cls, data: Dict[str, Any]) -> "VaultConfig":
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
class AreaConfig:
    """Optional height turning an area into a volume."""
    height: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AreaConfig":
        return cls(height=_optional_float(data.get("height")))


@dataclass(frozen=True)
class NoteConfig:
    """Text attached to the next note marker."""
    text: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NoteConfig":
        return cls(text=str(data.get("text", "")))


CONFIG_TYPES = {
    Tool.TRENCH: TrenchConfig,
    Tool.BORE_SHOT: BoreShotConfig,
    Tool.CONDUIT: ConduitConfig,
    Tool.HYDRO_EXCAVATION: HydroExcavationConfig,
    Tool.VAULT: VaultConfig,
    Tool.AREA: AreaConfig,
    Tool.NOTE: NoteConfig,
}


def config_from_dict(tool, data: Dict[str, Any]):
    """
    Build the configuration object for a tool from a plain mapping.

    Args:
        tool: Tool or tool identifier
        data: Mapping with snake_case keys

    Returns:
        Configuration instance of the tool's configuration class

    Raises:
        InvalidToolConfiguration: Missing keys or values of the wrong type
    """
    tool = Tool.from_string(tool)
    try:
        return CONFIG_TYPES[tool].from_dict(data or {})
    except KeyError as e:
        raise InvalidToolConfiguration(f"{tool.value} configuration is missing {e}") from e
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidToolConfiguration(f"{tool.value} configuration: {e}") from e


def config_to_dict(config) -> Dict[str, Any]:
    """Convert a configuration object to a plain mapping (enums as values)."""
    return _plain(asdict(config))


def _plain(value):
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, (HydroExcavationType, HoleShape)):
        return value.value
    return value
