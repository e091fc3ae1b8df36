"""
Quantity Derivation Module

Turns a captured point sequence plus the tool configuration into a fully
populated Measurement.

Every path-based type starts from the same baseline: the pixel length is
the sum of the distances between consecutive points, converted with the
active calibration. Polygons also get a shoelace area, converted with the
square of the same linear scale. Type-specific formulas are applied on top:

    trench            spoil = length x width x depth / 27
                      asphalt / concrete removal = length x width x thickness / 27
                      backfill = length x width x depth / 27
    bore-shot/conduit length only, conduit list copied verbatim
    vault             quantities come from configuration, geometry is a point
    hydro trench      trench formula when a cross-section is configured
    hydro hole        rectangle l x w x d or circle pi r^2 d (cubic feet)
    pothole           pi r^2 d with a fixed bore radius (cubic meters)
    area              polygon area, optional height gives a volume
    note              text only

Nothing is rounded here; rounding is a presentation concern.
"""

import logging
import math
from typing import Optional, Sequence

from ..calibration.unit_converter import convert_length, depth_to_meters
from ..constants import (
    CUBIC_FEET_PER_CUBIC_YARD,
    POTHOLE_BORE_RADIUS_M,
    TOOL_COLORS,
    DEFAULT_TOOL_COLOR,
    DEFAULT_FALLBACK_UNIT,
)
from ..geometry.calculator import polyline_length, ring_perimeter, polygon_area
from ..geometry.shapes import Geometry, GeometryKind
from ..tools.config import (
    CONFIG_TYPES,
    TrenchConfig,
    HydroExcavationConfig,
    HoleDimensions,
    VaultConfig,
    AreaConfig,
    NoteConfig,
)
from ..tools.types import Tool, MeasurementType, HoleShape, UnsupportedToolType
from .models import (
    Measurement,
    RemovalQuantity,
    BackfillQuantity,
    TrenchFields,
    ConduitRunFields,
    VaultFields,
    HydroTrenchFields,
    HydroHoleFields,
    PotholeFields,
    AreaFields,
    NoteFields,
)

logger = logging.getLogger(__name__)


class DerivationError(Exception):
    """Base class for derivation failures."""
    pass


class MissingConfiguration(DerivationError):
    """Raised when a tool that needs a configuration has none attached."""
    pass


# =============================================================================
# FORMULAS
# =============================================================================

def calculate_spoil_volume(length: float, width: float, depth: float) -> float:
    """
    Calculate excavated spoil volume for a trench run.

    Args:
        length: Trench length
        width: Trench width
        depth: Trench depth

    Returns:
        Volume in cubic yards when inputs are in feet
    """
    return length * width * depth / CUBIC_FEET_PER_CUBIC_YARD


def calculate_removal_volume(length: float, width: float, thickness: float) -> float:
    """Pavement removal volume (asphalt or concrete) along a run."""
    return length * width * thickness / CUBIC_FEET_PER_CUBIC_YARD


def calculate_backfill_volume(length: float, width: float, depth: float) -> float:
    """Backfill volume along a run."""
    return length * width * depth / CUBIC_FEET_PER_CUBIC_YARD


def calculate_pothole_volume(depth_m: float, radius_m: float = POTHOLE_BORE_RADIUS_M) -> float:
    """
    Calculate pothole mud volume as a cylinder.

    The bore radius is a fixed 8 inch diameter assumption.

    Args:
        depth_m: Pothole depth in meters
        radius_m: Bore radius in meters

    Returns:
        Volume in cubic meters
    """
    return math.pi * radius_m ** 2 * depth_m


def calculate_hole_volume(shape: HoleShape, dimensions: HoleDimensions) -> float:
    """
    Calculate a hydro-excavated hole volume from configured dimensions.

    Plan dimensions are in feet; the depth is converted to feet from its
    configured unit.

    Args:
        shape: Rectangle or circle
        dimensions: Hole dimensions

    Returns:
        Volume in cubic feet

    Raises:
        MissingConfiguration: If the dimensions needed by the shape are absent
    """
    depth_ft = convert_length(dimensions.depth, dimensions.depth_unit, "ft")

    if shape is HoleShape.RECTANGLE:
        if dimensions.length is None or dimensions.width is None:
            raise MissingConfiguration("Rectangular hole needs length and width")
        return dimensions.length * dimensions.width * depth_ft

    if dimensions.diameter is None:
        raise MissingConfiguration("Circular hole needs a diameter")
    radius = dimensions.diameter / 2
    return math.pi * radius ** 2 * depth_ft


# =============================================================================
# TYPE-SPECIFIC FIELDS
# =============================================================================

def derive_trench_fields(length: float, config: TrenchConfig) -> TrenchFields:
    """Apply the trench formulas to a run of the given real length."""
    asphalt = None
    if config.asphalt_removal is not None:
        removal = config.asphalt_removal
        asphalt = RemovalQuantity(
            width=removal.width,
            thickness=removal.thickness,
            volume=calculate_removal_volume(length, removal.width, removal.thickness),
        )

    concrete = None
    if config.concrete_removal is not None:
        removal = config.concrete_removal
        concrete = RemovalQuantity(
            width=removal.width,
            thickness=removal.thickness,
            volume=calculate_removal_volume(length, removal.width, removal.thickness),
        )

    backfill = None
    if config.backfill is not None:
        spec = config.backfill
        backfill = BackfillQuantity(
            material=spec.material,
            width=spec.width,
            depth=spec.depth,
            volume=calculate_backfill_volume(length, spec.width, spec.depth),
            custom_material=spec.custom_material,
        )

    return TrenchFields(
        width=config.width,
        depth=config.depth,
        spoil_volume=calculate_spoil_volume(length, config.width, config.depth),
        asphalt_removal=asphalt,
        concrete_removal=concrete,
        backfill=backfill,
        conduits=tuple(config.conduits),
        soil_type=config.soil_type,
    )


def derive_vault_fields(config: VaultConfig) -> VaultFields:
    return VaultFields(
        dimensions=config.dimensions,
        hole_size=config.hole_size,
        spoil_volume=config.spoil_volume,
        asphalt_removal_volume=config.asphalt_removal_volume,
        concrete_removal_volume=config.concrete_removal_volume,
        asphalt_restoration_volume=config.asphalt_restoration_volume,
        concrete_restoration_volume=config.concrete_restoration_volume,
        backfill_volume=config.backfill_volume,
        backfill_type=config.backfill_type,
        traffic_rated=config.traffic_rated,
    )


def derive_hydro_trench_fields(length: float, config: HydroExcavationConfig) -> HydroTrenchFields:
    spoil = None
    if config.trench_width is not None and config.trench_depth is not None:
        spoil = calculate_spoil_volume(length, config.trench_width, config.trench_depth)

    return HydroTrenchFields(
        width=config.trench_width,
        depth=config.trench_depth,
        spoil_volume=spoil,
        conduits=tuple(config.conduits),
    )


def derive_hydro_hole_fields(config: HydroExcavationConfig) -> HydroHoleFields:
    if config.hole_dimensions is None:
        raise MissingConfiguration("Hydro-excavation hole needs hole dimensions")

    return HydroHoleFields(
        hole_shape=config.hole_shape,
        dimensions=config.hole_dimensions,
        volume=calculate_hole_volume(config.hole_shape, config.hole_dimensions),
    )


def derive_pothole_fields(config: HydroExcavationConfig) -> PotholeFields:
    if config.potholing is None:
        raise MissingConfiguration("Pothole needs potholing data")

    depth_m = depth_to_meters(config.potholing.average_depth, config.potholing.depth_unit)
    return PotholeFields(
        potholing=config.potholing,
        depth_m=depth_m,
        bore_radius_m=POTHOLE_BORE_RADIUS_M,
        volume=calculate_pothole_volume(depth_m),
    )


def derive_area_fields(area: float, config: Optional[AreaConfig]) -> AreaFields:
    if config is None or config.height is None:
        return AreaFields()
    return AreaFields(height=config.height, volume=area * config.height)


# =============================================================================
# ENGINE
# =============================================================================

def resolve_measurement_type(tool_type, config=None) -> MeasurementType:
    """
    Work out the measurement type a gesture produces.

    Args:
        tool_type: Tool, tool identifier or measurement type tag
        config: Tool configuration (decides the hydro-excavation variant)

    Returns:
        MeasurementType

    Raises:
        UnsupportedToolType: If the tag is outside the closed set
        MissingConfiguration: If the hydro-excavation tool has no configuration
    """
    if isinstance(tool_type, MeasurementType):
        return tool_type

    try:
        tool = Tool.from_string(tool_type)
    except UnsupportedToolType:
        return MeasurementType.from_string(tool_type)

    if tool is Tool.HYDRO_EXCAVATION:
        if config is None:
            raise MissingConfiguration("hydro-excavation requires a configuration")
        return config.measurement_type
    return MeasurementType(tool.value)


def tool_for(measurement_type: MeasurementType) -> Tool:
    """Tool whose configuration feeds a measurement type."""
    if measurement_type.value.startswith("hydro-excavation"):
        return Tool.HYDRO_EXCAVATION
    return Tool(measurement_type.value)


class QuantityDerivationEngine:
    """
    Pure mapping from (tool, points, calibration, configuration) to a
    Measurement. The result has no id; the MeasurementStore assigns one.
    """

    def derive(
        self,
        tool_type,
        points: Sequence[Sequence[float]],
        calibration,
        config=None,
        page: Optional[int] = None,
        color: Optional[str] = None,
    ) -> Measurement:
        """
        Derive a measurement from a captured gesture.

        Args:
            tool_type: Tool, tool identifier or measurement type tag
            points: Captured (x, y) pixel points in order
            calibration: Object with `convert`, `convert_area` and `unit`
                (normally a ScaleCalibrator)
            config: Configuration active for the tool, if any
            page: Drawing page the gesture was made on
            color: Display colour override

        Returns:
            Measurement without identity

        Raises:
            UnsupportedToolType: Unknown tool/measurement tag
            MissingConfiguration: Required configuration absent
            NotCalibrated: Length conversion with no scale and no fallback
            InvalidGeometry: Too few points for the shape class
        """
        measurement_type = resolve_measurement_type(tool_type, config)
        tool = tool_for(measurement_type)

        if config is not None and not isinstance(config, CONFIG_TYPES[tool]):
            raise TypeError(
                f"{tool.value} expects {CONFIG_TYPES[tool].__name__}, got {type(config).__name__}"
            )
        if config is None and tool.requires_configuration:
            raise MissingConfiguration(f"{tool.value} requires a configuration")

        kind = measurement_type.geometry_kind
        captured = list(points)
        if kind is GeometryKind.POINT:
            captured = captured[:1]
        geometry = Geometry.from_points(kind, captured)

        length = None
        area = None
        if kind is GeometryKind.LINESTRING:
            length = calibration.convert(polyline_length(geometry.coordinates))
            unit = calibration.unit
        elif kind is GeometryKind.POLYGON:
            length = calibration.convert(ring_perimeter(geometry.coordinates))
            area = calibration.convert_area(polygon_area(geometry.coordinates))
            unit = calibration.unit
        else:
            unit = _unit_or_default(calibration)

        fields = self._derive_fields(measurement_type, length, area, config)

        measurement = Measurement(
            type=measurement_type,
            geometry=geometry,
            unit=unit,
            fields=fields,
            length=length,
            area=area,
            color=color or TOOL_COLORS.get(measurement_type.value, DEFAULT_TOOL_COLOR),
            page=page,
        )

        logger.debug(
            f"Derived {measurement_type.value}: {len(geometry.coordinates)} points, "
            f"length={length}, area={area} ({unit})"
        )
        return measurement

    def _derive_fields(self, measurement_type: MeasurementType, length, area, config):
        if measurement_type is MeasurementType.TRENCH:
            return derive_trench_fields(length, config)

        if measurement_type in (MeasurementType.BORE_SHOT, MeasurementType.CONDUIT):
            return ConduitRunFields(conduits=tuple(config.conduits))

        if measurement_type is MeasurementType.VAULT:
            return derive_vault_fields(config)

        if measurement_type is MeasurementType.HYDRO_EXCAVATION_TRENCH:
            return derive_hydro_trench_fields(length, config)

        if measurement_type is MeasurementType.HYDRO_EXCAVATION_HOLE:
            return derive_hydro_hole_fields(config)

        if measurement_type is MeasurementType.HYDRO_EXCAVATION_POTHOLE:
            return derive_pothole_fields(config)

        if measurement_type is MeasurementType.AREA:
            return derive_area_fields(area, config)

        if measurement_type is MeasurementType.NOTE:
            text = config.text if isinstance(config, NoteConfig) else ""
            return NoteFields(text=text)

        raise UnsupportedToolType(f"Unsupported measurement type: '{measurement_type}'")


def _unit_or_default(calibration) -> str:
    """Unit in effect for point placements, which need no conversion."""
    if calibration.is_calibrated or calibration.has_fallback:
        return calibration.unit
    return DEFAULT_FALLBACK_UNIT
