#!/usr/bin/env python
"""
Quantity Derivation Tests

Tests for:
- Volume formulas (spoil, removal, backfill, pothole, hole)
- QuantityDerivationEngine per measurement type
- Derivation failures (unknown tool, missing configuration, not calibrated)
"""

import math
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from takeoff_engine.calibration import NotCalibrated, ScaleCalibrator
from takeoff_engine.geometry import GeometryKind, InvalidGeometry
from takeoff_engine.measurement import (
    AreaFields,
    ConduitRunFields,
    HydroHoleFields,
    HydroTrenchFields,
    MissingConfiguration,
    NoteFields,
    PotholeFields,
    QuantityDerivationEngine,
    TrenchFields,
    UnsupportedToolType,
    VaultFields,
    calculate_hole_volume,
    calculate_pothole_volume,
    calculate_spoil_volume,
    resolve_measurement_type,
)
from takeoff_engine.tools import (
    AreaConfig,
    BackfillSpec,
    BoreShotConfig,
    ConduitSpec,
    Dimensions,
    HoleDimensions,
    HoleShape,
    HydroExcavationConfig,
    HydroExcavationType,
    MeasurementType,
    NoteConfig,
    PotholingData,
    RemovalSpec,
    Tool,
    TrenchConfig,
    VaultConfig,
)
from takeoff_engine.constants import TOOL_COLORS


def calibrated(reference=10, pixels=200, unit="m"):
    calibrator = ScaleCalibrator()
    calibrator.calibrate(reference, pixels, unit)
    return calibrator


SQUARE = [(0, 0), (100, 0), (100, 100), (0, 100)]


class TestFormulas:
    """Tests for the volume formulas."""

    def test_spoil_volume(self):
        assert calculate_spoil_volume(20, 2, 3) == pytest.approx(120 / 27)
        assert calculate_spoil_volume(27, 1, 1) == pytest.approx(1)

    def test_pothole_volume(self):
        """8 inches deep with the 0.1016 m bore radius."""
        volume = calculate_pothole_volume(0.2032)
        assert volume == pytest.approx(math.pi * 0.1016 ** 2 * 0.2032)
        assert volume == pytest.approx(0.00658, abs=2e-5)
        print(f"  [PASS] Pothole volume {volume:.5f} m3")

    def test_pothole_radius_override(self):
        assert calculate_pothole_volume(1, radius_m=1) == pytest.approx(math.pi)

    def test_rectangular_hole(self):
        dims = HoleDimensions(depth=24, depth_unit="inches", length=3, width=2)
        assert calculate_hole_volume(HoleShape.RECTANGLE, dims) == pytest.approx(12)

    def test_circular_hole(self):
        dims = HoleDimensions(depth=2, depth_unit="feet", diameter=2)
        assert calculate_hole_volume(HoleShape.CIRCLE, dims) == pytest.approx(2 * math.pi)

    def test_hole_missing_dimensions(self):
        with pytest.raises(MissingConfiguration):
            calculate_hole_volume(HoleShape.RECTANGLE, HoleDimensions(depth=1, length=2))
        with pytest.raises(MissingConfiguration):
            calculate_hole_volume(HoleShape.CIRCLE, HoleDimensions(depth=1))


class TestPathTypes:
    """Trench, bore shot and conduit derivation."""

    def setup_method(self):
        self.engine = QuantityDerivationEngine()
        self.calibration = calibrated()

    def test_trench_scenario(self):
        """scale 0.05, 400 px path, 2 x 3 cross-section."""
        measurement = self.engine.derive(
            "trench", [(0, 0), (400, 0)], self.calibration, TrenchConfig(width=2, depth=3)
        )
        assert measurement.type is MeasurementType.TRENCH
        assert measurement.length == pytest.approx(20)
        assert measurement.unit == "m"
        assert measurement.area is None
        assert isinstance(measurement.fields, TrenchFields)
        assert measurement.fields.spoil_volume == pytest.approx(4.444, abs=1e-3)
        assert measurement.id is None
        print("  [PASS] Trench length 20 m, spoil 4.444")

    def test_trench_length_uses_every_point(self):
        points = [(0, 0), (100, 0), (100, 100), (200, 100), (200, 200)]
        measurement = self.engine.derive(Tool.TRENCH, points, self.calibration, TrenchConfig(width=1, depth=1))
        assert measurement.length == pytest.approx(400 * 0.05)

    def test_trench_optional_quantities(self):
        config = TrenchConfig(
            width=2,
            depth=3,
            soil_type="clay",
            asphalt_removal=RemovalSpec(width=3, thickness=0.5),
            concrete_removal=RemovalSpec(width=4, thickness=0.25),
            backfill=BackfillSpec(material="slurry", width=2, depth=1.5),
            conduits=(ConduitSpec(size_in="2", count=3), ConduitSpec(size_in="4", count=1, material="HDPE")),
        )
        fields = self.engine.derive("trench", [(0, 0), (400, 0)], self.calibration, config).fields

        assert fields.asphalt_removal.volume == pytest.approx(20 * 3 * 0.5 / 27)
        assert fields.concrete_removal.volume == pytest.approx(20 * 4 * 0.25 / 27)
        assert fields.backfill.volume == pytest.approx(20 * 2 * 1.5 / 27)
        assert fields.backfill.material == "slurry"
        assert fields.conduits == config.conduits
        assert fields.soil_type == "clay"

    def test_trench_without_optional_quantities(self):
        fields = self.engine.derive(
            "trench", [(0, 0), (400, 0)], self.calibration, TrenchConfig(width=2, depth=3)
        ).fields
        assert fields.asphalt_removal is None
        assert fields.concrete_removal is None
        assert fields.backfill is None
        assert fields.conduits == ()

    def test_bore_shot_copies_conduits(self):
        config = BoreShotConfig(conduits=(ConduitSpec(size_in="2", count=2),))
        measurement = self.engine.derive("bore-shot", [(0, 0), (0, 200)], self.calibration, config)
        assert measurement.length == pytest.approx(10)
        assert isinstance(measurement.fields, ConduitRunFields)
        assert measurement.fields.conduits == config.conduits

    def test_length_invariant_under_reversal(self):
        points = [(0, 0), (30, 40), (90, 40), (90, 0)]
        config = TrenchConfig(width=1, depth=1)
        forward = self.engine.derive("trench", points, self.calibration, config)
        backward = self.engine.derive("trench", points[::-1], self.calibration, config)
        assert forward.length == pytest.approx(backward.length)

    def test_too_few_points(self):
        with pytest.raises(InvalidGeometry):
            self.engine.derive("trench", [(0, 0)], self.calibration, TrenchConfig(width=1, depth=1))

    def test_no_rounding(self):
        calibration = calibrated(1, 3, "ft")
        measurement = self.engine.derive(
            "bore-shot", [(0, 0), (1, 0)], calibration, BoreShotConfig()
        )
        assert measurement.length == 1 / 3


class TestAreaAndPoints:
    """Area, vault, note and hydro-excavation derivation."""

    def setup_method(self):
        self.engine = QuantityDerivationEngine()
        self.calibration = calibrated()

    def test_area_scenario(self):
        """100 x 100 px square at 0.05 m/px is 25 m2."""
        measurement = self.engine.derive("area", SQUARE, self.calibration)
        assert measurement.geometry.kind is GeometryKind.POLYGON
        assert measurement.area == pytest.approx(25)
        assert measurement.length == pytest.approx(20)
        assert measurement.fields == AreaFields()
        print("  [PASS] Area 25 m2")

    def test_area_invariant_under_winding(self):
        clockwise = self.engine.derive("area", SQUARE[::-1], self.calibration)
        rotated = self.engine.derive("area", SQUARE[2:] + SQUARE[:2], self.calibration)
        assert clockwise.area == pytest.approx(25)
        assert rotated.area == pytest.approx(25)

    def test_area_with_height(self):
        measurement = self.engine.derive("yardage", SQUARE, self.calibration, AreaConfig(height=2))
        assert measurement.type is MeasurementType.AREA
        assert measurement.fields.volume == pytest.approx(50)

    def test_vault_fields_from_configuration(self):
        config = VaultConfig(
            dimensions=Dimensions(length=4, width=3, depth=5),
            spoil_volume=2.5,
            backfill_volume=1.0,
            backfill_type="gravel",
            traffic_rated=True,
        )
        measurement = self.engine.derive("vault", [(10, 20), (30, 40)], self.calibration, config)
        assert measurement.geometry.coordinates == ((10.0, 20.0),)
        assert measurement.length is None
        assert isinstance(measurement.fields, VaultFields)
        assert measurement.fields.spoil_volume == 2.5
        assert measurement.fields.dimensions == config.dimensions
        assert measurement.fields.traffic_rated
        assert measurement.fields.asphalt_removal_volume is None

    def test_note(self):
        measurement = self.engine.derive("note", [(5, 5)], self.calibration, NoteConfig(text="check depth"))
        assert measurement.fields == NoteFields(text="check depth")
        assert measurement.length is None and measurement.area is None

    def test_note_without_calibration(self):
        """Point placements need no conversion."""
        measurement = self.engine.derive("note", [(5, 5)], ScaleCalibrator())
        assert measurement.fields == NoteFields(text="")

    def test_pothole_scenario(self):
        config = HydroExcavationConfig(
            excavation_type=HydroExcavationType.POTHOLING,
            potholing=PotholingData(average_depth=8, depth_unit="inches"),
        )
        measurement = self.engine.derive("hydro-excavation", [(1, 1)], self.calibration, config)
        assert measurement.type is MeasurementType.HYDRO_EXCAVATION_POTHOLE
        assert isinstance(measurement.fields, PotholeFields)
        assert measurement.fields.depth_m == pytest.approx(0.2032)
        assert measurement.fields.bore_radius_m == 0.1016
        assert measurement.fields.volume == pytest.approx(0.00658, abs=2e-5)
        print("  [PASS] Pothole depth 0.2032 m, volume 0.00658 m3")

    def test_pothole_needs_potholing_data(self):
        config = HydroExcavationConfig(excavation_type=HydroExcavationType.POTHOLING)
        with pytest.raises(MissingConfiguration):
            self.engine.derive("hydro-excavation", [(1, 1)], self.calibration, config)

    def test_hydro_hole(self):
        config = HydroExcavationConfig(
            excavation_type=HydroExcavationType.HOLE,
            hole_shape=HoleShape.RECTANGLE,
            hole_dimensions=HoleDimensions(depth=3, depth_unit="feet", length=2, width=2),
        )
        measurement = self.engine.derive("hydro-excavation", [(1, 1)], self.calibration, config)
        assert measurement.type is MeasurementType.HYDRO_EXCAVATION_HOLE
        assert isinstance(measurement.fields, HydroHoleFields)
        assert measurement.fields.volume == pytest.approx(12)

    def test_hydro_trench(self):
        config = HydroExcavationConfig(trench_width=2, trench_depth=3)
        measurement = self.engine.derive("hydro-excavation", [(0, 0), (400, 0)], self.calibration, config)
        assert measurement.type is MeasurementType.HYDRO_EXCAVATION_TRENCH
        assert isinstance(measurement.fields, HydroTrenchFields)
        assert measurement.fields.spoil_volume == pytest.approx(120 / 27)

    def test_hydro_trench_without_cross_section(self):
        measurement = self.engine.derive(
            "hydro-excavation", [(0, 0), (400, 0)], self.calibration, HydroExcavationConfig()
        )
        assert measurement.length == pytest.approx(20)
        assert measurement.fields.spoil_volume is None

    def test_colour_and_page(self):
        measurement = self.engine.derive("area", SQUARE, self.calibration, page=3)
        assert measurement.color == TOOL_COLORS["area"]
        assert measurement.page == 3
        custom = self.engine.derive("area", SQUARE, self.calibration, color="#000000")
        assert custom.color == "#000000"


class TestDerivationFailures:
    """Tests for derivation errors."""

    def setup_method(self):
        self.engine = QuantityDerivationEngine()

    def test_unsupported_tool(self):
        with pytest.raises(UnsupportedToolType):
            self.engine.derive("laser-scan", [(0, 0), (1, 1)], calibrated())

    def test_missing_configuration(self):
        with pytest.raises(MissingConfiguration):
            self.engine.derive("trench", [(0, 0), (400, 0)], calibrated(), None)
        with pytest.raises(MissingConfiguration):
            self.engine.derive("vault", [(0, 0)], calibrated(), None)
        print("  [PASS] MissingConfiguration for unconfigured tools")

    def test_wrong_configuration_class(self):
        with pytest.raises(TypeError):
            self.engine.derive("trench", [(0, 0), (400, 0)], calibrated(), VaultConfig())

    def test_not_calibrated(self):
        with pytest.raises(NotCalibrated):
            self.engine.derive("trench", [(0, 0), (400, 0)], ScaleCalibrator(), TrenchConfig(width=2, depth=3))

    def test_fallback_calibration(self):
        calibrator = ScaleCalibrator(fallback_pixels_per_unit=100, fallback_unit="m")
        measurement = self.engine.derive("trench", [(0, 0), (400, 0)], calibrator, TrenchConfig(width=2, depth=3))
        assert measurement.length == pytest.approx(4)

    def test_resolve_measurement_type(self):
        assert resolve_measurement_type("trench") is MeasurementType.TRENCH
        assert resolve_measurement_type("hydro-excavation-hole") is MeasurementType.HYDRO_EXCAVATION_HOLE
        with pytest.raises(MissingConfiguration):
            resolve_measurement_type("hydro-excavation")


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
