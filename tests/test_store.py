#!/usr/bin/env python
"""
Measurement Store Tests

Tests for:
- Identity assignment and uniqueness across clear()
- Labels numbered per type
- remove / update returning None for unknown ids
- Notes-only updates
- Measurement model validation and dict/CSV conversion
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from takeoff_engine.calibration import ScaleCalibrator
from takeoff_engine.geometry import Geometry
from takeoff_engine.measurement import (
    ImmutableFieldError,
    Measurement,
    MeasurementStore,
    NoteFields,
    QuantityDerivationEngine,
    TrenchFields,
)
from takeoff_engine.tools import (
    ConduitSpec,
    HoleDimensions,
    HoleShape,
    HydroExcavationConfig,
    HydroExcavationType,
    MeasurementType,
    PotholingData,
    TrenchConfig,
    VaultConfig,
    Dimensions,
)


def create_test_measurements():
    """Derive one measurement of several types at 0.05 m/px."""
    calibrator = ScaleCalibrator()
    calibrator.calibrate(10, 200, "m")
    engine = QuantityDerivationEngine()

    trench_config = TrenchConfig(width=2, depth=3, conduits=(ConduitSpec(size_in="2", count=3),))
    hole_config = HydroExcavationConfig(
        excavation_type=HydroExcavationType.HOLE,
        hole_shape=HoleShape.CIRCLE,
        hole_dimensions=HoleDimensions(depth=18, depth_unit="inches", diameter=2),
    )
    pothole_config = HydroExcavationConfig(
        excavation_type=HydroExcavationType.POTHOLING,
        potholing=PotholingData(average_depth=8, surface_type="asphalt", include_restoration=True),
    )
    vault_config = VaultConfig(dimensions=Dimensions(4, 3, 5), spoil_volume=2.5, traffic_rated=True)

    return [
        engine.derive("trench", [(0, 0), (400, 0)], calibrator, trench_config, page=1),
        engine.derive("trench", [(0, 0), (0, 200)], calibrator, trench_config, page=1),
        engine.derive("area", [(0, 0), (100, 0), (100, 100), (0, 100)], calibrator, page=2),
        engine.derive("hydro-excavation", [(5, 5)], calibrator, hole_config),
        engine.derive("hydro-excavation", [(6, 6)], calibrator, pothole_config),
        engine.derive("vault", [(7, 7)], calibrator, vault_config),
        engine.derive("note", [(8, 8)], calibrator),
    ]


class TestMeasurementStore:
    """Tests for MeasurementStore."""

    def test_add_assigns_id_label_and_timestamp(self):
        store = MeasurementStore()
        stored = store.add(create_test_measurements()[0])
        assert stored.id == "m_0001"
        assert stored.label == "Trench 1"
        assert stored.created_at
        assert store.get("m_0001") == stored
        print("  [PASS] add() assigns id, label and created_at")

    def test_insertion_order_and_labels(self):
        store = MeasurementStore()
        for measurement in create_test_measurements():
            store.add(measurement)

        labels = [m.label for m in store.list()]
        assert labels == [
            "Trench 1", "Trench 2", "Area 1", "Hydro Hole 1", "Pothole 1", "Vault 1", "Note 1",
        ]
        assert len(store) == 7

    def test_existing_label_kept(self):
        store = MeasurementStore()
        measurement = create_test_measurements()[0]
        stored = store.add(Measurement(
            type=measurement.type,
            geometry=measurement.geometry,
            unit=measurement.unit,
            fields=measurement.fields,
            label="Main Street run",
        ))
        assert stored.label == "Main Street run"

    def test_ids_unique_across_clear(self):
        """Identities are never reused, even after clear()."""
        store = MeasurementStore()
        first = store.add(create_test_measurements()[0])
        store.clear()
        second = store.add(create_test_measurements()[0])
        assert first.id != second.id
        assert len(store) == 1
        print("  [PASS] No id reuse after clear()")

    def test_cleared_id_not_found(self):
        store = MeasurementStore()
        stored = store.add(create_test_measurements()[0])
        store.clear()
        assert store.remove(stored.id) is None
        assert store.update(stored.id, notes="x") is None
        assert stored.id not in store

    def test_imported_id_kept_unless_issued(self):
        store = MeasurementStore()
        measurement = create_test_measurements()[0]
        imported = store.add(measurement.with_id("survey-17"))
        assert imported.id == "survey-17"
        duplicate = store.add(measurement.with_id("survey-17"))
        assert duplicate.id != "survey-17"

    def test_remove(self):
        store = MeasurementStore()
        stored = store.add(create_test_measurements()[0])
        assert store.remove(stored.id) == stored
        assert store.remove(stored.id) is None
        assert store.remove("missing") is None
        assert len(store) == 0

    def test_update_notes(self):
        store = MeasurementStore()
        stored = store.add(create_test_measurements()[0])
        updated = store.update(stored.id, notes="under sidewalk")
        assert updated.notes == "under sidewalk"
        assert updated.length == stored.length
        assert store.get(stored.id).notes == "under sidewalk"
        assert store.update(stored.id, {"notes": None}).notes == ""

    def test_update_other_fields_rejected(self):
        """Type, geometry and metrics are fixed at commit time."""
        store = MeasurementStore()
        stored = store.add(create_test_measurements()[0])
        with pytest.raises(ImmutableFieldError):
            store.update(stored.id, length=99)
        with pytest.raises(ImmutableFieldError):
            store.update(stored.id, {"notes": "ok", "unit": "ft"})
        assert store.get(stored.id) == stored

    def test_iteration_is_snapshot(self):
        store = MeasurementStore()
        for measurement in create_test_measurements()[:3]:
            store.add(measurement)
        for measurement in store:
            store.remove(measurement.id)
        assert len(store) == 0


class TestMeasurementModel:
    """Tests for the Measurement record."""

    def test_fields_must_match_type(self):
        with pytest.raises(TypeError):
            Measurement(
                type=MeasurementType.TRENCH,
                geometry=Geometry.point(0, 0),
                unit="m",
                fields=NoteFields(text="x"),
            )

    def test_geometry_must_match_type(self):
        with pytest.raises(TypeError):
            Measurement(
                type=MeasurementType.TRENCH,
                geometry=Geometry.point(0, 0),
                unit="m",
                fields=TrenchFields(width=1, depth=1, spoil_volume=0),
            )

    def test_measurement_is_frozen(self):
        measurement = create_test_measurements()[0]
        with pytest.raises(AttributeError):
            measurement.notes = "x"

    def test_dict_round_trip_all_types(self):
        """Every type-specific field survives to_dict / from_dict."""
        store = MeasurementStore()
        for measurement in create_test_measurements():
            stored = store.add(measurement)
            assert Measurement.from_dict(stored.to_dict()) == stored
        print("  [PASS] Dict round trip for every measurement type")

    def test_csv_row(self):
        store = MeasurementStore()
        stored = store.update(store.add(create_test_measurements()[0]).id, notes="n")
        assert Measurement.csv_header() == ["id", "type", "label", "length", "area", "unit", "notes", "page"]
        assert stored.to_csv_row() == ["m_0001", "trench", "Trench 1", 20.0, "", "m", "n", 1]

    def test_csv_row_display_unit_converts(self):
        measurement = create_test_measurements()[2]
        row = measurement.to_csv_row(display_unit="ft")
        assert row[3] == round(20 / 0.3048, 2)
        assert row[4] == round(25 / 0.3048 ** 2, 2)
        assert row[5] == "ft"


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
