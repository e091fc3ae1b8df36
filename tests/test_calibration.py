#!/usr/bin/env python
"""
Calibration Tests

Tests for:
- ScaleCalibrator calibrate / convert / fallback
- Invalid calibration input
- Unit conversion and formatting
- Calibration string parsing
"""

import math
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from takeoff_engine.calibration import (
    CalibrationState,
    InvalidCalibrationInput,
    NotCalibrated,
    ScaleCalibrator,
    calculate_scale,
    convert_area,
    convert_length,
    convert_volume,
    depth_to_meters,
    format_area,
    format_length,
    format_volume,
    normalize_unit,
    parse_calibration_string,
)


class TestScaleCalibrator:
    """Tests for ScaleCalibrator."""

    def test_calibrate_sets_scale(self):
        """Scale is reference length over pixel length."""
        calibrator = ScaleCalibrator()
        state = calibrator.calibrate(10, 200, "m")
        assert state == CalibrationState(scale=0.05, unit="m")
        assert calibrator.is_calibrated
        assert calibrator.unit == "m"
        print("  [PASS] calibrate(10, 200, m) -> 0.05 m/px")

    @pytest.mark.parametrize("reference, pixels", [
        (1, 1), (10, 200), (0.3048, 37.5), (1234.5, 0.75), (1e-3, 1e4),
    ])
    def test_round_trip(self, reference, pixels):
        """Converting the measured pixel length gives the reference back."""
        calibrator = ScaleCalibrator()
        calibrator.calibrate(reference, pixels, "ft")
        assert calibrator.convert(pixels) == pytest.approx(reference)

    def test_larger_pixel_length_gives_smaller_scale(self):
        """Same reference measured over more pixels is a finer scale."""
        assert calculate_scale(10, 400) < calculate_scale(10, 200)
        print("  [PASS] Longer reference gives finer scale")

    @pytest.mark.parametrize("reference, pixels", [
        (0, 100), (-5, 100), (10, 0), (10, -1), (math.inf, 100), (10, math.nan),
    ])
    def test_invalid_input_rejected(self, reference, pixels):
        """Non-positive lengths raise and never fall back to a default."""
        calibrator = ScaleCalibrator()
        with pytest.raises(InvalidCalibrationInput):
            calibrator.calibrate(reference, pixels, "m")
        assert not calibrator.is_calibrated

    def test_invalid_input_keeps_previous_calibration(self):
        """A failed calibrate leaves the active calibration untouched."""
        calibrator = ScaleCalibrator()
        calibrator.calibrate(10, 200, "m")
        with pytest.raises(InvalidCalibrationInput):
            calibrator.calibrate(0, 200, "ft")
        assert calibrator.state == CalibrationState(scale=0.05, unit="m")
        print("  [PASS] Failed calibrate keeps previous state")

    def test_empty_unit_rejected(self):
        with pytest.raises(InvalidCalibrationInput):
            ScaleCalibrator().calibrate(10, 200, "  ")

    def test_invalid_input_is_value_error(self):
        """Hosts catching ValueError also catch bad calibration input."""
        with pytest.raises(ValueError):
            calculate_scale(-1, 10)

    def test_convert_without_calibration_raises(self):
        """No calibration and no fallback raises NotCalibrated."""
        calibrator = ScaleCalibrator()
        with pytest.raises(NotCalibrated):
            calibrator.convert(100)
        with pytest.raises(NotCalibrated):
            _ = calibrator.unit
        print("  [PASS] NotCalibrated without scale or fallback")

    def test_fallback_used_until_calibrated(self):
        """Host fallback of 100 px per unit applies until calibrate()."""
        calibrator = ScaleCalibrator(fallback_pixels_per_unit=100, fallback_unit="m")
        assert not calibrator.is_calibrated
        assert calibrator.convert(250) == pytest.approx(2.5)
        assert calibrator.unit == "m"

        calibrator.calibrate(1, 10, "ft")
        assert calibrator.convert(250) == pytest.approx(25)
        assert calibrator.unit == "ft"
        print("  [PASS] Fallback conversion then calibrated conversion")

    def test_invalid_fallback_rejected(self):
        with pytest.raises(InvalidCalibrationInput):
            ScaleCalibrator(fallback_pixels_per_unit=0)

    def test_convert_area_squares_scale(self):
        """Area uses the square of the linear scale."""
        calibrator = ScaleCalibrator()
        calibrator.calibrate(10, 200, "m")
        assert calibrator.convert_area(100 * 100) == pytest.approx(25)
        print("  [PASS] 100x100 px at 0.05 m/px = 25 m2")

    def test_calibrate_from_points(self):
        calibrator = ScaleCalibrator()
        state = calibrator.calibrate_from_points((0, 0), (30, 40), 10, "ft")
        assert state.scale == pytest.approx(0.2)

    def test_restore(self):
        calibrator = ScaleCalibrator()
        first = calibrator.calibrate(10, 200, "m")
        calibrator.calibrate(1, 1, "ft")
        calibrator.restore(first)
        assert calibrator.state == first
        calibrator.restore(None)
        assert not calibrator.is_calibrated

    def test_describe(self):
        """Ratio text for coarse and fine scales."""
        calibrator = ScaleCalibrator()
        assert calibrator.describe() == ""
        calibrator.calibrate(1, 20, "m")
        assert calibrator.describe() == "1:20"
        calibrator.calibrate(20, 1, "m")
        assert calibrator.describe() == "20.0000:1"

    def test_state_dict_round_trip(self):
        state = CalibrationState(scale=0.05, unit="m")
        assert CalibrationState.from_dict(state.to_dict()) == state


class TestUnitConverter:
    """Tests for unit conversion helpers."""

    def test_normalize_unit(self):
        assert normalize_unit("Feet") == "ft"
        assert normalize_unit(" meters ") == "m"
        assert normalize_unit('"') == "in"
        with pytest.raises(ValueError):
            normalize_unit("furlong")

    def test_convert_length(self):
        assert convert_length(1, "ft", "m") == pytest.approx(0.3048)
        assert convert_length(3, "ft", "yd") == pytest.approx(1)
        assert convert_length(12, "in", "ft") == pytest.approx(1)
        assert convert_length(2.5, "m", "m") == 2.5
        print("  [PASS] Length conversions")

    def test_convert_length_is_numeric_not_relabel(self):
        """Feet shown as metres are converted, never relabelled."""
        assert convert_length(10, "ft", "m") != 10
        assert convert_length(10, "ft", "m") == pytest.approx(3.048)

    def test_convert_area_and_volume(self):
        assert convert_area(1, "m", "ft") == pytest.approx(1 / 0.3048 ** 2)
        assert convert_area(9, "ft", "yd") == pytest.approx(1)
        assert convert_volume(27, "ft", "yd") == pytest.approx(1)

    def test_depth_to_meters(self):
        assert depth_to_meters(8, "inches") == pytest.approx(0.2032)
        assert depth_to_meters(2, "feet") == pytest.approx(0.6096)

    def test_formatting(self):
        assert format_length(20, "m") == "20.00 m"
        assert format_area(150.5, "ft") == "150.5 SF"
        assert format_area(25, "m") == "25.0 m²"
        assert format_volume(120 / 27) == "4.44 CY"

    def test_parse_calibration_string(self):
        p1, p2, length, unit = parse_calibration_string("100,200:300,200=10m")
        assert p1 == (100.0, 200.0)
        assert p2 == (300.0, 200.0)
        assert length == 10.0
        assert unit == "m"

    def test_parse_calibration_string_defaults_to_feet(self):
        _, _, length, unit = parse_calibration_string("0,0:10,0=25")
        assert length == 25.0
        assert unit == "ft"

    def test_parse_calibration_string_invalid(self):
        with pytest.raises(ValueError):
            parse_calibration_string("not a calibration")


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
