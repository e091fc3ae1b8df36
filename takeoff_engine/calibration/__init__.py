# Scale calibration and unit conversion module

from .calibrator import (
    CalibrationError,
    InvalidCalibrationInput,
    NotCalibrated,
    CalibrationState,
    ScaleCalibrator,
    calculate_scale,
)

from .unit_converter import (
    METERS_PER_UNIT,
    normalize_unit,
    is_known_unit,
    convert_length,
    convert_area,
    convert_volume,
    depth_to_meters,
    format_length,
    format_area,
    format_volume,
    parse_calibration_string,
)

__all__ = [
    # Calibrator
    "CalibrationError",
    "InvalidCalibrationInput",
    "NotCalibrated",
    "CalibrationState",
    "ScaleCalibrator",
    "calculate_scale",
    # Unit Converter
    "METERS_PER_UNIT",
    "normalize_unit",
    "is_known_unit",
    "convert_length",
    "convert_area",
    "convert_volume",
    "depth_to_meters",
    "format_length",
    "format_area",
    "format_volume",
    "parse_calibration_string",
]
