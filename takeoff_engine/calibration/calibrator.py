"""
Scale Calibrator Module

Maps on-screen pixel distances to real-world distances.

A calibration is the ratio between a known reference length on the drawing
and the number of pixels the user measured for it. All downstream length,
area and volume math goes through the active calibration. Measurements keep
the unit and numbers computed at their own commit time, so re-calibrating
never touches them.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from ..constants import DEFAULT_FALLBACK_UNIT
from ..geometry.calculator import scale_length, scale_area

logger = logging.getLogger(__name__)


class CalibrationError(Exception):
    """Base class for calibration failures."""
    pass


class InvalidCalibrationInput(CalibrationError, ValueError):
    """Raised when a reference or pixel length is not strictly positive."""
    pass


class NotCalibrated(CalibrationError):
    """Raised when converting with no calibration and no fallback."""
    pass


@dataclass(frozen=True)
class CalibrationState:
    """Active scale: real units per pixel plus the unit tag."""
    scale: float  # real units per pixel, > 0
    unit: str

    def to_dict(self) -> dict:
        return {"scale": self.scale, "unit": self.unit}

    @classmethod
    def from_dict(cls, data: dict) -> "CalibrationState":
        return cls(scale=float(data["scale"]), unit=str(data["unit"]))


def calculate_scale(reference_length: float, measured_pixel_length: float) -> float:
    """
    Calculate real units per pixel from a reference measurement.

    Longer reference distances give a more precise scale, so callers should
    calibrate against the largest practical distance on the drawing.

    Args:
        reference_length: Known real-world length
        measured_pixel_length: Pixels measured for that length

    Returns:
        Scale in real units per pixel

    Raises:
        InvalidCalibrationInput: If either length is not strictly positive
    """
    if reference_length is None or not reference_length > 0 or math.isinf(reference_length):
        raise InvalidCalibrationInput(
            f"Reference length must be greater than zero, got {reference_length}"
        )
    if measured_pixel_length is None or not measured_pixel_length > 0 or math.isinf(measured_pixel_length):
        raise InvalidCalibrationInput(
            f"Measured pixel length must be greater than zero, got {measured_pixel_length}"
        )

    return reference_length / measured_pixel_length


class ScaleCalibrator:
    """
    Holds the calibration of one drawing session.

    The host may configure a fallback conversion (pixels per unit) used while
    no explicit calibration exists. Without either, conversions fail with
    NotCalibrated.
    """

    def __init__(
        self,
        fallback_pixels_per_unit: Optional[float] = None,
        fallback_unit: str = DEFAULT_FALLBACK_UNIT
    ):
        if fallback_pixels_per_unit is not None and not fallback_pixels_per_unit > 0:
            raise InvalidCalibrationInput(
                f"Fallback pixels per unit must be greater than zero, got {fallback_pixels_per_unit}"
            )
        self._state: Optional[CalibrationState] = None
        self._fallback_pixels_per_unit = fallback_pixels_per_unit
        self._fallback_unit = fallback_unit

    @property
    def state(self) -> Optional[CalibrationState]:
        """The explicit calibration, or None if the drawing is uncalibrated."""
        return self._state

    @property
    def is_calibrated(self) -> bool:
        return self._state is not None

    @property
    def has_fallback(self) -> bool:
        return self._fallback_pixels_per_unit is not None

    @property
    def scale(self) -> float:
        """
        Real units per pixel currently in effect.

        Raises:
            NotCalibrated: If no calibration and no fallback exist
        """
        if self._state is not None:
            return self._state.scale
        if self._fallback_pixels_per_unit is not None:
            return 1.0 / self._fallback_pixels_per_unit
        raise NotCalibrated("No scale calibration set and no fallback configured")

    @property
    def unit(self) -> str:
        """Unit currently in effect."""
        if self._state is not None:
            return self._state.unit
        if self._fallback_pixels_per_unit is not None:
            return self._fallback_unit
        raise NotCalibrated("No scale calibration set and no fallback configured")

    def calibrate(
        self,
        reference_length: float,
        measured_pixel_length: float,
        unit: str
    ) -> CalibrationState:
        """
        Replace the active calibration.

        Args:
            reference_length: Known real-world length
            measured_pixel_length: Pixels measured on the drawing for it
            unit: Unit of reference_length

        Returns:
            The new CalibrationState

        Raises:
            InvalidCalibrationInput: If either length is not strictly positive
        """
        if not unit or not unit.strip():
            raise InvalidCalibrationInput("Calibration unit is required")

        scale = calculate_scale(reference_length, measured_pixel_length)
        self._state = CalibrationState(scale=scale, unit=unit.strip())

        logger.info(
            f"Calibration: {measured_pixel_length:.1f} px = {reference_length:g} {self._state.unit} "
            f"-> {scale:.6f} {self._state.unit}/px"
        )
        return self._state

    def calibrate_from_points(
        self,
        point1: Tuple[float, float],
        point2: Tuple[float, float],
        reference_length: float,
        unit: str
    ) -> CalibrationState:
        """
        Calibrate from two points picked on the drawing.

        Args:
            point1: First point (x, y) in pixels
            point2: Second point (x, y) in pixels
            reference_length: Real-world length between the points
            unit: Unit of reference_length

        Returns:
            The new CalibrationState
        """
        dx = point2[0] - point1[0]
        dy = point2[1] - point1[1]
        pixel_length = math.sqrt(dx * dx + dy * dy)
        return self.calibrate(reference_length, pixel_length, unit)

    def restore(self, state: Optional[CalibrationState]) -> None:
        """Put back a previous calibration (None returns to uncalibrated)."""
        self._state = state
        if state is None:
            logger.info("Calibration cleared")
        else:
            logger.info(f"Calibration restored: {state.scale:.6f} {state.unit}/px")

    def convert(self, pixels: float) -> float:
        """
        Convert a pixel length to real units.

        Raises:
            NotCalibrated: If no calibration and no fallback exist
        """
        return scale_length(pixels, self.scale)

    def convert_area(self, square_pixels: float) -> float:
        """
        Convert a pixel area to square real units.

        Area scales with the square of the linear conversion, so the same
        scale used for lengths is squared here.
        """
        return scale_area(square_pixels, self.scale)

    def describe(self) -> str:
        """Human readable scale ratio, e.g. "1:20" or "20.0000:1"."""
        if self._state is None:
            return ""

        scale = self._state.scale
        ratio = 1 / scale
        if ratio < 1:
            return f"{scale:.4f}:1"
        return f"1:{ratio:.0f}"
