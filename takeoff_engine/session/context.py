"""
Takeoff Context Module

One TakeoffContext per open drawing. It owns the calibration, tool
registry, measurement store, undo history and drawing session, and is the
only place they are wired together. Hosts keep a reference to the context
and route pointer events and commands through it.
"""

import logging
from typing import List, Optional, Sequence

from ..calibration.calibrator import ScaleCalibrator, CalibrationState
from ..constants import DEFAULT_HIT_TOLERANCE_PX
from ..geometry.calculator import hit_test
from ..measurement.derivation import QuantityDerivationEngine
from ..measurement.models import Measurement
from ..measurement.store import MeasurementStore
from ..tools.registry import ToolConfigRegistry
from ..tools.types import Tool
from .drawing import DrawingSession
from .history import (
    ActionHistory,
    AddEntry,
    DeleteEntry,
    ConfigEntry,
    CalibrationEntry,
    RemoveMeasurement,
    RestoreMeasurement,
    RestoreConfiguration,
    RestoreCalibration,
    ReversalInstruction,
)

logger = logging.getLogger(__name__)


class TakeoffContext:
    """
    Session state for one drawing.

    Args:
        calibrator: Scale calibrator (a fresh uncalibrated one by default)
        history_max_depth: Optional undo cap
        hit_tolerance_px: Selection tolerance in screen pixels
    """

    def __init__(
        self,
        calibrator: Optional[ScaleCalibrator] = None,
        history_max_depth: Optional[int] = None,
        hit_tolerance_px: float = DEFAULT_HIT_TOLERANCE_PX,
    ):
        self.calibrator = calibrator or ScaleCalibrator()
        self.registry = ToolConfigRegistry()
        self.store = MeasurementStore()
        self.history = ActionHistory(max_depth=history_max_depth)
        self.engine = QuantityDerivationEngine()
        self.drawing = DrawingSession(self.registry, self.commit_gesture)
        self.hit_tolerance_px = hit_tolerance_px
        self.page: Optional[int] = None

    @classmethod
    def from_settings(cls, settings) -> "TakeoffContext":
        """Build a context from EngineSettings, applying tool defaults."""
        calibrator = ScaleCalibrator(
            fallback_pixels_per_unit=settings.fallback_pixels_per_unit,
            fallback_unit=settings.fallback_unit,
        )
        context = cls(
            calibrator=calibrator,
            history_max_depth=settings.history_max_depth,
            hit_tolerance_px=settings.hit_tolerance_px,
        )
        for tool, config in settings.tool_defaults.items():
            context.registry.configure(tool, config)
        return context

    # -------------------------------------------------------------------------
    # Calibration and tools
    # -------------------------------------------------------------------------

    def calibrate(self, reference_length: float, measured_pixel_length: float, unit: str) -> CalibrationState:
        """Replace the calibration; the previous one becomes undoable."""
        previous = self.calibrator.state
        state = self.calibrator.calibrate(reference_length, measured_pixel_length, unit)
        self.history.record(CalibrationEntry(previous_state=previous))
        return state

    def calibrate_from_points(self, point1, point2, reference_length: float, unit: str) -> CalibrationState:
        previous = self.calibrator.state
        state = self.calibrator.calibrate_from_points(point1, point2, reference_length, unit)
        self.history.record(CalibrationEntry(previous_state=previous))
        return state

    def select_tool(self, tool) -> Optional[Tool]:
        return self.registry.select_tool(tool)

    def configure_tool(self, tool, config) -> None:
        """
        Attach a configuration to a tool.

        Replacing an existing configuration is recorded for undo; attaching
        the first one is not.
        """
        tool = Tool.from_string(tool)
        previous = self.registry.configure(tool, config)
        if previous is not None:
            self.history.record(ConfigEntry(tool=tool, previous_config=previous))

    # -------------------------------------------------------------------------
    # Pointer events
    # -------------------------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> bool:
        return self.drawing.pointer_down(x, y)

    def pointer_move(self, x: float, y: float) -> bool:
        return self.drawing.pointer_move(x, y)

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None):
        return self.drawing.pointer_up(x, y)

    def pointer_leave(self):
        return self.drawing.pointer_leave()

    # -------------------------------------------------------------------------
    # Measurements
    # -------------------------------------------------------------------------

    def commit_gesture(self, tool, points: Sequence[Sequence[float]]) -> Measurement:
        """
        Derive, store and record a finished gesture.

        Derivation errors propagate; nothing is stored in that case.
        """
        tool = Tool.from_string(tool)
        config = self.registry.get_configuration(tool)
        measurement = self.engine.derive(tool, points, self.calibrator, config, page=self.page)

        stored = self.store.add(measurement)
        self.history.record(AddEntry(measurement_id=stored.id))
        logger.info(f"Committed {stored.label} ({stored.id})")
        return stored

    def add_measurement(self, measurement: Measurement) -> Measurement:
        """Add an existing measurement (e.g. from a JSON import), undoable."""
        stored = self.store.add(measurement)
        self.history.record(AddEntry(measurement_id=stored.id))
        return stored

    def delete_measurement(self, measurement_id: str) -> Optional[Measurement]:
        """
        Delete a measurement.

        Returns:
            The deleted measurement, or None if the id is unknown
        """
        removed = self.store.remove(measurement_id)
        if removed is None:
            logger.warning(f"Delete ignored, no measurement {measurement_id}")
            return None
        self.history.record(DeleteEntry(snapshot=removed))
        logger.info(f"Deleted {removed.label} ({measurement_id})")
        return removed

    def update_notes(self, measurement_id: str, notes: str) -> Optional[Measurement]:
        updated = self.store.update(measurement_id, notes=notes)
        if updated is None:
            logger.warning(f"Notes update ignored, no measurement {measurement_id}")
        return updated

    def measurements(self) -> List[Measurement]:
        return self.store.list()

    def hit_test(self, x: float, y: float, zoom: float = 1.0) -> Optional[str]:
        """Id of the measurement under a click, or None."""
        return hit_test((x, y), self.store.list(), zoom=zoom, tolerance=self.hit_tolerance_px)

    # -------------------------------------------------------------------------
    # Undo
    # -------------------------------------------------------------------------

    def undo(self) -> Optional[ReversalInstruction]:
        """
        Reverse the most recent action.

        Returns:
            The instruction that was applied, or None when there was
            nothing to undo
        """
        instruction = self.history.undo_last()
        if instruction is None:
            logger.debug("Nothing to undo")
            return None

        if isinstance(instruction, RemoveMeasurement):
            self.store.remove(instruction.measurement_id)
            logger.info(f"Undo: removed {instruction.measurement_id}")

        elif isinstance(instruction, RestoreMeasurement):
            restored = self.store.add(instruction.snapshot)
            if instruction.original_id is not None:
                self.history.remap_id(instruction.original_id, restored.id)
            logger.info(f"Undo: restored {restored.label} as {restored.id}")

        elif isinstance(instruction, RestoreConfiguration):
            self.registry.configure(instruction.tool, instruction.config)
            logger.info(f"Undo: restored {instruction.tool.value} configuration")

        elif isinstance(instruction, RestoreCalibration):
            self.calibrator.restore(instruction.state)
            logger.info("Undo: restored previous calibration")

        return instruction

    def clear(self) -> int:
        """
        Remove every measurement and forget the undo history.

        Returns:
            Number of measurements removed
        """
        count = self.store.clear()
        self.history.clear()
        return count
