# Drawing session, undo history and session context module

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
)

from .drawing import (
    DrawingSession,
    SessionState,
    GestureOutcome,
    GestureResult,
)

from .context import TakeoffContext

__all__ = [
    # History
    "ActionHistory",
    "AddEntry",
    "DeleteEntry",
    "ConfigEntry",
    "CalibrationEntry",
    "RemoveMeasurement",
    "RestoreMeasurement",
    "RestoreConfiguration",
    "RestoreCalibration",
    # Drawing
    "DrawingSession",
    "SessionState",
    "GestureOutcome",
    "GestureResult",
    # Context
    "TakeoffContext",
]
