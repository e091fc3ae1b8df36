# Takeoff measurement engine

__version__ = "1.0.0"

from .calibration import ScaleCalibrator, CalibrationState
from .measurement import Measurement, QuantityDerivationEngine, MeasurementStore
from .session import TakeoffContext, DrawingSession, ActionHistory
from .settings import EngineSettings, load_settings
from .tools import Tool, MeasurementType, ToolConfigRegistry

__all__ = [
    "__version__",
    "ScaleCalibrator",
    "CalibrationState",
    "Measurement",
    "QuantityDerivationEngine",
    "MeasurementStore",
    "TakeoffContext",
    "DrawingSession",
    "ActionHistory",
    "EngineSettings",
    "load_settings",
    "Tool",
    "MeasurementType",
    "ToolConfigRegistry",
]
