# Drawing tools and tool configuration module

from .types import (
    UnsupportedToolType,
    Tool,
    MeasurementType,
    HydroExcavationType,
    HoleShape,
)

from .config import (
    InvalidToolConfiguration,
    ConduitSpec,
    RemovalSpec,
    BackfillSpec,
    Dimensions,
    HoleDimensions,
    PotholingData,
    TrenchConfig,
    BoreShotConfig,
    ConduitConfig,
    HydroExcavationConfig,
    VaultConfig,
    AreaConfig,
    NoteConfig,
    CONFIG_TYPES,
    config_from_dict,
    config_to_dict,
)

from .registry import ToolConfigRegistry

__all__ = [
    # Types
    "UnsupportedToolType",
    "Tool",
    "MeasurementType",
    "HydroExcavationType",
    "HoleShape",
    # Configuration
    "InvalidToolConfiguration",
    "ConduitSpec",
    "RemovalSpec",
    "BackfillSpec",
    "Dimensions",
    "HoleDimensions",
    "PotholingData",
    "TrenchConfig",
    "BoreShotConfig",
    "ConduitConfig",
    "HydroExcavationConfig",
    "VaultConfig",
    "AreaConfig",
    "NoteConfig",
    "CONFIG_TYPES",
    "config_from_dict",
    "config_to_dict",
    # Registry
    "ToolConfigRegistry",
]
