# Measurement records, quantity derivation and storage module

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
    FIELDS_BY_TYPE,
)

from .derivation import (
    DerivationError,
    MissingConfiguration,
    UnsupportedToolType,
    QuantityDerivationEngine,
    resolve_measurement_type,
    calculate_spoil_volume,
    calculate_removal_volume,
    calculate_backfill_volume,
    calculate_pothole_volume,
    calculate_hole_volume,
)

from .store import MeasurementStore, ImmutableFieldError

__all__ = [
    # Models
    "Measurement",
    "RemovalQuantity",
    "BackfillQuantity",
    "TrenchFields",
    "ConduitRunFields",
    "VaultFields",
    "HydroTrenchFields",
    "HydroHoleFields",
    "PotholeFields",
    "AreaFields",
    "NoteFields",
    "FIELDS_BY_TYPE",
    # Derivation
    "DerivationError",
    "MissingConfiguration",
    "UnsupportedToolType",
    "QuantityDerivationEngine",
    "resolve_measurement_type",
    "calculate_spoil_volume",
    "calculate_removal_volume",
    "calculate_backfill_volume",
    "calculate_pothole_volume",
    "calculate_hole_volume",
    # Store
    "MeasurementStore",
    "ImmutableFieldError",
]
