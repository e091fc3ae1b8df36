"""
Quantity Summary Module

Presentation-time totals: conduit footage per run and per-type aggregates
for the takeoff summary. Nothing here is stored on a measurement, so totals
always follow the current length.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..measurement.models import (
    Measurement,
    TrenchFields,
    ConduitRunFields,
    VaultFields,
    HydroTrenchFields,
    HydroHoleFields,
    PotholeFields,
    AreaFields,
)
from ..calibration.unit_converter import format_length, format_area, format_volume
from ..constants import TOOL_DISPLAY_NAMES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConduitTotal:
    """Total footage for one conduit line along a run."""
    size_in: str
    material: str
    count: int
    total_length: float


@dataclass
class TypeSummary:
    """Aggregated quantities for one measurement type."""
    type: str
    count: int = 0
    total_length: float = 0.0
    total_area: float = 0.0
    total_volume: float = 0.0
    unit: Optional[str] = None
    mixed_units: bool = False

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "count": self.count,
            "total_length": self.total_length,
            "total_area": self.total_area,
            "total_volume": self.total_volume,
            "unit": self.unit,
            "mixed_units": self.mixed_units,
        }


def conduit_totals(measurement: Measurement) -> List[ConduitTotal]:
    """
    Conduit footage along a run: count x length for each conduit line.

    Returns an empty list for measurements without conduits or length.
    """
    fields = measurement.fields
    if not isinstance(fields, (TrenchFields, ConduitRunFields, HydroTrenchFields)):
        return []
    if measurement.length is None:
        return []

    return [
        ConduitTotal(
            size_in=conduit.size_in,
            material=conduit.material,
            count=conduit.count,
            total_length=conduit.count * measurement.length,
        )
        for conduit in fields.conduits
    ]


def primary_volume(measurement: Measurement) -> Optional[float]:
    """
    Headline volume of a measurement, or None if it has none.

    trench / hydro trench / vault: spoil volume (cubic yards)
    hydro hole: cubic feet
    pothole: cubic meters
    area: area x height
    """
    fields = measurement.fields
    if isinstance(fields, (TrenchFields, HydroTrenchFields, VaultFields)):
        return fields.spoil_volume
    if isinstance(fields, (HydroHoleFields, PotholeFields, AreaFields)):
        return fields.volume
    return None


def summarize_measurements(measurements: Iterable[Measurement]) -> Dict[str, TypeSummary]:
    """
    Aggregate count, length, area and volume per measurement type.

    Returns:
        Ordered mapping of type value -> TypeSummary, in first-seen order
    """
    summary: Dict[str, TypeSummary] = OrderedDict()

    for measurement in measurements:
        key = measurement.type.value
        entry = summary.get(key)
        if entry is None:
            entry = summary[key] = TypeSummary(type=key, unit=measurement.unit)

        entry.count += 1
        if measurement.unit != entry.unit:
            entry.mixed_units = True
        if measurement.length is not None:
            entry.total_length += measurement.length
        if measurement.area is not None:
            entry.total_area += measurement.area

        volume = primary_volume(measurement)
        if volume is not None:
            entry.total_volume += volume

    mixed = [key for key, entry in summary.items() if entry.mixed_units]
    if mixed:
        logger.warning(f"Summary totals mix units for: {', '.join(mixed)}")

    return summary


def _volume_label(type_value: str, unit: Optional[str]) -> str:
    if type_value == "hydro-excavation-hole":
        return "CF"
    if type_value == "hydro-excavation-pothole":
        return "m³"
    if type_value == "area":
        return f"cu {unit}" if unit else "cu"
    return "CY"


def format_summary(summary: Dict[str, TypeSummary]) -> str:
    """Plain text table of a summary."""
    lines = [f"{'Type':<16} {'Count':>6} {'Length':>14} {'Area':>14} {'Volume':>14}"]
    lines.append("-" * 68)
    for entry in summary.values():
        name = TOOL_DISPLAY_NAMES.get(entry.type, entry.type)
        unit = entry.unit or ""
        length = format_length(entry.total_length, unit) if entry.total_length else "-"
        area = format_area(entry.total_area, unit) if entry.total_area else "-"
        volume = (
            format_volume(entry.total_volume, _volume_label(entry.type, entry.unit))
            if entry.total_volume else "-"
        )
        lines.append(f"{name:<16} {entry.count:>6} {length:>14} {area:>14} {volume:>14}")
    return "\n".join(lines)
