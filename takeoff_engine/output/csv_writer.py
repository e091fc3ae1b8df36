"""
CSV Writer Module

Flat export of measurements: id, type, label, length, area, unit, notes,
page. Type-specific fields are not included; use the JSON export for a
lossless copy.
"""

import csv
import logging
from pathlib import Path
from typing import Iterable, Optional

from ..calibration.unit_converter import is_known_unit
from ..measurement.models import Measurement

logger = logging.getLogger(__name__)


def write_measurements_to_csv(
    measurements: Iterable[Measurement],
    output_path,
    display_unit: Optional[str] = None,
    page: Optional[int] = None,
) -> int:
    """
    Write measurements to a CSV file.

    Args:
        measurements: Measurements in the order they should appear
        output_path: Destination file
        display_unit: Present lengths and areas in this unit (numeric
            conversion); None keeps each measurement's own unit, as do
            measurements in a unit with no conversion factor
        page: Only export measurements from this page

    Returns:
        Number of rows written (excluding the header)
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    rows = 0
    unconverted = set()
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(Measurement.csv_header())
        for measurement in measurements:
            if page is not None and measurement.page != page:
                continue
            if display_unit and display_unit != measurement.unit and not is_known_unit(measurement.unit):
                unconverted.add(measurement.unit)
            writer.writerow(measurement.to_csv_row(display_unit))
            rows += 1

    if unconverted:
        logger.warning(
            f"Kept original unit for {', '.join(sorted(unconverted))}: no conversion to {display_unit}"
        )

    logger.debug(f"Wrote {rows} CSV rows to {output_path}")
    return rows


def generate_csv_filename(name: str, output_dir) -> str:
    """
    Generate the CSV output path for a takeoff.

    Args:
        name: Source name (script or drawing file); only its stem is used
        output_dir: Output directory

    Returns:
        Path string like "<output_dir>/<stem>_measurements.csv"
    """
    stem = Path(name).stem or "takeoff"
    return str(Path(output_dir) / f"{stem}_measurements.csv")
