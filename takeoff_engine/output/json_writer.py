"""
JSON Writer Module

Lossless export of measurements, including every type-specific field, and
the matching importer.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .. import __version__ as ENGINE_VERSION
from ..measurement.models import Measurement

logger = logging.getLogger(__name__)


def build_measurement_json(measurement: Measurement) -> Dict[str, Any]:
    """JSON-ready mapping for one measurement (values are not rounded)."""
    return measurement.to_dict()


def build_output_json(
    measurements: Iterable[Measurement],
    source: Optional[str] = None,
    calibration: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the complete export document.

    Args:
        measurements: Measurements to export
        source: Name of the drawing or script the takeoff came from
        calibration: Calibration in effect at export time (CalibrationState.to_dict)

    Returns:
        Export document with metadata and the measurement list
    """
    items = [build_measurement_json(m) for m in measurements]
    return {
        "metadata": {
            "source": source,
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "engine_version": ENGINE_VERSION,
            "calibration": calibration,
            "measurement_count": len(items),
        },
        "measurements": items,
    }


def write_measurements_to_json(
    measurements: Iterable[Measurement],
    output_path,
    source: Optional[str] = None,
    calibration: Optional[Dict[str, Any]] = None,
) -> int:
    """
    Write measurements to a JSON file.

    Returns:
        Number of measurements written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    document = build_output_json(measurements, source=source, calibration=calibration)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)

    count = document["metadata"]["measurement_count"]
    logger.debug(f"Wrote {count} measurements to {output_path}")
    return count


def read_measurements_from_json(input_path) -> List[Measurement]:
    """
    Load measurements from a JSON export.

    Accepts either the full export document or a bare list of measurements.

    Raises:
        ValueError: If the document does not contain a measurement list
    """
    with open(input_path, encoding="utf-8") as f:
        document = json.load(f)

    if isinstance(document, dict):
        items = document.get("measurements")
    else:
        items = document

    if not isinstance(items, list):
        raise ValueError(f"No measurement list in {input_path}")

    return [Measurement.from_dict(item) for item in items]


def generate_json_filename(name: str, output_dir) -> str:
    """Path like "<output_dir>/<stem>_measurements.json"."""
    stem = Path(name).stem or "takeoff"
    return str(Path(output_dir) / f"{stem}_measurements.json")
