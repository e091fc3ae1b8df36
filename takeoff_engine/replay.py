"""
Session Replay Module

Replays a recorded takeoff script through a TakeoffContext and writes the
exports. A script is a JSON document:

    {
      "source": "site-plan.pdf",
      "events": [
        {"event": "calibrate", "reference_length": 10, "pixel_length": 200, "unit": "m"},
        {"event": "configure", "tool": "trench", "config": {"width": 2, "depth": 3}},
        {"event": "select", "tool": "trench"},
        {"event": "gesture", "points": [[0, 0], [400, 0]]},
        {"event": "notes", "id": "m_0001", "text": "along curb"},
        {"event": "undo"}
      ]
    }

Supported events: calibrate (reference/pixel lengths, two points, or a
"x1,y1:x2,y2=10m" string), configure, select, page, gesture (points, with
"leave": true to cancel), delete, notes, undo, clear.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .calibration.calibrator import CalibrationError
from .calibration.unit_converter import parse_calibration_string
from .geometry.shapes import InvalidGeometry
from .measurement.derivation import DerivationError
from .measurement.models import Measurement
from .output.csv_writer import write_measurements_to_csv, generate_csv_filename
from .output.json_writer import write_measurements_to_json, generate_json_filename
from .output.summary import summarize_measurements, format_summary
from .session.context import TakeoffContext
from .settings import load_settings
from .tools.config import InvalidToolConfiguration
from .tools.types import UnsupportedToolType

logger = logging.getLogger(__name__)

# Errors a host reports for a single user action and then carries on
RECOVERABLE_ERRORS = (
    CalibrationError,
    DerivationError,
    InvalidGeometry,
    InvalidToolConfiguration,
    UnsupportedToolType,
)


class ReplayError(Exception):
    """Raised for a malformed script or, in strict mode, a failed event."""
    pass


@dataclass
class ReplayConfig:
    """Configuration for a replay run."""
    script_path: str
    output_dir: str
    settings_path: Optional[str] = None
    calibration: Optional[str] = None
    display_unit: Optional[str] = None
    write_csv: bool = True
    write_json: bool = True
    strict: bool = False
    verbose: bool = False


@dataclass
class ReplayResult:
    """Result of a replay run."""
    script_path: str
    output_dir: str
    events_processed: int
    measurements: List[Measurement]
    warnings: List[str] = field(default_factory=list)
    csv_path: Optional[str] = None
    json_path: Optional[str] = None
    processing_time: float = 0.0


def load_script(script_path) -> Dict[str, Any]:
    """
    Read a replay script.

    Raises:
        ReplayError: If the file is not a JSON object with an event list
    """
    try:
        with open(script_path, encoding="utf-8") as f:
            script = json.load(f)
    except json.JSONDecodeError as e:
        raise ReplayError(f"Script is not valid JSON: {e}") from e

    if isinstance(script, list):
        script = {"events": script}
    if not isinstance(script, dict) or not isinstance(script.get("events"), list):
        raise ReplayError(f"Script has no event list: {script_path}")
    return script


def apply_event(context: TakeoffContext, event: Dict[str, Any]) -> Optional[str]:
    """
    Apply one scripted event to a context.

    Returns:
        A warning message when the event had no effect, otherwise None

    Raises:
        ReplayError: Unknown event or missing keys
    """
    kind = event.get("event")

    try:
        if kind == "calibrate":
            if "calibration" in event:
                p1, p2, length, unit = parse_calibration_string(event["calibration"])
                context.calibrate_from_points(p1, p2, length, unit)
            elif "points" in event:
                p1, p2 = event["points"]
                context.calibrate_from_points(p1, p2, event["reference_length"], event["unit"])
            else:
                context.calibrate(event["reference_length"], event["pixel_length"], event["unit"])

        elif kind == "configure":
            config = event.get("config")
            if config is not None and not isinstance(config, dict):
                raise InvalidToolConfiguration(
                    f"configuration for {event['tool']} must be a mapping, got {type(config).__name__}"
                )
            context.configure_tool(event["tool"], config)

        elif kind == "select":
            context.select_tool(event.get("tool"))

        elif kind == "page":
            context.page = event.get("page")

        elif kind == "gesture":
            return _replay_gesture(context, event)

        elif kind == "delete":
            if context.delete_measurement(event["id"]) is None:
                return f"delete: no measurement {event['id']}"

        elif kind == "notes":
            if context.update_notes(event["id"], event.get("text", "")) is None:
                return f"notes: no measurement {event['id']}"

        elif kind == "undo":
            if context.undo() is None:
                return "undo: nothing to undo"

        elif kind == "clear":
            context.clear()

        else:
            raise ReplayError(f"Unknown event: {kind!r}")

    except KeyError as e:
        raise ReplayError(f"{kind} event is missing {e}") from e

    return None


def _replay_gesture(context: TakeoffContext, event: Dict[str, Any]) -> Optional[str]:
    points = event.get("points") or []
    if not points:
        raise ReplayError("gesture event needs at least one point")

    first = points[0]
    if not context.pointer_down(first[0], first[1]):
        active = context.registry.active_tool
        return f"gesture refused ({active.value if active else 'no tool'})"

    for point in points[1:]:
        context.pointer_move(point[0], point[1])

    if event.get("leave"):
        context.pointer_leave()
        return None

    result = context.pointer_up()
    if not result.committed:
        return f"gesture discarded ({result.tool.value}, {len(result.points)} point(s))"
    return None


def run_replay(args) -> ReplayResult:
    """
    Run a replay script end to end.

    Args:
        args: Parsed command-line arguments

    Returns:
        ReplayResult with the final measurements and output paths
    """
    start_time = time.time()

    config = ReplayConfig(
        script_path=args.input,
        output_dir=args.output,
        settings_path=getattr(args, "settings", None),
        calibration=getattr(args, "calib", None),
        display_unit=getattr(args, "display_unit", None),
        write_csv=not getattr(args, "no_csv", False),
        write_json=not getattr(args, "no_json", False),
        strict=getattr(args, "strict", False),
        verbose=getattr(args, "verbose", False),
    )

    settings = load_settings(config.settings_path)

    log_level = logging.DEBUG if config.verbose else getattr(logging, settings.log_level)
    logging.basicConfig(level=log_level, format="%(message)s")

    logger.info(f"Replaying: {config.script_path}")

    script = load_script(config.script_path)
    context = TakeoffContext.from_settings(settings)

    if config.calibration:
        p1, p2, length, unit = parse_calibration_string(config.calibration)
        context.calibrate_from_points(p1, p2, length, unit)

    warnings = []
    processed = 0
    for index, event in enumerate(script["events"], start=1):
        if not isinstance(event, dict):
            raise ReplayError(f"Event {index} is not an object")
        try:
            warning = apply_event(context, event)
        except RECOVERABLE_ERRORS as e:
            if config.strict:
                raise ReplayError(f"Event {index} ({event.get('event')}) failed: {e}") from e
            warning = f"{event.get('event')} failed: {e}"

        if warning:
            warnings.append(f"Event {index}: {warning}")
            logger.warning(f"Event {index}: {warning}")
        processed += 1

    measurements = context.measurements()
    source = script.get("source") or config.script_path

    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    csv_path = None
    json_path = None

    if config.write_csv:
        csv_path = generate_csv_filename(source, config.output_dir)
        write_measurements_to_csv(measurements, csv_path, display_unit=config.display_unit)
        logger.info(f"CSV written: {csv_path}")

    if config.write_json:
        json_path = generate_json_filename(source, config.output_dir)
        state = context.calibrator.state
        write_measurements_to_json(
            measurements, json_path,
            source=source,
            calibration=state.to_dict() if state else None,
        )
        logger.info(f"JSON written: {json_path}")

    processing_time = time.time() - start_time

    logger.info(f"\nSummary:")
    logger.info(f"  Events processed: {processed}")
    logger.info(f"  Measurements: {len(measurements)}")
    if measurements:
        logger.info(format_summary(summarize_measurements(measurements)))
    logger.info(f"  Processing time: {processing_time:.2f}s")

    return ReplayResult(
        script_path=config.script_path,
        output_dir=config.output_dir,
        events_processed=processed,
        measurements=measurements,
        warnings=warnings,
        csv_path=csv_path,
        json_path=json_path,
        processing_time=processing_time,
    )
