"""
Command Line Interface Module

Parses command-line arguments for the takeoff replay tool.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .calibration.unit_converter import is_known_unit, parse_calibration_string


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the replay tool."""
    parser = argparse.ArgumentParser(
        prog="takeoff-replay",
        description="Replay a recorded takeoff session and export its measurements",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  takeoff-replay -i session.json -o ./output
  takeoff-replay -i session.json -o ./output --calib "0,0:200,0=10m"
  takeoff-replay -i session.json -o ./output --display-unit ft --verbose
        """
    )

    # Required arguments
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Replay script (JSON)"
    )

    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output directory path"
    )

    # Optional arguments
    parser.add_argument(
        "--settings",
        help="Settings YAML file (default: config/settings.yaml)"
    )

    parser.add_argument(
        "--calib",
        help="Calibrate before replaying ('x1,y1:x2,y2=10m')"
    )

    parser.add_argument(
        "--display-unit",
        help="Unit for CSV lengths and areas (converted, e.g. 'ft')"
    )

    parser.add_argument(
        "--no-csv",
        action="store_true",
        help="Skip CSV output"
    )

    parser.add_argument(
        "--no-json",
        action="store_true",
        help="Skip JSON output"
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Stop at the first failed event"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser


def validate_args(args: argparse.Namespace) -> Tuple[bool, str]:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    input_path = Path(args.input)
    if not input_path.exists():
        return False, f"Input file not found: {args.input}"

    if input_path.suffix.lower() != ".json":
        return False, f"Input file must be a JSON script: {args.input}"

    if args.settings and not Path(args.settings).exists():
        return False, f"Settings file not found: {args.settings}"

    if args.calib:
        try:
            parse_calibration_string(args.calib)
        except ValueError as e:
            return False, f"Invalid calibration: {e}"

    if args.display_unit and not is_known_unit(args.display_unit):
        return False, f"Unknown display unit: {args.display_unit}"

    if args.no_csv and args.no_json:
        return False, "Nothing to write: both --no-csv and --no-json given"

    output_path = Path(args.output)
    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return False, f"Cannot create output directory: {e}"

    return True, ""


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command-line arguments.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Parsed and validated arguments
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    is_valid, error_msg = validate_args(parsed)
    if not is_valid:
        parser.error(error_msg)

    return parsed


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)

    from .replay import run_replay

    try:
        result = run_replay(args)
    except KeyboardInterrupt:
        print("\nReplay cancelled by user")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    if result.warnings and not args.verbose:
        print(f"{len(result.warnings)} event(s) had no effect; rerun with --verbose for details")
    return 0


if __name__ == "__main__":
    sys.exit(main())
