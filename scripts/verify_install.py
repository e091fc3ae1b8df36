#!/usr/bin/env python
"""
Takeoff Engine - Installation Verification Script

Run this script to verify all dependencies are correctly installed.
"""

import sys
from pathlib import Path

# Project root on the path for the takeoff_engine import
sys.path.insert(0, str(Path(__file__).parent.parent))


def check_package(name: str, import_name: str = None, version_attr: str = "__version__") -> tuple[bool, str]:
    """Check if a package is installed and return version."""
    import_name = import_name or name
    try:
        module = __import__(import_name)
        version = getattr(module, version_attr, "unknown")
        return True, str(version)
    except ImportError as e:
        return False, str(e)


def check_shapely_geometry() -> tuple[bool, str]:
    """Check that shapely can build and measure a polygon."""
    try:
        from shapely.geometry import Polygon
        area = Polygon([(0, 0), (10, 0), (10, 10), (0, 10)]).area
        return area == 100, f"unit square check area={area}"
    except ImportError as e:
        return False, str(e)


def check_constants() -> tuple[bool, str]:
    """Check if constants module loads correctly."""
    try:
        from takeoff_engine.constants import (
            CUBIC_FEET_PER_CUBIC_YARD,
            POTHOLE_BORE_RADIUS_M,
        )
        return True, f"loaded ({CUBIC_FEET_PER_CUBIC_YARD=}, {POTHOLE_BORE_RADIUS_M=})"
    except ImportError as e:
        return False, str(e)


def check_settings() -> tuple[bool, str]:
    """Check if settings.yaml loads correctly."""
    try:
        from takeoff_engine.settings import DEFAULT_SETTINGS_PATH, load_settings, SettingsError
    except ImportError as e:
        return False, str(e)

    if not DEFAULT_SETTINGS_PATH.exists():
        return False, "settings.yaml not found"
    try:
        settings = load_settings(DEFAULT_SETTINGS_PATH)
    except SettingsError as e:
        return False, str(e)

    tools = ", ".join(tool.value for tool in settings.tool_defaults) or "none"
    return True, f"log level {settings.log_level}, tool defaults: {tools}"


def check_engine() -> tuple[bool, str]:
    """Derive one trench end to end: 400 px at 0.05 m/px, 2 x 3 section."""
    try:
        from takeoff_engine import TakeoffContext
        from takeoff_engine.tools import TrenchConfig
    except ImportError as e:
        return False, str(e)

    context = TakeoffContext()
    context.calibrate(10, 200, "m")
    context.configure_tool("trench", TrenchConfig(width=2, depth=3))
    context.select_tool("trench")
    context.pointer_down(0, 0)
    result = context.pointer_up(400, 0)
    if result is None or not result.committed:
        return False, "trench gesture was not committed"

    measurement = result.measurement
    spoil = measurement.fields.spoil_volume
    ok = abs(measurement.length - 20) < 1e-9 and abs(spoil - 120 / 27) < 1e-9
    return ok, f"length={measurement.length:g} {measurement.unit}, spoil={spoil:.3f}"


def report(label: str, ok: bool, info: str, results: list, required: bool = True) -> None:
    if required:
        status = "PASS" if ok else "FAIL"
        results.append((label, ok))
    else:
        status = "PASS" if ok else "WARN"
    print(f"  {label:25} [{status}] {info}")


def main():
    print("=" * 60)
    print("Takeoff Engine - Installation Verification")
    print("=" * 60)
    print()

    results = []

    print("Core Dependencies:")
    print("-" * 40)

    for name, import_name in (("shapely", "shapely"), ("numpy", "numpy"), ("pyyaml", "yaml")):
        ok, info = check_package(name, import_name)
        report(name, ok, info, results)

    ok, info = check_shapely_geometry()
    report("shapely geometry", ok, info, results)

    # pytest is only needed to run the test suite
    ok, info = check_package("pytest")
    report("pytest", ok, info, results, required=False)

    print()
    print("Engine:")
    print("-" * 40)

    ok, info = check_constants()
    report("constants.py", ok, info, results)

    ok, info = check_settings()
    report("settings.yaml", ok, info, results)

    ok, info = check_engine()
    report("trench derivation", ok, info, results)

    print()
    print("=" * 60)

    passed = sum(1 for _, ok in results if ok)
    total = len(results)

    if passed == total:
        print(f"ALL CHECKS PASSED ({passed}/{total})")
        return 0

    failed = [name for name, ok in results if not ok]
    print(f"SOME CHECKS FAILED ({passed}/{total})")
    print(f"Failed: {', '.join(failed)}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
