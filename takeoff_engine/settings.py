"""
Engine Settings Module

Loads host defaults from config/settings.yaml.

    calibration:
      fallback_pixels_per_unit: null   # e.g. 100 to allow uncalibrated drawing
      fallback_unit: m
    history:
      max_depth: null                  # null = unbounded
    selection:
      hit_tolerance_px: 10
    logging:
      level: INFO
    tools:
      trench: {width: 2, depth: 3}

A missing file yields the built-in defaults.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .constants import DEFAULT_FALLBACK_UNIT, DEFAULT_HIT_TOLERANCE_PX
from .tools.config import config_from_dict
from .tools.types import Tool, UnsupportedToolType

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent / "config" / "settings.yaml"

KNOWN_SECTIONS = {
    "calibration": {"fallback_pixels_per_unit", "fallback_unit"},
    "history": {"max_depth"},
    "selection": {"hit_tolerance_px"},
    "logging": {"level"},
    "tools": None,
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SettingsError(ValueError):
    """Raised when settings.yaml holds a value of the wrong type."""
    pass


@dataclass
class EngineSettings:
    """Host defaults for a takeoff session."""
    fallback_pixels_per_unit: Optional[float] = None
    fallback_unit: str = DEFAULT_FALLBACK_UNIT
    history_max_depth: Optional[int] = None
    hit_tolerance_px: float = DEFAULT_HIT_TOLERANCE_PX
    log_level: str = "INFO"
    tool_defaults: Dict[Tool, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EngineSettings":
        """
        Build settings from the parsed YAML mapping.

        Raises:
            SettingsError: On malformed sections or values
        """
        data = data or {}
        if not isinstance(data, dict):
            raise SettingsError(f"Settings root must be a mapping, got {type(data).__name__}")

        for section, value in data.items():
            if section not in KNOWN_SECTIONS:
                logger.warning(f"Ignoring unknown settings section: {section}")
                continue
            if value is not None and not isinstance(value, dict):
                raise SettingsError(f"Settings section '{section}' must be a mapping")
            known_keys = KNOWN_SECTIONS[section]
            if known_keys is not None:
                for key in (value or {}):
                    if key not in known_keys:
                        logger.warning(f"Ignoring unknown setting: {section}.{key}")

        calibration = data.get("calibration") or {}
        history = data.get("history") or {}
        selection = data.get("selection") or {}
        logging_section = data.get("logging") or {}

        fallback = _number(calibration.get("fallback_pixels_per_unit"), "calibration.fallback_pixels_per_unit")
        if fallback is not None and fallback <= 0:
            raise SettingsError("calibration.fallback_pixels_per_unit must be greater than zero")

        fallback_unit = calibration.get("fallback_unit", DEFAULT_FALLBACK_UNIT)
        if not isinstance(fallback_unit, str) or not fallback_unit.strip():
            raise SettingsError("calibration.fallback_unit must be a non-empty string")

        max_depth = history.get("max_depth")
        if max_depth is not None:
            if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
                raise SettingsError("history.max_depth must be a positive integer or null")

        tolerance = _number(selection.get("hit_tolerance_px", DEFAULT_HIT_TOLERANCE_PX), "selection.hit_tolerance_px")
        if tolerance is None or tolerance < 0:
            raise SettingsError("selection.hit_tolerance_px must be a non-negative number")

        level = str(logging_section.get("level", "INFO")).upper()
        if level not in LOG_LEVELS:
            raise SettingsError(f"logging.level must be one of {', '.join(LOG_LEVELS)}")

        return cls(
            fallback_pixels_per_unit=fallback,
            fallback_unit=fallback_unit.strip(),
            history_max_depth=max_depth,
            hit_tolerance_px=tolerance,
            log_level=level,
            tool_defaults=_tool_defaults(data.get("tools") or {}),
        )


def _number(value, name: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsError(f"{name} must be a number, got {value!r}")
    return float(value)


def _tool_defaults(tools: Dict[str, Any]) -> Dict[Tool, Any]:
    defaults = {}
    for name, config in tools.items():
        try:
            tool = Tool.from_string(name)
        except UnsupportedToolType as e:
            raise SettingsError(f"tools.{name}: {e}") from e
        if not isinstance(config, dict):
            raise SettingsError(f"tools.{name} must be a mapping")
        try:
            defaults[tool] = config_from_dict(tool, config)
        except (KeyError, TypeError, ValueError) as e:
            raise SettingsError(f"tools.{name}: invalid configuration ({e})") from e
    return defaults


def load_settings(path: Union[str, Path, None] = None) -> EngineSettings:
    """
    Load engine settings from YAML.

    Args:
        path: Settings file; defaults to config/settings.yaml in the project

    Returns:
        EngineSettings (defaults when the file does not exist)

    Raises:
        SettingsError: If the file cannot be parsed or holds bad values
    """
    settings_path = Path(path) if path else DEFAULT_SETTINGS_PATH

    if not settings_path.exists():
        logger.warning(f"Settings file not found, using defaults: {settings_path}")
        return EngineSettings()

    try:
        with open(settings_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SettingsError(f"Cannot parse {settings_path}: {e}") from e

    settings = EngineSettings.from_dict(data)
    logger.debug(f"Loaded settings from {settings_path}")
    return settings
