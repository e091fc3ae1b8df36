"""
Tool Configuration Registry Module

Tracks the active tool and the configuration currently attached to each
configurable tool.
"""

import logging
from typing import Dict, Optional

from ..geometry.shapes import GeometryKind
from .config import CONFIG_TYPES, config_from_dict
from .types import Tool, MeasurementType

logger = logging.getLogger(__name__)


class ToolConfigRegistry:
    """
    Active tool plus one configuration slot per tool.

    Configurations are replaced wholesale, never mutated, so measurements
    already derived from an earlier configuration are unaffected.
    """

    def __init__(self):
        self._active_tool: Optional[Tool] = None
        self._configs: Dict[Tool, object] = {}

    @property
    def active_tool(self) -> Optional[Tool]:
        return self._active_tool

    def select_tool(self, tool) -> Optional[Tool]:
        """
        Make a tool active (None deselects).

        Returns:
            The newly active tool
        """
        self._active_tool = None if tool is None else Tool.from_string(tool)
        logger.debug(f"Active tool: {self._active_tool.value if self._active_tool else None}")
        return self._active_tool

    def configure(self, tool, config) -> Optional[object]:
        """
        Attach a configuration to a tool.

        Args:
            tool: Tool or tool identifier
            config: Configuration object, plain mapping, or None to clear

        Returns:
            The configuration that was replaced (None if there was none)

        Raises:
            TypeError: If the configuration class does not match the tool
        """
        tool = Tool.from_string(tool)
        if isinstance(config, dict):
            config = config_from_dict(tool, config)

        expected = CONFIG_TYPES[tool]
        if config is not None and not isinstance(config, expected):
            raise TypeError(
                f"{tool.value} expects {expected.__name__}, got {type(config).__name__}"
            )

        previous = self._configs.get(tool)
        if config is None:
            self._configs.pop(tool, None)
        else:
            self._configs[tool] = config

        logger.debug(f"Configuration for {tool.value} {'cleared' if config is None else 'set'}")
        return previous

    def get_configuration(self, tool) -> Optional[object]:
        return self._configs.get(Tool.from_string(tool))

    def is_ready(self, tool) -> bool:
        """Check if a gesture may start with this tool."""
        tool = Tool.from_string(tool)
        return not tool.requires_configuration or tool in self._configs

    def measurement_type_for(self, tool) -> MeasurementType:
        """
        Measurement type a gesture with this tool will produce.

        The hydro-excavation tool follows its configuration; without one it
        is treated as a trench.
        """
        tool = Tool.from_string(tool)
        if tool is Tool.HYDRO_EXCAVATION:
            config = self._configs.get(tool)
            if config is not None:
                return config.measurement_type
            return MeasurementType.HYDRO_EXCAVATION_TRENCH
        return MeasurementType(tool.value)

    def geometry_kind_for(self, tool) -> GeometryKind:
        """Shape class a gesture with this tool is captured as."""
        return self.measurement_type_for(tool).geometry_kind

    def clear(self) -> None:
        """Drop every configuration and deselect the tool."""
        self._configs.clear()
        self._active_tool = None
