"""
Drawing Session Module

Pointer-event state machine that turns one gesture into a point sequence.

    Idle --down--> Capturing --move--> Capturing
    Capturing --up (enough points)--> Committed --> Idle
    Capturing --up (too few points)--> Discarded --> Idle
    Capturing --leave--> Discarded --> Idle

The session knows nothing about derivation; on a committed gesture it hands
the active tool and the raw points to a callback supplied by the owner.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..tools.registry import ToolConfigRegistry
from ..tools.types import Tool

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class SessionState(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"


class GestureOutcome(Enum):
    COMMITTED = "committed"
    DISCARDED = "discarded"


@dataclass
class GestureResult:
    """Outcome of a finished gesture."""
    outcome: GestureOutcome
    tool: Optional[Tool]
    points: List[Point]
    measurement: Optional[object] = None

    @property
    def committed(self) -> bool:
        return self.outcome is GestureOutcome.COMMITTED


class DrawingSession:
    """
    Captures pointer gestures for the active tool.

    Args:
        registry: Tool registry providing the active tool and readiness
        on_complete: Called with (tool, points) for a committed gesture;
            its return value becomes GestureResult.measurement
    """

    def __init__(
        self,
        registry: ToolConfigRegistry,
        on_complete: Callable[[Tool, List[Point]], object]
    ):
        self.registry = registry
        self.on_complete = on_complete
        self._state = SessionState.IDLE
        self._tool: Optional[Tool] = None
        self._points: List[Point] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def points(self) -> List[Point]:
        """Copy of the in-progress point buffer (for preview rendering)."""
        return list(self._points)

    @property
    def tool(self) -> Optional[Tool]:
        """Tool the current gesture was started with."""
        return self._tool

    def _reset(self) -> None:
        self._state = SessionState.IDLE
        self._tool = None
        self._points = []

    def pointer_down(self, x: float, y: float) -> bool:
        """
        Start a gesture.

        Returns:
            True if capturing started; False when no tool is active, the
            tool is missing its configuration, or a gesture is already running
        """
        if self._state is SessionState.CAPTURING:
            logger.debug("pointer_down ignored, already capturing")
            return False

        tool = self.registry.active_tool
        if tool is None:
            logger.debug("pointer_down ignored, no active tool")
            return False

        if not self.registry.is_ready(tool):
            logger.warning(f"Gesture refused: {tool.value} has no configuration")
            return False

        self._state = SessionState.CAPTURING
        self._tool = tool
        self._points = [(float(x), float(y))]
        logger.debug(f"Capturing {tool.value} from ({x}, {y})")
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        """Append a point while capturing. Returns False when idle."""
        if self._state is not SessionState.CAPTURING:
            return False
        self._points.append((float(x), float(y)))
        return True

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None) -> Optional[GestureResult]:
        """
        Finish the gesture.

        An up position different from the last buffered point is appended.
        Errors raised by the completion callback propagate after the session
        has returned to Idle.

        Returns:
            GestureResult, or None when no gesture was running
        """
        if self._state is not SessionState.CAPTURING:
            return None

        if x is not None and y is not None:
            point = (float(x), float(y))
            if point != self._points[-1]:
                self._points.append(point)

        tool = self._tool
        points = list(self._points)
        try:
            min_points = self.registry.geometry_kind_for(tool).min_points
            if len(points) < min_points:
                logger.debug(
                    f"Discarded {tool.value} gesture: {len(points)} point(s), need {min_points}"
                )
                return GestureResult(GestureOutcome.DISCARDED, tool, points)

            measurement = self.on_complete(tool, points)
            return GestureResult(GestureOutcome.COMMITTED, tool, points, measurement)
        finally:
            self._reset()

    def pointer_leave(self) -> Optional[GestureResult]:
        """Cancel the gesture; nothing is committed."""
        if self._state is not SessionState.CAPTURING:
            return None

        result = GestureResult(GestureOutcome.DISCARDED, self._tool, list(self._points))
        logger.debug(f"Discarded {self._tool.value} gesture on pointer leave")
        self._reset()
        return result
