"""
Action History Module

LIFO stack of reversible actions with single-step undo.

Entries describe what happened; `undo_last()` pops the newest entry and
returns an instruction describing how to reverse it. The history never
touches the store or the calibrator itself; the owning context applies the
instruction.
"""

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Optional, Union

from ..calibration.calibrator import CalibrationState
from ..measurement.models import Measurement
from ..tools.types import Tool

logger = logging.getLogger(__name__)


# =============================================================================
# ENTRIES
# =============================================================================

@dataclass(frozen=True)
class AddEntry:
    """A measurement was committed; only its id is kept."""
    measurement_id: str


@dataclass(frozen=True)
class DeleteEntry:
    """A measurement was deleted; the full snapshot is kept."""
    snapshot: Measurement


@dataclass(frozen=True)
class ConfigEntry:
    """A tool configuration was replaced."""
    tool: Tool
    previous_config: Optional[object]


@dataclass(frozen=True)
class CalibrationEntry:
    """The calibration was replaced (previous may be None)."""
    previous_state: Optional[CalibrationState]


HistoryEntry = Union[AddEntry, DeleteEntry, ConfigEntry, CalibrationEntry]


# =============================================================================
# REVERSAL INSTRUCTIONS
# =============================================================================

@dataclass(frozen=True)
class RemoveMeasurement:
    measurement_id: str


@dataclass(frozen=True)
class RestoreMeasurement:
    """Re-add this snapshot; the store issues a new id."""
    snapshot: Measurement
    original_id: Optional[str] = None


@dataclass(frozen=True)
class RestoreConfiguration:
    tool: Tool
    config: Optional[object]


@dataclass(frozen=True)
class RestoreCalibration:
    state: Optional[CalibrationState]


ReversalInstruction = Union[
    RemoveMeasurement,
    RestoreMeasurement,
    RestoreConfiguration,
    RestoreCalibration,
]


class ActionHistory:
    """
    Undo stack.

    Unbounded unless max_depth is given, in which case the oldest entries
    are dropped once the cap is reached. There is no redo.
    """

    def __init__(self, max_depth: Optional[int] = None):
        if max_depth is not None and max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self._entries = deque(maxlen=max_depth)
        self.max_depth = max_depth

    def record(self, entry: HistoryEntry) -> None:
        """Push an entry onto the stack."""
        if not isinstance(entry, (AddEntry, DeleteEntry, ConfigEntry, CalibrationEntry)):
            raise TypeError(f"Not a history entry: {type(entry).__name__}")

        if self.max_depth is not None and len(self._entries) == self.max_depth:
            logger.debug(f"History full ({self.max_depth}), dropping oldest entry")
        self._entries.append(entry)

    def undo_last(self) -> Optional[ReversalInstruction]:
        """
        Pop the newest entry and return how to reverse it.

        Returns:
            Reversal instruction, or None when the history is empty
        """
        if not self._entries:
            return None

        entry = self._entries.pop()

        if isinstance(entry, AddEntry):
            return RemoveMeasurement(measurement_id=entry.measurement_id)

        if isinstance(entry, DeleteEntry):
            return RestoreMeasurement(
                snapshot=replace(entry.snapshot, id=None),
                original_id=entry.snapshot.id,
            )

        if isinstance(entry, ConfigEntry):
            return RestoreConfiguration(tool=entry.tool, config=entry.previous_config)

        return RestoreCalibration(state=entry.previous_state)

    def remap_id(self, old_id: str, new_id: str) -> int:
        """
        Point pending entries at a measurement's new id after a restore.

        Returns:
            Number of entries rewritten
        """
        rewritten = 0
        for index, entry in enumerate(self._entries):
            if isinstance(entry, AddEntry) and entry.measurement_id == old_id:
                self._entries[index] = AddEntry(measurement_id=new_id)
                rewritten += 1
            elif isinstance(entry, DeleteEntry) and entry.snapshot.id == old_id:
                self._entries[index] = DeleteEntry(snapshot=replace(entry.snapshot, id=new_id))
                rewritten += 1
        return rewritten

    @property
    def can_undo(self) -> bool:
        return bool(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
