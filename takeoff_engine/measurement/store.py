"""
Measurement Store Module

Ordered collection of committed measurements and the only place identities
are issued. Ids come from a monotonic counter that survives `clear()`, so an
id is never handed out twice within a session.
"""

import itertools
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional

from ..constants import TOOL_DISPLAY_NAMES
from .models import Measurement

logger = logging.getLogger(__name__)


class ImmutableFieldError(ValueError):
    """Raised when an update touches anything other than the notes."""
    pass


EDITABLE_FIELDS = ("notes",)


class MeasurementStore:
    """Insertion-ordered measurements keyed by id."""

    def __init__(self, id_prefix: str = "m"):
        self._items: Dict[str, Measurement] = {}
        self._counter = itertools.count(1)
        self._issued = set()
        self._id_prefix = id_prefix

    def _next_id(self) -> str:
        while True:
            candidate = f"{self._id_prefix}_{next(self._counter):04d}"
            if candidate not in self._issued:
                return candidate

    def _next_label(self, measurement: Measurement) -> str:
        display = TOOL_DISPLAY_NAMES.get(measurement.type.value, measurement.type.value)
        same_type = sum(1 for item in self._items.values() if item.type is measurement.type)
        return f"{display} {same_type + 1}"

    def add(self, measurement: Measurement) -> Measurement:
        """
        Add a measurement, assigning a fresh id.

        A measurement that arrives with an id nobody has used yet keeps it
        (JSON import); otherwise a new one is issued. Missing labels and
        timestamps are filled in.

        Args:
            measurement: Measurement to store

        Returns:
            The stored measurement (with id, label and created_at set)
        """
        measurement_id = measurement.id
        if measurement_id is None or measurement_id in self._issued:
            measurement_id = self._next_id()

        changes = {"id": measurement_id}
        if not measurement.label:
            changes["label"] = self._next_label(measurement)
        if not measurement.created_at:
            changes["created_at"] = datetime.now(timezone.utc).isoformat()

        stored = replace(measurement, **changes)
        self._issued.add(measurement_id)
        self._items[measurement_id] = stored

        logger.debug(f"Added {stored.type.value} '{stored.label}' as {measurement_id}")
        return stored

    def remove(self, measurement_id: str) -> Optional[Measurement]:
        """Remove a measurement; returns it, or None if the id is unknown."""
        removed = self._items.pop(measurement_id, None)
        if removed is None:
            logger.debug(f"Remove ignored, no measurement {measurement_id}")
        return removed

    def update(self, measurement_id: str, changes: Optional[dict] = None, **kwargs) -> Optional[Measurement]:
        """
        Apply a partial update.

        Only the notes may change after commit.

        Args:
            measurement_id: Id of the measurement to edit
            changes: Mapping of field name to new value
            **kwargs: Same as changes, as keywords

        Returns:
            The updated measurement, or None if the id is unknown

        Raises:
            ImmutableFieldError: If any field other than notes is named
        """
        updates = dict(changes or {})
        updates.update(kwargs)

        forbidden = sorted(key for key in updates if key not in EDITABLE_FIELDS)
        if forbidden:
            raise ImmutableFieldError(
                f"Fields cannot be changed after commit: {', '.join(forbidden)}"
            )

        current = self._items.get(measurement_id)
        if current is None:
            return None

        if "notes" in updates:
            updates["notes"] = "" if updates["notes"] is None else str(updates["notes"])

        updated = replace(current, **updates)
        self._items[measurement_id] = updated
        return updated

    def get(self, measurement_id: str) -> Optional[Measurement]:
        return self._items.get(measurement_id)

    def list(self) -> List[Measurement]:
        """All measurements in insertion order."""
        return list(self._items.values())

    def clear(self) -> int:
        """Remove everything. Issued ids stay reserved. Returns the count removed."""
        count = len(self._items)
        self._items.clear()
        logger.info(f"Cleared {count} measurements")
        return count

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, measurement_id) -> bool:
        return measurement_id in self._items

    def __iter__(self) -> Iterator[Measurement]:
        return iter(list(self._items.values()))
