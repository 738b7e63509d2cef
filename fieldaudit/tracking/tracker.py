"""
Change Tracker

Per-handle bookkeeping of field changes with change collapsing.
"""

from __future__ import annotations

from typing import Any

from fieldaudit.diagnostics import audit_logger
from fieldaudit.types import ChangeRecord


class ChangeTracker:
    """
    Collects at most one ChangeRecord per field.

    Collapsing rule: the first write to a field fixes its old value for the
    lifetime of the tracker (or until `reset()`); every later write only
    replaces the new value. The result answers "what changed since I
    started observing", not a full history.

    The tracker knows nothing about the wrapped object or its configuration.
    """

    def __init__(self):
        """Initialize an empty tracker."""
        self._changes: dict[str, ChangeRecord] = {}

    def track_change(self, field: str, old_value: Any, new_value: Any) -> None:
        """
        Record a change to `field`, collapsing with any earlier record.

        Args:
            field: Attribute name
            old_value: Value before the write
            new_value: Value after the write
        """
        if not isinstance(field, str) or not field:
            audit_logger.warning(
                "Invalid field name for track_change",
                field=repr(field),
                field_type=type(field).__name__,
            )
            return

        try:
            existing = self._changes.get(field)
            if existing is not None:
                old_value = existing.old_value
            self._changes[field] = ChangeRecord(field, old_value, new_value)
        except Exception as exc:
            audit_logger.error(
                "Failed to record change",
                exc,
                field=field,
                old_value_type=type(old_value).__name__,
                new_value_type=type(new_value).__name__,
                tracked_fields=len(self._changes),
            )

    def get_changes(self) -> list[ChangeRecord]:
        """Return a new list of the current records, in first-write order."""
        return list(self._changes.values())

    def reset(self) -> None:
        """Discard all records."""
        self._changes = {}

    def has_changes(self) -> bool:
        return bool(self._changes)

    def __len__(self) -> int:
        return len(self._changes)
