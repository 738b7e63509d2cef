"""
Public Type Definitions

Change records and the handle protocol exposed by audited objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class ChangeRecord:
    """A single field change: first observed old value, latest new value."""

    field: str
    old_value: Any
    new_value: Any

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "field": self.field,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }


@runtime_checkable
class AuditHandle(Protocol):
    """Capabilities added to every audited object."""

    def changes(self) -> list[ChangeRecord]:
        """Return the change records accumulated since wrapping or last reset."""
        ...

    def reset_audit(self) -> None:
        """Discard accumulated records without touching the object's state."""
        ...
