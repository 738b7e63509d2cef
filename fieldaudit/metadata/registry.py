"""
Audit Metadata Registry

Stores per-class audit configuration and answers "is this field tracked?"
for instances. Configuration lives on the class itself, so every instance of
a class shares it and reconfiguration is visible immediately.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from fieldaudit.diagnostics import audit_logger

METADATA_ATTRIBUTE = "__audit_metadata__"

# Singleton instance
_registry: "MetadataRegistry | None" = None


@dataclass
class AuditMetadata:
    """Audit configuration for one class."""

    tracked_fields: set[str] = field(default_factory=set)
    ignored_fields: set[str] = field(default_factory=set)
    class_level_audit: bool = False

    def copy(self) -> "AuditMetadata":
        return AuditMetadata(
            tracked_fields=set(self.tracked_fields),
            ignored_fields=set(self.ignored_fields),
            class_level_audit=self.class_level_audit,
        )


def _is_valid_metadata(value: Any) -> bool:
    """Check a stored record has the right shape and element types."""
    return (
        isinstance(value, AuditMetadata)
        and isinstance(value.tracked_fields, set)
        and isinstance(value.ignored_fields, set)
        and isinstance(value.class_level_audit, bool)
        and all(isinstance(name, str) for name in value.tracked_fields)
        and all(isinstance(name, str) for name in value.ignored_fields)
    )


def _is_valid_field(field_name: Any) -> bool:
    return isinstance(field_name, str) and len(field_name) > 0


def _own_fields(instance: object) -> Iterator[str]:
    """Yield the names of attributes set directly on `instance`."""
    instance_dict = getattr(instance, "__dict__", None)
    if isinstance(instance_dict, dict):
        for name in instance_dict:
            if isinstance(name, str):
                yield name

    for klass in type(instance).__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            if hasattr(instance, name):
                yield name


class MetadataRegistry:
    """
    Registry of audit configuration keyed by class identity.

    Provides:
    - Effective configuration merged along the MRO
    - Tracked-field resolution for instances
    - Idempotent toggles used by the decorators

    Lookups never raise: failures are logged and degrade to "not tracked".
    """

    def __init__(self, attribute: str = METADATA_ATTRIBUTE):
        """
        Initialize the registry.

        Args:
            attribute: Class attribute holding each class's own record
        """
        self._attribute = attribute

    # =========================================================================
    # Queries
    # =========================================================================

    def get_tracked_fields(self, instance: object) -> set[str]:
        """
        Get the set of tracked fields for an instance.

        Explicitly tracked fields, plus every own attribute when class-level
        audit is enabled, minus ignored fields. If enumerating the instance
        fails, only the explicit fields are returned.
        """
        try:
            if instance is None:
                audit_logger.warning("Invalid target provided to get_tracked_fields", target_type="NoneType")
                return set()

            cls = type(instance)
            metadata = self.get_metadata(cls)
            tracked: set[str] = set()

            if metadata.class_level_audit:
                try:
                    tracked.update(_own_fields(instance))
                except Exception as exc:
                    audit_logger.error(
                        "Failed to enumerate instance fields",
                        exc,
                        target_class=cls.__qualname__,
                    )

            tracked.update(metadata.tracked_fields)
            return tracked - metadata.ignored_fields

        except Exception as exc:
            audit_logger.error(
                "Critical error in get_tracked_fields",
                exc,
                target_type=type(instance).__name__,
            )
            return set()

    def is_field_tracked(self, instance: object, field_name: str) -> bool:
        """Check whether writes to `field_name` on `instance` are recorded."""
        if instance is None or not isinstance(field_name, str):
            audit_logger.warning(
                "Invalid parameters for is_field_tracked",
                target_type=type(instance).__name__,
                field_type=type(field_name).__name__,
            )
            return False
        return field_name in self.get_tracked_fields(instance)

    def get_metadata(self, cls: type) -> AuditMetadata:
        """
        Get the effective configuration for a class.

        Records found along the MRO are merged: tracked and ignored fields
        are unioned, class-level audit is on if any class enables it. The
        result is a copy and can be mutated freely.
        """
        merged = AuditMetadata()
        if not isinstance(cls, type):
            audit_logger.warning("Invalid class for get_metadata", target_type=type(cls).__name__)
            return merged

        for klass in cls.__mro__:
            record = self._read_own(klass)
            if record is None:
                continue
            merged.tracked_fields |= record.tracked_fields
            merged.ignored_fields |= record.ignored_fields
            merged.class_level_audit = merged.class_level_audit or record.class_level_audit

        return merged

    # =========================================================================
    # Configuration
    # =========================================================================

    def set_field_tracking(self, cls: type, field_name: str, track: bool) -> None:
        """Add or remove `field_name` from the class's tracked fields."""
        if not self._check_class(cls, "set_field_tracking", field=field_name, track=track):
            return
        if not _is_valid_field(field_name):
            audit_logger.error(
                "Invalid field name for set_field_tracking",
                None,
                class_name=cls.__qualname__,
                field=repr(field_name),
                track=track,
            )
            return

        metadata = self._get_or_create(cls)
        if track:
            metadata.tracked_fields.add(field_name)
        else:
            metadata.tracked_fields.discard(field_name)

    def set_class_level_audit(self, cls: type, enabled: bool) -> None:
        """Enable or disable tracking of every own field of instances."""
        if not self._check_class(cls, "set_class_level_audit", enabled=enabled):
            return

        metadata = self._get_or_create(cls)
        metadata.class_level_audit = bool(enabled)

    def set_field_ignored(self, cls: type, field_name: str, ignored: bool) -> None:
        """Add or remove `field_name` from the class's ignored fields."""
        if not self._check_class(cls, "set_field_ignored", field=field_name, ignored=ignored):
            return
        if not _is_valid_field(field_name):
            audit_logger.error(
                "Invalid field name for set_field_ignored",
                None,
                class_name=cls.__qualname__,
                field=repr(field_name),
                ignored=ignored,
            )
            return

        metadata = self._get_or_create(cls)
        if ignored:
            metadata.ignored_fields.add(field_name)
        else:
            metadata.ignored_fields.discard(field_name)

    # =========================================================================
    # Storage
    # =========================================================================

    def _check_class(self, cls: Any, operation: str, **context: Any) -> bool:
        if isinstance(cls, type):
            return True
        audit_logger.error(
            f"Invalid class for {operation}",
            None,
            target_type=type(cls).__name__,
            **context,
        )
        return False

    def _read_own(self, klass: type) -> AuditMetadata | None:
        """Read the record stored on `klass` itself, healing corrupted ones."""
        try:
            raw = klass.__dict__.get(self._attribute)
        except Exception as exc:
            audit_logger.error("Error retrieving audit metadata", exc, class_name=klass.__qualname__)
            return None

        if raw is None:
            return None

        if not _is_valid_metadata(raw):
            audit_logger.warning(
                "Corrupted audit metadata detected, recreating",
                class_name=klass.__qualname__,
                metadata_type=type(raw).__name__,
            )
            return self._store(klass, AuditMetadata())

        return raw

    def _get_or_create(self, cls: type) -> AuditMetadata:
        metadata = self._read_own(cls)
        if metadata is None:
            metadata = self._store(cls, AuditMetadata())
        return metadata

    def _store(self, klass: type, metadata: AuditMetadata) -> AuditMetadata:
        try:
            setattr(klass, self._attribute, metadata)
        except (TypeError, AttributeError) as exc:
            # Built-in and extension types reject new attributes; the
            # record is returned but not persisted.
            audit_logger.error(
                "Failed to store audit metadata on class",
                exc,
                class_name=klass.__qualname__,
            )
        return metadata


def get_metadata_registry() -> MetadataRegistry:
    """Get or create the singleton metadata registry."""
    global _registry
    if _registry is None:
        _registry = MetadataRegistry()
    return _registry
