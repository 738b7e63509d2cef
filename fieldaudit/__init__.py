"""
fieldaudit - transparent change tracking for Python objects.

Wrap an object with `audit()`, mark fields with `@audit_field`,
`@auditable` or `@audit_ignore`, and read the collapsed change set with
`handle.changes()`.
"""

from fieldaudit.audit import audit
from fieldaudit.decorators import (
    AuditField,
    AuditIgnore,
    audit_field,
    audit_ignore,
    auditable,
    ignore_field,
    set_class_level_audit,
    track_field,
)
from fieldaudit.diagnostics import (
    LogLevel,
    audit_logger,
    disable_audit_logging,
    enable_audit_logging,
    set_diagnostic_sink,
)
from fieldaudit.kernel.errors import AuditError, InvalidConfigurationError, InvalidTargetError
from fieldaudit.kernel.serialization import changes_to_jsonable, json_dumps_canonical
from fieldaudit.types import AuditHandle, ChangeRecord

__all__ = [
    # Entry point
    "audit",
    # Decorators and markers
    "auditable",
    "audit_field",
    "audit_ignore",
    "AuditField",
    "AuditIgnore",
    "track_field",
    "ignore_field",
    "set_class_level_audit",
    # Types
    "AuditHandle",
    "ChangeRecord",
    # Diagnostics
    "LogLevel",
    "audit_logger",
    "enable_audit_logging",
    "disable_audit_logging",
    "set_diagnostic_sink",
    # Serialization
    "changes_to_jsonable",
    "json_dumps_canonical",
    # Errors
    "AuditError",
    "InvalidTargetError",
    "InvalidConfigurationError",
]
