"""Entry point for wrapping objects with audit tracking."""

from __future__ import annotations

from typing import Any

from fieldaudit.metadata.registry import MetadataRegistry
from fieldaudit.proxy.factory import AuditProxy, create_audit_proxy


def audit(target: Any, *, registry: MetadataRegistry | None = None) -> AuditProxy:
    """
    Wrap an object so writes to its tracked fields are recorded.

    The returned handle behaves like `target` (attribute reads, method
    calls, `isinstance`, equality) and adds `changes()` and `reset_audit()`.
    Every call creates an independent handle with an empty change set.

    Args:
        target: The object to observe
        registry: Optional registry to consult instead of the process-wide one

    Returns:
        The audit handle wrapping `target`

    Raises:
        InvalidTargetError: if `target` is None, a scalar, a class or a function
    """
    return create_audit_proxy(target, registry=registry)
