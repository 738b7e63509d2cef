"""
Audit Proxy Module

Transparent interception wrappers for audited objects.
"""

from fieldaudit.proxy.factory import (
    CAPABILITY_NAMES,
    AuditProxy,
    create_audit_proxy,
    validate_target,
)

__all__ = [
    "CAPABILITY_NAMES",
    "AuditProxy",
    "create_audit_proxy",
    "validate_target",
]
