"""
Audit Metadata Module

Per-class audit configuration and tracked-field resolution.
"""

from fieldaudit.metadata.registry import (
    METADATA_ATTRIBUTE,
    AuditMetadata,
    MetadataRegistry,
    get_metadata_registry,
)

__all__ = [
    "METADATA_ATTRIBUTE",
    "AuditMetadata",
    "MetadataRegistry",
    "get_metadata_registry",
]
