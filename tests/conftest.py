"""
Shared pytest setup and fixtures for the fieldaudit test suite.
"""

import os

import pytest

# Keep diagnostics deterministic regardless of the developer's environment.
os.environ.setdefault("FIELDAUDIT_LOG_ENABLED", "false")
os.environ.setdefault("FIELDAUDIT_LOG_LEVEL", "ERROR")


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Register the test tier markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (cross-module scenarios)")


def pytest_collection_modifyitems(config, items):
    """Tag unmarked tests by directory: tests/integration/ is integration, the rest unit."""
    for item in items:
        path = str(getattr(item, "fspath", ""))
        if item.get_closest_marker("integration") or item.get_closest_marker("unit"):
            continue
        if "/tests/integration/" in path or "\\tests\\integration\\" in path:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# DIAGNOSTICS FIXTURES
# =============================================================================


class CapturingSink:
    """Diagnostic sink that keeps every emitted record."""

    def __init__(self):
        self.records = []

    def __call__(self, level, message, error, context):
        self.records.append(
            {"level": level, "message": message, "error": error, "context": context or {}}
        )

    def messages(self, level=None):
        return [r["message"] for r in self.records if level is None or r["level"] == level]


@pytest.fixture
def diagnostics():
    """
    Enable audit logging at DEBUG and capture every record.

    Restores the logger to its previous state afterwards.
    """
    from fieldaudit.diagnostics import LogLevel, audit_logger, structlog_sink

    previous_enabled = audit_logger.enabled
    previous_level = audit_logger.level
    sink = CapturingSink()

    audit_logger.set_sink(sink)
    audit_logger.configure(enabled=True, level=LogLevel.DEBUG)
    try:
        yield sink
    finally:
        audit_logger.set_sink(structlog_sink)
        audit_logger.configure(enabled=previous_enabled, level=previous_level)


# =============================================================================
# REGISTRY FIXTURES
# =============================================================================


@pytest.fixture
def isolated_registry():
    """A registry that stores its records under a test-only class attribute."""
    from fieldaudit.metadata.registry import MetadataRegistry

    return MetadataRegistry(attribute="__test_audit_metadata__")
