"""Error types and JSON helpers used across fieldaudit.

Nothing in this package imports from the registry, tracker or proxy
modules.
"""
