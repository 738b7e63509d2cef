"""
Audit Diagnostics

Non-disruptive diagnostic logging for the tracking machinery. Disabled by
default; when enabled, records go to structlog unless a custom sink is
installed. Nothing raised by a sink ever reaches the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog

from fieldaudit.config import AuditSettings, get_settings

logger = structlog.get_logger()


class LogLevel(str, Enum):
    """Severity levels for audit diagnostics."""

    DEBUG = "DEBUG"
    WARNING = "WARNING"
    ERROR = "ERROR"


_LEVEL_PRIORITY = {
    LogLevel.DEBUG: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
}

DiagnosticSink = Callable[[LogLevel, str, BaseException | None, dict[str, Any] | None], None]


def structlog_sink(
    level: LogLevel,
    message: str,
    error: BaseException | None,
    context: dict[str, Any] | None,
) -> None:
    """Default sink: emit through structlog with context as key/value pairs."""
    fields = dict(context or {})
    if error is not None:
        fields["exc_info"] = error

    if level is LogLevel.ERROR:
        logger.error(message, **fields)
    elif level is LogLevel.WARNING:
        logger.warning(message, **fields)
    else:
        logger.debug(message, **fields)


class AuditLogger:
    """
    Diagnostic logger used by the registry, tracker and proxy.

    Provides:
    - Level filtering (DEBUG < WARNING < ERROR)
    - An injectable sink `(level, message, error, context)`
    - Isolation: a failing sink is swallowed
    """

    def __init__(
        self,
        *,
        enabled: bool = False,
        level: LogLevel | str = LogLevel.ERROR,
        sink: DiagnosticSink | None = None,
    ):
        self._enabled = enabled
        self._level = LogLevel(level)
        self._sink: DiagnosticSink = sink or structlog_sink

    @classmethod
    def from_settings(cls, settings: AuditSettings | None = None) -> "AuditLogger":
        settings = settings or get_settings()
        return cls(enabled=settings.log_enabled, level=settings.log_level)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def level(self) -> LogLevel:
        return self._level

    def configure(
        self,
        *,
        enabled: bool | None = None,
        level: LogLevel | str | None = None,
    ) -> None:
        if enabled is not None:
            self._enabled = enabled
        if level is not None:
            self._level = LogLevel(level)

    def set_sink(self, sink: DiagnosticSink | None) -> None:
        """Install a custom sink. `None` restores the structlog sink."""
        self._sink = sink or structlog_sink

    def is_enabled_for(self, level: LogLevel) -> bool:
        return self._enabled and _LEVEL_PRIORITY[level] >= _LEVEL_PRIORITY[self._level]

    def log(
        self,
        level: LogLevel,
        message: str,
        error: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        try:
            level = LogLevel(level)
            if not self.is_enabled_for(level):
                return
            self._sink(level, message, error, context or None)
        except Exception:
            # Sink failures never reach the caller
            return

    def error(self, message: str, error: BaseException | None = None, **context: Any) -> None:
        self.log(LogLevel.ERROR, message, error, context)

    def warning(self, message: str, **context: Any) -> None:
        self.log(LogLevel.WARNING, message, None, context)

    def debug(self, message: str, **context: Any) -> None:
        self.log(LogLevel.DEBUG, message, None, context)


# Singleton instance used throughout the library
audit_logger = AuditLogger.from_settings()


def enable_audit_logging(level: LogLevel | str = LogLevel.ERROR) -> None:
    """Enable audit diagnostics at `level` and above."""
    audit_logger.configure(enabled=True, level=level)


def disable_audit_logging() -> None:
    """Silence audit diagnostics."""
    audit_logger.configure(enabled=False)


def set_diagnostic_sink(sink: DiagnosticSink | None) -> None:
    """Route diagnostics to `sink`; pass `None` to go back to structlog."""
    audit_logger.set_sink(sink)
