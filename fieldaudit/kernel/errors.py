from __future__ import annotations

import re
from typing import Any


_ERROR_CODE_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")


class AuditError(Exception):
    """Raised when the library is called with arguments it cannot accept.

    `code` is a dotted lowercase identifier host applications can switch
    on; `meta` carries whatever describes the rejected input.

    Only boundary validation raises these. Failures inside the tracking
    machinery are logged and never surface as exceptions.
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        meta: dict[str, Any] | None = None,
    ) -> None:
        if not _ERROR_CODE_RE.fullmatch(code):
            raise ValueError(
                f"Audit error codes are dotted lowercase identifiers, got: {code!r}"
            )
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = dict(meta or {})

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
        }
        if self.meta:
            payload["meta"] = self.meta
        return payload


class InvalidTargetError(AuditError, TypeError):
    def __init__(
        self,
        *,
        message: str = "Audit target must be a non-null object",
        code: str = "audit.invalid_target",
        meta: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, meta=meta)


class InvalidConfigurationError(AuditError, ValueError):
    def __init__(
        self,
        *,
        message: str = "Invalid audit configuration",
        code: str = "audit.invalid_configuration",
        meta: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, meta=meta)
