from __future__ import annotations

import dataclasses
import json
import math
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import UUID


def to_jsonable(value: Any, *, fallback: Callable[[Any], Any] | None = None) -> Any:
    """Convert a field value into JSON primitives.

    Only the types listed below are understood. Anything else raises
    `TypeError` unless a `fallback` is given, in which case the fallback's
    return value is used as-is.
    """
    if value is None:
        return None

    # Transparent wrappers (audit handles) expose the object behind them
    if not isinstance(value, type) and hasattr(type(value), "__wrapped__"):
        return to_jsonable(value.__wrapped__, fallback=fallback)

    if isinstance(value, Enum):
        return to_jsonable(value.value, fallback=fallback)

    if isinstance(value, float) and not math.isfinite(value):
        # JSON has no literal for these
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"

    if isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, datetime):
        return value.isoformat()

    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, UUID):
        return str(value)

    if isinstance(value, Decimal):
        # Exact textual form, no float rounding
        return str(value)

    if isinstance(value, Path):
        return str(value)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_jsonable(getattr(value, f.name), fallback=fallback)
            for f in dataclasses.fields(value)
        }

    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v, fallback=fallback) for (k, v) in value.items()}

    if isinstance(value, (list, tuple)):
        return [to_jsonable(v, fallback=fallback) for v in value]

    if isinstance(value, (set, frozenset)):
        # Sets have no stable order; sort on the coerced form.
        items = [to_jsonable(v, fallback=fallback) for v in value]
        return sorted(items, key=lambda item: json.dumps(item, sort_keys=True, default=str))

    # Pydantic models
    model_dump = getattr(value, "model_dump", None)
    if callable(model_dump):
        return to_jsonable(model_dump(), fallback=fallback)

    if fallback is not None:
        return fallback(value)

    raise TypeError(f"Unsupported type for JSON serialization: {type(value)!r}")


def changes_to_jsonable(records: Iterable[Any]) -> list[dict[str, Any]]:
    """Render change records as plain `{field, old_value, new_value}` dicts.

    Values that have no JSON form are rendered with `repr` so a change set can
    always be handed to a persistence layer.
    """
    return [to_jsonable(record.to_dict(), fallback=repr) for record in records]


def json_dumps_canonical(value: Any) -> str:
    """Deterministic compact JSON for change sets handed to storage."""
    return json.dumps(
        to_jsonable(value, fallback=repr),
        ensure_ascii=False,
        allow_nan=False,
        sort_keys=True,
        separators=(",", ":"),
    )
