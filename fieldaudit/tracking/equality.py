"""
Write Equality

Decides whether an assignment actually changed a field.
"""

from __future__ import annotations

import math
from typing import Any


def same_value_zero(a: Any, b: Any) -> bool:
    """
    Compare two field values the way change detection needs.

    - Identical objects are equal.
    - Numbers compare by value, except that two NaNs are equal and
      positive and negative zero are not.
    - Booleans only equal the identical boolean (``True`` is not ``1``).
    - Strings and bytes compare by value when they share a type.
    - Everything else compares by identity; user ``__eq__`` is never called.
    """
    if a is b:
        return True

    if isinstance(a, bool) or isinstance(b, bool):
        return False

    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
            return True
        if a == 0 and b == 0:
            return math.copysign(1.0, a) == math.copysign(1.0, b)
        return a == b

    if isinstance(a, (str, bytes)) and type(a) is type(b):
        return a == b

    return False
