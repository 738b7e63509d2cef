"""
Audit Proxy

Transparent wrapper that forwards every operation to its target and records
writes to tracked fields.
"""

from __future__ import annotations

import copy
import inspect
import operator
from typing import Any

from fieldaudit.diagnostics import audit_logger
from fieldaudit.kernel.errors import InvalidTargetError
from fieldaudit.metadata.registry import MetadataRegistry, get_metadata_registry
from fieldaudit.tracking.equality import same_value_zero
from fieldaudit.tracking.tracker import ChangeTracker
from fieldaudit.types import ChangeRecord

_SCALAR_TYPES = (bool, int, float, complex, str, bytes, bytearray)

CAPABILITY_NAMES = frozenset({"changes", "reset_audit"})


def _unwrap(value: Any) -> Any:
    if isinstance(value, AuditProxy):
        return value.__wrapped__
    return value


# =============================================================================
# Operator forwarding
# =============================================================================


def _forward_binary(op):
    def method(self, other):
        return op(self.__wrapped__, _unwrap(other))

    return method


def _forward_reflected(op):
    def method(self, other):
        return op(_unwrap(other), self.__wrapped__)

    return method


def _forward_inplace(op):
    def method(self, other):
        target = self.__wrapped__
        result = op(target, _unwrap(other))
        # In-place operators that mutate the target keep the handle bound
        return self if result is target else result

    return method


def _forward_unary(op):
    def method(self):
        return op(self.__wrapped__)

    return method


class AuditProxy:
    """
    Wrapper returned by `audit()`.

    Reads go straight to the target. Methods come back bound to the target,
    so inside them `self` is the real object and their own writes are not
    observed. Only writes made through the proxy are checked against the
    registry. `changes` and `reset_audit` always resolve to the proxy's
    capabilities, even if the target defines members with those names.

    Copying or pickling a handle copies the target; the copy is a plain
    object with no audit attached.

    Known limits: checks made on `type(handle)` rather than on the object
    see `AuditProxy`. `callable(handle)` is always true, and
    `dataclasses.is_dataclass` / `dataclasses.asdict` reject the handle;
    pass `handle.__wrapped__` to those instead.
    """

    __slots__ = ("__target", "__tracker", "__registry", "__weakref__")

    def __init__(self, target: object, tracker: ChangeTracker, registry: MetadataRegistry):
        object.__setattr__(self, "_AuditProxy__target", target)
        object.__setattr__(self, "_AuditProxy__tracker", tracker)
        object.__setattr__(self, "_AuditProxy__registry", registry)

    # =========================================================================
    # Audit capabilities
    # =========================================================================

    def changes(self) -> list[ChangeRecord]:
        return self.__tracker.get_changes()

    def reset_audit(self) -> None:
        self.__tracker.reset()

    @property
    def __wrapped__(self) -> Any:
        return self.__target

    @property  # type: ignore[misc]
    def __class__(self) -> type:
        return self.__target.__class__

    # Shadows the class attributes; reads resolve to the target's values
    @property  # type: ignore[misc]
    def __doc__(self) -> str | None:
        return self.__target.__doc__

    @property  # type: ignore[misc]
    def __module__(self) -> str:
        return self.__target.__module__

    # =========================================================================
    # Attribute access
    # =========================================================================

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_AuditProxy__"):
            raise AttributeError(name)
        return getattr(self.__target, name)

    def __setattr__(self, name: str, value: Any) -> None:
        target = self.__target

        if not self.__registry.is_field_tracked(target, name):
            setattr(target, name, value)
            return

        try:
            old_value = getattr(target, name, None)
            readable = True
        except Exception as exc:
            audit_logger.error(
                "Failed to read current value before tracked write",
                exc,
                field=name,
                target_class=type(target).__qualname__,
            )
            old_value = None
            readable = False

        # Assignment errors belong to the caller and propagate unchanged
        setattr(target, name, value)

        if not readable:
            return

        try:
            if not same_value_zero(old_value, value):
                self.__tracker.track_change(name, old_value, value)
        except Exception as exc:
            audit_logger.error(
                "Failed to compare values after tracked write",
                exc,
                field=name,
                target_class=type(target).__qualname__,
            )

    def __delattr__(self, name: str) -> None:
        delattr(self.__target, name)

    def __dir__(self) -> list[str]:
        return sorted(set(dir(self.__target)) | CAPABILITY_NAMES)

    # =========================================================================
    # Copying and pickling
    # =========================================================================

    def __copy__(self) -> Any:
        return copy.copy(self.__target)

    def __deepcopy__(self, memo: dict[int, Any]) -> Any:
        return copy.deepcopy(self.__target, memo)

    def __reduce_ex__(self, protocol: int) -> Any:
        return self.__target.__reduce_ex__(protocol)

    # =========================================================================
    # Forwarded protocols
    # =========================================================================

    def __repr__(self) -> str:
        return repr(self.__target)

    def __str__(self) -> str:
        return str(self.__target)

    def __format__(self, format_spec: str) -> str:
        return format(self.__target, format_spec)

    def __bool__(self) -> bool:
        return bool(self.__target)

    def __hash__(self) -> int:
        return hash(self.__target)

    def __eq__(self, other: object) -> bool:
        return self.__target == _unwrap(other)

    def __ne__(self, other: object) -> bool:
        return self.__target != _unwrap(other)

    def __lt__(self, other: Any) -> bool:
        return self.__target < _unwrap(other)

    def __le__(self, other: Any) -> bool:
        return self.__target <= _unwrap(other)

    def __gt__(self, other: Any) -> bool:
        return self.__target > _unwrap(other)

    def __ge__(self, other: Any) -> bool:
        return self.__target >= _unwrap(other)

    def __len__(self) -> int:
        return len(self.__target)

    def __iter__(self):
        return iter(self.__target)

    def __next__(self):
        return next(self.__target)

    def __reversed__(self):
        return reversed(self.__target)

    def __contains__(self, item: Any) -> bool:
        return item in self.__target

    def __getitem__(self, key: Any) -> Any:
        return self.__target[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self.__target[key] = value

    def __delitem__(self, key: Any) -> None:
        del self.__target[key]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.__target(*args, **kwargs)

    def __enter__(self):
        return self.__target.__enter__()

    def __exit__(self, exc_type, exc_value, traceback):
        return self.__target.__exit__(exc_type, exc_value, traceback)

    # =========================================================================
    # Numeric protocols
    # =========================================================================

    __add__ = _forward_binary(operator.add)
    __sub__ = _forward_binary(operator.sub)
    __mul__ = _forward_binary(operator.mul)
    __matmul__ = _forward_binary(operator.matmul)
    __truediv__ = _forward_binary(operator.truediv)
    __floordiv__ = _forward_binary(operator.floordiv)
    __mod__ = _forward_binary(operator.mod)
    __divmod__ = _forward_binary(divmod)
    __pow__ = _forward_binary(operator.pow)
    __lshift__ = _forward_binary(operator.lshift)
    __rshift__ = _forward_binary(operator.rshift)
    __and__ = _forward_binary(operator.and_)
    __xor__ = _forward_binary(operator.xor)
    __or__ = _forward_binary(operator.or_)

    __radd__ = _forward_reflected(operator.add)
    __rsub__ = _forward_reflected(operator.sub)
    __rmul__ = _forward_reflected(operator.mul)
    __rmatmul__ = _forward_reflected(operator.matmul)
    __rtruediv__ = _forward_reflected(operator.truediv)
    __rfloordiv__ = _forward_reflected(operator.floordiv)
    __rmod__ = _forward_reflected(operator.mod)
    __rdivmod__ = _forward_reflected(divmod)
    __rpow__ = _forward_reflected(operator.pow)
    __rlshift__ = _forward_reflected(operator.lshift)
    __rrshift__ = _forward_reflected(operator.rshift)
    __rand__ = _forward_reflected(operator.and_)
    __rxor__ = _forward_reflected(operator.xor)
    __ror__ = _forward_reflected(operator.or_)

    __iadd__ = _forward_inplace(operator.iadd)
    __isub__ = _forward_inplace(operator.isub)
    __imul__ = _forward_inplace(operator.imul)
    __imatmul__ = _forward_inplace(operator.imatmul)
    __itruediv__ = _forward_inplace(operator.itruediv)
    __ifloordiv__ = _forward_inplace(operator.ifloordiv)
    __imod__ = _forward_inplace(operator.imod)
    __ipow__ = _forward_inplace(operator.ipow)
    __ilshift__ = _forward_inplace(operator.ilshift)
    __irshift__ = _forward_inplace(operator.irshift)
    __iand__ = _forward_inplace(operator.iand)
    __ixor__ = _forward_inplace(operator.ixor)
    __ior__ = _forward_inplace(operator.ior)

    __neg__ = _forward_unary(operator.neg)
    __pos__ = _forward_unary(operator.pos)
    __abs__ = _forward_unary(operator.abs)
    __invert__ = _forward_unary(operator.invert)
    __int__ = _forward_unary(int)
    __float__ = _forward_unary(float)
    __complex__ = _forward_unary(complex)
    __index__ = _forward_unary(operator.index)

    def __round__(self, ndigits: int | None = None) -> Any:
        return round(self.__target, ndigits)


def validate_target(target: Any) -> None:
    """Reject targets that cannot carry tracked fields."""
    if (
        target is None
        or isinstance(target, _SCALAR_TYPES)
        or inspect.isclass(target)
        or inspect.isroutine(target)
    ):
        raise InvalidTargetError(meta={"target_type": type(target).__name__})


def create_audit_proxy(target: Any, registry: MetadataRegistry | None = None) -> AuditProxy:
    """
    Wrap `target` in a new AuditProxy with its own ChangeTracker.

    Wrapping an existing handle wraps the object behind it, so the new
    handle resolves configuration against the real class.

    Args:
        target: Object to observe
        registry: Registry to consult (defaults to the process-wide one)

    Raises:
        InvalidTargetError: if `target` is None, a scalar, a class or a routine
    """
    target = _unwrap(target)
    validate_target(target)

    proxy = AuditProxy(target, ChangeTracker(), registry or get_metadata_registry())
    audit_logger.debug("Created audit proxy", target_class=type(target).__qualname__)
    return proxy
