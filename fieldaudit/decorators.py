"""
Audit Decorators

Class-definition-time configuration of tracked and ignored fields.

    @auditable(ignore=("password_hash",))
    class User:
        ...

    @audit_field("status", "total")
    class Order:
        note: Annotated[str, AuditIgnore()]

Markers placed in `typing.Annotated` class annotations are picked up by
any of the three decorators.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable, Iterator
from typing import Annotated, Any, TypeVar, get_args, get_origin

from fieldaudit.diagnostics import audit_logger
from fieldaudit.kernel.errors import InvalidConfigurationError
from fieldaudit.metadata.registry import MetadataRegistry, get_metadata_registry

T = TypeVar("T", bound=type)


class AuditField:
    """`Annotated` marker: record writes to this attribute."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "AuditField()"


class AuditIgnore:
    """`Annotated` marker: never record writes to this attribute."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "AuditIgnore()"


# =============================================================================
# Validation
# =============================================================================


def _require_class(cls: Any, decorator: str) -> None:
    if not isinstance(cls, type):
        raise InvalidConfigurationError(
            message=f"@{decorator} can only decorate classes",
            meta={"target_type": type(cls).__name__},
        )


def _require_field_names(names: Iterable[Any], decorator: str) -> tuple[str, ...]:
    checked = tuple(names)
    for name in checked:
        if not isinstance(name, str) or not name.isidentifier():
            raise InvalidConfigurationError(
                message=f"{decorator} expects attribute names, got {name!r}",
                meta={"field": repr(name)},
            )
    return checked


def _require_trackable(cls: type, name: str) -> None:
    """Methods are not fields; properties and plain attributes are."""
    attribute = inspect.getattr_static(cls, name, None)
    if inspect.isfunction(attribute) or isinstance(attribute, (staticmethod, classmethod)):
        raise InvalidConfigurationError(
            message=f"{cls.__qualname__}.{name} is a method and cannot be tracked",
            meta={"class_name": cls.__qualname__, "field": name},
        )


# =============================================================================
# Annotated markers
# =============================================================================


def _is_marker(value: Any, marker: type) -> bool:
    return isinstance(value, marker) or value is marker


def _annotated_markers(cls: type) -> Iterator[tuple[str, Any]]:
    try:
        annotations = inspect.get_annotations(cls, eval_str=True)
    except Exception as exc:
        # Unresolvable forward references; string annotations carry no markers
        audit_logger.warning(
            "Could not evaluate class annotations for audit markers",
            class_name=cls.__qualname__,
            error=repr(exc),
        )
        annotations = inspect.get_annotations(cls)

    for name, hint in annotations.items():
        if get_origin(hint) is not Annotated:
            continue
        for extra in get_args(hint)[1:]:
            if _is_marker(extra, AuditField) or _is_marker(extra, AuditIgnore):
                yield name, extra


def _apply_markers(cls: type, registry: MetadataRegistry) -> None:
    for name, marker in _annotated_markers(cls):
        if _is_marker(marker, AuditIgnore):
            registry.set_field_ignored(cls, name, True)
        else:
            _require_trackable(cls, name)
            registry.set_field_tracking(cls, name, True)


# =============================================================================
# Decorators
# =============================================================================


def audit_field(*fields: str) -> Callable[[T], T]:
    """Track writes to the named fields of the decorated class."""
    names = _require_field_names(fields, "audit_field")

    def decorator(cls: T) -> T:
        _require_class(cls, "audit_field")
        registry = get_metadata_registry()
        for name in names:
            _require_trackable(cls, name)
            registry.set_field_tracking(cls, name, True)
        _apply_markers(cls, registry)
        return cls

    return decorator


def audit_ignore(*fields: str) -> Callable[[T], T]:
    """Never track the named fields, even under class-level audit."""
    names = _require_field_names(fields, "audit_ignore")

    def decorator(cls: T) -> T:
        _require_class(cls, "audit_ignore")
        registry = get_metadata_registry()
        for name in names:
            registry.set_field_ignored(cls, name, True)
        _apply_markers(cls, registry)
        return cls

    return decorator


def auditable(cls: T | None = None, *, ignore: Iterable[str] = ()) -> Any:
    """
    Track every own field of the decorated class's instances.

    Usable bare (`@auditable`) or with options (`@auditable(ignore=[...])`).
    """
    ignored = _require_field_names((ignore,) if isinstance(ignore, str) else ignore, "auditable")

    def decorator(target_cls: T) -> T:
        _require_class(target_cls, "auditable")
        registry = get_metadata_registry()
        registry.set_class_level_audit(target_cls, True)
        for name in ignored:
            registry.set_field_ignored(target_cls, name, True)
        _apply_markers(target_cls, registry)
        return target_cls

    if cls is None:
        return decorator
    return decorator(cls)


# =============================================================================
# Programmatic configuration
# =============================================================================


def track_field(cls: type, field: str, track: bool = True) -> None:
    """Mark (or unmark) `field` as tracked on `cls` outside a class body."""
    _require_class(cls, "track_field")
    (name,) = _require_field_names((field,), "track_field")
    if track:
        _require_trackable(cls, name)
    get_metadata_registry().set_field_tracking(cls, name, track)


def ignore_field(cls: type, field: str, ignored: bool = True) -> None:
    """Mark (or unmark) `field` as ignored on `cls`."""
    _require_class(cls, "ignore_field")
    (name,) = _require_field_names((field,), "ignore_field")
    get_metadata_registry().set_field_ignored(cls, name, ignored)


def set_class_level_audit(cls: type, enabled: bool = True) -> None:
    """Turn class-level audit on or off for `cls`."""
    _require_class(cls, "set_class_level_audit")
    get_metadata_registry().set_class_level_audit(cls, enabled)
