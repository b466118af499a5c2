"""
Class decorators that mark dataclasses for codec generation.

``@dynamo_mappable`` marks an entity that gets a codec; ``@table`` additionally
registers it as a stored table. Both only set class attributes, nothing is
looked up at runtime by the generated code.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Optional, TypeVar, overload

T = TypeVar("T", bound=type)

MAPPABLE_MARKER = "__dynamo_mappable__"
TABLE_MARKER = "__dynamo_table__"


def _mark(cls: T) -> T:
    if not isinstance(cls, type) or not dataclasses.is_dataclass(cls):
        raise TypeError(
            f"{getattr(cls, '__name__', cls)!r} must be a dataclass; "
            "apply @dataclass below the codec decorators"
        )
    setattr(cls, MAPPABLE_MARKER, True)
    return cls


@overload
def dynamo_mappable(cls: T) -> T: ...


@overload
def dynamo_mappable(cls: None = None) -> Callable[[T], T]: ...


def dynamo_mappable(cls: Optional[T] = None) -> Any:
    """Mark a dataclass as a schema entity.

    Usable bare (``@dynamo_mappable``) or called (``@dynamo_mappable()``).
    """
    if cls is None:
        return _mark
    return _mark(cls)


def table(name: Any = "") -> Any:
    """Mark a dataclass as a stored table (implies ``@dynamo_mappable``).

    ``@table``, ``@table()`` and ``@table("routes")`` / ``@table(name="routes")``
    are all accepted. Without a name the lower-cased class name is used.
    """
    if isinstance(name, type):
        return _table(name, "")

    def decorator(cls: T) -> T:
        return _table(cls, name)

    return decorator


def _table(cls: T, name: str) -> T:
    _mark(cls)
    setattr(cls, TABLE_MARKER, name or cls.__name__.lower())
    return cls


def is_dynamo_mappable(candidate: Any) -> bool:
    """True if the class itself (not a base class) carries the entity marker."""
    return isinstance(candidate, type) and bool(vars(candidate).get(MAPPABLE_MARKER))


def table_name_of(cls: type) -> Optional[str]:
    """Return the table name declared on a class, or None if it is not a table."""
    return vars(cls).get(TABLE_MARKER)
