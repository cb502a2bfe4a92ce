"""Typed literal values and their placeholder fragment.

Each bound value travels with a :class:`ValueKind` tag.  The tag is inferred
from the Python type when the caller does not give one, validated when the
caller does, and handed to the prepared statement at bind time so the driver
adapter can pick the right conversion.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any

from fluentql.errors import BuilderUsageError
from fluentql.fragment.base import SqlFragment
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.writer import SqlWriter
from fluentql.utils import escape_comment

if TYPE_CHECKING:
    from fluentql.context import BuildContext
    from fluentql.execution.base import PreparedStatement

PLACEHOLDER = "?"


class ValueKind(str, Enum):
    """Semantic type of a bound value."""

    STRING = "string"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BYTES = "bytes"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    CLOB = "clob"
    BLOB = "blob"
    ARRAY = "array"
    REF = "ref"
    URL = "url"


class SqlType(IntEnum):
    """Type codes used when binding an untyped ``NULL`` (JDBC numbering)."""

    INTEGER = 4
    OTHER = 1111


# Python types accepted for each kind.  Kinds absent from this table wrap
# driver-specific handles and are not type-checked.
_KIND_TYPES: dict[ValueKind, tuple[type, ...]] = {
    ValueKind.STRING: (str,),
    ValueKind.DECIMAL: (Decimal,),
    ValueKind.BOOLEAN: (bool,),
    ValueKind.INTEGER: (int,),
    ValueKind.LONG: (int,),
    ValueKind.FLOAT: (float,),
    ValueKind.DOUBLE: (float,),
    ValueKind.BYTES: (bytes, bytearray, memoryview),
    ValueKind.DATE: (dt.date,),
    ValueKind.TIME: (dt.time,),
    ValueKind.TIMESTAMP: (dt.datetime,),
    ValueKind.URL: (str,),
}

# Inference order matters: bool before int, datetime before date.
_INFERENCE: tuple[tuple[type | tuple[type, ...], ValueKind], ...] = (
    (bool, ValueKind.BOOLEAN),
    (int, ValueKind.INTEGER),
    (float, ValueKind.DOUBLE),
    (Decimal, ValueKind.DECIMAL),
    (str, ValueKind.STRING),
    ((bytes, bytearray, memoryview), ValueKind.BYTES),
    (dt.datetime, ValueKind.TIMESTAMP),
    (dt.date, ValueKind.DATE),
    (dt.time, ValueKind.TIME),
)


def infer_kind(value: Any) -> ValueKind:
    """Return the :class:`ValueKind` matching ``value``'s Python type.

    Raises:
        BuilderUsageError: If the type has no default kind.
    """
    for py_type, kind in _INFERENCE:
        if isinstance(value, py_type):
            return kind
    supported = sorted(k.value for k in _KIND_TYPES)
    raise BuilderUsageError(
        f"Cannot infer a value kind for {type(value).__name__!r}; pass kind= explicitly. "
        f"Kinds with type inference: {supported}",
        argument="value",
    )


def check_kind(value: Any, kind: ValueKind) -> None:
    """Raise :class:`BuilderUsageError` if ``value`` does not fit ``kind``.

    ``None`` fits every kind.
    """
    if value is None:
        return
    expected = _KIND_TYPES.get(kind)
    if expected is None:
        return
    mismatch = not isinstance(value, expected)
    if isinstance(value, bool) and kind is not ValueKind.BOOLEAN:
        mismatch = True
    if isinstance(value, dt.datetime) and kind is ValueKind.DATE:
        mismatch = True
    if mismatch:
        raise BuilderUsageError(
            f"Value of type {type(value).__name__!r} is not valid for kind '{kind.value}'.",
            argument="value",
        )


def to_kind(kind: ValueKind | str) -> ValueKind:
    """Look up a kind by value, e.g. ``"integer"``."""
    try:
        return ValueKind(kind)
    except ValueError:
        valid = sorted(k.value for k in ValueKind)
        raise BuilderUsageError(
            f"Unknown value kind {kind!r}. Valid kinds: {valid}", argument="kind"
        ) from None


def resolve_kind(value: Any, kind: ValueKind | str | None) -> ValueKind | None:
    """Validate an explicit kind, or infer one.  ``None`` values may stay untyped."""
    if kind is not None:
        kind = to_kind(kind)
        check_kind(value, kind)
        return kind
    if value is None:
        return None
    return infer_kind(value)


def bind_value(
    ps: PreparedStatement,
    position: int,
    value: Any,
    kind: ValueKind | None,
    null_type: SqlType,
) -> None:
    """Set ``value`` at ``position``; ``None`` binds a typed SQL NULL."""
    if value is None:
        ps.set_null(position, null_type)
    else:
        ps.set_value(position, value, kind)


class SqlParameter(SqlFragment):
    """A placeholder bound to one typed value.

    Renders ``template`` (``?`` by default).  In debug mode the value's
    escaped text follows as a trailing comment, e.g. ``?  /* 42 */``.

    Args:
        ctx: Build context supplying the debug flag and the dialect's
            untyped-null type code.
        value: The value to bind; may be ``None``.
        kind: Semantic type of ``value``.  Inferred when omitted.
        template: Placeholder text containing exactly one ``?``.
    """

    def __init__(
        self,
        ctx: BuildContext,
        value: Any,
        kind: ValueKind | str | None = None,
        template: str = PLACEHOLDER,
    ) -> None:
        if template.count(PLACEHOLDER) != 1:
            raise BuilderUsageError(
                f"Parameter template must contain exactly one '?': {template!r}",
                argument="template",
            )
        self._ctx = ctx
        self._value = value
        self._kind = resolve_kind(value, kind)
        self._template = template

    @property
    def value(self) -> Any:
        return self._value

    @property
    def kind(self) -> ValueKind | None:
        return self._kind

    def append_to(self, w: SqlWriter) -> None:
        w.append(self._template)
        if self._ctx.debug:
            w.append("  /* ")
            w.append("null" if self._value is None else escape_comment(str(self._value)))
            w.append(" */")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        bind_value(ps, seq.next(), self._value, self._kind, self._ctx.null_type)

    def represents_null_value(self) -> bool:
        return self._value is None

    def __repr__(self) -> str:
        return f"SqlParameter({self._value!r}, kind={self._kind})"
