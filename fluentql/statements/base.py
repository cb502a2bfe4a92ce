"""Base classes shared by every statement builder."""
from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, TypeVar

from fluentql.errors import BuilderUsageError
from fluentql.execution.operation import Query, StatementOperation
from fluentql.fragment.base import Condition, SqlFragment
from fluentql.fragment.conditions import ConditionBuilder
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.writer import SqlWriter

if TYPE_CHECKING:
    from fluentql.context import BuildContext
    from fluentql.execution.base import PreparedStatement

T = TypeVar("T")
P = TypeVar("P")


def write_where_block(w: SqlWriter, clauses: Iterable[SqlFragment]) -> None:
    """Write ``where`` then one indented clause per line, each after the first prefixed by ``and``."""
    clauses = list(clauses)
    if not clauses:
        return
    w.appendln("where")
    w.increase_indent()
    for i, clause in enumerate(clauses):
        if i:
            w.append("and ")
        w.appendln(clause)
    w.decrease_indent()


def write_assignments(w: SqlWriter, assignments: Iterable[SqlFragment]) -> None:
    """Write ``col = expr`` assignments one per line, comma-terminated except the last."""
    assignments = list(assignments)
    w.increase_indent()
    for i, assignment in enumerate(assignments):
        w.append(assignment)
        w.appendln("," if i < len(assignments) - 1 else "")
    w.decrease_indent()


def require_text(value: str | None, argument: str) -> str:
    if value is None:
        raise BuilderUsageError(f"{argument} must not be None", argument=argument)
    return value


class SqlStatement(SqlFragment):
    """A statement that modifies data: INSERT, UPDATE, DELETE or MERGE."""

    def __init__(self, ctx: BuildContext) -> None:
        self._ctx = ctx

    def to_statement(self) -> StatementOperation:
        """Render once and wrap the result in a runnable operation."""
        return StatementOperation(self._ctx.connection_provider, self.get_sql(), self)

    def __str__(self) -> str:
        return self.get_sql()


class SqlSelectStatement(SqlFragment):
    """A statement that returns rows: a SELECT or a compound SELECT."""

    def __init__(self, ctx: BuildContext) -> None:
        self._ctx = ctx

    def to_query(self, row_mapper: Callable[[Any], T]) -> Query[T]:
        """Render once and wrap the result in a runnable query.

        Args:
            row_mapper: Called with each DB-API row, e.g. ``lambda row: row[0]``.
        """
        return Query(self._ctx.connection_provider, self.get_sql(), self, row_mapper)

    def __str__(self) -> str:
        return self.get_sql()


class ColumnAssignment(SqlFragment):
    """``column = expression``, used by UPDATE, INSERT and MERGE."""

    def __init__(self, column: str, value: SqlFragment) -> None:
        self.column = require_text(column, "column")
        self.value = value

    def append_to(self, w: SqlWriter) -> None:
        w.append(self.column).append(" = ").append(self.value)

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        self.value.bind(ps, seq)


def add_condition(
    ctx: BuildContext,
    target: list[SqlFragment],
    lhs: str | Condition,
    parent: P,
) -> ConditionBuilder[P] | P:
    """Append a WHERE/HAVING entry to ``target``.

    A string starts a :class:`ConditionBuilder` whose terminal call returns
    ``parent``; a finished condition is appended as is and ``parent`` is
    returned directly.
    """
    if lhs is None:
        raise BuilderUsageError("condition must not be None", argument="lhs")
    if isinstance(lhs, SqlFragment):
        target.append(lhs)
        return parent
    builder: ConditionBuilder[P] = ConditionBuilder(ctx, lhs, parent)
    target.append(builder)
    return builder
