"""INSERT statements.

An INSERT has exactly one kind of body: an explicit values list or a
subquery.  Asking for one kind after the other was set raises
:class:`~fluentql.errors.InsertBodyError`.  With no body at all the
statement renders ``default values``, which not every database accepts.

Example::

    sql.insert_into("emp").set("ename").value("KING").set("job").value("PRESIDENT")
    # insert into emp (ename, job)
    # values (?, ?)

    ins = sql.insert_into("emp2")
    ins.subquery("ename", "job").select("ename", "job").from_("emp")
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional, TypeVar

from fluentql.errors import InsertBodyError
from fluentql.fragment.base import SqlFragment
from fluentql.fragment.conditions import ExpressionBuilder
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.writer import SqlWriter
from fluentql.statements.base import ColumnAssignment, SqlStatement, require_text
from fluentql.statements.select import SelectBuilder

if TYPE_CHECKING:
    from fluentql.context import BuildContext
    from fluentql.execution.base import PreparedStatement

P = TypeVar("P")


class InsertValuesBuilder(SqlFragment):
    """The ``(columns) values (expressions)`` body of an INSERT."""

    def __init__(self, ctx: BuildContext) -> None:
        self._ctx = ctx
        self._assignments: list[ColumnAssignment] = []

    def set(self, column: str) -> ExpressionBuilder[InsertValuesBuilder]:
        return self._add(column, self)

    def _add(self, column: str, parent: P) -> ExpressionBuilder[P]:
        value: ExpressionBuilder[P] = ExpressionBuilder(self._ctx, parent)
        self._assignments.append(ColumnAssignment(column, value))
        return value

    @property
    def columns(self) -> list[str]:
        return [a.column for a in self._assignments]

    def __len__(self) -> int:
        return len(self._assignments)

    def append_to(self, w: SqlWriter) -> None:
        w.append("(").append(", ".join(self.columns)).appendln(")")
        w.append("values (")
        for i, assignment in enumerate(self._assignments):
            if i:
                w.append(", ")
            w.append(assignment.value)
        w.append(")")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        for assignment in self._assignments:
            assignment.bind(ps, seq)


class InsertBuilder(SqlStatement):
    """``insert into <table>`` followed by a values list or a subquery."""

    def __init__(self, ctx: BuildContext, table: str) -> None:
        super().__init__(ctx)
        self._table = require_text(table, "table")
        self._body: Optional[SqlFragment] = None
        self._columns: tuple[str, ...] = ()

    def subquery(self, *columns: str) -> SelectBuilder:
        """Use a SELECT as the body, inserting into ``columns``.

        Returns:
            The new, empty SELECT to fill in.
        """
        if self._body is not None:
            raise InsertBodyError("subquery", self._body_kind())
        self._columns = tuple(require_text(c, "column") for c in columns)
        body = SelectBuilder(self._ctx)
        self._body = body
        return body

    def values(self) -> InsertValuesBuilder:
        """Return the values-list body, creating it on first use."""
        if isinstance(self._body, InsertValuesBuilder):
            return self._body
        if self._body is not None:
            raise InsertBodyError("values", self._body_kind())
        body = InsertValuesBuilder(self._ctx)
        self._body = body
        return body

    def set(self, column: str) -> ExpressionBuilder[InsertBuilder]:
        """Shorthand for ``values().set(column)`` that hands this statement back."""
        return self.values()._add(column, self)

    def _body_kind(self) -> str:
        return "values" if isinstance(self._body, InsertValuesBuilder) else "subquery"

    def append_to(self, w: SqlWriter) -> None:
        w.append("insert into ").append(self._table)
        body = self._body
        if isinstance(body, InsertValuesBuilder) and len(body):
            w.append(" ").append(body)
        elif isinstance(body, SelectBuilder):
            if self._columns:
                w.append(" (").append(", ".join(self._columns)).append(")")
            w.appendln()
            w.append(body)
        else:
            w.appendln()
            w.append("default values")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        if self._body is not None:
            self._body.bind(ps, seq)
