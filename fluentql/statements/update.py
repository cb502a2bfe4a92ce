"""UPDATE statements."""
from __future__ import annotations

from typing import TYPE_CHECKING, Union

from fluentql.fragment.base import Condition, SqlFragment
from fluentql.fragment.conditions import ConditionBuilder, ExpressionBuilder
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.writer import SqlWriter
from fluentql.statements.base import (
    ColumnAssignment,
    SqlStatement,
    add_condition,
    require_text,
    write_assignments,
    write_where_block,
)

if TYPE_CHECKING:
    from fluentql.context import BuildContext
    from fluentql.execution.base import PreparedStatement


class UpdateBuilder(SqlStatement):
    """``update <table> set ...`` with optional AND-joined WHERE entries.

    Example::

        sql.update("emp").set("sal").raw("sal * 1.1").where("deptno").eq().value(20)
    """

    def __init__(self, ctx: BuildContext, table: str) -> None:
        super().__init__(ctx)
        self._table = require_text(table, "table")
        self._assignments: list[ColumnAssignment] = []
        self._where: list[SqlFragment] = []

    def set(self, column: str) -> ExpressionBuilder[UpdateBuilder]:
        value: ExpressionBuilder[UpdateBuilder] = ExpressionBuilder(self._ctx, self)
        self._assignments.append(ColumnAssignment(column, value))
        return value

    def where(self, lhs: Union[str, Condition]) -> ConditionBuilder[UpdateBuilder] | UpdateBuilder:
        return add_condition(self._ctx, self._where, lhs, self)

    def append_to(self, w: SqlWriter) -> None:
        w.append("update ").append(self._table).appendln(" set")
        write_assignments(w, self._assignments)
        write_where_block(w, self._where)

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        for assignment in self._assignments:
            assignment.bind(ps, seq)
        for clause in self._where:
            clause.bind(ps, seq)
