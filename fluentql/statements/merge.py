"""MERGE statements (upsert against ``dual``).

Each column is registered with a role:

* :meth:`MergeBuilder.on` joins on the column and also inserts it;
* :meth:`MergeBuilder.insert_or_update` updates it when matched and inserts
  it otherwise;
* :meth:`MergeBuilder.insert` only inserts it.

ON entries use the null-aware equality, so a ``None`` key renders
``col is NULL`` and binds nothing.  Parameters are bound in render order:
ON entries, then UPDATE entries, then INSERT entries.
"""
from __future__ import annotations

from enum import Flag, auto
from typing import TYPE_CHECKING

from fluentql.fragment.base import SqlRaw
from fluentql.fragment.conditions import (
    CompositeCondition,
    ExpressionBuilder,
    LogicalOperator,
    RelationalOperator,
    SimpleCondition,
)
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.writer import SqlWriter
from fluentql.statements.base import ColumnAssignment, SqlStatement, require_text, write_assignments

if TYPE_CHECKING:
    from fluentql.context import BuildContext
    from fluentql.execution.base import PreparedStatement


class MergeClauseFlag(Flag):
    ON = auto()
    UPDATE = auto()
    INSERT = auto()


class MergeClause(ColumnAssignment):
    def __init__(self, flags: MergeClauseFlag, column: str, value: ExpressionBuilder) -> None:
        super().__init__(column, value)
        self.flags = flags
        self.on_condition = SimpleCondition(SqlRaw(column), RelationalOperator.EQ, value, fix_null_rhs=True)


class MergeBuilder(SqlStatement):
    """Example::

        sql.merge_into("emp")\\
            .on("empno").value(7839)\\
            .insert_or_update("sal").value(5000)\\
            .insert("ename").value("KING")
    """

    def __init__(self, ctx: BuildContext, table: str) -> None:
        super().__init__(ctx)
        self._table = require_text(table, "table")
        self._clauses: list[MergeClause] = []

    def _add(self, flags: MergeClauseFlag, column: str) -> ExpressionBuilder[MergeBuilder]:
        value: ExpressionBuilder[MergeBuilder] = ExpressionBuilder(self._ctx, self)
        self._clauses.append(MergeClause(flags, column, value))
        return value

    def on(self, column: str) -> ExpressionBuilder[MergeBuilder]:
        return self._add(MergeClauseFlag.ON | MergeClauseFlag.INSERT, column)

    def insert_or_update(self, column: str) -> ExpressionBuilder[MergeBuilder]:
        return self._add(MergeClauseFlag.UPDATE | MergeClauseFlag.INSERT, column)

    def insert(self, column: str) -> ExpressionBuilder[MergeBuilder]:
        return self._add(MergeClauseFlag.INSERT, column)

    def _with_flag(self, flag: MergeClauseFlag) -> list[MergeClause]:
        return [c for c in self._clauses if flag in c.flags]

    def _on_condition(self) -> CompositeCondition:
        return CompositeCondition(
            [c.on_condition for c in self._with_flag(MergeClauseFlag.ON)], LogicalOperator.AND
        )

    def append_to(self, w: SqlWriter) -> None:
        updates = self._with_flag(MergeClauseFlag.UPDATE)
        inserts = self._with_flag(MergeClauseFlag.INSERT)

        w.append("merge into ").append(self._table).appendln(" using dual on (")
        w.increase_indent()
        w.appendln(self._on_condition())
        w.decrease_indent()
        w.appendln(")")
        if updates:
            w.appendln("when matched then update set")
            write_assignments(w, updates)
        w.append("when not matched then insert (")
        w.append(", ".join(c.column for c in inserts))
        w.append(") values (")
        for i, clause in enumerate(inserts):
            if i:
                w.append(", ")
            w.append(clause.value)
        w.append(")")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        self._on_condition().bind(ps, seq)
        for clause in self._with_flag(MergeClauseFlag.UPDATE):
            clause.bind(ps, seq)
        for clause in self._with_flag(MergeClauseFlag.INSERT):
            clause.bind(ps, seq)
