"""DELETE statements."""
from __future__ import annotations

from typing import TYPE_CHECKING, Union

from fluentql.fragment.base import Condition, SqlFragment
from fluentql.fragment.conditions import ConditionBuilder
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.writer import SqlWriter
from fluentql.statements.base import SqlStatement, add_condition, require_text, write_where_block

if TYPE_CHECKING:
    from fluentql.context import BuildContext
    from fluentql.execution.base import PreparedStatement


class DeleteBuilder(SqlStatement):
    """``delete from <target>`` with optional AND-joined WHERE entries."""

    def __init__(self, ctx: BuildContext, target: str) -> None:
        super().__init__(ctx)
        self._target = require_text(target, "target")
        self._where: list[SqlFragment] = []

    def where(self, lhs: Union[str, Condition]) -> ConditionBuilder[DeleteBuilder] | DeleteBuilder:
        return add_condition(self._ctx, self._where, lhs, self)

    def append_to(self, w: SqlWriter) -> None:
        w.append("delete from ").appendln(self._target)
        write_where_block(w, self._where)

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        for clause in self._where:
            clause.bind(ps, seq)
