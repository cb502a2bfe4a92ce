"""SELECT statements and compound SELECTs.

A :class:`SelectBuilder` keeps one collection per clause slot and renders
the slots in a fixed order::

    with / select / from (+ joins) / where / group by / having / order by /
    offset / fetch first

The bind pass walks the slots in the same order.  Within a slot, raw text
injected with :meth:`SelectBuilder.raw` is rendered and bound in placement
order: before the keyword, after the keyword, the clause body, after the
clause body.

Example::

    sql.select("ename", "sal")\\
        .from_("emp e")\\
        .inner_join("dept d on e.deptno = d.deptno")\\
        .where("d.loc").eq().value("DALLAS")\\
        .order_by("sal desc")\\
        .fetch_first(10)
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Union

from fluentql.errors import BuilderUsageError, ClauseAlreadySetError
from fluentql.fragment.base import (
    Binder,
    CompositeFragment,
    Condition,
    SqlFragment,
    SqlRaw,
    wrap_in_parentheses,
)
from fluentql.fragment.conditions import ConditionBuilder
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.values import ValueKind
from fluentql.fragment.writer import SqlWriter
from fluentql.statements.base import SqlSelectStatement, add_condition, require_text
from fluentql.utils import to_literal_string

if TYPE_CHECKING:
    from fluentql.context import BuildContext
    from fluentql.execution.base import PreparedStatement


class Placement(Enum):
    """Where raw text is injected relative to a SELECT clause."""

    BEFORE_KEYWORD = "before_keyword"
    AFTER_KEYWORD = "after_keyword"
    AFTER_EXPRESSION = "after_expression"


class SelectClause(Enum):
    """The clause slots of a SELECT, in render order."""

    WITH = "with"
    SELECT = "select"
    FROM = "from"
    WHERE = "where"
    GROUP_BY = "group by"
    HAVING = "having"
    ORDER_BY = "order by"
    OFFSET = "offset"
    FETCH_FIRST = "fetch first"

    @property
    def keyword(self) -> str:
        return self.value


class JoinType(Enum):
    INNER = "inner join"
    LEFT = "left join"
    RIGHT = "right join"
    FULL = "full join"
    CROSS = "cross join"


def _row_count(n: int, argument: str) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise BuilderUsageError(f"{argument} must be an int, got {n!r}", argument=argument)
    if n < 0:
        raise BuilderUsageError(f"{argument} must not be negative, got {n}", argument=argument)
    return n


def _int_binder(n: int) -> Binder:
    def bind(ps: PreparedStatement, seq: ParameterSequence) -> None:
        ps.set_value(seq.next(), n, ValueKind.INTEGER)

    return bind


class WithClauseBuilder(SqlFragment):
    """One ``name as (subquery)`` entry of a WITH clause.

    :meth:`as_` hands the owning SELECT back and drops the reference to it.
    """

    def __init__(self, name: str, parent: SelectBuilder) -> None:
        self._name = require_text(name, "name")
        self._parent: SelectBuilder | None = parent
        self._subquery: SqlSelectStatement | None = None

    def as_(self, subquery: SqlSelectStatement) -> SelectBuilder:
        if subquery is None:
            raise BuilderUsageError("subquery must not be None", argument="subquery")
        if self._parent is None:
            raise BuilderUsageError(
                f"with clause '{self._name}' has already been defined", argument="subquery"
            )
        self._subquery = subquery
        parent, self._parent = self._parent, None
        return parent

    def _require(self) -> SqlSelectStatement:
        if self._subquery is None:
            raise BuilderUsageError(
                f"with clause '{self._name}' has no subquery; call as_()", argument="subquery"
            )
        return self._subquery

    def append_to(self, w: SqlWriter) -> None:
        subquery = self._require()
        w.append(self._name).appendln(" as (")
        w.increase_indent()
        w.append(subquery)
        w.decrease_indent()
        w.append(")")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        self._require().bind(ps, seq)


class SelectBuilder(SqlSelectStatement):
    """Accumulates the clauses of one SELECT statement."""

    def __init__(self, ctx: BuildContext) -> None:
        super().__init__(ctx)
        self._with: list[SqlFragment] = []
        self._select: list[SqlFragment] = []
        self._from: SqlFragment | None = None
        self._joins: list[str] = []
        self._where: list[SqlFragment] = []
        self._group_by: list[SqlFragment] = []
        self._having: list[SqlFragment] = []
        self._order_by: list[SqlFragment] = []
        self._offset: SqlFragment | None = None
        self._fetch_first: SqlFragment | None = None
        self._raws: dict[tuple[Placement, SelectClause], list[SqlRaw]] = {}

    # ------------------------------------------------------------------
    # Clause setters
    # ------------------------------------------------------------------

    def distinct(self) -> SelectBuilder:
        return self.raw(Placement.AFTER_KEYWORD, SelectClause.SELECT, "distinct")

    def with_(self, name: str) -> WithClauseBuilder:
        """Start a ``name as (...)`` entry; finish it with ``as_(subquery)``."""
        clause = WithClauseBuilder(name, self)
        self._with.append(clause)
        return clause

    def select(self, *columns: str) -> SelectBuilder:
        for column in columns:
            self._select.append(SqlRaw(require_text(column, "column")))
        return self

    def select_literal(self, literal: str, alias: str | None = None) -> SelectBuilder:
        """Add ``'literal' AS alias`` to the select list, quoting ``literal``."""
        text = to_literal_string(require_text(literal, "literal"))
        if alias is not None:
            text += f" AS {alias}"
        self._select.append(SqlRaw(text))
        return self

    def from_(self, source: Union[str, SqlSelectStatement], alias: str | None = None) -> SelectBuilder:
        """Set the FROM clause to a table expression or a parenthesized subquery.

        Raises:
            ClauseAlreadySetError: If FROM was set before.
        """
        if self._from is not None:
            raise ClauseAlreadySetError("from")
        if source is None:
            raise BuilderUsageError("from clause must not be None", argument="source")
        if isinstance(source, SqlSelectStatement):
            fragment = wrap_in_parentheses(source, True)
            if alias is not None:
                fragment = CompositeFragment(fragment, SqlRaw(f" {alias}"))
            self._from = fragment
        else:
            self._from = SqlRaw(source if alias is None else f"{source} {alias}")
        return self

    def join(self, join_type: JoinType, clause: str) -> SelectBuilder:
        self._joins.append(f"{join_type.value} {require_text(clause, 'clause')}")
        return self

    def inner_join(self, clause: str) -> SelectBuilder:
        return self.join(JoinType.INNER, clause)

    def left_join(self, clause: str) -> SelectBuilder:
        return self.join(JoinType.LEFT, clause)

    def right_join(self, clause: str) -> SelectBuilder:
        return self.join(JoinType.RIGHT, clause)

    def full_join(self, clause: str) -> SelectBuilder:
        return self.join(JoinType.FULL, clause)

    def cross_join(self, clause: str) -> SelectBuilder:
        return self.join(JoinType.CROSS, clause)

    def where(self, lhs: Union[str, Condition]) -> ConditionBuilder[SelectBuilder] | SelectBuilder:
        """Add a WHERE entry.

        Pass a column expression to get a :class:`ConditionBuilder` whose
        terminal call returns this builder, or a finished condition.
        """
        return add_condition(self._ctx, self._where, lhs, self)

    def having(self, lhs: Union[str, Condition]) -> ConditionBuilder[SelectBuilder] | SelectBuilder:
        return add_condition(self._ctx, self._having, lhs, self)

    def group_by(self, *columns: str) -> SelectBuilder:
        for column in columns:
            self._group_by.append(SqlRaw(require_text(column, "column")))
        return self

    def order_by(self, *columns: str) -> SelectBuilder:
        for column in columns:
            self._order_by.append(SqlRaw(require_text(column, "column")))
        return self

    def offset(self, n: int) -> SelectBuilder:
        """Skip ``n`` rows (SQL:2008 ``offset ? rows``)."""
        if self._offset is not None:
            raise ClauseAlreadySetError("offset")
        self._offset = SqlRaw("? rows", _int_binder(_row_count(n, "offset")))
        return self

    def fetch_first(self, n: int) -> SelectBuilder:
        """Return at most ``n`` rows (SQL:2008 ``fetch first ? rows only``)."""
        if self._fetch_first is not None:
            raise ClauseAlreadySetError("fetch first")
        self._fetch_first = SqlRaw("? rows only", _int_binder(_row_count(n, "fetch_first")))
        return self

    def raw(
        self,
        placement: Placement,
        clause: SelectClause,
        sql: str,
        binder: Binder | None = None,
    ) -> SelectBuilder:
        """Inject raw text around a clause, e.g. an optimizer hint after ``select``."""
        self._raws.setdefault((placement, clause), []).append(SqlRaw(require_text(sql, "sql"), binder))
        return self

    # ------------------------------------------------------------------
    # Render / bind
    # ------------------------------------------------------------------

    def _raw(self, placement: Placement, clause: SelectClause) -> Sequence[SqlRaw]:
        return self._raws.get((placement, clause), ())

    def _slots(self) -> list[tuple[SelectClause, list[SqlFragment]]]:
        return [
            (SelectClause.WITH, self._with),
            (SelectClause.SELECT, self._select),
            (SelectClause.FROM, [self._from] if self._from is not None else []),
            (SelectClause.WHERE, self._where),
            (SelectClause.GROUP_BY, self._group_by),
            (SelectClause.HAVING, self._having),
            (SelectClause.ORDER_BY, self._order_by),
            (SelectClause.OFFSET, [self._offset] if self._offset is not None else []),
            (SelectClause.FETCH_FIRST, [self._fetch_first] if self._fetch_first is not None else []),
        ]

    def _write_clause(
        self,
        w: SqlWriter,
        clause: SelectClause,
        fragments: list[SqlFragment],
        newline: bool,
        join: str,
    ) -> None:
        for raw in self._raw(Placement.BEFORE_KEYWORD, clause):
            w.appendln(raw)
        if fragments:
            w.append(clause.keyword)
            for raw in self._raw(Placement.AFTER_KEYWORD, clause):
                w.append(" ").append(raw)
            multiline = newline and len(fragments) > 1
            if multiline:
                w.appendln()
                w.increase_indent()
            else:
                w.append(" ")
            for i, fragment in enumerate(fragments):
                if newline:
                    w.appendln(fragment)
                else:
                    w.append(fragment)
                if i < len(fragments) - 1:
                    w.append(join)
            if multiline:
                w.decrease_indent()
            elif not newline:
                w.appendln()
        else:
            for raw in self._raw(Placement.AFTER_KEYWORD, clause):
                w.appendln(raw)
        for raw in self._raw(Placement.AFTER_EXPRESSION, clause):
            w.appendln(raw)

    def _write_from(self, w: SqlWriter) -> None:
        clause = SelectClause.FROM
        for raw in self._raw(Placement.BEFORE_KEYWORD, clause):
            w.appendln(raw)
        if self._from is not None:
            w.append(clause.keyword).append(" ")
            for raw in self._raw(Placement.AFTER_KEYWORD, clause):
                w.append(raw).append(" ")
            w.appendln(self._from)
        else:
            for raw in self._raw(Placement.AFTER_KEYWORD, clause):
                w.appendln(raw)
        for join in self._joins:
            w.appendln(join)
        for raw in self._raw(Placement.AFTER_EXPRESSION, clause):
            w.appendln(raw)

    def append_to(self, w: SqlWriter) -> None:
        self._write_clause(w, SelectClause.WITH, self._with, True, ",")
        self._write_clause(w, SelectClause.SELECT, self._select, False, ", ")
        self._write_from(w)
        self._write_clause(w, SelectClause.WHERE, self._where, True, "and ")
        self._write_clause(w, SelectClause.GROUP_BY, self._group_by, False, ", ")
        self._write_clause(w, SelectClause.HAVING, self._having, True, "and ")
        self._write_clause(w, SelectClause.ORDER_BY, self._order_by, False, ", ")
        offset = [self._offset] if self._offset is not None else []
        self._write_clause(w, SelectClause.OFFSET, offset, False, "")
        fetch_first = [self._fetch_first] if self._fetch_first is not None else []
        self._write_clause(w, SelectClause.FETCH_FIRST, fetch_first, False, "")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        for clause, fragments in self._slots():
            for raw in self._raw(Placement.BEFORE_KEYWORD, clause):
                raw.bind(ps, seq)
            for raw in self._raw(Placement.AFTER_KEYWORD, clause):
                raw.bind(ps, seq)
            for fragment in fragments:
                fragment.bind(ps, seq)
            for raw in self._raw(Placement.AFTER_EXPRESSION, clause):
                raw.bind(ps, seq)


class CompositeSelect(SqlSelectStatement):
    """SELECTs joined by a set operator such as ``union`` or ``except``."""

    def __init__(self, ctx: BuildContext, selects: Iterable[SqlSelectStatement], keyword: str) -> None:
        super().__init__(ctx)
        self._selects = list(selects)
        if not self._selects:
            raise BuilderUsageError(f"{keyword} needs at least one select", argument="selects")
        if any(select is None for select in self._selects):
            raise BuilderUsageError("selects must not contain None", argument="selects")
        self._keyword = keyword

    @property
    def keyword(self) -> str:
        return self._keyword

    def append_to(self, w: SqlWriter) -> None:
        last = len(self._selects) - 1
        for i, select in enumerate(self._selects):
            w.append(select)
            if i < last:
                w.appendln(self._keyword)

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        for select in self._selects:
            select.bind(ps, seq)
