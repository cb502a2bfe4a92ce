"""Condition algebra and the fluent condition/expression builders.

Condition fragments
-------------------
SimpleCondition       ``lhs OP rhs`` with the optional null-aware rewrite
CompositeCondition    AND / OR over an ordered list of conditions
NotCondition          ``not ( ... )``
ExistsCondition       ``exists ( <subquery> )``
InListCondition       ``lhs in (?, ?, ...)``, chunked and OR-joined
InSubqueryCondition   ``lhs in ( <subquery> )``

Fluent builders
---------------
``ConditionBuilder`` holds a left-hand side and produces one condition;
``ExpressionBuilder`` holds the right-hand side of a comparison, a SET
assignment or a MERGE column.  Each terminal call hands back the owning
object (a statement, or the condition builder itself) and drops its own
reference to it, so finished statements hold no back-references.
"""
from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from fluentql.errors import BuilderUsageError
from fluentql.fragment.base import (
    NULL_LITERAL,
    Binder,
    CompositeFragment,
    Condition,
    SqlFragment,
    SqlRaw,
    keyword_subquery,
    wrap_in_parentheses,
)
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.values import (
    SqlParameter,
    ValueKind,
    bind_value,
    check_kind,
    resolve_kind,
    to_kind,
)
from fluentql.fragment.writer import SqlWriter
from fluentql.utils import escape_string, partition

if TYPE_CHECKING:
    from fluentql.context import BuildContext
    from fluentql.execution.base import PreparedStatement

P = TypeVar("P")


class RelationalOperator(Enum):
    EQ = "="
    NOT_EQ = "<>"
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    LIKE = "like"
    IS = "is"
    IS_NOT = "is not"
    IN = "in"


class LogicalOperator(Enum):
    AND = "and"
    OR = "or"


# ---------------------------------------------------------------------------
# Condition fragments
# ---------------------------------------------------------------------------


class SimpleCondition(Condition):
    """A binary comparison ``lhs OP rhs``.

    With ``fix_null_rhs`` set, a right-hand side that represents ``NULL``
    turns ``=`` into ``is`` and ``<>`` into ``is not``, and renders the
    ``NULL`` keyword instead of a placeholder.  The rewrite is decided once,
    on the first render or bind, so both passes always agree.
    """

    def __init__(
        self,
        lhs: SqlFragment,
        operator: RelationalOperator,
        rhs: SqlFragment,
        fix_null_rhs: bool = False,
    ) -> None:
        self._lhs = lhs
        self._operator = operator
        self._rhs = rhs
        self._fix_null_rhs = fix_null_rhs

    def _resolve(self) -> None:
        if not self._fix_null_rhs:
            return
        rhs_null = self._rhs.represents_null_value()
        self._fix_null_rhs = False
        if not rhs_null:
            return
        if self._operator is RelationalOperator.EQ:
            self._operator = RelationalOperator.IS
            self._rhs = NULL_LITERAL
        elif self._operator is RelationalOperator.NOT_EQ:
            self._operator = RelationalOperator.IS_NOT
            self._rhs = NULL_LITERAL

    @property
    def operator(self) -> RelationalOperator:
        self._resolve()
        return self._operator

    def append_to(self, w: SqlWriter) -> None:
        self._resolve()
        w.append(self._lhs)
        w.append(f" {self._operator.value} ")
        w.append(self._rhs)

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        self._resolve()
        self._lhs.bind(ps, seq)
        self._rhs.bind(ps, seq)


class CompositeCondition(Condition):
    """Conditions joined by ``and`` / ``or``.

    Zero conditions render ``1=1``; a single condition renders bare; two or
    more are parenthesized.
    """

    def __init__(self, conditions: Iterable[Condition], operator: LogicalOperator) -> None:
        self._conditions: list[Condition] = []
        self._operator = operator
        for condition in conditions:
            self.add(condition)

    def add(self, condition: Condition) -> CompositeCondition:
        if condition is None:
            raise BuilderUsageError("condition must not be None", argument="condition")
        self._conditions.append(condition)
        return self

    def __len__(self) -> int:
        return len(self._conditions)

    def append_to(self, w: SqlWriter) -> None:
        if not self._conditions:
            w.append("1=1")
            return
        many = len(self._conditions) > 1
        if many:
            w.append("(")
        for i, condition in enumerate(self._conditions):
            if i:
                w.append(f" {self._operator.value} ")
            w.append(condition)
        if many:
            w.append(")")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        for condition in self._conditions:
            condition.bind(ps, seq)


class NotCondition(Condition):
    def __init__(self, condition: Condition) -> None:
        if condition is None:
            raise BuilderUsageError("condition must not be None", argument="condition")
        self._wrapped = condition

    def append_to(self, w: SqlWriter) -> None:
        w.appendln("not (")
        w.increase_indent()
        w.appendln(self._wrapped)
        w.decrease_indent()
        w.append(")")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        self._wrapped.bind(ps, seq)


class ExistsCondition(Condition):
    def __init__(self, subquery: SqlFragment) -> None:
        if subquery is None:
            raise BuilderUsageError("subquery must not be None", argument="subquery")
        self._body = keyword_subquery("exists", subquery)

    def append_to(self, w: SqlWriter) -> None:
        w.append(self._body)

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        self._body.bind(ps, seq)


class InListCondition(Condition):
    """``lhs in (?, ...)`` over a literal collection.

    An empty collection renders the always-false ``1=0`` and binds nothing.
    Larger collections are split into chunks of at most
    ``ctx.max_in_list_size`` placeholders; the chunks are OR-joined and
    parenthesized.

    Args:
        ctx: Build context (chunk size, null type code).
        lhs: Left-hand side fragment.
        values: The values; iterated once, at construction.
        kind: Element kind.  Inferred from the first non-null element.
    """

    def __init__(
        self,
        ctx: BuildContext,
        lhs: SqlFragment,
        values: Iterable[Any],
        kind: ValueKind | str | None = None,
    ) -> None:
        if values is None or isinstance(values, (str, bytes)):
            raise BuilderUsageError(
                "IN values must be a collection of values", argument="values"
            )
        self._ctx = ctx
        self._lhs = lhs
        self._values = tuple(values)
        if kind is None:
            first = next((v for v in self._values if v is not None), None)
            kind = resolve_kind(first, None)
        else:
            kind = to_kind(kind)
        if kind is not None:
            for value in self._values:
                check_kind(value, kind)
        self._kind = kind

    def _chunks(self) -> list:
        return partition(self._values, self._ctx.max_in_list_size)

    def append_to(self, w: SqlWriter) -> None:
        if not self._values:
            w.append("1=0")
            return
        chunks = self._chunks()
        many = len(chunks) > 1
        if many:
            w.append("(")
        for i, chunk in enumerate(chunks):
            if i:
                w.append(" or ")
            w.append(self._lhs)
            w.append(" in (")
            w.append(", ".join("?" * len(chunk)))
            w.append(")")
        if many:
            w.append(")")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        if not self._values:
            return
        null_type = self._ctx.null_type
        for chunk in self._chunks():
            self._lhs.bind(ps, seq)
            for value in chunk:
                bind_value(ps, seq.next(), value, self._kind, null_type)


class InSubqueryCondition(Condition):
    def __init__(self, lhs: SqlFragment, subquery: SqlFragment) -> None:
        if subquery is None:
            raise BuilderUsageError("subquery must not be None", argument="subquery")
        self._lhs = lhs
        self._subquery = subquery

    def append_to(self, w: SqlWriter) -> None:
        w.append(self._lhs)
        w.appendln(" in (")
        w.increase_indent()
        w.append(self._subquery)
        w.decrease_indent()
        w.append(")")

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        self._lhs.bind(ps, seq)
        self._subquery.bind(ps, seq)


# ---------------------------------------------------------------------------
# Fluent builders
# ---------------------------------------------------------------------------


class ExpressionBuilder(SqlFragment, Generic[P]):
    """The right-hand side of a comparison or assignment.

    Every setter stores the expression and returns the owner ``P``.  An
    expression can be set once.

    Args:
        ctx: Build context for typed parameters.
        parent: The object handed back by the setter.
    """

    def __init__(self, ctx: BuildContext, parent: P) -> None:
        self._ctx = ctx
        self._parent: P | None = parent
        self._wrapped: SqlFragment | None = None

    def _set(self, fragment: SqlFragment) -> P:
        if self._wrapped is not None:
            raise BuilderUsageError("expression has already been set", argument="expression")
        self._wrapped = fragment
        parent, self._parent = self._parent, None
        return parent  # type: ignore[return-value]

    def value(self, value: Any, kind: ValueKind | str | None = None) -> P:
        """Bind ``value`` through a ``?`` placeholder."""
        return self._set(SqlParameter(self._ctx, value, kind))

    def raw_value(self, template: str, value: Any, kind: ValueKind | str | None = None) -> P:
        """Bind ``value`` through a custom template such as ``'? * 2'``."""
        return self._set(SqlParameter(self._ctx, value, kind, template=template))

    def raw(self, sql: str, binder: Binder | None = None) -> P:
        """Use trusted SQL text, optionally with a binder for its parameters."""
        if sql is None:
            raise BuilderUsageError("sql must not be None", argument="sql")
        return self._set(SqlRaw(sql, binder))

    def subquery(self, subquery: SqlFragment) -> P:
        """Use a single-row subquery as the value."""
        return self._set(wrap_in_parentheses(subquery, True))

    def all(self, subquery: SqlFragment) -> P:
        return self._set(keyword_subquery("all", subquery))

    def any(self, subquery: SqlFragment) -> P:
        return self._set(keyword_subquery("any", subquery))

    def _require(self) -> SqlFragment:
        if self._wrapped is None:
            raise BuilderUsageError("expression has no value", argument="expression")
        return self._wrapped

    def append_to(self, w: SqlWriter) -> None:
        self._require().append_to(w)

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        self._require().bind(ps, seq)

    def represents_null_value(self) -> bool:
        return self._require().represents_null_value()


class ConditionBuilder(Condition, Generic[P]):
    """Builds one condition on a left-hand side expression.

    Created by ``where(lhs)`` / ``having(lhs)`` on a statement, in which case
    terminal calls return the statement, or by ``SqlBuilder.condition(lhs)``,
    in which case they return the condition builder itself.

    Example::

        sql.select("ename").from_("emp").where("empno").eq().value(7839)
        sql.condition("job").in_(["CLERK", "ANALYST"])
    """

    def __init__(self, ctx: BuildContext, lhs: str, parent: P | None = None) -> None:
        if lhs is None:
            raise BuilderUsageError("left-hand side must not be None", argument="lhs")
        self._ctx = ctx
        self._lhs = SqlRaw(lhs)
        self._parent = parent
        self._condition: Condition | None = None

    def _take_parent(self) -> P:
        if self._condition is not None:
            raise BuilderUsageError(
                f"condition on '{self._lhs.get_sql()}' has already been set", argument="lhs"
            )
        parent = self._parent if self._parent is not None else self
        self._parent = None
        return parent  # type: ignore[return-value]

    def _compare(self, operator: RelationalOperator, fix_null_rhs: bool = False) -> ExpressionBuilder[P]:
        rhs: ExpressionBuilder[P] = ExpressionBuilder(self._ctx, self._take_parent())
        self._condition = SimpleCondition(self._lhs, operator, rhs, fix_null_rhs)
        return rhs

    def _complete(self, condition: Condition) -> P:
        parent = self._take_parent()
        self._condition = condition
        return parent

    # fmt: off
    def eq(self) -> ExpressionBuilder[P]: return self._compare(RelationalOperator.EQ)
    def not_eq(self) -> ExpressionBuilder[P]: return self._compare(RelationalOperator.NOT_EQ)
    def gt(self) -> ExpressionBuilder[P]: return self._compare(RelationalOperator.GT)
    def gte(self) -> ExpressionBuilder[P]: return self._compare(RelationalOperator.GTE)
    def lt(self) -> ExpressionBuilder[P]: return self._compare(RelationalOperator.LT)
    def lte(self) -> ExpressionBuilder[P]: return self._compare(RelationalOperator.LTE)
    # fmt: on

    def eq_nullable(self) -> ExpressionBuilder[P]:
        """``=``, rewritten to ``is NULL`` when the right-hand side is null."""
        return self._compare(RelationalOperator.EQ, fix_null_rhs=True)

    def not_eq_nullable(self) -> ExpressionBuilder[P]:
        """``<>``, rewritten to ``is not NULL`` when the right-hand side is null."""
        return self._compare(RelationalOperator.NOT_EQ, fix_null_rhs=True)

    def in_(self, values: Iterable[Any], kind: ValueKind | str | None = None) -> P:
        """``lhs in (?, ...)``; an empty collection yields ``1=0``."""
        return self._complete(InListCondition(self._ctx, self._lhs, values, kind))

    def in_subquery(self, subquery: SqlFragment) -> P:
        return self._complete(InSubqueryCondition(self._lhs, subquery))

    def is_null(self) -> P:
        return self._complete(SimpleCondition(self._lhs, RelationalOperator.IS, NULL_LITERAL))

    def is_not_null(self) -> P:
        return self._complete(SimpleCondition(self._lhs, RelationalOperator.IS_NOT, NULL_LITERAL))

    def like(self, pattern: str, escape_char: str | None = None) -> P:
        """``lhs like ?`` with ``pattern`` bound as a string.

        With ``escape_char`` an ``escape 'c'`` clause follows; see
        :func:`fluentql.utils.escape_like_string`.
        """
        if pattern is None:
            raise BuilderUsageError("pattern must not be None", argument="pattern")
        rhs: SqlFragment = SqlParameter(self._ctx, pattern, ValueKind.STRING)
        if escape_char is not None:
            if len(escape_char) != 1:
                raise BuilderUsageError(
                    f"escape_char must be a single character, got {escape_char!r}",
                    argument="escape_char",
                )
            rhs = CompositeFragment(rhs, SqlRaw(f" escape '{escape_string(escape_char)}'"))
        return self._complete(SimpleCondition(self._lhs, RelationalOperator.LIKE, rhs))

    def _require(self) -> Condition:
        if self._condition is None:
            raise BuilderUsageError(
                f"condition on '{self._lhs.get_sql()}' is incomplete", argument="lhs"
            )
        return self._condition

    def append_to(self, w: SqlWriter) -> None:
        w.append(self._require())

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        self._require().bind(ps, seq)
