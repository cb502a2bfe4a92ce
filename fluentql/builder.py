"""The :class:`SqlBuilder` factory, the entry point for every statement.

One builder holds one configuration (dialect, debug flag) and one optional
connection provider; every statement it creates shares them through a
:class:`~fluentql.context.BuildContext`.

Usage::

    import sqlite3
    from fluentql import SqlBuilder, SingleConnectionProvider

    sql = SqlBuilder(SingleConnectionProvider(sqlite3.connect("app.db")))

    names = sql.select("ename").from_("emp").where("deptno").eq().value(10)\\
        .to_query(lambda row: row[0]).to_list()
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Optional, TypeVar

from fluentql.config import SqlBuilderConfig
from fluentql.context import BuildContext
from fluentql.dialect import DialectFactory, DialectRules, SqlDialect
from fluentql.errors import BuilderUsageError, DialectFeatureError
from fluentql.execution.base import ConnectionProvider, PreparedStatement
from fluentql.execution.batch import BatchStatementBuilder, BatchStatementOperation
from fluentql.fragment.base import Binder, Condition, SqlFragment, SqlRaw
from fluentql.fragment.conditions import (
    CompositeCondition,
    ConditionBuilder,
    ExistsCondition,
    LogicalOperator,
    NotCondition,
    RelationalOperator,
    SimpleCondition,
)
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.values import SqlParameter, ValueKind, bind_value, resolve_kind
from fluentql.statements.base import SqlSelectStatement, SqlStatement
from fluentql.statements.delete import DeleteBuilder
from fluentql.statements.insert import InsertBuilder
from fluentql.statements.merge import MergeBuilder
from fluentql.statements.select import CompositeSelect, SelectBuilder, WithClauseBuilder
from fluentql.statements.update import UpdateBuilder

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=SqlFragment)


def _require_conditions(conditions: tuple[Condition, ...]) -> list[Condition]:
    if any(c is None for c in conditions):
        raise BuilderUsageError("conditions must not contain None", argument="conditions")
    return list(conditions)


class SqlBuilder:
    """Creates statement builders sharing one configuration.

    Args:
        connection_provider: Used by ``to_statement()`` / ``to_query()``
            operations.  May be ``None`` when only SQL text is needed.
        config: Full configuration.  Defaults to the standard dialect with
            debug comments off.
        dialect: Shortcut overriding ``config.dialect``.
        debug: Shortcut overriding ``config.debug``.

    Raises:
        UnknownDialectError: If no rules are registered for the dialect.
    """

    def __init__(
        self,
        connection_provider: Optional[ConnectionProvider] = None,
        config: Optional[SqlBuilderConfig] = None,
        *,
        dialect: SqlDialect | str | None = None,
        debug: bool | None = None,
    ) -> None:
        settings: dict[str, Any] = config.model_dump() if config is not None else {}
        if dialect is not None:
            settings["dialect"] = dialect
        if debug is not None:
            settings["debug"] = debug
        self._config = SqlBuilderConfig(**settings)
        rules = DialectFactory.create(self._config.dialect_name)
        self._ctx = BuildContext(self._config, rules, connection_provider)
        logger.debug(
            "SqlBuilder ready (dialect=%s, debug=%s)", rules.dialect_name, self._config.debug
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> SqlBuilderConfig:
        return self._config

    @property
    def context(self) -> BuildContext:
        return self._ctx

    @property
    def rules(self) -> DialectRules:
        return self._ctx.rules

    @property
    def dialect(self) -> SqlDialect | str:
        return self._config.dialect

    @property
    def debug(self) -> bool:
        """Whether bound values are echoed as comments next to their placeholders."""
        return self._config.debug

    @property
    def connection_provider(self) -> Optional[ConnectionProvider]:
        return self._ctx.connection_provider

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def select(self, *columns: str) -> SelectBuilder:
        return SelectBuilder(self._ctx).select(*columns)

    def select_distinct(self, *columns: str) -> SelectBuilder:
        return SelectBuilder(self._ctx).distinct().select(*columns)

    def with_(self, name: str) -> WithClauseBuilder:
        """Start a SELECT with a ``with name as (...)`` clause."""
        return SelectBuilder(self._ctx).with_(name)

    def update(self, table: str) -> UpdateBuilder:
        return UpdateBuilder(self._ctx, table)

    def delete_from(self, target: str) -> DeleteBuilder:
        return DeleteBuilder(self._ctx, target)

    def insert_into(self, table: str) -> InsertBuilder:
        return InsertBuilder(self._ctx, table)

    def merge_into(self, table: str) -> MergeBuilder:
        return MergeBuilder(self._ctx, table)

    # ------------------------------------------------------------------
    # Conditions and raw fragments
    # ------------------------------------------------------------------

    def condition(self, lhs: str) -> ConditionBuilder[ConditionBuilder]:
        """A free-standing condition on ``lhs``; terminal calls return the condition."""
        return ConditionBuilder(self._ctx, lhs)

    def bool_(self, value: bool) -> Condition:
        """An always-true (``1 = 1``) or always-false (``1 = 0``) condition."""
        return SimpleCondition(
            SqlParameter(self._ctx, 1, ValueKind.INTEGER),
            RelationalOperator.EQ,
            SqlParameter(self._ctx, 1 if value else 0, ValueKind.INTEGER),
        )

    def raw(self, sql: str, binder: Binder | None = None) -> SqlRaw:
        """Trusted SQL text, usable as a condition or inside other fragments.

        Args:
            sql: The text, rendered verbatim.
            binder: Optional ``(statement, sequence)`` callable binding the
                parameters ``sql`` contains.
        """
        if sql is None:
            raise BuilderUsageError("sql must not be None", argument="sql")
        return SqlRaw(sql, binder)

    def raw_value(self, sql: str, value: Any, kind: ValueKind | str | None = None) -> SqlRaw:
        """Trusted SQL text containing one placeholder, bound to ``value``."""
        resolved = resolve_kind(value, kind)
        null_type = self._ctx.null_type

        def bind(ps: PreparedStatement, seq: ParameterSequence) -> None:
            bind_value(ps, seq.next(), value, resolved, null_type)

        return self.raw(sql, bind)

    def and_(self, *conditions: Condition) -> CompositeCondition:
        return CompositeCondition(_require_conditions(conditions), LogicalOperator.AND)

    def or_(self, *conditions: Condition) -> CompositeCondition:
        return CompositeCondition(_require_conditions(conditions), LogicalOperator.OR)

    def not_(self, condition: Condition) -> Condition:
        if condition is None:
            raise BuilderUsageError("condition must not be None", argument="condition")
        return NotCondition(condition)

    def exists(self, subquery: SqlSelectStatement) -> Condition:
        if subquery is None:
            raise BuilderUsageError("subquery must not be None", argument="subquery")
        return ExistsCondition(subquery)

    # ------------------------------------------------------------------
    # Compound selects
    # ------------------------------------------------------------------

    def union(self, *selects: SqlSelectStatement) -> CompositeSelect:
        return CompositeSelect(self._ctx, selects, "union")

    def union_all(self, *selects: SqlSelectStatement) -> CompositeSelect:
        return CompositeSelect(self._ctx, selects, "union all")

    def intersect(self, *selects: SqlSelectStatement) -> CompositeSelect:
        return CompositeSelect(self._ctx, selects, "intersect")

    def except_(self, a: SqlSelectStatement, b: SqlSelectStatement) -> CompositeSelect:
        """``a except b`` (standard SQL)."""
        return CompositeSelect(self._ctx, (a, b), "except")

    def minus(self, a: SqlSelectStatement, b: SqlSelectStatement) -> CompositeSelect:
        """``a minus b``; only for dialects that support it.

        Raises:
            DialectFeatureError: Under the standard dialect; use :meth:`except_`.
        """
        if not self._ctx.rules.supports_minus:
            raise DialectFeatureError("minus", self._ctx.rules.dialect_name)
        return CompositeSelect(self._ctx, (a, b), "minus")

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def batch(self, statements: Iterable[SqlStatement] = ()) -> BatchStatementBuilder:
        """An in-memory batch; add statements, then call ``to_statement()``."""
        return BatchStatementBuilder(self._ctx, statements)

    def batch_statement(
        self,
        statements: Iterable[T],
        execute_every_n_rows: int = -1,
        commit_every_n_rows: int = -1,
        *,
        check_shape: bool = False,
    ) -> BatchStatementOperation[T]:
        """A batch over a possibly lazy sequence of same-shaped statements.

        ``statements`` is consumed once, element by element; pass a
        generator to stream rows that do not fit in memory.
        """
        return BatchStatementOperation(
            self._ctx.connection_provider,
            statements,
            execute_every_n_rows,
            commit_every_n_rows,
            check_shape=check_shape,
        )

    def batch_sql(
        self,
        sql: str,
        binders: Iterable[Any],
        execute_every_n_rows: int = -1,
        commit_every_n_rows: int = -1,
    ) -> BatchStatementOperation[Any]:
        """A batch over fixed SQL text and a sequence of binders.

        Each binder is a fragment or a ``(statement, sequence)`` callable
        that binds one row's parameters.
        """
        if sql is None:
            raise BuilderUsageError("sql must not be None", argument="sql")
        return BatchStatementOperation(
            self._ctx.connection_provider,
            binders,
            execute_every_n_rows,
            commit_every_n_rows,
            sql=sql,
        )
