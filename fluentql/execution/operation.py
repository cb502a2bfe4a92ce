"""Runnable single statements and queries.

Both classes render their SQL once, when created, and run a fresh bind pass
every time they execute.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar

from fluentql.errors import BuilderUsageError, FluentQLError, StatementExecutionError
from fluentql.execution.base import ConnectionProvider, PreparedStatement
from fluentql.fragment.base import SqlFragment
from fluentql.fragment.sequence import ParameterSequence

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_NO_ROW = object()

#: Hook called with the prepared statement before or after it executes.
StatementHook = Callable[[PreparedStatement], None]


def _require_provider(provider: ConnectionProvider | None) -> ConnectionProvider:
    if provider is None:
        raise BuilderUsageError(
            "No connection provider configured; pass one to SqlBuilder().",
            argument="connection_provider",
        )
    return provider


class StatementOperation:
    """An INSERT / UPDATE / DELETE / MERGE ready to run.

    Args:
        provider: Connection provider that prepares the statement.
        sql: Rendered SQL text.
        binder: The fragment whose bind pass fills the placeholders.
    """

    def __init__(
        self,
        provider: ConnectionProvider | None,
        sql: str,
        binder: SqlFragment,
    ) -> None:
        self._provider = provider
        self._sql = sql
        self._binder = binder
        self._before: StatementHook | None = None
        self._after: StatementHook | None = None

    @property
    def sql(self) -> str:
        return self._sql

    def do_before_execution(self, hook: StatementHook) -> StatementOperation:
        self._before = hook
        return self

    def do_after_execution(self, hook: StatementHook) -> StatementOperation:
        self._after = hook
        return self

    def execute(self, connection: Any) -> int:
        """Run on ``connection`` without committing.

        Returns:
            The number of modified rows reported by the driver.
        """
        provider = _require_provider(self._provider)
        logger.debug("Executing statement:\n%s", self._sql)
        ps = provider.prepare(connection, self._sql)
        try:
            if self._before is not None:
                self._before(ps)
            self._binder.bind(ps, ParameterSequence())
            modified = ps.execute_update()
            if self._after is not None:
                self._after(ps)
            return modified
        finally:
            ps.close()

    def execute_and_commit(self) -> int:
        """Borrow a connection, execute, commit and give the connection back.

        Raises:
            StatementExecutionError: If the driver rejects the statement.
        """
        provider = _require_provider(self._provider)
        connection = None
        try:
            connection = provider.borrow()
            modified = self.execute(connection)
            provider.commit(connection)
            return modified
        except FluentQLError:
            raise
        except Exception as exc:
            raise StatementExecutionError(
                f"Error executing statement: {exc}", sql=self._sql, statement=self._binder
            ) from exc
        finally:
            # a no-op when the commit above went through
            provider.rollback(connection)
            if connection is not None:
                provider.give_back(connection)


class Query(Generic[T]):
    """A SELECT ready to run, mapping each result row with ``row_mapper``.

    Args:
        provider: Connection provider that prepares the query.
        sql: Rendered SQL text.
        binder: The fragment whose bind pass fills the placeholders.
        row_mapper: Called once per DB-API result row.
    """

    def __init__(
        self,
        provider: ConnectionProvider | None,
        sql: str,
        binder: SqlFragment,
        row_mapper: Callable[[Any], T],
    ) -> None:
        self._provider = provider
        self._sql = sql
        self._binder = binder
        self._row_mapper = row_mapper

    @property
    def sql(self) -> str:
        return self._sql

    def _run(self, consume: Callable[[Iterator[Any]], R]) -> R:
        provider = _require_provider(self._provider)
        connection = provider.borrow()
        try:
            logger.debug("Executing query:\n%s", self._sql)
            ps = provider.prepare(connection, self._sql)
            try:
                self._binder.bind(ps, ParameterSequence())
                return consume(iter(ps.execute_query()))
            finally:
                ps.close()
        except FluentQLError:
            raise
        except Exception as exc:
            raise StatementExecutionError(
                f"Error executing query: {exc}", sql=self._sql, statement=self._binder
            ) from exc
        finally:
            provider.give_back(connection)

    def to_list(self) -> list[T]:
        """Execute and return every mapped row."""
        return self._run(lambda rows: [self._row_mapper(row) for row in rows])

    def first(self) -> T | None:
        """Execute and return the first mapped row, or ``None``.

        Only the first row is read from the cursor and mapped.
        """

        def consume(rows: Iterator[Any]) -> T | None:
            row = next(rows, _NO_ROW)
            return None if row is _NO_ROW else self._row_mapper(row)

        return self._run(consume)
