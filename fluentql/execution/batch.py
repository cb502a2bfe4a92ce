"""Batch execution of a stream of same-shaped statements.

The input is consumed lazily, one element at a time, and never collected
into a list, so a generator reading a large file line by line can feed a
batch insert in constant memory::

    def rows():
        with open("depts.txt") as f:
            for line in f:
                yield sql.insert_into("dept").set("dname").value(line.strip())

    sql.batch_statement(rows(), execute_every_n_rows=500, commit_every_n_rows=5000)\\
        .execute_and_commit()

Only the first element is rendered to SQL; every element is bound against
the single prepared statement.  All elements must therefore render the same
SQL.  Pass ``check_shape=True`` to verify that at the cost of one render per
element.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from fluentql.errors import BuilderUsageError, FluentQLError, StatementExecutionError
from fluentql.execution.base import ConnectionProvider, PreparedStatement, merge_row_counts
from fluentql.execution.operation import StatementHook, _require_provider
from fluentql.fragment.sequence import ParameterSequence

if TYPE_CHECKING:
    from fluentql.context import BuildContext
    from fluentql.statements.base import SqlStatement

logger = logging.getLogger(__name__)

T = TypeVar("T")

#: Called with the driver exception and the element being processed.  Return
#: normally to continue with the next element; raise to abort the batch.
ErrorHandler = Callable[[Exception, Any], None]


def raise_error(exc: Exception, statement: Any) -> None:
    """Default error handler: abort the batch with :class:`StatementExecutionError`."""
    raise StatementExecutionError(
        f"Error executing batch element: {exc}", statement=statement
    ) from exc


def log_and_continue(exc: Exception, statement: Any) -> None:
    """Error handler that logs the failure and moves on to the next element."""
    logger.warning("Skipping batch element %r after error: %s", statement, exc)


def _bind(element: Any, ps: PreparedStatement, seq: ParameterSequence) -> None:
    bind = getattr(element, "bind", None)
    if bind is not None:
        bind(ps, seq)
    else:
        element(ps, seq)


class BatchStatementOperation(Generic[T]):
    """Executes a sequence of statement fragments as one JDBC-style batch.

    Args:
        provider: Connection provider that prepares the statement.
        statements: Fragments (or bare binder callables when ``sql`` is
            given), consumed once.
        execute_every_n_rows: Flush the queued batch every N rows; ``<= 0``
            flushes only at the end.
        commit_every_n_rows: Commit every N rows; ``<= 0`` never commits
            during the loop.
        sql: Fixed SQL text.  When omitted, the first element is rendered.
        check_shape: Render every element and reject one whose SQL differs
            from the first.
    """

    def __init__(
        self,
        provider: ConnectionProvider | None,
        statements: Iterable[T],
        execute_every_n_rows: int = -1,
        commit_every_n_rows: int = -1,
        *,
        sql: str | None = None,
        check_shape: bool = False,
    ) -> None:
        if statements is None:
            raise BuilderUsageError("statements must not be None", argument="statements")
        self._provider = provider
        self._statements = statements
        self._execute_every = execute_every_n_rows
        self._commit_every = commit_every_n_rows
        self._sql = sql
        self._check_shape = check_shape
        self._error_handler: ErrorHandler = raise_error
        self._cancel_event = threading.Event()
        self._before: StatementHook | None = None
        self._after: StatementHook | None = None
        self._executed = False
        self._rows_processed = 0
        self._rows_committed = 0

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def do_before_execution(self, hook: StatementHook) -> BatchStatementOperation[T]:
        self._before = hook
        return self

    def do_after_execution(self, hook: StatementHook) -> BatchStatementOperation[T]:
        self._after = hook
        return self

    def set_error_handler(self, handler: ErrorHandler) -> BatchStatementOperation[T]:
        self._error_handler = handler
        return self

    def set_cancel_event(self, event: threading.Event) -> BatchStatementOperation[T]:
        """Share a cancellation flag, e.g. one event for several batches."""
        self._cancel_event = event
        return self

    def cancel(self) -> None:
        """Request cancellation.  Safe to call from any thread.

        The loop notices the request before processing the next element,
        rolls back the current transaction and returns normally.
        """
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def rows_processed(self) -> int:
        """Elements bound and queued so far."""
        return self._rows_processed

    @property
    def rows_committed(self) -> int:
        """Elements covered by the last commit."""
        return self._rows_committed

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, connection: Any) -> int:
        """Run the batch on ``connection``.

        Returns:
            The total modified-row count, or a sentinel from
            :mod:`fluentql.execution.base` when a flush reported one.
        """
        if self._executed:
            raise BuilderUsageError("a batch operation can only be executed once")
        self._executed = True
        provider = _require_provider(self._provider)

        ps: PreparedStatement | None = None
        sql = self._sql
        seq = ParameterSequence()
        modified = 0
        flushes = 0
        commits = 0
        cancelled = False
        try:
            for statement in self._statements:
                if self._cancel_event.is_set():
                    cancelled = True
                    logger.warning(
                        "Batch cancelled after %d rows; rolling back to the last commit (%d rows)",
                        self._rows_processed,
                        self._rows_committed,
                    )
                    provider.rollback(connection)
                    break
                if ps is None:
                    if sql is None:
                        sql = statement.get_sql()  # type: ignore[attr-defined]
                    logger.debug("Preparing batch statement:\n%s", sql)
                    ps = provider.prepare(connection, sql)
                elif self._check_shape and self._sql is None:
                    self._assert_same_shape(sql, statement)

                if self._before is not None:
                    self._before(ps)
                try:
                    seq.reset()
                    _bind(statement, ps, seq)
                    ps.add_batch()
                    self._rows_processed += 1
                    if self._execute_every > 0 and self._rows_processed % self._execute_every == 0:
                        modified = merge_row_counts(modified, ps.execute_batch())
                        flushes += 1
                        logger.debug(
                            "Flushed batch at row %d (modified rows: %d)",
                            self._rows_processed,
                            modified,
                        )
                    if self._commit_every > 0 and self._rows_processed % self._commit_every == 0:
                        provider.commit(connection)
                        self._rows_committed = self._rows_processed
                        commits += 1
                        logger.debug("Committed at row %d", self._rows_processed)
                except FluentQLError:
                    raise
                except Exception as exc:
                    self._error_handler(exc, statement)
                if self._after is not None:
                    self._after(ps)

            if ps is not None and not cancelled:
                modified = merge_row_counts(modified, ps.execute_batch())
                flushes += 1
        finally:
            if ps is not None:
                ps.close()
            close = getattr(self._statements, "close", None)
            if callable(close):
                close()

        logger.info(
            "Batch finished: %d rows processed, %d modified, %d flushes, %d commits%s",
            self._rows_processed,
            modified,
            flushes,
            commits,
            " (cancelled)" if cancelled else "",
        )
        return modified

    def execute_and_commit(self) -> int:
        """Borrow a connection, run the batch, commit and give the connection back."""
        provider = _require_provider(self._provider)
        connection = None
        try:
            connection = provider.borrow()
            modified = self.execute(connection)
            provider.commit(connection)
            if not self.cancelled:
                self._rows_committed = self._rows_processed
            return modified
        except FluentQLError:
            raise
        except Exception as exc:
            raise StatementExecutionError(
                f"Error executing the batch: {exc}", sql=self._sql
            ) from exc
        finally:
            # a no-op when the commit above went through
            provider.rollback(connection)
            if connection is not None:
                provider.give_back(connection)

    @staticmethod
    def _assert_same_shape(sql: str | None, statement: Any) -> None:
        current = statement.get_sql()
        if current != sql:
            raise BuilderUsageError(
                "Batch elements must all render the same SQL; got:\n"
                f"{current}\nexpected:\n{sql}",
                argument="statements",
            )


class BatchStatementBuilder:
    """Collects statements for a batch.

    Every statement must render the same SQL; only the first one is
    rendered when the batch runs.
    """

    def __init__(self, ctx: BuildContext, statements: Iterable[SqlStatement] = ()) -> None:
        self._ctx = ctx
        self._statements: list[SqlStatement] = list(statements)
        self._execute_every = -1
        self._commit_every = -1

    def execute_every_n_rows(self, n: int) -> BatchStatementBuilder:
        self._execute_every = n
        return self

    def commit_every_n_rows(self, n: int) -> BatchStatementBuilder:
        self._commit_every = n
        return self

    def add(self, statement: SqlStatement) -> BatchStatementBuilder:
        if statement is None:
            raise BuilderUsageError("statement must not be None", argument="statement")
        self._statements.append(statement)
        return self

    def add_all(self, statements: Iterable[SqlStatement]) -> BatchStatementBuilder:
        for statement in statements:
            self.add(statement)
        return self

    def __len__(self) -> int:
        return len(self._statements)

    def to_statement(self) -> BatchStatementOperation[SqlStatement]:
        return BatchStatementOperation(
            self._ctx.connection_provider,
            iter(self._statements),
            self._execute_every,
            self._commit_every,
        )
