"""Unit tests for batch execution: streaming, flushing, commits, cancellation."""

from __future__ import annotations

import logging
import threading

import pytest

from fluentql import (
    EXECUTE_FAILED,
    SUCCESS_NO_INFO,
    BuilderUsageError,
    SqlBuilder,
    StatementExecutionError,
    log_and_continue,
)
from fluentql.execution import merge_row_counts
from tests.fixtures import RecordingProvider, RecordingStatement


def _insert(sql, i):
    return sql.insert_into("dept").set("deptno").value(i).set("dname").value(f"D{i}")


def _statement(provider) -> RecordingStatement:
    assert len(provider.statements) == 1
    return provider.statements[0]


# ---------------------------------------------------------------------------
# Streaming and flushing
# ---------------------------------------------------------------------------


def test_input_is_consumed_lazily(sql, provider):
    consumed = []

    def rows():
        for i in range(5):
            consumed.append(i)
            yield _insert(sql, i)

    seen = []
    op = sql.batch_statement(rows()).do_before_execution(lambda ps: seen.append(len(consumed)))
    op.execute("connection")
    assert seen == [1, 2, 3, 4, 5]


def test_only_first_element_is_rendered(sql, provider):
    sql.batch_statement(_insert(sql, i) for i in range(3)).execute("connection")
    ps = _statement(provider)
    assert ps.sql == "insert into dept (deptno, dname)\nvalues (?, ?)"
    assert ps.units == [
        [(1, 0, "integer"), (2, "D0", "string")],
        [(1, 1, "integer"), (2, "D1", "string")],
        [(1, 2, "integer"), (2, "D2", "string")],
    ]


@pytest.mark.parametrize(
    "rows, every, sizes",
    [
        (10, 3, [3, 3, 3, 1]),
        (9, 3, [3, 3, 3, 0]),
        (2, 5, [2]),
        (4, -1, [4]),
    ],
)
def test_flush_every_n_rows(sql, provider, rows, every, sizes):
    op = sql.batch_statement((_insert(sql, i) for i in range(rows)), execute_every_n_rows=every)
    modified = op.execute("connection")
    ps = _statement(provider)
    assert ps.batch_sizes == sizes
    assert ps.execute_batch_calls == len(sizes)
    assert modified == rows
    assert op.rows_processed == rows
    assert ps.closed


def test_empty_input_prepares_nothing(sql, provider):
    assert sql.batch_statement(iter(())).execute_and_commit() == 0
    assert provider.statements == []
    assert provider.events == ["borrow", "commit", "rollback", "give_back"]


# ---------------------------------------------------------------------------
# Commits
# ---------------------------------------------------------------------------


def test_commit_checkpoints(sql, provider):
    op = sql.batch_statement((_insert(sql, i) for i in range(10)), commit_every_n_rows=4)
    op.execute("connection")
    assert provider.events == ["prepare", "commit", "commit"]
    assert op.rows_committed == 8


def test_execute_and_commit(sql, provider):
    op = sql.batch_statement((_insert(sql, i) for i in range(10)), 5, 4)
    assert op.execute_and_commit() == 10
    assert provider.events == [
        "borrow", "prepare", "commit", "commit", "commit", "rollback", "give_back",
    ]
    assert op.rows_committed == 10
    assert _statement(provider).batch_sizes == [5, 5, 0]


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


def test_cancel_from_inside_the_stream(sql, provider, caplog):
    closed = []
    holder = {}

    def rows():
        try:
            for i in range(10):
                if i == 5:
                    holder["op"].cancel()
                yield _insert(sql, i)
        finally:
            closed.append(True)

    op = sql.batch_statement(rows(), commit_every_n_rows=2)
    holder["op"] = op
    with caplog.at_level(logging.WARNING, logger="fluentql.execution.batch"):
        op.execute("connection")

    assert op.cancelled
    assert op.rows_processed == 5
    assert op.rows_committed == 4
    assert provider.events == ["prepare", "commit", "commit", "rollback"]
    # pending units are dropped, not flushed
    assert _statement(provider).execute_batch_calls == 0
    assert closed == [True]
    assert "cancelled" in caplog.text


def test_cancelled_batch_keeps_last_checkpoint(sql, provider):
    holder = {}

    def rows():
        for i in range(6):
            if i == 3:
                holder["op"].cancel()
            yield _insert(sql, i)

    op = sql.batch_statement(rows(), commit_every_n_rows=2)
    holder["op"] = op
    op.execute_and_commit()
    assert op.rows_committed == 2


def test_shared_cancel_event(sql, provider):
    event = threading.Event()
    event.set()
    op = sql.batch_statement(_insert(sql, i) for i in range(3)).set_cancel_event(event)
    op.execute("connection")
    assert op.rows_processed == 0
    assert provider.events == ["rollback"]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def _binders(fail_at):
    def make(i):
        def binder(ps, seq):
            if i == fail_at:
                raise RuntimeError("boom")
            ps.set_value(seq.next(), i, None)

        return binder

    return [make(i) for i in range(3)]


def test_default_error_handler_aborts(sql, provider):
    op = sql.batch_sql("insert into t (a) values (?)", _binders(fail_at=1))
    with pytest.raises(StatementExecutionError) as exc_info:
        op.execute_and_commit()
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert provider.events[-2:] == ["rollback", "give_back"]
    assert _statement(provider).closed


def test_log_and_continue(sql, provider, caplog):
    op = sql.batch_sql("insert into t (a) values (?)", _binders(fail_at=1))
    op.set_error_handler(log_and_continue)
    with caplog.at_level(logging.WARNING, logger="fluentql.execution.batch"):
        assert op.execute_and_commit() == 2
    assert op.rows_processed == 2
    assert [unit[0][1] for unit in _statement(provider).units] == [0, 2]
    assert "boom" in caplog.text


def test_driver_failure_is_wrapped():
    class FailingProvider(RecordingProvider):
        def prepare(self, connection, sql):
            statement = super().prepare(connection, sql)

            def execute_batch():
                raise OSError("disk full")

            statement.execute_batch = execute_batch
            return statement

    failing = FailingProvider()
    sql = SqlBuilder(failing)
    op = sql.batch_statement(_insert(sql, i) for i in range(2))
    with pytest.raises(StatementExecutionError, match="disk full"):
        op.execute_and_commit()
    assert failing.events == ["borrow", "prepare", "rollback", "give_back"]


def test_shape_check(sql, provider):
    statements = [
        sql.insert_into("t").set("a").value(1),
        sql.insert_into("t").set("a").value(2).set("b").value(3),
    ]
    with pytest.raises(BuilderUsageError, match="same SQL"):
        sql.batch_statement(statements, check_shape=True).execute("connection")

    # without the check the second element is bound against the first SQL
    sql.batch_statement(statements).execute("connection")
    assert provider.statements[-1].units[1] == [(1, 2, "integer"), (2, 3, "integer")]


def test_execute_only_once(sql, provider):
    op = sql.batch_statement([_insert(sql, 1)])
    op.execute("connection")
    with pytest.raises(BuilderUsageError):
        op.execute("connection")


def test_batch_requires_provider():
    sql = SqlBuilder()
    with pytest.raises(BuilderUsageError):
        sql.batch_statement([sql.delete_from("t")]).execute_and_commit()


def test_none_input_rejected(sql):
    with pytest.raises(BuilderUsageError):
        sql.batch_statement(None)
    with pytest.raises(BuilderUsageError):
        sql.batch_sql(None, [])


# ---------------------------------------------------------------------------
# Fixed SQL, builder and hooks
# ---------------------------------------------------------------------------


def test_batch_sql_with_fragments_and_callables(sql, provider):
    binders = [
        sql.raw_value("?", 10),
        lambda ps, seq: ps.set_value(seq.next(), 20, None),
    ]
    op = sql.batch_sql("delete from emp where deptno = ?", binders)
    assert op.execute_and_commit() == 2
    ps = _statement(provider)
    assert ps.sql == "delete from emp where deptno = ?"
    assert ps.units == [[(1, 10, "integer")], [(1, 20, None)]]


def test_batch_builder(sql, provider):
    batch = sql.batch([_insert(sql, 1)]).add(_insert(sql, 2)).add_all([_insert(sql, 3)])
    batch.execute_every_n_rows(2).commit_every_n_rows(3)
    assert len(batch) == 3
    op = batch.to_statement()
    op.execute_and_commit()
    assert _statement(provider).batch_sizes == [2, 1]
    assert provider.events.count("commit") == 2
    with pytest.raises(BuilderUsageError):
        batch.add(None)


def test_hooks_run_per_element(sql, provider):
    calls = []
    op = (
        sql.batch_statement(_insert(sql, i) for i in range(3))
        .do_before_execution(lambda ps: calls.append("before"))
        .do_after_execution(lambda ps: calls.append("after"))
    )
    op.execute("connection")
    assert calls == ["before", "after"] * 3


# ---------------------------------------------------------------------------
# Row counts
# ---------------------------------------------------------------------------


def test_merge_row_counts():
    assert merge_row_counts(0, [1, 2, 3]) == 6
    assert merge_row_counts(4, []) == 4
    assert merge_row_counts(0, [1, SUCCESS_NO_INFO, 2]) == SUCCESS_NO_INFO
    assert merge_row_counts(SUCCESS_NO_INFO, [5]) == SUCCESS_NO_INFO
    assert merge_row_counts(0, [1, EXECUTE_FAILED, SUCCESS_NO_INFO]) == EXECUTE_FAILED
    assert merge_row_counts(EXECUTE_FAILED, [1]) == EXECUTE_FAILED
