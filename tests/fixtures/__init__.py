"""Test fixtures: sample DDL and recording fakes for the execution layer."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from fluentql.execution.base import ConnectionProvider, PreparedStatement
from fluentql.fragment.base import SqlFragment
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.values import SqlType, ValueKind

_FIXTURES_DIR = Path(__file__).parent


def load_ddl() -> str:
    """Return the sample emp/dept DDL for SQLite."""
    return (_FIXTURES_DIR / "ddl_sqlite.sql").read_text()


class RecordingStatement(PreparedStatement):
    """A :class:`PreparedStatement` that records every call.

    ``calls`` holds ``(position, value, kind)`` tuples for the current
    parameter set; ``set_null`` records ``(position, None, sql_type)``.
    ``add_batch`` moves the current set to ``units``.
    """

    def __init__(self, sql: str = "", rows: Iterable[Any] = ()) -> None:
        self.sql = sql
        self.rows = list(rows)
        self.calls: list[tuple[int, Any, Any]] = []
        self.units: list[list[tuple[int, Any, Any]]] = []
        self.pending = 0
        self.execute_batch_calls = 0
        self.batch_sizes: list[int] = []
        self.closed = False

    def set_value(self, position: int, value: Any, kind: ValueKind | None) -> None:
        self.calls.append((position, value, kind))

    def set_null(self, position: int, sql_type: SqlType) -> None:
        self.calls.append((position, None, sql_type))

    def add_batch(self) -> None:
        self.units.append(self.calls)
        self.calls = []
        self.pending += 1

    def execute_batch(self) -> list[int]:
        self.execute_batch_calls += 1
        self.batch_sizes.append(self.pending)
        counts = [1] * self.pending
        self.pending = 0
        return counts

    def execute_update(self) -> int:
        return 1

    def execute_query(self) -> Iterable[Any]:
        return iter(self.rows)

    def close(self) -> None:
        self.closed = True

    @property
    def values(self) -> list[Any]:
        return [value for _, value, _ in self.calls]

    @property
    def positions(self) -> list[int]:
        return [position for position, _, _ in self.calls]


class RecordingProvider(ConnectionProvider):
    """A :class:`ConnectionProvider` that hands out a token and logs events."""

    def __init__(self, rows: Iterable[Any] = ()) -> None:
        self.rows = list(rows)
        self.events: list[str] = []
        self.statements: list[RecordingStatement] = []

    def borrow(self) -> Any:
        self.events.append("borrow")
        return "connection"

    def give_back(self, connection: Any) -> None:
        self.events.append("give_back")

    def commit(self, connection: Any) -> None:
        self.events.append("commit")

    def rollback(self, connection: Any) -> None:
        self.events.append("rollback")

    def prepare(self, connection: Any, sql: str) -> PreparedStatement:
        self.events.append("prepare")
        statement = RecordingStatement(sql, self.rows)
        self.statements.append(statement)
        return statement


def bind(fragment: SqlFragment) -> RecordingStatement:
    """Run one bind pass of ``fragment`` into a fresh :class:`RecordingStatement`."""
    ps = RecordingStatement(fragment.get_sql())
    fragment.bind(ps, ParameterSequence())
    return ps


def bound_values(fragment: SqlFragment) -> list[Any]:
    return bind(fragment).values
