"""DB-API 2.0 implementations of the execution abstractions.

The SQL fluentql renders uses ``?`` placeholders, so the driver's paramstyle
must be ``qmark`` (``sqlite3``, ``pyodbc``, ``ibm_db_dbi``, ...).  Positional
values are collected per statement and handed to ``cursor.execute`` /
``cursor.executemany`` as a tuple.

Example::

    import sqlite3
    from fluentql import SqlBuilder
    from fluentql.execution.dbapi import SingleConnectionProvider

    sql = SqlBuilder(SingleConnectionProvider(sqlite3.connect("app.db")))
    sql.delete_from("emp").where("job").eq().value("CLERK").to_statement().execute_and_commit()
"""
from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal
from typing import Any

from fluentql.errors import StatementExecutionError
from fluentql.execution.base import SUCCESS_NO_INFO, ConnectionProvider, PreparedStatement
from fluentql.fragment.values import SqlType, ValueKind

#: Converts a bound value to what the driver expects for its kind.
Adapter = Callable[[Any], Any]

DEFAULT_ADAPTERS: dict[ValueKind, Adapter] = {
    ValueKind.STRING: str,
    ValueKind.DECIMAL: Decimal,
    ValueKind.BOOLEAN: bool,
    ValueKind.INTEGER: int,
    ValueKind.LONG: int,
    ValueKind.FLOAT: float,
    ValueKind.DOUBLE: float,
    ValueKind.BYTES: bytes,
    ValueKind.URL: str,
}


class DBAPIPreparedStatement(PreparedStatement):
    """A :class:`PreparedStatement` backed by a DB-API cursor.

    Args:
        connection: An open DB-API connection.
        sql: SQL text with ``?`` placeholders.
        adapters: Per-kind conversions overriding :data:`DEFAULT_ADAPTERS`;
            kinds without an adapter are passed through unchanged.
    """

    def __init__(
        self,
        connection: Any,
        sql: str,
        adapters: Mapping[ValueKind, Adapter] | None = None,
    ) -> None:
        self._sql = sql
        self._cursor = connection.cursor()
        self._adapters: dict[ValueKind, Adapter] = {**DEFAULT_ADAPTERS, **(adapters or {})}
        self._params: dict[int, Any] = {}
        self._batch: list[tuple[Any, ...]] = []

    @property
    def sql(self) -> str:
        return self._sql

    def set_value(self, position: int, value: Any, kind: ValueKind | None) -> None:
        adapter = self._adapters.get(kind) if kind is not None else None
        self._params[position] = adapter(value) if adapter is not None else value

    def set_null(self, position: int, sql_type: SqlType) -> None:
        # DB-API drivers infer the NULL type themselves.
        self._params[position] = None

    def _take_params(self) -> tuple[Any, ...]:
        if not self._params:
            return ()
        size = max(self._params)
        missing = [i for i in range(1, size + 1) if i not in self._params]
        if missing:
            raise StatementExecutionError(
                f"Parameter positions {missing} were never bound.", sql=self._sql
            )
        values = tuple(self._params[i] for i in range(1, size + 1))
        self._params.clear()
        return values

    def add_batch(self) -> None:
        self._batch.append(self._take_params())

    def execute_batch(self) -> list[int]:
        if not self._batch:
            return []
        rows, self._batch = self._batch, []
        self._cursor.executemany(self._sql, rows)
        count = self._cursor.rowcount
        return [count if count >= 0 else SUCCESS_NO_INFO]

    def execute_update(self) -> int:
        self._cursor.execute(self._sql, self._take_params())
        return self._cursor.rowcount

    def execute_query(self) -> Iterable[Any]:
        self._cursor.execute(self._sql, self._take_params())
        return self._cursor

    def close(self) -> None:
        self._cursor.close()


class SingleConnectionProvider(ConnectionProvider):
    """Lends out the same DB-API connection every time.

    Args:
        connection: An open DB-API connection, owned by the caller.
        adapters: Per-kind value conversions for prepared statements.
    """

    def __init__(
        self,
        connection: Any,
        adapters: Mapping[ValueKind, Adapter] | None = None,
    ) -> None:
        self._connection = connection
        self._adapters = adapters

    def borrow(self) -> Any:
        return self._connection

    def give_back(self, connection: Any) -> None:
        pass

    def commit(self, connection: Any) -> None:
        connection.commit()

    def rollback(self, connection: Any) -> None:
        if connection is not None:
            connection.rollback()

    def prepare(self, connection: Any, sql: str) -> PreparedStatement:
        return DBAPIPreparedStatement(connection, sql, self._adapters)
