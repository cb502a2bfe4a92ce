"""Connection provider backed by a SQLAlchemy engine's connection pool.

Install the optional dependency before using this module::

    pip install "fluentql[sqlalchemy]"

Example::

    from sqlalchemy import create_engine
    from fluentql import SqlBuilder
    from fluentql.execution.engine import SQLAlchemyConnectionProvider

    engine = create_engine("sqlite:///app.db")
    sql = SqlBuilder(SQLAlchemyConnectionProvider(engine))
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from fluentql.execution.base import ConnectionProvider, PreparedStatement
from fluentql.execution.dbapi import Adapter, DBAPIPreparedStatement
from fluentql.fragment.values import ValueKind

if TYPE_CHECKING:
    from sqlalchemy import Engine


class SQLAlchemyConnectionProvider(ConnectionProvider):
    """Borrows raw DB-API connections from ``engine``'s pool.

    ``give_back`` closes the pooled proxy, which returns the underlying
    connection to the pool.  The engine's driver must use the ``qmark``
    paramstyle.

    Args:
        engine: A SQLAlchemy :class:`~sqlalchemy.engine.Engine`.
        adapters: Per-kind value conversions for prepared statements.
    """

    def __init__(
        self,
        engine: Engine,
        adapters: Mapping[ValueKind, Adapter] | None = None,
    ) -> None:
        self._engine = engine
        self._adapters = adapters

    def borrow(self) -> Any:
        return self._engine.raw_connection()

    def give_back(self, connection: Any) -> None:
        if connection is not None:
            connection.close()

    def commit(self, connection: Any) -> None:
        connection.commit()

    def rollback(self, connection: Any) -> None:
        if connection is not None:
            connection.rollback()

    def prepare(self, connection: Any, sql: str) -> PreparedStatement:
        return DBAPIPreparedStatement(connection, sql, self._adapters)
