"""Abstractions over the database driver.

fluentql never talks to a driver directly.  It needs two capabilities:

``PreparedStatement``
    A statement prepared from SQL text that accepts typed values at 1-based
    positions, can queue the current parameter set as one batch unit, and
    can execute.

``ConnectionProvider``
    Lends out connections and controls their transactions.

:mod:`fluentql.execution.dbapi` implements both on top of any DB-API 2.0
driver whose paramstyle is ``qmark``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fluentql.fragment.values import SqlType, ValueKind

#: Batch result for a statement that succeeded without reporting a row count.
SUCCESS_NO_INFO = -2
#: Batch result for a statement that failed.
EXECUTE_FAILED = -3


class PreparedStatement(ABC):
    """The sink a bind pass writes into."""

    @abstractmethod
    def set_value(self, position: int, value: Any, kind: ValueKind | None) -> None:
        """Set a non-null ``value`` of the given kind at ``position``."""

    @abstractmethod
    def set_null(self, position: int, sql_type: SqlType) -> None:
        """Set SQL ``NULL`` at ``position``, typed as ``sql_type``."""

    @abstractmethod
    def add_batch(self) -> None:
        """Queue the currently bound parameters as one unit of the batch."""

    @abstractmethod
    def execute_batch(self) -> list[int]:
        """Execute the queued units.

        Returns:
            Per-statement modified-row counts; entries may be
            :data:`SUCCESS_NO_INFO` or :data:`EXECUTE_FAILED`.
        """

    @abstractmethod
    def execute_update(self) -> int:
        """Execute once with the bound parameters and return the modified-row count."""

    @abstractmethod
    def execute_query(self) -> Iterable[Any]:
        """Execute once with the bound parameters and return the result rows."""

    @abstractmethod
    def close(self) -> None:
        """Release driver resources."""


class ConnectionProvider(ABC):
    """Lends connections and drives their transactions."""

    @abstractmethod
    def borrow(self) -> Any:
        """Return a connection for exclusive use until :meth:`give_back`."""

    @abstractmethod
    def give_back(self, connection: Any) -> None:
        """Return a borrowed connection."""

    @abstractmethod
    def commit(self, connection: Any) -> None:
        """Commit the connection's current transaction."""

    @abstractmethod
    def rollback(self, connection: Any) -> None:
        """Roll back the current transaction.  A no-op when nothing is pending
        or when ``connection`` is ``None``."""

    @abstractmethod
    def prepare(self, connection: Any, sql: str) -> PreparedStatement:
        """Prepare ``sql`` on ``connection``."""


def merge_row_counts(total: int, counts: Iterable[int]) -> int:
    """Add a batch's row counts to ``total``.

    Sentinel values are propagated instead of summed: once a batch reports
    :data:`EXECUTE_FAILED` the total stays failed, and an unknown count
    (:data:`SUCCESS_NO_INFO`) makes the total unknown.
    """
    for count in counts:
        if total == EXECUTE_FAILED or count == EXECUTE_FAILED:
            return EXECUTE_FAILED
        if total == SUCCESS_NO_INFO or count == SUCCESS_NO_INFO:
            total = SUCCESS_NO_INFO
            continue
        total += count
    return total
