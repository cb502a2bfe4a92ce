"""Oracle dialect rules."""
from __future__ import annotations

from fluentql.dialect.base import DialectRules, SqlDialect
from fluentql.fragment.values import SqlType


class OracleDialect(DialectRules):
    """Oracle Database.

    The Oracle driver rejects ``OTHER`` as the type of a bound ``NULL``, so
    untyped nulls are sent as ``INTEGER``.  ``MINUS`` is available.
    """

    @property
    def dialect_name(self) -> str:
        return SqlDialect.ORACLE.value

    @property
    def null_type_code(self) -> SqlType:
        return SqlType.INTEGER  # OTHER is rejected by the Oracle driver

    @property
    def supports_minus(self) -> bool:
        return True
