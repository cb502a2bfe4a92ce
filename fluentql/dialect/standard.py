"""Standard SQL dialect rules."""
from __future__ import annotations

from fluentql.dialect.base import DialectRules, SqlDialect
from fluentql.fragment.values import SqlType


class StandardDialect(DialectRules):
    """Behaviour as close to the SQL standard as possible.

    Untyped nulls are bound as ``OTHER`` and ``MINUS`` is rejected in favour
    of ``EXCEPT``.
    """

    @property
    def dialect_name(self) -> str:
        return SqlDialect.STANDARD.value

    @property
    def null_type_code(self) -> SqlType:
        return SqlType.OTHER
