"""fluentql dialect layer: vendor-specific rendering and binding rules."""
from fluentql.dialect.base import DEFAULT_MAX_IN_LIST_SIZE, DialectRules, SqlDialect
from fluentql.dialect.oracle import OracleDialect
from fluentql.dialect.registry import DialectFactory
from fluentql.dialect.standard import StandardDialect

DialectFactory.register_class(SqlDialect.STANDARD.value, StandardDialect)
DialectFactory.register_class(SqlDialect.ORACLE.value, OracleDialect)

__all__ = [
    "DEFAULT_MAX_IN_LIST_SIZE",
    "DialectFactory",
    "DialectRules",
    "OracleDialect",
    "SqlDialect",
    "StandardDialect",
]
