"""fluentql execution layer: driver abstractions and runnable operations."""
from fluentql.execution.base import (
    EXECUTE_FAILED,
    SUCCESS_NO_INFO,
    ConnectionProvider,
    PreparedStatement,
    merge_row_counts,
)
from fluentql.execution.batch import (
    BatchStatementBuilder,
    BatchStatementOperation,
    log_and_continue,
    raise_error,
)
from fluentql.execution.dbapi import DBAPIPreparedStatement, SingleConnectionProvider
from fluentql.execution.engine import SQLAlchemyConnectionProvider
from fluentql.execution.operation import Query, StatementOperation

__all__ = [
    "EXECUTE_FAILED",
    "SUCCESS_NO_INFO",
    "BatchStatementBuilder",
    "BatchStatementOperation",
    "ConnectionProvider",
    "DBAPIPreparedStatement",
    "PreparedStatement",
    "Query",
    "SQLAlchemyConnectionProvider",
    "SingleConnectionProvider",
    "StatementOperation",
    "log_and_continue",
    "merge_row_counts",
    "raise_error",
]
