"""fluentql – a fluent builder for parameterized SQL.

Compose statements with method chains, then either read the SQL text or run
it.  Values passed through ``value(...)`` are never spliced into the text:
they render as ``?`` placeholders and are bound positionally, in exactly the
order their placeholders appear.

Public API
----------
``SqlBuilder``
    Entry point for SELECT, INSERT, UPDATE, DELETE, MERGE, compound selects,
    conditions and batches.

``SqlBuilderConfig``
    Dialect and debug settings for one builder.

Connection providers
    ``SingleConnectionProvider`` (one DB-API connection) and
    ``SQLAlchemyConnectionProvider`` (raw connections from an engine pool).

Example::

    from fluentql import SqlBuilder

    sql = SqlBuilder(debug=True)
    print(sql.select("a", "b").from_("t1")
          .where("a").gt().value(1)
          .where("b").eq().value("x")
          .get_sql())

Extensibility
-------------
Dialect rules can be registered via::

    from fluentql.dialect import DialectFactory, StandardDialect

    @DialectFactory.register("standard")
    class WideInListDialect(StandardDialect):
        max_in_list_size = 5000
"""

from __future__ import annotations

from fluentql.builder import SqlBuilder
from fluentql.config import SqlBuilderConfig
from fluentql.context import BuildContext
from fluentql.dialect import (
    DialectFactory,
    DialectRules,
    OracleDialect,
    SqlDialect,
    StandardDialect,
)
from fluentql.errors import (
    BuilderUsageError,
    ClauseAlreadySetError,
    DialectFeatureError,
    FluentQLError,
    InsertBodyError,
    StatementExecutionError,
    UnknownDialectError,
)
from fluentql.execution import (
    EXECUTE_FAILED,
    SUCCESS_NO_INFO,
    BatchStatementBuilder,
    BatchStatementOperation,
    ConnectionProvider,
    DBAPIPreparedStatement,
    PreparedStatement,
    Query,
    SingleConnectionProvider,
    SQLAlchemyConnectionProvider,
    StatementOperation,
    log_and_continue,
)
from fluentql.fragment import (
    Condition,
    ParameterSequence,
    SqlFragment,
    SqlParameter,
    SqlRaw,
    SqlType,
    SqlWriter,
    ValueKind,
)
from fluentql.statements import (
    CompositeSelect,
    DeleteBuilder,
    InsertBuilder,
    MergeBuilder,
    Placement,
    SelectBuilder,
    SelectClause,
    SqlSelectStatement,
    SqlStatement,
    UpdateBuilder,
)
from fluentql.utils import escape_like_string, escape_string

__all__ = [
    # Entry points
    "SqlBuilder",
    "SqlBuilderConfig",
    "BuildContext",
    # Dialects
    "SqlDialect",
    "DialectRules",
    "DialectFactory",
    "StandardDialect",
    "OracleDialect",
    # Fragments
    "SqlFragment",
    "Condition",
    "SqlRaw",
    "SqlParameter",
    "SqlWriter",
    "ParameterSequence",
    "ValueKind",
    "SqlType",
    # Statements
    "SelectBuilder",
    "CompositeSelect",
    "InsertBuilder",
    "UpdateBuilder",
    "DeleteBuilder",
    "MergeBuilder",
    "SqlStatement",
    "SqlSelectStatement",
    "Placement",
    "SelectClause",
    # Execution
    "PreparedStatement",
    "ConnectionProvider",
    "DBAPIPreparedStatement",
    "SingleConnectionProvider",
    "SQLAlchemyConnectionProvider",
    "StatementOperation",
    "Query",
    "BatchStatementOperation",
    "BatchStatementBuilder",
    "log_and_continue",
    "SUCCESS_NO_INFO",
    "EXECUTE_FAILED",
    # Helpers
    "escape_string",
    "escape_like_string",
    # Errors
    "FluentQLError",
    "BuilderUsageError",
    "ClauseAlreadySetError",
    "InsertBodyError",
    "DialectFeatureError",
    "UnknownDialectError",
    "StatementExecutionError",
]
