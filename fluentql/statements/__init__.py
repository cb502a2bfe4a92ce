"""fluentql statement builders."""
from fluentql.statements.base import ColumnAssignment, SqlSelectStatement, SqlStatement
from fluentql.statements.delete import DeleteBuilder
from fluentql.statements.insert import InsertBuilder, InsertValuesBuilder
from fluentql.statements.merge import MergeBuilder, MergeClauseFlag
from fluentql.statements.select import (
    CompositeSelect,
    JoinType,
    Placement,
    SelectBuilder,
    SelectClause,
    WithClauseBuilder,
)
from fluentql.statements.update import UpdateBuilder

__all__ = [
    "ColumnAssignment",
    "CompositeSelect",
    "DeleteBuilder",
    "InsertBuilder",
    "InsertValuesBuilder",
    "JoinType",
    "MergeBuilder",
    "MergeClauseFlag",
    "Placement",
    "SelectBuilder",
    "SelectClause",
    "SqlSelectStatement",
    "SqlStatement",
    "UpdateBuilder",
    "WithClauseBuilder",
]
