"""fluentql fragment layer: the render/bind contract and the condition algebra."""
from fluentql.fragment.base import (
    NULL_LITERAL,
    Binder,
    CompositeFragment,
    Condition,
    SqlFragment,
    SqlRaw,
    wrap_in_parentheses,
)
from fluentql.fragment.conditions import (
    CompositeCondition,
    ConditionBuilder,
    ExistsCondition,
    ExpressionBuilder,
    InListCondition,
    InSubqueryCondition,
    LogicalOperator,
    NotCondition,
    RelationalOperator,
    SimpleCondition,
)
from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.values import SqlParameter, SqlType, ValueKind, infer_kind
from fluentql.fragment.writer import SqlWriter

__all__ = [
    "NULL_LITERAL",
    "Binder",
    "CompositeCondition",
    "CompositeFragment",
    "Condition",
    "ConditionBuilder",
    "ExistsCondition",
    "ExpressionBuilder",
    "InListCondition",
    "InSubqueryCondition",
    "LogicalOperator",
    "NotCondition",
    "ParameterSequence",
    "RelationalOperator",
    "SimpleCondition",
    "SqlFragment",
    "SqlParameter",
    "SqlRaw",
    "SqlType",
    "SqlWriter",
    "ValueKind",
    "infer_kind",
    "wrap_in_parentheses",
]
