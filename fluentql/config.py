"""Pydantic model for the per-builder configuration.

One :class:`SqlBuilderConfig` is fixed when a
:class:`~fluentql.builder.SqlBuilder` is created and applies to every
statement that builder produces::

    from fluentql import SqlBuilder, SqlBuilderConfig

    sql = SqlBuilder(provider, SqlBuilderConfig(dialect="oracle", debug=True))
"""
from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from fluentql.dialect.base import SqlDialect


class SqlBuilderConfig(BaseModel):
    """Generation settings shared by all statements of one builder.

    Attributes:
        dialect: Target dialect.  The built-in names parse to
            :class:`SqlDialect`; any other name is kept as a string and must
            be registered with :class:`~fluentql.dialect.DialectFactory`.
        debug: Echo every bound value as an escaped comment next to its
            ``?`` placeholder.
        max_in_list_size: Overrides the dialect's ``IN (...)`` chunk size.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    dialect: Union[SqlDialect, str] = Field(default=SqlDialect.STANDARD, union_mode="left_to_right")
    debug: bool = False
    max_in_list_size: int | None = Field(default=None, ge=1)

    @property
    def dialect_name(self) -> str:
        """The registry key of ``dialect``."""
        if isinstance(self.dialect, SqlDialect):
            return self.dialect.value
        return self.dialect
