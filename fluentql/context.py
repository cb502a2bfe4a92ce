"""Build context value object.

Packages the ``(config, dialect rules, connection provider)`` data clump
that every statement builder and typed parameter needs into one immutable
object.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fluentql.config import SqlBuilderConfig
from fluentql.dialect.base import DialectRules
from fluentql.fragment.values import SqlType

if TYPE_CHECKING:
    from fluentql.execution.base import ConnectionProvider


@dataclass(frozen=True)
class BuildContext:
    """Immutable context shared by the fragments of one builder.

    Attributes:
        config: Builder configuration.
        rules: Resolved dialect rules for ``config.dialect``.
        connection_provider: Provider used by runnable statements; may be
            ``None`` when the builder only produces SQL text.
    """

    config: SqlBuilderConfig
    rules: DialectRules
    connection_provider: ConnectionProvider | None = None

    @property
    def debug(self) -> bool:
        return self.config.debug

    @property
    def null_type(self) -> SqlType:
        return self.rules.null_type_code

    @property
    def max_in_list_size(self) -> int:
        if self.config.max_in_list_size is not None:
            return self.config.max_in_list_size
        return self.rules.max_in_list_size
