"""Dialect rule abstractions.

The Strategy pattern is used: :class:`DialectRules` declares every point
where SQL generation or binding differs between vendors, and each concrete
dialect overrides only what it needs.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from fluentql.fragment.values import SqlType

#: Historical Oracle ceiling for the number of items in one ``IN (...)`` list.
DEFAULT_MAX_IN_LIST_SIZE = 1000


class SqlDialect(str, Enum):
    """Named SQL dialects understood by :class:`~fluentql.config.SqlBuilderConfig`."""

    STANDARD = "standard"
    ORACLE = "oracle"


class DialectRules(ABC):
    """Vendor-specific knobs consulted while rendering and binding."""

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name."""

    @property
    @abstractmethod
    def null_type_code(self) -> SqlType:
        """Type code used when binding a ``NULL`` with no better type information."""

    @property
    def supports_minus(self) -> bool:
        """Whether the vendor-only ``MINUS`` compound operator is available."""
        return False

    @property
    def max_in_list_size(self) -> int:
        """Largest number of placeholders rendered inside one ``IN (...)`` list."""
        return DEFAULT_MAX_IN_LIST_SIZE
