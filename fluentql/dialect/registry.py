"""Dialect rules registry (Open/Closed Principle).

Register a :class:`~fluentql.dialect.base.DialectRules` implementation once;
:class:`~fluentql.builder.SqlBuilder` looks it up by name when it is
constructed.  Registering a built-in name replaces its rules; any other
name becomes selectable through ``SqlBuilder(dialect=...)``.

Usage::

    from fluentql.dialect.registry import DialectFactory

    @DialectFactory.register("db2")
    class Db2Dialect(StandardDialect):
        ...

    sql = SqlBuilder(dialect="db2")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from fluentql.dialect.base import DialectRules
from fluentql.errors import UnknownDialectError


class DialectFactory:
    """Registry mapping dialect names to :class:`DialectRules` classes."""

    _dialects: ClassVar[dict[str, type[DialectRules]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[DialectRules]], type[DialectRules]]:
        """Decorator that registers a rules class under ``name``.

        Args:
            name: The dialect name (e.g. ``"oracle"``).

        Returns:
            A decorator that registers and returns the rules class.
        """

        def decorator(rules_cls: type[DialectRules]) -> type[DialectRules]:
            cls._dialects[name] = rules_cls
            return rules_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, rules_cls: type[DialectRules]) -> None:
        """Register a rules class without using the decorator form."""
        cls._dialects[name] = rules_cls

    @classmethod
    def create(cls, name: str) -> DialectRules:
        """Instantiate the rules registered for ``name``.

        Raises:
            UnknownDialectError: If nothing is registered for ``name``.
        """
        rules_cls = cls._dialects.get(name)
        if rules_cls is None:
            raise UnknownDialectError(name, sorted(cls._dialects))
        return rules_cls()

    @classmethod
    def registered_dialects(cls) -> list[str]:
        """Return the sorted list of registered dialect names."""
        return sorted(cls._dialects)
