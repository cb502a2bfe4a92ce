"""Custom exception hierarchy for fluentql.

All public errors inherit from FluentQLError so callers can catch the base
class for any fluentql-specific failure.
"""
from __future__ import annotations

from typing import Any


class FluentQLError(Exception):
    """Base exception for all fluentql errors."""


class BuilderUsageError(FluentQLError, ValueError):
    """Raised when a builder method receives invalid input.

    Build-time errors are raised synchronously by the offending call, before
    any SQL is rendered.

    Args:
        message: Human-readable description.
        argument: Name of the offending argument, when there is one.
    """

    def __init__(self, message: str, argument: str | None = None) -> None:
        super().__init__(message)
        self.argument = argument


class ClauseAlreadySetError(BuilderUsageError):
    """Raised when a single-valued clause (FROM, OFFSET, FETCH FIRST) is set twice."""

    def __init__(self, clause: str) -> None:
        super().__init__(f"{clause} clause has already been set", argument=clause)
        self.clause = clause


class InsertBodyError(BuilderUsageError):
    """Raised when an INSERT body of one kind is requested after the other kind was set.

    Args:
        requested: The body kind that was requested (``'values'`` or ``'subquery'``).
        existing: The body kind already attached to the statement.
    """

    def __init__(self, requested: str, existing: str) -> None:
        super().__init__(
            f"Cannot use a {requested} body: the INSERT statement already has a {existing} body.",
            argument=requested,
        )
        self.requested = requested
        self.existing = existing


class DialectFeatureError(FluentQLError):
    """Raised when a SQL feature is not available in the active dialect.

    Args:
        feature: The feature that was requested (e.g. ``'minus'``).
        dialect: The active dialect name.
    """

    def __init__(self, feature: str, dialect: str) -> None:
        super().__init__(f"'{feature}' is not supported by the '{dialect}' dialect.")
        self.feature = feature
        self.dialect = dialect


class UnknownDialectError(FluentQLError):
    """Raised when no dialect rules are registered under a name."""

    def __init__(self, name: str, registered: list[str]) -> None:
        super().__init__(
            f"Unsupported dialect: '{name}'. Registered dialects: {registered}."
        )
        self.name = name
        self.registered = registered


class StatementExecutionError(FluentQLError):
    """Raised when the database driver rejects a bind or an execution.

    Args:
        message: Human-readable description.
        sql: The SQL text being executed, when known.
        statement: The fragment being bound when the failure occurred.
    """

    def __init__(
        self,
        message: str,
        sql: str | None = None,
        statement: Any = None,
    ) -> None:
        super().__init__(message)
        self.sql = sql
        self.statement = statement

