"""The fragment contract and its structural building blocks.

Every piece of a statement is a :class:`SqlFragment`.  A fragment takes part
in two passes over the same tree:

* the **render pass** (:meth:`SqlFragment.append_to`) writes SQL text into a
  :class:`~fluentql.fragment.writer.SqlWriter`;
* the **bind pass** (:meth:`SqlFragment.bind`) sets parameter values on a
  prepared statement, taking one position from the
  :class:`~fluentql.fragment.sequence.ParameterSequence` per value.

Both passes visit children left to right, depth first.  A fragment that
renders a placeholder must bind exactly one value at the matching point of
the bind pass, otherwise positional parameters silently shift.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from fluentql.fragment.sequence import ParameterSequence
from fluentql.fragment.writer import SqlWriter

if TYPE_CHECKING:
    from fluentql.execution.base import PreparedStatement

#: A bind-only callable: ``(statement, sequence) -> None``.
Binder = Callable[["PreparedStatement", ParameterSequence], None]


class SqlFragment(ABC):
    """A self-rendering, self-binding unit of SQL text and parameters."""

    @abstractmethod
    def append_to(self, w: SqlWriter) -> None:
        """Write this fragment's SQL text into ``w``."""

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        """Bind this fragment's parameters.  Most fragments carry none."""

    def represents_null_value(self) -> bool:
        """Return ``True`` if this fragment denotes the SQL ``NULL`` value."""
        return False

    def get_sql(self) -> str:
        """Render into a fresh writer and return the text."""
        w = SqlWriter()
        self.append_to(w)
        return w.get_sql()


class Condition(SqlFragment):
    """Tag base class for boolean-valued fragments."""


class SqlRaw(Condition):
    """Caller-supplied SQL text, trusted as given, with an optional binder.

    Args:
        sql: Raw SQL text.
        binder: Optional callable binding the parameters ``sql`` contains.
    """

    def __init__(self, sql: str, binder: Binder | None = None) -> None:
        if sql is None:
            raise TypeError("sql must not be None")
        self._sql = sql
        self._binder = binder

    def append_to(self, w: SqlWriter) -> None:
        w.append(self._sql)

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        if self._binder is not None:
            self._binder(ps, seq)

    def represents_null_value(self) -> bool:
        return self._sql.strip().upper() == "NULL"

    def get_sql(self) -> str:
        return self._sql

    def __repr__(self) -> str:
        return f"SqlRaw({self._sql!r})"


class CompositeFragment(SqlFragment):
    """An ordered sequence of fragments rendered and bound one after another."""

    def __init__(self, *fragments: SqlFragment) -> None:
        self._fragments: tuple[SqlFragment, ...] = fragments

    @property
    def fragments(self) -> tuple[SqlFragment, ...]:
        return self._fragments

    def append_to(self, w: SqlWriter) -> None:
        for fragment in self._fragments:
            w.append(fragment)

    def bind(self, ps: PreparedStatement, seq: ParameterSequence) -> None:
        for fragment in self._fragments:
            fragment.bind(ps, seq)


class _Layout(SqlFragment):
    """A text-free fragment that only moves the writer's cursor or indent."""

    def __init__(self, name: str, action: Callable[[SqlWriter], None]) -> None:
        self._name = name
        self._action = action

    def append_to(self, w: SqlWriter) -> None:
        self._action(w)

    def __repr__(self) -> str:
        return f"<layout {self._name}>"


def _newline_indent(w: SqlWriter) -> None:
    w.appendln()
    w.increase_indent()


def _newline_dedent(w: SqlWriter) -> None:
    w.appendln()
    w.decrease_indent()


INDENT: SqlFragment = _Layout("indent", SqlWriter.increase_indent)
DEDENT: SqlFragment = _Layout("dedent", SqlWriter.decrease_indent)
NEWLINE_INDENT: SqlFragment = _Layout("newline_indent", _newline_indent)
NEWLINE_DEDENT: SqlFragment = _Layout("newline_dedent", _newline_dedent)
NULL_LITERAL: SqlFragment = SqlRaw("NULL")


def wrap_in_parentheses(fragment: SqlFragment, newline_and_indent: bool) -> SqlFragment:
    """Surround ``fragment`` with parentheses.

    With ``newline_and_indent`` the fragment starts on its own line, one level
    deeper, and the closing parenthesis follows the fragment's last line.
    """
    if newline_and_indent:
        return CompositeFragment(SqlRaw("("), NEWLINE_INDENT, fragment, DEDENT, SqlRaw(")"))
    return CompositeFragment(SqlRaw("("), fragment, SqlRaw(")"))


def keyword_subquery(keyword: str, subquery: SqlFragment) -> SqlFragment:
    """Render ``keyword (`` followed by the indented subquery and ``)``."""
    return CompositeFragment(SqlRaw(f"{keyword} ("), NEWLINE_INDENT, subquery, DEDENT, SqlRaw(")"))


def bind_all(
    fragments: Iterable[SqlFragment],
    ps: PreparedStatement,
    seq: ParameterSequence,
) -> None:
    """Bind ``fragments`` in iteration order."""
    for fragment in fragments:
        fragment.bind(ps, seq)
