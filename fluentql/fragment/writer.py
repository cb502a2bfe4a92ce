"""Indentation-aware SQL text accumulator."""
from __future__ import annotations

from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from fluentql.fragment.base import SqlFragment

_INDENT = "    "


class SqlWriter:
    """Accumulates SQL text for one render pass.

    Leading whitespace (four spaces per indent level) is emitted only when
    text is appended at the start of a line.  Indent increases and decreases
    are explicit and must be paired by the caller.
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._indent_level = 0
        self._start_line = True

    def append(self, item: Union[str, SqlFragment]) -> SqlWriter:
        """Append raw text, or let a fragment render itself."""
        if not isinstance(item, str):
            item.append_to(self)
            return self
        if self._start_line:
            self._parts.append(_INDENT * self._indent_level)
        self._start_line = False
        self._parts.append(item)
        return self

    def appendln(self, item: Union[str, SqlFragment, None] = None) -> SqlWriter:
        """Append ``item`` (if any) followed by a newline."""
        if item is not None:
            self.append(item)
        self._parts.append("\n")
        self._start_line = True
        return self

    def increase_indent(self) -> None:
        self._indent_level += 1

    def decrease_indent(self) -> None:
        self._indent_level -= 1

    @property
    def indent_level(self) -> int:
        return self._indent_level

    def get_sql(self) -> str:
        return "".join(self._parts)

    def __str__(self) -> str:
        return self.get_sql()
