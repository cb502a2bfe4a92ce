"""String escaping helpers and small collection utilities.

Only values routed through the typed ``value`` API are bound as parameters.
These helpers cover the remaining cases where text ends up inside the SQL
itself: debug comments, inline string literals, and LIKE patterns.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")


def partition(items: Iterable[T], size: int) -> list[Sequence[T]]:
    """Split ``items`` into consecutive chunks of at most ``size`` elements.

    The last chunk may be shorter.  An empty input yields an empty list.
    """
    if size <= 0:
        raise ValueError(f"partition size must be positive, got {size}")
    seq = list(items)
    return [seq[i:i + size] for i in range(0, len(seq), size)]


def escape_comment(comment: str) -> str:
    """Neutralise SQL comment delimiters so ``comment`` is safe inside ``/* ... */``."""
    return (
        comment.replace("/*", "\\slash \\star")
        .replace("*/", "\\star \\slash")
        .replace("--", "\\minus \\minus")
    )


def escape_string(text: str) -> str:
    """Double single quotes for use inside a SQL string literal."""
    return text.replace("'", "''")


def escape_like_string(text: str, escape_char: str) -> str:
    """Escape ``text`` so it matches literally inside a LIKE pattern.

    The escape character itself, ``%`` and ``_`` are prefixed with
    ``escape_char``.  Pair the result with ``like(pattern, escape_char=...)``.
    """
    if len(escape_char) != 1:
        raise ValueError(f"escape_char must be a single character, got {escape_char!r}")
    res = text.replace(escape_char, escape_char + escape_char)
    res = res.replace("%", escape_char + "%")
    return res.replace("_", escape_char + "_")


def to_literal_string(text: str) -> str:
    """Return ``text`` as a quoted SQL string literal."""
    return f"'{escape_string(text)}'"
