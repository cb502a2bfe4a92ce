"""Positional parameter counter threaded through a bind pass."""
from __future__ import annotations


class ParameterSequence:
    """Monotonic 1-based position cursor.

    ``next()`` returns the current position and advances the cursor by one.
    ``reset()`` rewinds to the initial position so the same instance can be
    reused for every row of a batch.
    """

    def __init__(self, start: int = 1) -> None:
        self._start = start
        self._current = start

    def next(self) -> int:
        position = self._current
        self._current += 1
        return position

    def reset(self) -> None:
        self._current = self._start

    @property
    def current(self) -> int:
        """The position the next call to :meth:`next` will return."""
        return self._current

    def __repr__(self) -> str:
        return f"ParameterSequence(start={self._start}, current={self._current})"
