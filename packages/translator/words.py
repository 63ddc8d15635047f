"""Whitespace word splitting shared by the loader and the translator."""

from __future__ import annotations

from typing import Iterator

__all__ = ["COMMENT_PREFIX", "case_fold", "find_word", "split_words"]

COMMENT_PREFIX = "#"


def case_fold(text: str) -> str:
    """Lower-case ``text`` using Unicode case rules."""
    return text.lower()


def find_word(text: str, start: int = 0) -> tuple[int, int] | None:
    """Return ``(begin, end)`` of the next whitespace-delimited word.

    ``None`` is returned when only whitespace remains after ``start``.
    """

    length = len(text)
    index = start
    while index < length and text[index].isspace():
        index += 1
    if index >= length:
        return None
    begin = index
    while index < length and not text[index].isspace():
        index += 1
    return begin, index


def split_words(text: str) -> Iterator[str]:
    """Yield every word of ``text`` in order.

    ``#`` carries no meaning here; comment lines are recognised by the loader.
    """

    position = 0
    while True:
        span = find_word(text, position)
        if span is None:
            return
        begin, position = span
        yield text[begin:position]
