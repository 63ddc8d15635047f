"""Sorted translation table built from a flat dictionary file.

Each usable line of the source file has the shape ``<key> <word> [<word> ...]``.
The whole line is lower-cased before it is split, so keys match
case-insensitively and the substitute words come out lower-cased too. Blank
lines, ``#`` comment lines and lines with a single word are skipped without
complaint.

Entries are kept in file order and then stably sorted by key, which means a
key repeated in the file is stored twice and lookups resolve to the first
occurrence.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from packages.telemetry import metrics as telemetry_metrics
from packages.telemetry.logger import get_logger

from .reader import LineReader, resolve_dictionary_path
from .words import COMMENT_PREFIX, case_fold, find_word, split_words

__all__ = [
    "INITIAL_CAPACITY",
    "DictionaryTable",
    "TranslationEntry",
    "TableBuilder",
    "load_table",
    "parse_line",
]

_LOGGER = get_logger("lexshift.translator.table")

INITIAL_CAPACITY = 16


@dataclass(frozen=True, slots=True)
class TranslationEntry:
    """One parsed dictionary line."""

    key: str
    value: str
    words: tuple[str, ...]

    @classmethod
    def from_parts(cls, key: str, value: str) -> "TranslationEntry":
        words = tuple(split_words(value))
        if not words:
            raise ValueError("translation entries require at least one output word")
        return cls(key=key, value=value, words=words)


def parse_line(line: str) -> TranslationEntry | None:
    """Parse a single source line, returning ``None`` for lines to skip."""

    folded = case_fold(line)
    span = find_word(folded)
    if span is None:
        return None
    begin, end = span
    if folded.startswith(COMMENT_PREFIX, begin):
        return None
    value = folded[end:].strip()
    if not value:
        return None
    return TranslationEntry.from_parts(folded[begin:end], value)


class TableBuilder:
    """Growable entry buffer that doubles its capacity on overflow."""

    def __init__(self, initial_capacity: int = INITIAL_CAPACITY) -> None:
        if initial_capacity <= 0:
            raise ValueError("initial_capacity must be positive")
        self._slots: list[TranslationEntry | None] = [None] * initial_capacity
        self._length = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return self._length

    def append(self, entry: TranslationEntry) -> None:
        if self._length >= len(self._slots):
            self._slots.extend([None] * len(self._slots))
        self._slots[self._length] = entry
        self._length += 1

    def build(self, *, source: Path | None = None) -> "DictionaryTable":
        entries = [entry for entry in self._slots[: self._length] if entry is not None]
        if len(entries) > 1:
            entries.sort(key=_sort_key)
        return DictionaryTable(tuple(entries), source=source)


def _sort_key(entry: TranslationEntry) -> str:
    # Code point order on str is the same as byte order on UTF-8.
    return entry.key


class DictionaryTable:
    """Immutable, key-sorted sequence of :class:`TranslationEntry`."""

    __slots__ = ("_entries", "_keys", "source")

    def __init__(self, entries: Sequence[TranslationEntry] = (), *, source: Path | None = None) -> None:
        ordered = tuple(entries)
        keys = tuple(entry.key for entry in ordered)
        if any(left > right for left, right in zip(keys, keys[1:])):
            raise ValueError("dictionary entries must be sorted by key")
        self._entries = ordered
        self._keys = keys
        self.source = source

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, source: Path | None = None) -> "DictionaryTable":
        builder = TableBuilder()
        for line in lines:
            entry = parse_line(line)
            if entry is None:
                continue
            builder.append(entry)
        table = builder.build(source=source)
        for key in table.duplicate_keys():
            _LOGGER.warning("duplicate translation key %r; the first occurrence wins", key)
        return table

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TranslationEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> TranslationEntry:
        return self._entries[index]

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def entries(self) -> tuple[TranslationEntry, ...]:
        return self._entries

    def keys(self) -> tuple[str, ...]:
        return self._keys

    def find(self, key: str) -> TranslationEntry | None:
        """Binary-search for ``key``; the leftmost equal entry is returned."""
        if not self._entries:
            return None
        index = bisect_left(self._keys, key)
        if index < len(self._keys) and self._keys[index] == key:
            return self._entries[index]
        return None

    def duplicate_keys(self) -> tuple[str, ...]:
        duplicates: list[str] = []
        for previous, current in zip(self._keys, self._keys[1:]):
            if previous == current and (not duplicates or duplicates[-1] != current):
                duplicates.append(current)
        return tuple(duplicates)

    def to_dict(self) -> dict[str, object]:
        return {
            "source": str(self.source) if self.source is not None else None,
            "entries": [{"key": entry.key, "words": list(entry.words)} for entry in self._entries],
        }


def load_table(reference: str | Path, *, data_dir: str | Path | None = None) -> DictionaryTable:
    """Load and sort the dictionary named by ``reference``.

    Raises :class:`~packages.translator.errors.FileError` when the file cannot
    be opened or decoded.
    """

    path = resolve_dictionary_path(reference, data_dir=data_dir)
    with LineReader(path) as reader:
        table = DictionaryTable.from_lines(reader, source=path)
        skipped = reader.line_number - len(table)
    _LOGGER.info("loaded %d translation entries from %s", len(table), path)
    if skipped:
        _LOGGER.debug("skipped %d blank, comment or single-word lines in %s", skipped, path)
    telemetry_metrics.emit("lexshift.table.entries", len(table), tags={"source": path.name})
    return table
