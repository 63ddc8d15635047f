"""Lexeme translation against a loaded dictionary table.

A :class:`TranslationDictionary` is built once from its ``DictFile`` and
``InputDict`` options and then shared by any number of callers. Each call to
:func:`translate` runs the raw token through the upstream normalizer, looks up
every normalized form in the table and expands the matched values into output
words numbered 1, 2, 3, ... across the whole call.

``None`` means the dictionary has nothing to contribute for the token.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from packages.telemetry import metrics as telemetry_metrics
from packages.telemetry.logger import get_logger

from .normalizers import (
    CachedNormalizer,
    NormalizedLexeme,
    NormalizerCache,
    NormalizerCatalog,
    default_catalog,
)
from .options import DictionaryOptions, OptionItems, load_definitions, parse_options
from .table import DictionaryTable, load_table
from .words import case_fold

__all__ = [
    "TranslatedLexeme",
    "TranslationDictionary",
    "TranslationResult",
    "load_dictionaries",
    "translate",
]

_LOGGER = get_logger("lexshift.translator.lexize")


@dataclass(frozen=True, slots=True)
class TranslatedLexeme:
    """Output word handed to the indexing/query pipeline."""

    word: str
    variant: int
    flags: int = 0

    def to_dict(self) -> dict[str, object]:
        return {"word": self.word, "variant": self.variant, "flags": self.flags}


@dataclass(frozen=True, slots=True)
class TranslationResult:
    lexemes: tuple[TranslatedLexeme, ...]

    def __len__(self) -> int:
        return len(self.lexemes)

    def __iter__(self) -> Iterator[TranslatedLexeme]:
        return iter(self.lexemes)

    def __getitem__(self, index: int) -> TranslatedLexeme:
        return self.lexemes[index]

    @property
    def words(self) -> tuple[str, ...]:
        return tuple(lexeme.word for lexeme in self.lexemes)

    def to_list(self) -> list[dict[str, object]]:
        return [lexeme.to_dict() for lexeme in self.lexemes]


class _OutputBuffer:
    """Accumulates output words, doubling its storage on overflow."""

    __slots__ = ("_slots", "_length")

    def __init__(self, initial_capacity: int = 4) -> None:
        self._slots: list[TranslatedLexeme | None] = [None] * initial_capacity
        self._length = 0

    def __len__(self) -> int:
        return self._length

    def append(self, word: str) -> None:
        if self._length >= len(self._slots):
            self._slots.extend([None] * len(self._slots))
        self._length += 1
        self._slots[self._length - 1] = TranslatedLexeme(word=word, variant=self._length)

    def freeze(self) -> TranslationResult:
        return TranslationResult(
            tuple(lexeme for lexeme in self._slots[: self._length] if lexeme is not None)
        )


class TranslationDictionary:
    """Translation table paired with the normalizer that feeds it."""

    def __init__(
        self,
        table: DictionaryTable,
        normalizer_id: int,
        cache: NormalizerCache,
        *,
        name: str | None = None,
        options: DictionaryOptions | None = None,
    ) -> None:
        self.table = table
        self.normalizer_id = normalizer_id
        self.cache = cache
        self.name = name
        self.options = options
        self._normalizer: CachedNormalizer = cache.lookup(normalizer_id)

    @classmethod
    def from_options(
        cls,
        options: OptionItems | DictionaryOptions,
        *,
        catalog: NormalizerCatalog | None = None,
        cache: NormalizerCache | None = None,
        data_dir: str | Path | None = None,
        name: str | None = None,
    ) -> "TranslationDictionary":
        """Validate ``options``, load the table and resolve the normalizer.

        Any :class:`~packages.translator.errors.ConfigError` aborts construction.
        """

        parsed = options if isinstance(options, DictionaryOptions) else parse_options(options)
        if cache is None:
            cache = NormalizerCache(catalog if catalog is not None else default_catalog())
        elif catalog is not None and cache.catalog is not catalog:
            raise ValueError("cache must be bound to the supplied catalog")
        table = load_table(parsed.dict_file, data_dir=data_dir)
        normalizer_id = cache.catalog.resolve(parsed.input_dict)
        _LOGGER.info(
            "dictionary %s: %d entries, input normalizer %s",
            name or parsed.dict_file,
            len(table),
            parsed.input_dict,
        )
        return cls(table, normalizer_id, cache, name=name, options=parsed)

    @property
    def normalizer(self) -> CachedNormalizer:
        """Current normalizer handle, re-resolved first if it went stale."""
        handle = self._normalizer
        if not handle.is_valid:
            handle = self.cache.revalidate(handle)
            self._normalizer = handle
        return handle

    def translate(self, token: str, length: int | None = None) -> TranslationResult | None:
        return translate(self, token, length)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"TranslationDictionary(name={self.name!r}, entries={len(self.table)})"


def _lexemes(normalized: Sequence[NormalizedLexeme | str]) -> Iterator[str]:
    for item in normalized:
        lexeme = item if isinstance(item, str) else item.lexeme
        if lexeme:
            yield lexeme


def translate(
    dictionary: TranslationDictionary, token: str, length: int | None = None
) -> TranslationResult | None:
    """Translate ``token`` through ``dictionary``.

    ``length`` limits how many characters of ``token`` are considered.
    Returns ``None`` when the token is empty, the table is empty, the
    normalizer produces nothing or none of its forms is in the table.
    """

    telemetry_metrics.emit("lexshift.translate.calls", 1)
    if length is not None:
        token = token[: max(length, 0)]
    if not token or not dictionary.table:
        return None

    normalized = dictionary.normalizer.normalize(token)
    if not normalized:
        return None

    output = _OutputBuffer()
    matched = False
    # Compound forms are looked up one by one; they are never recombined.
    for lexeme in _lexemes(normalized):
        entry = dictionary.table.find(case_fold(lexeme))
        if entry is None:
            continue
        matched = True
        for word in entry.words:
            output.append(word)

    if not matched:
        return None
    telemetry_metrics.emit("lexshift.translate.matches", 1)
    return output.freeze()


def load_dictionaries(
    path: str | Path,
    *,
    catalog: NormalizerCatalog | None = None,
    cache: NormalizerCache | None = None,
    data_dir: str | Path | None = None,
) -> dict[str, TranslationDictionary]:
    """Build every dictionary defined in the YAML file at ``path``.

    All dictionaries share one normalizer cache, so redefining a normalizer in
    ``catalog`` invalidates the handles of every dictionary that uses it.
    """

    definitions = load_definitions(path)
    if cache is None:
        cache = NormalizerCache(catalog if catalog is not None else default_catalog())
    elif catalog is not None and cache.catalog is not catalog:
        raise ValueError("cache must be bound to the supplied catalog")
    return {
        name: TranslationDictionary.from_options(options, cache=cache, data_dir=data_dir, name=name)
        for name, options in definitions.items()
    }
