"""Tests for translating tokens through a dictionary."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Sequence

import pytest

from packages.telemetry import metrics
from packages.translator import (
    ConfigError,
    FileError,
    NormalizedLexeme,
    NormalizerCache,
    SimpleNormalizer,
    TranslatedLexeme,
    TranslationDictionary,
    default_catalog,
    load_dictionaries,
    translate,
)

BUNDLED_CONFIG = Path(__file__).resolve().parents[2] / "configs" / "dictionaries.yaml"


class _Splitting:
    """Pretends to be a compound-aware normalizer: one lexeme per hyphen part."""

    def __init__(self) -> None:
        self.calls = 0

    def normalize(self, token: str) -> Sequence[NormalizedLexeme] | None:
        self.calls += 1
        return tuple(NormalizedLexeme(part) for part in token.split("-") if part)


class _Nothing:
    def normalize(self, token: str) -> Sequence[NormalizedLexeme] | None:
        return None


class _Verbatim:
    def normalize(self, token: str) -> Sequence[NormalizedLexeme] | None:
        return (NormalizedLexeme(token),)


@pytest.fixture
def dict_file(tmp_path: Path) -> Path:
    path = tmp_path / "pets.trn"
    path.write_text(
        "# pets\n"
        "cat feline kitty\n"
        "Dog fido\n"
        "bird\n"
        "fish trout salmon carp\n",
        encoding="utf-8",
    )
    return path


def _dictionary(dict_file: Path, normalizer: object | None = None) -> TranslationDictionary:
    catalog = default_catalog()
    if normalizer is not None:
        catalog.register("custom", normalizer)  # type: ignore[arg-type]
        return TranslationDictionary.from_options(
            {"DictFile": str(dict_file), "InputDict": "custom"}, catalog=catalog
        )
    return TranslationDictionary.from_options(
        {"DictFile": str(dict_file), "InputDict": "simple"}, catalog=catalog
    )


def test_multi_word_value_expands_with_variants(dict_file: Path) -> None:
    """Each value word becomes its own lexeme, numbered from 1."""
    result = _dictionary(dict_file).translate("cat")
    assert result is not None
    assert list(result) == [
        TranslatedLexeme("feline", 1, 0),
        TranslatedLexeme("kitty", 2, 0),
    ]
    assert result.words == ("feline", "kitty")


def test_lookup_is_case_insensitive(dict_file: Path) -> None:
    """Normalized forms are lower-cased before the table lookup."""
    result = _dictionary(dict_file, _Verbatim()).translate("DOG")
    assert result is not None
    assert result.words == ("fido",)
    assert result[0].variant == 1


def test_unknown_token_is_no_match(dict_file: Path) -> None:
    """Tokens missing from the table yield ``None``."""
    assert _dictionary(dict_file).translate("horse") is None


def test_single_word_line_contributes_nothing(dict_file: Path) -> None:
    """A key without a value never makes it into the table."""
    assert _dictionary(dict_file).translate("bird") is None


def test_empty_token_skips_normalizer(dict_file: Path) -> None:
    """Empty or zero-length input returns before normalizing."""
    normalizer = _Splitting()
    dictionary = _dictionary(dict_file, normalizer)
    assert dictionary.translate("") is None
    assert dictionary.translate("cat", length=0) is None
    assert dictionary.translate("cat", length=-3) is None
    assert normalizer.calls == 0


def test_length_truncates_token(dict_file: Path) -> None:
    """``length`` limits the characters that are translated."""
    result = _dictionary(dict_file).translate("catalogue", length=3)
    assert result is not None
    assert result.words == ("feline", "kitty")


def test_normalizer_without_result_is_no_match(dict_file: Path) -> None:
    """``None`` or empty normalizer output means no match."""
    assert _dictionary(dict_file, _Nothing()).translate("cat") is None
    stopped = _dictionary(dict_file, SimpleNormalizer(stopwords=("cat",)))
    assert stopped.translate("cat") is None


def test_variants_continue_across_sub_lexemes(dict_file: Path) -> None:
    """Variant numbers keep counting across matched sub-lexemes."""
    result = _dictionary(dict_file, _Splitting()).translate("cat-horse-fish-dog")
    assert result is not None
    assert [(item.word, item.variant) for item in result] == [
        ("feline", 1),
        ("kitty", 2),
        ("trout", 3),
        ("salmon", 4),
        ("carp", 5),
        ("fido", 6),
    ]
    assert all(item.flags == 0 for item in result)


def test_compound_without_matches_is_no_match(dict_file: Path) -> None:
    """Sub-lexemes that all miss produce ``None``."""
    assert _dictionary(dict_file, _Splitting()).translate("horse-cow") is None


def test_empty_table_is_no_match(tmp_path: Path) -> None:
    """An empty table short-circuits before the normalizer."""
    path = tmp_path / "empty.trn"
    path.write_text("# nothing here\n\nlonely\n", encoding="utf-8")
    normalizer = _Splitting()
    dictionary = _dictionary(path, normalizer)
    assert len(dictionary.table) == 0
    assert dictionary.translate("cat") is None
    assert normalizer.calls == 0


def test_stale_handle_is_reresolved(dict_file: Path) -> None:
    """Redefining the normalizer is picked up on the next call."""
    catalog = default_catalog()
    cache = NormalizerCache(catalog)
    catalog.register("custom", _Nothing())
    dictionary = TranslationDictionary.from_options(
        [("DictFile", str(dict_file)), ("InputDict", "public.custom")], cache=cache
    )
    assert dictionary.translate("cat") is None
    first_handle = dictionary.normalizer
    catalog.register("custom", _Verbatim())
    assert not first_handle.is_valid
    result = dictionary.translate("cat")
    assert result is not None
    assert result.words == ("feline", "kitty")
    assert dictionary.normalizer is not first_handle


def test_explicitly_invalidated_handle_recovers(dict_file: Path) -> None:
    """An invalidated cache entry is looked up again transparently."""
    dictionary = _dictionary(dict_file)
    dictionary.cache.invalidate(dictionary.normalizer_id)
    result = translate(dictionary, "dog")
    assert result is not None
    assert result.to_list() == [{"word": "fido", "variant": 1, "flags": 0}]


def test_construction_errors(dict_file: Path, tmp_path: Path) -> None:
    """Bad options, unknown normalizers and missing files abort construction."""
    with pytest.raises(ConfigError, match="does not exist"):
        TranslationDictionary.from_options({"DictFile": str(dict_file), "InputDict": "nope"})
    with pytest.raises(ConfigError, match="missing InputDict parameter"):
        TranslationDictionary.from_options({"DictFile": str(dict_file)})
    with pytest.raises(FileError):
        TranslationDictionary.from_options(
            {"DictFile": str(tmp_path / "absent.trn"), "InputDict": "simple"}
        )


def test_cache_must_match_catalog(dict_file: Path) -> None:
    """A cache bound to another catalog is refused."""
    cache = NormalizerCache(default_catalog())
    with pytest.raises(ValueError):
        TranslationDictionary.from_options(
            {"DictFile": str(dict_file), "InputDict": "simple"},
            catalog=default_catalog(),
            cache=cache,
        )


def test_concurrent_translation(dict_file: Path) -> None:
    """Several threads can share one dictionary."""
    dictionary = _dictionary(dict_file)
    failures: list[str] = []

    def worker() -> None:
        for _ in range(200):
            result = dictionary.translate("fish")
            if result is None or result.words != ("trout", "salmon", "carp"):
                failures.append("fish")

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert failures == []


def test_translate_counts_calls_and_matches(dict_file: Path) -> None:
    """Every call bumps the call counter; only hits bump the match counter."""
    dictionary = _dictionary(dict_file)
    registry = metrics.get_registry()
    registry.reset()
    assert dictionary.translate("cat") is not None
    assert dictionary.translate("horse") is None
    calls = registry.get_series("lexshift.translate.calls")
    matches = registry.get_series("lexshift.translate.matches")
    assert calls is not None and matches is not None
    assert calls.kind == "counter"
    assert calls.count == 2
    assert matches.count == 1


def test_bundled_configuration_builds_dictionaries() -> None:
    """The shipped dictionaries.yaml yields a working ``sample`` dictionary."""
    dictionaries = load_dictionaries(BUNDLED_CONFIG)
    assert set(dictionaries) == {"sample"}
    sample = dictionaries["sample"]
    assert sample.name == "sample"
    result = sample.translate("Sofa")
    assert result is not None
    assert result.words == ("couch", "settee")


def test_configured_dictionaries_share_the_catalog(tmp_path: Path, dict_file: Path) -> None:
    """Dictionaries built from one file react together to a normalizer redefinition."""
    config = tmp_path / "dictionaries.yaml"
    config.write_text(
        "dictionaries:\n"
        f"  first:\n    DictFile: {dict_file.name}\n    InputDict: custom\n"
        f"  second:\n    DictFile: {dict_file.name}\n    InputDict: public.custom\n",
        encoding="utf-8",
    )
    catalog = default_catalog()
    catalog.register("custom", _Nothing())
    dictionaries = load_dictionaries(config, catalog=catalog)
    assert dictionaries["first"].cache is dictionaries["second"].cache
    assert dictionaries["first"].translate("cat") is None
    catalog.register("custom", _Verbatim())
    for dictionary in dictionaries.values():
        result = dictionary.translate("dog")
        assert result is not None
        assert result.words == ("fido",)


def test_load_dictionaries_rejects_foreign_cache() -> None:
    """A cache bound to another catalog is refused."""
    with pytest.raises(ValueError):
        load_dictionaries(
            BUNDLED_CONFIG,
            catalog=default_catalog(),
            cache=NormalizerCache(default_catalog()),
        )
