"""Public entry points for the lexshift translation dictionary."""

from packages.translator.errors import ConfigError, FileError, TranslatorError
from packages.translator.lexize import (
    TranslatedLexeme,
    TranslationDictionary,
    TranslationResult,
    load_dictionaries,
    translate,
)
from packages.translator.normalizers import (
    NormalizedLexeme,
    NormalizerCache,
    NormalizerCatalog,
    SimpleNormalizer,
    default_catalog,
)
from packages.translator.options import DictionaryOptions, load_definitions, parse_options
from packages.translator.table import DictionaryTable, TranslationEntry, load_table

__all__ = [
    "ConfigError",
    "DictionaryOptions",
    "DictionaryTable",
    "FileError",
    "NormalizedLexeme",
    "NormalizerCache",
    "NormalizerCatalog",
    "SimpleNormalizer",
    "TranslatedLexeme",
    "TranslationDictionary",
    "TranslationEntry",
    "TranslationResult",
    "TranslatorError",
    "default_catalog",
    "load_definitions",
    "load_dictionaries",
    "load_table",
    "parse_options",
    "translate",
]
