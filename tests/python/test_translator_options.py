"""Tests for dictionary construction options."""

from __future__ import annotations

from pathlib import Path

import pytest

from packages.translator.errors import ConfigError, FileError
from packages.translator.options import DictionaryOptions, load_definitions, parse_options


def test_parse_options_accepts_mapping() -> None:
    """A plain mapping of both options parses."""
    options = parse_options({"DictFile": "sample", "InputDict": "builtin.simple"})
    assert options == DictionaryOptions(dict_file="sample", input_dict="builtin.simple")
    assert options.to_dict() == {"DictFile": "sample", "InputDict": "builtin.simple"}


def test_option_names_are_case_insensitive() -> None:
    """Option names match regardless of case."""
    options = parse_options([("dictfile", "sample"), ("INPUTDICT", "simple")])
    assert options.dict_file == "sample"
    assert options.input_dict == "simple"


def test_path_values_are_accepted(tmp_path: Path) -> None:
    """``Path`` values are converted to strings."""
    options = parse_options({"DictFile": tmp_path / "a.trn", "InputDict": "simple"})
    assert options.dict_file == str(tmp_path / "a.trn")


@pytest.mark.parametrize(
    ("items", "message"),
    [
        ([("DictFile", "a"), ("dictfile", "b"), ("InputDict", "simple")], "multiple DictFile parameters"),
        ([("DictFile", "a"), ("InputDict", "x"), ("InputDict", "y")], "multiple InputDict parameters"),
        ([("DictFile", "a"), ("Synonyms", "b")], 'unrecognized translate parameter: "Synonyms"'),
        ([("InputDict", "simple")], "missing DictFile parameter"),
        ([("DictFile", "a")], "missing InputDict parameter"),
        ([("DictFile", ""), ("InputDict", "simple")], "DictFile requires a non-empty string value"),
    ],
)
def test_parse_options_errors(items: list[tuple[str, str]], message: str) -> None:
    """Duplicate, unknown, missing and empty options each raise."""
    with pytest.raises(ConfigError) as excinfo:
        parse_options(items)
    assert str(excinfo.value) == message


def test_parse_options_rejects_other_shapes() -> None:
    """Strings and malformed pairs are not options."""
    with pytest.raises(ConfigError):
        parse_options("DictFile=sample")  # type: ignore[arg-type]
    with pytest.raises(ConfigError):
        parse_options([("DictFile",)])  # type: ignore[list-item]


def test_load_definitions_resolves_relative_paths(tmp_path: Path) -> None:
    """Relative file paths are anchored at the YAML file."""
    config = tmp_path / "conf" / "dictionaries.yaml"
    config.parent.mkdir()
    config.write_text(
        "dictionaries:\n"
        "  pets:\n"
        "    DictFile: ../data/pets.trn\n"
        "    InputDict: builtin.simple\n"
        "  bundled:\n"
        "    dictfile: sample\n"
        "    inputdict: simple\n",
        encoding="utf-8",
    )
    definitions = load_definitions(config)
    assert definitions["pets"].dict_file == str(config.parent / "../data/pets.trn")
    assert definitions["bundled"] == DictionaryOptions(dict_file="sample", input_dict="simple")


def test_load_definitions_reports_dictionary_name(tmp_path: Path) -> None:
    """Errors name the offending dictionary."""
    config = tmp_path / "bad.yaml"
    config.write_text("dictionaries:\n  pets:\n    DictFile: pets\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_definitions(config)
    assert "'pets'" in str(excinfo.value)
    assert "missing InputDict parameter" in str(excinfo.value)


def test_load_definitions_requires_section(tmp_path: Path) -> None:
    """A ``dictionaries`` section is mandatory."""
    config = tmp_path / "empty.yaml"
    config.write_text("other: 1\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_definitions(config)


def test_load_definitions_missing_file(tmp_path: Path) -> None:
    """A missing YAML file is a file error."""
    with pytest.raises(FileError):
        load_definitions(tmp_path / "absent.yaml")
