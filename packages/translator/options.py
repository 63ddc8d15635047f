"""Construction options for translation dictionaries."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from packages.utils.config import load_config

from .errors import ConfigError, FileError

__all__ = ["DICT_FILE", "INPUT_DICT", "DictionaryOptions", "load_definitions", "parse_options"]

DICT_FILE = "DictFile"
INPUT_DICT = "InputDict"

OptionItems = Mapping[str, Any] | Sequence[tuple[str, Any]]


@dataclass(frozen=True, slots=True)
class DictionaryOptions:
    dict_file: str
    input_dict: str

    def to_dict(self) -> dict[str, str]:
        return {DICT_FILE: self.dict_file, INPUT_DICT: self.input_dict}


def _items(options: OptionItems) -> Iterable[tuple[str, Any]]:
    if isinstance(options, Mapping):
        return options.items()
    if isinstance(options, (str, bytes)) or not isinstance(options, Sequence):
        raise ConfigError("dictionary options must be a mapping or a list of (name, value) pairs")
    pairs: list[tuple[str, Any]] = []
    for item in options:
        if not isinstance(item, Sequence) or isinstance(item, str) or len(item) != 2:
            raise ConfigError("dictionary options must be (name, value) pairs")
        pairs.append((item[0], item[1]))
    return pairs


def _string_value(name: str, value: Any) -> str:
    if isinstance(value, Path):
        return str(value)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{name} requires a non-empty string value")
    return value


def parse_options(options: OptionItems) -> DictionaryOptions:
    """Validate ``DictFile``/``InputDict`` options.

    Names compare case-insensitively. Unknown names, repeated names and missing
    names each raise :class:`ConfigError`.
    """

    dict_file: str | None = None
    input_dict: str | None = None
    for raw_name, value in _items(options):
        name = str(raw_name)
        lowered = name.lower()
        if lowered == DICT_FILE.lower():
            if dict_file is not None:
                raise ConfigError(f"multiple {DICT_FILE} parameters")
            dict_file = _string_value(DICT_FILE, value)
        elif lowered == INPUT_DICT.lower():
            if input_dict is not None:
                raise ConfigError(f"multiple {INPUT_DICT} parameters")
            input_dict = _string_value(INPUT_DICT, value)
        else:
            raise ConfigError(f"unrecognized translate parameter: \"{name}\"")

    if dict_file is None:
        raise ConfigError(f"missing {DICT_FILE} parameter")
    if input_dict is None:
        raise ConfigError(f"missing {INPUT_DICT} parameter")
    return DictionaryOptions(dict_file=dict_file, input_dict=input_dict)


def load_definitions(path: str | Path) -> dict[str, DictionaryOptions]:
    """Read named dictionary definitions from a YAML document.

    The document holds a ``dictionaries`` mapping of ``name -> options``.
    Relative ``DictFile`` paths are taken relative to the YAML file.
    """

    config_path = Path(path)
    try:
        data = load_config(config_path)
    except FileNotFoundError as exc:
        raise FileError(str(exc), path=config_path) from exc
    except ValueError as exc:
        raise ConfigError(f"{config_path}: {exc}") from exc
    section = data.get("dictionaries")
    if not isinstance(section, Mapping) or not section:
        raise ConfigError(f"{config_path}: expected a non-empty 'dictionaries' mapping")
    definitions: dict[str, DictionaryOptions] = {}
    for name, raw in section.items():
        if not isinstance(raw, Mapping):
            raise ConfigError(f"{config_path}: dictionary {name!r} must be a mapping")
        try:
            parsed = parse_options(raw)
        except ConfigError as exc:
            raise ConfigError(f"{config_path}: dictionary {name!r}: {exc}") from exc
        dict_file = parsed.dict_file
        if ("/" in dict_file or Path(dict_file).suffix) and not Path(dict_file).is_absolute():
            dict_file = str(config_path.parent / dict_file)
        definitions[str(name)] = DictionaryOptions(dict_file=dict_file, input_dict=parsed.input_dict)
    return definitions
