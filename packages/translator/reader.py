"""Line-oriented access to dictionary source files.

Dictionary files are plain UTF-8 text. :class:`LineReader` hands out one
logical line at a time with the trailing newline removed and remembers the
current line number so decoding problems can be reported precisely. Opening
failures surface as :class:`~packages.translator.errors.FileError` carrying the
operating system message.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import BinaryIO, Iterator

from .errors import ConfigError, FileError

__all__ = [
    "DATA_DIR_ENV",
    "DEFAULT_DATA_DIR",
    "DICTIONARY_SUFFIX",
    "LineReader",
    "read_lines",
    "resolve_dictionary_path",
]

DATA_DIR_ENV = "LEXSHIFT_DATA_DIR"
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data" / "dictionaries"
DICTIONARY_SUFFIX = ".trn"

_BARE_NAME = re.compile(r"[a-z0-9_]+")


def resolve_dictionary_path(reference: str | Path, *, data_dir: str | Path | None = None) -> Path:
    """Turn a ``DictFile`` value into a concrete path.

    Values that look like paths (a separator or a suffix) are used verbatim.
    Bare names are looked up as ``<data_dir>/<name>.trn``.
    """

    if isinstance(reference, Path):
        return reference
    if not isinstance(reference, str) or not reference.strip():
        raise ConfigError("DictFile must be a non-empty string")
    candidate = Path(reference)
    if os.sep in reference or "/" in reference or candidate.suffix:
        return candidate
    if not _BARE_NAME.fullmatch(reference):
        raise ConfigError(f"invalid text search configuration file name \"{reference}\"")
    if data_dir is None:
        data_dir = os.environ.get(DATA_DIR_ENV) or DEFAULT_DATA_DIR
    return Path(data_dir) / f"{reference}{DICTIONARY_SUFFIX}"


class LineReader:
    """Iterate over the lines of a dictionary file.

    Use as a context manager; the file is opened on entry and closed on exit.
    """

    def __init__(self, path: str | Path, *, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding
        self.line_number = 0
        self._handle: BinaryIO | None = None

    def __enter__(self) -> "LineReader":
        try:
            self._handle = self.path.open("rb")
        except OSError as exc:
            raise FileError(
                f"could not open translate file \"{self.path}\": {exc.strerror or exc}",
                path=self.path,
            ) from exc
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __iter__(self) -> Iterator[str]:
        if self._handle is None:
            raise RuntimeError("LineReader must be entered before iterating")
        while True:
            try:
                raw = self._handle.readline()
            except OSError as exc:
                raise FileError(
                    f"could not read translate file \"{self.path}\": {exc.strerror or exc}",
                    path=self.path,
                    line_number=self.line_number + 1,
                ) from exc
            if not raw:
                return
            self.line_number += 1
            try:
                line = raw.decode(self.encoding)
            except UnicodeDecodeError as exc:
                raise FileError(
                    f"invalid byte sequence for encoding \"{self.encoding}\"",
                    path=self.path,
                    line_number=self.line_number,
                ) from exc
            if self.line_number == 1:
                line = line.lstrip("\ufeff")
            yield line.rstrip("\r\n")


def read_lines(path: str | Path, *, encoding: str = "utf-8") -> Iterator[str]:
    """Yield the lines of ``path`` with line terminators stripped."""

    with LineReader(path, encoding=encoding) as reader:
        yield from reader
