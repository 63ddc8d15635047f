"""Exception hierarchy for the translation dictionary."""

from __future__ import annotations

from pathlib import Path

__all__ = ["TranslatorError", "ConfigError", "FileError"]


class TranslatorError(Exception):
    """Base class for every error raised while building a dictionary."""


class ConfigError(TranslatorError, ValueError):
    """Raised when construction parameters are missing, repeated or invalid."""


class FileError(ConfigError):
    """Raised when the dictionary source file cannot be opened or decoded."""

    def __init__(self, message: str, *, path: str | Path, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"{message} (line {line_number} of \"{path}\")"
        super().__init__(message)
        self.path = Path(path)
        self.line_number = line_number
