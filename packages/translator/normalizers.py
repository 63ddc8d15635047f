"""Upstream normalizers and the cache through which translators reach them.

A translation dictionary never holds a normalizer directly. It stores the
normalizer's numeric identifier and a :class:`CachedNormalizer` handle obtained
from a :class:`NormalizerCache`. Redefining a normalizer in the
:class:`NormalizerCatalog` clears the ``is_valid`` flag on every handle that
was handed out for it, and holders are expected to look the identifier up
again before the next use.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from threading import RLock
from typing import Callable, Dict, Iterable, Protocol, Sequence, runtime_checkable

from packages.telemetry import metrics as telemetry_metrics
from packages.telemetry.logger import get_logger

from .errors import ConfigError
from .words import case_fold

__all__ = [
    "DEFAULT_SEARCH_PATH",
    "CachedNormalizer",
    "NormalizedLexeme",
    "Normalizer",
    "NormalizerCache",
    "NormalizerCatalog",
    "SimpleNormalizer",
    "default_catalog",
    "split_qualified_name",
]

_LOGGER = get_logger("lexshift.translator.normalizers")

DEFAULT_SEARCH_PATH = ("public", "builtin")


@dataclass(frozen=True, slots=True)
class NormalizedLexeme:
    """Single normalized form produced by an upstream normalizer."""

    lexeme: str
    flags: int = 0
    variant: int = 0


@runtime_checkable
class Normalizer(Protocol):
    def normalize(self, token: str) -> Sequence[NormalizedLexeme] | None:
        """Return the normalized forms of ``token`` or ``None`` when unrecognised."""


NormalizerFactory = Callable[[], Normalizer]


class SimpleNormalizer:
    """Lower-cases tokens and drops configured stop words."""

    def __init__(self, stopwords: Iterable[str] = (), *, accept: bool = True) -> None:
        self.stopwords = frozenset(case_fold(word) for word in stopwords)
        self.accept = accept

    def normalize(self, token: str) -> Sequence[NormalizedLexeme] | None:
        folded = case_fold(token)
        if folded in self.stopwords:
            return ()
        if not self.accept:
            return None
        return (NormalizedLexeme(folded),)


def split_qualified_name(name: str) -> tuple[str, ...]:
    """Split ``namespace.name`` (or a bare ``name``) into its parts."""

    if not isinstance(name, str):
        raise ConfigError("normalizer name must be a string")
    parts = tuple(part.strip() for part in name.split("."))
    if not 1 <= len(parts) <= 2 or not all(parts):
        raise ConfigError(f"improper qualified name: \"{name}\"")
    return tuple(case_fold(part) for part in parts)


def _constant_factory(instance: Normalizer) -> NormalizerFactory:
    def factory() -> Normalizer:
        return instance

    return factory


@dataclass(frozen=True, slots=True)
class _Definition:
    identifier: int
    namespace: str
    name: str
    factory: NormalizerFactory
    version: int


class NormalizerCatalog:
    """Registry mapping qualified names to normalizer definitions."""

    def __init__(self, *, search_path: Sequence[str] = DEFAULT_SEARCH_PATH) -> None:
        self.search_path = tuple(case_fold(item) for item in search_path)
        self._lock = RLock()
        self._by_name: Dict[tuple[str, str], _Definition] = {}
        self._by_id: Dict[int, _Definition] = {}
        self._ids = itertools.count(1)
        self._listeners: list[Callable[[int], None]] = []

    def register(self, qualified_name: str, factory: NormalizerFactory | Normalizer) -> int:
        """Define or redefine a normalizer and return its identifier.

        Unqualified names land in the first namespace of the search path.
        """

        parts = split_qualified_name(qualified_name)
        namespace, name = parts if len(parts) == 2 else (self.search_path[0], parts[0])
        if not isinstance(factory, type) and isinstance(factory, Normalizer):
            factory = _constant_factory(factory)
        if not callable(factory):
            raise TypeError("normalizer factory must be callable")
        with self._lock:
            previous = self._by_name.get((namespace, name))
            identifier = previous.identifier if previous else next(self._ids)
            version = previous.version + 1 if previous else 1
            definition = _Definition(identifier, namespace, name, factory, version)
            self._by_name[(namespace, name)] = definition
            self._by_id[identifier] = definition
            listeners = list(self._listeners)
        if previous is not None:
            for listener in listeners:
                listener(identifier)
        return identifier

    def drop(self, qualified_name: str) -> None:
        identifier = self.resolve(qualified_name)
        with self._lock:
            definition = self._by_id.pop(identifier)
            self._by_name.pop((definition.namespace, definition.name), None)
            listeners = list(self._listeners)
        for listener in listeners:
            listener(identifier)

    def resolve(self, qualified_name: str) -> int:
        """Return the identifier for ``qualified_name`` or raise :class:`ConfigError`."""

        parts = split_qualified_name(qualified_name)
        with self._lock:
            if len(parts) == 2:
                definition = self._by_name.get(parts)
            else:
                definition = next(
                    (
                        self._by_name[(namespace, parts[0])]
                        for namespace in self.search_path
                        if (namespace, parts[0]) in self._by_name
                    ),
                    None,
                )
        if definition is None:
            raise ConfigError(f"text search dictionary \"{qualified_name}\" does not exist")
        return definition.identifier

    def definition(self, identifier: int) -> _Definition:
        with self._lock:
            definition = self._by_id.get(identifier)
        if definition is None:
            raise ConfigError(f"text search dictionary with identifier {identifier} does not exist")
        return definition

    def subscribe(self, listener: Callable[[int], None]) -> None:
        with self._lock:
            self._listeners.append(listener)


class CachedNormalizer:
    """Handle to an instantiated normalizer; goes stale when its definition changes."""

    __slots__ = ("identifier", "name", "normalizer", "version", "is_valid")

    def __init__(self, identifier: int, name: str, normalizer: Normalizer, version: int) -> None:
        self.identifier = identifier
        self.name = name
        self.normalizer = normalizer
        self.version = version
        self.is_valid = True

    def normalize(self, token: str) -> Sequence[NormalizedLexeme] | None:
        return self.normalizer.normalize(token)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        state = "valid" if self.is_valid else "stale"
        return f"CachedNormalizer({self.name!r}, id={self.identifier}, v{self.version}, {state})"


class NormalizerCache:
    """Thread-safe lookup-and-cache of normalizer instances by identifier."""

    def __init__(self, catalog: NormalizerCatalog) -> None:
        self.catalog = catalog
        self._lock = RLock()
        self._entries: Dict[int, CachedNormalizer] = {}
        catalog.subscribe(self.invalidate)

    def lookup(self, identifier: int) -> CachedNormalizer:
        with self._lock:
            cached = self._entries.get(identifier)
            if cached is not None and cached.is_valid:
                return cached
            definition = self.catalog.definition(identifier)
            normalizer = definition.factory()
            if not isinstance(normalizer, Normalizer):
                raise ConfigError(
                    f"text search dictionary \"{definition.namespace}.{definition.name}\" "
                    "does not provide normalize()"
                )
            cached = CachedNormalizer(
                identifier,
                f"{definition.namespace}.{definition.name}",
                normalizer,
                definition.version,
            )
            self._entries[identifier] = cached
            return cached

    def revalidate(self, handle: CachedNormalizer) -> CachedNormalizer:
        """Return ``handle`` if still valid, otherwise a freshly resolved one."""

        if handle.is_valid:
            return handle
        _LOGGER.debug("re-resolving stale normalizer %s", handle.name)
        telemetry_metrics.emit("lexshift.normalizer.reloads", 1, tags={"normalizer": handle.name})
        return self.lookup(handle.identifier)

    def invalidate(self, identifier: int) -> None:
        with self._lock:
            cached = self._entries.pop(identifier, None)
        if cached is not None:
            cached.is_valid = False

    def clear(self) -> None:
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for cached in entries:
            cached.is_valid = False


def default_catalog() -> NormalizerCatalog:
    """Return a catalog with the built-in ``builtin.simple`` normalizer."""

    catalog = NormalizerCatalog()
    catalog.register("builtin.simple", SimpleNormalizer)
    return catalog
