"""In-memory metrics registry for lexshift telemetry."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Mapping

from . import logger

_LOGGER = logger.get_logger("lexshift.telemetry.metrics")


@dataclass(frozen=True)
class MetricSample:
    """Immutable record representing a single metric observation."""

    name: str
    value: float
    timestamp: float
    kind: str
    tags: Mapping[str, str]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "value": self.value,
            "timestamp": self.timestamp,
            "kind": self.kind,
        }
        if self.tags:
            payload["tags"] = dict(self.tags)
        return payload


RECENT_SAMPLES = 128


@dataclass
class MetricSeries:
    """Running aggregate of a metric plus its most recent samples."""

    name: str
    kind: str
    description: str | None = None
    unit: str | None = None
    samples: Deque[MetricSample] = field(default_factory=lambda: deque(maxlen=RECENT_SAMPLES))
    count: int = 0
    total: float = 0.0
    minimum: float | None = None
    maximum: float | None = None

    def add_sample(self, sample: MetricSample) -> None:
        self.samples.append(sample)
        self.count += 1
        self.total += sample.value
        if self.minimum is None or sample.value < self.minimum:
            self.minimum = sample.value
        if self.maximum is None or sample.value > self.maximum:
            self.maximum = sample.value

    def summary(self) -> Dict[str, Any]:
        if not self.count:
            return {"name": self.name, "kind": self.kind, "count": 0}
        summary: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "count": self.count,
            "total": self.total,
            "min": self.minimum,
            "max": self.maximum,
            "last": self.samples[-1].to_dict(),
        }
        if self.description:
            summary["description"] = self.description
        if self.unit:
            summary["unit"] = self.unit
        return summary


class MetricsRegistry:
    """Thread-safe registry storing metric series in-memory."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._series: Dict[str, MetricSeries] = {}

    def emit(
        self,
        name: str,
        value: Any,
        *,
        kind: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> MetricSample:
        if not isinstance(name, str) or not name:
            raise ValueError("metric name must be a non-empty string")
        numeric_value = _coerce_value(value)
        inferred = _METRIC_CATALOG.get(name, {})
        metric_kind = kind or inferred.get("kind", "gauge")
        sample = MetricSample(
            name=name,
            value=numeric_value,
            timestamp=time.time(),
            kind=metric_kind,
            tags=dict(tags or {}),
        )
        with self._lock:
            series = self._series.get(name)
            if series is None:
                series = MetricSeries(
                    name=name,
                    kind=metric_kind,
                    description=inferred.get("description"),
                    unit=inferred.get("unit"),
                )
                self._series[name] = series
            series.add_sample(sample)
        _LOGGER.debug("metric %s=%s %s", name, numeric_value, sample.tags or "")
        return sample

    def get_series(self, name: str) -> MetricSeries | None:
        with self._lock:
            series = self._series.get(name)
            if series is None:
                return None
            return MetricSeries(
                name=series.name,
                kind=series.kind,
                description=series.description,
                unit=series.unit,
                samples=deque(series.samples, maxlen=RECENT_SAMPLES),
                count=series.count,
                total=series.total,
                minimum=series.minimum,
                maximum=series.maximum,
            )

    def summaries(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {name: series.summary() for name, series in self._series.items()}

    def reset(self) -> None:
        with self._lock:
            self._series.clear()


_METRIC_CATALOG: Dict[str, Dict[str, Any]] = {
    "lexshift.table.entries": {
        "kind": "gauge",
        "description": "Entries held by a freshly loaded translation table",
        "unit": "count",
    },
    "lexshift.translate.calls": {
        "kind": "counter",
        "description": "Translation requests received",
        "unit": "count",
    },
    "lexshift.translate.matches": {
        "kind": "counter",
        "description": "Translation requests that produced at least one word",
        "unit": "count",
    },
    "lexshift.normalizer.reloads": {
        "kind": "counter",
        "description": "Stale normalizer handles re-resolved before use",
        "unit": "count",
    },
}


_REGISTRY = MetricsRegistry()


def emit(
    metric: str,
    value: Any,
    *,
    kind: str | None = None,
    tags: Mapping[str, str] | None = None,
) -> MetricSample:
    """Record ``value`` for ``metric`` in the process-wide registry."""

    return _REGISTRY.emit(metric, value, kind=kind, tags=tags)


def get_registry() -> MetricsRegistry:
    """Return the process-wide metrics registry."""

    return _REGISTRY


def _coerce_value(value: Any) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise TypeError(f"metric value for {value!r} must be numeric") from exc
    raise TypeError(f"metric value for {value!r} must be numeric")


__all__ = [
    "RECENT_SAMPLES",
    "MetricSample",
    "MetricSeries",
    "MetricsRegistry",
    "emit",
    "get_registry",
]
