"""Metrics for translator, language and session activity.

Each metric keeps running aggregates for its whole lifetime plus a bounded
history of its latest samples, so a long-running session does not grow
without limit. Every sample is also forwarded to the active exporter.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from . import exporters

DEFAULT_HISTORY = 512


@dataclass(frozen=True)
class MetricSample:
    name: str
    value: float
    timestamp: float
    kind: str
    tags: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "value": self.value,
            "timestamp": self.timestamp,
        }
        if self.tags:
            record["tags"] = dict(self.tags)
        return record


# name -> (kind, description)
_METRIC_CATALOG: Dict[str, tuple[str, str]] = {
    "libras.translator.matches": ("gauge", "Dictionary terms matched by a translation"),
    "libras.translator.latency_ms": (
        "gauge",
        "Wall clock latency of the synchronous translation pipeline",
    ),
    "libras.language.detections": (
        "counter",
        "Language detections completed, tagged by language code",
    ),
    "libras.language.failures": (
        "counter",
        "Classifier calls that failed to produce a language code",
    ),
    "libras.session.requests": (
        "counter",
        "Translation requests accepted by session coordinators",
    ),
}


@dataclass
class _Aggregate:
    kind: str
    count: int = 0
    total: float = 0.0
    minimum: float = float("inf")
    maximum: float = float("-inf")
    last: float = 0.0

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.minimum = min(self.minimum, value)
        self.maximum = max(self.maximum, value)
        self.last = value


class MetricsRegistry:
    """Thread-safe registry; ``history`` bounds the samples kept per metric."""

    def __init__(self, history: int = DEFAULT_HISTORY) -> None:
        if history < 1:
            raise ValueError("history must be at least 1")
        self._history = history
        self._lock = threading.RLock()
        self._aggregates: Dict[str, _Aggregate] = {}
        self._recent: Dict[str, deque[MetricSample]] = {}

    def emit(
        self,
        name: str,
        value: float | int | bool,
        *,
        kind: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> MetricSample:
        if not isinstance(name, str) or not name:
            raise ValueError("metric name must be a non-empty string")
        if not isinstance(value, (int, float)):
            raise TypeError(f"metric value for {name!r} must be numeric")
        catalog_kind = _METRIC_CATALOG.get(name, ("gauge", ""))[0]
        sample = MetricSample(
            name=name,
            value=float(value),
            timestamp=time.time(),
            kind=kind or catalog_kind,
            tags=dict(tags or {}),
        )
        with self._lock:
            aggregate = self._aggregates.setdefault(name, _Aggregate(kind=sample.kind))
            aggregate.kind = sample.kind
            aggregate.add(sample.value)
            self._recent.setdefault(name, deque(maxlen=self._history)).append(sample)
        exporters.export(sample)
        return sample

    def samples(self, name: str) -> list[MetricSample]:
        """Latest samples of ``name``, oldest first."""

        with self._lock:
            return list(self._recent.get(name, ()))

    def summaries(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            aggregates = {
                name: (agg.kind, agg.count, agg.total, agg.minimum, agg.maximum, agg.last)
                for name, agg in self._aggregates.items()
            }
        result: Dict[str, Dict[str, Any]] = {}
        for name, (kind, count, total, minimum, maximum, last) in aggregates.items():
            entry: Dict[str, Any] = {
                "kind": kind,
                "count": count,
                "total": total,
                "min": minimum,
                "max": maximum,
                "last": last,
            }
            description = _METRIC_CATALOG.get(name, ("", ""))[1]
            if description:
                entry["description"] = description
            result[name] = entry
        return result

    def reset(self) -> None:
        with self._lock:
            self._aggregates.clear()
            self._recent.clear()


_REGISTRY = MetricsRegistry()


def emit(
    metric: str,
    value: float | int | bool,
    *,
    kind: str | None = None,
    tags: Mapping[str, str] | None = None,
) -> MetricSample:
    """Record ``value`` for ``metric`` on the process-wide registry."""

    return _REGISTRY.emit(metric, value, kind=kind, tags=tags)


def get_registry() -> MetricsRegistry:
    return _REGISTRY


__all__ = ["DEFAULT_HISTORY", "MetricSample", "MetricsRegistry", "emit", "get_registry"]
