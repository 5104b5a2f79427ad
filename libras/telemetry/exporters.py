"""Metric exporters.

The default exporter keeps the latest samples in memory so importing the
package never touches the disk. Point ``telemetry.export_path`` at a file to
append every sample as a JSON line instead.
"""

from __future__ import annotations

import json
from collections import deque
from pathlib import Path
from threading import RLock
from typing import TYPE_CHECKING, Protocol, TextIO

if TYPE_CHECKING:
    from .metrics import MetricSample


class Exporter(Protocol):
    """Protocol implemented by all metric exporters."""

    def export(self, sample: "MetricSample") -> None:
        ...


class MemoryExporter:
    """Keep the most recent ``capacity`` samples in memory."""

    def __init__(self, capacity: int = 1024) -> None:
        self._lock = RLock()
        self._samples: deque["MetricSample"] = deque(maxlen=capacity)

    def export(self, sample: "MetricSample") -> None:
        with self._lock:
            self._samples.append(sample)

    def samples(self) -> list["MetricSample"]:
        with self._lock:
            return list(self._samples)

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()


class JsonlExporter:
    """Write each sample as one JSON object per line.

    The file is opened in append mode on the first sample, so several runs
    can share one export file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = RLock()
        self._handle: TextIO | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._handle is not None

    def export(self, sample: "MetricSample") -> None:
        line = json.dumps(sample.to_dict(), ensure_ascii=False, sort_keys=True)
        with self._lock:
            if self._handle is None:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._handle = self._path.open("a", encoding="utf-8", buffering=1)
            self._handle.write(line + "\n")

    def close(self) -> None:
        with self._lock:
            handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()


_LOCK = RLock()
_EXPORTER: Exporter = MemoryExporter()


def configure(exporter: Exporter) -> Exporter:
    """Install ``exporter`` globally and return the one it replaces."""

    global _EXPORTER
    with _LOCK:
        previous = _EXPORTER
        _EXPORTER = exporter
    return previous


def active() -> Exporter:
    with _LOCK:
        return _EXPORTER


def export(sample: "MetricSample") -> None:
    """Forward ``sample`` to the active exporter."""

    active().export(sample)


__all__ = ["Exporter", "JsonlExporter", "MemoryExporter", "active", "configure", "export"]
