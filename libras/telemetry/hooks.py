"""Event hooks fired by the translator, the language annotator and sessions.

Hooks are observers: they receive a read-only :class:`HookEvent` after the
fact and cannot influence the translation. A hook that raises is logged and
skipped so one broken observer never breaks a request.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import RLock
from types import MappingProxyType
from typing import Any, Callable, Mapping

from . import logger

HookFn = Callable[["HookEvent"], None]

TRANSLATION_COMPLETED = "translator.translate.completed"
LANGUAGE_DETECTED = "language.detect.completed"
SESSION_STATE_CHANGED = "session.state.changed"

_LOGGER = logger.get_logger("libras.telemetry.hooks")


@dataclass(frozen=True)
class HookEvent:
    name: str
    payload: Mapping[str, Any]
    timestamp: float = field(default_factory=time.time)


class HookRegistry:
    """Named lists of callbacks, safe to use from worker threads."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._callbacks: dict[str, tuple[HookFn, ...]] = {}

    def register(self, name: str, fn: HookFn) -> "HookHandle":
        if not isinstance(name, str) or not name:
            raise ValueError("hook name must be a non-empty string")
        if not callable(fn):
            raise TypeError("hook callback must be callable")
        with self._lock:
            self._callbacks[name] = self._callbacks.get(name, ()) + (fn,)
        return HookHandle(self, name, fn)

    def unregister(self, name: str, fn: HookFn) -> bool:
        """Remove one registration of ``fn``; ``False`` if it was not registered."""

        with self._lock:
            current = list(self._callbacks.get(name, ()))
            if fn not in current:
                return False
            current.remove(fn)
            if current:
                self._callbacks[name] = tuple(current)
            else:
                del self._callbacks[name]
        return True

    def callbacks(self, name: str) -> tuple[HookFn, ...]:
        with self._lock:
            return self._callbacks.get(name, ())

    def dispatch(self, name: str, payload: Mapping[str, Any] | None = None) -> int:
        """Deliver an event to the callbacks of ``name``; returns how many succeeded."""

        callbacks = self.callbacks(name)
        if not callbacks:
            return 0
        event = HookEvent(name=name, payload=MappingProxyType(dict(payload or {})))
        delivered = 0
        for fn in callbacks:
            try:
                fn(event)
            except Exception:
                _LOGGER.exception("hook %r for %s failed", fn, name)
            else:
                delivered += 1
        return delivered


class HookHandle:
    """Returned by :func:`register_hook`; closing it removes the callback."""

    def __init__(self, registry: HookRegistry, name: str, fn: HookFn) -> None:
        self._registry = registry
        self.name = name
        self._fn: HookFn | None = fn

    @property
    def active(self) -> bool:
        return self._fn is not None

    def close(self) -> None:
        fn, self._fn = self._fn, None
        if fn is not None:
            self._registry.unregister(self.name, fn)

    def __enter__(self) -> "HookHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


_REGISTRY = HookRegistry()


def register_hook(name: str, fn: HookFn) -> HookHandle:
    return _REGISTRY.register(name, fn)


def unregister_hook(name: str, fn: HookFn) -> bool:
    return _REGISTRY.unregister(name, fn)


def dispatch(name: str, payload: Mapping[str, Any] | None = None) -> int:
    return _REGISTRY.dispatch(name, payload)


def get_registry() -> HookRegistry:
    """Return the process-wide hook registry."""

    return _REGISTRY


__all__ = [
    "HookEvent",
    "HookFn",
    "HookHandle",
    "HookRegistry",
    "LANGUAGE_DETECTED",
    "SESSION_STATE_CHANGED",
    "TRANSLATION_COMPLETED",
    "dispatch",
    "get_registry",
    "register_hook",
    "unregister_hook",
]
