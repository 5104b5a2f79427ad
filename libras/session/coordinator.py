"""Session coordinator tying the engine, the classifier and the session state together.

One :class:`TranslationSession` owns one :class:`SessionState`. A translation
request fans out into two jobs that share the request text: the synchronous
pipeline (after the configured processing delay) and the language detection.
Both report back as events, and the coordinator applies every event through
:func:`libras.session.state.transition` under a single lock, so listeners
never observe a half-applied update.
"""

from __future__ import annotations

import concurrent.futures
import functools
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping

from libras.language.annotator import LanguageDetection
from libras.language.classifier import build_classifier
from libras.telemetry import exporters, hooks, logger, metrics
from libras.translator.composer import render_not_found
from libras.translator.dictionary import GlossDictionary, default_dictionary, load_dictionary
from libras.translator.engine import TranslationEngine, TranslationOutcome
from libras.utils.config import PROJECT_ROOT, load_config

from .state import (
    ClassifierFailed,
    Cleared,
    Event,
    InputChanged,
    LanguageDetected,
    SessionState,
    TranslateRequested,
    TranslationCompleted,
    transition,
)
from .types import AppConfig

DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "libras.yaml"

StateListener = Callable[[SessionState], None]

_LOGGER = logger.get_logger("libras.session.coordinator")


@dataclass(frozen=True, slots=True)
class PendingTranslation:
    """Handles for the two jobs started by one translation request."""

    request_id: int
    text: str
    translation: concurrent.futures.Future[TranslationOutcome | None]
    detection: concurrent.futures.Future[LanguageDetection | None]

    def wait(self, timeout: float | None = None) -> bool:
        """Block until both jobs have been applied; ``False`` on timeout."""

        _, not_done = concurrent.futures.wait((self.translation, self.detection), timeout=timeout)
        return not not_done

    def cancel(self) -> None:
        """Detach from the request and cancel the jobs that have not started.

        Jobs already running still report to the session, so their results
        are applied as usual. Call :meth:`TranslationSession.clear` to
        discard them.
        """

        self.translation.cancel()
        self.detection.cancel()


class TranslationSession:
    """Single coordinator for one user's translation session."""

    def __init__(
        self,
        engine: TranslationEngine | None = None,
        *,
        processing_delay: float = 0.0,
        max_workers: int = 2,
        owns_engine: bool | None = None,
    ) -> None:
        if processing_delay < 0.0:
            raise ValueError("processing_delay must be non-negative")
        self._owns_engine = engine is None if owns_engine is None else owns_engine
        self.engine = engine if engine is not None else TranslationEngine()
        self.processing_delay = float(processing_delay)
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)), thread_name_prefix="libras-session"
        )
        self._lock = threading.RLock()
        self._stopping = threading.Event()
        self._state = SessionState()
        self._listeners: list[StateListener] = []
        self._pending: set[concurrent.futures.Future[Any]] = set()
        self._closed = False

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new state; returns an unsubscribe function.

        Listeners run while the coordinator lock is held so they observe
        states in order. They must not block.
        """

        if not callable(listener):
            raise TypeError("listener must be callable")
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def update_input(self, text: str) -> SessionState:
        return self._apply(InputChanged(text=text or ""))

    def clear(self) -> SessionState:
        return self._apply(Cleared())

    def request_translation(self, text: str | None = None) -> PendingTranslation:
        """Start translating the current input, or ``text`` when given.

        The translation is published after ``processing_delay`` seconds; the
        language detection runs alongside and may finish first or last.
        """

        with self._lock:
            if self._closed:
                _LOGGER.warning("translation requested on a closed session")
                return _cancelled_request(text or "")
            if text is not None:
                self._apply(InputChanged(text=text))
            state = self._apply(TranslateRequested())
            request_id, source = state.request_id, state.input_text

            translation = self._executor.submit(self._run_pipeline, request_id, source)
            self._track(translation)
            detection: concurrent.futures.Future[LanguageDetection | None] = (
                concurrent.futures.Future()
            )
            self._track(detection)

        metrics.emit("libras.session.requests", 1)
        _LOGGER.info("request %d: translating %d character(s)", request_id, len(source))
        started = self.engine.detect_language(
            source, functools.partial(self._on_detection, request_id, detection)
        )
        started.add_done_callback(functools.partial(_release_undelivered, detection))
        return PendingTranslation(
            request_id=request_id, text=source, translation=translation, detection=detection
        )

    def close(self) -> None:
        """Stop the session: pending jobs are cancelled and late results dropped."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._stopping.set()
            pending = list(self._pending)
            self._pending.clear()
            self._listeners.clear()
        for future in pending:
            future.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)
        if self._owns_engine:
            self.engine.close()
        _LOGGER.debug("session closed with %d pending job(s)", len(pending))

    def __enter__(self) -> "TranslationSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _run_pipeline(self, request_id: int, text: str) -> TranslationOutcome | None:
        if self.processing_delay and self._stopping.wait(self.processing_delay):
            return None
        try:
            outcome = self.engine.translate(text)
        except Exception:
            _LOGGER.exception("request %d: translation pipeline failed", request_id)
            self._apply(
                TranslationCompleted(request_id=request_id, composed_text=render_not_found(text))
            )
            return None
        self._apply(
            TranslationCompleted(
                request_id=request_id,
                composed_text=outcome.composed_text,
                matched_terms=tuple(item.term for item in outcome.matches),
            )
        )
        return outcome

    def _on_detection(
        self,
        request_id: int,
        applied: concurrent.futures.Future[LanguageDetection | None],
        detection: LanguageDetection,
    ) -> None:
        if detection.failed:
            self._apply(ClassifierFailed(request_id=request_id, reason=detection.error or ""))
        else:
            self._apply(
                LanguageDetected(
                    request_id=request_id,
                    code=detection.code or "",
                    display_name=detection.display_name,
                    final_text=detection.final_text,
                    wrapped=detection.wrapped,
                )
            )
        if applied.set_running_or_notify_cancel():
            applied.set_result(detection)

    def _apply(self, event: Event) -> SessionState:
        with self._lock:
            if self._closed:
                return self._state
            previous = self._state
            current = transition(previous, event)
            if current is previous:
                _LOGGER.debug("dropped stale %s", type(event).__name__)
                return current
            self._state = current
            for listener in list(self._listeners):
                try:
                    listener(current)
                except Exception:
                    _LOGGER.exception("session listener %r failed", listener)
        hooks.dispatch(
            hooks.SESSION_STATE_CHANGED,
            {
                "event": type(event).__name__,
                "request_id": current.request_id,
                "is_loading": current.is_loading,
            },
        )
        return current

    def _track(self, future: concurrent.futures.Future[Any]) -> None:
        self._pending.add(future)

        def _forget(done: concurrent.futures.Future[Any]) -> None:
            with self._lock:
                self._pending.discard(done)

        future.add_done_callback(_forget)


def _release_undelivered(
    applied: concurrent.futures.Future[LanguageDetection | None],
    started: concurrent.futures.Future[LanguageDetection],
) -> None:
    # Runs after the engine's delivery callback. A detection that was
    # cancelled or dropped by a closed engine never resolves ``applied``.
    if not applied.done():
        applied.cancel()


def _cancelled_request(text: str) -> PendingTranslation:
    translation: concurrent.futures.Future[TranslationOutcome | None] = concurrent.futures.Future()
    detection: concurrent.futures.Future[LanguageDetection | None] = concurrent.futures.Future()
    translation.cancel()
    detection.cancel()
    return PendingTranslation(
        request_id=-1, text=text, translation=translation, detection=detection
    )


def load_configuration(
    config_path: str | Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Return an :class:`AppConfig` from ``config_path`` and overrides."""

    data: Mapping[str, Any] | None = None
    if config_path is not None:
        data = load_config(config_path)
    return AppConfig.from_mapping(data).merge(overrides)


def configure_telemetry(config: AppConfig) -> exporters.JsonlExporter | None:
    """Apply the telemetry section: log level and JSONL export path.

    Returns the exporter installed for ``export_path`` so the caller can
    close it; the exporter it replaces is closed here.
    """

    if config.telemetry.log_level:
        logger.set_level(config.telemetry.log_level)
    if config.telemetry.export_path is None:
        return None
    installed = exporters.JsonlExporter(config.telemetry.export_path)
    previous = exporters.configure(installed)
    closer = getattr(previous, "close", None)
    if callable(closer):
        closer()
    return installed


def build_dictionary(config: AppConfig) -> GlossDictionary:
    path = config.translator.dictionary_path
    dictionary = load_dictionary(path) if path is not None else default_dictionary()
    primary = config.language.primary_language
    if primary and primary != dictionary.language:
        dictionary = GlossDictionary(dictionary.entries(), language=primary, name=dictionary.name)
    return dictionary


def build_engine(config: AppConfig) -> TranslationEngine:
    return TranslationEngine(
        build_dictionary(config),
        build_classifier(config.language.classifier),
        max_workers=config.session.max_workers,
    )


def build_session(config: AppConfig) -> TranslationSession:
    """Create a session owning an engine built from ``config``."""

    return TranslationSession(
        build_engine(config),
        processing_delay=config.session.processing_delay,
        max_workers=config.session.max_workers,
        owns_engine=True,
    )


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "PendingTranslation",
    "StateListener",
    "TranslationSession",
    "build_dictionary",
    "build_engine",
    "build_session",
    "configure_telemetry",
    "load_configuration",
]
