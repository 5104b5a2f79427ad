"""Translation engine: text in, composed gloss report out.

``translate`` runs the synchronous pipeline (normalise, match, compose) and
never raises for string input. ``detect_language`` runs the language
annotator on a small thread pool and delivers its result through a callback,
so a slow classifier never holds up the translation itself.
"""

from __future__ import annotations

import concurrent.futures
import functools
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from libras.language.annotator import DETECTION_ERROR, LanguageDetection, annotate
from libras.language.classifier import Classifier, HeuristicClassifier
from libras.telemetry import hooks, logger, metrics
from libras.utils.concurrency import run_parallel

from .composer import compose
from .dictionary import GlossDictionary, default_dictionary
from .matcher import MatchResult, match
from .normalizer import normalize

DetectionCallback = Callable[[LanguageDetection], None]

_LOGGER = logger.get_logger("libras.translator.engine")


@dataclass(frozen=True, slots=True)
class TranslationOutcome:
    """Matches found for ``text`` and the report rendered from them."""

    text: str
    matches: tuple[MatchResult, ...]
    composed_text: str

    @property
    def found(self) -> bool:
        return bool(self.matches)

    def to_dict(self) -> dict[str, object]:
        return {
            "text": self.text,
            "matches": [{"term": item.term, "gloss": item.gloss} for item in self.matches],
            "composed_text": self.composed_text,
        }


class TranslationEngine:
    """Owns the dictionary, the classifier and the pool used for detections."""

    def __init__(
        self,
        dictionary: GlossDictionary | None = None,
        classifier: Classifier | None = None,
        *,
        max_workers: int = 2,
    ) -> None:
        self.dictionary = dictionary if dictionary is not None else default_dictionary()
        self.classifier = classifier if classifier is not None else HeuristicClassifier()
        self._max_workers = max(1, int(max_workers))
        self._executor: concurrent.futures.ThreadPoolExecutor | None = None
        self._pending: set[concurrent.futures.Future[LanguageDetection]] = set()
        self._lock = threading.RLock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def translate(self, raw_text: str) -> TranslationOutcome:
        """Translate ``raw_text`` into glosses; the empty string yields the fallback block."""

        text = raw_text or ""
        started = time.perf_counter()
        normalized = normalize(text)
        matches = match(normalized.joined, normalized.tokens, self.dictionary)
        outcome = TranslationOutcome(
            text=text, matches=matches, composed_text=compose(matches, text)
        )
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        _LOGGER.debug(
            "translated %d token(s) into %d match(es) in %.2fms",
            len(normalized.tokens),
            len(matches),
            elapsed_ms,
        )
        metrics.emit("libras.translator.matches", len(matches))
        metrics.emit("libras.translator.latency_ms", elapsed_ms)
        hooks.dispatch(
            hooks.TRANSLATION_COMPLETED,
            {"text": text, "terms": [item.term for item in matches], "found": outcome.found},
        )
        return outcome

    def translate_many(
        self, texts: Iterable[str], *, timeout: float | None = None
    ) -> list[TranslationOutcome]:
        """Translate several texts in parallel; results follow the input order."""

        tasks = [functools.partial(self.translate, text) for text in texts]
        return run_parallel(tasks, max_workers=self._max_workers, timeout=timeout)

    def annotate(self, raw_text: str, current_text: str | None = None) -> LanguageDetection:
        """Run the classifier on ``raw_text`` synchronously."""

        detection = annotate(
            raw_text or "", self.classifier, dictionary=self.dictionary, current_text=current_text
        )
        hooks.dispatch(
            hooks.LANGUAGE_DETECTED,
            {"text": raw_text, "code": detection.code, "wrapped": detection.wrapped},
        )
        return detection

    def detect_language(
        self,
        raw_text: str,
        on_result: DetectionCallback | None = None,
        *,
        current_text: str | None = None,
    ) -> concurrent.futures.Future[LanguageDetection]:
        """Detect the language of ``raw_text`` without blocking the caller.

        ``on_result`` runs on a worker thread once the detection is ready. It
        is skipped when the future was cancelled or the engine has been closed
        in the meantime. A closed engine returns an already-cancelled future.
        """

        with self._lock:
            if self._closed:
                return _cancelled_future()
            future = self._pool().submit(self.annotate, raw_text, current_text)
            self._pending.add(future)

        def _deliver(done: concurrent.futures.Future[LanguageDetection]) -> None:
            with self._lock:
                self._pending.discard(done)
                if self._closed or done.cancelled():
                    return
            if on_result is None:
                return
            error = done.exception()
            if error is None:
                detection = done.result()
            else:
                _LOGGER.error("language detection crashed: %s", error)
                detection = LanguageDetection(
                    code=None,
                    display_name=DETECTION_ERROR,
                    final_text=current_text,
                    error=str(error),
                )
            try:
                on_result(detection)
            except Exception:
                _LOGGER.exception("language detection callback failed")

        future.add_done_callback(_deliver)
        return future

    def close(self) -> None:
        """Cancel pending detections and release the pool and the classifier."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = list(self._pending)
            self._pending.clear()
            executor, self._executor = self._executor, None
        for future in pending:
            future.cancel()
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
        closer = getattr(self.classifier, "close", None)
        if callable(closer):
            try:
                closer()
            except Exception:
                _LOGGER.exception("failed to close classifier %r", self.classifier)
        _LOGGER.debug("engine closed; %d pending detection(s) cancelled", len(pending))

    def __enter__(self) -> "TranslationEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _pool(self) -> concurrent.futures.ThreadPoolExecutor:
        if self._executor is None:
            self._executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="libras-detect"
            )
        return self._executor


def _cancelled_future() -> concurrent.futures.Future[LanguageDetection]:
    future: concurrent.futures.Future[LanguageDetection] = concurrent.futures.Future()
    future.cancel()
    return future


_DEFAULT_ENGINE: TranslationEngine | None = None
_DEFAULT_LOCK = threading.Lock()


def default_engine() -> TranslationEngine:
    """Return the process-wide engine backed by the bundled dictionary."""

    global _DEFAULT_ENGINE
    with _DEFAULT_LOCK:
        if _DEFAULT_ENGINE is None or _DEFAULT_ENGINE.closed:
            _DEFAULT_ENGINE = TranslationEngine()
        return _DEFAULT_ENGINE


def translate(raw_text: str) -> TranslationOutcome:
    return default_engine().translate(raw_text)


def detect_language(
    raw_text: str, on_result: DetectionCallback | None = None
) -> concurrent.futures.Future[LanguageDetection]:
    return default_engine().detect_language(raw_text, on_result)


__all__ = [
    "DetectionCallback",
    "TranslationEngine",
    "TranslationOutcome",
    "default_engine",
    "detect_language",
    "translate",
]
