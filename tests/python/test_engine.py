"""Tests for the translation engine."""

from __future__ import annotations

import threading

import pytest

from libras.language.annotator import DETECTION_ERROR, LanguageDetection
from libras.language.classifier import FailingClassifier, StaticClassifier
from libras.telemetry import hooks, metrics
from libras.translator import engine as engine_module
from libras.translator.composer import render_not_found
from libras.translator.engine import TranslationEngine
from libras.utils.concurrency import ParallelTimeoutError


def test_translate_greeting() -> None:
    with TranslationEngine(classifier=StaticClassifier("pt")) as engine:
        outcome = engine.translate("Oi, tudo bem?")

    assert outcome.found
    assert [item.term for item in outcome.matches] == ["oi", "tudo bem"]
    assert outcome.composed_text.startswith("✅ SINAIS ENCONTRADOS:")
    assert outcome.to_dict()["matches"][0]["term"] == "oi"


def test_translate_empty_text_renders_fallback() -> None:
    with TranslationEngine(classifier=StaticClassifier("pt")) as engine:
        outcome = engine.translate("")

    assert not outcome.found
    assert outcome.composed_text == render_not_found("")


def test_translate_emits_hook_and_metrics() -> None:
    events: list[hooks.HookEvent] = []
    registry = metrics.get_registry()
    before = registry.summaries().get("libras.translator.matches", {}).get("count", 0)

    with hooks.register_hook(hooks.TRANSLATION_COMPLETED, events.append):
        with TranslationEngine(classifier=StaticClassifier("pt")) as engine:
            engine.translate("bom dia")

    assert len(events) == 1
    assert events[0].payload["terms"] == ["bom dia"]
    assert events[0].payload["found"] is True
    assert registry.summaries()["libras.translator.matches"]["count"] == before + 1
    assert registry.samples("libras.translator.latency_ms")


def test_translate_many_preserves_order() -> None:
    texts = ["casa", "escola", "xyzzy", "oi"]

    with TranslationEngine(classifier=StaticClassifier("pt"), max_workers=3) as engine:
        outcomes = engine.translate_many(texts, timeout=5.0)

    assert [outcome.text for outcome in outcomes] == texts
    assert [outcome.found for outcome in outcomes] == [True, True, False, True]


def test_detect_language_delivers_result_through_callback() -> None:
    received: list[LanguageDetection] = []
    delivered = threading.Event()

    def _on_result(detection: LanguageDetection) -> None:
        received.append(detection)
        delivered.set()

    with TranslationEngine(classifier=StaticClassifier("en")) as engine:
        future = engine.detect_language("hello", _on_result)
        detection = future.result(timeout=5.0)
        assert delivered.wait(5.0)

    assert detection.wrapped
    assert received == [detection]
    assert "Inglês" in (detection.final_text or "")


def test_detect_language_reports_classifier_failure() -> None:
    with TranslationEngine(classifier=FailingClassifier()) as engine:
        detection = engine.detect_language("oi", current_text="shown").result(timeout=5.0)

    assert detection.failed
    assert detection.display_name == DETECTION_ERROR
    assert detection.final_text == "shown"


def test_closed_engine_returns_cancelled_future() -> None:
    calls: list[LanguageDetection] = []
    engine = TranslationEngine(classifier=StaticClassifier("pt"))
    engine.close()
    engine.close()

    future = engine.detect_language("oi", calls.append)

    assert engine.closed
    assert future.cancelled()
    assert calls == []


def test_close_discards_late_detections() -> None:
    started = threading.Event()
    release = threading.Event()
    calls: list[LanguageDetection] = []

    class Slow:
        def identify(self, text: str) -> str:
            started.set()
            release.wait(5.0)
            return "pt"

    engine = TranslationEngine(classifier=Slow(), max_workers=1)
    running = engine.detect_language("oi", calls.append)
    queued = engine.detect_language("tchau", calls.append)
    assert started.wait(5.0)
    engine.close()
    release.set()

    assert queued.cancelled()
    running.result(timeout=5.0)
    assert calls == []


def test_translate_many_honours_timeout() -> None:
    release = threading.Event()

    class SlowEngine(TranslationEngine):
        def translate(self, raw_text: str):  # type: ignore[override]
            release.wait(5.0)
            return super().translate(raw_text)

    with SlowEngine(classifier=StaticClassifier("pt")) as engine:
        try:
            with pytest.raises(ParallelTimeoutError):
                engine.translate_many(["oi", "tchau"], timeout=0.05)
        finally:
            release.set()


def test_module_level_helpers_use_default_engine() -> None:
    outcome = engine_module.translate("obrigado")

    assert [item.term for item in outcome.matches] == ["obrigado"]
    assert engine_module.default_engine() is engine_module.default_engine()
