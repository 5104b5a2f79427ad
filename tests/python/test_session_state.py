"""Tests for the session state transitions."""

from __future__ import annotations

import pytest

from libras.language.annotator import DETECTION_ERROR
from libras.session.state import (
    ClassifierFailed,
    Cleared,
    InputChanged,
    LanguageDetected,
    SessionState,
    TranslateRequested,
    TranslationCompleted,
    is_stale,
    transition,
)


def _requested(text: str = "hello") -> SessionState:
    state = transition(SessionState(), InputChanged(text=text))
    return transition(state, TranslateRequested())


def test_translate_requested_starts_loading() -> None:
    state = _requested()

    assert state.input_text == "hello"
    assert state.is_loading
    assert state.request_id == 1
    assert state.detected_language == ""


def test_translation_completed_stops_loading() -> None:
    state = _requested("oi")

    done = transition(
        state, TranslationCompleted(request_id=1, composed_text="REPORT", matched_terms=("oi",))
    )

    assert not done.is_loading
    assert done.translation_result == "REPORT"
    assert done.matched_terms == ("oi",)


def test_warning_survives_either_arrival_order() -> None:
    translation = TranslationCompleted(request_id=1, composed_text="PLAIN")
    detection = LanguageDetected(
        request_id=1, code="en", display_name="Inglês", final_text="WARNED", wrapped=True
    )

    translated_first = transition(transition(_requested(), translation), detection)
    detected_first = transition(transition(_requested(), detection), translation)

    assert translated_first == detected_first
    assert translated_first.translation_result == "WARNED"
    assert translated_first.detected_language == "Inglês"
    assert not translated_first.is_loading


def test_primary_language_detection_keeps_translation() -> None:
    translation = TranslationCompleted(request_id=1, composed_text="PLAIN")
    detection = LanguageDetected(
        request_id=1, code="pt", display_name="Português", final_text="PLAIN"
    )

    translated_first = transition(transition(_requested(), translation), detection)
    detected_first = transition(transition(_requested(), detection), translation)

    assert translated_first == detected_first
    assert translated_first.translation_result == "PLAIN"
    assert translated_first.detected_language == "Português"


def test_classifier_failure_only_changes_language() -> None:
    state = transition(_requested(), TranslationCompleted(request_id=1, composed_text="PLAIN"))

    failed = transition(state, ClassifierFailed(request_id=1, reason="offline"))

    assert failed.detected_language == DETECTION_ERROR
    assert failed.translation_result == "PLAIN"


def test_stale_events_are_ignored() -> None:
    state = transition(_requested(), TranslateRequested())
    stale = TranslationCompleted(request_id=1, composed_text="OLD")

    assert state.request_id == 2
    assert is_stale(state, stale)
    assert transition(state, stale) is state
    assert transition(state, LanguageDetected(request_id=1, code="en", display_name="x")) is state
    assert transition(state, ClassifierFailed(request_id=1)) is state


def test_new_request_resets_previous_language() -> None:
    state = transition(
        _requested(),
        LanguageDetected(
            request_id=1, code="en", display_name="Inglês", final_text="WARNED", wrapped=True
        ),
    )

    again = transition(state, TranslateRequested())

    assert again.detected_language == ""
    assert again.language_notice is None
    done = transition(again, TranslationCompleted(request_id=2, composed_text="PLAIN"))
    assert done.translation_result == "PLAIN"


def test_cleared_resets_state_and_invalidates_results() -> None:
    state = _requested()

    cleared = transition(state, Cleared())

    assert cleared == SessionState(request_id=2)
    late = transition(cleared, TranslationCompleted(request_id=1, composed_text="LATE"))
    assert late is cleared


def test_transition_does_not_mutate_input() -> None:
    state = SessionState()

    transition(state, InputChanged(text="oi"))

    assert state.input_text == ""


def test_unknown_events_are_rejected() -> None:
    with pytest.raises(TypeError):
        transition(SessionState(), object())  # type: ignore[arg-type]


def test_state_to_dict() -> None:
    payload = _requested("oi").to_dict()

    assert payload["input_text"] == "oi"
    assert payload["is_loading"] is True
    assert payload["matched_terms"] == []
