"""Session state and the transition function that evolves it.

A session is described by one immutable :class:`SessionState`. Every change
is an event fed through :func:`transition`, which returns the next snapshot
and never mutates its input. Events produced by a translation request carry
that request's id; events for any other id are stale and leave the state
untouched, which is how results arriving after a newer request or after
``Cleared`` are discarded.

The translation and the language detection of a request may finish in
either order. When the detection asks for a warning it is stored in
``language_notice`` so that a translation finishing later keeps the warning
instead of replacing it with the plain report.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict

from libras.language.annotator import DETECTION_ERROR


@dataclass(frozen=True, slots=True)
class SessionState:
    """Snapshot of everything a front-end needs to render a session."""

    input_text: str = ""
    translation_result: str = ""
    detected_language: str = ""
    is_loading: bool = False
    request_id: int = 0
    language_notice: str | None = None
    matched_terms: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "input_text": self.input_text,
            "translation_result": self.translation_result,
            "detected_language": self.detected_language,
            "is_loading": self.is_loading,
            "request_id": self.request_id,
            "matched_terms": list(self.matched_terms),
        }


@dataclass(frozen=True, slots=True)
class InputChanged:
    text: str


@dataclass(frozen=True, slots=True)
class TranslateRequested:
    pass


@dataclass(frozen=True, slots=True)
class TranslationCompleted:
    request_id: int
    composed_text: str
    matched_terms: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LanguageDetected:
    request_id: int
    code: str
    display_name: str
    final_text: str | None = None
    wrapped: bool = False


@dataclass(frozen=True, slots=True)
class ClassifierFailed:
    request_id: int
    reason: str = ""


@dataclass(frozen=True, slots=True)
class Cleared:
    pass


Event = (
    InputChanged
    | TranslateRequested
    | TranslationCompleted
    | LanguageDetected
    | ClassifierFailed
    | Cleared
)

Handler = Callable[[SessionState, Any], SessionState]

_HANDLERS: Dict[type, Handler] = {}


def _on(event_type: type) -> Callable[[Handler], Handler]:
    def decorator(func: Handler) -> Handler:
        _HANDLERS[event_type] = func
        return func

    return decorator


def transition(state: SessionState, event: Event) -> SessionState:
    """Return the state that follows ``state`` once ``event`` is applied."""

    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"unsupported session event: {event!r}")
    return handler(state, event)


def is_stale(state: SessionState, event: Event) -> bool:
    """Whether ``event`` belongs to a request other than the current one."""

    request_id = getattr(event, "request_id", None)
    return request_id is not None and request_id != state.request_id


@_on(InputChanged)
def _input_changed(state: SessionState, event: InputChanged) -> SessionState:
    return replace(state, input_text=event.text)


@_on(TranslateRequested)
def _translate_requested(state: SessionState, event: TranslateRequested) -> SessionState:
    return replace(
        state,
        is_loading=True,
        request_id=state.request_id + 1,
        detected_language="",
        language_notice=None,
    )


@_on(TranslationCompleted)
def _translation_completed(state: SessionState, event: TranslationCompleted) -> SessionState:
    if is_stale(state, event):
        return state
    result = state.language_notice if state.language_notice is not None else event.composed_text
    return replace(
        state,
        translation_result=result,
        matched_terms=tuple(event.matched_terms),
        is_loading=False,
    )


@_on(LanguageDetected)
def _language_detected(state: SessionState, event: LanguageDetected) -> SessionState:
    if is_stale(state, event):
        return state
    if event.wrapped and event.final_text is not None:
        return replace(
            state,
            detected_language=event.display_name,
            translation_result=event.final_text,
            language_notice=event.final_text,
        )
    return replace(state, detected_language=event.display_name)


@_on(ClassifierFailed)
def _classifier_failed(state: SessionState, event: ClassifierFailed) -> SessionState:
    if is_stale(state, event):
        return state
    return replace(state, detected_language=DETECTION_ERROR)


@_on(Cleared)
def _cleared(state: SessionState, event: Cleared) -> SessionState:
    # Keep counting ids so results of the cleared request stay stale.
    return SessionState(request_id=state.request_id + 1)


__all__ = [
    "ClassifierFailed",
    "Cleared",
    "Event",
    "InputChanged",
    "LanguageDetected",
    "SessionState",
    "TranslateRequested",
    "TranslationCompleted",
    "is_stale",
    "transition",
]
