"""Annotate a translation with the language its source text is written in.

The dictionary is authored for Portuguese. When the classifier reports any
other language the composed translation is wrapped with a warning that names
the detected language and recommends Portuguese input. A classifier failure
only changes the displayed language; the translation itself is left alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from libras.telemetry import logger, metrics
from libras.translator.composer import compose
from libras.translator.dictionary import PRIMARY_LANGUAGE, default_dictionary
from libras.translator.matcher import match_text

from .classifier import Classifier, ClassifierError

LANGUAGE_NAMES: Mapping[str, str] = {
    "pt": "Português",
    "en": "Inglês",
    "es": "Espanhol",
    "fr": "Francês",
    "de": "Alemão",
    "it": "Italiano",
    "ja": "Japonês",
    "ko": "Coreano",
    "zh": "Chinês",
    "ar": "Árabe",
    "ru": "Russo",
    "und": "Não identificado",
}

DETECTION_ERROR = "Erro na detecção de idioma"

_LOGGER = logger.get_logger("libras.language.annotator")


@dataclass(frozen=True, slots=True)
class LanguageDetection:
    """Outcome of one language annotation.

    ``code`` is ``None`` when the classifier failed. ``final_text`` is the
    text to display, or ``None`` if nothing was rendered yet.
    """

    code: str | None
    display_name: str
    final_text: str | None = None
    wrapped: bool = False
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.code is None


def display_name(code: str) -> str:
    """Map a language code to its Portuguese display name, or the uppercased code."""

    return LANGUAGE_NAMES.get(code, code.upper())


def wrap_warning(language_name: str, translation: str) -> str:
    return (
        f"⚠️ AVISO: Texto em {language_name} detectado!\n\n"
        "Para melhor precisão na tradução para LIBRAS (Língua Brasileira de Sinais), "
        "recomendamos usar textos em português.\n\n"
        f"Tradução disponível:\n\n{translation}"
    )


def annotate(
    text: str,
    classifier: Classifier,
    *,
    dictionary: Mapping[str, str] | None = None,
    current_text: str | None = None,
) -> LanguageDetection:
    """Identify the language of ``text`` and decide what the final text should be.

    ``current_text`` is the translation already on display, if any. It is
    returned untouched when the text is in the primary language or when the
    classifier fails; a non-primary language re-composes ``text`` and wraps it.
    """

    table = dictionary if dictionary is not None else default_dictionary()
    primary = getattr(table, "language", PRIMARY_LANGUAGE)
    try:
        code = classifier.identify(text)
    except ClassifierError as exc:
        _LOGGER.warning("language detection failed: %s", exc)
        return _failure(str(exc), current_text)
    except Exception as exc:
        _LOGGER.exception("classifier %r raised unexpectedly", classifier)
        return _failure(f"{exc.__class__.__name__}: {exc}", current_text)

    code = str(code or "").strip().lower() or "und"
    name = display_name(code)
    metrics.emit("libras.language.detections", 1, tags={"code": code})

    if code != primary:
        translation = compose(match_text(text, table), text)
        _LOGGER.info("detected %s (%s); wrapping translation with warning", code, name)
        return LanguageDetection(
            code=code,
            display_name=name,
            final_text=wrap_warning(name, translation),
            wrapped=True,
        )

    if current_text is None:
        current_text = compose(match_text(text, table), text)
    return LanguageDetection(code=code, display_name=name, final_text=current_text)


def _failure(reason: str, current_text: str | None) -> LanguageDetection:
    metrics.emit("libras.language.failures", 1)
    return LanguageDetection(
        code=None, display_name=DETECTION_ERROR, final_text=current_text, error=reason
    )


__all__ = [
    "DETECTION_ERROR",
    "LANGUAGE_NAMES",
    "LanguageDetection",
    "annotate",
    "display_name",
    "wrap_warning",
]
