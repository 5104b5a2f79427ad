"""Language identification boundary.

The translator only needs ``identify(text) -> code``; the real service behind
it is an external collaborator. Codes are ISO-639-1 style tags plus ``"und"``
for undetermined text. Implementations raise :class:`ClassifierError` when no
code can be produced.

:class:`HeuristicClassifier` is an offline stand-in that scores common
function words and writing systems. It is deterministic, which keeps the CLI
and tests reproducible.
"""

from __future__ import annotations

import re
import threading
from typing import Mapping, Protocol, runtime_checkable

UNDETERMINED = "und"


class ClassifierError(RuntimeError):
    """Raised when a classifier cannot produce a language code."""


@runtime_checkable
class Classifier(Protocol):
    """Anything able to name the language of a text."""

    def identify(self, text: str) -> str:
        ...


class StaticClassifier:
    """Always answers with the same code."""

    def __init__(self, code: str) -> None:
        if not code:
            raise ValueError("static classifier requires a language code")
        self.code = code

    def identify(self, text: str) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"StaticClassifier({self.code!r})"


class FailingClassifier:
    """Always fails; models an unavailable identification service."""

    def __init__(self, reason: str = "language identification unavailable") -> None:
        self.reason = reason

    def identify(self, text: str) -> str:
        raise ClassifierError(self.reason)


_STOPWORDS: Mapping[str, frozenset[str]] = {
    "pt": frozenset(
        "o os as um uma do da dos das em no na nos nas que é não sim eu você tudo bem "
        "obrigado obrigada por favor com para como muito oi olá tchau bom boa dia noite "
        "tarde vai estou está meu minha".split()
    ),
    "en": frozenset(
        "the a an and is are you i it to of in on for with this that hello hi thanks thank "
        "yes no good morning night afternoon how what my your".split()
    ),
    "es": frozenset(
        "el la los las un una y es son de del en que no sí gracias hola por favor buenos "
        "buenas días cómo como está usted mi".split()
    ),
    "fr": frozenset(
        "le la les un une et est sont de des du en que je tu vous bonjour merci oui non "
        "ce avec pour comment".split()
    ),
    "de": frozenset(
        "der die das und ist sind ein eine ich du sie nicht ja nein danke hallo guten "
        "morgen mit für wie".split()
    ),
    "it": frozenset(
        "il lo la gli le un una e è sono di del che non sì grazie ciao buongiorno per con "
        "come".split()
    ),
}

# Letters that only Portuguese uses among the scored Latin-script languages.
_PORTUGUESE_MARKS = frozenset("ãõç")

_SCRIPTS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("ja", re.compile(r"[぀-ヿ]")),
    ("ko", re.compile(r"[가-힯ᄀ-ᇿ]")),
    ("zh", re.compile(r"[一-鿿]")),
    ("ar", re.compile(r"[؀-ۿ]")),
    ("ru", re.compile(r"[Ѐ-ӿ]")),
)

_WORD = re.compile(r"[^\W\d_]+")


class HeuristicClassifier:
    """Deterministic classifier based on writing systems and function words."""

    def __init__(self) -> None:
        self._closed = threading.Event()

    def identify(self, text: str) -> str:
        if self._closed.is_set():
            raise ClassifierError("classifier is closed")
        if not isinstance(text, str):
            raise ClassifierError(f"cannot identify language of {type(text).__name__}")
        if not text.strip():
            return UNDETERMINED

        script = self._script_language(text)
        if script is not None:
            return script

        words = _WORD.findall(text.lower())
        scores = {
            code: sum(word in vocabulary for word in words)
            for code, vocabulary in _STOPWORDS.items()
        }
        if any(mark in text.lower() for mark in _PORTUGUESE_MARKS):
            scores["pt"] += 1
        best = max(scores, key=lambda code: scores[code])
        if scores[best] == 0:
            return UNDETERMINED
        return best

    def close(self) -> None:
        self._closed.set()

    @staticmethod
    def _script_language(text: str) -> str | None:
        counts = {code: len(pattern.findall(text)) for code, pattern in _SCRIPTS}
        # Japanese text mixes kanji with kana; any kana means Japanese.
        if counts["ja"]:
            return "ja"
        best = max(counts, key=lambda code: counts[code])
        return best if counts[best] else None


def build_classifier(spec: str | None) -> Classifier:
    """Build a classifier from a configuration string.

    Accepted values: ``"heuristic"`` (default), ``"static:<code>"`` and
    ``"failing"``.
    """

    name = (spec or "heuristic").strip()
    if name == "heuristic":
        return HeuristicClassifier()
    if name == "failing":
        return FailingClassifier()
    kind, sep, code = name.partition(":")
    if kind == "static" and sep and code.strip():
        return StaticClassifier(code.strip().lower())
    raise ValueError(f"unknown classifier spec: {spec!r}")


__all__ = [
    "Classifier",
    "ClassifierError",
    "FailingClassifier",
    "HeuristicClassifier",
    "StaticClassifier",
    "UNDETERMINED",
    "build_classifier",
]
