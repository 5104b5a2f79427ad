"""Text normalisation applied before dictionary matching."""

from __future__ import annotations

from dataclasses import dataclass

# Deleted outright, so "tudo,bem" becomes a single token.
PUNCTUATION = ".,!?;:"

_STRIP_TABLE = str.maketrans("", "", PUNCTUATION)


@dataclass(frozen=True, slots=True)
class NormalizedText:
    """Lowercased tokens plus their single-space join."""

    joined: str
    tokens: tuple[str, ...]


def normalize(text: str | None) -> NormalizedText:
    """Lowercase ``text``, delete punctuation and split it on whitespace.

    ``joined`` is what the matcher scans for phrases, not the raw input.
    """

    if not text:
        return NormalizedText(joined="", tokens=())
    cleaned = text.lower().translate(_STRIP_TABLE)
    tokens = tuple(token for token in cleaned.split() if token.strip())
    return NormalizedText(joined=" ".join(tokens), tokens=tokens)


__all__ = ["NormalizedText", "PUNCTUATION", "normalize"]
