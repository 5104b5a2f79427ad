"""Dictionary matching over normalised text.

Matching runs two passes and their order is part of the contract:

1. Phrase pass: walk the dictionary in its own order and keep every term
   contained in the joined text. Containment is a plain substring test, so a
   short term hidden inside a longer word ("oi" in "noite") also matches.
2. Word pass: walk the tokens and keep any token that is itself a term.

A term is reported at most once and nothing is removed once found.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from .normalizer import normalize


@dataclass(frozen=True, slots=True)
class MatchResult:
    """A dictionary term found in the input together with its gloss."""

    term: str
    gloss: str


def match(
    joined: str,
    tokens: Sequence[str],
    dictionary: Mapping[str, str],
) -> tuple[MatchResult, ...]:
    """Return the dictionary entries found in ``joined`` and ``tokens``."""

    results: list[MatchResult] = []
    found: set[str] = set()

    if joined:
        for term, gloss in dictionary.items():
            if term not in found and term in joined:
                results.append(MatchResult(term=term, gloss=gloss))
                found.add(term)

    for token in tokens:
        word = token.strip()
        if not word or word in found:
            continue
        gloss = dictionary.get(word)
        if gloss is not None:
            results.append(MatchResult(term=word, gloss=gloss))
            found.add(word)

    return tuple(results)


def match_text(text: str, dictionary: Mapping[str, str]) -> tuple[MatchResult, ...]:
    """Normalise ``text`` and match it against ``dictionary``."""

    normalized = normalize(text)
    return match(normalized.joined, normalized.tokens, dictionary)


__all__ = ["MatchResult", "match", "match_text"]
