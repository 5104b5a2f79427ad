"""Tests for rendering the translation report."""

from __future__ import annotations

from libras.translator.composer import (
    CATEGORY_SUGGESTIONS,
    FOUND_HEADER,
    MANUAL_ALPHABET,
    NOT_FOUND_HEADER,
    compose,
    render_alphabet,
)
from libras.translator.matcher import MatchResult


def test_found_report_layout() -> None:
    matches = (
        MatchResult(term="oi", gloss="👋 [Mão aberta]"),
        MatchResult(term="tudo bem", gloss="👍✌️ [Polegar]"),
    )

    text = compose(matches, "Oi, tudo bem?")

    assert text.startswith(f"{FOUND_HEADER}\n\n")
    assert '• "oi" → 👋 [Mão aberta]\n\n• "tudo bem" → 👍✌️ [Polegar]' in text
    assert "Estrutura: TEMPO + SUJEITO + OBJETO + VERBO" in text
    assert "Português: 'Eu vou trabalhar amanhã'" in text
    assert "LIBRAS: 'AMANHÃ EU TRABALHO IR'" in text
    assert text.endswith("🤲 Use também expressões faciais para complementar os sinais!")
    assert NOT_FOUND_HEADER not in text


def test_fallback_echoes_input_and_suggests_vocabulary() -> None:
    text = compose((), "xyzzy plugh")

    assert text.startswith(NOT_FOUND_HEADER)
    assert '📝 TEXTO DIGITADO: "xyzzy plugh"' in text
    for category, examples in CATEGORY_SUGGESTIONS:
        assert f"• {category}: {', '.join(examples)}" in text
    assert text.endswith(render_alphabet())


def test_fallback_for_empty_input() -> None:
    assert '📝 TEXTO DIGITADO: ""' in compose((), "")


def test_manual_alphabet_rows() -> None:
    rows = render_alphabet().split("\n")

    assert len(MANUAL_ALPHABET) == 26
    assert [len(row.split(" ")) for row in rows] == [10, 10, 6]
    assert rows[0].startswith("A=✊ B=🤚 C=☝️")
    assert rows[-1].endswith("Z=☝️")
