"""Render matched glosses into the text shown to the user.

Two layouts exist: a report listing every sign that was found, closed by a
short note on LIBRAS word order, and a fallback for texts with no known term
that suggests vocabulary and prints the manual alphabet. Everything except
the matches and the echoed input is static.
"""

from __future__ import annotations

from typing import Sequence

from .matcher import MatchResult

FOUND_HEADER = "✅ SINAIS ENCONTRADOS:"

WORD_ORDER_NOTE = (
    "💡 DICA IMPORTANTE - Estrutura em LIBRAS:\n"
    "A ordem das palavras em LIBRAS é diferente do português!\n"
    "Estrutura: TEMPO + SUJEITO + OBJETO + VERBO"
)

WORD_ORDER_EXAMPLE = ("Eu vou trabalhar amanhã", "AMANHÃ EU TRABALHO IR")

CLOSING_TIP = "🤲 Use também expressões faciais para complementar os sinais!"

NOT_FOUND_HEADER = "❌ PALAVRAS NÃO ENCONTRADAS no dicionário atual."

CATEGORY_SUGGESTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Cumprimentos", ("oi", "olá", "tchau", "bom dia")),
    ("Cortesia", ("obrigado", "por favor", "desculpe")),
    ("Respostas", ("sim", "não", "tudo bem")),
    ("Família", ("pai", "mãe", "filho", "irmão")),
    ("Lugares", ("casa", "escola", "trabalho")),
    ("Sentimentos", ("feliz", "triste", "amor")),
)

MANUAL_ALPHABET: tuple[tuple[str, str], ...] = (
    ("A", "✊"), ("B", "🤚"), ("C", "☝️"), ("D", "👌"), ("E", "✋"),
    ("F", "👍"), ("G", "👆"), ("H", "✌️"), ("I", "🤞"), ("J", "🤙"),
    ("K", "🤘"), ("L", "🤟"), ("M", "👊"), ("N", "👎"), ("O", "👌"),
    ("P", "👇"), ("Q", "☝️"), ("R", "✌️"), ("S", "✊"), ("T", "👍"),
    ("U", "✌️"), ("V", "✌️"), ("W", "🤟"), ("X", "☝️"), ("Y", "🤙"),
    ("Z", "☝️"),
)

_ALPHABET_ROW = 10


def compose(matches: Sequence[MatchResult], original_text: str) -> str:
    """Return the found-signs report, or the fallback block when ``matches`` is empty."""

    if matches:
        return render_found(matches)
    return render_not_found(original_text)


def render_found(matches: Sequence[MatchResult]) -> str:
    bullets = "\n\n".join(f'• "{item.term}" → {item.gloss}' for item in matches)
    portuguese, libras = WORD_ORDER_EXAMPLE
    return (
        f"{FOUND_HEADER}\n\n"
        f"{bullets}\n\n"
        f"{WORD_ORDER_NOTE}\n\n"
        "📝 EXEMPLO:\n"
        f"Português: '{portuguese}'\n"
        f"LIBRAS: '{libras}'\n\n"
        f"{CLOSING_TIP}"
    )


def render_not_found(original_text: str) -> str:
    suggestions = "\n".join(
        f"• {category}: {', '.join(examples)}" for category, examples in CATEGORY_SUGGESTIONS
    )
    return (
        f"{NOT_FOUND_HEADER}\n\n"
        f'📝 TEXTO DIGITADO: "{original_text or ""}"\n\n'
        "💡 SUGESTÕES:\n"
        "Tente palavras básicas como:\n"
        f"{suggestions}\n\n"
        "🔤 DATILOLOGIA (Alfabeto Manual):\n"
        "Para palavras não encontradas, use o alfabeto manual:\n"
        f"{render_alphabet()}"
    )


def render_alphabet() -> str:
    """Render :data:`MANUAL_ALPHABET` as ``A=✊ B=🤚 ...`` rows of ten letters."""

    cells = [f"{letter}={sign}" for letter, sign in MANUAL_ALPHABET]
    rows = [
        " ".join(cells[start : start + _ALPHABET_ROW])
        for start in range(0, len(cells), _ALPHABET_ROW)
    ]
    return "\n".join(rows)


__all__ = [
    "CATEGORY_SUGGESTIONS",
    "FOUND_HEADER",
    "MANUAL_ALPHABET",
    "NOT_FOUND_HEADER",
    "compose",
    "render_alphabet",
    "render_found",
    "render_not_found",
]
