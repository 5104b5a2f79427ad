"""Tests for the gloss dictionary and its YAML loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from libras.translator.dictionary import (
    DictionaryError,
    GlossDictionary,
    GlossEntry,
    default_dictionary,
    load_dictionary,
)


def test_default_dictionary_keeps_file_order() -> None:
    dictionary = default_dictionary()
    terms = list(dictionary)

    assert len(dictionary) == 46
    assert terms[:3] == ["oi", "olá", "tchau"]
    assert terms[-1] == "how are you"
    assert dictionary.language == "pt"
    assert dictionary.name == "libras-basico"


def test_default_dictionary_glosses() -> None:
    dictionary = default_dictionary()

    assert dictionary["hello"] == "👋 [Wave hand gesture]"
    assert dictionary["oi"] == "👋 [Mão aberta balançando de um lado para o outro]"
    assert dictionary.gloss_for("  Casa ") == "🏠 [Mãos formando telhado triangular]"
    assert dictionary.gloss_for("inexistente") is None


def test_default_dictionary_is_cached() -> None:
    assert default_dictionary() is default_dictionary()


def test_dictionary_is_read_only() -> None:
    dictionary = default_dictionary()

    with pytest.raises(TypeError):
        dictionary["oi"] = "changed"  # type: ignore[index]


def test_duplicate_terms_are_rejected() -> None:
    entries = [GlossEntry("casa", "🏠"), GlossEntry("casa", "🏡")]

    with pytest.raises(DictionaryError):
        GlossDictionary(entries)


def test_entry_terms_are_normalised() -> None:
    entry = GlossEntry.from_raw({"term": "  Bom Dia ", "gloss": "☀️"})

    assert entry == GlossEntry(term="bom dia", gloss="☀️")


def test_entry_without_term_is_rejected() -> None:
    with pytest.raises(DictionaryError):
        GlossEntry.from_raw({"term": "   ", "gloss": "?"})


def test_load_dictionary_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "dictionary.yaml"
    path.write_text(
        "name: minimal\n"
        "language: PT\n"
        "entries:\n"
        "  - term: casa\n"
        "    gloss: '🏠'\n"
        "  - term: escola\n"
        "    gloss: '🏫'\n",
        encoding="utf-8",
    )

    dictionary = load_dictionary(path)

    assert list(dictionary.items()) == [("casa", "🏠"), ("escola", "🏫")]
    assert dictionary.language == "pt"
    assert dictionary.name == "minimal"
    assert dictionary.entries()[1] == GlossEntry(term="escola", gloss="🏫")


def test_load_dictionary_requires_entries(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("name: broken\n", encoding="utf-8")

    with pytest.raises(DictionaryError):
        load_dictionary(path)


def test_load_dictionary_reports_yaml_errors(tmp_path: Path) -> None:
    path = tmp_path / "invalid.yaml"
    path.write_text("entries: [unclosed\n", encoding="utf-8")

    with pytest.raises(DictionaryError):
        load_dictionary(path)
