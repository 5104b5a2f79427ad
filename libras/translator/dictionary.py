"""Gloss dictionary for the LIBRAS translator.

The dictionary maps a lowercase term (a word or a short fixed phrase) onto
the textual description of its sign. Entries are kept in file order because
the phrase pass of the matcher walks them in that order: when two entries
both occur in a text, the one listed first is reported first. The table is
read-only once built and is shared by every translation request.
"""

from __future__ import annotations

import functools
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable

import yaml

DEFAULT_DICTIONARY_PATH = Path(__file__).resolve().parent / "data" / "dictionary.yaml"
PRIMARY_LANGUAGE = "pt"


class DictionaryError(ValueError):
    """Raised when a dictionary source is malformed."""


@dataclass(frozen=True, slots=True)
class GlossEntry:
    """A single dictionary term and the gloss describing its sign."""

    term: str
    gloss: str

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "GlossEntry":
        if not isinstance(raw, Mapping):
            raise DictionaryError(f"dictionary entry must be a mapping, got {raw!r}")
        term = str(raw.get("term") or "").strip().lower()
        if not term:
            raise DictionaryError(f"dictionary entry without a term: {dict(raw)!r}")
        return cls(term=term, gloss=str(raw.get("gloss") or ""))


class GlossDictionary(Mapping[str, str]):
    """Read-only, insertion-ordered mapping from term to gloss."""

    def __init__(
        self,
        entries: Iterable[GlossEntry],
        *,
        language: str = PRIMARY_LANGUAGE,
        name: str = "custom",
    ) -> None:
        table: dict[str, str] = {}
        for entry in entries:
            if entry.term in table:
                raise DictionaryError(f"duplicate dictionary term: {entry.term!r}")
            table[entry.term] = entry.gloss
        self._table = MappingProxyType(table)
        self.language = language
        self.name = name

    def __getitem__(self, term: str) -> str:
        return self._table[term]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return (
            f"GlossDictionary(name={self.name!r}, language={self.language!r}, "
            f"entries={len(self)})"
        )

    def entries(self) -> tuple[GlossEntry, ...]:
        return tuple(GlossEntry(term=term, gloss=gloss) for term, gloss in self._table.items())

    def gloss_for(self, term: str) -> str | None:
        """Return the gloss of ``term`` after trimming and lowercasing it."""

        return self._table.get(term.strip().lower())

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GlossDictionary":
        """Build a dictionary from the parsed YAML document layout."""

        if not isinstance(data, Mapping):
            raise DictionaryError("dictionary document must be a mapping")
        raw_entries = data.get("entries")
        if not isinstance(raw_entries, list):
            raise DictionaryError("dictionary document requires an 'entries' list")
        return cls(
            (GlossEntry.from_raw(item) for item in raw_entries),
            language=str(data.get("language") or PRIMARY_LANGUAGE).lower(),
            name=str(data.get("name") or "custom"),
        )


def load_dictionary(path: str | Path) -> GlossDictionary:
    """Load a dictionary from a YAML file with ``name``, ``language`` and ``entries``."""

    source = Path(path)
    try:
        data = yaml.safe_load(source.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise DictionaryError(f"failed to parse dictionary {source}: {exc}") from exc
    return GlossDictionary.from_mapping(data or {})


@functools.lru_cache(maxsize=1)
def default_dictionary() -> GlossDictionary:
    """Return the bundled dictionary, loaded on first use."""

    return load_dictionary(DEFAULT_DICTIONARY_PATH)


__all__ = [
    "DEFAULT_DICTIONARY_PATH",
    "DictionaryError",
    "GlossDictionary",
    "GlossEntry",
    "PRIMARY_LANGUAGE",
    "default_dictionary",
    "load_dictionary",
]
