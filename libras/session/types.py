"""Typed configuration objects for translation sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from libras.utils.config import deep_update


def _as_path(value: Path | str | None) -> Path | None:
    if value is None or value == "":
        return None
    return value if isinstance(value, Path) else Path(value)


def _coerce_float(value: Any, *, fallback: float | None) -> float | None:
    if value is None:
        return fallback
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


def _coerce_int(value: Any, *, fallback: int) -> int:
    if value is None:
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


@dataclass(slots=True)
class TranslatorOptions:
    """Where the gloss dictionary comes from."""

    dictionary_path: Path | None = None


@dataclass(slots=True)
class LanguageOptions:
    """Classifier selection and the language the dictionary targets."""

    classifier: str = "heuristic"
    primary_language: str | None = None


@dataclass(slots=True)
class SessionOptions:
    """Coordinator behaviour.

    ``processing_delay`` is an artificial pause, in seconds, before a
    translation is published; it runs on a worker thread and never blocks
    other requests.
    """

    processing_delay: float = 0.0
    max_workers: int = 2
    wait_timeout: float | None = 30.0


@dataclass(slots=True)
class TelemetryOptions:
    export_path: Path | None = None
    log_level: str | None = None


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration bundle."""

    translator: TranslatorOptions = field(default_factory=TranslatorOptions)
    language: LanguageOptions = field(default_factory=LanguageOptions)
    session: SessionOptions = field(default_factory=SessionOptions)
    telemetry: TelemetryOptions = field(default_factory=TelemetryOptions)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "AppConfig":
        payload = dict(data or {})
        translator = _section(payload, "translator")
        language = _section(payload, "language")
        session = _section(payload, "session")
        telemetry = _section(payload, "telemetry")

        defaults = SessionOptions()
        delay = _coerce_float(session.get("processing_delay"), fallback=defaults.processing_delay)
        if delay is None or delay < 0.0:
            raise ValueError("session.processing_delay must be a non-negative number")
        workers = _coerce_int(session.get("max_workers"), fallback=defaults.max_workers)
        if workers < 1:
            raise ValueError("session.max_workers must be at least 1")
        primary = language.get("primary_language")
        level = telemetry.get("log_level")

        return cls(
            translator=TranslatorOptions(
                dictionary_path=_as_path(translator.get("dictionary_path")),
            ),
            language=LanguageOptions(
                classifier=str(language.get("classifier") or "heuristic"),
                primary_language=str(primary).lower() if primary else None,
            ),
            session=SessionOptions(
                processing_delay=delay,
                max_workers=workers,
                wait_timeout=_coerce_float(
                    session.get("wait_timeout", defaults.wait_timeout), fallback=None
                ),
            ),
            telemetry=TelemetryOptions(
                export_path=_as_path(telemetry.get("export_path")),
                log_level=str(level).upper() if level else None,
            ),
        )

    def merge(self, overrides: Mapping[str, Any] | None) -> "AppConfig":
        if not overrides:
            return self
        return AppConfig.from_mapping(deep_update(self.to_dict(), overrides))

    def to_dict(self) -> dict[str, Any]:
        return {
            "translator": {
                "dictionary_path": (
                    str(self.translator.dictionary_path)
                    if self.translator.dictionary_path
                    else None
                ),
            },
            "language": {
                "classifier": self.language.classifier,
                "primary_language": self.language.primary_language,
            },
            "session": {
                "processing_delay": self.session.processing_delay,
                "max_workers": self.session.max_workers,
                "wait_timeout": self.session.wait_timeout,
            },
            "telemetry": {
                "export_path": (
                    str(self.telemetry.export_path) if self.telemetry.export_path else None
                ),
                "log_level": self.telemetry.log_level,
            },
        }


__all__ = [
    "AppConfig",
    "LanguageOptions",
    "SessionOptions",
    "TelemetryOptions",
    "TranslatorOptions",
]
