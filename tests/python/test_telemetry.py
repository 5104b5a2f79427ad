"""Tests for hooks, metrics and exporters."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from libras.telemetry import exporters, hooks, logger, metrics


def test_hooks_receive_payload_until_closed() -> None:
    received: list[hooks.HookEvent] = []
    handle = hooks.register_hook("test.hook", received.append)

    hooks.dispatch("test.hook", {"value": 1})
    assert handle.active
    handle.close()
    handle.close()

    assert not handle.active
    assert hooks.dispatch("test.hook", {"value": 2}) == 0
    assert [event.payload["value"] for event in received] == [1]
    assert received[0].name == "test.hook"


def test_failing_hook_does_not_stop_others() -> None:
    received: list[str] = []

    def _broken(event: hooks.HookEvent) -> None:
        raise RuntimeError("hook failed")

    with hooks.register_hook("test.broken", _broken):
        with hooks.register_hook("test.broken", lambda event: received.append(event.name)):
            delivered = hooks.dispatch("test.broken")

    assert delivered == 1
    assert received == ["test.broken"]
    assert hooks.get_registry().callbacks("test.broken") == ()


def test_register_hook_validates_arguments() -> None:
    with pytest.raises(ValueError):
        hooks.register_hook("", lambda event: None)
    with pytest.raises(TypeError):
        hooks.register_hook("test.hook", "not callable")  # type: ignore[arg-type]


def test_registry_summaries() -> None:
    registry = metrics.MetricsRegistry()
    registry.emit("libras.translator.matches", 2)
    registry.emit("libras.translator.matches", 4)
    registry.emit("custom.value", 1.5, tags={"source": "test"})

    summaries = registry.summaries()

    matches = summaries["libras.translator.matches"]
    assert matches["count"] == 2
    assert matches["total"] == 6.0
    assert matches["min"] == 2.0
    assert matches["max"] == 4.0
    assert matches["last"] == 4.0
    assert matches["kind"] == "gauge"
    assert "description" in matches
    assert summaries["custom.value"]["kind"] == "gauge"
    assert registry.samples("custom.value")[0].tags == {"source": "test"}

    registry.reset()
    assert registry.summaries() == {}


def test_registry_rejects_bad_values() -> None:
    registry = metrics.MetricsRegistry()

    with pytest.raises(TypeError):
        registry.emit("libras.translator.matches", "many")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        registry.emit("", 1)


def test_memory_exporter_keeps_latest_samples() -> None:
    exporter = exporters.MemoryExporter(capacity=2)
    previous = exporters.configure(exporter)
    try:
        for value in (1, 2, 3):
            metrics.emit("libras.session.requests", value)
    finally:
        exporters.configure(previous)

    assert [sample.value for sample in exporter.samples()] == [2.0, 3.0]
    assert exporter.samples()[0].kind == "counter"
    exporter.clear()
    assert exporter.samples() == []


def test_jsonl_exporter_appends_records(tmp_path: Path) -> None:
    exporter = exporters.JsonlExporter(tmp_path / "nested" / "metrics.jsonl")
    previous = exporters.configure(exporter)
    try:
        metrics.emit("libras.language.detections", 1, tags={"code": "pt"})
        metrics.emit("libras.language.failures", 1)
    finally:
        exporters.configure(previous)
        exporter.close()

    lines = exporter.path.read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    assert [record["name"] for record in records] == [
        "libras.language.detections",
        "libras.language.failures",
    ]
    assert records[0]["tags"] == {"code": "pt"}
    assert "tags" not in records[1]


def test_get_logger_requires_name() -> None:
    assert logger.get_logger("libras.tests").name == "libras.tests"
    with pytest.raises(ValueError):
        logger.get_logger("")


def test_registry_history_is_bounded() -> None:
    registry = metrics.MetricsRegistry(history=3)
    for value in range(5):
        registry.emit("libras.session.requests", value)

    assert [sample.value for sample in registry.samples("libras.session.requests")] == [
        2.0,
        3.0,
        4.0,
    ]
    summary = registry.summaries()["libras.session.requests"]
    assert summary["count"] == 5
    assert summary["min"] == 0.0
    assert summary["kind"] == "counter"


def test_separate_hook_registries_are_isolated() -> None:
    registry = hooks.HookRegistry()
    received: list[hooks.HookEvent] = []
    registry.register(hooks.SESSION_STATE_CHANGED, received.append)

    hooks.dispatch(hooks.SESSION_STATE_CHANGED, {"request_id": 1})
    registry.dispatch(hooks.SESSION_STATE_CHANGED, {"request_id": 2})

    assert [event.payload["request_id"] for event in received] == [2]
    assert registry.unregister(hooks.SESSION_STATE_CHANGED, received.append)
    assert not registry.unregister(hooks.SESSION_STATE_CHANGED, received.append)


def test_logging_file_overrides_single_logger(tmp_path: Path) -> None:
    path = tmp_path / "logging.yaml"
    path.write_text("loggers:\n  libras:\n    level: DEBUG\nunknown: 1\n", encoding="utf-8")

    config = logger.build_config(path)

    assert config["loggers"]["libras"]["level"] == "DEBUG"
    assert config["loggers"]["libras"]["handlers"] == ["console"]
    assert "console" in config["handlers"]
    assert "unknown" not in config


def test_logging_defaults_when_file_is_missing(tmp_path: Path) -> None:
    config = logger.build_config(tmp_path / "missing.yaml")

    assert config["root"]["level"] == "WARNING"
    assert config["loggers"]["libras"]["propagate"] is False
