# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from typing import Any

import pytest

from observability import logger


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    lines: list[str] = []
    monkeypatch.setattr(logger, "_print", lines.append)
    return lines


def test_log_event_emits_valid_jsonl(captured: list[str]) -> None:
    """
    Contract:
    - log_event emits exactly one JSONL line
    - payload is serialized as-is, plus ts_ms
    - output sink is patchable
    """
    payload: dict[str, Any] = {
        "event_type": "TEST",
        "value": 123,
    }

    logger.log_event(payload)

    assert len(captured) == 1

    decoded = json.loads(captured[0])
    assert isinstance(decoded.pop("ts_ms"), int)
    assert decoded == payload


def test_existing_ts_ms_is_kept(captured: list[str]) -> None:
    logger.log_event({"ts_ms": 42, "event_type": "TEST"})
    assert json.loads(captured[0]) == {"ts_ms": 42, "event_type": "TEST"}


def test_records_below_level_are_dropped(captured: list[str]) -> None:
    logger.configure(level="WARNING")

    logger.log_event({"level": "DEBUG", "event_type": "A"})
    logger.log_event({"event_type": "B"})
    logger.log_event({"level": "WARNING", "event_type": "C"})
    logger.log_event({"level": "ERROR", "event_type": "D"})

    assert [json.loads(line)["event_type"] for line in captured] == ["C", "D"]


def test_unknown_level_name_falls_back_to_info(captured: list[str]) -> None:
    logger.configure(level="chatty")

    logger.log_event({"level": "DEBUG", "event_type": "A"})
    logger.log_event({"event_type": "B"})

    assert [json.loads(line)["event_type"] for line in captured] == ["B"]


def test_disabled_logger_writes_nothing(captured: list[str]) -> None:
    logger.configure(enabled=False)
    logger.log_event({"level": "ERROR", "event_type": "A"})
    assert captured == []


def test_unserializable_payload_emits_fallback(captured: list[str]) -> None:
    logger.log_event({"event_type": "TEST", "bad": {1, 2}})

    decoded = json.loads(captured[0])
    assert decoded["event_type"] == "LOGGER_SERIALIZATION_ERROR"
    assert "TEST" in decoded["original_event_repr"]
