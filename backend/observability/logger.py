"""
JSONL event logger.

- Write one JSON object per line
- Output to stdout
- No buffering, no batching
- No side effects beyond logging
- Records may carry a "level" key (DEBUG/INFO/WARNING/ERROR, default INFO);
  records below the configured level are dropped
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Mapping, Callable


_LEVELS: dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
}


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print

_enabled: bool = True
_min_level: int = _LEVELS["INFO"]


def configure(*, enabled: bool = True, level: str = "INFO") -> None:
    """
    Apply process-wide logger settings.

    Called once by the app factory from AppConfig.
    Unknown level names fall back to INFO.
    """
    global _enabled, _min_level  # pylint: disable=global-statement
    _enabled = enabled
    _min_level = _LEVELS.get(level.upper(), _LEVELS["INFO"])


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single JSONL event to stdout.

    The caller is responsible for:
    - Supplying a fully-formed event dict
    - Including event_type, session_id, etc.

    This function:
    - Adds ts_ms if missing
    - Serializes to JSON
    - Writes exactly one line
    - Flushes immediately (no buffering)
    - Never raises
    """
    if not _enabled:
        return
    if _LEVELS.get(str(event.get("level", "INFO")), _LEVELS["INFO"]) < _min_level:
        return

    if "ts_ms" not in event:
        event = {"ts_ms": time.time_ns() // 1_000_000, **event}

    try:
        line = json.dumps(event, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        # Last-resort fallback - logging must never crash the engine
        fallback: dict[str, Any] = {
            "ts_ms": event.get("ts_ms"),
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    _print(line)
