"""
Timing metrics for the voice engine.

Responsibilities:
- Measure durations using monotonic time (immune to clock changes)
- Emit one METRIC_TIMER record per measurement via observability.logger
- Never aggregate
- Provide an API that cannot leak timers

Durations use monotonic time; ts_ms on the record is wall-clock time.
"""

from __future__ import annotations

import time
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from observability.logger import log_event


# timer_id -> (metric_name, start_time_ns)
_active_timers: dict[str, tuple[str, int]] = {}


def start_timer(name: str) -> str:
    """
    Start a monotonic timer and return its opaque id.

    Callers MUST call stop_timer() in a finally block unless they use
    the `timed()` context manager.
    """
    timer_id = f"timer_{uuid.uuid4().hex[:12]}"
    _active_timers[timer_id] = (name, time.monotonic_ns())
    return timer_id


def stop_timer(
    timer_id: str,
    *,
    session_id: str | None = None,
    page_context: str | None = None,
    details: dict[str, Any] | None = None,
) -> int | None:
    """
    Stop a previously started timer and emit a metric record.

    Returns:
        duration_ms if the timer existed, else None
    """
    entry = _active_timers.pop(timer_id, None)
    if entry is None:
        return None

    name, start_ns = entry
    duration_ms = (time.monotonic_ns() - start_ns) // 1_000_000

    log_event({
        "ts_ms": int(time.time() * 1000),
        "event_type": "METRIC_TIMER",
        "metric": name,
        "value_ms": duration_ms,
        "session_id": session_id,
        "page_context": page_context,
        "details": details or {},
    })

    return duration_ms


def active_timer_count() -> int:
    return len(_active_timers)


@contextmanager
def timed(
    name: str,
    *,
    session_id: str | None = None,
    page_context: str | None = None,
    details: dict[str, Any] | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Measure the enclosed block.

    Guarantees:
    - Timer is ALWAYS stopped (no leaks)
    - Metric is emitted exactly once
    - Exceptions inside the block propagate; timing still happens

    Yields a mutable details dict so the block can attach results
    (e.g. the dispatch outcome) to the emitted record.

    Usage:
        with timed("dispatch_ms", session_id=sid) as details:
            details["outcome"] = dispatch()
    """
    extra: dict[str, Any] = dict(details or {})
    timer_id = start_timer(name)
    try:
        yield extra
    finally:
        stop_timer(
            timer_id,
            session_id=session_id,
            page_context=page_context,
            details=extra,
        )
