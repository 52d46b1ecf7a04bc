"""
Session-bound cancellable timers.

Responsibilities:
- Own every scheduled callback of one voice session (restart, resolver
  retry, delayed invocation, page greeting)
- Replace-on-start semantics per timer id
- Idempotent cancel / cancel_all (used on stop and on session disposal)

Non-responsibilities:
- NO policy: callers decide which timers to start or cancel
- NO state machine decisions

Scheduling is delegated to a Scheduler so tests can drive time by hand.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol

from observability.logger import log_event


TimerCallback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> object: ...


class Scheduler(Protocol):
    """Schedules a zero-argument callback after delay_ms."""

    def call_later(self, delay_ms: int, callback: TimerCallback) -> TimerHandle: ...


class AsyncioScheduler:
    """
    Scheduler backed by asyncio tasks on the running loop.

    Each timer is a task sleeping for delay_ms; cancelling the handle
    cancels the task before it fires.
    """

    def call_later(self, delay_ms: int, callback: TimerCallback) -> TimerHandle:
        async def _timer_task() -> None:
            try:
                await asyncio.sleep(delay_ms / 1000.0)
            except asyncio.CancelledError:
                # Timer was cancelled - this is normal
                return
            callback()

        return asyncio.get_running_loop().create_task(_timer_task())


class TimerRegistry:
    """
    Named timers for a single session.

    Invariants:
    - At most one pending timer per timer_id
    - A fired timer is removed before its callback runs, so the callback
      may safely restart the same timer_id
    - on_fire (optional) runs after every callback, e.g. to flush
      messages produced by the callback to the host page
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        session_id: str | None = None,
        on_fire: Callable[[str], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._session_id = session_id
        self._on_fire = on_fire
        self._pending: dict[str, TimerHandle] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self, timer_id: str, delay_ms: int, callback: TimerCallback) -> None:
        """Start or replace the timer `timer_id`."""
        self.cancel(timer_id)

        def _fire() -> None:
            self._pending.pop(timer_id, None)
            try:
                callback()
            finally:
                if self._on_fire is not None:
                    self._on_fire(timer_id)

        self._pending[timer_id] = self._scheduler.call_later(delay_ms, _fire)
        log_event({
            "level": "DEBUG",
            "event_type": "TIMER_STARTED",
            "session_id": self._session_id,
            "timer_id": timer_id,
            "delay_ms": delay_ms,
        })

    def cancel(self, timer_id: str) -> bool:
        """Cancel a pending timer. Returns True if one was pending."""
        handle = self._pending.pop(timer_id, None)
        if handle is None:
            return False
        handle.cancel()
        log_event({
            "level": "DEBUG",
            "event_type": "TIMER_CANCELLED",
            "session_id": self._session_id,
            "timer_id": timer_id,
        })
        return True

    def cancel_all(self) -> None:
        """Cancel every pending timer. Used on session disposal."""
        for timer_id in list(self._pending):
            self.cancel(timer_id)

    def is_pending(self, timer_id: str) -> bool:
        return timer_id in self._pending

    @property
    def pending_ids(self) -> tuple[str, ...]:
        return tuple(self._pending)
