# pylint: disable=missing-module-docstring,missing-function-docstring
import asyncio

import pytest

from orchestrator.timers import AsyncioScheduler, TimerRegistry

from conftest import ManualScheduler


def test_timer_fires_after_delay(scheduler: ManualScheduler, timers: TimerRegistry) -> None:
    fired: list[str] = []
    timers.start("t", 300, lambda: fired.append("t"))

    scheduler.advance(299)
    assert fired == []
    assert timers.is_pending("t")

    scheduler.advance(1)
    assert fired == ["t"]
    assert not timers.is_pending("t")


def test_start_replaces_pending_timer_with_same_id(
    scheduler: ManualScheduler,
    timers: TimerRegistry,
) -> None:
    fired: list[str] = []
    timers.start("restart", 500, lambda: fired.append("first"))
    timers.start("restart", 300, lambda: fired.append("second"))

    scheduler.advance(1000)

    assert fired == ["second"]


def test_cancel_and_cancel_all_are_idempotent(
    scheduler: ManualScheduler,
    timers: TimerRegistry,
) -> None:
    fired: list[str] = []
    timers.start("a", 100, lambda: fired.append("a"))
    timers.start("b", 100, lambda: fired.append("b"))

    assert timers.cancel("a") is True
    assert timers.cancel("a") is False
    timers.cancel_all()
    timers.cancel_all()
    scheduler.advance(1000)

    assert fired == []
    assert timers.pending_ids == ()


def test_callback_may_restart_its_own_timer(scheduler: ManualScheduler, timers: TimerRegistry) -> None:
    count: list[int] = []

    def tick() -> None:
        count.append(1)
        if len(count) < 3:
            timers.start("tick", 100, tick)

    timers.start("tick", 100, tick)
    scheduler.advance(1000)

    assert len(count) == 3


def test_on_fire_runs_after_callback_even_when_it_raises(scheduler: ManualScheduler) -> None:
    fired: list[str] = []
    registry = TimerRegistry(scheduler=scheduler, on_fire=fired.append)

    def boom() -> None:
        raise RuntimeError("boom")

    registry.start("ok", 10, lambda: None)
    registry.start("bad", 20, boom)

    scheduler.advance(10)
    assert fired == ["ok"]

    with pytest.raises(RuntimeError):
        scheduler.advance(10)
    assert fired == ["ok", "bad"]


def test_asyncio_scheduler_fires_and_cancels() -> None:
    async def scenario() -> list[str]:
        fired: list[str] = []
        registry = TimerRegistry(scheduler=AsyncioScheduler())
        registry.start("keep", 10, lambda: fired.append("keep"))
        registry.start("drop", 10, lambda: fired.append("drop"))
        registry.cancel("drop")
        await asyncio.sleep(0.05)
        return fired

    assert asyncio.run(scenario()) == ["keep"]
