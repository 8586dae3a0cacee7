import asyncio

import pytest

from src.timetable.timers import RepeatingTask, TimerScope


def test_repeating_task_fires_until_cancelled() -> None:
    calls: list[int] = []

    async def scenario() -> None:
        timer = RepeatingTask(0.01, lambda: calls.append(1), name="tick").start()
        await asyncio.sleep(0.055)
        timer.cancel()
        fired = len(calls)
        await asyncio.sleep(0.03)
        assert len(calls) == fired
        assert not timer.running

    asyncio.run(scenario())
    assert len(calls) >= 2


def test_run_immediately_and_async_callbacks() -> None:
    calls: list[str] = []

    async def fetch() -> None:
        calls.append("fetch")

    async def scenario() -> None:
        timer = RepeatingTask(10, fetch, run_immediately=True).start()
        await asyncio.sleep(0.01)
        timer.cancel()

    asyncio.run(scenario())
    assert calls == ["fetch"]


def test_failing_callback_keeps_timer_alive() -> None:
    attempts: list[int] = []

    def flaky() -> None:
        attempts.append(1)
        raise RuntimeError("boom")

    async def scenario() -> bool:
        timer = RepeatingTask(0.01, flaky).start()
        await asyncio.sleep(0.045)
        alive = timer.running
        timer.cancel()
        return alive

    assert asyncio.run(scenario()) is True
    assert len(attempts) >= 2


def test_scope_close_cancels_every_timer() -> None:
    async def scenario() -> TimerScope:
        async with TimerScope("view") as scope:
            refresh = scope.every(60, lambda: None, name="refresh")
            clock = scope.every(1, lambda: None, name="clock")
            assert refresh.running and clock.running
            assert refresh.name == "view.refresh"
        assert not refresh.running
        assert not clock.running
        return scope

    scope = asyncio.run(scenario())
    assert scope.closed
    assert scope.timers == ()


def test_closed_scope_refuses_new_timers() -> None:
    async def scenario() -> None:
        scope = TimerScope("view")
        scope.close()
        with pytest.raises(RuntimeError):
            scope.every(1, lambda: None)

    asyncio.run(scenario())


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RepeatingTask(0, lambda: None)
