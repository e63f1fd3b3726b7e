"""Tests for engine/scheduler.py - virtual and asyncio schedulers."""

import asyncio

import pytest

from engine.scheduler import VirtualScheduler, AsyncioScheduler


@pytest.fixture
def scheduler():
    return VirtualScheduler()


class TestVirtualScheduler:
    """Test deterministic virtual time."""

    def test_starts_at_zero(self, scheduler):
        assert scheduler.now_ms == 0
        assert scheduler.pending_count() == 0
        assert scheduler.next_due_ms() is None

    def test_call_later_fires_once(self, scheduler):
        calls = []
        handle = scheduler.call_later(100, lambda: calls.append(scheduler.now_ms))

        scheduler.advance(99)
        assert calls == []
        assert handle.active

        scheduler.advance(1)
        assert calls == [100]
        assert not handle.active

        scheduler.advance(1000)
        assert calls == [100]

    def test_repeating(self, scheduler):
        calls = []
        scheduler.call_repeating(100, lambda: calls.append(scheduler.now_ms))
        fired = scheduler.advance(350)
        assert calls == [100, 200, 300]
        assert fired == 3
        assert scheduler.now_ms == 350

    def test_cancel_before_fire(self, scheduler):
        calls = []
        handle = scheduler.call_later(100, lambda: calls.append(1))
        handle.cancel()
        scheduler.advance(200)
        assert calls == []
        assert scheduler.pending_count() == 0

    def test_cancel_twice_is_safe(self, scheduler):
        handle = scheduler.call_repeating(10, lambda: None)
        handle.cancel()
        handle.cancel()
        assert not handle.active

    def test_repeating_cancelled_by_own_callback(self, scheduler):
        calls = []
        handle = None

        def tick():
            calls.append(scheduler.now_ms)
            if len(calls) == 2:
                handle.cancel()

        handle = scheduler.call_repeating(50, tick)
        scheduler.advance(1000)
        assert calls == [50, 100]

    def test_repeating_survives_raising_callback(self, scheduler):
        calls = []

        def tick():
            calls.append(scheduler.now_ms)
            if len(calls) == 1:
                raise RuntimeError("boom")

        scheduler.call_repeating(100, tick)
        with pytest.raises(RuntimeError):
            scheduler.advance(250)
        assert scheduler.pending_count() == 1
        assert scheduler.next_due_ms() == 200

        scheduler.advance(250)
        assert calls == [100, 200, 300]

    def test_due_order_and_ties(self, scheduler):
        calls = []
        scheduler.call_later(200, lambda: calls.append("b"))
        scheduler.call_later(100, lambda: calls.append("a"))
        scheduler.call_later(200, lambda: calls.append("c"))
        scheduler.advance(200)
        assert calls == ["a", "b", "c"]

    def test_timer_scheduled_from_callback(self, scheduler):
        calls = []
        scheduler.call_later(100, lambda: scheduler.call_later(50, lambda: calls.append(scheduler.now_ms)))
        scheduler.advance(200)
        assert calls == [150]

    def test_next_due(self, scheduler):
        scheduler.call_later(300, lambda: None)
        scheduler.call_later(100, lambda: None)
        assert scheduler.next_due_ms() == 100

    def test_negative_values_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.call_later(-1, lambda: None)
        with pytest.raises(ValueError):
            scheduler.call_repeating(0, lambda: None)
        with pytest.raises(ValueError):
            scheduler.advance(-5)


class TestAsyncioScheduler:
    """Test the real-time scheduler with short delays."""

    def test_call_later(self):
        async def run():
            calls = []
            scheduler = AsyncioScheduler()
            handle = scheduler.call_later(10, lambda: calls.append("fired"))
            await asyncio.sleep(0.05)
            return calls, handle.active

        calls, active = asyncio.run(run())
        assert calls == ["fired"]
        assert not active

    def test_repeating_and_cancel(self):
        async def run():
            calls = []
            scheduler = AsyncioScheduler()
            handle = scheduler.call_repeating(10, lambda: calls.append(1))
            await asyncio.sleep(0.055)
            handle.cancel()
            count = len(calls)
            await asyncio.sleep(0.05)
            return count, len(calls)

        count_at_cancel, count_after = asyncio.run(run())
        assert count_at_cancel >= 2
        assert count_after == count_at_cancel

    def test_repeating_survives_raising_callback(self):
        async def run():
            calls = []

            def tick():
                calls.append(1)
                if len(calls) == 1:
                    raise RuntimeError("boom")

            loop = asyncio.get_running_loop()
            loop.set_exception_handler(lambda loop, context: None)
            handle = AsyncioScheduler().call_repeating(10, tick)
            await asyncio.sleep(0.06)
            handle.cancel()
            return len(calls)

        assert asyncio.run(run()) >= 2

    def test_cancel_before_fire(self):
        async def run():
            calls = []
            scheduler = AsyncioScheduler()
            handle = scheduler.call_later(20, lambda: calls.append(1))
            handle.cancel()
            await asyncio.sleep(0.05)
            return calls

        assert asyncio.run(run()) == []
