"""Unit tests for named, generation-checked deferred callbacks."""

import asyncio

from stovetop.cooking.deferred import DeferredCalls


class TestDeferredCalls:
    """Test scheduling, replacement and cancellation."""

    def test_fires_once_after_delay(self, fake_loop):
        """Test that a callback runs only when its delay has passed."""
        calls = []
        deferred = DeferredCalls(fake_loop)
        deferred.schedule("advance", 10, lambda: calls.append("advance"))

        fake_loop.advance(9)
        assert calls == []

        fake_loop.advance(1)
        assert calls == ["advance"]
        assert not deferred.is_pending("advance")

        fake_loop.advance(100)
        assert calls == ["advance"]

    def test_rescheduling_replaces_pending_call(self, fake_loop):
        """Test that only the most recent schedule under a name fires."""
        calls = []
        deferred = DeferredCalls(fake_loop)
        deferred.schedule("announce", 1, lambda: calls.append("first"))
        deferred.schedule("announce", 2, lambda: calls.append("second"))

        fake_loop.advance(5)

        assert calls == ["second"]

    def test_cancel_prevents_firing(self, fake_loop):
        """Test that a cancelled call never runs."""
        calls = []
        deferred = DeferredCalls(fake_loop)
        deferred.schedule("advance", 1, lambda: calls.append("advance"))
        assert deferred.is_pending("advance")

        deferred.cancel("advance")
        fake_loop.advance(5)

        assert calls == []
        assert not deferred.is_pending("advance")

    def test_stale_generation_is_ignored(self, fake_loop):
        """Test that a callback fired with an outdated generation does nothing."""
        calls = []
        deferred = DeferredCalls(fake_loop)
        stale = deferred.schedule("advance", 1, lambda: calls.append("stale"))
        deferred.cancel("advance")

        assert not deferred.is_current("advance", stale)
        deferred._fire("advance", stale, lambda: calls.append("stale"))

        assert calls == []

    def test_generations_increase(self, fake_loop):
        """Test that each schedule returns a new token."""
        deferred = DeferredCalls(fake_loop)
        first = deferred.schedule("announce", 1, lambda: None)
        second = deferred.schedule("announce", 1, lambda: None)

        assert second > first
        assert deferred.is_current("announce", second)

    def test_names_are_independent(self, fake_loop):
        """Test that cancelling one name leaves others pending."""
        calls = []
        deferred = DeferredCalls(fake_loop)
        deferred.schedule("announce", 1, lambda: calls.append("announce"))
        deferred.schedule("highlight", 1, lambda: calls.append("highlight"))

        deferred.cancel("announce")
        fake_loop.advance(1)

        assert calls == ["highlight"]

    def test_cancel_all(self, fake_loop):
        """Test that cancel_all clears every pending call."""
        calls = []
        deferred = DeferredCalls(fake_loop)
        deferred.schedule("a", 1, lambda: calls.append("a"))
        deferred.schedule("b", 2, lambda: calls.append("b"))

        deferred.cancel_all()
        fake_loop.advance(5)

        assert calls == []
        assert fake_loop.pending == []

    def test_cancel_unknown_name_is_noop(self, fake_loop):
        """Test cancelling something never scheduled."""
        DeferredCalls(fake_loop).cancel("nothing")

    def test_defaults_to_running_loop(self):
        """Test that without an explicit loop the running asyncio loop is used."""

        async def scenario():
            calls = []
            deferred = DeferredCalls()
            deferred.schedule("tick", 0, lambda: calls.append("tick"))
            await asyncio.sleep(0.05)
            return calls

        assert asyncio.run(scenario()) == ["tick"]
