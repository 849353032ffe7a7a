"""Shared fixtures for unit tests."""

import pytest


class FakeHandle:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Manually advanced clock implementing the `call_later` part of an asyncio loop."""

    def __init__(self):
        self.time = 0.0
        self._handles = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.time + delay, callback, args)
        self._handles.append(handle)
        return handle

    @property
    def pending(self):
        return [handle for handle in self._handles if not handle.cancelled]

    def advance(self, seconds):
        """Run every callback due within `seconds`, in due order."""
        target = self.time + seconds
        while True:
            due = [handle for handle in self.pending if handle.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self._handles.remove(handle)
            self.time = handle.when
            handle.callback(*handle.args)
        self.time = target


@pytest.fixture
def fake_loop():
    return FakeLoop()
