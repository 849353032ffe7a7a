"""Cancelable one-shot deferred callbacks for the guided-cooking event loop.

Each pending callback is registered under a name. Scheduling a name again or
cancelling it bumps that name's generation; a callback that fires with a stale
generation does nothing, so a countdown or re-announcement scheduled before a
manual navigation can never act after it.

The loop only needs `call_later(delay, callback, *args)` returning a handle
with `cancel()`, which is what `asyncio` event loops provide.
"""

import asyncio
from typing import Any, Callable, Dict, Optional

from stovetop.utils.logger import logger


class DeferredCalls:
    """Named, generation-checked deferred callbacks on a single event loop."""

    def __init__(self, loop: Optional[Any] = None) -> None:
        self._loop = loop
        self._generations: Dict[str, int] = {}
        self._handles: Dict[str, Any] = {}

    @property
    def loop(self) -> Any:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, name: str, delay: float, callback: Callable[[], None]) -> int:
        """Schedule `callback` after `delay` seconds, replacing any pending call with the same name.

        Returns:
            The generation token the callback will fire with.
        """
        self.cancel(name)
        generation = self._generations.get(name, 0) + 1
        self._generations[name] = generation
        self._handles[name] = self.loop.call_later(delay, self._fire, name, generation, callback)
        return generation

    def cancel(self, name: str) -> None:
        handle = self._handles.pop(name, None)
        if handle is not None:
            handle.cancel()
            self._generations[name] = self._generations.get(name, 0) + 1

    def cancel_all(self) -> None:
        for name in list(self._handles):
            self.cancel(name)

    def is_pending(self, name: str) -> bool:
        return name in self._handles

    def is_current(self, name: str, generation: int) -> bool:
        return self._generations.get(name) == generation

    def _fire(self, name: str, generation: int, callback: Callable[[], None]) -> None:
        if not self.is_current(name, generation):
            logger.debug(f"Ignoring stale deferred call '{name}' (generation {generation})")
            return
        self._handles.pop(name, None)
        callback()
