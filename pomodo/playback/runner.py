"""Run fade coroutines off the Qt thread.

The Qt event loop drives the session engine; fades take seconds and must
not hold it up.  ``FadeRunner`` keeps a private asyncio loop on a daemon
thread and runs one fade at a time on it.  Submitting a new fade while one
is still stepping cancels the old one, so a late fade-out can never undo
a newer fade-in.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Callable, Coroutine, Optional


log = logging.getLogger(__name__)

CoroFactory = Callable[[], Coroutine[Any, Any, Any]]


class FadeRunner:
    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop, name="pomodo-fades", daemon=True,
        )
        self._current: Optional[concurrent.futures.Future] = None
        self._lock = threading.Lock()
        self._thread.start()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._current is not None and not self._current.done()

    def submit(self, coro_factory: CoroFactory) -> concurrent.futures.Future:
        """Schedule ``coro_factory()`` on the fade loop.

        Any fade still in flight is cancelled first.
        """
        with self._lock:
            if self._current is not None and not self._current.done():
                log.debug("superseding in-flight fade")
                self._current.cancel()
            future = asyncio.run_coroutine_threadsafe(coro_factory(), self._loop)
            self._current = future
        return future

    def schedule(self, coro_factory: CoroFactory) -> concurrent.futures.Future:
        """Schedule a background coroutine that leaves the current fade alone."""
        return asyncio.run_coroutine_threadsafe(coro_factory(), self._loop)

    def call(self, coro_factory: CoroFactory, timeout: float | None = None) -> Any:
        """Run a one-off coroutine on the loop and wait for its result."""
        future = asyncio.run_coroutine_threadsafe(coro_factory(), self._loop)
        return future.result(timeout)

    def close(self) -> None:
        with self._lock:
            if self._current is not None:
                self._current.cancel()
                self._current = None
        if self._loop.is_running():
            self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=2)
        if not self._loop.is_running():
            self._loop.close()
