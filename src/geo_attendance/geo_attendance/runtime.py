from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable, Optional, TypeVar

_log = logging.getLogger(__name__)

T = TypeVar("T")


class EngineRuntime:
    """Runs the engine's asyncio loop on a daemon thread.

    Flask views are synchronous; they hand coroutines and loop-affine calls
    to this runtime and block on the result.
    """

    def __init__(self, *, name: str = "geo-attendance-engine"):
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._lock = threading.Lock()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            raise RuntimeError("Engine runtime is not started")
        return self._loop

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._ready.clear()
            self._loop = asyncio.new_event_loop()
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()
        self._ready.wait()
        _log.info("Engine loop thread started")

    def _run(self) -> None:
        loop = self._loop
        asyncio.set_event_loop(loop)
        loop.call_soon(self._ready.set)
        try:
            loop.run_forever()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()

    def stop(self, timeout: float = 2.0) -> None:
        with self._lock:
            if not self.running:
                return
            self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join(timeout=timeout)
            self._thread = None
            self._loop = None
        _log.info("Engine loop thread stopped")

    def submit(self, coro: Awaitable[T], timeout: Optional[float] = None) -> T:
        """Run a coroutine on the loop and wait for its result (exceptions re-raised here)."""
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        return future.result(timeout=timeout)

    def call(self, fn: Callable[..., T], *args: Any, timeout: Optional[float] = None) -> T:
        """Run a plain callable on the loop thread and wait for its result."""

        async def _invoke() -> T:
            return fn(*args)

        return self.submit(_invoke(), timeout=timeout)

    def call_soon(self, fn: Callable[..., Any], *args: Any) -> None:
        self.loop.call_soon_threadsafe(fn, *args)
