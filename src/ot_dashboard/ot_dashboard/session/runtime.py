from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from .scheduler import LoopScheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionRuntime:
    """Single event loop hosting the session timers inside a threaded web process.

    Request threads never touch the manager directly: they hand work to the loop
    with :meth:`submit` (fire-and-forget) or :meth:`call` (wait for the result).
    Backend calls never run on the loop; they go through :meth:`offload`.
    """

    def __init__(self, *, name: str = "session-timers"):
        self._loop = asyncio.new_event_loop()
        self._thread: Optional[threading.Thread] = None
        self._name = name
        self._executor: Optional[ThreadPoolExecutor] = None
        self.scheduler = LoopScheduler(self._loop)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def start(self) -> None:
        if self._thread is not None:
            return
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix=f"{self._name}-io")
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        logger.debug("Session loop started")
        self._loop.run_forever()

    def submit(self, fn: Callable[[], None]) -> None:
        if self._thread is None:
            fn()
            return
        self._loop.call_soon_threadsafe(fn)

    def offload(self, fn: Callable[[], None]) -> None:
        """Run blocking I/O (backend calls) on a worker thread, off the timer loop."""
        if self._executor is None:
            fn()
            return

        def _run() -> None:
            try:
                fn()
            except Exception:
                logger.exception("Background task failed")

        self._executor.submit(_run)

    def call(self, fn: Callable[[], T], *, timeout: float = 5.0) -> T:
        if self._thread is None or threading.current_thread() is self._thread:
            return fn()

        result: Future = Future()

        def _invoke() -> None:
            try:
                result.set_result(fn())
            except Exception as e:
                result.set_exception(e)

        self._loop.call_soon_threadsafe(_invoke)
        return result.result(timeout=timeout)

    def stop(self) -> None:
        if self._thread is None:
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._thread = None
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        self._loop.close()
