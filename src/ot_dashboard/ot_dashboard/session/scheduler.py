from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import now_utc


class TimerHandle(Protocol):
    def cancel(self) -> None:
        raise NotImplementedError


class Scheduler(Protocol):
    """Delayed and periodic callbacks on a single event loop."""

    def now(self) -> datetime:
        raise NotImplementedError

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError


class _PeriodicHandle:
    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._cancelled = False

    def start(self) -> "_PeriodicHandle":
        self._handle = self._loop.call_later(self._interval, self._run)
        return self

    def _run(self) -> None:
        if self._cancelled:
            return
        # re-arm first so a failing callback does not stop the period
        self._handle = self._loop.call_later(self._interval, self._run)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class LoopScheduler(Scheduler):
    """Scheduler over an asyncio event loop; must be used from the loop's thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop, *, clock: Callable[[], datetime] = now_utc):
        self._loop = loop
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self._loop.call_later(max(0.0, delay), callback)

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        return _PeriodicHandle(self._loop, interval, callback).start()
