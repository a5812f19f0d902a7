"""Change notifications for the persisted session expiry.

Three independent channels feed the same idempotent ``SessionManager.sync``:
writes made through this process's store, storage events from other
processes sharing the store, and a low-frequency poll.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Protocol, Sequence

from ..core.constants import POLL_INTERVAL_SECONDS, SESSION_EXPIRES_KEY, TOKEN_KEY
from .scheduler import Scheduler, TimerHandle
from .store import SessionStore

logger = logging.getLogger(__name__)

WATCHED_KEYS = frozenset({SESSION_EXPIRES_KEY, TOKEN_KEY})

Callback = Callable[[], None]


class ObservationSource(Protocol):
    def on_change(self, callback: Callback) -> None:
        raise NotImplementedError


class _Listeners:
    def __init__(self) -> None:
        self._callbacks: list[Callback] = []

    def on_change(self, callback: Callback) -> None:
        self._callbacks.append(callback)

    def _notify(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback()
            except Exception:
                logger.exception("Session change listener failed")


class WriteInterceptSource(_Listeners):
    """Store wrapper that reports writes to the watched keys at the write site."""

    def __init__(self, store: SessionStore, *, watched: Iterable[str] = WATCHED_KEYS):
        super().__init__()
        self._store = store
        self._watched = frozenset(watched)

    @property
    def inner(self) -> SessionStore:
        return self._store

    def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store.set(key, value)
        if key in self._watched:
            self._notify()

    def remove(self, key: str) -> None:
        self._store.remove(key)
        if key in self._watched:
            self._notify()

    def clear(self) -> None:
        self._store.clear()
        self._notify()

    def keys(self) -> Sequence[str]:
        return self._store.keys()


class StorageEventSource(_Listeners):
    """Storage events raised by other contexts sharing the store.

    ``dispatch`` is called by whatever transport carries the event; a ``None``
    key means the whole store was cleared.
    """

    def __init__(self, *, watched: Iterable[str] = WATCHED_KEYS):
        super().__init__()
        self._watched = frozenset(watched)

    def dispatch(self, key: Optional[str]) -> bool:
        if key is not None and key not in self._watched:
            return False
        self._notify()
        return True


class PollingSource(_Listeners):
    """Fallback poll for writes that bypassed the other two channels."""

    def __init__(self, scheduler: Scheduler, *, interval: float = POLL_INTERVAL_SECONDS):
        super().__init__()
        self._scheduler = scheduler
        self._interval = interval
        self._handle: Optional[TimerHandle] = None

    def start(self) -> None:
        if self._handle is None:
            self._handle = self._scheduler.call_every(self._interval, self._notify)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
