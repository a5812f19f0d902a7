"""Session expiry timers.

The manager arms one warning timer at ``expires_at - 60s`` and one auto-logout
timer at ``expires_at - 5s``. Every observation of the persisted expiry value
goes through :meth:`SessionManager.sync`, which ignores values it has already
seen, so repeated notifications never re-arm or duplicate timers.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import parse_iso_instant
from ..core.constants import (
    AUTO_LOGOUT_BEFORE_SECONDS,
    COUNTDOWN_TICK_SECONDS,
    SESSION_EXPIRES_KEY,
    WARN_BEFORE_SECONDS,
)
from ..core.enums import SessionPhase
from .scheduler import Scheduler, TimerHandle
from .sources import ObservationSource
from .store import SessionStore

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Session expired. Please log in again."
LOGGED_OUT_MESSAGE = "Logged out."

PhaseListener = Callable[[SessionPhase, "SessionManager"], None]


class SessionManager:
    def __init__(
        self,
        store: SessionStore,
        scheduler: Scheduler,
        *,
        on_logout: Optional[Callable[[str], None]] = None,
        warn_before: float = WARN_BEFORE_SECONDS,
        auto_logout_before: float = AUTO_LOGOUT_BEFORE_SECONDS,
        tick_seconds: float = COUNTDOWN_TICK_SECONDS,
    ):
        self._store = store
        self._scheduler = scheduler
        self._on_logout = on_logout
        self._warn_before = timedelta(seconds=warn_before)
        self._auto_logout_before = timedelta(seconds=auto_logout_before)
        self._tick_seconds = tick_seconds

        self._phase = SessionPhase.IDLE
        self._expires_at: Optional[datetime] = None
        self._last_seen: Optional[str] = None
        self._seconds_left = 0

        self._warn_timer: Optional[TimerHandle] = None
        self._logout_timer: Optional[TimerHandle] = None
        self._countdown: Optional[TimerHandle] = None

        self._listeners: list[PhaseListener] = []

    # ---- observation ----

    def watch(self, *sources: ObservationSource) -> None:
        for source in sources:
            source.on_change(self.sync)

    def sync(self) -> None:
        """Re-read the persisted expiry and reschedule only if it changed."""
        current = self._store.get(SESSION_EXPIRES_KEY)
        if current == self._last_seen:
            return
        self._last_seen = current
        self._reschedule(current)

    def _reschedule(self, raw: Optional[str]) -> None:
        if not raw:
            self.cancel()
            return
        expires_at = parse_iso_instant(raw)
        if expires_at is None:
            logger.warning("Unparseable session expiry %r, logging out", raw)
            self._clear_timers()
            self._expire()
            return
        self.schedule(expires_at)

    # ---- state ----

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def expires_at(self) -> Optional[datetime]:
        return self._expires_at

    @property
    def warn_at(self) -> Optional[datetime]:
        return self._expires_at - self._warn_before if self._expires_at else None

    @property
    def auto_logout_at(self) -> Optional[datetime]:
        return self._expires_at - self._auto_logout_before if self._expires_at else None

    @property
    def seconds_left(self) -> int:
        return self._seconds_left

    def subscribe(self, listener: PhaseListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set_phase(self, phase: SessionPhase) -> None:
        if phase == self._phase:
            return
        logger.info("Session %s -> %s", self._phase.value, phase.value)
        self._phase = phase
        for listener in list(self._listeners):
            try:
                listener(phase, self)
            except Exception:
                logger.exception("Session listener failed")

    # ---- scheduling ----

    def schedule(self, expires_at: datetime) -> None:
        self._clear_timers()
        self._expires_at = expires_at

        now = self._scheduler.now()
        if now >= expires_at:
            self._expire()
            return

        self._set_phase(SessionPhase.SCHEDULED)

        warn_delay = (expires_at - self._warn_before - now).total_seconds()
        logout_delay = (expires_at - self._auto_logout_before - now).total_seconds()

        if warn_delay <= 0:
            self._enter_warning()
        else:
            self._warn_timer = self._scheduler.call_later(warn_delay, self._enter_warning)
        self._logout_timer = self._scheduler.call_later(max(0.0, logout_delay), self._expire)

    def cancel(self) -> None:
        """Disarm everything and go back to idle."""
        self._clear_timers()
        self._expires_at = None
        self._set_phase(SessionPhase.IDLE)

    def _clear_timers(self) -> None:
        for handle in (self._warn_timer, self._logout_timer):
            if handle is not None:
                handle.cancel()
        self._warn_timer = None
        self._logout_timer = None
        self._stop_countdown()

    def _enter_warning(self) -> None:
        self._warn_timer = None
        self._set_phase(SessionPhase.WARNING)
        self._start_countdown()

    def logout(self, message: str = LOGGED_OUT_MESSAGE) -> None:
        """User-initiated logout, allowed from any phase."""
        self._clear_timers()
        self._run_logout_handler(message)
        self.cancel()

    def _expire(self) -> None:
        self._clear_timers()
        self._set_phase(SessionPhase.LOGGED_OUT)
        self._run_logout_handler(SESSION_EXPIRED_MESSAGE)
        self._expires_at = None
        self._set_phase(SessionPhase.IDLE)

    def _run_logout_handler(self, message: str) -> None:
        if self._on_logout is None:
            return
        try:
            self._on_logout(message)
        except Exception:
            logger.exception("Logout handler failed")

    # ---- countdown ----

    def _tick(self) -> None:
        if self._expires_at is None:
            self._seconds_left = 0
            return
        remaining = (self._expires_at - self._scheduler.now()).total_seconds()
        self._seconds_left = max(0, math.floor(remaining))

    def _start_countdown(self) -> None:
        self._stop_countdown()
        self._tick()
        self._countdown = self._scheduler.call_every(self._tick_seconds, self._tick)

    def _stop_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None
        self._seconds_left = 0
