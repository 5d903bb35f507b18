# ============================================================================
# LOADING LATCH
# ============================================================================
# STATUS: Service Layer - Loading indicator
# PURPOSE: OR of named loading flags held on for a minimum time
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: LoadingLatch
# DEPENDENCIES: asyncio
# ============================================================================
"""
Loading Latch - Minimum-Duration Loading Indicator.

Several named loading flags (workspace list, workspace detail, submit)
may overlap; the indicator is the OR of all of them. It turns on
immediately on the rising edge and, once every flag is off, stays on
until ``min_ms`` have passed since it turned on.

Exports:
    LoadingLatch: Named-flag loading latch with a minimum hold time
"""

import asyncio
import time
from typing import Callable, Dict, List, Optional

from config.defaults import FormDefaults

Clock = Callable[[], float]


class LoadingLatch:
    """
    Loading indicator latch.

    Args:
        min_ms: Minimum time the indicator stays on, measured from the rise
        clock: Monotonic clock in seconds (injectable for tests)
        loop: Event loop used to schedule the delayed fall; defaults to the
            running loop at the time of the fall
    """

    def __init__(
        self,
        min_ms: int = FormDefaults.MIN_LOADING_MS,
        clock: Clock = time.monotonic,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        self.min_ms = max(0, min_ms)
        self._clock = clock
        self._loop = loop
        self._flags: Dict[str, bool] = {}
        self._started_at: Optional[float] = None
        self._latched = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._listeners: List[Callable[[bool], None]] = []

    @property
    def active(self) -> bool:
        """True while any named flag is on."""
        return any(self._flags.values())

    @property
    def is_loading(self) -> bool:
        """What the indicator shows: active, or held after the last flag went off."""
        return self.active or self._latched

    def is_flag_set(self, name: str) -> bool:
        return self._flags.get(name, False)

    def on_change(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    def set_loading(self, name: str, loading: bool) -> None:
        """Turn one named flag on or off."""
        before = self.is_loading
        self._flags[name] = loading

        if self.active:
            self._cancel_timer()
            if self._started_at is None:
                self._started_at = self._clock()
            self._latched = True
        elif self._latched:
            self._schedule_release()

        if self.is_loading != before:
            self._emit()

    def reset(self) -> None:
        """Clear every flag and drop the indicator immediately."""
        before = self.is_loading
        self._cancel_timer()
        self._flags.clear()
        self._release()
        if before:
            self._emit()

    # ------------------------------------------------------------------

    def _schedule_release(self) -> None:
        if self._timer is not None:
            return
        now = self._clock()
        started_at = self._started_at if self._started_at is not None else now
        elapsed_ms = (now - started_at) * 1000
        remaining_ms = max(0.0, self.min_ms - max(0.0, elapsed_ms))
        if remaining_ms == 0:
            self._release()
            return
        loop = self._loop or asyncio.get_running_loop()
        self._timer = loop.call_later(remaining_ms / 1000, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self.active:
            return
        self._release()
        self._emit()

    def _release(self) -> None:
        self._latched = False
        self._started_at = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _emit(self) -> None:
        state = self.is_loading
        for listener in list(self._listeners):
            listener(state)
