"""Timer-gated dispatcher used to rate-limit resize handling."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Protocol

_LOGGER = logging.getLogger("africamap.throttle")


class TimerHandle(Protocol):
    daemon: bool

    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


class Throttle:
    """Run `func` at most once per `interval_s`.

    The first call in a quiet period runs immediately. Calls arriving inside
    the window are coalesced: only the most recent arguments survive and run
    once when the window closes.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        interval_s: float = 0.25,
        *,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self._func = func
        self._interval_s = max(float(interval_s), 0.0)
        self._clock = clock
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._last_run_at: float | None = None
        self._timer: TimerHandle | None = None
        self._pending: tuple[tuple[Any, ...], dict[str, Any]] | None = None

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            now = self._clock()
            remaining = self._remaining(now)
            if remaining <= 0:
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None
                self._pending = None
                self._last_run_at = now
                run_now = True
            else:
                self._pending = (args, kwargs)
                if self._timer is None:
                    self._timer = self._timer_factory(remaining, self._run_trailing)
                    self._timer.daemon = True
                    self._timer.start()
                run_now = False
        if run_now:
            self._func(*args, **kwargs)
        else:
            _LOGGER.debug("Throttled call deferred by %.3fs", remaining)

    def cancel(self) -> None:
        """Drop any pending trailing call."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None

    def _remaining(self, now: float) -> float:
        if self._last_run_at is None:
            return 0.0
        return self._interval_s - (now - self._last_run_at)

    def _run_trailing(self) -> None:
        with self._lock:
            self._timer = None
            pending = self._pending
            self._pending = None
            if pending is None:
                return
            self._last_run_at = self._clock()
        args, kwargs = pending
        self._func(*args, **kwargs)
