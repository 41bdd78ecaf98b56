"""Responsive controller: initial render plus throttled re-render on resize."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable, Protocol

from .layout import LayoutParameters, compute_layout
from .models import AppState
from .renderer import render
from .surface import MapContainer
from .throttle import Throttle, TimerFactory

_LOGGER = logging.getLogger("africamap.controller")


class HostNotifier(Protocol):
    """Told, without arguments, that the rendered height may have changed."""

    def resize(self) -> None: ...


class NullNotifier:
    def resize(self) -> None:
        _LOGGER.debug("Host resize notification (no host attached).")


class CallbackNotifier:
    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    def resize(self) -> None:
        self._callback()


class ControllerStatus(enum.Enum):
    IDLE = "idle"
    RENDERING = "rendering"


class ResponsiveController:
    """Keeps one container rendered at its current width.

    Construction performs the first render synchronously. `handle_resize`
    is the throttled viewport subscription; `dispose` tears it down.
    """

    def __init__(
        self,
        state: AppState,
        container: MapContainer,
        notifier: HostNotifier | None = None,
        *,
        clock: Callable[[], float] | None = None,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self._state = state
        self._container = container
        self._notifier = notifier or NullNotifier()
        self._status = ControllerStatus.IDLE
        self._render_lock = threading.Lock()
        self._layout: LayoutParameters | None = None
        self._render_count = 0

        throttle_kwargs: dict[str, Any] = {}
        if clock is not None:
            throttle_kwargs["clock"] = clock
        if timer_factory is not None:
            throttle_kwargs["timer_factory"] = timer_factory
        self._throttled_refresh = Throttle(
            self.refresh,
            state.config.viewport.resize_throttle_s,
            **throttle_kwargs,
        )
        self.refresh()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def status(self) -> ControllerStatus:
        return self._status

    @property
    def layout(self) -> LayoutParameters | None:
        return self._layout

    @property
    def is_mobile(self) -> bool:
        return self._state.is_mobile

    @property
    def render_count(self) -> int:
        return self._render_count

    @property
    def container(self) -> MapContainer:
        return self._container

    def handle_resize(self) -> None:
        """Viewport resize event; rate-limited to one refresh per throttle window."""
        self._throttled_refresh()

    def refresh(self) -> LayoutParameters:
        """Measure, classify, lay out, render and notify the host."""
        with self._render_lock:
            self._status = ControllerStatus.RENDERING
            try:
                width = self._container.measure_width()
                self._state = self._state.with_viewport(width)
                layout = compute_layout(width, self._state.config.layout)
                render(layout, self._state.features, self._state.catalog, self._container)
                self._layout = layout
                self._render_count += 1
            finally:
                self._status = ControllerStatus.IDLE
        _LOGGER.info(
            "Rendered map at width=%.0f (mobile=%s, render #%d)",
            width,
            self._state.is_mobile,
            self._render_count,
        )
        self._notifier.resize()
        return layout

    def svg_markup(self) -> str:
        """Current drawing, read without racing a render in progress."""
        with self._render_lock:
            return self._container.svg_markup()

    def dispose(self) -> None:
        self._throttled_refresh.cancel()
