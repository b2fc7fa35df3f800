"""Quiescence-window debouncing on the asyncio event loop."""

import asyncio
from typing import Any, Callable, Optional

from demand_core.config import config


class Debouncer:
    """
    Coalesces rapid triggers into one call after *wait* seconds of quiet.

    Each trigger cancels the pending call and reschedules it with the latest
    arguments.  Must be triggered from inside a running event loop.

    Args:
        callback: Synchronous function to run once input settles.
        wait: Quiescence window in seconds (``viewport.debounce_seconds``).
    """

    def __init__(self, callback: Callable[..., Any], wait: Optional[float] = None):
        self.callback = callback
        self.wait = wait if wait is not None else config.get("viewport.debounce_seconds")
        self._handle: Optional[asyncio.TimerHandle] = None
        self.fired = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self.wait, self._fire, args, kwargs)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple, kwargs: dict) -> None:
        self._handle = None
        self.fired += 1
        self.callback(*args, **kwargs)
