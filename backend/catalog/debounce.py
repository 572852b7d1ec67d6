import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class SearchDebouncer:
    """
    Runs `callback` once typing pauses for `delay` seconds.

    Every trigger cancels the pending call, so a burst of keystrokes produces a
    single evaluation with the last value. Must be triggered from a running loop.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._handle = None
        logger.debug("Debounced search firing with %r", args)
        self._callback(*args)
