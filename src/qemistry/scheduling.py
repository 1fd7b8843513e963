"""Deferred callback scheduling for consumption checks."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol


class Cancellable(Protocol):
    """Handle returned by a scheduler for a pending callback."""

    def cancel(self) -> None: ...


class DeferredScheduler(ABC):
    """Abstract one-shot timer on the host's control thread."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        """
        Invoke ``callback`` once, no sooner than ``delay`` seconds from now.

        Args:
            delay: Minimum delay in seconds.
            callback: Zero-argument callable.

        Returns:
            A handle whose ``cancel()`` prevents the callback from running.
        """
        ...


class AsyncioScheduler(DeferredScheduler):
    """Schedules callbacks on an asyncio event loop.

    Without an explicit loop, the loop running at scheduling time is used,
    so ``do()`` must then be called from inside that loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """The loop callbacks are scheduled on."""
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)
