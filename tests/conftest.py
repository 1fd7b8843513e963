"""Shared fixtures: a manually advanced clock and a recording command sink."""

import heapq
import itertools
from collections.abc import Callable

import pytest

from qemistry.queues import QueueRegistry
from qemistry.scheduling import DeferredScheduler
from qemistry.sinks import CommandSink
from qemistry.state import DictStateResolver


class ManualHandle:
    """Handle for a callback scheduled on the ManualScheduler."""

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(DeferredScheduler):
    """Deterministic scheduler: callbacks only fire when time is advanced."""

    def __init__(self) -> None:
        self.now = 0.0
        self._heap: list[tuple[float, int, ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback)
        heapq.heappush(self._heap, (handle.when, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._heap if not h.cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in order."""
        target = self.now + seconds
        while self._heap and self._heap[0][0] <= target:
            when, _, handle = heapq.heappop(self._heap)
            self.now = when
            if not handle.cancelled:
                handle.callback()
        self.now = target

    def run_until_idle(self, limit: int = 10_000) -> None:
        """Fire callbacks until none remain (bounded to catch runaway retries)."""
        fired = 0
        while self._heap:
            when, _, handle = heapq.heappop(self._heap)
            self.now = when
            if not handle.cancelled:
                handle.callback()
                fired += 1
                if fired > limit:
                    raise RuntimeError("Scheduler did not go idle")


class RecordingSink(CommandSink):
    """Collects every command sent."""

    def __init__(self) -> None:
        self.commands: list[str] = []

    def send(self, command: str) -> None:
        self.commands.append(command)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def state() -> DictStateResolver:
    return DictStateResolver({"sys": {"flag": True, "balance": True, "equilibrium": False}})


@pytest.fixture
def registry(state, sink, scheduler) -> QueueRegistry:
    return QueueRegistry(state, sink, scheduler=scheduler)
