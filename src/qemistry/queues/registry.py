"""Registry of named queues."""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from qemistry.config_schema import GlobalSettings
from qemistry.errors import (
    DuplicateNameError,
    InvalidArgumentError,
    NotFoundError,
    ReadOnlyViolationError,
)
from qemistry.queues.queue import Queue
from qemistry.queues.validation import validate_name
from qemistry.scheduling import AsyncioScheduler, DeferredScheduler
from qemistry.sinks import CommandSink
from qemistry.state import StateResolver

logger = logging.getLogger(__name__)


class QueueRegistry:
    """Creates, looks up, drives and deletes queues by name."""

    def __init__(
        self,
        state: StateResolver,
        sink: CommandSink,
        scheduler: DeferredScheduler | None = None,
        settings: GlobalSettings | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            state: Resolver shared by all queues for path conditions.
            sink: Destination for command strings from action code.
            scheduler: Timer for consumption checks (asyncio by default).
            settings: Verify delay and reset behaviour.
        """
        self._state = state
        self._sink = sink
        self._scheduler = scheduler or AsyncioScheduler()
        self._settings = settings or GlobalSettings()
        self._queues: dict[str, Queue] = {}

    def __setattr__(self, key: str, value: Any) -> None:
        if key.startswith("_"):
            object.__setattr__(self, key, value)
        else:
            raise ReadOnlyViolationError("Qemistry: May not modify the queue registry.")

    def __contains__(self, name: object) -> bool:
        return name in self._queues

    def __len__(self) -> int:
        return len(self._queues)

    @property
    def queues(self) -> Mapping[str, Queue]:
        """Read-only copy of the name to queue table."""
        return MappingProxyType(dict(self._queues))

    @property
    def names(self) -> list[str]:
        """Names of all registered queues."""
        return list(self._queues)

    @property
    def pending_checks(self) -> int:
        """Armed consumption checks across all registered queues."""
        return sum(queue.pending_checks for queue in self._queues.values())

    def _verify_queue(self, name: Any, func: str) -> Queue:
        if not isinstance(name, str):
            raise InvalidArgumentError(f"Qemistry: Must pass a string value to {func}.")
        queue = self._queues.get(name)
        if queue is None:
            raise NotFoundError(f"Qemistry: Queue '{name}' does not exist.")
        return queue

    def create(self, name: str, conditions: Any, options: Any = None) -> Queue:
        """Create and register a new queue.

        Args:
            name: Unique queue name.
            conditions: Condition gating the whole queue.
            options: ``"strict_order"``, ``"single_step"`` or a list of them.

        Returns:
            The new Queue.

        Raises:
            InvalidArgumentError: If any argument has the wrong shape.
            DuplicateNameError: If the name is already registered.
        """
        validate_name(name)
        if name in self._queues:
            raise DuplicateNameError(f"Qemistry: A Queue named '{name}' already exists.")

        queue = Queue(
            name,
            conditions,
            options,
            state=self._state,
            sink=self._sink,
            scheduler=self._scheduler,
            verify_delay=self._settings.verify_delay,
            cancel_pending_checks=self._settings.cancel_pending_checks,
        )
        self._queues[name] = queue
        logger.info(f"Created queue '{name}'")
        return queue

    def get(self, name: str) -> Queue:
        """Look up a queue by name.

        Raises:
            NotFoundError: If no queue has this name.
        """
        return self._verify_queue(name, "get")

    def do(self, name: str | None = None) -> None:
        """Run ``do()`` on one queue, or on every queue when no name is given.

        Raises:
            NotFoundError: If a name is given and no queue has it.
        """
        if name is None:
            for queue in list(self._queues.values()):
                queue.do()
        else:
            self._verify_queue(name, "do").do()

    def delete(self, name: str) -> None:
        """Remove a queue from the registry.

        References already held to the queue stay usable.

        Raises:
            NotFoundError: If no queue has this name.
        """
        queue = self._verify_queue(name, "delete")
        del self._queues[name]
        if self._settings.cancel_pending_checks:
            queue.cancel_pending_checks()
        logger.info(f"Deleted queue '{name}'")
