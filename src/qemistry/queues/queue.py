"""A single named action queue and its scheduling loop."""

import logging
from dataclasses import dataclass
from typing import Any

from qemistry.errors import ReadOnlyViolationError
from qemistry.expressions import (
    Code,
    Condition,
    compile_code,
    compile_condition,
    evaluate,
    execute,
    leaves,
)
from qemistry.queues.models import Action, QueueOption
from qemistry.queues.validation import (
    normalize_action,
    normalize_options,
    validate_conditions,
    validate_name,
)
from qemistry.scheduling import Cancellable, DeferredScheduler
from qemistry.sinks import CommandSink
from qemistry.state import StateResolver

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_DELAY = 0.5


@dataclass(eq=False)
class _Entry:
    """An action record together with its compiled expressions."""

    action: Action
    code: Code
    required: Condition | None = None
    consumed: Condition | None = None

    @classmethod
    def from_action(cls, action: Action) -> "_Entry":
        return cls(
            action=action,
            code=compile_code(action.code),
            required=compile_condition(action.required) if action.required is not None else None,
            consumed=compile_condition(action.consumed) if action.consumed is not None else None,
        )


class Queue:
    """An ordered list of actions that advances while its conditions hold.

    Queues are normally created through ``QueueRegistry.create``, which
    enforces name uniqueness and supplies the state resolver, command sink
    and scheduler.
    """

    def __init__(
        self,
        name: str,
        conditions: Any,
        options: Any = None,
        *,
        state: StateResolver,
        sink: CommandSink,
        scheduler: DeferredScheduler,
        verify_delay: float = DEFAULT_VERIFY_DELAY,
        cancel_pending_checks: bool = True,
    ) -> None:
        """Validate the arguments and build an empty queue.

        Args:
            name: Unique queue name.
            conditions: Condition gating the whole queue.
            options: ``"strict_order"``, ``"single_step"`` or a list of them.
            state: Resolver for path conditions.
            sink: Destination for command strings.
            scheduler: Timer used for consumption checks.
            verify_delay: Seconds to wait before checking a consumed condition.
            cancel_pending_checks: Cancel armed consumption checks on reset().

        Raises:
            InvalidArgumentError: If any argument has the wrong shape.
        """
        self._name = validate_name(name)
        self._conditions = validate_conditions(conditions)
        self._options = normalize_options(options)
        self._condition = compile_condition(self._conditions)
        self._state = state
        self._sink = sink
        self._scheduler = scheduler
        self._verify_delay = verify_delay
        self._cancel_pending_checks = cancel_pending_checks
        self._entries: list[_Entry] = []
        self._pending: set[Cancellable] = set()
        self._running = False
        self._redrive = False

    def __setattr__(self, key: str, value: Any) -> None:
        if key.startswith("_"):
            object.__setattr__(self, key, value)
        else:
            raise ReadOnlyViolationError(f"Qemistry: Attempt to modify read-only Queue property '{key}'.")

    def __repr__(self) -> str:
        return f"<Queue {self._name!r} actions={len(self._entries)} options={[o.value for o in self._options]}>"

    # -- Introspection --------------------------------------------------------

    @property
    def name(self) -> str:
        """The queue's registered name."""
        return self._name

    @property
    def conditions(self) -> Any:
        """The queue's conditions, copied if they are a list."""
        if isinstance(self._conditions, list):
            return list(self._conditions)
        return self._conditions

    @property
    def options(self) -> list[QueueOption]:
        """A copy of the queue's options."""
        return list(self._options)

    @property
    def actions(self) -> list[Action]:
        """Snapshot of the queued actions, in order."""
        return [entry.action.copy() for entry in self._entries]

    @property
    def action_count(self) -> int:
        """Number of queued actions."""
        return len(self._entries)

    @property
    def pending_checks(self) -> int:
        """Number of armed consumption checks that have not fired yet."""
        return len(self._pending)

    @property
    def strict_order(self) -> bool:
        return QueueOption.STRICT_ORDER in self._options

    @property
    def single_step(self) -> bool:
        return QueueOption.SINGLE_STEP in self._options

    # -- Mutation -------------------------------------------------------------

    def add(self, action: Any) -> None:
        """Append an action to the queue.

        Args:
            action: A command string, a callable, a list of those, or a
                mapping/Action with ``code`` and optional ``required`` and
                ``consumed`` fields.

        Raises:
            InvalidActionError: If the action is empty or malformed.
        """
        record = normalize_action(action)
        self._entries.append(_Entry.from_action(record))
        logger.debug(f"Queue '{self._name}': added action ({len(self._entries)} queued)")

    def reset(self) -> None:
        """Empty the action list."""
        self._entries.clear()
        if self._cancel_pending_checks:
            self.cancel_pending_checks()
        logger.info(f"Queue '{self._name}' reset")

    def cancel_pending_checks(self) -> None:
        """Cancel every armed consumption check."""
        for handle in self._pending:
            handle.cancel()
        if self._pending:
            logger.debug(f"Queue '{self._name}': cancelled {len(self._pending)} pending check(s)")
        self._pending.clear()

    # -- Scheduling -----------------------------------------------------------

    def do(self) -> None:
        """Execute actions while the queue's conditions allow it.

        Free actions run back to back. After an action that consumes a
        condition the loop pauses, and a check is armed that retries the
        action if the condition is still true after the verify delay.

        A call made while this queue is already running (from one of its own
        actions, or from another queue those actions drive) does not nest;
        it is recorded, and the running call makes another pass once the
        current one stops.
        """
        if self._running:
            self._redrive = True
            return

        self._running = True
        try:
            self._redrive = True
            while self._redrive:
                self._redrive = False
                self._run()
        finally:
            self._running = False
            self._redrive = False

    def _run(self) -> None:
        while self._entries:
            if not evaluate(self._condition, self._state):
                logger.debug(f"Queue '{self._name}': conditions not met")
                return

            entry = self._select()
            if not self._gate_open(entry):
                logger.debug(f"Queue '{self._name}': action gated, waiting")
                return

            try:
                execute(entry.code, self._sink)
            finally:
                self._discard(entry)

            if entry.consumed is not None:
                self._arm_check(entry)
                return

            if self.single_step:
                return

    def _select(self) -> _Entry:
        """Pick the next candidate according to the ordering policy."""
        if not self.strict_order:
            for entry in self._entries:
                if entry.consumed is None:
                    return entry
        return self._entries[0]

    def _gate_open(self, entry: _Entry) -> bool:
        # Both gates are always evaluated, required first
        results = [
            evaluate(gate, self._state)
            for gate in (entry.required, entry.consumed)
            if gate is not None
        ]
        return all(results)

    def _discard(self, entry: _Entry) -> None:
        for index, queued in enumerate(self._entries):
            if queued is entry:
                del self._entries[index]
                return

    def _arm_check(self, entry: _Entry) -> None:
        handle: Cancellable | None = None

        def check() -> None:
            self._pending.discard(handle)
            if self._still_unconsumed(entry):
                logger.info(f"Queue '{self._name}': consumed condition still set, retrying action")
                self._entries.insert(0, entry)
                self.do()
            else:
                logger.debug(f"Queue '{self._name}': consumed condition cleared")

        handle = self._scheduler.call_later(self._verify_delay, check)
        self._pending.add(handle)

    def _still_unconsumed(self, entry: _Entry) -> bool:
        """True if every top-level leaf of ``consumed`` is still truthy."""
        members = leaves(entry.consumed)
        still_set = sum(1 for member in members if evaluate(member, self._state))
        return still_set == len(members)
