"""Qemistry - named action queues gated on boolean conditions."""

from qemistry.errors import (
    DuplicateNameError,
    InvalidActionError,
    InvalidArgumentError,
    NotFoundError,
    QemistryError,
    ReadOnlyViolationError,
)
from qemistry.queues import Action, Queue, QueueOption, QueueRegistry
from qemistry.scheduling import AsyncioScheduler
from qemistry.sinks import CallbackCommandSink, LoggingCommandSink, StateCommandSink
from qemistry.state import DictStateResolver

__all__ = [
    "Action",
    "AsyncioScheduler",
    "CallbackCommandSink",
    "DictStateResolver",
    "DuplicateNameError",
    "InvalidActionError",
    "InvalidArgumentError",
    "LoggingCommandSink",
    "NotFoundError",
    "QemistryError",
    "Queue",
    "QueueOption",
    "QueueRegistry",
    "ReadOnlyViolationError",
    "StateCommandSink",
]
