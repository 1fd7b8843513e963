"""Action queues and the registry that owns them."""

from qemistry.queues.models import Action, QueueOption
from qemistry.queues.queue import Queue
from qemistry.queues.registry import QueueRegistry

__all__ = [
    "Action",
    "Queue",
    "QueueOption",
    "QueueRegistry",
]
