"""Data models for action queues."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

# A string, a zero-argument callable, or a list of those
Expression = Union[str, Callable[[], Any], list[Union[str, Callable[[], Any]]]]


class QueueOption(str, Enum):
    """Options changing how a queue picks and continues actions."""

    STRICT_ORDER = "strict_order"  # Always attempt the first action
    SINGLE_STEP = "single_step"  # At most one action per do() call


@dataclass
class Action:
    """A schedulable unit of work.

    ``required`` must hold every time the action is a candidate.
    ``consumed`` must hold right before execution and is expected to turn
    false as a result of running ``code``; if it does not, the action is
    retried.
    """

    code: Expression
    required: Expression | None = None
    consumed: Expression | None = None

    def copy(self) -> "Action":
        """Return a copy whose list fields are independent of this one."""
        return Action(
            code=_copy_expression(self.code),
            required=_copy_expression(self.required),
            consumed=_copy_expression(self.consumed),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the populated fields only."""
        data: dict[str, Any] = {"code": _copy_expression(self.code)}
        if self.required is not None:
            data["required"] = _copy_expression(self.required)
        if self.consumed is not None:
            data["consumed"] = _copy_expression(self.consumed)
        return data


def _copy_expression(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_copy_expression(v) for v in value]
    return value
