"""Construction-time checks for queue arguments and action payloads."""

from collections.abc import Mapping
from typing import Any

from qemistry.errors import InvalidActionError, InvalidArgumentError
from qemistry.queues.models import Action, QueueOption

ACTION_FIELDS = ("code", "required", "consumed")

VALID_OPTIONS = frozenset(option.value for option in QueueOption)


def validate_name(name: Any) -> str:
    """Ensure a queue name was given and is a string."""
    if name is None:
        raise InvalidArgumentError("Qemistry: Must pass a Name as the first argument of Queue constructor.")
    if not isinstance(name, str):
        raise InvalidArgumentError("Qemistry: Name passed to Queue constructor must be a string.")
    return name


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_conditions(conditions: Any) -> Any:
    """Check queue conditions and return them (lists are copied).

    A bare boolean is a valid whole condition, but list members must be
    strings or callables.
    """
    if conditions is None:
        raise InvalidArgumentError(
            "Qemistry: Must pass Condition(s) as second argument of Queue constructor."
        )

    if isinstance(conditions, (list, tuple)):
        for cond in conditions:
            if isinstance(cond, (list, tuple, int, float)):
                raise InvalidArgumentError(
                    "Qemistry: Members of Conditional table may not be tables, numbers, or booleans."
                )
            if not isinstance(cond, str) and not callable(cond):
                raise InvalidArgumentError(
                    f"Qemistry: Members of Conditional table must be strings or functions, "
                    f"got {type(cond).__name__}."
                )
        return list(conditions)

    if _is_number(conditions):
        raise InvalidArgumentError("Qemistry: Conditional passed to Queue constructor may not be a number.")
    if not isinstance(conditions, (bool, str)) and not callable(conditions):
        raise InvalidArgumentError(
            f"Qemistry: Conditional passed to Queue constructor may not be a {type(conditions).__name__}."
        )
    return conditions


def _verify_option(option: Any) -> QueueOption:
    if not isinstance(option, str) or option not in VALID_OPTIONS:
        raise InvalidArgumentError(f"Qemistry: Invalid Option passed to Queue constructor: {option!r}.")
    return QueueOption(option)


def normalize_options(options: Any) -> list[QueueOption]:
    """Turn a single option or a list of options into a validated list."""
    if options is None:
        return []
    if isinstance(options, str):
        return [_verify_option(options)]
    if isinstance(options, (list, tuple)):
        return [_verify_option(opt) for opt in options]
    raise InvalidArgumentError(
        "Qemistry: May only pass a list or string as third argument of Queue constructor."
    )


def _is_code_leaf(value: Any) -> bool:
    return isinstance(value, str) or callable(value)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, Mapping)):
        return len(value) == 0
    return False


def _validate_field(field: str, value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        if not value:
            raise InvalidActionError(f"Qemistry: Action field '{field}' may not be an empty list.")
        for v in value:
            if not _is_code_leaf(v):
                raise InvalidActionError(
                    f"Qemistry: Value in Action table '{field}' must be a string or function."
                )
        return list(value)
    if not _is_code_leaf(value):
        raise InvalidActionError(
            f"Qemistry: Action field '{field}' must be a list, string, or function."
        )
    return value


def _from_fields(fields: Mapping[str, Any]) -> Action:
    unknown = set(fields) - set(ACTION_FIELDS)
    if unknown:
        raise InvalidActionError(
            f"Qemistry: Unknown Action field(s): {', '.join(sorted(unknown))}."
        )
    if _is_empty(fields.get("code")):
        raise InvalidActionError("Qemistry: Action table must contain a non-empty 'code' field.")

    values = {}
    for field in ACTION_FIELDS:
        value = fields.get(field)
        if value is not None:
            values[field] = _validate_field(field, value)
    return Action(**values)


def normalize_action(action: Any) -> Action:
    """Validate an action in any accepted shape and return an Action record.

    Accepted shapes:
        - a command string or a zero-argument callable;
        - a list of command strings and/or callables;
        - a mapping (or Action) with ``code`` and optional ``required``
          and ``consumed`` fields.

    Raises:
        InvalidActionError: For empty or malformed actions.
    """
    if _is_empty(action):
        raise InvalidActionError("Qemistry: Cannot add an empty Action to the Queue.")

    if isinstance(action, Action):
        return _from_fields(action.to_dict())

    if isinstance(action, Mapping):
        if "code" not in action:
            raise InvalidActionError("Qemistry: Action table must contain a 'code' field.")
        return _from_fields(action)

    if isinstance(action, (list, tuple)):
        for code in action:
            if not _is_code_leaf(code):
                raise InvalidActionError("Qemistry: Value in Action list must be a string or function.")
        return Action(code=list(action))

    if _is_code_leaf(action):
        return Action(code=action)

    raise InvalidActionError(
        "Qemistry: Invalid Action passed to Add. Must be a list, mapping, string, or function."
    )
