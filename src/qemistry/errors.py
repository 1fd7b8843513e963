"""Exception taxonomy for queue construction, lookup and mutation."""


class QemistryError(Exception):
    """Base class for all errors raised by qemistry."""


class InvalidArgumentError(QemistryError, ValueError):
    """A queue name, condition or option has the wrong shape or type."""


class DuplicateNameError(QemistryError, ValueError):
    """A queue with the requested name is already registered."""


class NotFoundError(QemistryError, LookupError):
    """No queue is registered under the requested name."""


class InvalidActionError(QemistryError, ValueError):
    """An action passed to Queue.add is empty or malformed."""


class ReadOnlyViolationError(QemistryError, AttributeError):
    """Attempt to assign a property that has no setter."""
