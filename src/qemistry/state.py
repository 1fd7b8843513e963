"""State resolvers that turn a dotted path into a boolean flag."""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping
from typing import Any

logger = logging.getLogger(__name__)

_SEGMENT = re.compile(r"\w+")

# Sentinel for lookups that fall off the end of the state tree
_MISSING = object()


class StateResolver(ABC):
    """Abstract source of externally-observed boolean flags."""

    @abstractmethod
    def get_bool(self, path: str) -> bool:
        """
        Resolve a dotted path to the current value of a flag.

        Args:
            path: Address of the flag, e.g. ``"sys.balance"``.

        Returns:
            The flag's truthiness. Paths that do not resolve yield False.
        """
        ...


def split_path(path: str) -> list[str]:
    """Split an address like ``"sys.balance"`` into its segments."""
    return _SEGMENT.findall(path)


class DictStateResolver(StateResolver):
    """Resolves paths against a caller-supplied nested mapping.

    Mapping levels are indexed by key; any other object is walked by
    attribute, so plain namespaces and dataclasses can live in the tree.
    """

    def __init__(self, state: MutableMapping[str, Any] | None = None) -> None:
        self.state: MutableMapping[str, Any] = state if state is not None else {}

    def get(self, path: str, default: Any = None) -> Any:
        """Return the raw value at ``path``, or ``default`` if unresolved."""
        segments = split_path(path)
        if not segments:
            return default

        node: Any = self.state
        for segment in segments:
            if isinstance(node, Mapping):
                node = node.get(segment, _MISSING)
            else:
                node = getattr(node, segment, _MISSING)
            if node is _MISSING:
                return default
        return node

    def get_bool(self, path: str) -> bool:
        value = self.get(path, _MISSING)
        if value is _MISSING:
            logger.debug(f"State path '{path}' did not resolve, treating as false")
            return False
        return bool(value)

    def set(self, path: str, value: Any) -> None:
        """Assign ``value`` at ``path``, creating intermediate mappings."""
        segments = split_path(path)
        if not segments:
            raise ValueError(f"Empty state path: {path!r}")

        node: Any = self.state
        for segment in segments[:-1]:
            if isinstance(node, MutableMapping):
                node = node.setdefault(segment, {})
            else:
                node = getattr(node, segment)

        if isinstance(node, MutableMapping):
            node[segments[-1]] = value
        else:
            setattr(node, segments[-1], value)
