"""Command sinks - where raw command strings from action code are sent."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

import yaml

from qemistry.state import DictStateResolver

logger = logging.getLogger(__name__)

SET_COMMAND = "set"


class CommandSink(ABC):
    """Abstract fire-and-forget destination for command strings."""

    @abstractmethod
    def send(self, command: str) -> None:
        """Forward ``command`` verbatim to the host environment."""
        ...


class LoggingCommandSink(CommandSink):
    """Writes every command to the log instead of a live environment."""

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def send(self, command: str) -> None:
        logger.log(self.level, f"send: {command}")


class CallbackCommandSink(CommandSink):
    """Hands every command to a callable, e.g. a client's write method."""

    def __init__(self, callback: Callable[[str], object]) -> None:
        self.callback = callback

    def send(self, command: str) -> None:
        self.callback(command)


class StateCommandSink(CommandSink):
    """Applies ``set <path> <value>`` commands to a state tree.

    Lets a declared queue flip its own flags, standing in for the host that
    would normally report the effect of a command. The value is parsed as a
    YAML scalar, so ``false``, ``0`` and ``ready`` become ``False``, ``0``
    and ``"ready"``. Every other command goes to ``fallback``.
    """

    def __init__(self, state: DictStateResolver, fallback: CommandSink | None = None) -> None:
        self.state = state
        self.fallback = fallback if fallback is not None else LoggingCommandSink()

    def send(self, command: str) -> None:
        parts = command.split(None, 2)
        if len(parts) == 3 and parts[0] == SET_COMMAND:
            _, path, raw = parts
            value = yaml.safe_load(raw)
            logger.info(f"set: {path} = {value!r}")
            self.state.set(path, value)
            return
        self.fallback.send(command)
