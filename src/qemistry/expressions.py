"""Condition and code expression trees.

Raw expressions are the loose shapes callers write: strings, callables,
booleans and (nested) lists. They are compiled once into small tagged
node types, and evaluation/execution is a structural walk over those nodes.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union

from qemistry.sinks import CommandSink
from qemistry.state import StateResolver


# -- Condition nodes ----------------------------------------------------------


@dataclass(frozen=True)
class Literal:
    """A constant truth value."""

    value: bool


@dataclass(frozen=True)
class Predicate:
    """A zero-argument callable whose result is used as a boolean."""

    func: Callable[[], Any]


@dataclass(frozen=True)
class PathRef:
    """A dotted path naming a flag in external state."""

    path: str


@dataclass(frozen=True)
class AllOf:
    """Conjunction over every item."""

    items: tuple["Condition", ...]


Condition = Union[Literal, Predicate, PathRef, AllOf]


# -- Code nodes ---------------------------------------------------------------


@dataclass(frozen=True)
class Command:
    """A raw command string for the command sink."""

    text: str


@dataclass(frozen=True)
class Call:
    """A zero-argument callable invoked for its side effect."""

    func: Callable[[], Any]


@dataclass(frozen=True)
class Steps:
    """Sequential composition of code nodes."""

    items: tuple["Code", ...]


Code = Union[Command, Call, Steps]


def compile_condition(raw: Any) -> Condition:
    """Compile a raw condition into a Condition node.

    Raises:
        TypeError: If ``raw`` (or any nested item) is not a bool, string,
            callable, list or tuple.
    """
    if isinstance(raw, bool):
        return Literal(raw)
    if isinstance(raw, str):
        return PathRef(raw)
    if isinstance(raw, (list, tuple)):
        return AllOf(tuple(compile_condition(item) for item in raw))
    if callable(raw):
        return Predicate(raw)
    raise TypeError(f"Cannot use {type(raw).__name__} as a condition")


def compile_code(raw: Any) -> Code:
    """Compile raw action code into a Code node.

    Raises:
        TypeError: If ``raw`` (or any nested item) is not a string,
            callable, list or tuple.
    """
    if isinstance(raw, str):
        return Command(raw)
    if isinstance(raw, (list, tuple)):
        return Steps(tuple(compile_code(item) for item in raw))
    if callable(raw):
        return Call(raw)
    raise TypeError(f"Cannot use {type(raw).__name__} as action code")


def evaluate(condition: Condition, state: StateResolver) -> bool:
    """Evaluate a condition tree to a single boolean.

    Every leaf of an AllOf is evaluated, even after one of them turns out
    false, so side-effecting predicates later in the list always run.
    """
    if isinstance(condition, AllOf):
        result = True
        for item in condition.items:
            if not evaluate(item, state):
                result = False
        return result
    if isinstance(condition, PathRef):
        return state.get_bool(condition.path)
    if isinstance(condition, Predicate):
        return bool(condition.func())
    if isinstance(condition, Literal):
        return condition.value
    raise TypeError(f"Unknown condition node: {condition!r}")


def leaves(condition: Condition) -> tuple[Condition, ...]:
    """Top-level members of a condition: its items for AllOf, else itself."""
    if isinstance(condition, AllOf):
        return condition.items
    return (condition,)


def execute(code: Code, sink: CommandSink) -> None:
    """Run a code tree in document order."""
    if isinstance(code, Steps):
        for item in code.items:
            execute(item, sink)
    elif isinstance(code, Command):
        sink.send(code.text)
    elif isinstance(code, Call):
        code.func()
    else:
        raise TypeError(f"Unknown code node: {code!r}")
