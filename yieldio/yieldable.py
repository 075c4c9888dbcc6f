"""The closed set of shapes a suspension value can take.

Programs yield arbitrary objects. Before the executor can wait on one,
``classify`` decides which of five variants it is. The order of the
checks is part of the contract, because an object can look like more
than one shape:

1. ``NestedProgram``: a generator or coroutine, or a function that
   creates one.
2. ``CallbackTask``: any other callable, called with a single
   ``callback(error, value)`` argument.
3. ``Thenable``: a future (``add_done_callback``) or a promise-like
   object (``then``).
4. ``Collection``: a list or tuple of yieldables.
5. ``Value``: anything else, which resolves to itself.

Wrapping an object in one of the variants by hand skips the checks.
"""

import inspect
from collections.abc import Callable
from collections.abc import Coroutine
from collections.abc import Generator
from dataclasses import dataclass
from typing import Any

type Callback = Callable[..., Any]
type Take = Callable[[Callback], Any]


class CallbackError(Exception):
    """A callback reported an error that is not an exception."""

    def __init__(self, error: Any):
        super().__init__(error)
        self.error = error


def failure(error: Any, /) -> BaseException:
    """Coerce a reported error into something that can be thrown."""
    return error if isinstance(error, BaseException) else CallbackError(error)


@dataclass(frozen=True)
class CallbackTask:
    take: Take


@dataclass(frozen=True)
class NestedProgram:
    program: Any


@dataclass(frozen=True)
class Thenable:
    target: Any


@dataclass(frozen=True)
class Collection:
    items: list[Any] | tuple[Any, ...]


@dataclass(frozen=True)
class Value:
    value: Any


type Yieldable = CallbackTask | NestedProgram | Thenable | Collection | Value


def is_program(obj: Any, /) -> bool:
    """Check for a live generator or coroutine."""
    return isinstance(obj, Generator | Coroutine)


def is_program_factory(obj: Any, /) -> bool:
    return inspect.isgeneratorfunction(obj) or inspect.iscoroutinefunction(obj)


def is_callback_task(obj: Any, /) -> bool:
    # Classes are callable, but yielding one means the class itself.
    return callable(obj) and not isinstance(obj, type)


def is_thenable(obj: Any, /) -> bool:
    return callable(getattr(obj, "add_done_callback", None)) or callable(
        getattr(obj, "then", None)
    )


def classify(obj: Any, /) -> Yieldable:
    """Decide which variant a yielded object is."""
    match obj:
        case CallbackTask() | NestedProgram() | Thenable() | Collection() | Value():
            return obj
        case _ if is_program(obj) or is_program_factory(obj):
            return NestedProgram(obj)
        case _ if is_callback_task(obj):
            return CallbackTask(obj)
        case _ if is_thenable(obj):
            return Thenable(obj)
        case list() | tuple():
            return Collection(obj)
        case _:
            return Value(obj)
