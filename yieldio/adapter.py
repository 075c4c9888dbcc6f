import inspect
from collections.abc import Callable
from functools import wraps
from threading import Lock
from typing import Any
from typing import Literal

import structlog

from .yieldable import Callback

logger = structlog.get_logger()

type Arity = int | Literal["declared"] | None


class AlreadyTaken(Exception):
    pass


class Pending:
    """A single-give, single-take box for the outcome of a callback call.

    The adapted function gives its callback arguments, and the program
    takes them by calling the box with its own callback. Whichever
    happens second delivers the outcome, so it is delivered exactly once
    no matter the order.
    """

    def __init__(self):
        self.__lock = Lock()
        self.__outcome: tuple[Any, ...] | None = None
        self.__callback: Callback | None = None
        self.__taken = False

    def __repr__(self):
        state = "given" if self.__outcome is not None else "waiting"
        return f"<{type(self).__name__} {state}>"

    def give(self, *outcome: Any):
        with self.__lock:
            if self.__outcome is not None:
                logger.debug("pending_already_given", outcome=repr(outcome))
                return
            self.__outcome = outcome
            callback = self.__callback
        if callback is not None:
            callback(*outcome)

    def __call__(self, callback: Callback, /):
        with self.__lock:
            if self.__taken:
                raise AlreadyTaken
            self.__taken = True
            self.__callback = callback
            outcome = self.__outcome
        if outcome is not None:
            callback(*outcome)

    def given(self) -> bool:
        return self.__outcome is not None


def declared_arity(fn: Callable[..., Any], /) -> int:
    """Count the positional arguments to forward, leaving room for a callback."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError) as error:
        raise TypeError(f"Cannot read the signature of {fn!r}") from error

    positional = [
        parameter
        for parameter in signature.parameters.values()
        if parameter.kind
        in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD)
    ]
    if not positional:
        raise TypeError(f"{fn!r} has no positional parameter for a callback")
    return len(positional) - 1


def adapt(fn: Callable[..., Any], /, *, arity: Arity = None) -> Callable[..., Pending]:
    """Adapt a function that takes a trailing callback into one that can be yielded.

    ``adapt(fn)(*args)`` calls ``fn(*args, callback)`` right away and
    returns a ``Pending`` box for the outcome. The ``arity`` limits how
    many positional arguments reach ``fn``: ``None`` forwards them all,
    an integer forwards that many, and ``"declared"`` forwards one fewer
    than ``fn`` declares.
    """
    if not callable(fn):
        raise TypeError(f"Expected a callable, got {type(fn).__name__}")

    match arity:
        case None:
            count = None
        case "declared":
            count = declared_arity(fn)
        case int() if arity >= 0:
            count = arity
        case _:
            raise TypeError(f"Invalid arity: {arity!r}")

    @wraps(fn)
    def adapted(*args: Any, **kwargs: Any) -> Pending:
        pending = Pending()
        fn(*args[:count], pending.give, **kwargs)
        return pending

    return adapted
