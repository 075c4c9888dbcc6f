import asyncio
from collections.abc import Callable
from concurrent.futures import Future
from functools import partial
from threading import Lock
from typing import Any

import structlog

from .result import Err
from .result import Ok
from .result import attempt
from .yieldable import Callback
from .yieldable import CallbackTask
from .yieldable import Collection
from .yieldable import NestedProgram
from .yieldable import Take
from .yieldable import Thenable
from .yieldable import Value
from .yieldable import classify
from .yieldable import failure

logger = structlog.get_logger()


class Once:
    """Deliver at most one outcome to a callback."""

    def __init__(self, callback: Callable[[BaseException | None, Any], Any]):
        self.__callback = callback
        self.__lock = Lock()
        self.__delivered = False

    def __call__(self, error: Any = None, value: Any = None, /, *rest: Any):
        with self.__lock:
            if self.__delivered:
                logger.debug("duplicate_delivery_ignored", error=repr(error))
                return
            self.__delivered = True
        if error is not None:
            self.__callback(failure(error), None)
        else:
            self.__callback(None, (value, *rest) if rest else value)

    @property
    def delivered(self) -> bool:
        return self.__delivered


def guard(take: Take, callback: Once) -> None:
    """Start a primitive, turning anything it raises into its failure."""
    match attempt(take, callback):
        case Err(error) if not callback.delivered:
            callback(error)
        case Err(error):
            logger.warning(
                "fault_after_delivery_ignored", error=repr(error), exc_info=error
            )


def wrap(obj: Any, /) -> Take:
    """Turn any yieldable into a ``take(callback)`` primitive."""
    match classify(obj):
        case NestedProgram(program):
            from .executor import Executor

            return Executor(program)
        case CallbackTask(take):
            return take
        case Thenable(target):
            return partial(settle, target)
        case Collection(items):
            return partial(gather, items)
        case Value(value):
            return partial(resolve, value)


def resolve(value: Any, callback: Callback) -> None:
    callback(None, value)


def settle(target: Any, callback: Callback) -> None:
    """Wait for a future or a promise-like object."""
    if not callable(getattr(target, "add_done_callback", None)):
        target.then(
            lambda value: callback(None, value),
            lambda reason: callback(failure(reason)),
        )
        return

    def on_done(future: Any):
        try:
            value = future.result()
        except BaseException as error:
            callback(error)
        else:
            callback(None, value)

    if isinstance(target, Future):
        # Thread pool futures call back on the worker thread.
        # Hop back to the running loop if there is one. Without a
        # loop the program resumes on the worker thread.
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            target.add_done_callback(
                lambda future: loop.call_soon_threadsafe(on_done, future)
            )
            return

    target.add_done_callback(on_done)


def gather(items: list[Any] | tuple[Any, ...], callback: Callback) -> None:
    """Resolve every item at once, keeping results in item order.

    The first item to fail completes the whole collection. Outcomes that
    arrive after that are dropped.
    """
    pack = list if isinstance(items, list) else tuple
    if not items:
        callback(None, pack())
        return

    results: list[Any] = [None] * len(items)
    remaining = len(items)
    settled = False

    def collect(index: int, error: BaseException | None, value: Any):
        nonlocal remaining, settled
        if settled:
            return
        if error is not None:
            settled = True
            callback(error)
            return
        results[index] = value
        remaining -= 1
        if remaining == 0:
            settled = True
            callback(None, pack(results))

    for index, item in enumerate(items):
        once = Once(partial(collect, index))
        match attempt(wrap, item):
            case Err(error):
                once(error)
            case Ok(take):
                guard(take, once)

