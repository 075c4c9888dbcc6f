"""Where failures go when nobody is listening for them.

A failure that ends a program after it has suspended, with no completion
callback to receive it, cannot be raised: the stack that would receive
it belongs to whatever event happened to resume the program. It goes to
the fault handler instead, which is captured when the execution starts.
The default handler, ``abort``, treats it as fatal. ``report`` only logs it.
"""

import os
from collections.abc import Callable
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog

logger = structlog.get_logger()

type FaultHandler = Callable[[BaseException], None]

ABORT_EXIT_CODE = 70


def report(error: BaseException, /) -> None:
    """Log an unhandled failure."""
    logger.critical("unhandled_failure", error=repr(error), exc_info=error)


def abort(error: BaseException, /) -> None:
    """Log an unhandled failure and terminate the process."""
    report(error)
    os._exit(ABORT_EXIT_CODE)


_fault_handler = ContextVar[FaultHandler]("yieldio.fault_handler", default=abort)


@contextmanager
def fault_handler(handler: FaultHandler, /) -> Iterator[FaultHandler]:
    token = _fault_handler.set(handler)
    try:
        yield handler
    finally:
        _fault_handler.reset(token)


def current_fault_handler() -> FaultHandler:
    return _fault_handler.get()
