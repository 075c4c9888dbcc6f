"""Bridges between executors and an asyncio event loop."""

import asyncio
from collections.abc import Callable
from typing import Any

from .executor import Program
from .executor import execute


def to_future(
    program: Program | Callable[[], Program],
    /,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> asyncio.Future[Any]:
    """Start a program and return a future for its outcome."""
    future = (loop or asyncio.get_running_loop()).create_future()

    def done(error: BaseException | None, value: Any):
        if future.done():
            return
        if isinstance(error, asyncio.CancelledError):
            future.cancel()
        elif error is not None:
            future.set_exception(error)
        else:
            future.set_result(value)

    execute(program)(done)
    return future


def run(program: Program | Callable[[], Program], /) -> Any:
    """Run a program to completion on a new event loop."""

    async def main():
        return await to_future(program)

    return asyncio.run(main())


def later(
    value: Any = None,
    /,
    *,
    error: BaseException | None = None,
    delay: float = 0.0,
) -> Callable[[Callable[..., Any]], None]:
    """Create a callback task that completes on a later turn of the running loop."""

    def take(callback: Callable[..., Any]):
        loop = asyncio.get_running_loop()
        if delay:
            loop.call_later(delay, callback, error, value)
        else:
            loop.call_soon(callback, error, value)

    return take
