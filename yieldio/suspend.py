from collections.abc import Awaitable
from collections.abc import Generator
from typing import Any


class Suspend[R](Awaitable[R]):
    """Await any yieldable from inside an ``async def`` program.

    Only an executor understands what this yields, so these can be
    awaited in programs driven by ``execute`` but not by asyncio.
    """

    def __init__(self, yieldable: Any, /):
        self.yieldable = yieldable

    def __repr__(self):
        return f"<{type(self).__name__} {self.yieldable!r}>"

    def __await__(self) -> Generator[Any, R, R]:
        return (yield self.yieldable)


def suspend(yieldable: Any, /) -> Suspend[Any]:
    return Suspend(yieldable)
