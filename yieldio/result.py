from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class Ok[T]:
    value: T


@dataclass
class Err[E: BaseException]:
    error: E


type Result[T, E: BaseException] = Ok[T] | Err[E]


def attempt[T](fn: Callable[..., T], /, *args: Any) -> Result[T, Exception]:
    """Call a function inside a fault boundary."""
    try:
        return Ok(fn(*args))
    except Exception as error:
        return Err(error)
