import asyncio
from collections.abc import Callable
from collections.abc import Coroutine
from collections.abc import Generator
from dataclasses import dataclass
from enum import Enum
from functools import partial
from threading import Lock
from typing import Any

import structlog

from .fault import current_fault_handler
from .result import Err
from .result import Ok
from .result import Result
from .result import attempt
from .wrap import Once
from .wrap import guard
from .wrap import wrap
from .yieldable import Callback
from .yieldable import is_program

logger = structlog.get_logger()

type Program = Generator[Any, Any, Any] | Coroutine[Any, Any, Any]


class State(Enum):
    RUNNING = "running"
    SUSPENDED = "suspended"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Step:
    produced: Any
    finished: bool


class Executor:
    """Drive a suspendable program to completion.

    The program is a generator or coroutine, or a function that creates
    one. Calling the executor with an optional ``done(error, value)``
    callback starts a new execution. Executors built from a function can
    be called any number of times, and each call gets its own program.
    Executors built from a live generator can only be called once.

    An executor is itself a ``take(callback)`` primitive, so one program
    can yield another program's executor.
    """

    def __init__(self, program: Program | Callable[[], Program], /):
        if is_program(program):
            self.__program: Program | None = program
            self.__factory = None
        elif callable(program):
            self.__program = None
            self.__factory = program
        else:
            raise TypeError(
                "Expected a generator, a coroutine, or a function creating one, "
                f"got {type(program).__name__}"
            )
        self.name = getattr(program, "__qualname__", None) or repr(program)

    def __repr__(self):
        return f"<{type(self).__name__} {self.name!r}>"

    def __call__(self, done: Callback | None = None, /) -> "Execution":
        execution = Execution(self.__create(), name=self.name, done=done)
        execution.start()
        return execution

    def __create(self) -> Program:
        if self.__factory is None:
            if self.__program is None:
                raise RuntimeError(f"{self!r} was already started")
            program, self.__program = self.__program, None
            return program

        program = self.__factory()
        if not is_program(program):
            raise TypeError(
                f"{self.name} returned {type(program).__name__}, "
                "not a generator or coroutine"
            )
        return program


def execute(program: Program | Callable[[], Program], /) -> Executor:
    """Create an executor for a program."""
    return Executor(program)


class Execution:
    """A single run of a program.

    Each step resumes the program, resolves what it yielded, and waits
    for that to call back. Resuming happens in a loop rather than from
    inside the callback, so primitives that call back immediately do
    not deepen the stack.

    One thread drives the loop at a time. An outcome that arrives from
    another thread while the loop runs is left for the driving thread
    to pick up.
    """

    def __init__(self, program: Program, *, name: str, done: Callback | None):
        self.__program = program
        self.__name = name
        self.__done = done
        self.__fault_handler = current_fault_handler()
        self.__lock = Lock()
        self.__state = State.RUNNING
        self.__pending: Result[Any, BaseException] | None = None
        self.__driving = False
        self.__synchronous = True
        self.__unhandled: BaseException | None = None
        self.__steps = 0

    def __repr__(self):
        return f"<{type(self).__name__} {self.__name!r} {self.__state.value}>"

    @property
    def state(self) -> State:
        return self.__state

    @property
    def steps(self) -> int:
        """The number of times the program has suspended."""
        return self.__steps

    def start(self):
        logger.debug("execution_started", program=self.__name)
        self.__pending = Ok(None)
        self.__driving = True
        self.__drive()

        # Nothing asynchronous has happened yet, so the caller is still
        # on the stack and can be given the failure directly.
        with self.__lock:
            self.__synchronous = False
            error, self.__unhandled = self.__unhandled, None
        if error is not None:
            raise error

    def __drive(self):
        try:
            while True:
                with self.__lock:
                    outcome, self.__pending = self.__pending, None
                    if outcome is None:
                        self.__driving = False
                        return
                self.__state = State.RUNNING
                logger.debug(
                    "execution_resumed",
                    program=self.__name,
                    failed=isinstance(outcome, Err),
                )
                match self.__resume(outcome):
                    case Err(error):
                        self.__complete(error, None)
                    case Ok(Step(produced, finished)):
                        self.__suspend(produced, finished)
        except BaseException:
            with self.__lock:
                self.__driving = False
            raise

    def __resume(self, outcome: Result[Any, BaseException]) -> Result[Step, Any]:
        assert self.__program is not None
        try:
            match outcome:
                case Ok(value):
                    produced = self.__program.send(value)
                case Err(error):
                    produced = self.__program.throw(error)
        except StopIteration as stop:
            return Ok(Step(stop.value, finished=True))
        except (Exception, asyncio.CancelledError) as error:
            return Err(error)
        return Ok(Step(produced, finished=False))

    def __suspend(self, produced: Any, finished: bool):
        self.__state = State.SUSPENDED
        if not finished:
            self.__steps += 1
            logger.debug(
                "execution_suspended", program=self.__name, step=self.__steps
            )
        callback = Once(partial(self.__settle, finished))
        match attempt(wrap, produced):
            case Ok(take):
                guard(take, callback)
            case Err(error):
                callback(error)

    def __settle(self, finished: bool, error: BaseException | None, value: Any):
        if finished:
            self.__complete(error, value)
            return

        with self.__lock:
            self.__pending = Ok(value) if error is None else Err(error)
            if self.__driving:
                return
            self.__driving = True
        self.__drive()

    def __complete(self, error: BaseException | None, value: Any):
        if self.__state is State.COMPLETED:
            return
        self.__state = State.COMPLETED
        self.__program = None

        if error is None:
            logger.debug("execution_succeeded", program=self.__name)
        else:
            logger.debug("execution_failed", program=self.__name, error=repr(error))

        if self.__done is None:
            if error is None:
                return
            with self.__lock:
                if self.__synchronous:
                    self.__unhandled = error
                    return
            self.__fault_handler(error)
            return

        try:
            self.__done(error, value)
        except Exception as fault:
            self.__fault_handler(fault)
