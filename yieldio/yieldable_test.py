import asyncio
from concurrent.futures import Future

import pytest

from yieldio import execute
from yieldio.adapter import adapt
from yieldio.yieldable import CallbackError
from yieldio.yieldable import CallbackTask
from yieldio.yieldable import Collection
from yieldio.yieldable import NestedProgram
from yieldio.yieldable import Thenable
from yieldio.yieldable import Value
from yieldio.yieldable import classify
from yieldio.yieldable import failure


def program():
    yield


async def coroutine_program():
    pass


def task(callback):
    callback(None, 1)


class Promise:
    def then(self, on_fulfilled, on_rejected):
        on_fulfilled(1)


class CallableFuture(Future):
    def __call__(self, callback):
        callback(None, 1)


class TestClassify:
    def test_generator_function_is_nested_program(self):
        assert classify(program) == NestedProgram(program)

    def test_generator_is_nested_program(self):
        generator = program()
        assert classify(generator) == NestedProgram(generator)

    def test_coroutine_is_nested_program(self):
        coroutine = coroutine_program()
        try:
            assert classify(coroutine) == NestedProgram(coroutine)
        finally:
            coroutine.close()

    def test_coroutine_function_is_nested_program(self):
        assert classify(coroutine_program) == NestedProgram(coroutine_program)

    def test_function_is_callback_task(self):
        assert classify(task) == CallbackTask(task)

    def test_lambda_is_callback_task(self):
        fn = lambda callback: callback(None)  # noqa: E731
        assert classify(fn) == CallbackTask(fn)

    def test_executor_is_callback_task(self):
        executor = execute(program)
        assert classify(executor) == CallbackTask(executor)

    def test_pending_is_callback_task(self):
        pending = adapt(lambda callback: callback(None, 1))()
        assert classify(pending) == CallbackTask(pending)

    def test_future_is_thenable(self):
        future = Future()
        assert classify(future) == Thenable(future)

    def test_asyncio_future_is_thenable(self, loop):
        future = loop.create_future()
        assert classify(future) == Thenable(future)

    def test_promise_is_thenable(self):
        promise = Promise()
        assert classify(promise) == Thenable(promise)

    def test_callable_wins_over_thenable(self):
        future = CallableFuture()
        assert classify(future) == CallbackTask(future)

    def test_list_is_collection(self):
        assert classify([1, task]) == Collection([1, task])

    def test_tuple_is_collection(self):
        assert classify((1, 2)) == Collection((1, 2))

    @pytest.mark.parametrize(
        "value",
        [None, 0, 1.5, "text", b"bytes", {"a": 1}, {1, 2}, object, Exception()],
    )
    def test_everything_else_is_value(self, value):
        assert classify(value) == Value(value)

    def test_plain_iterator_is_value(self):
        iterator = iter([1, 2])
        assert classify(iterator) == Value(iterator)

    @pytest.mark.parametrize(
        "tagged",
        [
            Value([1, 2]),
            Value(task),
            CallbackTask(task),
            NestedProgram(program),
            Thenable(Promise()),
            Collection([]),
        ],
    )
    def test_tagged_variants_pass_through(self, tagged):
        assert classify(tagged) is tagged


class TestFailure:
    def test_exceptions_are_kept(self):
        error = ValueError("boom")
        assert failure(error) is error

    def test_base_exceptions_are_kept(self):
        error = asyncio.CancelledError()
        assert failure(error) is error

    def test_other_errors_are_wrapped(self):
        error = failure("boom")
        assert isinstance(error, CallbackError)
        assert error.error == "boom"
