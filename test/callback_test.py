import asyncio
import pytest
from unittest.mock import MagicMock

from wrap_promise import CallStyle, is_callback, split_callback
from wrap_promise.callback import Callback


def noop(err, res):
    pass


async def coro_func():
    pass


@pytest.mark.parametrize("value", [noop, lambda err, res: None, print, MagicMock()])
def test_is_callback_true(value):
    assert is_callback(value)


@pytest.mark.parametrize("value", [None, 1, "text", {"foo": "bar"}, [noop], (noop,), object()])
def test_is_callback_false(value):
    assert not is_callback(value)


def test_awaitables_are_not_callbacks():
    coro = coro_func()
    try:
        assert not is_callback(coro)
    finally:
        coro.close()

    loop = asyncio.new_event_loop()
    try:
        assert not is_callback(loop.create_future())
    finally:
        loop.close()


def test_split_callback_without_callback():
    data = {"foo": "bar"}
    assert split_callback((1, data)) == (CallStyle.PROMISE, (1, data), None)
    assert split_callback(()) == (CallStyle.PROMISE, (), None)


def test_split_callback_with_callback():
    arg1, arg2 = {}, {}
    call_style, args, callback = split_callback((arg1, arg2, noop))
    assert call_style == CallStyle.CALLBACK
    assert args == (arg1, arg2)
    assert args[0] is arg1 and args[1] is arg2
    assert callback is noop


def test_split_callback_only_checks_last_argument():
    args = (noop, 1)
    assert split_callback(args) == (CallStyle.PROMISE, args, None)


def test_callback_reports_result():
    f = MagicMock()
    loop = asyncio.new_event_loop()
    try:
        fut = loop.create_future()
        fut.set_result("yay")
        Callback(f)(fut)
    finally:
        loop.close()
    f.assert_called_once_with(None, "yay")


def test_callback_reports_exception():
    f = MagicMock()
    error = ValueError("boo")
    loop = asyncio.new_event_loop()
    try:
        fut = loop.create_future()
        fut.set_exception(error)
        Callback(f)(fut)
    finally:
        loop.close()
    f.assert_called_once_with(error, None)


def test_callback_reports_cancellation():
    f = MagicMock()
    loop = asyncio.new_event_loop()
    try:
        fut = loop.create_future()
        fut.cancel()
        Callback(f)(fut)
    finally:
        loop.close()
    (err, res), _ = f.call_args
    assert isinstance(err, asyncio.CancelledError)
    assert res is None


def test_callback_called_at_most_once():
    f = MagicMock()
    loop = asyncio.new_event_loop()
    try:
        fut = loop.create_future()
        fut.set_result(1)
        cb = Callback(f)
        cb(fut)
        cb(fut)
    finally:
        loop.close()
    assert f.call_count == 1


def test_errors_in_callback_propagate():
    def bad_callback(err, res):
        raise RuntimeError("callback failed")

    loop = asyncio.new_event_loop()
    try:
        fut = loop.create_future()
        fut.set_result(1)
        with pytest.raises(RuntimeError, match="callback failed"):
            Callback(bad_callback)(fut)
    finally:
        loop.close()
