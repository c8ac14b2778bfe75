import asyncio
import typing
from typing import Any, Callable, Optional

from .interface import CallStyle

ErrorFirstCallback = Callable[[Optional[BaseException], Any], Any]


def is_callback(value) -> bool:
    # Coroutines, futures, lists and dicts aren't callable, so they always count as data
    return callable(value)


def split_callback(
    args: tuple,
) -> tuple[CallStyle, tuple, Optional[ErrorFirstCallback]]:
    """Split positional arguments into the arguments for the wrapped function and an optional callback."""
    if args and is_callback(args[-1]):
        return CallStyle.CALLBACK, args[:-1], args[-1]
    return CallStyle.PROMISE, args, None


class Callback:
    """Reports the outcome of an awaitable to an error-first callback.

    Instances are attached as done-callbacks to an asyncio future, so they run on the
    loop that resolved it, and only after the call that created them has returned."""

    def __init__(self, f: ErrorFirstCallback):
        self._f = f
        self._called = False

    def __call__(self, fut: "asyncio.Future[typing.Any]") -> None:
        if self._called:
            return
        self._called = True
        try:
            value = fut.result()
        except (Exception, asyncio.CancelledError) as exc:
            # the reason is passed as is, e.g. a CancelledError for a cancelled task
            self._f(exc, None)
        else:
            self._f(None, value)
