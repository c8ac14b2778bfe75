import functools
import logging
import types
import typing
from typing import Callable

import typing_extensions

from .async_utils import attach_callback
from .callback import split_callback
from .interface import WRAPPED_ATTR, CallStyle

logger = logging.getLogger(__name__)

P = typing_extensions.ParamSpec("P")
R = typing.TypeVar("R")


def is_wrapped(func) -> bool:
    return getattr(func, WRAPPED_ATTR, False) is True


def _dispatch(func, call_style: CallStyle, result, callback):
    if call_style == CallStyle.PROMISE:
        return result
    attach_callback(func, result, callback)
    return None


def _mark_wrapped(f_wrapped, func):
    functools.update_wrapper(f_wrapped, func)
    setattr(f_wrapped, WRAPPED_ATTR, True)
    return f_wrapped


def wrap_proxy_method(method: Callable[..., R]) -> Callable[..., typing.Optional[R]]:
    """Like wrap_promise, but for a function that is stored on a class.

    The receiver is taken as an explicit parameter, so it's never inspected as a possible
    callback, even for instances that are callable themselves."""

    def proxy_method(self, *args, **kwargs):
        call_style, args, callback = split_callback(args)
        res = method(self, *args, **kwargs)
        return _dispatch(method, call_style, res, callback)

    return _mark_wrapped(proxy_method, method)


class PromiseFunction:
    """Function returned by wrap_promise.

    Looked up through an instance, it binds like a regular method, except that the
    receiver is passed on explicitly and only the remaining arguments are checked for
    a trailing callback."""

    def __init__(self, func):
        functools.update_wrapper(self, func)
        setattr(self, WRAPPED_ATTR, True)
        self._func = func
        self._proxy_method = wrap_proxy_method(func)

    def __call__(self, *args, **kwargs):
        call_style, args, callback = split_callback(args)
        res = self._func(*args, **kwargs)
        return _dispatch(self._func, call_style, res, callback)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return types.MethodType(self._proxy_method, instance)

    def __repr__(self):
        return f"<wrap_promise {getattr(self._func, '__qualname__', self._func)!r}>"


def wrap_promise(func: Callable[P, R]) -> Callable[..., typing.Optional[R]]:
    """Let `func` be called both promise-style and callback-style.

    The returned function inspects its last positional argument. If it's callable, it is
    removed from the arguments and called as `callback(error, result)` once the awaitable
    returned by `func` settles, and the wrapper returns None. Otherwise the return value
    of `func` is passed through untouched.

    ```python
    @wrap_promise
    async def fetch(key):
        ...

    value = await fetch("a")
    fetch("a", lambda err, value: print(err, value))
    ```

    Exceptions raised synchronously by `func` are never passed to the callback, they
    propagate to the caller in both styles. Used on a method, `self` is never taken for
    the callback.
    """
    if not callable(func):
        raise TypeError(f"Argument {func!r} is not callable")
    if is_wrapped(func):
        logger.debug("%s is already wrapped", getattr(func, "__qualname__", func))
        return func
    return PromiseFunction(func)


wrap = wrap_promise
