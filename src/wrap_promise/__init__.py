from .async_wrap import is_wrapped, wrap, wrap_promise
from .callback import is_callback, split_callback
from .exceptions import InvalidOptionsError, NotAwaitableError, WrapPromiseError
from .interface import CallStyle
from .prototype import WrapOptions, select_methods, wrap_prototype

__all__ = [
    "CallStyle",
    "InvalidOptionsError",
    "NotAwaitableError",
    "WrapOptions",
    "WrapPromiseError",
    "is_callback",
    "is_wrapped",
    "select_methods",
    "split_callback",
    "wrap",
    "wrap_promise",
    "wrap_prototype",
]
