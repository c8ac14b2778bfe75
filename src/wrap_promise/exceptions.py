class WrapPromiseError(Exception):
    """Base class for errors raised by wrap_promise itself (never for errors of wrapped code)."""


class NotAwaitableError(WrapPromiseError, TypeError):
    """A callback was passed, but the wrapped function didn't return anything awaitable.

    This typically happens when a synchronous method of a transformed class is
    called with a trailing callback. The return value is available as `.value`."""

    def __init__(self, func, value):
        self.func = func
        self.value = value
        name = getattr(func, "__qualname__", repr(func))
        super().__init__(
            f"{name} was called with a callback but returned {type(value).__name__!r}, which is not awaitable"
        )


class InvalidOptionsError(WrapPromiseError, ValueError):
    pass
