import enum


class CallStyle(enum.Enum):
    PROMISE = enum.auto()  # completion is reported through the returned awaitable
    CALLBACK = enum.auto()  # completion is reported through a trailing (error, result) callable


# Names starting with this prefix are private and skipped by default
PRIVATE_PREFIX = "_"

# Entries of the class namespace that construct instances and are never transformed
CONSTRUCTOR_NAMES = ("__init__", "__new__")

# Marks functions produced by wrap_promise so they aren't wrapped twice
WRAPPED_ATTR = "_wrap_promise_wrapped"
