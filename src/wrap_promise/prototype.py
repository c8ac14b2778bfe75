"""Apply the dual calling convention to every method of a class.

```python
@wrap_prototype(ignore_methods=["close"])
class Client:
    async def get(self, key): ...

    def close(self): ...

client = Client()
await client.get("a")
client.get("a", lambda err, value: ...)
```
"""

import collections.abc
import dataclasses
import inspect
import logging
import typing
from typing import Any, Optional, Union

from .async_wrap import is_wrapped, wrap_proxy_method
from .exceptions import InvalidOptionsError
from .interface import CONSTRUCTOR_NAMES, PRIVATE_PREFIX

logger = logging.getLogger(__name__)

C = typing.TypeVar("C", bound=type)


@dataclasses.dataclass(frozen=True)
class WrapOptions:
    """Selects which methods wrap_prototype transforms."""

    ignore_methods: frozenset = frozenset()
    transform_private_methods: bool = False

    @classmethod
    def from_value(cls, options: Union["WrapOptions", typing.Mapping[str, Any], None]) -> "WrapOptions":
        if options is None:
            return cls()
        if isinstance(options, WrapOptions):
            return options
        if not isinstance(options, collections.abc.Mapping):
            raise InvalidOptionsError(f"Options must be a WrapOptions or a mapping, got {type(options).__name__}")

        unknown = set(options) - {f.name for f in dataclasses.fields(cls)}
        if unknown:
            raise InvalidOptionsError(f"Unknown options: {', '.join(sorted(unknown))}")
        return cls().replace(**options)

    def replace(self, ignore_methods=None, transform_private_methods=None) -> "WrapOptions":
        changes: dict[str, Any] = {}
        if ignore_methods is not None:
            changes["ignore_methods"] = _method_names(ignore_methods)
        if transform_private_methods is not None:
            changes["transform_private_methods"] = bool(transform_private_methods)
        return dataclasses.replace(self, **changes)


def _method_names(names) -> frozenset:
    # a bare string would otherwise be read as a collection of one-letter names
    if isinstance(names, str) or not isinstance(names, collections.abc.Iterable):
        raise InvalidOptionsError(f"ignore_methods must be a collection of method names, got {names!r}")
    return frozenset(names)


def _is_special(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def select_methods(cls: type, options: Optional[WrapOptions] = None) -> set[str]:
    """Names of the methods defined on `cls` itself that wrap_prototype would transform.

    Inherited members, static and class methods, properties and other descriptors
    are never selected, nor are the constructor and other special methods.
    """
    if options is None:
        options = WrapOptions()

    selected = set()
    for name, member in cls.__dict__.items():
        if name in CONSTRUCTOR_NAMES or _is_special(name):
            continue
        if name.startswith(PRIVATE_PREFIX) and not options.transform_private_methods:
            continue
        if name in options.ignore_methods:
            continue
        if not inspect.isfunction(member):
            continue
        selected.add(name)
    return selected


def _wrap_class(cls: C, options: WrapOptions) -> C:
    if not inspect.isclass(cls):
        raise TypeError(f"Argument {cls!r} is not a class")

    for name in sorted(select_methods(cls, options)):
        method = cls.__dict__[name]
        if is_wrapped(method):
            logger.debug("Skipping %s.%s, already wrapped", cls.__qualname__, name)
            continue
        setattr(cls, name, wrap_proxy_method(method))
        logger.debug("Wrapped %s.%s", cls.__qualname__, name)
    return cls


@typing.overload
def wrap_prototype(
    cls: C,
    options: Union[WrapOptions, typing.Mapping[str, Any], None] = None,
    *,
    ignore_methods: Optional[typing.Iterable[str]] = None,
    transform_private_methods: Optional[bool] = None,
) -> C: ...


@typing.overload
def wrap_prototype(
    cls: None = None,
    options: Union[WrapOptions, typing.Mapping[str, Any], None] = None,
    *,
    ignore_methods: Optional[typing.Iterable[str]] = None,
    transform_private_methods: Optional[bool] = None,
) -> typing.Callable[[C], C]: ...


def wrap_prototype(cls=None, options=None, *, ignore_methods=None, transform_private_methods=None):
    """Make every selected method of `cls` callable both promise-style and callback-style.

    The class is modified in place and returned, so this also works as a class decorator,
    with or without arguments. Keyword arguments override the matching entries of `options`.
    Names in `ignore_methods` that the class doesn't define are ignored.
    """
    resolved = WrapOptions.from_value(options).replace(
        ignore_methods=ignore_methods,
        transform_private_methods=transform_private_methods,
    )
    if cls is None:
        return lambda cls: _wrap_class(cls, resolved)
    return _wrap_class(cls, resolved)
