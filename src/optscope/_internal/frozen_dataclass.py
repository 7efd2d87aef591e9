"""Frozen dataclass decorator that keeps ``_``-prefixed attributes writable.

Used for values that must not change once built (resolved scopes, switch tokens,
option definitions) but still need private bookkeeping, such as marking a
resolved scope as consumed.

Note
----
This is an internal API not covered by versioning policy.
"""

from __future__ import annotations

import dataclasses
import functools
import typing as t

from typing_extensions import dataclass_transform

_T = t.TypeVar("_T")


@dataclass_transform(frozen_default=True)
def frozen_dataclass(cls: type[_T]) -> type[_T]:
    """Create a dataclass whose public fields cannot change after ``__init__``.

    Unlike ``dataclasses.dataclass(frozen=True)``, attributes starting with an
    underscore stay assignable, and the class may inherit from a mutable
    dataclass.

    Examples
    --------
    >>> @frozen_dataclass
    ... class Slot:
    ...     name: str
    ...     local: bool = False
    >>> slot = Slot(name="shiftwidth")
    >>> slot.name
    'shiftwidth'
    >>> slot.local = True
    Traceback (most recent call last):
        ...
    AttributeError: Slot is immutable: cannot modify field 'local'

    Private attributes remain writable:

    >>> slot._used = True
    >>> slot._used
    True

    Deleting fields is blocked too:

    >>> del slot.name
    Traceback (most recent call last):
        ...
    AttributeError: Slot is immutable: cannot delete field 'name'
    """
    cls = dataclasses.dataclass(cls)

    cls.__annotations__["_frozen"] = bool
    setattr(cls, "_frozen", False)

    original_init = cls.__init__

    @functools.wraps(original_init)
    def __init__(self: t.Any, *args: t.Any, **kwargs: t.Any) -> None:
        original_init(self, *args, **kwargs)
        object.__setattr__(self, "_frozen", True)

    def __setattr__(self: t.Any, name: str, value: t.Any) -> None:
        if getattr(self, "_frozen", False) and not name.startswith("_"):
            error_msg = f"{cls.__name__} is immutable: cannot modify field '{name}'"
            raise AttributeError(error_msg)
        object.__setattr__(self, name, value)

    def __delattr__(self: t.Any, name: str) -> None:
        if getattr(self, "_frozen", False):
            error_msg = f"{cls.__name__} is immutable: cannot delete field '{name}'"
            raise AttributeError(error_msg)
        object.__delattr__(self, name)

    setattr(cls, "__init__", __init__)
    setattr(cls, "__setattr__", __setattr__)
    setattr(cls, "__delattr__", __delattr__)

    return cls
