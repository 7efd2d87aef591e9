"""Option values and their conversion to and from wire values.

Option values
-------------

An option value is exactly one of :class:`bool`, :class:`int` or :class:`str`.
There is no implicit coercion between them: ``1`` is not ``True`` and ``"8"``
is not ``8``.

:data:`NIL` stands for "no value in the requested scope", e.g. the local
value of a global-local option that was never set locally. It is not an error.

Wire values
-----------

Clients send arbitrary objects. :func:`to_option_value` accepts the three
option types plus ``None`` (meaning "unset", mapped to :data:`NIL`) and raises
:exc:`exc.ValueTypeMismatch` for anything else.
"""

from __future__ import annotations

import typing as t

from optscope.constants import OptionType

from . import exc

if t.TYPE_CHECKING:
    from typing import TypeAlias

    from typing_extensions import TypeGuard


class _NilValue:
    """Sentinel type for :data:`NIL`."""

    _instance: _NilValue | None = None

    def __new__(cls) -> _NilValue:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NIL"

    def __bool__(self) -> bool:
        return False


NIL = _NilValue()

OptionValue: TypeAlias = bool | int | str
MaybeOptionValue: TypeAlias = bool | int | str | _NilValue

_WIRE_TYPENAMES: dict[type, str] = {
    type(None): "nil",
    bool: "Boolean",
    int: "Integer",
    float: "Float",
    str: "String",
    bytes: "String",
    list: "Array",
    tuple: "Array",
    dict: "Dict",
}


def api_typename(obj: object) -> str:
    """Return the wire type name of *obj*, as used in error messages.

    >>> api_typename(1.5)
    'Float'
    >>> api_typename([1])
    'Array'
    >>> api_typename(object())
    'Object'
    """
    for type_, name in _WIRE_TYPENAMES.items():
        if type(obj) is type_:
            return name
    return "Object"


def is_nil(value: object) -> TypeGuard[_NilValue]:
    """Return True if *value* is :data:`NIL`.

    >>> is_nil(NIL)
    True
    >>> is_nil(False)
    False
    """
    return value is NIL


def to_option_value(obj: object) -> MaybeOptionValue:
    """Convert a wire value to an option value.

    >>> to_option_value(True)
    True
    >>> to_option_value(8)
    8
    >>> to_option_value("dark")
    'dark'
    >>> to_option_value(None)
    NIL

    >>> to_option_value(1.5)
    Traceback (most recent call last):
        ...
    optscope.exc.ValueTypeMismatch: Invalid 'value': expected valid option type, got Float
    """
    if obj is None:
        return NIL
    if type(obj) in (bool, int, str):
        return t.cast("OptionValue", obj)
    raise exc.ValueTypeMismatch(api_typename(obj))


def from_option_value(value: MaybeOptionValue) -> OptionValue | None:
    """Convert an option value to a wire value, :data:`NIL` becoming ``None``.

    >>> from_option_value(NIL) is None
    True
    >>> from_option_value("hide")
    'hide'
    """
    if is_nil(value):
        return None
    return t.cast("OptionValue", value)


def option_value_type(value: OptionValue) -> OptionType:
    """Return the :class:`OptionType` a value belongs to.

    ``bool`` is checked before ``int`` since it is a subclass of it.

    >>> option_value_type(False)
    <OptionType.Boolean: 'boolean'>
    >>> option_value_type(0)
    <OptionType.Number: 'number'>
    """
    if isinstance(value, bool):
        return OptionType.Boolean
    if isinstance(value, int):
        return OptionType.Number
    return OptionType.String


def value_typename(value: MaybeOptionValue) -> str:
    """Return the option type name of *value* for messages.

    >>> value_typename(NIL)
    'nil'
    >>> value_typename("x")
    'string'
    """
    if is_nil(value):
        return "nil"
    return option_value_type(t.cast("OptionValue", value)).value
