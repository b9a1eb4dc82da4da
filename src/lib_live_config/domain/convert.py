"""Conversion of stored values into requested Python types.

Purpose
-------
Lookups ask for a value "as" some Python type. This module decides whether a
stored :data:`~lib_live_config.domain.values.Value` can be presented as that
type and performs the conversion. A failed conversion is reported as ``None``
so ``lookup`` can treat it exactly like an absent name.

Contents
--------
* :func:`convert` – public entry point.
* ``_convert_sequence`` / ``_convert_tuple`` – helpers for parameterised
  ``list[...]`` and ``tuple[...]`` targets.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Any, get_args, get_origin

from .values import Value, thaw_value

_MISSING = object()


def convert(value: Value | None, as_type: Any = None) -> Any:
    """Return *value* converted to *as_type*, or ``None`` when impossible.

    Supported targets
    -----------------
    ``None`` / ``object``
        The stored value unchanged.
    ``bool`` / ``int`` / ``str``
        Only values of exactly that kind (``True`` is not an ``int`` here).
    ``float`` / ``Fraction``
        Integers widened to the requested numeric type.
    ``bytes``
        Strings encoded as UTF-8.
    ``list`` / ``tuple`` and ``list[T]`` / ``tuple[T, ...]`` / ``tuple[A, B]``
        List values, element-wise converted when parameterised.

    Examples
    --------
    >>> convert(5, int), convert(True, int), convert(5, float)
    (5, None, 5.0)
    >>> convert((1, 2), list[int]), convert((1, "x"), list[int])
    ([1, 2], None)
    >>> convert((1, "x"), tuple[int, str])
    (1, 'x')
    """

    if value is None:
        return None
    if as_type is None or as_type is object:
        return value
    origin = get_origin(as_type)
    if origin is list:
        return _convert_sequence(value, get_args(as_type), list)
    if origin is tuple:
        return _convert_tuple(value, get_args(as_type))
    result = _convert_scalar(value, as_type)
    return None if result is _MISSING else result


def _convert_scalar(value: Value, as_type: Any) -> Any:
    if as_type is bool:
        return value if isinstance(value, bool) else _MISSING
    if as_type is int:
        return value if isinstance(value, int) and not isinstance(value, bool) else _MISSING
    if as_type in (float, Fraction):
        if isinstance(value, int) and not isinstance(value, bool):
            return as_type(value)
        return _MISSING
    if as_type is str:
        return value if isinstance(value, str) else _MISSING
    if as_type is bytes:
        return value.encode("utf-8") if isinstance(value, str) else _MISSING
    if as_type is list:
        return thaw_value(value) if isinstance(value, tuple) else _MISSING
    if as_type is tuple:
        return value if isinstance(value, tuple) else _MISSING
    return _MISSING


def _convert_sequence(value: Value, args: tuple[Any, ...], factory: type) -> Any:
    if not isinstance(value, tuple):
        return None
    item_type = args[0] if args else None
    converted = []
    for item in value:
        result = convert(item, item_type)
        if result is None:
            return None
        converted.append(result)
    return factory(converted)


def _convert_tuple(value: Value, args: tuple[Any, ...]) -> Any:
    if not isinstance(value, tuple):
        return None
    if not args or (len(args) == 2 and args[1] is Ellipsis):
        return _convert_sequence(value, args[:1], tuple)
    if len(args) != len(value):
        return None
    converted = []
    for item, item_type in zip(value, args):
        result = convert(item, item_type)
        if result is None:
            return None
        converted.append(result)
    return tuple(converted)
