"""Choose the best field constructor for an arbitrary value."""

from __future__ import annotations

import builtins
from datetime import datetime, timedelta
from typing import Any, Callable, Sequence

from . import array as arrays
from .error import named_error
from .field import (
    ArrayMarshaler,
    Field,
    ObjectMarshaler,
    binary,
    boolean,
    complex128,
    duration,
    float64,
    integer,
    reflect,
    string,
    stringer,
    timestamp,
    uint64,
)
from .field import object as object_field

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_UINT64_MAX = 2**64 - 1


def _is_int64(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and _INT64_MIN <= v <= _INT64_MAX


_SEQUENCE_KINDS: tuple[tuple[Callable[[Any], bool], Callable[[str, Any], Field]], ...] = (
    (lambda v: isinstance(v, bool), arrays.bools),
    (_is_int64, arrays.ints),
    (lambda v: isinstance(v, float), arrays.float64s),
    (lambda v: isinstance(v, complex), arrays.complex128s),
    (lambda v: isinstance(v, str), arrays.strings),
    (lambda v: isinstance(v, datetime), arrays.times),
    (lambda v: isinstance(v, timedelta), arrays.durations),
)


def _sequence_field(key: str, items: Sequence[Any]) -> Field:
    if not items:
        return reflect(key, items)
    for accepts, constructor in _SEQUENCE_KINDS:
        if all(accepts(item) for item in items):
            return constructor(key, items)
    if all(item is None or isinstance(item, BaseException) for item in items) and any(
        item is not None for item in items
    ):
        return arrays.errors(key, items)
    return reflect(key, items)


def _has_own_str(value: Any) -> bool:
    return type(value).__str__ is not builtins.object.__str__


def any_field(key: str, value: Any) -> Field:
    """Build a field for ``value``, falling back to :func:`reflect` when no
    more specific representation applies.

    Byte strings are treated as binary blobs; lists and tuples whose elements
    share one supported type become typed arrays.
    """
    if isinstance(value, ObjectMarshaler):
        return object_field(key, value)
    if isinstance(value, ArrayMarshaler):
        return arrays.array(key, value)
    if isinstance(value, bool):
        return boolean(key, value)
    if isinstance(value, int):
        if _INT64_MIN <= value <= _INT64_MAX:
            return integer(key, value)
        if 0 <= value <= _UINT64_MAX:
            return uint64(key, value)
        return reflect(key, value)
    if isinstance(value, float):
        return float64(key, value)
    if isinstance(value, complex):
        return complex128(key, value)
    if isinstance(value, str):
        return string(key, value)
    if isinstance(value, (bytes, bytearray)):
        return binary(key, value)
    if isinstance(value, datetime):
        return timestamp(key, value)
    if isinstance(value, timedelta):
        try:
            return duration(key, value)
        except ValueError:
            return reflect(key, value)
    if isinstance(value, BaseException):
        return named_error(key, value)
    if isinstance(value, (list, tuple)):
        return _sequence_field(key, value)
    if value is not None and _has_own_str(value):
        return stringer(key, value)
    return reflect(key, value)