"""Fields that carry homogeneous arrays of values."""

from __future__ import annotations

import math
import operator
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from .error import ErrorArray
from .field import ArrayMarshaler, Field, FieldType

_INT64 = (-(2**63), 2**63 - 1)
_INT32 = (-(2**31), 2**31 - 1)
_INT16 = (-(2**15), 2**15 - 1)
_INT8 = (-(2**7), 2**7 - 1)
_UINT64 = (0, 2**64 - 1)
_UINT32 = (0, 2**32 - 1)
_UINT16 = (0, 2**16 - 1)
_UINT8 = (0, 2**8 - 1)


@dataclass(frozen=True)
class _TypedArray:
    """Values appended one by one with the array encoder's ``method``."""

    method: str
    values: tuple

    def marshal_log_array(self, arr: Any) -> None:
        append = getattr(arr, self.method)
        for value in self.values:
            append(value)


def _round_float32(val: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", float(val)))[0]
    except OverflowError:
        return math.copysign(math.inf, val)


def _ints_in(nums: Iterable[int], bounds: tuple[int, int], kind: str) -> tuple[int, ...]:
    lo, hi = bounds
    checked = tuple(operator.index(n) for n in nums)
    for n in checked:
        if not lo <= n <= hi:
            raise ValueError(f"{kind} value out of range: {n}")
    return checked


def array(key: str, val: ArrayMarshaler) -> Field:
    """A value that marshals itself as an array, called lazily."""
    return Field(key=key, type=FieldType.ARRAY_MARSHALER, interface=val)


def bools(key: str, bs: Iterable[bool]) -> Field:
    """An array of booleans."""
    return array(key, _TypedArray("append_bool", tuple(bool(b) for b in bs)))


def byte_strings(key: str, bss: Iterable[bytes]) -> Field:
    """An array of UTF-8 texts held as bytes."""
    return array(key, _TypedArray("append_byte_string", tuple(bytes(b) for b in bss)))


def complex128s(key: str, nums: Iterable[complex]) -> Field:
    """An array of double-precision complex numbers."""
    return array(key, _TypedArray("append_complex128", tuple(complex(n) for n in nums)))


def complex64s(key: str, nums: Iterable[complex]) -> Field:
    """An array of single-precision complex numbers."""
    values = tuple(
        complex(_round_float32(c.real), _round_float32(c.imag))
        for c in (complex(n) for n in nums)
    )
    return array(key, _TypedArray("append_complex64", values))


def durations(key: str, ds: Iterable[timedelta | int]) -> Field:
    """An array of durations, as timedeltas or integer nanoseconds."""
    return array(key, _TypedArray("append_duration", tuple(ds)))


def float64s(key: str, nums: Iterable[float]) -> Field:
    """An array of doubles."""
    return array(key, _TypedArray("append_float64", tuple(float(n) for n in nums)))


def float32s(key: str, nums: Iterable[float]) -> Field:
    """An array of single-precision floats."""
    return array(key, _TypedArray("append_float32", tuple(_round_float32(n) for n in nums)))


def ints(key: str, nums: Iterable[int]) -> Field:
    """An array of platform integers."""
    return array(key, _TypedArray("append_int", _ints_in(nums, _INT64, "int")))


def int64s(key: str, nums: Iterable[int]) -> Field:
    """An array of signed 64-bit integers."""
    return array(key, _TypedArray("append_int64", _ints_in(nums, _INT64, "int64")))


def int32s(key: str, nums: Iterable[int]) -> Field:
    """An array of signed 32-bit integers."""
    return array(key, _TypedArray("append_int32", _ints_in(nums, _INT32, "int32")))


def int16s(key: str, nums: Iterable[int]) -> Field:
    """An array of signed 16-bit integers."""
    return array(key, _TypedArray("append_int16", _ints_in(nums, _INT16, "int16")))


def int8s(key: str, nums: Iterable[int]) -> Field:
    """An array of signed 8-bit integers."""
    return array(key, _TypedArray("append_int8", _ints_in(nums, _INT8, "int8")))


def strings(key: str, ss: Iterable[str]) -> Field:
    """An array of strings."""
    return array(key, _TypedArray("append_string", tuple(ss)))


def times(key: str, ts: Iterable[datetime]) -> Field:
    """An array of points in time."""
    return array(key, _TypedArray("append_time", tuple(ts)))


def uints(key: str, nums: Iterable[int]) -> Field:
    """An array of platform unsigned integers."""
    return array(key, _TypedArray("append_uint", _ints_in(nums, _UINT64, "uint")))


def uint64s(key: str, nums: Iterable[int]) -> Field:
    """An array of unsigned 64-bit integers."""
    return array(key, _TypedArray("append_uint64", _ints_in(nums, _UINT64, "uint64")))


def uint32s(key: str, nums: Iterable[int]) -> Field:
    """An array of unsigned 32-bit integers."""
    return array(key, _TypedArray("append_uint32", _ints_in(nums, _UINT32, "uint32")))


def uint16s(key: str, nums: Iterable[int]) -> Field:
    """An array of unsigned 16-bit integers."""
    return array(key, _TypedArray("append_uint16", _ints_in(nums, _UINT16, "uint16")))


def uint8s(key: str, nums: Iterable[int]) -> Field:
    """An array of unsigned 8-bit integers."""
    return array(key, _TypedArray("append_uint8", _ints_in(nums, _UINT8, "uint8")))


def uintptrs(key: str, us: Iterable[int]) -> Field:
    """An array of pointer-sized unsigned integers."""
    return array(key, _TypedArray("append_uintptr", _ints_in(us, _UINT64, "uintptr")))


def errors(key: str, errs: Iterable[Optional[BaseException]]) -> Field:
    """An array of errors; ``None`` entries are left out when encoded."""
    return array(key, ErrorArray(errs))