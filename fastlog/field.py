"""Typed, lazily encoded key/value pairs for structured log entries."""

from __future__ import annotations

import enum
import operator
import struct
import sys
import traceback
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Protocol, runtime_checkable

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class FieldType(enum.IntEnum):
    """How a field's payload is stored and must be encoded."""

    UNKNOWN = 0
    ARRAY_MARSHALER = enum.auto()
    OBJECT_MARSHALER = enum.auto()
    BINARY = enum.auto()
    BOOL = enum.auto()
    BYTE_STRING = enum.auto()
    COMPLEX128 = enum.auto()
    COMPLEX64 = enum.auto()
    DURATION = enum.auto()
    FLOAT64 = enum.auto()
    FLOAT32 = enum.auto()
    INT64 = enum.auto()
    INT32 = enum.auto()
    INT16 = enum.auto()
    INT8 = enum.auto()
    STRING = enum.auto()
    TIME = enum.auto()
    TIME_FULL = enum.auto()
    UINT64 = enum.auto()
    UINT32 = enum.auto()
    UINT16 = enum.auto()
    UINT8 = enum.auto()
    UINTPTR = enum.auto()
    REFLECT = enum.auto()
    NAMESPACE = enum.auto()
    STRINGER = enum.auto()
    ERROR = enum.auto()
    SKIP = enum.auto()
    INLINE_MARSHALER = enum.auto()


@dataclass(frozen=True)
class Field:
    """A key and a typed value; numeric values live in ``integer``."""

    key: str = ""
    type: FieldType = FieldType.UNKNOWN
    integer: int = 0
    string: str = ""
    interface: Any = None


@runtime_checkable
class ObjectMarshaler(Protocol):
    """A value that writes itself as a map of key/value pairs."""

    def marshal_log_object(self, enc: Any) -> None: ...


@runtime_checkable
class ArrayMarshaler(Protocol):
    """A value that writes itself as an array of elements."""

    def marshal_log_array(self, arr: Any) -> None: ...


def _checked(val: Any, lo: int, hi: int, kind: str) -> int:
    val = operator.index(val)
    if not lo <= val <= hi:
        raise ValueError(f"{kind} value out of range: {val}")
    return val


def _to_int64(val: int) -> int:
    """Reinterpret an unsigned 64-bit value as a signed one."""
    return val - 2**64 if val > _INT64_MAX else val


def _float32_bits(val: float) -> int:
    try:
        packed = struct.pack("<f", float(val))
    except OverflowError:
        packed = struct.pack("<f", float("inf") if val > 0 else float("-inf"))
    return struct.unpack("<I", packed)[0]


def _round_float32(val: float) -> float:
    return struct.unpack("<f", struct.pack("<I", _float32_bits(val)))[0]


def _nil_field(key: str) -> Field:
    return reflect(key, None)


def _timedelta_nanos(delta: timedelta) -> int:
    return (delta.days * 86400 + delta.seconds) * 10**9 + delta.microseconds * 1000


def _take_stacktrace(skip: int) -> str:
    """Format the stack starting at the caller, skipping ``skip`` more frames."""
    try:
        start = sys._getframe(skip + 1)
    except ValueError:
        return ""
    return "\n".join(
        f"{frame.f_code.co_name}\n\t{frame.f_code.co_filename}:{lineno}"
        for frame, lineno in traceback.walk_stack(start)
    )


def skip() -> Field:
    """Return a field that encodes to nothing."""
    return Field(type=FieldType.SKIP)


def binary(key: str, val: bytes) -> Field:
    """An opaque binary blob."""
    return Field(key=key, type=FieldType.BINARY, interface=val)


def boolean(key: str, val: bool) -> Field:
    """A boolean, stored as 1 or 0."""
    return Field(key=key, type=FieldType.BOOL, integer=1 if val else 0)


def boolp(key: str, val: Optional[bool]) -> Field:
    """A boolean that may be absent."""
    return _nil_field(key) if val is None else boolean(key, val)


def byte_string(key: str, val: bytes) -> Field:
    """UTF-8 text held as bytes."""
    return Field(key=key, type=FieldType.BYTE_STRING, interface=val)


def complex128(key: str, val: complex) -> Field:
    """A double-precision complex number."""
    return Field(key=key, type=FieldType.COMPLEX128, interface=complex(val))


def complex128p(key: str, val: Optional[complex]) -> Field:
    """A double-precision complex number that may be absent."""
    return _nil_field(key) if val is None else complex128(key, val)


def complex64(key: str, val: complex) -> Field:
    """A single-precision complex number; both parts are rounded to float32."""
    val = complex(val)
    rounded = complex(_round_float32(val.real), _round_float32(val.imag))
    return Field(key=key, type=FieldType.COMPLEX64, interface=rounded)


def complex64p(key: str, val: Optional[complex]) -> Field:
    """A single-precision complex number that may be absent."""
    return _nil_field(key) if val is None else complex64(key, val)


def float64(key: str, val: float) -> Field:
    """A double, stored as its IEEE 754 bits read as a signed 64-bit integer."""
    bits = struct.unpack("<q", struct.pack("<d", float(val)))[0]
    return Field(key=key, type=FieldType.FLOAT64, integer=bits)


def float64p(key: str, val: Optional[float]) -> Field:
    """A double that may be absent."""
    return _nil_field(key) if val is None else float64(key, val)


def float32(key: str, val: float) -> Field:
    """A single-precision float, stored as its IEEE 754 bits."""
    return Field(key=key, type=FieldType.FLOAT32, integer=_float32_bits(val))


def float32p(key: str, val: Optional[float]) -> Field:
    """A single-precision float that may be absent."""
    return _nil_field(key) if val is None else float32(key, val)


def integer(key: str, val: int) -> Field:
    """A platform integer, stored as a 64-bit signed value."""
    return int64(key, val)


def intp(key: str, val: Optional[int]) -> Field:
    """A platform integer that may be absent."""
    return _nil_field(key) if val is None else integer(key, val)


def int64(key: str, val: int) -> Field:
    """A signed 64-bit integer."""
    val = _checked(val, _INT64_MIN, _INT64_MAX, "int64")
    return Field(key=key, type=FieldType.INT64, integer=val)


def int64p(key: str, val: Optional[int]) -> Field:
    """A signed 64-bit integer that may be absent."""
    return _nil_field(key) if val is None else int64(key, val)


def int32(key: str, val: int) -> Field:
    """A signed 32-bit integer."""
    val = _checked(val, -(2**31), 2**31 - 1, "int32")
    return Field(key=key, type=FieldType.INT32, integer=val)


def int32p(key: str, val: Optional[int]) -> Field:
    """A signed 32-bit integer that may be absent."""
    return _nil_field(key) if val is None else int32(key, val)


def int16(key: str, val: int) -> Field:
    """A signed 16-bit integer."""
    val = _checked(val, -(2**15), 2**15 - 1, "int16")
    return Field(key=key, type=FieldType.INT16, integer=val)


def int16p(key: str, val: Optional[int]) -> Field:
    """A signed 16-bit integer that may be absent."""
    return _nil_field(key) if val is None else int16(key, val)


def int8(key: str, val: int) -> Field:
    """A signed 8-bit integer."""
    val = _checked(val, -(2**7), 2**7 - 1, "int8")
    return Field(key=key, type=FieldType.INT8, integer=val)


def int8p(key: str, val: Optional[int]) -> Field:
    """A signed 8-bit integer that may be absent."""
    return _nil_field(key) if val is None else int8(key, val)


def string(key: str, val: str) -> Field:
    """A string."""
    return Field(key=key, type=FieldType.STRING, string=val)


def stringp(key: str, val: Optional[str]) -> Field:
    """A string that may be absent."""
    return _nil_field(key) if val is None else string(key, val)


def uint(key: str, val: int) -> Field:
    """A platform unsigned integer, stored as an unsigned 64-bit value."""
    return uint64(key, val)


def uintp(key: str, val: Optional[int]) -> Field:
    """A platform unsigned integer that may be absent."""
    return _nil_field(key) if val is None else uint(key, val)


def uint64(key: str, val: int) -> Field:
    """An unsigned 64-bit integer; values past 2**63 are stored wrapped."""
    val = _checked(val, 0, 2**64 - 1, "uint64")
    return Field(key=key, type=FieldType.UINT64, integer=_to_int64(val))


def uint64p(key: str, val: Optional[int]) -> Field:
    """An unsigned 64-bit integer that may be absent."""
    return _nil_field(key) if val is None else uint64(key, val)


def uint32(key: str, val: int) -> Field:
    """An unsigned 32-bit integer."""
    val = _checked(val, 0, 2**32 - 1, "uint32")
    return Field(key=key, type=FieldType.UINT32, integer=val)


def uint32p(key: str, val: Optional[int]) -> Field:
    """An unsigned 32-bit integer that may be absent."""
    return _nil_field(key) if val is None else uint32(key, val)


def uint16(key: str, val: int) -> Field:
    """An unsigned 16-bit integer."""
    val = _checked(val, 0, 2**16 - 1, "uint16")
    return Field(key=key, type=FieldType.UINT16, integer=val)


def uint16p(key: str, val: Optional[int]) -> Field:
    """An unsigned 16-bit integer that may be absent."""
    return _nil_field(key) if val is None else uint16(key, val)


def uint8(key: str, val: int) -> Field:
    """An unsigned 8-bit integer."""
    val = _checked(val, 0, 2**8 - 1, "uint8")
    return Field(key=key, type=FieldType.UINT8, integer=val)


def uint8p(key: str, val: Optional[int]) -> Field:
    """An unsigned 8-bit integer that may be absent."""
    return _nil_field(key) if val is None else uint8(key, val)


def uintptr(key: str, val: int) -> Field:
    """A pointer-sized unsigned integer (64 bits)."""
    val = _checked(val, 0, 2**64 - 1, "uintptr")
    return Field(key=key, type=FieldType.UINTPTR, integer=_to_int64(val))


def uintptrp(key: str, val: Optional[int]) -> Field:
    """A pointer-sized unsigned integer that may be absent."""
    return _nil_field(key) if val is None else uintptr(key, val)


def reflect(key: str, val: Any) -> Field:
    """An arbitrary object, serialized by the encoder's generic fallback."""
    return Field(key=key, type=FieldType.REFLECT, interface=val)


def namespace(key: str) -> Field:
    """Open a named scope; later fields are nested inside it."""
    return Field(key=key, type=FieldType.NAMESPACE)


def stringer(key: str, val: Any) -> Field:
    """A value logged through ``str(val)``, called lazily."""
    return Field(key=key, type=FieldType.STRINGER, interface=val)


def timestamp(key: str, val: datetime) -> Field:
    """A point in time.

    Times representable as signed 64-bit nanoseconds since the epoch are stored
    in ``integer`` with the time zone in ``interface`` (``None`` for naive,
    local times); others keep the whole datetime.
    """
    if not isinstance(val, datetime):
        raise TypeError(f"expected a datetime, got {type(val).__name__}")
    aware = val
    if val.utcoffset() is None:
        try:
            aware = val.astimezone()
        except (OverflowError, OSError, ValueError):
            return Field(key=key, type=FieldType.TIME_FULL, interface=val)
    nanos = _timedelta_nanos(aware - _EPOCH)
    if not _INT64_MIN <= nanos <= _INT64_MAX:
        return Field(key=key, type=FieldType.TIME_FULL, interface=val)
    return Field(key=key, type=FieldType.TIME, integer=nanos, interface=val.tzinfo)


def timep(key: str, val: Optional[datetime]) -> Field:
    """A point in time that may be absent."""
    return _nil_field(key) if val is None else timestamp(key, val)


def stack(key: str) -> Field:
    """The current call stack, taken eagerly, as a string."""
    return stack_skip(key, 1)


def stack_skip(key: str, skip: int) -> Field:
    """Like :func:`stack`, but drop ``skip`` more frames from the top."""
    return string(key, _take_stacktrace(skip + 1))


def duration(key: str, val: timedelta | int) -> Field:
    """A duration, given as a timedelta or as integer nanoseconds."""
    nanos = _timedelta_nanos(val) if isinstance(val, timedelta) else operator.index(val)
    nanos = _checked(nanos, _INT64_MIN, _INT64_MAX, "duration")
    return Field(key=key, type=FieldType.DURATION, integer=nanos)


def durationp(key: str, val: Optional[timedelta | int]) -> Field:
    """A duration that may be absent."""
    return _nil_field(key) if val is None else duration(key, val)


def object(key: str, val: ObjectMarshaler) -> Field:
    """A value that marshals itself as a nested object."""
    return Field(key=key, type=FieldType.OBJECT_MARSHALER, interface=val)


def inline(val: ObjectMarshaler) -> Field:
    """A value whose key/value pairs are added to the current scope."""
    return Field(type=FieldType.INLINE_MARSHALER, interface=val)