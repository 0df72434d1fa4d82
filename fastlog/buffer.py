"""A growable byte buffer with formatting helpers, and a pool to reuse them."""

from __future__ import annotations

import math
import struct
import threading
from datetime import datetime, timedelta
from decimal import Decimal

_SIZE = 1024  # default capacity of a fresh buffer, in bytes

RFC3339 = "%Y-%m-%dT%H:%M:%S%:z"
"""Time layout in RFC 3339 form; ``%:z`` writes ``Z`` for UTC or ``+HH:MM``."""


def _to_float32(f: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", f))[0]
    except OverflowError:
        return math.copysign(math.inf, f)


def _shortest_float32_digits(f: float) -> str:
    for precision in range(1, 10):
        candidate = f"{f:.{precision}g}"
        if _to_float32(float(candidate)) == f:
            return candidate
    return repr(f)


def _format_float(f: float, bit_size: int) -> str:
    if bit_size not in (32, 64):
        raise ValueError(f"unsupported float bit size: {bit_size}")
    f = float(f)
    if bit_size == 32:
        f = _to_float32(f)
    if math.isnan(f):
        return "NaN"
    if math.isinf(f):
        return "+Inf" if f > 0 else "-Inf"
    digits = _shortest_float32_digits(f) if bit_size == 32 else repr(f)
    return format(Decimal(digits).normalize(), "f")


def _utc_offset_text(t: datetime) -> str:
    offset = t.utcoffset()
    if not offset:
        return "Z"
    sign = "+" if offset >= timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _format_time(t: datetime, layout: str) -> str:
    if "%:z" in layout:
        layout = layout.replace("%:z", _utc_offset_text(t).replace("%", "%%"))
    return t.strftime(layout)


class Buffer:
    """A thin wrapper around a byte array, usually obtained from a :class:`Pool`."""

    def __init__(self, pool: Pool | None = None) -> None:
        self._bs = bytearray()
        self._capacity = _SIZE
        self._pool = pool

    def _extend(self, data: bytes | bytearray) -> None:
        self._bs += data
        while len(self._bs) > self._capacity:
            self._capacity *= 2

    def append_byte(self, v: int) -> None:
        """Append a single byte value (0-255)."""
        if not 0 <= v <= 255:
            raise ValueError(f"byte value out of range: {v}")
        self._extend(bytes((v,)))

    def append_string(self, s: str) -> None:
        """Append a string, encoded as UTF-8."""
        self._extend(s.encode("utf-8"))

    def append_int(self, i: int) -> None:
        """Append an integer in base 10."""
        self._extend(b"%d" % i)

    def append_time(self, t: datetime, layout: str) -> None:
        """Append a time formatted with the given layout."""
        self.append_string(_format_time(t, layout))

    def append_uint(self, i: int) -> None:
        """Append a non-negative integer in base 10."""
        if i < 0:
            raise ValueError(f"unsigned value is negative: {i}")
        self._extend(b"%d" % i)

    def append_bool(self, v: bool) -> None:
        """Append ``true`` or ``false``."""
        self._extend(b"true" if v else b"false")

    def append_float(self, f: float, bit_size: int) -> None:
        """Append the shortest fixed-point form of a 32- or 64-bit float.

        NaN and infinities are written unquoted as ``NaN``, ``+Inf`` and ``-Inf``.
        """
        self.append_string(_format_float(f, bit_size))

    def __len__(self) -> int:
        return len(self._bs)

    def cap(self) -> int:
        """Return the buffer's current capacity in bytes."""
        return self._capacity

    def bytes(self) -> bytes:
        """Return a copy of the buffer's contents."""
        return bytes(self._bs)

    def __str__(self) -> str:
        return self._bs.decode("utf-8", errors="replace")

    def reset(self) -> None:
        """Empty the buffer, keeping its capacity."""
        self._bs.clear()

    def write(self, data: bytes | bytearray) -> int:
        """Append raw bytes and return how many were written."""
        self._extend(data)
        return len(data)

    def write_byte(self, v: int) -> None:
        """Append a single byte value."""
        self.append_byte(v)

    def write_string(self, s: str) -> int:
        """Append a string and return the number of bytes written."""
        encoded = s.encode("utf-8")
        self._extend(encoded)
        return len(encoded)

    def trim_newline(self) -> None:
        """Remove one trailing newline, if present."""
        if self._bs.endswith(b"\n"):
            del self._bs[-1]

    def free(self) -> None:
        """Return the buffer to its pool. Do not use it afterwards."""
        if self._pool is not None:
            self._pool._put(self)


class Pool:
    """A thread-safe pool of reusable buffers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._free: list[Buffer] = []

    def get(self) -> Buffer:
        """Take an empty buffer from the pool, creating one if needed."""
        with self._lock:
            buf = self._free.pop() if self._free else None
        if buf is None:
            buf = Buffer(self)
        buf.reset()
        buf._pool = self
        return buf

    def _put(self, buf: Buffer) -> None:
        with self._lock:
            self._free.append(buf)