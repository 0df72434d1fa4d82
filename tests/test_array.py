from datetime import datetime, timezone

import pytest

from fastlog import array as a
from fastlog.error import ErrorArray
from fastlog.field import FieldType


class RecordingArray:
    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if not name.startswith("append_"):
            raise AttributeError(name)

        def record(value):
            self.calls.append((name, value))

        return record


def encode(field):
    arr = RecordingArray()
    field.interface.marshal_log_array(arr)
    return arr.calls


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

CONSTRUCTORS = [
    (a.bools, "append_bool", [True, False], [True, False]),
    (a.byte_strings, "append_byte_string", [b"\x01\x02", b"\x03\x04"], [b"\x01\x02", b"\x03\x04"]),
    (a.complex128s, "append_complex128", [1 + 2j, 3 + 4j], [1 + 2j, 3 + 4j]),
    (a.complex64s, "append_complex64", [1 + 2j, 3 + 4j], [1 + 2j, 3 + 4j]),
    (a.durations, "append_duration", [1, 2], [1, 2]),
    (a.float64s, "append_float64", [1.2, 3.4], [1.2, 3.4]),
    (a.float32s, "append_float32", [1.2, 3.4], [1.2000000476837158, 3.4000000953674316]),
    (a.ints, "append_int", [1, 2], [1, 2]),
    (a.int64s, "append_int64", [1, 2], [1, 2]),
    (a.int32s, "append_int32", [1, 2], [1, 2]),
    (a.int16s, "append_int16", [1, 2], [1, 2]),
    (a.int8s, "append_int8", [1, 2], [1, 2]),
    (a.strings, "append_string", ["foo", "bar"], ["foo", "bar"]),
    (a.times, "append_time", [EPOCH, EPOCH], [EPOCH, EPOCH]),
    (a.uints, "append_uint", [1, 2], [1, 2]),
    (a.uint64s, "append_uint64", [1, 2], [1, 2]),
    (a.uint32s, "append_uint32", [1, 2], [1, 2]),
    (a.uint16s, "append_uint16", [1, 2], [1, 2]),
    (a.uint8s, "append_uint8", [1, 2], [1, 2]),
    (a.uintptrs, "append_uintptr", [1, 2], [1, 2]),
]


@pytest.mark.parametrize("ctor, method, values, expected", CONSTRUCTORS)
def test_array_wrappers(ctor, method, values, expected):
    field = ctor("k", values)
    assert field == a.array("k", field.interface)
    assert field.type == FieldType.ARRAY_MARSHALER
    assert encode(field) == [(method, v) for v in expected]


@pytest.mark.parametrize("ctor, method, values, expected", CONSTRUCTORS)
def test_empty_array_wrappers(ctor, method, values, expected):
    field = ctor("", [])
    assert field == a.array("", field.interface)
    assert field.type == FieldType.ARRAY_MARSHALER
    assert encode(field) == []


@pytest.mark.parametrize(
    "ctor, bad",
    [
        (a.int8s, 128),
        (a.int16s, -(2**15) - 1),
        (a.int32s, 2**31),
        (a.int64s, 2**63),
        (a.uint8s, 256),
        (a.uint16s, -1),
        (a.uint32s, 2**32),
        (a.uint64s, 2**64),
        (a.uintptrs, -1),
    ],
)
def test_out_of_range_values_raise(ctor, bad):
    with pytest.raises(ValueError):
        ctor("k", [bad])


def test_equal_contents_give_equal_fields():
    assert a.bools("k", [True]) == a.bools("k", (True,))
    assert a.ints("k", [1]) != a.int64s("k", [1])


def test_errors_wraps_error_array():
    err = ValueError("v")
    field = a.errors("k", [err])
    assert field.type == FieldType.ARRAY_MARSHALER
    assert field.interface == ErrorArray([err])


def test_array_takes_any_marshaler():
    marshaler = ErrorArray([])
    field = a.array("k", marshaler)
    assert field.interface is marshaler
    assert field.key == "k"