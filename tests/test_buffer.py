import threading
from datetime import datetime, timedelta, timezone

import pytest

from fastlog.buffer import RFC3339, Buffer, Pool


@pytest.fixture
def buf():
    return Pool().get()


@pytest.mark.parametrize(
    "action, want",
    [
        (lambda b: b.append_byte(ord("v")), "v"),
        (lambda b: b.append_string("foo"), "foo"),
        (lambda b: b.append_int(42), "42"),
        (lambda b: b.append_int(-42), "-42"),
        (lambda b: b.append_uint(42), "42"),
        (lambda b: b.append_bool(True), "true"),
        (lambda b: b.append_float(3.14, 64), "3.14"),
        (lambda b: b.append_float(3.14, 32), "3.14"),
        (lambda b: b.write(b"foo"), "foo"),
        (
            lambda b: b.append_time(
                datetime(2000, 1, 2, 3, 4, 5, 0, tzinfo=timezone.utc), RFC3339
            ),
            "2000-01-02T03:04:05Z",
        ),
        (lambda b: b.write_byte(ord("v")), "v"),
        (lambda b: b.write_string("foo"), "foo"),
    ],
)
def test_buffer_writes(buf, action, want):
    buf.reset()
    action(buf)
    assert str(buf) == want
    assert buf.bytes().decode() == want
    assert len(buf) == len(want)
    assert buf.cap() == 1024


def test_buffers_from_pool_concurrently():
    dummy = "dummy data"
    pool = Pool()
    records = []
    lock = threading.Lock()

    def worker():
        for _ in range(100):
            b = pool.get()
            before = len(b)
            has_capacity = b.cap() > 0
            b.append_string(dummy)
            after = len(b)
            with lock:
                records.append((before, has_capacity, after))
            b.free()

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert records == [(0, True, len(dummy))] * 1000

    final = pool.get()
    assert len(final) == 0
    assert final.cap() == 1024
    final.append_string(dummy)
    assert str(final) == dummy


def test_freed_buffer_is_reused_empty():
    pool = Pool()
    first = pool.get()
    first.append_string("leftover")
    first.free()
    second = pool.get()
    assert second is first
    assert len(second) == 0


@pytest.mark.parametrize(
    "value, bits, want",
    [
        (float("nan"), 64, "NaN"),
        (float("inf"), 64, "+Inf"),
        (float("-inf"), 32, "-Inf"),
        (1e21, 64, "1000000000000000000000"),
        (100.0, 64, "100"),
        (-0.0, 64, "-0"),
        (0.5, 32, "0.5"),
        (1e40, 32, "+Inf"),
    ],
)
def test_append_float_special_values(buf, value, bits, want):
    buf.append_float(value, bits)
    assert str(buf) == want


def test_append_float_rejects_bad_bit_size(buf):
    with pytest.raises(ValueError):
        buf.append_float(1.0, 16)


def test_append_uint_rejects_negative(buf):
    with pytest.raises(ValueError):
        buf.append_uint(-1)


def test_append_byte_rejects_out_of_range(buf):
    with pytest.raises(ValueError):
        buf.append_byte(256)


def test_append_time_with_offset(buf):
    t = datetime(2000, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=-5, minutes=-30)))
    buf.append_time(t, RFC3339)
    assert str(buf) == "2000-01-02T03:04:05-05:30"


def test_trim_newline(buf):
    buf.append_string("line\n\n")
    buf.trim_newline()
    assert str(buf) == "line\n"
    buf.trim_newline()
    assert str(buf) == "line"
    buf.trim_newline()
    assert str(buf) == "line"


def test_write_string_returns_byte_count(buf):
    assert buf.write_string("héllo") == 6
    assert len(buf) == 6


def test_capacity_grows_past_default(buf):
    buf.append_string("a" * 1500)
    assert len(buf) == 1500
    assert buf.cap() >= 1500
    buf.reset()
    assert len(buf) == 0


def test_free_without_pool_leaves_contents():
    b = Buffer()
    b.append_string("x")
    b.free()
    assert str(b) == "x"