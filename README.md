# fastlog

Building blocks for structured logging: strongly typed log fields, pooled
byte buffers for assembling output, and a registry of named encoder
constructors.

## Installation

```
pip install .
```

To run the test suite, install the test extra:

```
pip install ".[test]"
pytest
```

## Fields

`fastlog.field.Field` is a frozen dataclass with the attributes `key`,
`type` (a `FieldType` member), `integer`, `string` and `interface`. The
constructors in `fastlog.field` build fields for single values:

```python
from fastlog import anyfield, array, error, field

fields = [
    field.string("url", "/index"),
    field.integer("attempt", 3),
    field.boolean("cached", False),
    field.float64("ratio", 0.5),
    field.duration("elapsed", 1500),       # nanoseconds, or a timedelta
    array.ints("sizes", [1, 2, 3]),
    error.error(ValueError("boom")),
    anyfield.any_field("extra", {"a": 1}),
]
```

Notes on how values are stored:

- Fixed-width integer constructors (`int8` ... `int64`, `uint8` ...
  `uint64`, `uintptr`) check their range and raise `ValueError` when a value
  does not fit. Unsigned 64-bit values above `2**63 - 1` are stored wrapped
  as signed integers.
- `float64` and `float32` store the IEEE 754 bits of the value in
  `integer`; `complex64` rounds both parts to single precision.
- `timestamp` stores nanoseconds since the epoch in `integer` and the
  time zone in `interface` when the time fits in a signed 64-bit count;
  otherwise the whole `datetime` is kept under `FieldType.TIME_FULL`.
- The `...p` constructors (`intp`, `stringp`, `timep`, ...) give a
  `reflect` field holding `None` when passed `None`.
- `skip()` is a field that encodes to nothing; `namespace(key)` opens a
  nested scope; `object` and `inline` take values with a
  `marshal_log_object(enc)` method (`ObjectMarshaler`).
- `stack(key)` and `stack_skip(key, skip)` capture the current call stack
  eagerly as a string.

### Arrays

`fastlog.array` wraps sequences: `bools`, `byte_strings`, `complex128s`,
`complex64s`, `durations`, `float64s`, `float32s`, `ints`, `int64s`,
`int32s`, `int16s`, `int8s`, `strings`, `times`, `uints`, `uint64s`,
`uint32s`, `uint16s`, `uint8s`, `uintptrs` and `errors`. Each produces an
`ARRAY_MARSHALER` field whose value, when marshalled, calls the matching
`append_*` method of the array encoder once per element. `array(key, val)`
accepts any object with a `marshal_log_array(arr)` method.

### Errors

`error.error(err)` stores an exception under the key `"error"`;
`error.named_error(key, err)` uses a key of your choice. Passing `None`
gives `skip()`. `error.ErrorArray` marshals a sequence of exceptions as an
array of objects, each with an `"error"` entry holding `str(err)`;
`None` entries are left out.

### Choosing a constructor automatically

`anyfield.any_field(key, value)` picks a constructor from the value's type:
object and array marshalers, `bool`, `int` (signed 64-bit, then unsigned
64-bit), `float`, `complex`, `str`, `bytes`/`bytearray` (as binary),
`datetime`, `timedelta`, exceptions, and lists or tuples whose elements
all share one supported type. Objects with their own `__str__` become
`stringer` fields; anything else falls back to `reflect`.

## Buffers

`buffer.Pool` hands out reusable `buffer.Buffer` objects and is safe to use
from several threads:

```python
from datetime import datetime, timezone
from fastlog.buffer import RFC3339, Pool

pool = Pool()
buf = pool.get()
buf.append_string("n=")
buf.append_int(42)
buf.append_byte(ord(" "))
buf.append_float(3.14, 64)
buf.append_byte(ord(" "))
buf.append_time(datetime(2000, 1, 2, 3, 4, 5, tzinfo=timezone.utc), RFC3339)
print(str(buf))   # n=42 3.14 2000-01-02T03:04:05Z
buf.free()
```

`Buffer` also offers `append_uint`, `append_bool`, `write`, `write_byte`,
`write_string`, `trim_newline`, `reset`, `bytes()`, `cap()` and `len()`.
`append_float` writes the shortest fixed-point form for 32- or 64-bit
floats and writes `NaN`, `+Inf` and `-Inf` unquoted.

## Encoder registry

`encoder.EncoderRegistry` maps names to constructors that take an encoder
config. Module-level `register_encoder` and `new_encoder` use one
process-wide registry, which starts empty:

```python
from fastlog.encoder import new_encoder, register_encoder

register_encoder("mine", lambda config: MyEncoder(config))
enc = new_encoder("mine", config)
```

An empty name raises `NoEncoderNameError`. Registering a name twice, asking
for an unregistered name, or passing a config whose `time_key` is set while
its `encode_time` is `None` raises `ValueError`. `EncoderRegistry.names()`
lists the registered names in sorted order.

## What this package does not do

fastlog provides fields, buffers and the encoder registry only. It has no
logger, no levels, no concrete JSON or console encoder, no output sinks and
no configuration loading; encoders are whatever constructors you register.