# imprintrow

A compact binary row format for data pipelines. Each record has three parts:

- a fixed 15-byte header: magic byte `0x49`, format version `0x01`, a flags byte, a schema id (fieldspace id and schema hash) and the payload size;
- a directory of fields sorted by field id, present when the `Flags.FIELD_DIRECTORY` bit is set;
- a payload holding the encoded field values.

Because of the directory, a reader can decode one field without decoding the rest. Records can also be projected to a subset of fields, or merged with other records, without decoding any values.

The package has no dependencies outside the standard library.

## Installation

```
pip install imprintrow
```

For running the tests:

```
pip install "imprintrow[test]"
pytest
```

## Modules

| Module              | Contents                                                                  |
|---------------------|---------------------------------------------------------------------------|
| `imprintrow.model`  | `TypeCode`, `Value`, `Flags`, `SchemaId`, `DirectoryEntry`, `Header`, `MAGIC`, `VERSION` |
| `imprintrow.record` | `ImprintRecord` and the encode/decode functions for values, headers and directory entries |
| `imprintrow.writer` | `ImprintWriter`, which builds records field by field                      |
| `imprintrow.ops`    | `project`, `merge` and `MergeOptions`                                     |
| `imprintrow.varint` | `encode` and `decode` for unsigned 32-bit varints                         |
| `imprintrow.errors` | the exception classes                                                     |

## Value types

| Type code | Kind     | Constructor       | Encoding                                        |
|-----------|----------|-------------------|-------------------------------------------------|
| `0x0`     | null     | `Value.null()`    | nothing                                         |
| `0x1`     | bool     | `Value.boolean()` | one byte, 0 or 1                                |
| `0x2`     | int32    | `Value.int32()`   | 4 bytes, little endian                          |
| `0x3`     | int64    | `Value.int64()`   | 8 bytes, little endian                          |
| `0x4`     | float32  | `Value.float32()` | 4 bytes, little endian                          |
| `0x5`     | float64  | `Value.float64()` | 8 bytes, little endian                          |
| `0x6`     | bytes    | `Value.binary()`  | varint length, then the bytes                   |
| `0x7`     | string   | `Value.string()`  | varint length, then UTF-8 bytes                 |
| `0x8`     | array    | `Value.array()`   | varint count, element type code, elements       |
| `0x9`     | map      | `Value.map()`     | varint count, key and value type codes, entries |
| `0xA`     | row      | `Value.row()`     | a complete nested record                        |

An empty array or map is written as a zero count with no type codes. Every element of an array must have the same type, and in a map every key must have the same type and every value must have the same type; otherwise encoding raises `SchemaError`. Map keys can only be int32, int64, bytes or string values (`Value.is_map_key()`); `Value.map` raises `InvalidFieldTypeError` for any other key.

The constructors check their input: `Value.int32` and `Value.int64` raise `ValueError` for numbers out of range, and `Value.float32` rounds to single precision. Array data is stored as a tuple of values and map data as a dict from key values to values.

`Value.of` picks a type from a plain Python object: `None` gives null, `bool` gives bool, an `int` gives int32 when it fits and int64 otherwise, a `float` gives float64, `str` gives string, bytes-like objects give bytes, mappings give maps, lists and tuples give arrays, and an `ImprintRecord` gives a row. Elements of arrays and maps are converted the same way.

## Building and reading records

```python
from imprintrow.model import SchemaId, Value
from imprintrow.record import ImprintRecord
from imprintrow.writer import ImprintWriter

writer = ImprintWriter(SchemaId(fieldspace_id=1, schema_hash=0xDEADBEEF))
writer.add_field(1, Value.int32(42))
writer.add_field(3, "hello")              # converted with Value.of
writer.add_field(5, True)
writer.add_field(7, [1, 2, 3])            # an array of int32
record = writer.build()

data = record.to_bytes()
decoded, size = ImprintRecord.from_bytes(data)

assert size == len(data)
assert decoded.get_value(3) == Value.string("hello")
assert decoded.get_value(99) is None
```

- `ImprintWriter.add_field` accepts a `Value` or any object `Value.of` can convert. Field ids must fit in an unsigned 32-bit integer. If the same field id is added twice, the last value is kept. `len(writer)` and `field_id in writer` report what has been added.
- `build()` stores the fields in order of field id and sets the field-directory flag.
- `ImprintRecord.from_bytes(data)` returns the record and the number of bytes it occupied, so several records can be read from one buffer in turn.
- `get_value(field_id)` decodes one field, or returns `None` if the record does not have it.
- `get_raw_bytes(field_id)` returns a field's encoded bytes without decoding them, or `None`.

The lower-level functions in `imprintrow.record` are `encode_value`, `decode_value(type_code, data)`, `encode_header`, `decode_header`, `encode_directory_entry` and `decode_directory_entry`; the decoders return the item and the number of bytes read.

## Projecting and merging

```python
from imprintrow.ops import MergeOptions, merge, project

subset = project(record, [5, 1])
assert subset.get_value(1) == Value.int32(42)
assert subset.get_value(3) is None

other_writer = ImprintWriter(SchemaId(fieldspace_id=1, schema_hash=0xCAFEBABE))
other_writer.add_field(3, "second")
other_writer.add_field(4, Value.int64(123))
other = other_writer.build()

combined = merge(record, other)
compact = merge(record, other, MergeOptions(filter_duplicate_payloads=True))
assert combined.get_value(3) == Value.string("hello")
assert len(combined.payload) > len(compact.payload)
```

- **Projection** keeps only the fields you ask for. The order you give them in does not matter, and ids that are missing or repeated are ignored. The field bytes are copied without change. The result keeps the flags and fieldspace id of the input; its schema hash is set to the fixed value `0xDEADBEEF`.
- **Merging** keeps every field of the first record and adds the fields of the second record that the first does not have. The result takes its flags and schema id from the first record.
  - By default, the second record's payload is appended whole, so the bytes of fields it shares with the first record stay in the payload but cannot be reached.
  - With `filter_duplicate_payloads=True`, only the fields that are actually added are copied.

## Errors

Every error derives from `imprintrow.errors.ImprintError`:

| Error                     | Raised when                                                  |
|---------------------------|--------------------------------------------------------------|
| `InvalidMagicError`       | the first byte of a record is not `0x49`                     |
| `UnsupportedVersionError` | the format version is not `0x01`                             |
| `InvalidFieldTypeError`   | a type code is unknown, or a map key has a disallowed type   |
| `InvalidVarIntError`      | a varint is longer than 5 bytes or exceeds 32 bits           |
| `BufferUnderflowError`    | the input ends before an item is complete                    |
| `InvalidUtf8Error`        | a string's bytes are not valid UTF-8                         |
| `SchemaError`             | an array or map mixes types, or a bool byte is not 0 or 1    |

`FieldNotFoundError` is also defined for callers who want to report a missing field; the package itself returns `None` for missing fields. Out-of-range numbers given to the constructors raise `ValueError`, and objects of the wrong kind raise `TypeError`.

## What it does not do

`imprintrow` is a library only: it has no command-line tool. It does not keep a registry of schemas or compute schema hashes; the schema id is whatever the caller supplies, and records are not checked against any schema beyond the structural rules above.