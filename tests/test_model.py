import math

import pytest

from imprintrow.errors import InvalidFieldTypeError
from imprintrow.model import (
    DirectoryEntry,
    Flags,
    Header,
    SchemaId,
    TypeCode,
    Value,
)


def test_map_key_eq_value():
    assert Value.int32(1).as_map_key() == Value.int32(1)


def test_value_eq_map_key():
    assert Value.string("foo") == Value.string("foo").as_map_key()


@pytest.mark.parametrize("code", range(0x0, 0xB))
def test_from_byte_accepts_known_codes(code):
    assert int(TypeCode.from_byte(code)) == code


@pytest.mark.parametrize("code", [0x0B, 0xFF])
def test_from_byte_rejects_unknown_codes(code):
    with pytest.raises(InvalidFieldTypeError) as info:
        TypeCode.from_byte(code)
    assert info.value.code == code


@pytest.mark.parametrize(
    ("type_code", "width"),
    [
        (TypeCode.BOOL, 1),
        (TypeCode.INT32, 4),
        (TypeCode.FLOAT32, 4),
        (TypeCode.INT64, 8),
        (TypeCode.FLOAT64, 8),
        (TypeCode.NULL, None),
        (TypeCode.BYTES, None),
        (TypeCode.STRING, None),
        (TypeCode.ARRAY, None),
        (TypeCode.MAP, None),
        (TypeCode.ROW, None),
    ],
)
def test_fixed_width(type_code, width):
    assert type_code.fixed_width() == width


def test_flags_field_directory():
    assert Flags(Flags.FIELD_DIRECTORY).has_field_directory() is True
    assert Flags(0).has_field_directory() is False


def test_flags_must_fit_in_a_byte():
    with pytest.raises(ValueError):
        Flags(0x100)


@pytest.mark.parametrize(
    ("obj", "type_code", "data"),
    [
        (None, TypeCode.NULL, None),
        (True, TypeCode.BOOL, True),
        (42, TypeCode.INT32, 42),
        (2**40, TypeCode.INT64, 2**40),
        (1.5, TypeCode.FLOAT64, 1.5),
        ("hello", TypeCode.STRING, "hello"),
        (b"\x01\x02", TypeCode.BYTES, b"\x01\x02"),
        (bytearray(b"ab"), TypeCode.BYTES, b"ab"),
    ],
)
def test_of_converts_scalars(obj, type_code, data):
    value = Value.of(obj)
    assert value.type_code is type_code
    assert value.data == data


def test_of_returns_values_unchanged():
    value = Value.int64(7)
    assert Value.of(value) is value


def test_of_converts_lists_to_arrays():
    assert Value.of([1, 2, 3]) == Value.array(
        [Value.int32(1), Value.int32(2), Value.int32(3)]
    )
    assert Value.of([1, 2]).data == (Value.int32(1), Value.int32(2))


def test_of_converts_dicts_to_maps():
    value = Value.of({"a": 1})
    assert value.type_code is TypeCode.MAP
    assert value.data == {Value.string("a"): Value.int32(1)}


def test_of_rejects_unknown_objects():
    with pytest.raises(TypeError):
        Value.of(object())


def test_map_accepts_pairs_and_last_key_wins():
    value = Value.map([(1, "x"), (1, "y")])
    assert value.data == {Value.int32(1): Value.string("y")}


def test_map_rejects_invalid_key_type():
    with pytest.raises(InvalidFieldTypeError) as info:
        Value.map({True: 1})
    assert info.value.code == TypeCode.BOOL


@pytest.mark.parametrize(
    ("value", "is_key"),
    [
        (Value.int32(1), True),
        (Value.int64(1), True),
        (Value.binary(b"k"), True),
        (Value.string("k"), True),
        (Value.null(), False),
        (Value.boolean(True), False),
        (Value.float32(1.0), False),
        (Value.float64(1.0), False),
        (Value.array([]), False),
        (Value.map({}), False),
    ],
)
def test_is_map_key(value, is_key):
    assert value.is_map_key() is is_key


def test_as_map_key_raises_with_type_code():
    with pytest.raises(InvalidFieldTypeError) as info:
        Value.float64(2.0).as_map_key()
    assert info.value.code == TypeCode.FLOAT64


def test_int32_range_is_checked():
    assert Value.int32(2**31 - 1).data == 2**31 - 1
    assert Value.int32(-(2**31)).data == -(2**31)
    with pytest.raises(ValueError):
        Value.int32(2**31)


def test_int64_range_is_checked():
    assert Value.int64(-(2**63)).data == -(2**63)
    with pytest.raises(ValueError):
        Value.int64(2**63)


def test_integer_constructors_reject_bool():
    with pytest.raises(TypeError):
        Value.int32(True)


def test_boolean_requires_bool():
    with pytest.raises(TypeError):
        Value.boolean(1)


def test_float32_rounds_to_single_precision():
    rounded = Value.float32(0.1)
    assert rounded.data != 0.1
    assert Value.float32(rounded.data) == rounded
    assert Value.float32(0.5).data == 0.5


def test_float32_overflow_becomes_infinity():
    assert Value.float32(1e300).data == math.inf
    assert Value.float32(-1e300).data == -math.inf


def test_same_number_with_different_types_is_not_equal():
    assert Value.int32(1) == Value.int32(1)
    assert Value.int32(1) != Value.int64(1)
    assert Value.boolean(True) != Value.int32(1)


def test_key_values_are_hashable():
    lookup = {Value.string("a"): 1, Value.int64(5): 2}
    assert lookup[Value.of("a")] == 1
    assert lookup[Value.of(2**40) if False else Value.int64(5)] == 2


def test_repr_names_constructor():
    assert repr(Value.int32(3)) == "Value.int32(3)"
    assert repr(Value.null()) == "Value.null()"


def test_schema_id_fields_and_range():
    schema = SchemaId(fieldspace_id=1, schema_hash=0xDEADBEEF)
    assert schema.schema_hash == 0xDEADBEEF
    assert schema == SchemaId(1, 0xDEADBEEF)
    with pytest.raises(ValueError):
        SchemaId(fieldspace_id=-1, schema_hash=0)


def test_directory_entry_range():
    entry = DirectoryEntry(field_id=3, type_code=TypeCode.STRING, offset=10)
    assert (entry.field_id, entry.type_code, entry.offset) == (3, TypeCode.STRING, 10)
    with pytest.raises(ValueError):
        DirectoryEntry(field_id=2**32, type_code=TypeCode.NULL, offset=0)


def test_header_holds_fields():
    header = Header(
        flags=Flags(Flags.FIELD_DIRECTORY),
        schema_id=SchemaId(2, 0xCAFEBABE),
        payload_size=12,
    )
    assert header.flags.has_field_directory()
    assert header.schema_id.fieldspace_id == 2
    with pytest.raises(ValueError):
        Header(flags=Flags(), schema_id=SchemaId(0, 0), payload_size=-1)