"""Type codes, values and record metadata of the Imprint row format."""

from __future__ import annotations

import math
import struct
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, ClassVar

from .errors import InvalidFieldTypeError

if TYPE_CHECKING:
    from .record import ImprintRecord

MAGIC = 0x49
"""Byte that starts every record (ASCII ``I``)."""

VERSION = 0x01
"""Format version written and accepted by this package."""

_U8_MAX = 0xFF
_U32_MAX = 0xFFFF_FFFF
_I32_MIN, _I32_MAX = -(2**31), 2**31 - 1
_I64_MIN, _I64_MAX = -(2**63), 2**63 - 1
_FLOAT32 = struct.Struct("<f")


def _check_u32(name: str, value: int) -> None:
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"{name} must fit in an unsigned 32-bit integer, got {value}")


def _require_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    return value


def _to_float32(value: float) -> float:
    try:
        return _FLOAT32.unpack(_FLOAT32.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


@dataclass(frozen=True)
class Flags:
    """Bit flags that control how a record is decoded."""

    bits: int = 0

    FIELD_DIRECTORY: ClassVar[int] = 0x01

    def __post_init__(self) -> None:
        if not 0 <= self.bits <= _U8_MAX:
            raise ValueError(f"flags must fit in one byte, got {self.bits}")

    def has_field_directory(self) -> bool:
        """Whether the record carries a field directory."""
        return bool(self.bits & self.FIELD_DIRECTORY)


class TypeCode(IntEnum):
    """Wire codes for the kinds of value a field can hold."""

    NULL = 0x0
    BOOL = 0x1
    INT32 = 0x2
    INT64 = 0x3
    FLOAT32 = 0x4
    FLOAT64 = 0x5
    BYTES = 0x6
    STRING = 0x7
    ARRAY = 0x8
    MAP = 0x9
    ROW = 0xA

    def fixed_width(self) -> int | None:
        """Encoded size in bytes for fixed-width types, else ``None``."""
        return _FIXED_WIDTHS.get(self)

    @classmethod
    def from_byte(cls, value: int) -> TypeCode:
        """Look up a type code, raising InvalidFieldTypeError if unknown."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidFieldTypeError(value) from None


_FIXED_WIDTHS = {
    TypeCode.BOOL: 1,
    TypeCode.INT32: 4,
    TypeCode.FLOAT32: 4,
    TypeCode.INT64: 8,
    TypeCode.FLOAT64: 8,
}

_MAP_KEY_TYPES = frozenset(
    {TypeCode.INT32, TypeCode.INT64, TypeCode.BYTES, TypeCode.STRING}
)

_CONSTRUCTOR_NAMES = {
    TypeCode.NULL: "null",
    TypeCode.BOOL: "boolean",
    TypeCode.INT32: "int32",
    TypeCode.INT64: "int64",
    TypeCode.FLOAT32: "float32",
    TypeCode.FLOAT64: "float64",
    TypeCode.BYTES: "binary",
    TypeCode.STRING: "string",
    TypeCode.ARRAY: "array",
    TypeCode.MAP: "map",
    TypeCode.ROW: "row",
}


@dataclass(frozen=True)
class Value:
    """A typed value stored in a record field.

    Build values with the class-method constructors, which check ranges
    and normalise the stored data. Array data is a tuple of values, map
    data is a dict from key values to values, and row data is a record.
    """

    type_code: TypeCode
    data: Any = None

    def __repr__(self) -> str:
        name = _CONSTRUCTOR_NAMES[self.type_code]
        if self.type_code is TypeCode.NULL:
            return f"Value.{name}()"
        return f"Value.{name}({self.data!r})"

    @classmethod
    def of(cls, obj: Any) -> Value:
        """Convert a plain Python object to a value.

        Integers become 32-bit when they fit and 64-bit otherwise; floats
        become 64-bit; lists and tuples become arrays; mappings become maps.
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            if _I32_MIN <= obj <= _I32_MAX:
                return cls.int32(obj)
            return cls.int64(obj)
        if isinstance(obj, float):
            return cls.float64(obj)
        if isinstance(obj, str):
            return cls.string(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls.binary(obj)
        if isinstance(obj, Mapping):
            return cls.map(obj)
        if isinstance(obj, (list, tuple)):
            return cls.array(obj)
        from .record import ImprintRecord

        if isinstance(obj, ImprintRecord):
            return cls.row(obj)
        raise TypeError(f"cannot convert {type(obj).__name__} to a value")

    @classmethod
    def null(cls) -> Value:
        return cls(TypeCode.NULL, None)

    @classmethod
    def boolean(cls, value: bool) -> Value:
        if not isinstance(value, bool):
            raise TypeError(f"expected a bool, got {type(value).__name__}")
        return cls(TypeCode.BOOL, value)

    @classmethod
    def int32(cls, value: int) -> Value:
        value = _require_int(value)
        if not _I32_MIN <= value <= _I32_MAX:
            raise ValueError(f"{value} does not fit in a signed 32-bit integer")
        return cls(TypeCode.INT32, value)

    @classmethod
    def int64(cls, value: int) -> Value:
        value = _require_int(value)
        if not _I64_MIN <= value <= _I64_MAX:
            raise ValueError(f"{value} does not fit in a signed 64-bit integer")
        return cls(TypeCode.INT64, value)

    @classmethod
    def float32(cls, value: float) -> Value:
        """A single-precision float; the value is rounded to that precision."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"expected a number, got {type(value).__name__}")
        return cls(TypeCode.FLOAT32, _to_float32(float(value)))

    @classmethod
    def float64(cls, value: float) -> Value:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"expected a number, got {type(value).__name__}")
        return cls(TypeCode.FLOAT64, float(value))

    @classmethod
    def binary(cls, value: bytes | bytearray | memoryview) -> Value:
        return cls(TypeCode.BYTES, bytes(value))

    @classmethod
    def string(cls, value: str) -> Value:
        if not isinstance(value, str):
            raise TypeError(f"expected a str, got {type(value).__name__}")
        return cls(TypeCode.STRING, value)

    @classmethod
    def array(cls, items: Iterable[Any]) -> Value:
        return cls(TypeCode.ARRAY, tuple(cls.of(item) for item in items))

    @classmethod
    def map(cls, entries: Mapping[Any, Any] | Iterable[tuple[Any, Any]]) -> Value:
        """A map; keys must be int32, int64, bytes or string values."""
        pairs = entries.items() if isinstance(entries, Mapping) else entries
        return cls(
            TypeCode.MAP,
            {cls.of(key).as_map_key(): cls.of(item) for key, item in pairs},
        )

    @classmethod
    def row(cls, record: ImprintRecord) -> Value:
        return cls(TypeCode.ROW, record)

    def is_map_key(self) -> bool:
        """Whether this value may be used as a map key."""
        return self.type_code in _MAP_KEY_TYPES

    def as_map_key(self) -> Value:
        """Return this value if it is a valid map key, else raise."""
        if not self.is_map_key():
            raise InvalidFieldTypeError(int(self.type_code))
        return self


@dataclass(frozen=True)
class SchemaId:
    """Identifies the schema a record was written with."""

    fieldspace_id: int
    schema_hash: int

    def __post_init__(self) -> None:
        _check_u32("fieldspace_id", self.fieldspace_id)
        _check_u32("schema_hash", self.schema_hash)


@dataclass(frozen=True)
class DirectoryEntry:
    """Locates one field inside a record's payload."""

    field_id: int
    type_code: TypeCode
    offset: int

    def __post_init__(self) -> None:
        _check_u32("field_id", self.field_id)
        _check_u32("offset", self.offset)


@dataclass(frozen=True)
class Header:
    """Fixed-size header at the start of every record."""

    flags: Flags
    schema_id: SchemaId
    payload_size: int

    def __post_init__(self) -> None:
        _check_u32("payload_size", self.payload_size)