"""Imprint records and the binary encoding of values, headers and directories."""

from __future__ import annotations

import struct
from bisect import bisect_left
from dataclasses import dataclass
from typing import Union

from . import varint
from .errors import (
    BufferUnderflowError,
    InvalidMagicError,
    InvalidUtf8Error,
    SchemaError,
    UnsupportedVersionError,
)
from .model import (
    MAGIC,
    VERSION,
    DirectoryEntry,
    Flags,
    Header,
    SchemaId,
    TypeCode,
    Value,
)

HEADER_BYTES = 15
"""Encoded size of a record header."""

DIRECTORY_ENTRY_BYTES = 9
"""Encoded size of one directory entry."""

BytesLike = Union[bytes, bytearray, memoryview]

_HEADER = struct.Struct("<BBBIII")
_ENTRY = struct.Struct("<IBI")
_SCALARS = {
    TypeCode.INT32: struct.Struct("<i"),
    TypeCode.INT64: struct.Struct("<q"),
    TypeCode.FLOAT32: struct.Struct("<f"),
    TypeCode.FLOAT64: struct.Struct("<d"),
}


class _Cursor:
    """Reads successive items from a byte buffer without copying it."""

    __slots__ = ("_view", "position")

    def __init__(self, data: BytesLike) -> None:
        self._view = memoryview(data).cast("B")
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self._view) - self.position

    def take(self, count: int) -> memoryview:
        available = self.remaining
        if available < count:
            raise BufferUnderflowError(needed=count, available=available)
        start = self.position
        self.position += count
        return self._view[start : self.position]

    def byte(self) -> int:
        return self.take(1)[0]

    def unpack(self, layout: struct.Struct) -> tuple:
        return layout.unpack(self.take(layout.size))

    def varint(self) -> int:
        value, size = varint.decode(self._view[self.position :])
        self.position += size
        return value


def _write_blob(raw: bytes, out: bytearray) -> None:
    out += varint.encode(len(raw))
    out += raw


def _write_value(value: Value, out: bytearray) -> None:
    code = value.type_code
    if code is TypeCode.NULL:
        return
    if code is TypeCode.BOOL:
        out.append(1 if value.data else 0)
    elif code in _SCALARS:
        out += _SCALARS[code].pack(value.data)
    elif code is TypeCode.BYTES:
        _write_blob(bytes(value.data), out)
    elif code is TypeCode.STRING:
        try:
            raw = value.data.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidUtf8Error() from None
        _write_blob(raw, out)
    elif code is TypeCode.ARRAY:
        _write_array(value.data, out)
    elif code is TypeCode.MAP:
        _write_map(value.data, out)
    elif code is TypeCode.ROW:
        out += value.data.to_bytes()


def _write_array(items: tuple[Value, ...], out: bytearray) -> None:
    out += varint.encode(len(items))
    if not items:
        return
    element_code = items[0].type_code
    out.append(element_code)
    for item in items:
        if item.type_code != element_code:
            raise SchemaError(
                "array elements must have same type code: "
                f"{item.type_code.name} != {element_code.name}"
            )
        _write_value(item, out)


def _write_map(entries: dict[Value, Value], out: bytearray) -> None:
    out += varint.encode(len(entries))
    if not entries:
        return
    first_key, first_value = next(iter(entries.items()))
    key_code = first_key.type_code
    value_code = first_value.type_code
    out.append(key_code)
    out.append(value_code)
    for key, item in entries.items():
        if key.type_code != key_code:
            raise SchemaError(
                "map keys must have same type code: "
                f"{key.type_code.name} != {key_code.name}"
            )
        if item.type_code != value_code:
            raise SchemaError(
                "map values must have same type code: "
                f"{item.type_code.name} != {value_code.name}"
            )
        _write_value(key, out)
        _write_value(item, out)


def _read_value(code: TypeCode, cursor: _Cursor) -> Value:
    if code is TypeCode.NULL:
        return Value.null()
    if code is TypeCode.BOOL:
        flag = cursor.byte()
        if flag == 0:
            return Value.boolean(False)
        if flag == 1:
            return Value.boolean(True)
        raise SchemaError("invalid boolean value")
    if code in _SCALARS:
        (number,) = cursor.unpack(_SCALARS[code])
        return Value(code, number)
    if code is TypeCode.BYTES:
        return Value.binary(cursor.take(cursor.varint()))
    if code is TypeCode.STRING:
        raw = bytes(cursor.take(cursor.varint()))
        try:
            return Value.string(raw.decode("utf-8"))
        except UnicodeDecodeError:
            raise InvalidUtf8Error() from None
    if code is TypeCode.ARRAY:
        count = cursor.varint()
        if count == 0:
            return Value(TypeCode.ARRAY, ())
        element_code = TypeCode.from_byte(cursor.byte())
        return Value(
            TypeCode.ARRAY,
            tuple(_read_value(element_code, cursor) for _ in range(count)),
        )
    if code is TypeCode.MAP:
        count = cursor.varint()
        if count == 0:
            return Value(TypeCode.MAP, {})
        key_code = TypeCode.from_byte(cursor.byte())
        value_code = TypeCode.from_byte(cursor.byte())
        entries: dict[Value, Value] = {}
        for _ in range(count):
            key = _read_value(key_code, cursor).as_map_key()
            entries[key] = _read_value(value_code, cursor)
        return Value(TypeCode.MAP, entries)
    return Value.row(_read_record(cursor))


def _read_header(cursor: _Cursor) -> Header:
    available = cursor.remaining
    if available < HEADER_BYTES:
        raise BufferUnderflowError(needed=HEADER_BYTES, available=available)
    magic, version, flags, fieldspace_id, schema_hash, payload_size = cursor.unpack(
        _HEADER
    )
    if magic != MAGIC:
        raise InvalidMagicError(magic)
    if version != VERSION:
        raise UnsupportedVersionError(version)
    return Header(Flags(flags), SchemaId(fieldspace_id, schema_hash), payload_size)


def _read_entry(cursor: _Cursor) -> DirectoryEntry:
    field_id, code, offset = cursor.unpack(_ENTRY)
    return DirectoryEntry(field_id, TypeCode.from_byte(code), offset)


def _read_record(cursor: _Cursor) -> ImprintRecord:
    header = _read_header(cursor)
    directory: tuple[DirectoryEntry, ...] = ()
    if header.flags.has_field_directory():
        count = cursor.varint()
        directory = tuple(_read_entry(cursor) for _ in range(count))
    payload = bytes(cursor.take(header.payload_size))
    return ImprintRecord(header, directory, payload)


def encode_value(value: Value) -> bytes:
    """Encode a value's body; its type code is not included."""
    out = bytearray()
    _write_value(value, out)
    return bytes(out)


def decode_value(type_code: TypeCode | int, data: BytesLike) -> tuple[Value, int]:
    """Decode a value of the given type from the start of ``data``.

    Returns the value and the number of bytes it occupied.
    """
    code = type_code if isinstance(type_code, TypeCode) else TypeCode.from_byte(type_code)
    cursor = _Cursor(data)
    value = _read_value(code, cursor)
    return value, cursor.position


def encode_header(header: Header) -> bytes:
    """Encode a record header."""
    return _HEADER.pack(
        MAGIC,
        VERSION,
        header.flags.bits,
        header.schema_id.fieldspace_id,
        header.schema_id.schema_hash,
        header.payload_size,
    )


def decode_header(data: BytesLike) -> tuple[Header, int]:
    """Decode a record header from the start of ``data``."""
    cursor = _Cursor(data)
    header = _read_header(cursor)
    return header, cursor.position


def encode_directory_entry(entry: DirectoryEntry) -> bytes:
    """Encode one directory entry."""
    return _ENTRY.pack(entry.field_id, int(entry.type_code), entry.offset)


def decode_directory_entry(data: BytesLike) -> tuple[DirectoryEntry, int]:
    """Decode one directory entry from the start of ``data``."""
    cursor = _Cursor(data)
    entry = _read_entry(cursor)
    return entry, cursor.position


@dataclass(frozen=True)
class ImprintRecord:
    """A header, a directory sorted by field id, and the encoded field payload."""

    header: Header
    directory: tuple[DirectoryEntry, ...] = ()
    payload: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "directory", tuple(self.directory))
        object.__setattr__(self, "payload", bytes(self.payload))

    def _find(self, field_id: int) -> int | None:
        index = bisect_left(self.directory, field_id, key=lambda e: e.field_id)
        if index < len(self.directory) and self.directory[index].field_id == field_id:
            return index
        return None

    def get_value(self, field_id: int) -> Value | None:
        """Decode the value of a field, or return ``None`` if it is absent."""
        index = self._find(field_id)
        if index is None:
            return None
        entry = self.directory[index]
        value, _ = decode_value(entry.type_code, memoryview(self.payload)[entry.offset :])
        return value

    def get_raw_bytes(self, field_id: int) -> bytes | None:
        """Return the encoded bytes of a field, or ``None`` if it is absent."""
        index = self._find(field_id)
        if index is None:
            return None
        start = self.directory[index].offset
        if index + 1 < len(self.directory):
            end = self.directory[index + 1].offset
        else:
            end = len(self.payload)
        return self.payload[start:end]

    def to_bytes(self) -> bytes:
        """Encode the whole record."""
        parts = [encode_header(self.header)]
        if self.header.flags.has_field_directory():
            parts.append(varint.encode(len(self.directory)))
            parts.extend(encode_directory_entry(entry) for entry in self.directory)
        parts.append(self.payload)
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: BytesLike) -> tuple[ImprintRecord, int]:
        """Decode a record from the start of ``data``.

        Returns the record and the number of bytes it occupied.
        """
        cursor = _Cursor(data)
        record = _read_record(cursor)
        return record, cursor.position