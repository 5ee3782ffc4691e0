"""Incremental construction of Imprint records."""

from __future__ import annotations

from typing import Any

from .model import DirectoryEntry, Flags, Header, SchemaId, Value
from .record import ImprintRecord, encode_value

_U32_MAX = 0xFFFF_FFFF


class ImprintWriter:
    """Collects fields by id and builds a record with a sorted field directory.

    Adding a field id that is already present replaces the earlier value.
    """

    def __init__(self, schema_id: SchemaId) -> None:
        self.schema_id = schema_id
        self._fields: dict[int, Value] = {}

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._fields

    def add_field(self, field_id: int, value: Any) -> None:
        """Set a field; plain Python objects are converted with ``Value.of``."""
        if isinstance(field_id, bool) or not isinstance(field_id, int):
            raise TypeError(f"field id must be an integer, got {type(field_id).__name__}")
        if not 0 <= field_id <= _U32_MAX:
            raise ValueError(
                f"field id must fit in an unsigned 32-bit integer, got {field_id}"
            )
        self._fields[field_id] = Value.of(value)

    def build(self) -> ImprintRecord:
        """Encode the collected fields into a record."""
        directory = []
        payload = bytearray()
        for field_id in sorted(self._fields):
            value = self._fields[field_id]
            directory.append(DirectoryEntry(field_id, value.type_code, len(payload)))
            payload += encode_value(value)
        header = Header(
            flags=Flags(Flags.FIELD_DIRECTORY),
            schema_id=self.schema_id,
            payload_size=len(payload),
        )
        return ImprintRecord(header, tuple(directory), bytes(payload))