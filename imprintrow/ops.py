"""Projection and merging of Imprint records without decoding field values."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .model import DirectoryEntry, Header, SchemaId
from .record import ImprintRecord

_PROJECTED_SCHEMA_HASH = 0xDEADBEEF


@dataclass(frozen=True)
class MergeOptions:
    """Controls how fields present in both merged records are handled.

    With ``filter_duplicate_payloads`` set, the second record's bytes for a
    duplicate field are left out of the merged payload. Otherwise they stay
    in the payload but are not reachable through the directory.
    """

    filter_duplicate_payloads: bool = False


def _field_spans(record: ImprintRecord) -> Iterable[tuple[DirectoryEntry, int, int]]:
    """Yield each directory entry with the start and end of its bytes."""
    directory = record.directory
    ends = [entry.offset for entry in directory[1:]] + [len(record.payload)]
    for entry, end in zip(directory, ends):
        yield entry, entry.offset, end


def project(record: ImprintRecord, field_ids: Iterable[int]) -> ImprintRecord:
    """Return a record holding only the requested fields.

    Requested ids that the record does not have are ignored and duplicates
    count once. Field bytes are copied unchanged and the directory stays
    sorted by field id.
    """
    wanted = set(field_ids)
    directory = []
    chunks = []
    offset = 0
    for entry, start, end in _field_spans(record):
        if entry.field_id not in wanted:
            continue
        directory.append(DirectoryEntry(entry.field_id, entry.type_code, offset))
        chunks.append(record.payload[start:end])
        offset += end - start
    payload = b"".join(chunks)
    header = Header(
        flags=record.header.flags,
        schema_id=SchemaId(
            record.header.schema_id.fieldspace_id, _PROJECTED_SCHEMA_HASH
        ),
        payload_size=len(payload),
    )
    return ImprintRecord(header, tuple(directory), payload)


def merge(
    record: ImprintRecord,
    other: ImprintRecord,
    options: MergeOptions | None = None,
) -> ImprintRecord:
    """Combine two records into one.

    Where both records hold a field, the value from ``record`` wins. The
    result keeps the header flags and schema id of ``record``.
    """
    options = options or MergeOptions()
    existing = {entry.field_id for entry in record.directory}
    base = len(record.payload)
    directory = list(record.directory)
    chunks = [record.payload]

    if options.filter_duplicate_payloads:
        offset = base
        for entry, start, end in _field_spans(other):
            if entry.field_id in existing:
                continue
            directory.append(DirectoryEntry(entry.field_id, entry.type_code, offset))
            chunks.append(other.payload[start:end])
            offset += end - start
    else:
        chunks.append(other.payload)
        directory.extend(
            DirectoryEntry(entry.field_id, entry.type_code, base + entry.offset)
            for entry in other.directory
            if entry.field_id not in existing
        )

    directory.sort(key=lambda entry: entry.field_id)
    payload = b"".join(chunks)
    header = Header(
        flags=record.header.flags,
        schema_id=record.header.schema_id,
        payload_size=len(payload),
    )
    return ImprintRecord(header, tuple(directory), payload)