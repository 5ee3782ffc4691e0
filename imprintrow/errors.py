"""Exceptions raised while building, encoding or decoding Imprint records."""

from __future__ import annotations


class ImprintError(Exception):
    """Base class for every error reported by this package."""


class InvalidMagicError(ImprintError):
    """The first byte of a record is not the Imprint magic byte."""

    def __init__(self, got: int) -> None:
        self.got = got
        super().__init__(f"invalid magic byte: expected 0x49, got {got:#x}")


class UnsupportedVersionError(ImprintError):
    """The record was written with a format version this package cannot read."""

    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(f"unsupported version: {version}")


class InvalidFieldTypeError(ImprintError):
    """A type code is unknown, or not allowed where it was found."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"invalid field type: {code}")


class InvalidVarIntError(ImprintError):
    """A variable-length integer is overlong or does not fit in 32 bits."""

    def __init__(self) -> None:
        super().__init__("invalid varint encoding")


class FieldNotFoundError(ImprintError):
    """A requested field id is not present in a record."""

    def __init__(self, field_id: int) -> None:
        self.field_id = field_id
        super().__init__(f"field not found: {field_id}")


class InvalidUtf8Error(ImprintError):
    """A string field holds bytes that are not valid UTF-8."""

    def __init__(self) -> None:
        super().__init__("invalid utf8 in string field")


class BufferUnderflowError(ImprintError):
    """The input ended before a complete item could be read."""

    def __init__(self, needed: int, available: int) -> None:
        self.needed = needed
        self.available = available
        super().__init__(
            f"buffer underflow: needed {needed} bytes, had {available}"
        )


class SchemaError(ImprintError):
    """A value does not follow the structural rules of the format."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"schema error: {message}")