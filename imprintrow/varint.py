"""Little-endian base-128 variable-length encoding of unsigned 32-bit integers."""

from __future__ import annotations

from .errors import BufferUnderflowError, InvalidVarIntError

_CONTINUATION_BIT = 0x80
_SEGMENT_BITS = 0x7F
_MAX_VARINT_LEN = 5
_U32_MAX = 0xFFFF_FFFF


def encode(value: int) -> bytes:
    """Encode an unsigned 32-bit integer as a varint."""
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"varint value must be in 0..{_U32_MAX}, got {value}")
    out = bytearray()
    while True:
        byte = value & _SEGMENT_BITS
        value >>= 7
        if value:
            out.append(byte | _CONTINUATION_BIT)
        else:
            out.append(byte)
            return bytes(out)


def decode(data: bytes | bytearray | memoryview) -> tuple[int, int]:
    """Decode a varint from the start of ``data``.

    Returns the value and the number of bytes it occupied.
    """
    window = data[:_MAX_VARINT_LEN]
    result = 0
    for position, byte in enumerate(window):
        shift = 7 * position
        segment = byte & _SEGMENT_BITS
        if shift == 28 and segment > 0xF:
            raise InvalidVarIntError()
        result |= segment << shift
        if not byte & _CONTINUATION_BIT:
            return result, position + 1
    if len(window) == _MAX_VARINT_LEN:
        raise InvalidVarIntError()
    raise BufferUnderflowError(needed=1, available=0)