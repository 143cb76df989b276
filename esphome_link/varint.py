"""Unsigned base-128 varint codec.

Each byte carries 7 bits of the value, least-significant group first. The
high bit is set on every byte except the last. Values are limited to 32
bits, so a valid varint never spans more than 5 bytes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from .errors import EspHomeVarintOverflow

MAX_VARINT_BYTES = 5
MAX_VARINT_VALUE = 0xFFFFFFFF


def encode_varint(value: int) -> bytes:
    """Encode an unsigned 32-bit integer in the minimum number of bytes.

    Raises:
        ValueError: If value is negative or does not fit in 32 bits.
    """
    if value < 0 or value > MAX_VARINT_VALUE:
        raise ValueError(f"Varint value out of range: {value}")

    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint from a byte buffer.

    Args:
        data: Buffer holding the encoded value.
        offset: Position of the first varint byte.

    Returns:
        Tuple of (value, offset just past the varint).

    Raises:
        EspHomeVarintOverflow: If the varint is longer than 5 bytes or
            exceeds 32 bits.
        ValueError: If the buffer ends before the varint terminates.
    """
    result = 0
    for index in range(MAX_VARINT_BYTES):
        pos = offset + index
        if pos >= len(data):
            raise ValueError("Truncated varint")
        byte = data[pos]
        result |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            return _check_range(result), pos + 1
    raise EspHomeVarintOverflow(f"Varint longer than {MAX_VARINT_BYTES} bytes")


async def read_varint(read_byte: Callable[[], Awaitable[int]]) -> int:
    """Decode a varint from a stream, one byte at a time.

    Args:
        read_byte: Coroutine function returning the next byte of the stream.
            It is expected to raise when the stream ends.
    """
    result = 0
    for index in range(MAX_VARINT_BYTES):
        byte = await read_byte()
        result |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            return _check_range(result)
    raise EspHomeVarintOverflow(f"Varint longer than {MAX_VARINT_BYTES} bytes")


def _check_range(value: int) -> int:
    if value > MAX_VARINT_VALUE:
        raise EspHomeVarintOverflow(f"Varint exceeds 32 bits: {value}")
    return value
