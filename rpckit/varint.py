"""Variable-length encoding of unsigned 64-bit message lengths."""

from __future__ import annotations

_MAX_U64 = (1 << 64) - 1


def to_varint(n: int) -> bytes:
    """Encode an unsigned 64-bit integer as a varint."""
    if n < 0 or n > _MAX_U64:
        raise ValueError(f"varint value out of range: {n}")
    if n <= 240:
        return bytes([n])
    if n <= 2287:
        n0 = n - 240
        return bytes([(n0 >> 8) + 241, n0 & 0xFF])
    if n <= 67823:
        n0 = n - 2288
        return bytes([249, n0 >> 8, n0 & 0xFF])
    body = n.to_bytes((n.bit_length() + 7) // 8, "big")
    return bytes([len(body) + 247]) + body


def varint_len(b0: int) -> int:
    """Return the total encoded length announced by a varint's first byte."""
    if not 0 <= b0 <= 255:
        raise ValueError(f"not a byte value: {b0}")
    if b0 <= 240:
        return 1
    if b0 <= 248:
        return 2
    return b0 - 246


def from_varint(data: bytes | bytearray | memoryview) -> int:
    """Decode the varint at the start of ``data``; trailing bytes are ignored."""
    if len(data) == 0:
        raise ValueError("empty varint")
    b0 = data[0]
    needed = varint_len(b0)
    if len(data) < needed:
        raise ValueError(f"truncated varint: need {needed} bytes, got {len(data)}")
    if b0 <= 240:
        return b0
    if b0 <= 248:
        return 240 + ((b0 - 241) << 8 | data[1])
    if b0 == 249:
        return 2288 + (data[1] << 8 | data[2])
    return int.from_bytes(bytes(data[1:needed]), "big")