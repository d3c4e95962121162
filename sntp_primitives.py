"""Big-endian primitives shared by the SNTP codecs.

Pure functions over bytes; nothing here raises for out-of-range values.
Integers wider than the field are masked, never rejected.
"""

from __future__ import annotations


def encode_uint(value: int | float, width: int) -> bytes:
    """Encode value as `width` bytes, most significant first.

    Bits beyond width*8 are dropped (negative values wrap as two's complement).
    """
    mask = (1 << (8 * width)) - 1
    return (int(value) & mask).to_bytes(width, "big")


def decode_uint(data: bytes, start: int, width: int) -> int:
    """Read `width` bytes at `start` as an unsigned big-endian integer."""
    return int.from_bytes(data[start : start + width], "big")


def decode_int8(b: int) -> int:
    """Sign-extend one byte: 0xEC -> -20."""
    b &= 0xFF
    return b - 0x100 if b & 0x80 else b


def encode_tag(text: str, width: int = 4) -> bytes:
    """ASCII text, left-justified and zero padded (or cut) to `width` bytes."""
    return text.encode("ascii").ljust(width, b"\x00")[:width]


def decode_bytes(data: bytes, start: int, width: int) -> bytes:
    return bytes(data[start : start + width])


__all__ = ["encode_uint", "decode_uint", "decode_int8", "encode_tag", "decode_bytes"]
