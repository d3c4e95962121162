"""NTP 64-bit timestamp codec.

Wire format: 32-bit seconds since 1900-01-01 followed by a 32-bit fraction
(units of 1/2^32 s). In memory a timestamp is a count of milliseconds since
the NTP epoch; anything below one millisecond is truncated on decode.

Epoch helpers re-base between NTP milliseconds and Unix seconds using the
fixed 2208988800 s offset. Calendar/timezone formatting is left to callers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sntp_model import NTP_UNIX_OFFSET
from sntp_primitives import decode_uint, encode_uint

TIMESTAMP_SIZE = 8

FRACTION_SCALE = 1 << 32

NTP_EPOCH = datetime(1900, 1, 1, tzinfo=timezone.utc)


def decode_timestamp(data: bytes, offset: int) -> int:
    """Read data[offset:offset+8] and return milliseconds since the NTP epoch."""
    seconds = decode_uint(data, offset, 4)
    fraction = decode_uint(data, offset + 4, 4)
    return seconds * 1000 + (fraction * 1000) // FRACTION_SCALE


def encode_timestamp(millis: int | float, data: bytearray | None = None, offset: int = 0) -> bytes:
    """Split NTP milliseconds into the 8-byte seconds/fraction pair.

    Both parts are truncated (floor), never rounded. When `data` is given the
    bytes are also written in place at `offset`.
    """
    seconds, remainder = divmod(millis, 1000)
    fraction = int(remainder * FRACTION_SCALE // 1000)
    raw = encode_uint(seconds, 4) + encode_uint(fraction, 4)
    if data is not None:
        data[offset : offset + TIMESTAMP_SIZE] = raw
    return raw


def unix_to_ntp_millis(unix_seconds: int | float) -> int | float:
    return (unix_seconds + NTP_UNIX_OFFSET) * 1000


def ntp_millis_to_unix_seconds(ntp_millis: int | float) -> float:
    return ntp_millis / 1000 - NTP_UNIX_OFFSET


def ntp_millis_to_datetime(ntp_millis: int | float) -> datetime:
    """Timezone-aware UTC datetime for an NTP millisecond count."""
    return NTP_EPOCH + timedelta(milliseconds=ntp_millis)


__all__ = [
    "TIMESTAMP_SIZE",
    "FRACTION_SCALE",
    "NTP_EPOCH",
    "decode_timestamp",
    "encode_timestamp",
    "unix_to_ntp_millis",
    "ntp_millis_to_unix_seconds",
    "ntp_millis_to_datetime",
]
