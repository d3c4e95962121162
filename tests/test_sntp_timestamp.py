from __future__ import annotations

from datetime import datetime, timezone

from sntp_timestamp import (
    decode_timestamp,
    encode_timestamp,
    ntp_millis_to_datetime,
    ntp_millis_to_unix_seconds,
    unix_to_ntp_millis,
)


def test_epoch_shift_constants():
    assert unix_to_ntp_millis(0) == 2_208_988_800_000
    assert ntp_millis_to_unix_seconds(2_208_988_800_000) == 0
    assert unix_to_ntp_millis(1) == 2_208_988_801_000
    assert ntp_millis_to_unix_seconds(2_208_988_801_500) == 1.5


def test_decode_timestamp_seconds_and_fraction():
    data = b"\xff" * 3 + (3_900_000_000).to_bytes(4, "big") + (0x80000000).to_bytes(4, "big")
    assert decode_timestamp(data, 3) == 3_900_000_000_500


def test_decode_timestamp_truncates_below_millisecond():
    data = bytes(4) + b"\xff\xff\xff\xff"
    assert decode_timestamp(data, 0) == 999


def test_encode_timestamp_splits_and_truncates():
    assert encode_timestamp(3_900_000_000_500) == (3_900_000_000).to_bytes(4, "big") + b"\x80\x00\x00\x00"
    assert encode_timestamp(125) == bytes(4) + b"\x20\x00\x00\x00"
    # 1 ms = 4294967.296 units -> truncated
    assert encode_timestamp(1) == bytes(4) + (4_294_967).to_bytes(4, "big")


def test_encode_timestamp_writes_in_place():
    buf = bytearray(16)
    raw = encode_timestamp(2_000, buf, 8)
    assert raw == b"\x00\x00\x00\x02" + bytes(4)
    assert buf == bytes(8) + raw


def test_encode_timestamp_accepts_float_millis():
    assert encode_timestamp(unix_to_ntp_millis(0.5)) == (2_208_988_800).to_bytes(4, "big") + b"\x80\x00\x00\x00"


def test_zero_stays_zero():
    assert encode_timestamp(0) == bytes(8)
    assert decode_timestamp(bytes(8), 0) == 0


def test_millis_to_datetime_is_utc():
    assert ntp_millis_to_datetime(0) == datetime(1900, 1, 1, tzinfo=timezone.utc)
    assert ntp_millis_to_datetime(unix_to_ntp_millis(0)) == datetime(1970, 1, 1, tzinfo=timezone.utc)
