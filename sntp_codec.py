"""SNTP message codec (RFC 4330 wire format).

Layout (big-endian):
  0   1   LI(2b) | VN(3b) | Mode(3b)
  1   1   stratum
  2   1   poll interval (signed)
  3   1   precision (signed)
  4   4   root delay, Q16.16 seconds
  8   4   root dispersion, Q16.16 seconds
  12  4   reference identifier
  16  8   reference timestamp
  24  8   originate timestamp
  32  8   receive timestamp
  40  8   transmit timestamp
  48  4   key identifier   (authenticated only)
  52  16  message digest   (authenticated only)

Decode rejects a buffer only for its length (48 or 68 bytes). Field values
are never range-checked: encode masks them to their widths, decode surfaces
whatever the peer sent. The authentication fields are carried opaquely.

This module does NOT deal with sockets or text rendering.
"""

from __future__ import annotations

from sntp_model import SNTP_MSG_AUTH, SNTP_MSG_NO_AUTH, RefAddress, RefTag, SntpMessage, as_reference_id
from sntp_primitives import decode_int8, decode_uint, encode_tag, encode_uint
from sntp_timestamp import decode_timestamp, encode_timestamp

Q16_SCALE = 1 << 16

OFF_ROOT_DELAY = 4
OFF_ROOT_DISPERSION = 8
OFF_REFERENCE_ID = 12
OFF_REFERENCE_TS = 16
OFF_ORIGINATE_TS = 24
OFF_RECEIVE_TS = 32
OFF_TRANSMIT_TS = 40
OFF_KEY_ID = 48
OFF_DIGEST = 52

DIGEST_SIZE = 16


class SNTPFormatError(ValueError):
    pass


class InvalidLengthError(SNTPFormatError):
    def __init__(self, length: int) -> None:
        super().__init__(f"invalid SNTP message length: {length} (expected {SNTP_MSG_NO_AUTH} or {SNTP_MSG_AUTH})")
        self.length = length


def new_message(authenticated: bool = False) -> SntpMessage:
    """Fresh zero-valued message of the chosen variant."""
    return SntpMessage(authenticated=authenticated)


def pack_header(leap_indicator: int, version_number: int, mode: int) -> int:
    return ((leap_indicator & 0x03) << 6) | ((version_number & 0x07) << 3) | (mode & 0x07)


def unpack_header(b0: int) -> tuple[int, int, int]:
    return ((b0 & 0xC0) >> 6, (b0 & 0x38) >> 3, b0 & 0x07)


def _encode_q16(seconds: float) -> bytes:
    return encode_uint(round(seconds * Q16_SCALE), 4)


def _decode_q16(data: bytes, offset: int) -> float:
    # unsigned reading for both root delay and root dispersion
    return decode_uint(data, offset, 4) / Q16_SCALE


def _encode_reference_id(ref: RefTag | RefAddress | str | int) -> bytes:
    ref = as_reference_id(ref)
    if isinstance(ref, RefTag):
        return encode_tag(ref.text, 4)
    return encode_uint(ref.value, 4)


def decode_message(data: bytes) -> SntpMessage:
    """Decode a 48- or 68-byte datagram into a new SntpMessage.

    Raises InvalidLengthError for any other length.
    """
    length = len(data)
    if length not in (SNTP_MSG_NO_AUTH, SNTP_MSG_AUTH):
        raise InvalidLengthError(length)

    msg = new_message(authenticated=(length == SNTP_MSG_AUTH))
    buf = bytearray(msg.size)
    buf[:] = data

    msg.leap_indicator, msg.version_number, msg.mode = unpack_header(buf[0])
    msg.stratum = buf[1]
    msg.poll_interval = decode_int8(buf[2])
    msg.precision = decode_int8(buf[3])

    msg.root_delay = _decode_q16(buf, OFF_ROOT_DELAY)
    msg.root_dispersion = _decode_q16(buf, OFF_ROOT_DISPERSION)

    msg.reference_id = RefAddress(decode_uint(buf, OFF_REFERENCE_ID, 4))

    msg.reference_timestamp = decode_timestamp(buf, OFF_REFERENCE_TS)
    msg.originate_timestamp = decode_timestamp(buf, OFF_ORIGINATE_TS)
    msg.receive_timestamp = decode_timestamp(buf, OFF_RECEIVE_TS)
    msg.transmit_timestamp = decode_timestamp(buf, OFF_TRANSMIT_TS)

    if msg.authenticated:
        msg.key_identifier = decode_uint(buf, OFF_KEY_ID, 4)
        msg.message_digest = decode_uint(buf, OFF_DIGEST, DIGEST_SIZE)

    return msg


def encode_message(msg: SntpMessage) -> bytes:
    """Serialize msg into one datagram payload (48 or 68 bytes).

    The size follows msg.authenticated, not the field contents.
    """
    buf = bytearray(msg.size)

    buf[0] = pack_header(msg.leap_indicator, msg.version_number, msg.mode)
    buf[1] = msg.stratum & 0xFF
    buf[2] = msg.poll_interval & 0xFF
    buf[3] = msg.precision & 0xFF

    buf[OFF_ROOT_DELAY : OFF_ROOT_DELAY + 4] = _encode_q16(msg.root_delay)
    buf[OFF_ROOT_DISPERSION : OFF_ROOT_DISPERSION + 4] = _encode_q16(msg.root_dispersion)
    buf[OFF_REFERENCE_ID : OFF_REFERENCE_ID + 4] = _encode_reference_id(msg.reference_id)

    encode_timestamp(msg.reference_timestamp, buf, OFF_REFERENCE_TS)
    encode_timestamp(msg.originate_timestamp, buf, OFF_ORIGINATE_TS)
    encode_timestamp(msg.receive_timestamp, buf, OFF_RECEIVE_TS)
    encode_timestamp(msg.transmit_timestamp, buf, OFF_TRANSMIT_TS)

    if msg.authenticated:
        buf[OFF_KEY_ID : OFF_KEY_ID + 4] = encode_uint(msg.key_identifier, 4)
        buf[OFF_DIGEST : OFF_DIGEST + DIGEST_SIZE] = encode_uint(msg.message_digest, DIGEST_SIZE)

    return bytes(buf)


__all__ = [
    "SNTPFormatError",
    "InvalidLengthError",
    "new_message",
    "pack_header",
    "unpack_header",
    "decode_message",
    "encode_message",
]
