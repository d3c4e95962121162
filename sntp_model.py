"""SNTP core data model (format-agnostic).

This module contains only the message dataclass, the reference identifier
variants and the wire constants. No byte packing lives here.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass

NTP_PORT = 123

SNTP_MSG_NO_AUTH = 48
SNTP_MSG_AUTH = 68

# seconds between 1900-01-01 and 1970-01-01
NTP_UNIX_OFFSET = 2_208_988_800

LEAP_NO_WARNING = 0
LEAP_ADD_SECOND = 1
LEAP_DEL_SECOND = 2
LEAP_ALARM = 3

MODE_RESERVED = 0
MODE_SYMMETRIC_ACTIVE = 1
MODE_SYMMETRIC_PASSIVE = 2
MODE_CLIENT = 3
MODE_SERVER = 4
MODE_BROADCAST = 5
MODE_CONTROL = 6
MODE_PRIVATE = 7


@dataclass(frozen=True)
class RefTag:
    """Reference identifier given as a short ASCII code (e.g. "LOCL", "GPS").

    Left-justified and zero padded to 4 bytes on the wire.
    """

    text: str

    def __post_init__(self) -> None:
        if len(self.text) > 4:
            raise ValueError(f"reference tag must be at most 4 characters, got {self.text!r}")
        if not self.text.isascii():
            raise ValueError(f"reference tag must be ASCII, got {self.text!r}")


@dataclass(frozen=True)
class RefAddress:
    """Reference identifier given as a 32-bit value (IPv4 address or hash)."""

    value: int

    @property
    def dotted(self) -> str:
        return str(ipaddress.IPv4Address(self.value & 0xFFFFFFFF))


ReferenceId = RefTag | RefAddress


def as_reference_id(value: ReferenceId | str | int) -> ReferenceId:
    """Coerce a plain str (tag) or int (address) into a ReferenceId variant."""
    if isinstance(value, (RefTag, RefAddress)):
        return value
    if isinstance(value, str):
        return RefTag(value)
    if isinstance(value, int):
        return RefAddress(value)
    raise TypeError(f"unsupported reference identifier: {value!r}")


@dataclass(slots=True)
class SntpMessage:
    """One SNTP message (RFC 4330).

    Timestamps are milliseconds since the NTP epoch (1900-01-01T00:00:00Z);
    0 means "not set". root_delay and root_dispersion are in seconds.
    """

    leap_indicator: int = 0
    version_number: int = 0
    mode: int = 0
    stratum: int = 0
    poll_interval: int = 0
    precision: int = 0
    root_delay: float = 0.0
    root_dispersion: float = 0.0
    reference_id: ReferenceId = RefAddress(0)
    reference_timestamp: int | float = 0
    originate_timestamp: int | float = 0
    receive_timestamp: int | float = 0
    transmit_timestamp: int | float = 0
    # authenticated variant only
    key_identifier: int = 0
    message_digest: int = 0
    authenticated: bool = False

    @property
    def size(self) -> int:
        return SNTP_MSG_AUTH if self.authenticated else SNTP_MSG_NO_AUTH


__all__ = [
    "NTP_PORT",
    "SNTP_MSG_NO_AUTH",
    "SNTP_MSG_AUTH",
    "NTP_UNIX_OFFSET",
    "LEAP_NO_WARNING",
    "LEAP_ADD_SECOND",
    "LEAP_DEL_SECOND",
    "LEAP_ALARM",
    "MODE_RESERVED",
    "MODE_SYMMETRIC_ACTIVE",
    "MODE_SYMMETRIC_PASSIVE",
    "MODE_CLIENT",
    "MODE_SERVER",
    "MODE_BROADCAST",
    "MODE_CONTROL",
    "MODE_PRIVATE",
    "RefTag",
    "RefAddress",
    "ReferenceId",
    "as_reference_id",
    "SntpMessage",
]
