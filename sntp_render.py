"""Human-readable rendering of SNTP messages (display only, no round trip)."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from sntp_model import MODE_CLIENT, MODE_SERVER, RefAddress, RefTag, SntpMessage, as_reference_id
from sntp_primitives import decode_uint, encode_tag
from sntp_timestamp import ntp_millis_to_unix_seconds

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def mode_name(mode: int) -> str:
    if mode == MODE_CLIENT:
        return "client"
    if mode == MODE_SERVER:
        return "server"
    return "other"


def stratum_class(stratum: int) -> str:
    if stratum == 0:
        return "unspec./unav."
    if stratum == 1:
        return "primary"
    if 1 < stratum < 16:
        return "secondary"
    return "reserved"


def format_timestamp(ntp_millis: int | float) -> str:
    """UTC "YYYY-MM-DD HH:MM:SS.ffff", or "NULL" for the unset sentinel."""
    if ntp_millis == 0:
        return "NULL"
    unix = ntp_millis_to_unix_seconds(ntp_millis)
    whole = math.floor(unix)
    frac = round((unix - whole) * 10000)
    if frac >= 10000:
        whole += 1
        frac -= 10000
    when = UNIX_EPOCH + timedelta(seconds=whole)
    return f"{when:%Y-%m-%d %H:%M:%S}.{frac:04d}"


def _describe_reference_id(ref: RefTag | RefAddress | str | int) -> str:
    ref = as_reference_id(ref)
    if isinstance(ref, RefTag):
        if ref.text == "LOCL":
            return f"{ref.text} (uncalibrated local clock)"
        dotted = RefAddress(decode_uint(encode_tag(ref.text), 0, 4)).dotted
        return f"{ref.text} ({dotted})"
    return f"{ref.value} ({ref.dotted})"


def render_message(msg: SntpMessage) -> str:
    lines = [
        f"LI={msg.leap_indicator}, VN={msg.version_number}, Mode={mode_name(msg.mode)}, "
        f"Stratum={msg.stratum} ({stratum_class(msg.stratum)}), "
        f"PollInter={msg.poll_interval} ({2 ** msg.poll_interval} sec), ",
        f"Precision={msg.precision} ({2.0 ** msg.precision:,.6f} sec), "
        f"RootDelay={msg.root_delay:.4f} sec, RootDispersion={msg.root_dispersion:.4f} sec, ",
        f"ReferenceIdentifier={_describe_reference_id(msg.reference_id)}, ",
        f"ReferenceTS={format_timestamp(msg.reference_timestamp):<24}    "
        f"OriginateTS={format_timestamp(msg.originate_timestamp):<24}",
        f"  ReceiveTS={format_timestamp(msg.receive_timestamp):<24}    "
        f" TransmitTS={format_timestamp(msg.transmit_timestamp):<24}",
    ]
    if msg.authenticated:
        lines.append(f"Key identifier={msg.key_identifier:08x}, Message digest={msg.message_digest:032x}")
    return "\n".join(lines) + "\n"


def hex_dump(data: bytes) -> str:
    return bytes(data).hex()


__all__ = ["mode_name", "stratum_class", "format_timestamp", "render_message", "hex_dump"]
