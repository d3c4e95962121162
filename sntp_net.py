"""UDP transport around the SNTP codec: one query out, one reply back.

No retry, no session state. The server answers datagrams one at a time and
never stops on a malformed request.
"""

from __future__ import annotations

import socket
import time
from collections.abc import Callable
from dataclasses import dataclass

from sntp_codec import SNTPFormatError, decode_message, encode_message, new_message
from sntp_model import (
    LEAP_NO_WARNING,
    MODE_CLIENT,
    MODE_SERVER,
    NTP_PORT,
    RefTag,
    ReferenceId,
    SntpMessage,
)
from sntp_render import hex_dump, render_message
from sntp_timestamp import unix_to_ntp_millis

MAX_DATAGRAM = 1500


@dataclass(frozen=True)
class ServerProfile:
    """Fixed values a server stamps on every reply (no clock-quality math)."""

    stratum: int = 1
    precision: int = -20
    root_delay: float = 0.0
    root_dispersion: float = 0.0
    reference_id: ReferenceId = RefTag("LOCL")


def build_client_query(version: int = 3) -> SntpMessage:
    msg = new_message()
    msg.leap_indicator = LEAP_NO_WARNING
    msg.version_number = version
    msg.mode = MODE_CLIENT
    return msg


def build_server_reply(request: SntpMessage, profile: ServerProfile, now_unix: float) -> SntpMessage:
    """Reply to `request` as a server whose clock reads `now_unix`.

    Version and poll interval are echoed; the client's transmit timestamp
    becomes the originate timestamp.
    """
    now = unix_to_ntp_millis(now_unix)
    reply = new_message(authenticated=request.authenticated)
    reply.leap_indicator = LEAP_NO_WARNING
    reply.version_number = request.version_number
    reply.mode = MODE_SERVER
    reply.stratum = profile.stratum
    reply.poll_interval = request.poll_interval
    reply.precision = profile.precision
    reply.root_delay = profile.root_delay
    reply.root_dispersion = profile.root_dispersion
    reply.reference_id = profile.reference_id
    reply.reference_timestamp = now
    reply.originate_timestamp = request.transmit_timestamp
    reply.receive_timestamp = now
    reply.transmit_timestamp = now
    return reply


def query_server(
    host: str,
    port: int = NTP_PORT,
    *,
    version: int = 3,
    timeout: float | None = None,
    verbose: bool = False,
) -> tuple[SntpMessage, SntpMessage]:
    """Send one client query to host:port and decode the single reply.

    Returns (query, reply). Socket errors and timeouts propagate as OSError;
    a reply of the wrong size raises InvalidLengthError.
    """
    query = build_client_query(version)
    payload = encode_message(query)
    if verbose:
        print(f"[query]\n{render_message(query)}")

    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.settimeout(timeout)
        sock.sendto(payload, (host, port))
        data, _ = sock.recvfrom(MAX_DATAGRAM)

    reply = decode_message(data)
    if verbose:
        print(f"[reply]\n{render_message(reply)}")
    return query, reply


class SNTPServer:
    def __init__(
        self,
        listen_addr: str = "0.0.0.0",
        port: int = NTP_PORT,
        profile: ServerProfile | None = None,
        *,
        clock: Callable[[], float] = time.time,
        verbose: bool = True,
    ) -> None:
        self.profile = profile if profile is not None else ServerProfile()
        self.clock = clock
        self.verbose = verbose
        self.requests_served = 0
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind((listen_addr, port))
        self.addr, self.port = self.sock.getsockname()[:2]
        self._log(f"SNTP server listening on {self.addr}:{self.port}")

    def _log(self, text: str) -> None:
        if self.verbose:
            print(f"[sntp] {text}")

    def handle_datagram(self, data: bytes) -> bytes | None:
        """Reply bytes for one request, or None if it is not an SNTP message."""
        try:
            request = decode_message(data)
        except SNTPFormatError as e:
            self._log(f"bad request, aborted: {e}\n{hex_dump(data)}")
            return None

        if self.verbose:
            print(hex_dump(data))
            print(render_message(request))
        reply = build_server_reply(request, self.profile, self.clock())
        return encode_message(reply)

    def serve_forever(self, max_requests: int | None = None) -> None:
        while max_requests is None or self.requests_served < max_requests:
            data, client_addr = self.sock.recvfrom(MAX_DATAGRAM)
            self._log(f">> connection: {client_addr[0]}:{client_addr[1]}")
            reply = self.handle_datagram(data)
            if reply is not None:
                self.sock.sendto(reply, client_addr)
                self.requests_served += 1
            self._log(f"<< connection: {client_addr[0]}:{client_addr[1]}")

    def close(self) -> None:
        self.sock.close()

    def __enter__(self) -> SNTPServer:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = [
    "MAX_DATAGRAM",
    "ServerProfile",
    "build_client_query",
    "build_server_reply",
    "query_server",
    "SNTPServer",
]
