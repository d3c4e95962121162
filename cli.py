#!/usr/bin/env python3
"""CLI for the SNTP codec.

Usage examples:
  - Ask a server for the time:
      python3 cli.py query pool.ntp.org

  - Run a local server (port 123 usually needs root):
      python3 cli.py serve --port 1123 --preset secondary --count 10

  - Decode a captured datagram:
      python3 cli.py decode 1b000000000000000000000000000000...

  - Print the bytes of a client query:
      python3 cli.py encode --version 4
"""

from __future__ import annotations

import argparse
import ipaddress

from sntp_codec import SNTPFormatError, decode_message, encode_message, new_message
from sntp_model import MODE_CLIENT, NTP_PORT, RefAddress, RefTag, ReferenceId
from sntp_net import ServerProfile, SNTPServer, query_server
from sntp_render import hex_dump, render_message
from sntp_timestamp import ntp_millis_to_datetime


def parse_reference_id(text: str) -> ReferenceId:
    """'LOCL' -> RefTag, '127.127.1.0' -> RefAddress."""
    try:
        return RefAddress(int(ipaddress.IPv4Address(text)))
    except ipaddress.AddressValueError:
        return RefTag(text)


def resolve_server_profile(
    *,
    preset: str | None,
    stratum: int | None,
    precision: int | None,
    root_dispersion: float | None,
    refid: str | None,
) -> tuple[str, ServerProfile]:
    """Resolve preset + overrides.

    Returns: (preset_effective, profile)
    """
    presets: dict[str, ServerProfile] = {
        # stratum 1 on the uncalibrated local clock
        "local": ServerProfile(stratum=1, precision=-20, root_dispersion=0.0, reference_id=RefTag("LOCL")),
        # secondary server answering from the local clock driver address
        "secondary": ServerProfile(
            stratum=6,
            precision=-20,
            root_dispersion=0.0120,
            reference_id=RefAddress(int(ipaddress.IPv4Address("127.127.1.0"))),
        ),
    }

    preset_eff = "local" if preset is None else preset
    if preset_eff not in presets:
        raise ValueError(f"Unknown preset: {preset_eff!r}")

    base = presets[preset_eff]
    p_stratum = base.stratum if stratum is None else int(stratum)
    p_precision = base.precision if precision is None else int(precision)
    p_dispersion = base.root_dispersion if root_dispersion is None else float(root_dispersion)
    p_refid = base.reference_id if refid is None else parse_reference_id(refid)

    if not (0 <= p_stratum <= 255):
        raise ValueError("stratum must be in [0..255]")
    if not (-128 <= p_precision <= 127):
        raise ValueError("precision must be in [-128..127]")
    if p_dispersion < 0:
        raise ValueError("root dispersion must be >= 0")

    profile = ServerProfile(
        stratum=p_stratum,
        precision=p_precision,
        root_delay=base.root_delay,
        root_dispersion=p_dispersion,
        reference_id=p_refid,
    )
    return preset_eff, profile


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sntp", description="SNTP (RFC 4330) message codec, client and server.")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_query = sub.add_parser("query", help="Send one client query and print the reply")
    p_query.add_argument("host", help="Server host name or address")
    p_query.add_argument("--port", type=int, default=NTP_PORT, help=f"Server UDP port (default {NTP_PORT})")
    p_query.add_argument("--version", type=int, default=3, help="Protocol version to send (default 3)")
    p_query.add_argument("--timeout", type=float, default=None, help="Socket timeout in seconds (default: none)")

    p_serve = sub.add_parser("serve", help="Answer client queries")
    p_serve.add_argument("--listen", default="0.0.0.0", help="Listen address (default 0.0.0.0)")
    p_serve.add_argument("--port", type=int, default=NTP_PORT, help=f"UDP port (default {NTP_PORT})")
    p_serve.add_argument(
        "--preset",
        choices=["local", "secondary"],
        default="local",
        help=(
            "Reply profile: local (stratum 1, LOCL) or secondary (stratum 6, 127.127.1.0). "
            "The --stratum/--precision/--root-dispersion/--refid flags always win."
        ),
    )
    p_serve.add_argument("--stratum", type=int, default=None, help="Override: stratum")
    p_serve.add_argument("--precision", type=int, default=None, help="Override: precision (log2 seconds)")
    p_serve.add_argument("--root-dispersion", type=float, default=None, help="Override: root dispersion (seconds)")
    p_serve.add_argument("--refid", default=None, help="Override: reference id, tag (LOCL) or IPv4 address")
    p_serve.add_argument("--count", type=int, default=None, help="Stop after answering this many requests")

    p_decode = sub.add_parser("decode", help="Decode a hex-encoded SNTP message")
    p_decode.add_argument("hex", nargs="+", help="Message bytes in hex (whitespace allowed)")

    p_encode = sub.add_parser("encode", help="Print a freshly built message in hex")
    p_encode.add_argument("--version", type=int, default=3, help="Version number (default 3)")
    p_encode.add_argument("--mode", type=int, default=MODE_CLIENT, help=f"Mode (default {MODE_CLIENT})")
    p_encode.add_argument("--auth", action="store_true", help="Build the 68-byte authenticated variant")

    return ap


def _cmd_query(args: argparse.Namespace) -> int:
    _, reply = query_server(args.host, args.port, version=args.version, timeout=args.timeout, verbose=True)
    when = ntp_millis_to_datetime(reply.transmit_timestamp)
    print(f"[sntp] server UTC time: {when:%A %d %B %Y, %H:%M:%S} UTC")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    preset_eff, profile = resolve_server_profile(
        preset=args.preset,
        stratum=args.stratum,
        precision=args.precision,
        root_dispersion=args.root_dispersion,
        refid=args.refid,
    )
    print(f"[sntp] preset={preset_eff}  stratum={profile.stratum}  precision={profile.precision}")
    with SNTPServer(args.listen, args.port, profile) as server:
        try:
            server.serve_forever(max_requests=args.count)
        except KeyboardInterrupt:
            print("\n[sntp] interrupted")
        print(f"[sntp] requests served: {server.requests_served}")
    return 0


def _cmd_decode(args: argparse.Namespace) -> int:
    text = "".join(args.hex).replace(" ", "")
    try:
        data = bytes.fromhex(text)
    except ValueError as e:
        raise ValueError(f"invalid hex input: {e}") from e
    msg = decode_message(data)
    print(render_message(msg), end="")
    return 0


def _cmd_encode(args: argparse.Namespace) -> int:
    msg = new_message(authenticated=args.auth)
    msg.version_number = args.version
    msg.mode = args.mode
    print(hex_dump(encode_message(msg)))
    return 0


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    try:
        if args.cmd == "query":
            return _cmd_query(args)
        if args.cmd == "serve":
            return _cmd_serve(args)
        if args.cmd == "decode":
            return _cmd_decode(args)
        if args.cmd == "encode":
            return _cmd_encode(args)
        ap.error("unknown command")
        return 2
    except (SNTPFormatError, ValueError, OSError) as e:
        print(f"[error] {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
