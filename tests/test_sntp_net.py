from __future__ import annotations

import threading

from sntp_codec import decode_message, encode_message
from sntp_model import RefAddress, RefTag
from sntp_net import ServerProfile, SNTPServer, build_client_query, build_server_reply, query_server
from tests._helpers import client_query_bytes

NOW_UNIX = 1_000_000_000
NOW_NTP_MILLIS = (NOW_UNIX + 2_208_988_800) * 1000


def test_build_client_query():
    q = build_client_query(4)
    assert (q.leap_indicator, q.version_number, q.mode) == (0, 4, 3)
    assert encode_message(q) == client_query_bytes(4)


def test_build_server_reply_fields():
    request = build_client_query(3)
    request.poll_interval = 6
    request.transmit_timestamp = 123_456_000
    profile = ServerProfile(stratum=6, precision=-20, root_dispersion=0.0120, reference_id=RefAddress(0x7F7F0100))

    reply = build_server_reply(request, profile, NOW_UNIX)

    assert reply.mode == 4
    assert reply.leap_indicator == 0
    assert reply.version_number == 3
    assert reply.poll_interval == 6
    assert reply.stratum == 6
    assert reply.precision == -20
    assert reply.root_dispersion == 0.0120
    assert reply.reference_id == RefAddress(0x7F7F0100)
    assert reply.originate_timestamp == 123_456_000
    assert reply.reference_timestamp == NOW_NTP_MILLIS
    assert reply.receive_timestamp == NOW_NTP_MILLIS
    assert reply.transmit_timestamp == NOW_NTP_MILLIS
    assert reply.authenticated is False


def test_build_server_reply_keeps_auth_variant():
    request = decode_message(client_query_bytes() + bytes(20))
    reply = build_server_reply(request, ServerProfile(), NOW_UNIX)
    assert reply.authenticated is True
    assert len(encode_message(reply)) == 68


def test_handle_datagram_rejects_bad_length(capsys):
    with SNTPServer("127.0.0.1", 0, clock=lambda: NOW_UNIX) as server:
        assert server.handle_datagram(b"\x1b\x00\x00") is None
    out = capsys.readouterr().out
    assert "[sntp] bad request" in out
    assert "1b0000" in out


def test_handle_datagram_builds_reply():
    with SNTPServer("127.0.0.1", 0, clock=lambda: NOW_UNIX, verbose=False) as server:
        data = server.handle_datagram(client_query_bytes())
    reply = decode_message(data)
    assert reply.mode == 4
    assert reply.stratum == 1
    assert reply.reference_id == RefAddress(int.from_bytes(b"LOCL", "big"))
    assert reply.transmit_timestamp == NOW_NTP_MILLIS


def test_query_server_over_loopback():
    profile = ServerProfile(stratum=2, reference_id=RefTag("GPS"))
    with SNTPServer("127.0.0.1", 0, profile, clock=lambda: float(NOW_UNIX), verbose=False) as server:
        t = threading.Thread(target=server.serve_forever, kwargs={"max_requests": 1}, daemon=True)
        t.start()
        query, reply = query_server("127.0.0.1", server.port, version=4, timeout=5.0)
        t.join(timeout=5.0)

        assert server.requests_served == 1

    assert query.version_number == 4
    assert reply.version_number == 4
    assert reply.mode == 4
    assert reply.stratum == 2
    assert reply.reference_id == RefAddress(int.from_bytes(b"GPS\x00", "big"))
    assert reply.originate_timestamp == 0
    assert reply.transmit_timestamp == NOW_NTP_MILLIS
