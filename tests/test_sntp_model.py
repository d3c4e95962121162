from __future__ import annotations

import pytest

from sntp_model import SNTP_MSG_AUTH, SNTP_MSG_NO_AUTH, RefAddress, RefTag, SntpMessage, as_reference_id


def test_fresh_message_is_zero_valued():
    msg = SntpMessage()
    assert msg.mode == 0
    assert msg.reference_id == RefAddress(0)
    assert msg.transmit_timestamp == 0
    assert msg.authenticated is False
    assert msg.size == SNTP_MSG_NO_AUTH
    assert SntpMessage(authenticated=True).size == SNTP_MSG_AUTH


def test_message_field_set_is_closed():
    msg = SntpMessage()
    with pytest.raises(AttributeError):
        msg.leapindicator = 1  # typo, not a field


def test_ref_tag_limits():
    assert RefTag("LOCL").text == "LOCL"
    with pytest.raises(ValueError):
        RefTag("TOOLONG")
    with pytest.raises(ValueError):
        RefTag("é")


def test_ref_address_dotted():
    assert RefAddress(0x7F7F0100).dotted == "127.127.1.0"
    assert RefAddress(0).dotted == "0.0.0.0"


def test_as_reference_id():
    assert as_reference_id("GPS") == RefTag("GPS")
    assert as_reference_id(5) == RefAddress(5)
    tag = RefTag("PPS")
    assert as_reference_id(tag) is tag
    with pytest.raises(TypeError):
        as_reference_id(1.5)
