import pytest

from nettools.ax25 import (
    AF_AX25,
    AX25_ALEN,
    format_ax25_sockaddr,
    format_callsign,
    parse_callsign,
)
from nettools.hexaddr import AddressError


def test_parse_length():
    assert len(parse_callsign("TEST")) == AX25_ALEN


@pytest.mark.parametrize("text", ["TEST", "TEST-7", "ABCDEF-15", "X1", "9Z9Z9Z"])
def test_round_trip(text):
    assert format_callsign(parse_callsign(text)) == text


def test_lower_case_is_upper_cased():
    assert format_callsign(parse_callsign("test-3")) == "TEST-3"
    assert parse_callsign("test-3") == parse_callsign("TEST-3")


def test_zero_ssid_not_shown():
    assert format_callsign(parse_callsign("AB-0")) == "AB"
    assert parse_callsign("AB-0") == parse_callsign("AB")


def test_empty_ssid_is_zero():
    assert parse_callsign("ABCDEF-") == parse_callsign("ABCDEF")


def test_padding_is_shifted_space():
    data = parse_callsign("AB")
    assert set(data[2:6]) == {ord(" ") << 1}
    assert data[6] == 0


def test_too_long():
    with pytest.raises(AddressError):
        parse_callsign("ABCDEFG")


def test_invalid_character():
    with pytest.raises(AddressError):
        parse_callsign("AB!C")


def test_format_short_data():
    with pytest.raises(AddressError):
        format_callsign(b"\x00" * 3)


@pytest.mark.parametrize("family", [0, 0xFFFF])
def test_sockaddr_unset(family):
    assert format_ax25_sockaddr(family, parse_callsign("TEST")) == "[NONE SET]"


def test_sockaddr_set():
    data = parse_callsign("TEST-2")
    assert format_ax25_sockaddr(AF_AX25, data) == "TEST-2"