import sys

import pytest

from nettools.hexaddr import AddressError, format_ether, parse_ether
from nettools.hwtypes import (
    ARPHRD_ETHER,
    format_dlci,
    get_hwntype,
    get_hwtype,
    hardware_list,
    hw_null_address,
)


def test_get_ether():
    hw = get_hwtype("ether")
    assert hw.title == "Ethernet"
    assert hw.type == ARPHRD_ETHER
    assert hw.alen == 6


def test_get_unknown():
    assert get_hwtype("nope") is None
    assert get_hwntype(123456) is None


def test_get_by_number_matches_name():
    for name in ["ether", "ax25", "fddi", "infiniband", "eui64", "hdlc"]:
        hw = get_hwtype(name)
        assert get_hwntype(hw.type).name == name


def test_unspec_by_number():
    assert get_hwntype(-1).name == "unspec"


def test_ether_round_trip():
    hw = get_hwtype("ether")
    text = "02:00:00:00:00:0a"
    assert hw.parse(text) == parse_ether(text)
    assert hw.format(hw.parse(text)) == format_ether(parse_ether(text))


def test_ax25_round_trip():
    hw = get_hwtype("ax25")
    assert hw.format(hw.parse("TEST-4")) == "TEST-4"


def test_no_parser():
    with pytest.raises(AddressError):
        get_hwtype("hdlc").parse("00")


def test_no_formatter():
    with pytest.raises(AddressError):
        get_hwtype("frad").format(b"\x00")


def test_ash_suppresses_null():
    assert get_hwtype("ash").suppress_null_addr is True
    assert get_hwtype("ether").suppress_null_addr is False


@pytest.mark.parametrize("value", [5, -1, 1023])
def test_format_dlci(value):
    data = value.to_bytes(2, sys.byteorder, signed=True) + b"\x00"
    assert format_dlci(data) == str(value)


def test_format_dlci_short():
    with pytest.raises(AddressError):
        format_dlci(b"\x01")


def test_hardware_list_all():
    text = hardware_list(False)
    assert text.startswith("    ")
    assert text.endswith("\n")
    assert "hdlc ((Cisco)-HDLC) " in text
    assert "unspec" not in text


def test_hardware_list_arp_only():
    text = hardware_list(True)
    assert "ether (Ethernet) " in text
    assert "hdlc" not in text
    assert "loop" not in text


def test_hardware_list_three_per_line():
    lines = hardware_list(False).rstrip("\n").split("\n")
    assert all(line.count(") ") <= 3 for line in lines)
    assert all(line.startswith("    ") for line in lines)


def test_null_address():
    hw = get_hwtype("ether")
    assert hw_null_address(hw, bytes(6)) is True
    assert hw_null_address(hw, bytes(5) + b"\x01") is False
    assert hw_null_address(hw, bytes(6) + b"\x01") is True