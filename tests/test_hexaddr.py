import pytest

from nettools.hexaddr import (
    AddressError,
    format_arcnet,
    format_eui64,
    format_ether,
    format_fddi,
    format_hippi,
    format_infiniband,
    parse_arcnet,
    parse_eui64,
    parse_ether,
    parse_fddi,
    parse_hippi,
    parse_infiniband,
)

SAMPLES_6 = [bytes(6), bytes(range(1, 7)), bytes([0xAB] * 6), bytes([0x02, 0, 0, 0, 0, 0x01])]


@pytest.mark.parametrize("data", SAMPLES_6)
def test_ether_round_trip(data):
    assert parse_ether(format_ether(data)) == data


def test_ether_format_pinned():
    assert format_ether(bytes([0x02, 0, 0, 0, 0, 0x01])) == "02:00:00:00:00:01"


def test_ether_format_is_lower_case():
    text = format_ether(bytes([0xAB, 0xCD, 0xEF, 0xAB, 0xCD, 0xEF]))
    assert text == text.lower()
    assert text.count(":") == 5


def test_ether_single_digit_bytes():
    assert parse_ether("2:0:0:0:0:1") == parse_ether("02:00:00:00:00:01")


def test_ether_without_separators():
    assert parse_ether("020000000001") == parse_ether("02:00:00:00:00:01")


def test_ether_trailing_text_ignored():
    assert parse_ether("02:00:00:00:00:01:ff") == parse_ether("02:00:00:00:00:01")


def test_ether_partial_is_zero_padded():
    result = parse_ether("02")
    assert len(result) == 6
    assert result == bytes([0x02]) + bytes(5)


def test_ether_mixed_case_equal():
    assert parse_ether("AB:cd:Ef:00:00:01") == parse_ether("ab:cd:ef:00:00:01")


@pytest.mark.parametrize("text", ["zz:00:00:00:00:00", "0g:00:00:00:00:00", "02-00-00-00-00-01"])
def test_ether_invalid(text):
    with pytest.raises(AddressError):
        parse_ether(text)


def test_ether_format_too_short():
    with pytest.raises(AddressError):
        format_ether(b"\x01\x02")


def test_eui64_round_trip_and_case():
    data = bytes(range(0xF0, 0xF8))
    text = format_eui64(data)
    assert text == text.upper()
    assert text.count(":") == 7
    assert parse_eui64(text) == data


def test_eui64_length():
    assert len(parse_eui64("1")) == 8


def test_infiniband_round_trip():
    data = bytes(range(20))
    text = format_infiniband(data)
    assert text.count(":") == 19
    assert parse_infiniband(text) == data


def test_infiniband_invalid():
    with pytest.raises(AddressError):
        parse_infiniband("x")


@pytest.mark.parametrize("data", SAMPLES_6)
def test_fddi_round_trip_with_colons(data):
    text = format_fddi(data)
    assert text.count("-") == 5
    assert parse_fddi(text.replace("-", ":")) == data


def test_fddi_format_pinned():
    assert format_fddi(bytes([0x02, 0, 0, 0, 0, 0x01])) == "02-00-00-00-00-01"


def test_fddi_dash_form_is_rejected():
    with pytest.raises(AddressError):
        parse_fddi(format_fddi(bytes(range(1, 7))))


def test_fddi_requires_two_digits():
    with pytest.raises(AddressError):
        parse_fddi("2:00:00:00:00:01")


@pytest.mark.parametrize("data", SAMPLES_6)
def test_hippi_round_trip(data):
    text = format_hippi(data)
    assert text == text.upper()
    assert parse_hippi(text) == data


def test_hippi_requires_two_digits():
    with pytest.raises(AddressError):
        parse_hippi("0")


def test_arcnet_round_trip():
    for value in (0, 0x7F, 0xFF):
        assert parse_arcnet(format_arcnet(bytes([value]))) == bytes([value])


def test_arcnet_format_pinned():
    assert format_arcnet(b"\x7f") == "7F"


def test_arcnet_trailing_ignored():
    assert parse_arcnet("7fzz") == b"\x7f"


def test_arcnet_requires_two_digits():
    with pytest.raises(AddressError):
        parse_arcnet("7")


def test_arcnet_format_empty():
    with pytest.raises(AddressError):
        format_arcnet(b"")


def test_address_error_is_value_error():
    with pytest.raises(ValueError):
        parse_hippi("qq")