import struct

import pytest

from nettools.hexaddr import AddressError
from nettools.ipmaddr import (
    AF_PACKET,
    MulticastAddress,
    UsageError,
    collect,
    format_address,
    format_list,
    format_lla,
    main,
    modify,
    parse_hex,
    parse_lla,
    read_dev_mcast,
    read_igmp,
    read_igmp6,
)

AF_INET = 2
AF_INET6 = 10

DEV_MCAST = (
    "2    eth0            1     0     01005e000001\n"
    "2    eth0            1     1     333300000001\n"
    "3    wlan0           2     0     01005e0000fb\n"
)

IGMP = (
    "Idx\tDevice    :  Count Querier\tGroup    Users Timer\tReporter\n"
    "1\tlo        :     1      V3\n"
    "\t\t\t\t010000E0     1 0:00000000\t\t0\n"
    "2\teth0      :     2      V3\n"
    "\t\t\t\tFB0000E0     3 0:00000000\t\t0\n"
)

IGMP6 = (
    "1    lo              ff020000000000000000000000000001     1 0000000C 0\n"
    "2    eth0            ff020000000000000000000000000001     2 0000000C 0\n"
)


def test_parse_lla_with_separators():
    assert parse_lla("01:00:5e.00:00:01") == bytes([1, 0, 0x5E, 0, 0, 1])


def test_parse_lla_single_digit_byte():
    assert parse_lla("1:23") == bytes([1, 0x23])


@pytest.mark.parametrize("text", ["1", "0.1", "zz:00", "01:0"])
def test_parse_lla_errors(text):
    with pytest.raises(AddressError):
        parse_lla(text)


def test_parse_hex():
    assert parse_hex("01005e000001") == bytes([1, 0, 0x5E, 0, 0, 1])


@pytest.mark.parametrize("text", ["abc", "zz", "01:00"])
def test_parse_hex_errors(text):
    with pytest.raises(AddressError):
        parse_hex(text)


def test_format_lla_round_trip():
    data = bytes([1, 0, 0x5E, 0x7F, 0xAB, 0xCD])
    assert parse_lla(format_lla(data)) == data
    assert format_lla(data) == "01:00:5e:7f:ab:cd"


def test_read_dev_mcast():
    entries = read_dev_mcast(DEV_MCAST, "")
    assert len(entries) == 3
    first = entries[0]
    assert (first.index, first.name, first.users) == (2, "eth0", 1)
    assert first.family == AF_PACKET
    assert first.data == bytes.fromhex("01005e000001")
    assert first.features is None
    assert entries[1].features == "static"


def test_read_dev_mcast_device_filter():
    entries = read_dev_mcast(DEV_MCAST, "wlan0")
    assert [e.name for e in entries] == ["wlan0"]
    assert entries[0].users == 2


def test_read_igmp():
    entries = read_igmp(IGMP, "")
    assert [(e.index, e.name, e.users) for e in entries] == [
        (1, "lo", 1),
        (2, "eth0", 3),
    ]
    assert entries[0].data == struct.pack("=I", 0x010000E0)
    assert all(e.family == AF_INET for e in entries)


def test_read_igmp_device_filter():
    entries = read_igmp(IGMP, "eth0")
    assert [e.name for e in entries] == ["eth0"]


def test_read_igmp6():
    entries = read_igmp6(IGMP6, "lo")
    assert len(entries) == 1
    assert entries[0].data == bytes.fromhex("ff020000000000000000000000000001")
    assert entries[0].family == AF_INET6


def test_format_address_inet():
    entry = MulticastAddress(1, "lo", AF_INET, bytes([224, 0, 0, 1]), 1)
    assert format_address(entry) == "\tinet  224.0.0.1\n"


def test_format_address_users_and_features():
    entry = MulticastAddress(
        2, "eth0", AF_PACKET, bytes([1, 0, 0x5E, 0, 0, 1]), 2, "static"
    )
    assert format_address(entry) == "\tlink  01:00:5e:00:00:01 users 2 static\n"


def test_format_address_inet6():
    entry = read_igmp6(IGMP6, "lo")[0]
    assert format_address(entry) == "\tinet6 ff02::1\n"


def test_format_address_unknown_family():
    entry = MulticastAddress(1, "lo", 99, b"\0", 1)
    assert format_address(entry) == "\tfamily 99 ?\n"


def test_format_list_groups_by_index():
    entries = [
        MulticastAddress(1, "lo", AF_INET, bytes([224, 0, 0, 1]), 1),
        MulticastAddress(1, "lo", AF_INET, bytes([224, 0, 0, 2]), 1),
        MulticastAddress(2, "eth0", AF_INET, bytes([224, 0, 0, 1]), 1),
    ]
    text = format_list(entries)
    assert text.count("1:\tlo\n") == 1
    assert text.count("2:\teth0\n") == 1
    assert text.index("1:\tlo\n") < text.index("2:\teth0\n")
    assert len(text.splitlines()) == 5


@pytest.fixture
def proc(tmp_path):
    (tmp_path / "dev_mcast").write_text(DEV_MCAST)
    (tmp_path / "igmp").write_text(IGMP)
    (tmp_path / "igmp6").write_text(IGMP6)
    return tmp_path


def test_collect_all_sorted(proc):
    entries = collect(None, "", proc)
    indexes = [e.index for e in entries]
    assert indexes == sorted(indexes)
    assert len(entries) == 3 + 2 + 2
    assert {e.family for e in entries} == {AF_PACKET, AF_INET, AF_INET6}


def test_collect_stable_within_index(proc):
    eth0 = [e for e in collect(None, "eth0", proc)]
    families = [e.family for e in eth0]
    assert families == [AF_PACKET, AF_PACKET, AF_INET, AF_INET6]


def test_collect_family_filter(proc):
    entries = collect(AF_INET, "", proc)
    assert entries == read_igmp(IGMP, "")


def test_collect_missing_files(tmp_path):
    assert collect(None, "", tmp_path) == []


@pytest.mark.parametrize(
    "args",
    [
        ["01:00:5e:00:00:01"],
        ["dev", "eth0", "zz"],
        ["dev", "eth0", "dev", "eth1"],
        ["dev"],
        ["dev", "eth0", "01:00:5e:00:00:01", "01:00:5e:00:00:02"],
    ],
)
def test_modify_usage_errors(args):
    with pytest.raises(UsageError):
        modify(True, args)


def test_main_version(capsys):
    assert main(["-V"]) == 5
    assert "ipmaddr 1.1" in capsys.readouterr().out


def test_main_unknown_command(capsys):
    assert main(["bogus"]) == 255
    assert "Usage: ipmaddr" in capsys.readouterr().err


def test_main_bad_device_name(capsys):
    assert main(["show", "dev", "x" * 16]) == 255
    assert "Usage" in capsys.readouterr().err


def test_main_unknown_option(capsys):
    assert main(["-zzz"]) == 255
    assert "Usage" in capsys.readouterr().err