import socket
import sys

import pytest

from nettools.hostname import (
    HostnameError,
    Mode,
    format_lookup,
    main,
    mode_for_program,
    read_names,
    set_domainname,
)


@pytest.mark.parametrize(
    "program, mode",
    [
        ("/bin/domainname", Mode.NIS_DOMAIN),
        ("ypdomainname", Mode.NIS_DOMAIN),
        ("nisdomainname", Mode.NIS_DOMAIN),
        ("/usr/bin/dnsdomainname", Mode.DNS_DOMAIN),
        ("hostname", Mode.DEFAULT),
        ("other", Mode.DEFAULT),
    ],
)
def test_mode_for_program(program, mode):
    assert mode_for_program(program) == mode


def test_read_names_skips_comments(tmp_path):
    path = tmp_path / "names"
    path.write_text("# comment\nalpha\n\nbeta\n")
    assert read_names(path) == ["alpha", "", "beta"]


def test_read_names_splits_long_lines(tmp_path):
    path = tmp_path / "names"
    path.write_text("a" * 70 + "\n")
    names = read_names(path)
    assert names == ["a" * 63, "a" * 7]


def test_read_names_last_line_without_newline(tmp_path):
    path = tmp_path / "names"
    path.write_text("alpha\nbeta")
    assert read_names(path) == ["alpha", "beta"]


def test_read_names_missing(tmp_path):
    with pytest.raises(HostnameError, match="can't open"):
        read_names(tmp_path / "missing")


NAME = "host.example.com"


@pytest.mark.parametrize(
    "kind, expected",
    [
        ("f", NAME + "\n"),
        ("s", "host\n"),
        ("d", "example.com\n"),
    ],
)
def test_format_lookup_names(kind, expected):
    assert format_lookup(NAME, [], [], kind) == expected


def test_format_lookup_domain_without_dot():
    assert format_lookup("host", [], [], "d") == ""


def test_format_lookup_short_without_dot():
    assert format_lookup("host", [], [], "s") == "host\n"


def test_format_lookup_aliases_and_addresses():
    aliases = ["one", "two"]
    addresses = ["10.0.0.1", "10.0.0.2"]
    assert format_lookup(NAME, aliases, addresses, "a") == "one two \n"
    assert format_lookup(NAME, aliases, addresses, "i") == "10.0.0.1 10.0.0.2 \n"


def test_format_lookup_empty_aliases():
    assert format_lookup(NAME, [], [], "a") == "\n"


def test_set_domainname_too_long():
    with pytest.raises(HostnameError, match="name too long"):
        set_domainname("x" * 65)


def test_main_version(capsys):
    assert main(["-V"]) == 5
    assert "hostname 1.100" in capsys.readouterr().err


def test_main_help(capsys):
    assert main(["-h"]) == 4
    assert capsys.readouterr().err.startswith("Usage: hostname")


def test_main_unknown_option(capsys):
    assert main(["-x"]) == 4
    assert "Usage" in capsys.readouterr().err


def test_main_decnet_option_unsupported(capsys):
    assert main(["-n"]) == 4
    assert "Usage" in capsys.readouterr().err


def test_main_prints_hostname(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["hostname"])
    assert main([]) == 0
    assert capsys.readouterr().out == socket.gethostname() + "\n"


def test_main_refuses_dns_change(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["hostname"])
    assert main(["-d", "example.com"]) == 1
    assert "can't change the DNS domain name" in capsys.readouterr().err


def test_main_dnsdomainname_refuses_argument(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["/bin/dnsdomainname"])
    assert main(["example.com"]) == 1
    assert capsys.readouterr().err.startswith("dnsdomainname: ")


def test_main_missing_file(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(sys, "argv", ["hostname"])
    missing = tmp_path / "missing"
    assert main(["-F", str(missing)]) == 1
    assert f"hostname: can't open `{missing}'" in capsys.readouterr().err


def test_main_domainname_too_long(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["domainname"])
    assert main(["y" * 65]) == 1
    assert "domainname: name too long" in capsys.readouterr().err