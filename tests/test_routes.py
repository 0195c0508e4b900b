import pytest

from nettools.routes import (
    DDP_HEADER,
    RTF_GATEWAY,
    RTF_HOST,
    RTF_UP,
    RouteError,
    ax25_route_table,
    ddp_route_table,
    decode_route_flags,
    format_ax25_routes,
    format_ddp_routes,
    route_info,
)


def test_decode_flags():
    assert decode_route_flags(RTF_UP | RTF_GATEWAY) == "UG"
    assert decode_route_flags(0) == ""


def test_decode_flags_order_is_fixed():
    assert decode_route_flags(RTF_HOST | RTF_UP) == decode_route_flags(RTF_UP | RTF_HOST)
    assert decode_route_flags(RTF_HOST | RTF_UP).startswith("U")


def _ax25_lines():
    row = f"{'GB7ABC-1':<9} {'ax0':<4} 12\n"
    return ["callsign  dev  count\n", row]


def test_format_ax25_routes():
    text = format_ax25_routes(_ax25_lines())
    lines = text.splitlines()
    assert lines[0] == "Kernel AX.25 routing table"
    assert lines[1] == "Destination  Iface    Use"
    assert len(lines) == 3
    assert lines[2].split() == ["GB7ABC-1", "ax0", "12"]


def test_format_ax25_routes_header_only():
    assert len(format_ax25_routes(["callsign dev count\n"]).splitlines()) == 2


def test_format_ddp_routes():
    text = "Target Router Flags Dev\n65280.1 65280.2 3 eth0\n"
    lines = format_ddp_routes(text).splitlines()
    assert lines[0] == DDP_HEADER
    assert lines[1].split() == ["65280.1", "65280.2", "eth0", "UG"]


def test_format_ddp_routes_incomplete_row_ignored():
    text = "Target Router Flags Dev\n65280.1 65280.2 3\n"
    assert format_ddp_routes(text).splitlines() == [DDP_HEADER]


def test_ax25_table_from_file(tmp_path):
    path = tmp_path / "ax25_route"
    path.write_text("".join(_ax25_lines()))
    assert ax25_route_table(path) == format_ax25_routes(_ax25_lines())


def test_ddp_table_from_file(tmp_path):
    path = tmp_path / "atalk_route"
    content = "Target Router Flags Dev\n1.1 1.2 1 eth1\n"
    path.write_text(content)
    assert ddp_route_table(path) == format_ddp_routes(content)


def test_missing_tables_raise(tmp_path):
    with pytest.raises(RouteError, match="AX.25 not configured"):
        ax25_route_table(tmp_path / "missing")
    with pytest.raises(RouteError, match="AppleTalk"):
        ddp_route_table(tmp_path / "missing")


def test_route_info_unknown_family():
    with pytest.raises(RouteError, match="not supported"):
        route_info("bogus", 0)


def test_route_info_family_without_table():
    with pytest.raises(RouteError, match="No routing"):
        route_info("unix", 0)


def test_route_info_empty_list():
    with pytest.raises(RouteError):
        route_info(",,", 0)