"""Routing table listings for the address families that have one."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from .families import get_aftype

RTF_UP = 0x0001
RTF_GATEWAY = 0x0002
RTF_HOST = 0x0004
RTF_REINSTATE = 0x0008
RTF_DYNAMIC = 0x0010
RTF_MODIFIED = 0x0020
RTF_MTU = 0x0040
RTF_WINDOW = 0x0080
RTF_IRTT = 0x0100
RTF_REJECT = 0x0200
RTF_NOTCACHED = 0x0400
RTF_DEFAULT = 0x00010000
RTF_ALLONLINK = 0x00020000
RTF_ADDRCONF = 0x00040000
RTF_NONEXTHOP = 0x00200000
RTF_EXPIRES = 0x00400000
RTF_CACHE = 0x01000000
RTF_FLOW = 0x02000000
RTF_POLICY = 0x04000000
RTF_LOCAL = 0x80000000

PATH_PROCNET_AX25_ROUTE = "/proc/net/ax25_route"
PATH_PROCNET_ATALK_ROUTE = "/proc/net/atalk_route"

DDP_HEADER = "Destination     Gateway         Device          Flags"

_FLAG_LETTERS: tuple[tuple[int, str], ...] = (
    (RTF_UP, "U"),
    (RTF_GATEWAY, "G"),
    (RTF_REJECT, "!"),
    (RTF_HOST, "H"),
    (RTF_REINSTATE, "R"),
    (RTF_DYNAMIC, "D"),
    (RTF_MODIFIED, "M"),
    (RTF_DEFAULT, "d"),
    (RTF_ALLONLINK, "a"),
    (RTF_ADDRCONF, "c"),
    (RTF_NONEXTHOP, "o"),
    (RTF_EXPIRES, "e"),
    (RTF_CACHE, "c"),
    (RTF_FLOW, "f"),
    (RTF_POLICY, "p"),
    (RTF_LOCAL, "l"),
    (RTF_MTU, "u"),
    (RTF_WINDOW, "w"),
    (RTF_IRTT, "i"),
    (RTF_NOTCACHED, "n"),
)


class RouteError(Exception):
    """Raised when a routing table cannot be listed."""


def _atoi(text: str) -> int:
    stripped = text.lstrip(" \t\n\r\f\v")
    sign = 1
    if stripped[:1] in ("+", "-"):
        sign = -1 if stripped[0] == "-" else 1
        stripped = stripped[1:]
    digits = ""
    for ch in stripped:
        if not ch.isdigit():
            break
        digits += ch
    return sign * int(digits) if digits else 0


def decode_route_flags(flags: int) -> str:
    """Turn route flag bits into their one-letter codes."""
    return "".join(letter for bit, letter in _FLAG_LETTERS if flags & bit)


def format_ax25_routes(lines: Iterable[str]) -> str:
    """Format the lines of the AX.25 route table; the first line is a header."""
    out = ["Kernel AX.25 routing table\n", "Destination  Iface    Use\n"]
    rows = iter(lines)
    next(rows, None)
    for line in rows:
        line = line.rstrip("\n")
        dest = line[:9]
        iface = line[10:14]
        use = _atoi(line[15:])
        out.append(f"{dest:<9}    {iface:<5}  {use:5d}\n")
    return "".join(out)


def format_ddp_routes(text: str) -> str:
    """Format the AppleTalk route table; its first four fields are a header."""
    tokens = text.split()[4:]
    out = [DDP_HEADER + "\n"]
    for start in range(0, len(tokens) - 3, 4):
        dest, gw, flags, dev = tokens[start:start + 4]
        out.append(
            f"{dest:<16}{gw:<16}{dev:<16}{decode_route_flags(_atoi(flags))}\n"
        )
    return "".join(out)


def ax25_route_table(path: str | Path = PATH_PROCNET_AX25_ROUTE) -> str:
    """Read and format the kernel AX.25 routing table."""
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            return format_ax25_routes(fh)
    except OSError as err:
        raise RouteError(
            f"{path}: {err.strerror}\nAX.25 not configured in this system."
        ) from err


def ddp_route_table(path: str | Path = PATH_PROCNET_ATALK_ROUTE) -> str:
    """Read and format the kernel AppleTalk routing table."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as err:
        raise RouteError(
            f"Error opening {path}: {err.strerror}\n"
            "DDP (AppleTalk) not configured on this system."
        ) from err
    return format_ddp_routes(text)


_PRINTERS: dict[str, Callable[[int], str]] = {
    "ax25": lambda options: ax25_route_table(),
    "ddp": lambda options: ddp_route_table(),
}


def route_info(afnames: str, options: int) -> str:
    """Return the routing tables of the comma-separated address families."""
    out = []
    for name in afnames[:255].split(","):
        if not name:
            continue
        family = get_aftype(name)
        if family is None:
            raise RouteError(f"Address family `{name}' not supported.")
        printer = _PRINTERS.get(family.name) if family.routable else None
        if printer is None:
            raise RouteError(f"No routing for address family `{family.name}'.")
        out.append(printer(options))
    if not out:
        raise RouteError("No address family given.")
    return "".join(out)