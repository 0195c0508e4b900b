"""Table of supported address families and their names.

Also holds the AppleTalk DDP and Econet address forms.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from .ash import AF_ASH
from .ax25 import AF_AX25

AF_UNSPEC = 0
AF_UNIX = 1
AF_INET = 2
AF_IPX = 4
AF_APPLETALK = 5
AF_NETROM = 6
AF_X25 = 9
AF_INET6 = 10
AF_ROSE = 11
AF_ECONET = 19

_AFNAME_MAX = 256


class FamilyError(ValueError):
    """Raised for an unknown address family or a malformed family address."""


@dataclass(frozen=True)
class AddressFamily:
    """An address family: its name, title, number and address length."""

    name: str
    title: str
    af: int
    alen: int = 0
    routable: bool = False
    proc_path: str = ""


_AFTYPES: tuple[AddressFamily, ...] = (
    AddressFamily("unix", "UNIX Domain", AF_UNIX, 0, False, "/proc/net/unix"),
    AddressFamily("inet", "DARPA Internet", AF_INET, 4, True),
    AddressFamily("inet6", "IPv6", AF_INET6, 16, True),
    AddressFamily("ax25", "AMPR AX.25", AF_AX25, 7, True, "/proc/net/ax25"),
    AddressFamily("netrom", "AMPR NET/ROM", AF_NETROM, 7, True),
    AddressFamily("rose", "AMPR ROSE", AF_ROSE, 10),
    AddressFamily("ipx", "Novell IPX", AF_IPX, 0, True),
    AddressFamily(
        "ddp", "Appletalk DDP", AF_APPLETALK, 0, True, "/proc/net/appletalk"
    ),
    AddressFamily("ec", "Econet", AF_ECONET, 0, False, "/proc/sys/net/econet"),
    AddressFamily("ash", "Ash", AF_ASH, 0, False, "/proc/sys/net/ash"),
    AddressFamily("x25", "CCITT X.25", AF_X25, 0, True),
    AddressFamily("unspec", "UNSPEC", AF_UNSPEC, 0),
)

_ALIASES: tuple[tuple[str, str], ...] = (
    ("ax25", "ax25"),
    ("ip", "inet"),
    ("ip6", "inet6"),
    ("ipx", "ipx"),
    ("rose", "rose"),
    ("appletalk", "ddp"),
    ("netrom", "netrom"),
    ("inet", "inet"),
    ("inet6", "inet6"),
    ("ddp", "ddp"),
    ("unix", "unix"),
    ("tcpip", "inet"),
    ("econet", "ec"),
    ("x25", "x25"),
    ("ash", "ash"),
)

_ECONET_RE = re.compile(r"\s*([+-]?\d+)(?:\.\s*([+-]?\d+))?")


def format_ddp(net: int, node: int) -> str:
    """Format an AppleTalk address as ``net/node``."""
    return f"{net}/{node}"


def format_econet(net: int, station: int) -> str:
    """Format an Econet address as ``net.station``."""
    return f"{net}.{station}"


def parse_econet(text: str) -> tuple[int, int]:
    """Parse ``net.station`` or a bare station number; return (net, station).

    Both parts are stored as single bytes.
    """
    match = _ECONET_RE.match(text)
    if match is None:
        raise FamilyError(f"invalid Econet address: {text!r}")
    first, second = match.groups()
    if second is None:
        return 0, int(first) & 0xFF
    return int(first) & 0xFF, int(second) & 0xFF


def get_aftype(name: str) -> AddressFamily | None:
    """Return the address family with this name, or None."""
    for family in _AFTYPES:
        if family.name == name:
            return family
    if "," in name:
        raise FamilyError("Please don't supply more than one address family.")
    return None


def get_afntype(af: int) -> AddressFamily | None:
    """Return the address family with this number, or None."""
    return next((family for family in _AFTYPES if family.af == af), None)


def translate_families(arg: str) -> list[str]:
    """Translate a comma-separated list of family aliases into family names."""
    names: list[str] = []
    length = 0
    for alias in arg[:_AFNAME_MAX - 1].split(","):
        name = next((n for a, n in _ALIASES if a == alias), None)
        if name is None:
            raise FamilyError(f"Unknown address family `{alias}'.")
        length += len(name) + (1 if names else 0)
        if length + 1 >= _AFNAME_MAX:
            raise FamilyError("Too much address family arguments.")
        names.append(name)
    return names


def default_families(tool: str, argv0: str, default: str) -> str:
    """Choose the family list from a program name such as ``inet6_route``.

    If the program name is the tool name with a prefix, the prefix (up to
    an underscore) names the families; otherwise ``default`` is used.
    """
    base = os.path.basename(argv0)
    if len(tool) >= len(base) or not base.endswith(tool):
        return default
    prefix = base[:-len(tool)].split("_", 1)[0]
    try:
        return ",".join(translate_families(prefix))
    except FamilyError:
        return prefix


def family_list(routable: bool) -> str:
    """Return the usage listing of address families, three per line.

    With ``routable`` set, only families with a routing table are listed.
    """
    shown = [
        family for family in _AFTYPES
        if family.af != AF_UNSPEC and not (routable and not family.routable)
    ]
    parts = []
    for count, family in enumerate(shown):
        if count % 3 == 0:
            parts.append("\n    " if count else "    ")
        parts.append(f"{family.name or '..'} ({family.title}) ")
    parts.append("\n")
    return "".join(parts)