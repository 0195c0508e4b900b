"""Table of supported hardware types and lookups in it."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass

from . import hexaddr
from .ash import ARPHRD_ASH, ASH_ALEN, format_ash, parse_ash
from .ax25 import ARPHRD_AX25, AX25_ALEN, format_callsign, parse_callsign
from .hexaddr import AddressError

ARPHRD_ETHER = 1
ARPHRD_ARCNET = 7
ARPHRD_DLCI = 15
ARPHRD_EUI64 = 27
ARPHRD_INFINIBAND = 32
ARPHRD_HDLC = 513
ARPHRD_LAPB = 516
ARPHRD_FRAD = 770
ARPHRD_LOOPBACK = 772
ARPHRD_FDDI = 774
ARPHRD_HIPPI = 780
ARPHRD_ECONET = 782
ARPHRD_UNSPEC = -1


@dataclass(frozen=True)
class HardwareType:
    """A hardware type: its name, title, ARP type number and address length."""

    name: str
    title: str
    type: int
    alen: int
    formatter: Callable[[bytes], str] | None = None
    parser: Callable[[str], bytes] | None = None
    suppress_null_addr: bool = False

    def format(self, data: bytes) -> str:
        """Format a hardware address of this type."""
        if self.formatter is None:
            raise AddressError(f"hw address type `{self.name}' has no formatter")
        return self.formatter(data)

    def parse(self, text: str) -> bytes:
        """Parse a hardware address of this type."""
        if self.parser is None:
            raise AddressError(
                f"hw address type `{self.name}' has no handler to set address"
            )
        return self.parser(text)


def format_dlci(data: bytes) -> str:
    """Format a Frame Relay DLCI stored as a native-order signed short."""
    raw = bytes(data)
    if len(raw) < 2:
        raise AddressError("DLCI address needs at least 2 bytes")
    return str(int.from_bytes(raw[:2], sys.byteorder, signed=True))


_HWTYPES: tuple[HardwareType, ...] = (
    HardwareType("loop", "Local Loopback", ARPHRD_LOOPBACK, 0),
    HardwareType(
        "ash", "Ash", ARPHRD_ASH, ASH_ALEN, format_ash, parse_ash, True
    ),
    HardwareType(
        "ether", "Ethernet", ARPHRD_ETHER, hexaddr.ETHER_ALEN,
        hexaddr.format_ether, hexaddr.parse_ether,
    ),
    HardwareType(
        "ax25", "AMPR AX.25", ARPHRD_AX25, AX25_ALEN,
        format_callsign, parse_callsign,
    ),
    HardwareType("hdlc", "(Cisco)-HDLC", ARPHRD_HDLC, 0),
    HardwareType("lapb", "LAPB", ARPHRD_LAPB, 0),
    HardwareType(
        "arcnet", "ARCnet", ARPHRD_ARCNET, hexaddr.ARCNET_ALEN,
        hexaddr.format_arcnet, hexaddr.parse_arcnet,
    ),
    HardwareType("dlci", "Frame Relay DLCI", ARPHRD_DLCI, 3, format_dlci),
    HardwareType("frad", "Frame Relay Access Device", ARPHRD_FRAD, 0),
    HardwareType(
        "fddi", "Fiber Distributed Data Interface", ARPHRD_FDDI,
        hexaddr.FDDI_ALEN, hexaddr.format_fddi, hexaddr.parse_fddi,
    ),
    HardwareType(
        "hippi", "HIPPI", ARPHRD_HIPPI, hexaddr.HIPPI_ALEN,
        hexaddr.format_hippi, hexaddr.parse_hippi,
    ),
    HardwareType("ec", "Econet", ARPHRD_ECONET, 0),
    HardwareType(
        "infiniband", "InfiniBand", ARPHRD_INFINIBAND, hexaddr.INFINIBAND_ALEN,
        hexaddr.format_infiniband, hexaddr.parse_infiniband,
    ),
    HardwareType(
        "eui64", "Generic EUI-64", ARPHRD_EUI64, hexaddr.EUI64_ALEN,
        hexaddr.format_eui64, hexaddr.parse_eui64,
    ),
    HardwareType("unspec", "UNSPEC", ARPHRD_UNSPEC, 0),
)


def get_hwtype(name: str) -> HardwareType | None:
    """Return the hardware type with this name, or None."""
    return next((hw for hw in _HWTYPES if hw.name == name), None)


def get_hwntype(type_: int) -> HardwareType | None:
    """Return the first hardware type with this ARP type number, or None."""
    return next((hw for hw in _HWTYPES if hw.type == type_), None)


def hardware_list(arp_only: bool) -> str:
    """Return the usage listing of hardware types, three per line.

    With ``arp_only`` set, types without an address are left out.
    """
    shown = [
        hw for hw in _HWTYPES
        if hw.type != ARPHRD_UNSPEC and not (arp_only and hw.alen == 0)
    ]
    parts = []
    for count, hw in enumerate(shown):
        if count % 3 == 0:
            parts.append("\n    " if count else "    ")
        parts.append(f"{hw.name or '..'} ({hw.title}) ")
    parts.append("\n")
    return "".join(parts)


def hw_null_address(hw: HardwareType, data: bytes) -> bool:
    """Return True if the first ``hw.alen`` bytes of the address are all zero."""
    return not any(bytes(data)[:hw.alen])