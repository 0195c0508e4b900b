"""Text forms of hexadecimal hardware addresses.

Covers Ethernet, EUI-64, InfiniBand, FDDI, HIPPI and ARCnet addresses.
Every ``parse_*`` function returns a byte string of the full address
length. Missing trailing bytes are zero. Text after a complete address
is ignored.
"""

from __future__ import annotations

ETHER_ALEN = 6
EUI64_ALEN = 8
INFINIBAND_ALEN = 20
FDDI_ALEN = 6
HIPPI_ALEN = 6
ARCNET_ALEN = 1

_HEX_DIGITS = "0123456789abcdefABCDEF"


class AddressError(ValueError):
    """Raised when a hardware address cannot be parsed or formatted."""


def _hex_value(ch: str) -> int | None:
    if ch and ch in _HEX_DIGITS:
        return int(ch, 16)
    return None


def _parse_lenient(text: str, length: int, kind: str) -> bytes:
    """Parse colon-separated bytes where one hex digit is enough for a byte."""
    result = bytearray()
    pos = 0
    end = len(text)
    while pos < end and len(result) < length:
        high = _hex_value(text[pos])
        if high is None:
            raise AddressError(f"invalid {kind} address: {text!r}")
        pos += 1
        nxt = text[pos] if pos < end else ""
        low = _hex_value(nxt)
        if low is not None:
            value = (high << 4) | low
        elif nxt in (":", ""):
            value = high
        else:
            raise AddressError(f"invalid {kind} address: {text!r}")
        if nxt:
            pos += 1
        result.append(value)
        if pos < end and text[pos] == ":":
            pos += 1
    return bytes(result.ljust(length, b"\0"))


def _parse_strict(text: str, length: int, kind: str) -> bytes:
    """Parse bytes that each need exactly two hex digits, optionally colon-separated."""
    result = bytearray()
    pos = 0
    end = len(text)
    while pos < end and len(result) < length:
        high = _hex_value(text[pos])
        low = _hex_value(text[pos + 1]) if pos + 1 < end else None
        if high is None or low is None:
            raise AddressError(f"invalid {kind} address: {text!r}")
        pos += 2
        result.append((high << 4) | low)
        if pos < end and text[pos] == ":":
            pos += 1
    return bytes(result.ljust(length, b"\0"))


def _format(data: bytes, length: int, kind: str, digits: str, sep: str) -> str:
    raw = bytes(data)
    if len(raw) < length:
        raise AddressError(
            f"{kind} address needs {length} bytes, got {len(raw)}"
        )
    return sep.join(format(byte, digits) for byte in raw[:length])


def format_ether(data: bytes) -> str:
    """Format an Ethernet address as lower-case colon-separated hex."""
    return _format(data, ETHER_ALEN, "ether", "02x", ":")


def parse_ether(text: str) -> bytes:
    """Parse an Ethernet address such as ``02:00:00:00:00:01``."""
    return _parse_lenient(text, ETHER_ALEN, "ether")


def format_eui64(data: bytes) -> str:
    """Format an EUI-64 address as upper-case colon-separated hex."""
    return _format(data, EUI64_ALEN, "eui64", "02X", ":")


def parse_eui64(text: str) -> bytes:
    """Parse an EUI-64 address."""
    return _parse_lenient(text, EUI64_ALEN, "eui64")


def format_infiniband(data: bytes) -> str:
    """Format a 20-byte InfiniBand address as upper-case colon-separated hex."""
    return _format(data, INFINIBAND_ALEN, "infiniband", "02X", ":")


def parse_infiniband(text: str) -> bytes:
    """Parse an InfiniBand address."""
    return _parse_lenient(text, INFINIBAND_ALEN, "infiniband")


def format_fddi(data: bytes) -> str:
    """Format an FDDI address as upper-case dash-separated hex."""
    return _format(data, FDDI_ALEN, "fddi", "02X", "-")


def parse_fddi(text: str) -> bytes:
    """Parse an FDDI address; every byte needs two hex digits."""
    return _parse_strict(text, FDDI_ALEN, "fddi")


def format_hippi(data: bytes) -> str:
    """Format a HIPPI address as upper-case colon-separated hex."""
    return _format(data, HIPPI_ALEN, "hippi", "02X", ":")


def parse_hippi(text: str) -> bytes:
    """Parse a HIPPI address; every byte needs two hex digits."""
    return _parse_strict(text, HIPPI_ALEN, "hippi")


def format_arcnet(data: bytes) -> str:
    """Format a one-byte ARCnet address as two upper-case hex digits."""
    return _format(data, ARCNET_ALEN, "arcnet", "02X", "")


def parse_arcnet(text: str) -> bytes:
    """Parse a one-byte ARCnet address given as two hex digits."""
    return _parse_strict(text, ARCNET_ALEN, "arcnet")