"""AX.25 callsign addresses.

A callsign is stored in seven bytes: six characters shifted left by one
bit, padded with shifted spaces, then an SSID byte.
"""

from __future__ import annotations

import string

from .hexaddr import AddressError

AX25_ALEN = 7
AF_AX25 = 3
ARPHRD_AX25 = 3

_CALLSIGN_CHARS = 6
_VALID = set(string.ascii_uppercase + string.digits)
_WHITESPACE = " \t\n\r\f\v"


def _atoi(text: str) -> int:
    """Read a leading decimal integer like ``atoi``; return 0 if there is none."""
    stripped = text.lstrip(_WHITESPACE)
    sign = 1
    if stripped[:1] in ("+", "-"):
        sign = -1 if stripped[0] == "-" else 1
        stripped = stripped[1:]
    digits = ""
    for ch in stripped:
        if ch not in string.digits:
            break
        digits += ch
    return sign * int(digits) if digits else 0


def format_callsign(data: bytes) -> str:
    """Format a seven-byte AX.25 address as ``CALL`` or ``CALL-SSID``."""
    raw = bytes(data)
    if len(raw) < AX25_ALEN:
        raise AddressError(f"AX.25 address needs {AX25_ALEN} bytes, got {len(raw)}")
    chars = []
    for byte in raw[:_CALLSIGN_CHARS]:
        ch = chr(byte >> 1)
        if ch in (" ", "\0"):
            break
        chars.append(ch)
    call = "".join(chars)
    ssid = (raw[6] & 0x1E) >> 1
    if ssid:
        call += f"-{ssid}"
    return call


def parse_callsign(text: str) -> bytes:
    """Parse a callsign with an optional ``-SSID`` suffix into seven bytes."""
    result = bytearray()
    pos = 0
    end = len(text)
    while pos < end and text[pos] != "-" and len(result) < _CALLSIGN_CHARS:
        ch = text[pos]
        pos += 1
        if "a" <= ch <= "z":
            ch = ch.upper()
        if ch not in _VALID:
            raise AddressError(f"invalid callsign: {text!r}")
        result.append((ord(ch) << 1) & 0xFE)
    if len(result) == _CALLSIGN_CHARS and pos < end and text[pos] != "-":
        raise AddressError(f"callsign too long: {text!r}")
    while len(result) < _CALLSIGN_CHARS:
        result.append((ord(" ") << 1) & 0xFE)
    if pos < end and text[pos] == "-":
        ssid = _atoi(text[pos + 1:])
        result.append((ssid << 1) & 0xFE)
    else:
        result.append(0)
    return bytes(result)


def format_ax25_sockaddr(family: int, data: bytes) -> str:
    """Format the callsign of an AX.25 socket address."""
    if family in (0xFFFF, 0):
        return "[NONE SET]"
    return format_callsign(data)