"""Ash hardware and socket addresses.

An Ash address is a route of up to 64 hops. Each hop number from 0 to 15
is stored as a Hamming-coded byte. Unused positions hold 0xC9.
"""

from __future__ import annotations

import string

from .hexaddr import AddressError

ASH_ALEN = 64
ARPHRD_ASH = 517
AF_ASH = 18

HAMMING = bytes(
    [
        0x15, 0x02, 0x49, 0x5E, 0x64, 0x73, 0x38, 0x2F,
        0xD0, 0xC7, 0x8C, 0x9B, 0xA1, 0xB6, 0xFD, 0xEA,
    ]
)

_FILL = 0xC9
_END = 0xFF
_WHITESPACE = " \t\n\r\f\v"


def _scan_hex(text: str, pos: int) -> tuple[int, int]:
    """Read a base-16 integer like ``strtol`` does; return value and end position."""
    end = len(text)
    i = pos
    while i < end and text[i] in _WHITESPACE:
        i += 1
    sign = 1
    if i < end and text[i] in "+-":
        sign = -1 if text[i] == "-" else 1
        i += 1
    if (
        text[i:i + 2].lower() == "0x"
        and i + 2 < end
        and text[i + 2] in string.hexdigits
    ):
        i += 2
    start = i
    while i < end and text[i] in string.hexdigits:
        i += 1
    if i == start:
        return 0, pos
    return sign * int(text[start:i], 16), i


def format_ash(data: bytes) -> str:
    """Format an Ash route in brackets.

    The route ends at the first 0xC9 or 0xFF byte. Each hop byte shows
    only the leading digit of its hexadecimal form.
    """
    digits = []
    for byte in bytes(data)[:ASH_ALEN]:
        if byte in (_FILL, _END):
            break
        digits.append(format(byte, "x")[0])
    return "[" + "".join(digits) + "]"


def parse_ash(text: str) -> bytes:
    """Parse colon-separated hexadecimal hop numbers into a 64-byte Ash address."""
    result = bytearray()
    pos = 0
    finished = False
    while not finished and len(result) < ASH_ALEN:
        hop, nxt = _scan_hex(text, pos)
        if not 0 <= hop < len(HAMMING):
            raise AddressError(f"malformed Ash address: {text!r}")
        result.append(HAMMING[hop])
        sep = text[nxt] if nxt < len(text) else ""
        if sep == ":":
            pos = nxt + 1
        elif sep == "":
            finished = True
        else:
            raise AddressError(f"malformed Ash address: {text!r}")
    return bytes(result).ljust(ASH_ALEN, bytes([_FILL]))


def format_ash_sockaddr(family: int, data: bytes) -> str:
    """Format the address part of an Ash socket address."""
    if family != AF_ASH:
        return "[NONE SET]"
    return format_ash(data)