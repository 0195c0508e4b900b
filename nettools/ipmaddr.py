"""List, add and delete multicast addresses of network interfaces."""

from __future__ import annotations

import re
import socket
import struct
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .families import AF_INET, AF_INET6, AF_UNSPEC
from .hexaddr import AddressError

AF_PACKET = 17

PROC_NET = "/proc/net"
DEV_MCAST = "dev_mcast"
IGMP = "igmp"
IGMP6 = "igmp6"

SIOCADDMULTI = 0x8931
SIOCDELMULTI = 0x8932

E_VERSION = 5
_EXIT_FAILURE = 255

_IFNAMSIZ = 16
_SA_DATA_LEN = 14
_IFREQ_SIZE = 40

RELEASE = "net-tools 1.60"
VERSION = "ipmaddr 1.1"

_HEX = "0123456789abcdefABCDEF"
_IGMP_GROUP = re.compile(r"\s*([0-9a-fA-F]{1,8})(?:\s*([+-]?\d+))?")
_IGMP_DEVICE = re.compile(r"\s*([+-]?\d+)\s+(\S+)")


class UsageError(Exception):
    """Raised when the command line is not understood."""


@dataclass(frozen=True)
class MulticastAddress:
    """One multicast address joined by an interface."""

    index: int
    name: str
    family: int
    data: bytes
    users: int = 0
    features: str | None = None


def _hex_byte(text: str, pos: int) -> int:
    """Read one byte written as one or two hex digits at ``pos``."""
    if text[pos] not in _HEX:
        raise AddressError(f"invalid hex address: {text!r}")
    if text[pos + 1] in _HEX:
        return int(text[pos:pos + 2], 16)
    return int(text[pos], 16)


def parse_lla(text: str) -> bytes:
    """Parse a link-layer address; ``:`` and ``.`` between bytes are skipped."""
    result = bytearray()
    pos = 0
    end = len(text)
    while pos < end:
        if text[pos] in ":.":
            pos += 1
            continue
        if pos + 1 >= end:
            raise AddressError(f"invalid link-layer address: {text!r}")
        result.append(_hex_byte(text, pos))
        pos += 2
    return bytes(result)


def parse_hex(text: str) -> bytes:
    """Parse an unbroken string of hex digit pairs."""
    result = bytearray()
    pos = 0
    end = len(text)
    while pos < end:
        if pos + 1 >= end:
            raise AddressError(f"invalid hex address: {text!r}")
        result.append(_hex_byte(text, pos))
        pos += 2
    return bytes(result)


def format_lla(data: bytes) -> str:
    """Format a link-layer address as lower-case colon-separated hex."""
    return ":".join(format(byte, "02x") for byte in bytes(data))


def _to_int(text: str) -> int | None:
    try:
        return int(text)
    except ValueError:
        return None


def read_dev_mcast(text: str, device: str) -> list[MulticastAddress]:
    """Read link-layer groups from the text of ``dev_mcast``."""
    entries = []
    for line in text.splitlines():
        fields = line.split()
        if len(fields) < 5:
            continue
        index, users, static = (_to_int(fields[i]) for i in (0, 2, 3))
        if index is None or users is None or static is None:
            continue
        name = fields[1]
        if device and device != name:
            continue
        try:
            data = parse_hex(fields[4])
        except AddressError:
            continue
        entries.append(
            MulticastAddress(
                index, name, AF_PACKET, data, users, "static" if static else None
            )
        )
    return entries


def read_igmp(text: str, device: str) -> list[MulticastAddress]:
    """Read IPv4 groups from the text of ``igmp``; the first line is a header."""
    entries = []
    index, name = 0, ""
    data, users = bytes(4), 0
    for line in text.splitlines()[1:]:
        if not line.startswith("\t"):
            match = _IGMP_DEVICE.match(line)
            if match:
                index, name = int(match.group(1)), match.group(2)
            continue
        if device and device != name:
            continue
        match = _IGMP_GROUP.match(line)
        if match:
            data = struct.pack("=I", int(match.group(1), 16))
            if match.group(2) is not None:
                users = int(match.group(2))
        entries.append(MulticastAddress(index, name, AF_INET, data, users))
    return entries


def read_igmp6(text: str, device: str) -> list[MulticastAddress]:
    """Read IPv6 groups from the text of ``igmp6``."""
    entries = []
    for line in text.splitlines():
        fields = line.split()
        if len(fields) < 3:
            continue
        index = _to_int(fields[0])
        if index is None:
            continue
        name = fields[1]
        if device and device != name:
            continue
        users = _to_int(fields[3]) if len(fields) > 3 else 0
        try:
            data = parse_hex(fields[2])
        except AddressError:
            continue
        entries.append(MulticastAddress(index, name, AF_INET6, data, users or 0))
    return entries


def _format_host(family: int, data: bytes, resolve: bool) -> str:
    sock_family = {AF_INET: socket.AF_INET, AF_INET6: socket.AF_INET6}.get(family)
    if sock_family is None:
        return "?"
    try:
        text = socket.inet_ntop(sock_family, bytes(data))
    except (OSError, ValueError):
        return "?"
    if resolve:
        try:
            return socket.gethostbyaddr(text)[0]
        except (OSError, UnicodeError):
            pass
    return text


def _format_address(entry: MulticastAddress, resolve: bool) -> str:
    out = "\t"
    if entry.family == AF_PACKET:
        out += "link  " + format_lla(entry.data)
    else:
        if entry.family == AF_INET:
            out += "inet  "
        elif entry.family == AF_INET6:
            out += "inet6 "
        else:
            out += f"family {entry.family} "
        out += _format_host(entry.family, entry.data, resolve)
    if entry.users != 1:
        out += f" users {entry.users}"
    if entry.features:
        out += f" {entry.features}"
    return out + "\n"


def format_address(entry: MulticastAddress) -> str:
    """Format one multicast address as a tab-indented line."""
    return _format_address(entry, False)


def _format_list(entries: Iterable[MulticastAddress], resolve: bool) -> str:
    out = []
    current = 0
    for entry in entries:
        if entry.index != current:
            current = entry.index
            out.append(f"{current}:\t{entry.name}\n")
        out.append(_format_address(entry, resolve))
    return "".join(out)


def format_list(entries: Iterable[MulticastAddress]) -> str:
    """Format addresses grouped under a line per interface index."""
    return _format_list(entries, False)


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def collect(
    family: int | None, device: str, root: str | Path = PROC_NET
) -> list[MulticastAddress]:
    """Gather the multicast addresses of one family (or all), ordered by index."""
    base = Path(root)
    entries: list[MulticastAddress] = []
    sources = (
        (AF_PACKET, DEV_MCAST, read_dev_mcast),
        (AF_INET, IGMP, read_igmp),
        (AF_INET6, IGMP6, read_igmp6),
    )
    for source_family, filename, reader in sources:
        if family and family != source_family:
            continue
        text = _read(base / filename)
        if text is not None:
            entries.extend(reader(text, device))
    return sorted(entries, key=lambda entry: entry.index)


def modify(add: bool, args: list[str]) -> None:
    """Join (``add``) or leave a link-layer group: ``ADDRESS dev NAME``."""
    name = ""
    address = b""
    rest = list(args)
    while rest:
        word = rest.pop(0)
        if word == "dev":
            if not rest:
                raise UsageError("missing device name")
            if name:
                raise UsageError("device given twice")
            name = rest.pop(0)[:_IFNAMSIZ]
        else:
            if address and address[0]:
                raise UsageError("address given twice")
            try:
                address = parse_lla(word)
            except AddressError as err:
                raise UsageError(str(err)) from err
            if len(address) > _SA_DATA_LEN:
                raise UsageError(f"address too long: {word!r}")
    if not name:
        raise UsageError("no device given")

    import fcntl

    ifreq = (
        name.encode().ljust(_IFNAMSIZ, b"\0")[:_IFNAMSIZ]
        + struct.pack("=H", 0)
        + address.ljust(_SA_DATA_LEN, b"\0")
    ).ljust(_IFREQ_SIZE, b"\0")
    request = SIOCADDMULTI if add else SIOCDELMULTI
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        fcntl.ioctl(sock.fileno(), request, ifreq)


def _matches(cmd: str, pattern: str) -> bool:
    return len(cmd) <= len(pattern) and pattern.startswith(cmd)


def _usage() -> int:
    sys.stderr.write(
        "Usage: ipmaddr [ add | del ] MULTIADDR dev STRING\n"
        "       ipmaddr show [ dev STRING ] [ ipv4 | ipv6 | link | all ]\n"
        "       ipmaddr -V | -version\n"
    )
    return _EXIT_FAILURE


def _list(args: list[str], resolve: bool) -> int:
    family = AF_UNSPEC
    device = ""
    rest = list(args)
    while rest:
        word = rest.pop(0)
        if word == "all":
            family = AF_UNSPEC
        elif word == "ipv4":
            family = AF_INET
        elif word == "ipv6":
            family = AF_INET6
        elif word == "link":
            family = AF_PACKET
        else:
            if word == "dev":
                if not rest:
                    raise UsageError("missing device name")
                word = rest.pop(0)
            if not 0 < len(word) < _IFNAMSIZ:
                raise UsageError(f"bad device name {word!r}")
            device = word
    sys.stdout.write(_format_list(collect(family, device, PROC_NET), resolve))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the ipmaddr command and return its exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    resolve = False
    try:
        while args and args[0].startswith("-"):
            opt = args.pop(0)
            if _matches(opt, "-family"):
                if not args or args.pop(0) not in ("inet", "inet6"):
                    raise UsageError("bad family")
            elif _matches(opt, "-stats") or _matches(opt, "-statistics"):
                pass
            elif _matches(opt, "-resolve"):
                resolve = True
            elif _matches(opt, "-V") or _matches(opt, "--version"):
                print(f"{RELEASE}\n{VERSION}")
                return E_VERSION
            else:
                raise UsageError(f"unknown option {opt!r}")
        if not args:
            return _list([], resolve)
        command, rest = args[0], args[1:]
        if _matches(command, "add"):
            modify(True, rest)
            return 0
        if _matches(command, "delete"):
            modify(False, rest)
            return 0
        if any(_matches(command, word) for word in ("list", "show", "lst")):
            return _list(rest, resolve)
        raise UsageError(f"unknown command {command!r}")
    except UsageError:
        return _usage()
    except OSError as err:
        print(f"ioctl: {err.strerror}", file=sys.stderr)
        return 1