"""Add, change, delete and list IP-in-IP, GRE and SIT tunnels."""

from __future__ import annotations

import array
import re
import socket
import struct
import sys
from dataclasses import dataclass
from pathlib import Path

IPPROTO_IPIP = 4
IPPROTO_IPV6 = 41
IPPROTO_GRE = 47

GRE_CSUM = 0x8000
GRE_ROUTING = 0x4000
GRE_KEY = 0x2000
GRE_SEQ = 0x1000
GRE_STRICT = 0x0800
GRE_REC = 0x0700
GRE_FLAGS = 0x00F8
GRE_VERSION = 0x0007

IP_DF = 0x4000

SIOCGETTUNNEL = 0x89F0
SIOCADDTUNNEL = 0x89F1
SIOCDELTUNNEL = 0x89F2
SIOCCHGTUNNEL = 0x89F3
SIOCGIFHWADDR = 0x8927

ARPHRD_TUNNEL = 768
ARPHRD_SIT = 776
ARPHRD_IPGRE = 778

PATH_PROCNET_DEV = "/proc/net/dev"

E_VERSION = 5
_EXIT_FAILURE = 255

_IFNAMSIZ = 16
_IFREQ_SIZE = 40

RELEASE = "net-tools 1.60"
VERSION = "iptunnel 1.01"

PARM_SIZE = 52

_DEFAULT_DEVICES = {
    IPPROTO_IPIP: "tunl0",
    IPPROTO_GRE: "gre0",
    IPPROTO_IPV6: "sit0",
}

_PROTO_NAMES = {
    IPPROTO_IPIP: "ip",
    IPPROTO_GRE: "gre",
    IPPROTO_IPV6: "ipv6",
}

_STAT_FIELDS = (
    "rx_bytes", "rx_packets", "rx_errs", "rx_drops", "rx_fifo", "rx_frame",
    "rx_multi", None,
    "tx_bytes", "tx_packets", "tx_errs", "tx_drops", "tx_fifo", "tx_colls",
    "tx_carrier",
)


class TunnelError(Exception):
    """Raised when a tunnel operation fails; ``usage`` marks a command-line misuse."""

    def __init__(self, message: str = "", *, usage: bool = False) -> None:
        super().__init__(message)
        self.usage = usage


@dataclass
class TunnelParams:
    """Parameters of a tunnel, as exchanged with the kernel.

    Keys and addresses are 32-bit numbers in network byte order meaning;
    an address of 0 means "any".
    """

    name: str = ""
    link: int = 0
    i_flags: int = 0
    o_flags: int = 0
    i_key: int = 0
    o_key: int = 0
    version: int = 4
    ihl: int = 5
    tos: int = 0
    frag_off: int = IP_DF
    ttl: int = 0
    protocol: int = 0
    saddr: int = 0
    daddr: int = 0

    def pack(self) -> bytes:
        """Return the kernel's binary form of these parameters."""
        return (
            self.name.encode()[:_IFNAMSIZ - 1].ljust(_IFNAMSIZ, b"\0")
            + struct.pack("=i", self.link)
            + struct.pack(
                "!HHII", self.i_flags, self.o_flags, self.i_key, self.o_key
            )
            + struct.pack(
                "!BBHHHBBHII",
                ((self.version & 0xF) << 4) | (self.ihl & 0xF),
                self.tos,
                0,
                0,
                self.frag_off,
                self.ttl,
                self.protocol,
                0,
                self.saddr,
                self.daddr,
            )
        )

    @classmethod
    def unpack(cls, data: bytes) -> TunnelParams:
        """Build parameters from the kernel's binary form."""
        raw = bytes(data)
        if len(raw) < PARM_SIZE:
            raise TunnelError(f"tunnel parameters need {PARM_SIZE} bytes")
        name = raw[:_IFNAMSIZ].split(b"\0", 1)[0].decode(errors="replace")
        (link,) = struct.unpack_from("=i", raw, 16)
        i_flags, o_flags, i_key, o_key = struct.unpack_from("!HHII", raw, 20)
        (vihl, tos, _len, _id, frag_off, ttl, protocol, _check,
         saddr, daddr) = struct.unpack_from("!BBHHHBBHII", raw, 32)
        return cls(
            name=name,
            link=link,
            i_flags=i_flags,
            o_flags=o_flags,
            i_key=i_key,
            o_key=o_key,
            version=vihl >> 4,
            ihl=vihl & 0xF,
            tos=tos,
            frag_off=frag_off,
            ttl=ttl,
            protocol=protocol,
            saddr=saddr,
            daddr=daddr,
        )


def _addr32(text: str) -> int:
    try:
        return int.from_bytes(socket.inet_pton(socket.AF_INET, text), "big")
    except OSError as err:
        raise TunnelError(
            f'an IP address is expected rather than "{text}"'
        ) from err


def _dotted(value: int) -> str:
    return socket.inet_ntoa((value & 0xFFFFFFFF).to_bytes(4, "big"))


def _scan_number(text: str) -> int:
    if re.fullmatch(r"0[xX][0-9a-fA-F]+", text):
        value = int(text, 16)
    elif re.fullmatch(r"0[0-7]*", text):
        value = int(text, 8)
    elif re.fullmatch(r"[1-9][0-9]*", text):
        value = int(text)
    else:
        raise TunnelError(f"invalid number {text!r}", usage=True)
    if value > 0xFFFFFFFF:
        raise TunnelError(f"number out of range {text!r}", usage=True)
    return value


def _is_multicast(addr: int) -> bool:
    return (addr & 0xF0000000) == 0xE0000000


def _key(value: str) -> int:
    return _scan_number(value)


def parse_tunnel_args(args: list[str]) -> TunnelParams:
    """Build tunnel parameters from the words of the command line."""
    params = TunnelParams()
    medium = ""
    rest = list(args)

    def next_arg(word: str) -> str:
        if not rest:
            raise TunnelError(f"missing argument after {word!r}", usage=True)
        return rest.pop(0)

    while rest:
        word = rest.pop(0)
        if word == "mode":
            value = next_arg(word)
            modes = {"ipip": IPPROTO_IPIP, "gre": IPPROTO_GRE, "sit": IPPROTO_IPV6}
            if value not in modes or params.protocol:
                raise TunnelError(f"bad mode {value!r}", usage=True)
            params.protocol = modes[value]
        elif word == "key":
            value = next_arg(word)
            params.i_flags |= GRE_KEY
            params.o_flags |= GRE_KEY
            key = _addr32(value) if "." in value else _key(value)
            params.i_key = params.o_key = key
        elif word == "ikey":
            value = next_arg(word)
            params.i_flags |= GRE_KEY
            if "." in value:
                # A dotted input key is stored as the output key.
                params.o_key = _addr32(value)
            else:
                params.i_key = _key(value)
        elif word == "okey":
            value = next_arg(word)
            params.o_flags |= GRE_KEY
            params.o_key = _addr32(value) if "." in value else _key(value)
        elif word == "seq":
            params.i_flags |= GRE_SEQ
            params.o_flags |= GRE_SEQ
        elif word == "iseq":
            params.i_flags |= GRE_SEQ
        elif word == "oseq":
            params.o_flags |= GRE_SEQ
        elif word == "csum":
            params.i_flags |= GRE_CSUM
            params.o_flags |= GRE_CSUM
        elif word == "icsum":
            params.i_flags |= GRE_CSUM
        elif word == "ocsum":
            params.o_flags |= GRE_CSUM
        elif word == "nopmtudisc":
            params.frag_off = 0
        elif word == "remote":
            value = next_arg(word)
            if value != "any":
                params.daddr = _addr32(value)
        elif word == "local":
            value = next_arg(word)
            if value != "any":
                params.saddr = _addr32(value)
        elif word == "dev":
            medium = next_arg(word)[:_IFNAMSIZ - 2]
        elif word in ("ttl", "tos"):
            value = next_arg(word)
            if value == "inherit":
                if word == "tos":
                    params.tos = 1
                continue
            number = _scan_number(value)
            if number > 255:
                raise TunnelError(f"{word} out of range", usage=True)
            setattr(params, word, number)
        else:
            if params.name:
                raise TunnelError(f"duplicate name {word!r}", usage=True)
            params.name = word[:_IFNAMSIZ - 1]

    if params.protocol == 0:
        if params.name.startswith("gre"):
            params.protocol = IPPROTO_GRE
        elif params.name.startswith("ipip"):
            params.protocol = IPPROTO_IPIP
        elif params.name.startswith("sit"):
            params.protocol = IPPROTO_IPV6

    if params.protocol in (IPPROTO_IPIP, IPPROTO_IPV6):
        if (params.i_flags | params.o_flags) & GRE_KEY:
            raise TunnelError("Keys are not allowed with ipip and sit.")

    if medium:
        try:
            params.link = socket.if_nametoindex(medium)
        except OSError as err:
            raise TunnelError(f"ioctl: {err.strerror or err}") from err

    multicast = _is_multicast(params.daddr)
    if params.i_key == 0 and multicast:
        params.i_key = params.daddr
        params.i_flags |= GRE_KEY
    if params.o_key == 0 and multicast:
        params.o_key = params.daddr
        params.o_flags |= GRE_KEY
    if multicast and not params.saddr:
        raise TunnelError("Broadcast tunnel requires a source address.")
    return params


def _format_host(addr: int, resolve: bool) -> str:
    text = _dotted(addr)
    if resolve:
        try:
            return socket.gethostbyaddr(text)[0]
        except (OSError, UnicodeError):
            pass
    return text


def _format_tunnel(params: TunnelParams, link_name: str | None, resolve: bool) -> str:
    remote = _format_host(params.daddr, resolve) if params.daddr else "any"
    local = _format_host(params.saddr, resolve) if params.saddr else "any"
    proto = _PROTO_NAMES.get(params.protocol, "unknown")
    out = f"{params.name}: {proto}/ip  remote {remote}  local {local} "
    if params.link and link_name:
        out += f" dev {link_name} "
    out += f" ttl {params.ttl} " if params.ttl else " ttl inherit "
    if params.tos:
        out += " tos"
        if params.tos & 1:
            out += " inherit"
        if params.tos & ~1:
            sep = "/" if params.tos & 1 else " "
            out += f"{sep}{params.tos & ~1:02x} "
    if not params.frag_off & IP_DF:
        out += " nopmtudisc"

    ikey = _dotted(params.i_key)
    okey = _dotted(params.o_key)
    both = params.i_flags & params.o_flags & GRE_KEY
    if both and params.o_key == params.i_key:
        out += f" key {ikey}"
    elif (params.i_flags | params.o_flags) & GRE_KEY:
        if params.i_flags & GRE_KEY:
            out += f" ikey {ikey} "
        if params.o_flags & GRE_KEY:
            out += f" okey {okey} "
    out += "\n"

    if params.i_flags & GRE_SEQ:
        out += "  Drop packets out of sequence.\n"
    if params.i_flags & GRE_CSUM:
        out += "  Checksum in received packet is required.\n"
    if params.o_flags & GRE_SEQ:
        out += "  Sequence packets on output.\n"
    if params.o_flags & GRE_CSUM:
        out += "  Checksum output packets.\n"
    return out


def format_tunnel(params: TunnelParams, link_name: str | None) -> str:
    """Format tunnel parameters; ``link_name`` is the name of the link device."""
    return _format_tunnel(params, link_name, False)


def parse_proc_net_dev(text: str) -> list[tuple[str, dict[str, int]]]:
    """Read interface names and counters from the text of ``/proc/net/dev``.

    The first two lines are headers. Lines with too few counters are skipped.
    """
    result = []
    for line in text.splitlines()[2:]:
        head, colon, tail = line.partition(":")
        names = head.split()
        if not colon or not names:
            raise TunnelError("Wrong format of /proc/net/dev. Sorry.")
        values = []
        for token in tail.split()[:len(_STAT_FIELDS)]:
            try:
                values.append(int(token))
            except ValueError:
                break
        if len(values) < len(_STAT_FIELDS):
            continue
        stats = {
            key: value for key, value in zip(_STAT_FIELDS, values) if key
        }
        result.append((names[0], stats))
    return result


def _format_stats(stats: dict[str, int]) -> str:
    return (
        "RX: Packets    Bytes        Errors CsumErrs OutOfSeq Mcasts\n"
        "    %-10d %-12d %-6d %-8d %-8d %-8d\n"
        % (stats["rx_packets"], stats["rx_bytes"], stats["rx_errs"],
           stats["rx_frame"], stats["rx_fifo"], stats["rx_multi"])
        + "TX: Packets    Bytes        Errors DeadLoop NoRoute  NoBufs\n"
        "    %-10d %-12d %-6d %-8d %-8d %-6d\n\n"
        % (stats["tx_packets"], stats["tx_bytes"], stats["tx_errs"],
           stats["tx_colls"], stats["tx_carrier"], stats["tx_drops"])
    )


def _ioctl(request: int, ifreq: bytes) -> bytes:
    import fcntl

    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        return fcntl.ioctl(sock.fileno(), request, ifreq)


def _tunnel_ioctl(request: int, basedev: str, params: TunnelParams) -> TunnelParams:
    buf = array.array("B", params.pack())
    ifreq = (
        basedev.encode()[:_IFNAMSIZ - 1].ljust(_IFNAMSIZ, b"\0")
        + struct.pack("P", buf.buffer_info()[0])
    ).ljust(_IFREQ_SIZE, b"\0")
    try:
        _ioctl(request, ifreq)
    except OSError as err:
        raise TunnelError(f"ioctl: {err.strerror or err}") from err
    return TunnelParams.unpack(buf.tobytes())


def _iftype(name: str) -> int | None:
    ifreq = name.encode()[:_IFNAMSIZ - 1].ljust(_IFREQ_SIZE, b"\0")
    try:
        result = _ioctl(SIOCGIFHWADDR, ifreq)
    except OSError as err:
        print(f"ioctl: {err.strerror or err}", file=sys.stderr)
        return None
    return struct.unpack_from("=H", result, _IFNAMSIZ)[0]


def _link_name(index: int) -> str | None:
    try:
        return socket.if_indextoname(index)
    except OSError as err:
        print(f"ioctl: {err.strerror or err}", file=sys.stderr)
        return None


def add_tunnel(args: list[str], change: bool) -> TunnelParams:
    """Add a tunnel, or change one with ``change``; return the parameters sent."""
    params = parse_tunnel_args(args)
    if params.ttl and params.frag_off == 0:
        raise TunnelError("ttl != 0 and noptmudisc are incompatible")
    basedev = _DEFAULT_DEVICES.get(params.protocol)
    if basedev is None:
        raise TunnelError("cannot determine tunnel mode (ipip, gre or sit)")
    request = SIOCCHGTUNNEL if change else SIOCADDTUNNEL
    _tunnel_ioctl(request, basedev, params)
    return params


def delete_tunnel(args: list[str]) -> TunnelParams:
    """Delete a tunnel; return the parameters sent."""
    params = parse_tunnel_args(args)
    basedev = params.name or _DEFAULT_DEVICES.get(params.protocol, "")
    _tunnel_ioctl(SIOCDELTUNNEL, basedev, params)
    return params


def _list_tunnels(
    params: TunnelParams, show_stats: bool, resolve: bool, path: str
) -> str:
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as err:
        print(f"fopen: {err.strerror}", file=sys.stderr)
        return ""
    try:
        interfaces = parse_proc_net_dev(text)
    except TunnelError as err:
        print(err, file=sys.stderr)
        return ""
    out = []
    for name, stats in interfaces:
        if params.name and params.name != name:
            continue
        type_ = _iftype(name)
        if type_ is None:
            print(f"Failed to get type of [{name}]", file=sys.stderr)
            continue
        if type_ not in (ARPHRD_TUNNEL, ARPHRD_IPGRE, ARPHRD_SIT):
            continue
        try:
            found = _tunnel_ioctl(SIOCGETTUNNEL, name, TunnelParams(frag_off=0, version=0, ihl=0))
        except TunnelError as err:
            print(err, file=sys.stderr)
            continue
        if (
            (params.link and found.link != params.link)
            or (params.name and found.name != params.name)
            or (params.daddr and found.daddr != params.daddr)
            or (params.saddr and found.saddr != params.saddr)
            or (params.i_key and found.i_key != params.i_key)
        ):
            continue
        link = _link_name(found.link) if found.link else None
        out.append(_format_tunnel(found, link, resolve))
        if show_stats:
            out.append(_format_stats(stats))
    return "".join(out)


def _show(args: list[str], show_stats: bool, resolve: bool) -> str:
    params = parse_tunnel_args(args)
    basedev = _DEFAULT_DEVICES.get(params.protocol)
    if basedev is None:
        return _list_tunnels(params, show_stats, resolve, PATH_PROCNET_DEV)
    found = _tunnel_ioctl(SIOCGETTUNNEL, params.name or basedev, params)
    link = _link_name(found.link) if found.link else None
    return _format_tunnel(found, link, resolve)


def show_tunnels(args: list[str], show_stats: bool) -> str:
    """Return the listing of one tunnel, or of all tunnels matching the arguments."""
    return _show(args, show_stats, False)


_USAGE = (
    "Usage: iptunnel { add | change | del | show } [ NAME ]\n"
    "          [ mode { ipip | gre | sit } ] [ remote ADDR ] [ local ADDR ]\n"
    "          [ [i|o]seq ] [ [i|o]key KEY ] [ [i|o]csum ]\n"
    "          [ ttl TTL ] [ tos TOS ] [ nopmtudisc ] [ dev PHYS_DEV ]\n"
    "       iptunnel -V | --version\n\n"
    "Where: NAME := STRING\n"
    "       ADDR := { IP_ADDRESS | any }\n"
    "       TOS  := { NUMBER | inherit }\n"
    "       TTL  := { 1..255 | inherit }\n"
    "       KEY  := { DOTTED_QUAD | NUMBER }\n"
)


def _matches(cmd: str, pattern: str) -> bool:
    return len(cmd) <= len(pattern) and pattern.startswith(cmd)


def _usage() -> int:
    sys.stderr.write(_USAGE)
    return _EXIT_FAILURE


def main(argv: list[str] | None = None) -> int:
    """Run the iptunnel command and return its exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    show_stats = False
    resolve = False
    try:
        while args and args[0].startswith("-"):
            opt = args.pop(0)
            if _matches(opt, "-family"):
                if not args or args.pop(0) not in ("inet", "inet6"):
                    raise TunnelError("bad family", usage=True)
            elif _matches(opt, "-stats") or _matches(opt, "-statistics"):
                show_stats = True
            elif _matches(opt, "-resolve"):
                resolve = True
            elif _matches(opt, "-V") or _matches(opt, "--version"):
                print(f"{RELEASE}\n{VERSION}")
                return E_VERSION
            else:
                raise TunnelError(f"unknown option {opt!r}", usage=True)

        if not args:
            sys.stdout.write(_show([], show_stats, resolve))
            return 0
        command, rest = args[0], args[1:]
        if _matches(command, "add"):
            add_tunnel(rest, False)
        elif _matches(command, "change"):
            add_tunnel(rest, True)
        elif _matches(command, "del"):
            delete_tunnel(rest)
        elif any(_matches(command, word) for word in ("show", "lst", "list")):
            sys.stdout.write(_show(rest, show_stats, resolve))
        else:
            raise TunnelError(f"unknown command {command!r}", usage=True)
    except TunnelError as err:
        if err.usage:
            return _usage()
        print(err, file=sys.stderr)
        return _EXIT_FAILURE
    return 0