"""Display and change the kernel's ARP cache."""

from __future__ import annotations

import enum
import getopt
import re
import socket
import struct
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .families import AF_INET, FamilyError, get_aftype
from .getargs import getargs
from .hexaddr import AddressError
from .hwtypes import HardwareType, get_hwntype, get_hwtype, hardware_list

PATH_PROCNET_ARP = "/proc/net/arp"
PATH_ETHERS = "/etc/ethers"

DEFAULT_AF = "inet"
DEFAULT_HW = "ether"

SIOCDARP = 0x8953
SIOCSARP = 0x8955
SIOCGIFHWADDR = 0x8927

E_USAGE = 4
E_VERSION = 5
_EXIT_FAILURE = 255

_IFNAMSIZ = 16
_IFREQ_SIZE = 40
_HOST_MAX = 127

RELEASE = "net-tools 1.60"
VERSION = "arp 1.88 (2001-04-04)"

LINUX_HEADER = (
    "Address                  HWtype  HWaddress           Flags Mask            Iface\n"
)

_HEX_FIELD = re.compile(r"0x([0-9a-fA-F]+)")


class ArpFlags(enum.IntFlag):
    """Flags of an ARP cache entry."""

    NONE = 0
    COM = 0x02
    PERM = 0x04
    PUBL = 0x08
    USETRAILERS = 0x10
    NETMASK = 0x20
    DONTPUB = 0x40
    MAGIC = 0x80


class ArpError(Exception):
    """Raised when an ARP operation fails; ``usage`` marks a command-line misuse."""

    def __init__(self, message: str = "", *, usage: bool = False) -> None:
        super().__init__(message)
        self.usage = usage


@dataclass(frozen=True)
class ArpEntry:
    """One line of the kernel ARP table."""

    ip: str
    hw_type: int
    flags: ArpFlags
    hw_address: str
    mask: str
    device: str


@dataclass
class ArpRequest:
    """A request to set or delete an ARP cache entry."""

    address: str
    hw_family: int = 0
    hw_address: bytes = b""
    flags: ArpFlags = ArpFlags.NONE
    netmask: str | None = None
    device: str = ""

    def pack(self) -> bytes:
        """Return the kernel's binary form of this request."""
        hw = struct.pack("=H", self.hw_family & 0xFFFF) + bytes(
            self.hw_address[:14]
        ).ljust(14, b"\0")
        mask = _sockaddr_in(self.netmask) if self.netmask else bytes(16)
        dev = self.device.encode()[:_IFNAMSIZ - 1].ljust(_IFNAMSIZ, b"\0")
        return (
            _sockaddr_in(self.address)
            + hw
            + struct.pack("=i", int(self.flags))
            + mask
            + dev
        )


def _sockaddr_in(address: str) -> bytes:
    return (
        struct.pack("=H", AF_INET)
        + b"\0\0"
        + socket.inet_aton(address)
        + bytes(8)
    )


def _resolve(host: str) -> str:
    """Turn a host name or dotted address into a dotted IPv4 address."""
    host = host[:_HOST_MAX]
    try:
        return socket.inet_ntoa(socket.inet_aton(host))
    except OSError:
        pass
    try:
        return socket.gethostbyname(host)
    except (OSError, UnicodeError) as err:
        raise ArpError(f"{host}: Unknown host") from err


def _reverse(ip: str) -> str:
    try:
        return socket.gethostbyaddr(ip)[0]
    except (OSError, UnicodeError):
        return ip


def _ioctl(request: int, payload: bytes) -> bytes:
    import fcntl

    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        return fcntl.ioctl(sock.fileno(), request, payload)


def _device_hw_address(
    ifname: str, hw: HardwareType | None
) -> tuple[int, bytes]:
    ifreq = ifname.encode()[:_IFNAMSIZ - 1].ljust(_IFREQ_SIZE, b"\0")
    try:
        result = _ioctl(SIOCGIFHWADDR, ifreq)
    except OSError as err:
        raise ArpError(
            f"arp: cant get HW-Address for `{ifname}': {err.strerror}."
        ) from err
    family = struct.unpack_from("=H", result, _IFNAMSIZ)[0]
    if hw is not None and family != (hw.type & 0xFFFF):
        raise ArpError("arp: protocol type mismatch.")
    return family, bytes(result[_IFNAMSIZ + 2:_IFNAMSIZ + 16])


def parse_arp_cache(text: str) -> list[ArpEntry]:
    """Parse the kernel ARP table; the first line is a header."""
    entries: list[ArpEntry] = []
    lines = text.splitlines()
    mask = "-"
    dev = "-"
    for line in lines[1:]:
        fields = line.split()
        if len(fields) < 4:
            break
        type_match = _HEX_FIELD.match(fields[1])
        flags_match = _HEX_FIELD.match(fields[2])
        if type_match is None or flags_match is None:
            break
        if len(fields) > 4:
            mask = fields[4]
        if len(fields) > 5:
            dev = fields[5]
        entries.append(
            ArpEntry(
                ip=fields[0],
                hw_type=int(type_match.group(1), 16),
                flags=ArpFlags(int(flags_match.group(1), 16) & 0xFF),
                hw_address=fields[3],
                mask=mask,
                device=dev,
            )
        )
    return entries


def format_flags(flags: int) -> str:
    """Return the one-letter flag codes of the Linux-style listing."""
    letters = (
        (ArpFlags.COM, "C"),
        (ArpFlags.PERM, "M"),
        (ArpFlags.PUBL, "P"),
        (ArpFlags.MAGIC, "A"),
        (ArpFlags.DONTPUB, "!"),
        (ArpFlags.USETRAILERS, "T"),
    )
    return "".join(letter for bit, letter in letters if flags & bit)


def _hw_name(type_: int) -> str:
    hw = get_hwntype(type_) or get_hwtype(DEFAULT_HW)
    return hw.name if hw else ""


def format_entry_linux(entry: ArpEntry, hostname: str) -> str:
    """Format an entry as one row of the Linux-style table.

    A host name starting with ``?`` means it is unknown; the address is shown.
    """
    name = entry.ip if not hostname or hostname[0] == "?" else hostname
    flags = entry.flags
    mask = entry.mask if flags & ArpFlags.NETMASK else ""
    out = "%-23.23s  " % name
    if not flags & ArpFlags.COM:
        if flags & ArpFlags.PUBL:
            out += "%-8.8s%-20.20s" % ("*", "<from_interface>")
        else:
            out += "%-8.8s%-20.20s" % ("", "(incomplete)")
    else:
        out += "%-8.8s%-20.20s" % (_hw_name(entry.hw_type), entry.hw_address)
    out += "%-6.6s%-15.15s %s\n" % (format_flags(flags), mask, entry.device)
    return out


def format_entry_bsd(entry: ArpEntry, hostname: str) -> str:
    """Format an entry as one line of the BSD-style listing."""
    flags = entry.flags
    out = f"{hostname} ({entry.ip}) at "
    if not flags & ArpFlags.COM:
        out += "<from_interface> " if flags & ArpFlags.PUBL else "<incomplete> "
    else:
        out += f"{entry.hw_address} [{_hw_name(entry.hw_type)}] "
    if flags & ArpFlags.NETMASK:
        out += f"netmask {entry.mask} "
    words = (
        (ArpFlags.PERM, "PERM "),
        (ArpFlags.PUBL, "PUB "),
        (ArpFlags.MAGIC, "AUTO "),
        (ArpFlags.DONTPUB, "DONTPUB "),
        (ArpFlags.USETRAILERS, "TRAIL "),
    )
    out += "".join(word for bit, word in words if flags & bit)
    return out + f"on {entry.device}\n"


def _parse_common(
    request: ArpRequest, word: str, rest: list[str]
) -> bool:
    """Handle modifiers shared by set and delete; return False if unknown."""
    if word == "trail":
        request.flags |= ArpFlags.USETRAILERS
    elif word == "dontpub":
        request.flags |= ArpFlags.DONTPUB
    elif word == "auto":
        request.flags |= ArpFlags.MAGIC
    elif word == "dev":
        if not rest:
            raise ArpError("arp: missing device name", usage=True)
        request.device = rest.pop(0)[:_IFNAMSIZ - 1]
    elif word == "netmask":
        if not rest:
            raise ArpError("arp: missing netmask", usage=True)
        mask = rest.pop(0)
        if mask != "255.255.255.255":
            request.netmask = _resolve(mask)
            request.flags |= ArpFlags.NETMASK
    else:
        return False
    return True


def parse_set_args(
    args: list[str], hw: HardwareType | None, use_device: bool
) -> ArpRequest:
    """Build a set request from ``host hwaddr [modifiers...]``.

    ``hw`` of None means the default hardware type, and no type check
    when the address is read from a device.
    """
    rest = list(args)
    if not rest:
        raise ArpError("arp: need host name")
    request = ArpRequest(address=_resolve(rest.pop(0)))
    if not rest:
        raise ArpError("arp: need hardware address")
    hwaddr = rest.pop(0)
    if use_device:
        request.hw_family, request.hw_address = _device_hw_address(hwaddr, hw)
    else:
        hwtype = hw or get_hwtype(DEFAULT_HW)
        try:
            request.hw_address = hwtype.parse(hwaddr)
        except AddressError as err:
            raise ArpError("arp: invalid hardware address") from err
        request.hw_family = hwtype.type
    request.flags = ArpFlags.PERM | ArpFlags.COM
    while rest:
        word = rest.pop(0)
        if word == "temp":
            request.flags &= ~ArpFlags.PERM
        elif word == "pub":
            request.flags |= ArpFlags.PUBL
        elif word == "priv":
            request.flags &= ~ArpFlags.PUBL
        elif not _parse_common(request, word, rest):
            raise ArpError(f"arp: unknown modifier `{word}'", usage=True)
    return request


def parse_delete_args(args: list[str]) -> tuple[ArpRequest, bool, bool]:
    """Build a delete request from ``host [modifiers...]``.

    Returns the request and whether private and public entries are to be
    deleted; without ``pub`` or ``priv`` both are.
    """
    rest = list(args)
    if not rest:
        raise ArpError("arp: need host name")
    request = ArpRequest(address=_resolve(rest.pop(0)), flags=ArpFlags.PERM)
    public = private = False
    while rest:
        word = rest.pop(0)
        if word == "pub":
            public = True
        elif word == "priv":
            private = True
        elif word == "temp":
            request.flags &= ~ArpFlags.PERM
        elif not _parse_common(request, word, rest):
            raise ArpError(f"arp: unknown modifier `{word}'", usage=True)
    if not public and not private:
        public = private = True
    return request, private, public


def parse_ethers_line(line: str) -> list[str] | None:
    """Split an ethers line into set arguments, host first.

    Returns None for comments and blank lines.
    """
    line = line.split("\n", 1)[0]
    if not line or line.startswith("#"):
        return None
    args = getargs(line)
    if len(args) < 2:
        raise ArpError("format error")
    if ":" in args[0]:
        args[0], args[1] = args[1], args[0]
    return args


def show(
    name: str | None,
    path: str | Path,
    hw: HardwareType | None,
    device: str,
    numeric: bool,
    linux_style: bool,
    show_all: bool,
    verbose: bool,
) -> str:
    """Return the listing of the ARP table, filtered by host, type and device."""
    host = _resolve(name) if name else ""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as err:
        raise ArpError(f"{path}: {err.strerror}") from err
    entries = parse_arp_cache(text)
    out: list[str] = []
    showed = 0
    for entry in entries:
        if hw is not None and entry.hw_type != hw.type:
            continue
        if host and entry.ip != host:
            continue
        if device and entry.device != device:
            continue
        showed += 1
        if numeric:
            hostname = "?"
        else:
            hostname = _reverse(entry.ip)
            if hostname == entry.ip:
                hostname = "?"
        if linux_style:
            if not any(line == LINUX_HEADER for line in out):
                out.append(LINUX_HEADER)
            out.append(format_entry_linux(entry, hostname))
        else:
            out.append(format_entry_bsd(entry, hostname))
    if verbose:
        out.append(
            f"Entries: {len(entries)}\tSkipped: {len(entries) - showed}"
            f"\tFound: {showed}\n"
        )
    if not showed:
        if host and not show_all:
            out.append(f"{name} ({host}) -- no entry\n")
        elif hw is not None or host or device:
            out.append(f"arp: in {len(entries)} entries no match found.\n")
    return "".join(out)


def set_entry(
    args: list[str], hw: HardwareType | None, use_device: bool, device: str
) -> ArpRequest:
    """Add an entry to the kernel ARP cache and return the request sent."""
    request = parse_set_args(args, hw, use_device)
    if not request.device:
        request.device = device[:_IFNAMSIZ - 1]
    try:
        _ioctl(SIOCSARP, request.pack())
    except OSError as err:
        raise ArpError(f"SIOCSARP: {err.strerror}") from err
    return request


def _delete(request: ArpRequest, what: str) -> None:
    try:
        _ioctl(SIOCDARP, request.pack())
    except OSError as err:
        if err.errno in (6, 2):  # ENXIO, ENOENT
            raise LookupError from err
        raise ArpError(f"SIOCDARP({what}): {err.strerror}") from err


def delete_entry(
    args: list[str], hw: HardwareType | None, device: str
) -> ArpRequest:
    """Delete an entry from the kernel ARP cache and return the request sent."""
    request, private, public = parse_delete_args(args)
    host = args[0][:_HOST_MAX]
    if hw is not None:
        request.hw_family = hw.type
    if not request.device:
        request.device = device[:_IFNAMSIZ - 1]
    if private:
        try:
            _delete(request, "dontpub")
            return request
        except LookupError:
            if not public:
                raise ArpError(f"No ARP entry for {host}") from None
    request.flags |= ArpFlags.PUBL
    try:
        _delete(request, "pub")
    except LookupError:
        raise ArpError(f"No ARP entry for {host}") from None
    return request


def load_ethers(
    path: str | Path, hw: HardwareType | None, use_device: bool, device: str
) -> int:
    """Set an entry for every line of an ethers file; return how many were set."""
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            lines = fh.readlines()
    except OSError as err:
        raise ArpError(f"arp: cannot open etherfile {path} !") from err
    done = 0
    for number, line in enumerate(lines, start=1):
        try:
            args = parse_ethers_line(line)
        except ArpError:
            print(
                f"arp: format error on line {number} of etherfile {path} !",
                file=sys.stderr,
            )
            continue
        if args is None:
            continue
        try:
            set_entry(args, hw, use_device, device)
        except ArpError as err:
            if err.usage:
                raise
            print(err, file=sys.stderr)
            print(
                f"arp: cannot set entry on line {number} of etherfile {path} !",
                file=sys.stderr,
            )
        else:
            done += 1
    return done


def _usage_text() -> str:
    return (
        "Usage:\n"
        "  arp [-vn]  [<HW>] [-i <if>] [-a] [<hostname>]             <-Display ARP cache\n"
        "  arp [-v]          [-i <if>] -d  <host> [pub]               <-Delete ARP entry\n"
        "  arp [-vnD] [<HW>] [-i <if>] -f  [<filename>]            <-Add entry from file\n"
        "  arp [-v]   [<HW>] [-i <if>] -s  <host> <hwaddr> [temp]            <-Add entry\n"
        "  arp [-v]   [<HW>] [-i <if>] -Ds <host> <if> [netmask <nm>] pub          <-''-\n\n"
        "        -a                       display (all) hosts in alternative (BSD) style\n"
        "        -e                       display (all) hosts in default (Linux) style\n"
        "        -s, --set                set a new ARP entry\n"
        "        -d, --delete             delete a specified entry\n"
        "        -v, --verbose            be verbose\n"
        "        -n, --numeric            don't resolve names\n"
        "        -i, --device             specify network interface (e.g. eth0)\n"
        "        -D, --use-device         read <hwaddr> from given device\n"
        "        -A, -p, --protocol       specify protocol family\n"
        "        -f, --file               read new entries from file or from /etc/ethers\n\n"
        f"  <HW>=Use '-H <hw>' to specify hardware address type. Default: {DEFAULT_HW}\n"
        "  List of possible hardware types (which support ARP):\n"
        + hardware_list(True)
    )


def _usage() -> int:
    sys.stderr.write(_usage_text())
    return E_USAGE


_LONG_OPTIONS = {
    "--verbose": "-v",
    "--version": "-V",
    "--all": "-a",
    "--delete": "-d",
    "--file": "-f",
    "--numeric": "-n",
    "--set": "-s",
    "--protocol": "-A",
    "--hw-type": "-H",
    "--device": "-i",
    "--help": "-h",
    "--use-device": "-D",
    "--symbolic": "-N",
}


def main(argv: list[str] | None = None) -> int:
    """Run the arp command and return its exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    longopts = [
        name[2:] + ("=" if short in ("-A", "-H", "-i") else "")
        for name, short in _LONG_OPTIONS.items()
    ]
    try:
        opts, rest = getopt.gnu_getopt(args, "A:H:adfp:nsei:t:vh?DNV", longopts)
    except getopt.GetoptError as err:
        print(f"arp: {err}", file=sys.stderr)
        return _usage()

    family = get_aftype(DEFAULT_AF)
    hw: HardwareType | None = None
    what = "default"
    linux_style = numeric = use_device = verbose = show_all = False
    device = ""
    for opt, value in opts:
        opt = _LONG_OPTIONS.get(opt, opt)
        if opt == "-a":
            what, show_all = "show", True
        elif opt == "-f":
            what = "file"
        elif opt == "-d":
            what = "delete"
        elif opt == "-s":
            what = "set"
        elif opt == "-e":
            linux_style = True
        elif opt == "-n":
            numeric = True
        elif opt == "-D":
            use_device = True
        elif opt == "-N":
            print("arp: -N not yet supported.", file=sys.stderr)
        elif opt == "-v":
            verbose = True
        elif opt in ("-A", "-p"):
            try:
                family = get_aftype(value)
            except FamilyError as err:
                print(err, file=sys.stderr)
                family = None
            if family is None:
                print(f"arp: {value}: unknown address family.", file=sys.stderr)
                return _EXIT_FAILURE
        elif opt in ("-H", "-t"):
            hw = get_hwtype(value)
            if hw is None:
                print(f"arp: {value}: unknown hardware type.", file=sys.stderr)
                return _EXIT_FAILURE
        elif opt == "-i":
            device = value[:_IFNAMSIZ - 1]
        elif opt == "-V":
            print(f"{RELEASE}\n{VERSION}", file=sys.stderr)
            return E_VERSION
        else:
            return _usage()

    if family.af != AF_INET:
        print(f"arp: {family.name}: kernel only supports 'inet'.", file=sys.stderr)
        return _EXIT_FAILURE
    effective_hw = hw or get_hwtype(DEFAULT_HW)
    if effective_hw.alen <= 0:
        print(
            f"arp: {effective_hw.name}: hardware type without ARP support.",
            file=sys.stderr,
        )
        return _EXIT_FAILURE

    try:
        if what in ("default", "show"):
            sys.stdout.write(
                show(
                    rest[0] if rest else None,
                    PATH_PROCNET_ARP,
                    hw,
                    device,
                    numeric,
                    linux_style or what == "default",
                    show_all,
                    verbose,
                )
            )
        elif what == "file":
            load_ethers(rest[0] if rest else PATH_ETHERS, hw, use_device, device)
        elif what == "delete":
            delete_entry(rest, hw, device)
        else:
            set_entry(rest, hw, use_device, device)
    except ArpError as err:
        if err.usage:
            return _usage()
        print(err, file=sys.stderr)
        return _EXIT_FAILURE
    return 0