"""Show or set the host name and the NIS domain name; show the DNS domain."""

from __future__ import annotations

import enum
import errno
import getopt
import os
import socket
import sys
from pathlib import Path

RELEASE = "net-tools 1.60"
VERSION = "hostname 1.100 (2001-04-14)"

E_USAGE = 4
E_VERSION = 5

MAXHOSTNAMELEN = 64
PATH_DOMAINNAME = "/proc/sys/kernel/domainname"

_LINE_MAX = MAXHOSTNAMELEN - 1


class HostnameError(Exception):
    """Raised when a name cannot be read, looked up or set."""


class Mode(enum.Enum):
    """What the command works on."""

    DEFAULT = "default"
    FORMATTED = "formatted"
    DNS_DOMAIN = "dns"
    NIS_DOMAIN = "nis"


def mode_for_program(program_name: str) -> Mode:
    """Choose the mode from the name the program was started as."""
    base = os.path.basename(program_name)
    if base in ("ypdomainname", "domainname", "nisdomainname"):
        return Mode.NIS_DOMAIN
    if base == "dnsdomainname":
        return Mode.DNS_DOMAIN
    return Mode.DEFAULT


def read_names(path: str | Path) -> list[str]:
    """Read the names in a file, skipping lines that start with ``#``.

    Lines longer than 63 characters are read in pieces of 63.
    """
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as err:
        raise HostnameError(f"can't open `{path}'") from err
    names = []
    pos = 0
    while pos < len(text):
        newline = text.find("\n", pos, pos + _LINE_MAX)
        if newline == -1:
            chunk = text[pos:pos + _LINE_MAX]
            pos += len(chunk)
        else:
            chunk = text[pos:newline]
            pos = newline + 1
        if not chunk.startswith("#"):
            names.append(chunk)
    return names


def format_lookup(
    name: str, aliases: list[str], addresses: list[str], kind: str
) -> str:
    """Format a host lookup result for one of the kinds ``a i d f s``.

    For ``d`` the result is empty when the name has no domain part.
    """
    dot = name.find(".")
    if kind == "d":
        return "" if dot < 0 else name[dot + 1:] + "\n"
    if kind == "a":
        return "".join(f"{alias} " for alias in aliases) + "\n"
    if kind == "i":
        return "".join(f"{address} " for address in addresses) + "\n"
    if kind == "f":
        return name + "\n"
    if kind == "s":
        return (name[:dot] if dot >= 0 else name) + "\n"
    return ""


def _lookup(hostname: str) -> tuple[str, list[str], list[str]]:
    try:
        return socket.gethostbyname_ex(hostname)
    except (OSError, UnicodeError) as err:
        raise HostnameError("Unknown host") from err


def show_name(hostname: str, kind: str) -> str:
    """Look up a host name and format the result for ``kind``."""
    return format_lookup(*_lookup(hostname), kind)


def get_domainname() -> str:
    """Return the NIS domain name of the system."""
    try:
        return Path(PATH_DOMAINNAME).read_text().rstrip("\n")
    except OSError as err:
        raise HostnameError(f"can't read the domain name: {err.strerror}") from err


def _explain(err: OSError, what: str) -> HostnameError:
    if err.errno in (errno.EPERM, errno.EACCES):
        return HostnameError(f"you must be root to change the {what}")
    if err.errno == errno.EINVAL:
        return HostnameError("name too long")
    return HostnameError(err.strerror or str(err))


def set_hostname(name: str) -> None:
    """Set the host name of the system."""
    try:
        socket.sethostname(name)
    except OSError as err:
        raise _explain(err, "host name") from err


def set_domainname(name: str) -> None:
    """Set the NIS domain name of the system."""
    if len(name.encode()) > MAXHOSTNAMELEN:
        raise HostnameError("name too long")
    try:
        Path(PATH_DOMAINNAME).write_text(name)
    except OSError as err:
        raise _explain(err, "domain name") from err


_USAGE = (
    "Usage: hostname [-v] {hostname|-F file}      set hostname (from file)\n"
    "       domainname [-v] {nisdomain|-F file}   set NIS domainname (from file)\n"
    "       hostname [-v] [-d|-f|-s|-a|-i|-y|-n]  display formatted name\n"
    "       hostname [-v]                         display hostname\n\n"
    "       hostname -V|--version|-h|--help       print info and exit\n\n"
    "    dnsdomainname=hostname -d, {yp,nis,}domainname=hostname -y\n\n"
    "    -s, --short           short host name\n"
    "    -a, --alias           alias names\n"
    "    -i, --ip-address      addresses for the hostname\n"
    "    -f, --fqdn, --long    long host name (FQDN)\n"
    "    -d, --domain          DNS domain name\n"
    "    -y, --yp, --nis       NIS/YP domainname\n"
    "    -F, --file            read hostname or NIS domainname from given file\n\n"
    "   This command can read or set the hostname or the NIS domainname. You can\n"
    "   also read the DNS domain or the FQDN (fully qualified domain name).\n"
    "   Unless you are using bind or NIS for host lookups you can change the\n"
    "   FQDN (Fully Qualified Domain Name) and the DNS domain name (which is\n"
    "   part of the FQDN) in the /etc/hosts file.\n"
)

_LONG_OPTIONS = {
    "domain": "-d",
    "file": "-F",
    "fqdn": "-f",
    "help": "-h",
    "long": "-f",
    "short": "-s",
    "version": "-V",
    "verbose": "-v",
    "alias": "-a",
    "ip-address": "-i",
    "nis": "-y",
    "yp": "-y",
}


def _err(text: str) -> None:
    sys.stderr.write(text)


def _set_names(names, setter, label: str, verbose: int) -> None:
    for name in names:
        if verbose:
            _err(f"Setting {label} to `{name}'\n")
        setter(name)


def _show(kind: str | None, verbose: int) -> None:
    myname = socket.gethostname()
    if verbose:
        _err(f"gethostname()=`{myname}'\n")
    if kind is None:
        sys.stdout.write(myname + "\n")
        return
    if verbose:
        _err(f"Resolving `{myname}' ...\n")
    name, aliases, addresses = _lookup(myname)
    if verbose:
        _err(f"Result: h_name=`{name}'\n")
        for alias in aliases:
            _err(f"Result: h_aliases=`{alias}'\n")
        for address in addresses:
            _err(f"Result: h_addr_list=`{address}'\n")
    sys.stdout.write(format_lookup(name, aliases, addresses, kind))


def _read_file(path: str, verbose: int) -> list[str]:
    names = read_names(path)
    if verbose:
        for name in names:
            _err(f">> {name}\n")
    return names


def main(argv: list[str] | None = None) -> int:
    """Run the hostname command and return its exit status."""
    program = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
    program = program or "hostname"
    args = list(sys.argv[1:] if argv is None else argv)
    longopts = [name + ("=" if short == "-F" else "") for name, short in _LONG_OPTIONS.items()]
    try:
        opts, rest = getopt.gnu_getopt(args, "adfF:h?isVvyn", longopts)
    except getopt.GetoptError as err:
        _err(f"{program}: {err}\n")
        _err(_USAGE)
        return E_USAGE

    mode = mode_for_program(program)
    kind: str | None = None
    file: str | None = None
    verbose = 0
    for opt, value in opts:
        if opt.startswith("--"):
            opt = _LONG_OPTIONS[opt[2:]]
        if opt == "-d":
            mode = Mode.DNS_DOMAIN
        elif opt in ("-a", "-f", "-i", "-s"):
            mode = Mode.FORMATTED
            kind = opt[1]
        elif opt == "-y":
            mode = Mode.NIS_DOMAIN
        elif opt == "-F":
            file = value
        elif opt == "-v":
            verbose += 1
        elif opt == "-V":
            _err(f"{RELEASE}\n{VERSION}\n")
            return E_VERSION
        else:
            _err(_USAGE)
            return E_USAGE

    try:
        if mode is Mode.DNS_DOMAIN:
            if file or rest:
                _err(
                    f"{program}: You can't change the DNS domain name with this command\n"
                    "\nUnless you are using bind or NIS for host lookups you can change the DNS\n"
                    "domain name (which is part of the FQDN) in the /etc/hosts file.\n"
                )
                return 1
            kind = "d"
            mode = Mode.DEFAULT
        if mode is Mode.DEFAULT and file:
            _set_names(_read_file(file, verbose), set_hostname, "hostname", verbose)
        elif mode is Mode.DEFAULT and rest:
            _set_names(rest[:1], set_hostname, "hostname", verbose)
        elif mode in (Mode.DEFAULT, Mode.FORMATTED):
            _show(kind, verbose)
        elif file:
            _set_names(_read_file(file, verbose), set_domainname, "domainname", verbose)
        elif rest:
            _set_names(rest[:1], set_domainname, "domainname", verbose)
        else:
            myname = get_domainname()
            if verbose:
                _err(f"getdomainname()=`{myname}'\n")
            sys.stdout.write(myname + "\n")
    except HostnameError as err:
        _err(f"{program}: {err}\n")
        return 1
    return 0