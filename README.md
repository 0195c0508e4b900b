# nettools

Linux networking commands and the address-handling library behind them.

## Commands

Installing the package provides four commands. Each one is also a
`main(argv=None)` function that returns the exit status.

- `arp` (`nettools.arp`) shows the kernel ARP cache from `/proc/net/arp`,
  in a table by default (`-e`) or one line per entry in BSD style (`-a`);
  `-n` skips name lookups, `-i` filters by device, `-H` by hardware type.
  `-s host hwaddr [temp|pub|priv|trail|dontpub|auto|dev NAME|netmask MASK]`
  adds an entry, `-d host [pub|priv|...]` deletes one, and
  `-f [file]` adds an entry for every line of an ethers file
  (`/etc/ethers` by default). `-D` reads the hardware address from a
  named interface.
- `hostname` (`nettools.hostname`) shows or sets the host name. `-s`,
  `-f`, `-d`, `-a` and `-i` look the host name up and show the short
  name, the full name, the DNS domain, the aliases or the addresses. `-y`
  shows or sets the NIS domain name through
  `/proc/sys/kernel/domainname`. `-F file` sets the name from a file,
  skipping lines that start with `#`. Started as `dnsdomainname`,
  `domainname`, `nisdomainname` or `ypdomainname`, it picks the matching
  mode.
- `ipmaddr` (`nettools.ipmaddr`) lists multicast addresses per interface
  from `/proc/net/dev_mcast`, `/proc/net/igmp` and `/proc/net/igmp6`
  (`ipmaddr show dev eth0 ipv4`), and adds or deletes link-layer
  multicast addresses (`ipmaddr add 01:00:5e:00:00:01 dev eth0`).
- `iptunnel` (`nettools.iptunnel`) adds, changes, deletes and shows IPIP,
  GRE and SIT tunnels
  (`iptunnel add gre1 mode gre remote 192.0.2.1 local 192.0.2.2 ttl 64`).
  `-s` adds packet counters to the listing, `-r` resolves addresses to
  names.

Changing system state needs the usual privileges; reading it usually does
not.

## Library

```python
from nettools.hexaddr import parse_ether, format_ether
from nettools.hwtypes import get_hwtype
from nettools.getargs import getargs

data = parse_ether("02:00:00:00:00:01")
print(format_ether(data))            # 02:00:00:00:00:01

ether = get_hwtype("ether")
print(ether.format(ether.parse("2:0:0:0:0:1")))   # 02:00:00:00:00:01

print(getargs('host "quoted arg" 02:00:00:00:00:01'))
# ['host', 'quoted arg', '02:00:00:00:00:01']
```

- `nettools.hexaddr`: `parse_*` and `format_*` for Ethernet, EUI-64,
  InfiniBand, FDDI, HIPPI and ARCnet addresses; bad input raises
  `AddressError`.
- `nettools.ash` and `nettools.ax25`: Ash routes and AX.25 callsigns.
- `nettools.hwtypes`: the `HardwareType` table, `get_hwtype`,
  `get_hwntype`, `hardware_list` and `hw_null_address`.
- `nettools.families`: the `AddressFamily` table, `get_aftype`,
  `get_afntype`, `translate_families`, `default_families`,
  `family_list`, and the AppleTalk and Econet address forms.
- `nettools.getargs`: `getargs`, a quote-aware line splitter.
- `nettools.routes`: `route_info` returns the AX.25 and AppleTalk
  routing tables as text; `decode_route_flags` turns route flags into
  letters.
- `nettools.arp`, `nettools.ipmaddr`, `nettools.hostname` and
  `nettools.iptunnel` expose the parsing and formatting each command uses
  (for example `parse_arp_cache`, `read_igmp`, `format_lookup`,
  `parse_tunnel_args`), so output can be produced from saved `/proc` text.

## What it does not do

- There is no `ifconfig`, `route` or `ip` command; interfaces and routes
  cannot be configured with this package.
- `route_info` knows only the AX.25 and AppleTalk routing tables; asking
  for `inet`, `inet6` or any other family raises `RouteError`.
- `hostname` has no DECnet node name support.

## Tests

```
pip install -e .[test]
pytest
```