"""Linux networking commands (arp, hostname, ipmaddr, iptunnel) and hardware-address helpers."""

__version__ = "0.1.0"