"""
Address-space arithmetic for a single network.

Allocatable range rules:
- The base (network) address is never handed out
- The gateway is never handed out
- Everything else up to and including the last (broadcast) address is

So 10.0.0.0/30 with gateway 10.0.0.1 offers 10.0.0.2 and 10.0.0.3.
"""

import ipaddress
from typing import Iterator, Union

from ..exceptions import ValidationError

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]
IPAddr = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_network(cidr: str) -> IPNetwork:
    """Parse CIDR notation; host bits are masked off ("10.0.0.5/24" -> 10.0.0.0/24)."""
    try:
        return ipaddress.ip_network(cidr.strip(), strict=False)
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid CIDR notation: {cidr!r}")


def parse_address(value: str) -> IPAddr:
    try:
        return ipaddress.ip_address(value.strip())
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid IP address: {value!r}")


def next_address(addr: IPAddr) -> IPAddr:
    """Numeric successor of ``addr``; the all-ones address wraps to zero."""
    width = addr.max_prefixlen
    return type(addr)((int(addr) + 1) % (1 << width))


def contains(block: IPNetwork, addr: IPAddr) -> bool:
    if block.version != addr.version:
        return False
    return addr in block


def is_allocatable(block: IPNetwork, gateway: IPAddr, addr: IPAddr) -> bool:
    return contains(block, addr) and addr != gateway and addr != block.network_address


def candidates(block: IPNetwork, gateway: IPAddr) -> Iterator[IPAddr]:
    """
    Yield allocatable addresses in ascending order.

    Starts at the successor of the base address and stops once the
    successor leaves the block. Lazy, so large IPv6 blocks cost nothing
    until consumed.
    """
    addr = next_address(block.network_address)
    while contains(block, addr):
        if addr != gateway:
            yield addr
        addr = next_address(addr)


def capacity(block: IPNetwork, gateway: IPAddr) -> int:
    """Number of addresses ``candidates`` yields."""
    usable = block.num_addresses - 1
    if contains(block, gateway) and gateway != block.network_address:
        usable -= 1
    return usable
