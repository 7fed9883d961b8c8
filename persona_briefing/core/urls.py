"""Checks for outbound URLs taken from request bodies."""

from __future__ import annotations

import ipaddress

_LOCAL_HOSTNAMES = {"localhost", "localhost.localdomain"}


def is_public_address(address: str) -> bool:
    """True for a globally routable unicast IP address."""
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped:
        ip = ip.ipv4_mapped
    return ip.is_global and not ip.is_multicast


def is_blocked_host(host: str) -> bool:
    """True for a local hostname or an IP literal that is not public.

    Other hostnames need DNS and are checked again once resolved.
    """
    host = host.strip("[]").rstrip(".").lower()
    if not host or host in _LOCAL_HOSTNAMES or host.endswith(".localhost"):
        return True
    try:
        ipaddress.ip_address(host.split("%", 1)[0])
    except ValueError:
        return False
    return not is_public_address(host)
