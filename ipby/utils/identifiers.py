# Client Identifier Utilities
"""
Utilities for interpreting an inbound request.

Resolves the client IP from the X-Forwarded-For chain with trusted-proxy
awareness, classifies addresses, and splits request paths into route keys.
"""

import ipaddress
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple


class AddressFamily(Enum):
    """Classification of a client address string."""

    IPV4 = "ipv4"
    IPV6 = "ipv6"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class RouteKey:
    """First path segment and the remainder after it."""

    resource: str
    subresource: str = ""


def is_ipv4(address: str) -> bool:
    """Strict dotted-quad check."""
    try:
        ipaddress.IPv4Address(address)
    except ValueError:
        return False
    return True


def is_ipv6(address: str) -> bool:
    """Strict colon-hex check; scoped addresses such as fe80::1%eth0 are rejected."""
    if "%" in address:
        return False
    try:
        ipaddress.IPv6Address(address)
    except ValueError:
        return False
    return True


def classify_address(address: str) -> AddressFamily:
    if is_ipv4(address):
        return AddressFamily.IPV4
    if is_ipv6(address):
        return AddressFamily.IPV6
    return AddressFamily.UNRECOGNIZED


def extract_ipv4_ipv6(address: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Split an address into (ipv4, ipv6) slots.

    Returns:
        (address, None) for IPv4, (None, address) for IPv6 and
        (None, None) when the address is not recognized
    """
    family = classify_address(address)
    if family is AddressFamily.IPV4:
        return address, None
    if family is AddressFamily.IPV6:
        return None, address
    return None, None


def resolve_client_ip(
    forwarded_for: str,
    fallback_source_ip: str,
    trusted_proxies: Iterable[str] = (),
) -> str:
    """
    Extract the client's IP address from an X-Forwarded-For chain.

    Format: "client, proxy1, proxy2". Each proxy appends the address it
    received the request from, so only the right-hand end of the chain is
    written by infrastructure we control. The chain is walked from the
    right and the first hop that is not a trusted proxy is the client.

    Args:
        forwarded_for: Raw X-Forwarded-For header value (may be empty)
        fallback_source_ip: Address used when the chain yields no client
        trusted_proxies: Addresses whose entries are skipped

    Returns:
        Client IP address as string
    """
    trusted = frozenset(trusted_proxies)
    hops = [hop.strip() for hop in forwarded_for.split(",")]

    for hop in reversed(hops):
        # Empty hops come from a missing header or stray commas
        if hop and hop not in trusted:
            return hop

    return fallback_source_ip


def _strip_slashes(path: str) -> str:
    if path.startswith("/"):
        path = path[1:]
    if path.endswith("/"):
        path = path[:-1]
    return path


def parse_route_key(path: str, proxy_path: Optional[str] = None) -> RouteKey:
    """
    Get a route key from the request path.

    Exactly one leading and one trailing slash are removed. A non-empty
    gateway catch-all parameter (API Gateway `/{proxy+}`) takes precedence
    over the raw path.

    Args:
        path: Raw request path
        proxy_path: Catch-all path parameter, if the gateway supplied one

    Returns:
        RouteKey of the first segment and everything after it
    """
    normalized = _strip_slashes(proxy_path or "")
    if not normalized:
        normalized = _strip_slashes(path or "")

    resource, _, subresource = normalized.partition("/")
    return RouteKey(resource=resource, subresource=subresource)
