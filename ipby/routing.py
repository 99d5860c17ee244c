# Routing Table
"""
Ordered routing rules mapping a route key and client address to an outcome.

Rules are evaluated top to bottom and the first match wins. Later rules
are more general than earlier ones, so order is significant.

Routes:
- /, /{format}              caller's address, one unlabeled value
- /ip, /{format}/ip         labeled ipv4/ipv6 fields
- /ipv4, /{format}/ipv4     IPv4 only, 403 otherwise
- /ipv6, /{format}/ipv6     IPv6 only, 403 otherwise
- /xff                      raw X-Forwarded-For value
- anything else             404
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

from ipby.renderer import FormatSpec
from ipby.utils.identifiers import RouteKey, extract_ipv4_ipv6, is_ipv4, is_ipv6


@dataclass(frozen=True)
class Render:
    ipv4: Optional[str]
    ipv6: Optional[str]
    format: FormatSpec
    single_field: bool


@dataclass(frozen=True)
class Forbidden:
    reason: str


@dataclass(frozen=True)
class Passthrough:
    body: str


@dataclass(frozen=True)
class NotFound:
    pass


Outcome = Union[Render, Forbidden, Passthrough, NotFound]


@dataclass(frozen=True)
class Rule:
    """
    A single routing rule.

    Attributes:
        name: Label used in logs and tests
        matches: Predicate on the route key
        guard: Predicate on the resolved client address
        outcome: Builds the outcome from (key, client_ip, forwarded_for)
    """
    name: str
    matches: Callable[[RouteKey], bool]
    guard: Callable[[str], bool]
    outcome: Callable[[RouteKey, str, str], Outcome]


def _key(resource: str, subresource: str = "") -> Callable[[RouteKey], bool]:
    return lambda key: key.resource == resource and key.subresource == subresource


def _format_key(subresource: str = "") -> Callable[[RouteKey], bool]:
    return lambda key: (
        FormatSpec.from_segment(key.resource) is not None
        and key.subresource == subresource
    )


def _any_client(client_ip: str) -> bool:
    return True


def _fmt(key: RouteKey) -> FormatSpec:
    return FormatSpec.from_segment(key.resource)


IPV4_ONLY = "IPv4 only"
IPV6_ONLY = "IPv6 only"


ROUTES: Tuple[Rule, ...] = (
    # Plain text
    Rule("root", _key(""), _any_client,
         lambda key, ip, xff: Render(ip, None, FormatSpec.TEXT, True)),
    Rule("ip", _key("ip"), _any_client,
         lambda key, ip, xff: Render(*extract_ipv4_ipv6(ip), FormatSpec.TEXT, False)),
    Rule("ipv4", _key("ipv4"), is_ipv4,
         lambda key, ip, xff: Render(ip, None, FormatSpec.TEXT, False)),
    Rule("ipv4-forbidden", _key("ipv4"), _any_client,
         lambda key, ip, xff: Forbidden(IPV4_ONLY)),
    Rule("ipv6", _key("ipv6"), is_ipv6,
         lambda key, ip, xff: Render(None, ip, FormatSpec.TEXT, False)),
    Rule("ipv6-forbidden", _key("ipv6"), _any_client,
         lambda key, ip, xff: Forbidden(IPV6_ONLY)),
    Rule("xff", _key("xff"), _any_client,
         lambda key, ip, xff: Passthrough(xff)),

    # Format-prefixed
    Rule("format", _format_key(), _any_client,
         lambda key, ip, xff: Render(ip, ip, _fmt(key), True)),
    Rule("format-ip", _format_key("ip"), _any_client,
         lambda key, ip, xff: Render(*extract_ipv4_ipv6(ip), _fmt(key), False)),
    Rule("format-ipv4", _format_key("ipv4"), is_ipv4,
         lambda key, ip, xff: Render(ip, None, _fmt(key), False)),
    Rule("format-ipv4-forbidden", _format_key("ipv4"), _any_client,
         lambda key, ip, xff: Forbidden(IPV4_ONLY)),
    Rule("format-ipv6", _format_key("ipv6"), is_ipv6,
         lambda key, ip, xff: Render(None, ip, _fmt(key), False)),
    Rule("format-ipv6-forbidden", _format_key("ipv6"), _any_client,
         lambda key, ip, xff: Forbidden(IPV6_ONLY)),
)


def match_rule(key: RouteKey, client_ip: str) -> Optional[Rule]:
    """Return the first rule whose key predicate and guard both hold."""
    for rule in ROUTES:
        if rule.matches(key) and rule.guard(client_ip):
            return rule
    return None


def route(key: RouteKey, client_ip: str, forwarded_for: str = "") -> Outcome:
    """
    Resolve a request to its outcome.

    Args:
        key: Parsed route key
        client_ip: Resolved client address
        forwarded_for: Raw X-Forwarded-For value, echoed by /xff

    Returns:
        Render, Forbidden, Passthrough or NotFound
    """
    rule = match_rule(key, client_ip)
    if rule is None:
        return NotFound()
    return rule.outcome(key, client_ip, forwarded_for)
