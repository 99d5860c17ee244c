# Request Handling Core
"""
Transport-independent request handling.

Each adapter (standalone server, Lambda) builds a RequestView, calls
handle(), and emits the ResponseView it gets back. handle() never raises
for bad input: every path yields a well-formed response.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional

from ipby.config import config
from ipby.renderer import render
from ipby.routing import Forbidden, NotFound, Outcome, Passthrough, Render, route
from ipby.utils.identifiers import parse_route_key, resolve_client_ip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestView:
    """What an adapter extracts from its transport."""
    path: str
    proxy_path: Optional[str] = None
    headers: Mapping[str, Optional[str]] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)


@dataclass
class ResponseView:
    """What an adapter turns back into a transport response."""
    status_code: int
    headers: Dict[str, str]
    body: str


def response_200(content_type: str, body: str) -> ResponseView:
    return ResponseView(200, {"Content-Type": content_type}, body)


def response_403(reason: str) -> ResponseView:
    return ResponseView(403, {"Content-Type": "text/plain"}, f"Forbidden: {reason}")


def response_404() -> ResponseView:
    return ResponseView(404, {"Content-Type": "text/plain"}, "Not Found")


def _header(headers: Mapping[str, Optional[str]], name: str) -> str:
    """Case-insensitive header lookup; missing or null values read as ""."""
    for key, value in headers.items():
        if key.lower() == name:
            return value or ""
    return ""


def build_response(outcome: Outcome, query: Optional[Mapping[str, str]] = None) -> ResponseView:
    """Turn a routing outcome into a response."""
    if isinstance(outcome, Render):
        body, content_type = render(
            outcome.ipv4, outcome.ipv6, outcome.format, outcome.single_field, query
        )
        return response_200(content_type, body)
    if isinstance(outcome, Passthrough):
        return response_200("text/plain", outcome.body)
    if isinstance(outcome, Forbidden):
        return response_403(outcome.reason)
    if isinstance(outcome, NotFound):
        return response_404()
    raise TypeError(f"Unknown routing outcome: {outcome!r}")


def handle(
    request: RequestView,
    trusted_proxies: Optional[Iterable[str]] = None,
    cors_allow_origin: Optional[str] = None,
) -> ResponseView:
    """
    Handle one request.

    Args:
        request: Path, catch-all parameter, headers and query parameters
        trusted_proxies: Proxy addresses to skip in X-Forwarded-For,
            defaults to config.TRUSTED_PROXIES
        cors_allow_origin: Access-Control-Allow-Origin value,
            defaults to config.CORS_ALLOW_ORIGIN (None disables the header)

    Returns:
        ResponseView with status 200, 403 or 404
    """
    if trusted_proxies is None:
        trusted_proxies = config.TRUSTED_PROXIES
    if cors_allow_origin is None:
        cors_allow_origin = config.CORS_ALLOW_ORIGIN

    forwarded_for = _header(request.headers, "x-forwarded-for")
    source_ip = _header(request.headers, "source-ip")
    client_ip = resolve_client_ip(forwarded_for, source_ip, trusted_proxies)
    logger.info("Received request from %s (%s)", client_ip, forwarded_for)

    key = parse_route_key(request.path, request.proxy_path)
    outcome = route(key, client_ip, forwarded_for)
    logger.debug("Routed %r to %r", key, outcome)

    response = build_response(outcome, request.query)
    if cors_allow_origin:
        response.headers["Access-Control-Allow-Origin"] = cors_allow_origin
    return response
