# AWS Lambda Entry Point
"""
Lambda handler for API Gateway proxy integrations.

Accepts both payload shapes:
- REST API (v1): "path", requestContext.identity.sourceIp
- HTTP API (v2): "rawPath", requestContext.http.sourceIp

Routes are configured as `/{proxy+}`; the "proxy" path parameter, when
present, takes precedence over the raw path.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ipby.config import config, parse_log_level
from ipby.core import RequestView, handle

logger = logging.getLogger(__name__)
# The Lambda runtime installs its own root handler
logging.getLogger().setLevel(parse_log_level(config.LOG_LEVEL))


def _mapping(value: Any) -> Mapping[str, Any]:
    """API Gateway sends null for empty headers/query/pathParameters."""
    return value if isinstance(value, dict) else {}


def _gateway_source_ip(event: Mapping[str, Any]) -> Optional[str]:
    context = _mapping(event.get("requestContext"))
    return (
        _mapping(context.get("identity")).get("sourceIp")
        or _mapping(context.get("http")).get("sourceIp")
    )


def request_from_event(event: Mapping[str, Any]) -> RequestView:
    """
    Build a RequestView from an API Gateway proxy event.

    Args:
        event: Lambda event dict (v1 or v2 payload)

    Returns:
        RequestView for the core
    """
    headers = {
        str(name).lower(): value
        for name, value in _mapping(event.get("headers")).items()
    }
    if not headers.get("source-ip"):
        source_ip = _gateway_source_ip(event)
        if source_ip:
            headers["source-ip"] = source_ip

    query = {
        str(name): str(value)
        for name, value in _mapping(event.get("queryStringParameters")).items()
        if value is not None
    }

    return RequestView(
        path=event.get("path") or event.get("rawPath") or "",
        proxy_path=_mapping(event.get("pathParameters")).get("proxy"),
        headers=headers,
        query=query,
    )


def lambda_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    Lambda entry point.

    Args:
        event: API Gateway proxy event
        context: Lambda context (unused)

    Returns:
        Proxy integration response with statusCode, headers and body
    """
    response = handle(request_from_event(_mapping(event)))
    return {
        "statusCode": response.status_code,
        "headers": response.headers,
        "body": response.body,
    }
