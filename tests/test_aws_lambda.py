from unittest.mock import patch

import pytest

from ipby.aws_lambda import lambda_handler, request_from_event


@pytest.fixture(autouse=True)
def no_trusted_proxies():
    """Pin the process-wide configuration for these tests"""
    with patch("ipby.config.config.TRUSTED_PROXIES", frozenset()), \
            patch("ipby.config.config.CORS_ALLOW_ORIGIN", None):
        yield


def rest_event(path, headers=None, query=None, proxy=None, source_ip="198.51.100.20"):
    """REST API (payload v1) proxy event"""
    return {
        "resource": "/{proxy+}",
        "path": path,
        "httpMethod": "GET",
        "headers": headers,
        "queryStringParameters": query,
        "pathParameters": {"proxy": proxy} if proxy is not None else None,
        "requestContext": {"identity": {"sourceIp": source_ip}},
        "body": None,
    }


def http_api_event(raw_path, headers=None, query=None, source_ip="198.51.100.30"):
    """HTTP API (payload v2) event"""
    event = {
        "version": "2.0",
        "rawPath": raw_path,
        "rawQueryString": "",
        "headers": headers or {},
        "requestContext": {"http": {"method": "GET", "path": raw_path, "sourceIp": source_ip}},
    }
    if query is not None:
        event["queryStringParameters"] = query
    return event


class TestRestApiEvents:
    def test_root(self):
        event = rest_event("/", headers={"X-Forwarded-For": "10.0.0.5, 203.0.113.7"})
        assert lambda_handler(event, None) == {
            "statusCode": 200,
            "headers": {"Content-Type": "text/plain"},
            "body": "203.0.113.7",
        }

    def test_proxy_parameter_takes_precedence(self):
        event = rest_event(
            "/prod/ignored", headers={"x-forwarded-for": "9.9.9.9"}, proxy="jsonp/ip",
            query={"callback": "foo"},
        )
        response = lambda_handler(event, None)
        assert response["body"] == 'foo({"ipv4":"9.9.9.9"});'
        assert response["headers"]["Content-Type"] == "application/javascript"

    def test_null_collections(self):
        response = lambda_handler(rest_event("/xff"), None)
        assert response == {"statusCode": 200, "headers": {"Content-Type": "text/plain"}, "body": ""}

    def test_request_context_source_ip_fallback(self):
        response = lambda_handler(rest_event("/json"), None)
        assert response["body"] == '{"ip":"198.51.100.20"}'

    def test_source_ip_header_wins_over_request_context(self):
        event = rest_event("/ip", headers={"source-ip": "192.0.2.10"})
        assert lambda_handler(event, None)["body"] == "192.0.2.10"

    def test_forbidden(self):
        event = rest_event("/yaml/ipv4", headers={"x-forwarded-for": "2001:db8::1"})
        response = lambda_handler(event, None)
        assert response["statusCode"] == 403
        assert response["body"] == "Forbidden: IPv4 only"

    def test_not_found(self):
        response = lambda_handler(rest_event("/unknown/thing/extra"), None)
        assert response["statusCode"] == 404
        assert response["body"] == "Not Found"


class TestHttpApiEvents:
    def test_raw_path(self):
        event = http_api_event("/toml/ipv6", headers={"x-forwarded-for": "2001:db8::1"})
        response = lambda_handler(event, None)
        assert response["statusCode"] == 200
        assert response["body"] == "ipv6 = '2001:db8::1'"
        assert response["headers"]["Content-Type"] == "application/toml"

    def test_http_source_ip_fallback(self):
        response = lambda_handler(http_api_event("/ipv4"), None)
        assert response["body"] == "198.51.100.30"


class TestRequestFromEvent:
    def test_headers_are_lower_cased(self):
        request = request_from_event(rest_event("/", headers={"X-Forwarded-For": "1.1.1.1"}))
        assert request.headers["x-forwarded-for"] == "1.1.1.1"

    def test_null_query_values_are_dropped(self):
        request = request_from_event(rest_event("/", query={"callback": None, "a": "b"}))
        assert request.query == {"a": "b"}

    def test_empty_event(self):
        request = request_from_event({})
        assert request.path == ""
        assert request.proxy_path is None
        assert request.headers == {}
        assert request.query == {}

    def test_null_event(self):
        assert lambda_handler(None, None)["body"] == ""
