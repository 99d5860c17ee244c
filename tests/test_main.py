from unittest.mock import patch

from fastapi.testclient import TestClient

from ipby.main import create_app


class TestServerRoutes:
    def test_root_text(self, client):
        response = client.get("/", headers={"X-Forwarded-For": "10.0.0.5, 203.0.113.7"})
        assert response.status_code == 200
        assert response.text == "203.0.113.7"
        assert response.headers["content-type"] == "text/plain"

    def test_json_ip(self, client):
        response = client.get("/json/ip", headers={"X-Forwarded-For": "1.2.3.4"})
        assert response.status_code == 200
        assert response.text == '{"ipv4":"1.2.3.4"}'
        assert response.headers["content-type"] == "application/json"

    def test_jsonp_callback(self, client):
        response = client.get("/jsonp/ip?callback=foo", headers={"X-Forwarded-For": "9.9.9.9"})
        assert response.text == 'foo({"ipv4":"9.9.9.9"});'
        assert response.headers["content-type"] == "application/javascript"

    def test_trailing_slash(self, client):
        response = client.get("/xml/ipv6/", headers={"X-Forwarded-For": "2001:db8::1"})
        assert response.status_code == 200
        assert response.text == "<ip><ipv6>2001:db8::1</ipv6></ip>"

    def test_forbidden(self, client):
        response = client.get("/json/ipv4", headers={"X-Forwarded-For": "2001:db8::1"})
        assert response.status_code == 403
        assert response.text == "Forbidden: IPv4 only"

    def test_family_keyword_is_not_a_format_prefix(self, client):
        response = client.get("/ipv6/ipv4", headers={"X-Forwarded-For": "2001:db8::1"})
        assert response.status_code == 404
        assert response.text == "Not Found"

    def test_not_found(self, client):
        response = client.get("/unknown/thing/extra", headers={"X-Forwarded-For": "9.9.9.9"})
        assert response.status_code == 404
        assert response.text == "Not Found"

    def test_docs_routes_are_not_exposed(self, client):
        assert client.get("/docs").status_code == 404
        assert client.get("/openapi.json").status_code == 404

    def test_xff_without_header(self, client):
        response = client.get("/xff")
        assert response.status_code == 200
        assert response.text == ""
        assert response.headers["content-type"] == "text/plain"

    def test_source_ip_header(self, client):
        response = client.get("/ip", headers={"Source-IP": "192.0.2.10"})
        assert response.text == "192.0.2.10"

    def test_peer_address_fallback(self, client):
        # TestClient reports its peer as "testclient"
        assert client.get("/").text == "testclient"
        assert client.get("/ip").text == ""

    def test_empty_source_ip_header_uses_peer_address(self, client):
        assert client.get("/", headers={"Source-IP": ""}).text == "testclient"


class TestServerConfiguration:
    def test_trusted_proxies(self):
        app = create_app(trusted_proxies=["10.0.0.1"], cors_allow_origin="")
        with TestClient(app) as client:
            response = client.get("/", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert response.text == "203.0.113.7"

    def test_repeated_forwarded_for_lines_form_one_chain(self):
        app = create_app(trusted_proxies=["10.0.0.1"], cors_allow_origin="")
        with TestClient(app) as client:
            response = client.get("/", headers=[
                ("X-Forwarded-For", "6.6.6.6"),
                ("X-Forwarded-For", "203.0.113.7, 10.0.0.1"),
            ])
            xff = client.get("/xff", headers=[
                ("X-Forwarded-For", "6.6.6.6"),
                ("X-Forwarded-For", "203.0.113.7"),
            ])
        assert response.text == "203.0.113.7"
        assert xff.text == "6.6.6.6, 203.0.113.7"

    def test_cors_header(self):
        app = create_app(trusted_proxies=(), cors_allow_origin="https://example.com")
        with TestClient(app) as client:
            response = client.get("/", headers={"X-Forwarded-For": "9.9.9.9"})
        assert response.headers["access-control-allow-origin"] == "https://example.com"

    def test_cors_header_absent_by_default(self, client):
        response = client.get("/", headers={"X-Forwarded-For": "9.9.9.9"})
        assert "access-control-allow-origin" not in response.headers

    def test_unexpected_error_returns_plain_500(self):
        app = create_app(trusted_proxies=(), cors_allow_origin="")
        with patch("ipby.main.handle", side_effect=RuntimeError("boom")):
            with TestClient(app, raise_server_exceptions=False) as client:
                response = client.get("/")
        assert response.status_code == 500
        assert response.text == "Internal Server Error"

    def test_access_log(self, client, caplog):
        with caplog.at_level("INFO", logger="ipby.middleware.access_log"):
            client.get("/nope")
        assert "GET /nope -> 404" in caplog.text
