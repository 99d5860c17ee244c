"""Shared fixtures for IPby tests"""

import pytest
from fastapi.testclient import TestClient

from ipby.core import RequestView
from ipby.main import create_app


@pytest.fixture
def client():
    """Test client with no trusted proxies and CORS disabled"""
    with TestClient(create_app(trusted_proxies=(), cors_allow_origin="")) as test_client:
        yield test_client


@pytest.fixture
def make_request():
    """Factory for RequestView objects with an X-Forwarded-For header"""

    def _make(path="/", xff=None, source_ip=None, query=None, proxy_path=None):
        headers = {}
        if xff is not None:
            headers["X-Forwarded-For"] = xff
        if source_ip is not None:
            headers["Source-IP"] = source_ip
        return RequestView(path=path, proxy_path=proxy_path, headers=headers, query=query or {})

    return _make
