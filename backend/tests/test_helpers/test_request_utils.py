"""Tests for client address extraction."""

import pytest
from starlette.requests import Request

from helpers.request_utils import get_client_ip
from models.config import settings


def make_request(headers=None, client=("10.0.0.1", 1234)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [
            (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
        ],
        "client": client,
    }
    return Request(scope)


@pytest.fixture
def trusted_proxy(monkeypatch):
    monkeypatch.setattr(settings, "TRUSTED_PROXIES", ["10.0.0.1"])


def test_direct_client():
    assert get_client_ip(make_request()) == "10.0.0.1"


def test_unknown_without_client():
    assert get_client_ip(make_request(client=None)) == "unknown"


@pytest.mark.parametrize(
    "headers",
    [
        {"X-Forwarded-For": "203.0.113.7, 10.0.0.2"},
        {"X-Real-IP": "198.51.100.4"},
    ],
)
def test_proxy_headers_ignored_from_untrusted_peer(headers):
    assert get_client_ip(make_request(headers)) == "10.0.0.1"


class TestTrustedProxy:
    """Peers listed in TRUSTED_PROXIES may name the real client."""

    def test_forwarded_for_first_hop(self, trusted_proxy):
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.2"})
        assert get_client_ip(request) == "203.0.113.7"

    def test_real_ip(self, trusted_proxy):
        request = make_request({"X-Real-IP": " 198.51.100.4 "})
        assert get_client_ip(request) == "198.51.100.4"

    def test_falls_back_to_peer(self, trusted_proxy):
        assert get_client_ip(make_request({"X-Forwarded-For": " "})) == "10.0.0.1"

    def test_other_peers_still_untrusted(self, trusted_proxy):
        request = make_request(
            {"X-Forwarded-For": "203.0.113.7"}, client=("192.0.2.9", 4321)
        )
        assert get_client_ip(request) == "192.0.2.9"
