"""Tests for the REST API"""

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.rest_api import app, get_estimator
from src.time.sync import OffsetEstimator

DATE_1700000000 = "Tue, 14 Nov 2023 22:13:20 GMT"


class Upstream:
    """Stands in for the probed site; records every probe."""

    def __init__(self, headers=None, error=None):
        self.headers = {"Date": DATE_1700000000} if headers is None else headers
        self.error = error
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return httpx.Response(200, headers=self.headers)


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def client(upstream):
    readings = iter([10_000, 10_040])
    app.dependency_overrides[get_estimator] = lambda: OffsetEstimator(
        clock=lambda: next(readings),
        transport=httpx.MockTransport(upstream),
    )
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestSyncEndpoint:
    """POST /sync"""

    def test_success(self, client, upstream):
        """Compensated time, ISO form, latency and origin come back"""
        resp = client.post("/sync", json={"url": "naver.com"})

        assert resp.status_code == 200
        assert resp.json() == {
            "serverTime": 1700000000020,
            "serverTimeISO": "2023-11-14T22:13:20.020Z",
            "latency": 40,
            "url": "https://naver.com",
        }
        assert upstream.calls == 1

    def test_server_time_route_alias(self, client):
        """The /api/server-time path answers the same way"""
        resp = client.post("/api/server-time", json={"url": "https://naver.com/some/page"})
        assert resp.status_code == 200
        assert resp.json()["url"] == "https://naver.com"

    @pytest.mark.parametrize("body", [{}, {"url": ""}, {"url": None}, {"url": "   "}])
    def test_url_required(self, client, upstream, body):
        """Missing or blank url is rejected without probing"""
        resp = client.post("/sync", json=body)

        assert resp.status_code == 400
        assert resp.json() == {"error": "URL is required"}
        assert upstream.calls == 0

    @pytest.mark.parametrize("url", ["https://", "exa mple.com", 42])
    def test_invalid_url(self, client, upstream, url):
        """Unparseable url is rejected without probing"""
        resp = client.post("/sync", json={"url": url})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid URL format"}
        assert upstream.calls == 0

    def test_missing_date_header(self, client, upstream):
        """A site without Date is reported as unsuitable"""
        upstream.headers = {}
        resp = client.post("/sync", json={"url": "example.com"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Server did not return a Date header"}

    def test_connection_error(self, client, upstream):
        """Network failures give the generic 500"""
        upstream.error = httpx.ConnectError("connection refused")
        resp = client.post("/sync", json={"url": "example.com"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch server time"}

    def test_unexpected_error_is_not_leaked(self, client, upstream):
        """Internal detail never reaches the client"""
        upstream.error = RuntimeError("db password is hunter2")
        resp = client.post("/sync", json={"url": "example.com"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch server time"}

    def test_malformed_body(self, client):
        """A body that is not JSON gives the generic 500"""
        resp = client.post("/sync", content=b"{not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch server time"}


class TestPages:
    """Page and health endpoints"""

    def test_index_page(self, client):
        """The clock page is served at /"""
        resp = client.get("/")
        assert resp.status_code == 200
        assert "darkMode:v1" in resp.text
        assert "/sync" in resp.text

    def test_liveness(self, client):
        resp = client.get("/health/liveness")
        assert resp.status_code == 200
        assert resp.json() == {"status": "alive"}
