import logging
import re

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock

from app import app
from client import ExternalApiError, get_terabox_client
from endpoints.resolve import RESOLVE_FAILED_MESSAGE

client = TestClient(app)

VALID_URL = "https://www.1024terabox.com/s/1AbCdEfG"


class StubTeraboxClient:
    def __init__(self):
        self.fetch = AsyncMock()


@pytest.fixture
def stub_upstream():
    """Install a stub resolution client; returns a setter for its behaviour"""
    stub = StubTeraboxClient()

    def configure(result=None, error=None):
        stub.fetch.return_value = result
        stub.fetch.side_effect = error
        return stub

    app.dependency_overrides[get_terabox_client] = lambda: stub
    yield configure
    app.dependency_overrides.clear()


class TestResolveValidation:
    @pytest.mark.parametrize("body", [
        {},
        {"url": None},
        {"url": ""},
        {"url": "https://example.com/s/1abc"},
        {"url": "https://www.terabox.com/s/1abc"},
    ])
    def test_rejects_invalid_url(self, stub_upstream, body):
        stub = stub_upstream()
        response = client.post("/api/resolve", json=body)
        assert response.status_code == 400
        assert response.json() == {"status": "error", "message": "Invalid 1024terabox URL"}
        stub.fetch.assert_not_called()

    def test_rejects_missing_body(self, stub_upstream):
        stub = stub_upstream()
        response = client.post("/api/resolve")
        assert response.status_code == 400
        assert response.json() == {"status": "error", "message": "Invalid 1024terabox URL"}
        stub.fetch.assert_not_called()

    def test_url_is_not_normalized(self, stub_upstream):
        stub = stub_upstream(result={"status": "success"})
        response = client.post("/api/resolve", json={"url": "  1024terabox.com  "})
        assert response.status_code == 200
        stub.fetch.assert_awaited_once_with("  1024terabox.com  ")

    def test_non_string_url_is_bad_request(self, stub_upstream):
        stub = stub_upstream()
        response = client.post("/api/resolve", json={"url": 42})
        assert response.status_code == 400
        assert response.json()["status"] == "error"
        assert response.json()["message"] == "Invalid request body"
        stub.fetch.assert_not_called()


class TestResolveSuccess:
    def test_maps_upstream_fields(self, stub_upstream):
        stub = stub_upstream(result={
            "status": "success",
            "filename": "a.zip",
            "size": "10MB",
            "download": "http://x/y",
            "thumbs": {"url1": "http://t1"},
        })
        response = client.post("/api/resolve", json={"url": VALID_URL})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["filename"] == "a.zip"
        assert body["size"] == "10MB"
        assert body["url1"] == "http://x/y"
        assert body["thumbnail"] == "http://t1"
        assert body["url2"] == ""
        assert body["url3"] == ""
        assert re.fullmatch(r"\d+ms", body["response_time"])
        stub.fetch.assert_awaited_once_with(VALID_URL)

    def test_thumbnail_prefers_url3(self, stub_upstream):
        stub_upstream(result={
            "status": "success",
            "thumbs": {"url1": "http://t1", "url3": "http://t3"},
        })
        response = client.post("/api/resolve", json={"url": VALID_URL})
        assert response.json()["thumbnail"] == "http://t3"

    def test_defaults_for_missing_fields(self, stub_upstream):
        stub_upstream(result={"status": "success"})
        body = client.post("/api/resolve", json={"url": VALID_URL}).json()
        assert body["filename"] == "Unknown file"
        assert body["size"] == "Unknown size"
        assert body["thumbnail"] == ""
        assert body["url1"] == ""

    def test_upstream_response_time_wins(self, stub_upstream):
        stub_upstream(result={"status": "success", "response_time": "1.23 seconds"})
        body = client.post("/api/resolve", json={"url": VALID_URL}).json()
        assert body["response_time"] == "1.23 seconds"

    def test_zero_size_is_kept(self, stub_upstream):
        stub_upstream(result={"status": "success", "size": 0, "thumbs": "none"})
        body = client.post("/api/resolve", json={"url": VALID_URL}).json()
        assert body["size"] == "0"
        assert body["thumbnail"] == ""


class TestResolveFailure:
    def test_upstream_error_is_hidden_but_logged(self, stub_upstream, caplog):
        stub_upstream(result={"status": "error", "message": "bad link"})
        with caplog.at_level(logging.ERROR):
            response = client.post("/api/resolve", json={"url": VALID_URL})

        assert response.status_code == 502
        assert response.json() == {"status": "error", "message": RESOLVE_FAILED_MESSAGE}
        assert "bad link" not in response.text
        assert "bad link" in caplog.text

    def test_upstream_error_without_message(self, stub_upstream, caplog):
        stub_upstream(result={"status": "failed"})
        with caplog.at_level(logging.ERROR):
            response = client.post("/api/resolve", json={"url": VALID_URL})
        assert response.json()["message"] == RESOLVE_FAILED_MESSAGE
        assert "External API returned an error" in caplog.text

    @pytest.mark.parametrize("error", [
        ExternalApiError("timeout of 10s exceeded"),
        ExternalApiError("request failed: Cannot connect to host"),
        ExternalApiError("invalid JSON from resolution API: <html>"),
    ])
    def test_all_upstream_failures_look_the_same(self, stub_upstream, error):
        stub_upstream(error=error)
        response = client.post("/api/resolve", json={"url": VALID_URL})
        assert response.status_code == 502
        assert response.json() == {"status": "error", "message": RESOLVE_FAILED_MESSAGE}

    @pytest.mark.parametrize("error", [
        UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte"),
        RuntimeError("connection reset mid-body"),
    ])
    def test_unexpected_errors_use_the_same_failure(self, stub_upstream, caplog, error):
        stub_upstream(error=error)
        with caplog.at_level(logging.ERROR):
            response = client.post("/api/resolve", json={"url": VALID_URL})
        assert response.status_code == 502
        assert response.json() == {"status": "error", "message": RESOLVE_FAILED_MESSAGE}
        assert "Resolve error: " + str(error) in caplog.text

    @pytest.mark.parametrize("message", [None, "", 0, False])
    def test_falsy_upstream_message_uses_default(self, stub_upstream, caplog, message):
        stub_upstream(result={"status": "error", "message": message})
        with caplog.at_level(logging.ERROR):
            response = client.post("/api/resolve", json={"url": VALID_URL})
        assert response.status_code == 502
        assert "Resolve error: External API returned an error" in caplog.text


class TestSystemEndpoints:
    def test_health_endpoint(self):
        response = client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert "1024terabox.com" in body["allowed_domains"]

    def test_static_index(self):
        response = client.get("/")
        assert response.status_code == 200
        assert "/api/resolve" in response.text

    def test_unknown_api_route(self):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.json()["status"] == "error"
