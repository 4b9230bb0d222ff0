#!/usr/bin/env python3
"""Unit tests for SurfsightClient.

Tests cover:
    - Configuration from arguments and environment
    - Request building (URL, headers, JSON body)
    - Non-2xx statuses returned as values
    - Non-JSON bodies returned as raw text
    - Transport failures mapped to NetworkError subclasses

Note: These tests mock aiohttp.ClientSession rather than making real API calls.
"""
import asyncio
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

sys.path.insert(0, str(__file__).rsplit("/tests", 1)[0])
from src.surfsight.api.client import DEFAULT_BASE_URL, SurfsightClient, UpstreamResponse
from src.surfsight.api.exceptions import (
    ConfigurationError,
    ConnectionError,
    NetworkError,
    TimeoutError,
)


def make_session(status: int = 200, text=b"", side_effect=None):
    """Build a mocked aiohttp.ClientSession returning one response."""
    mock_response = MagicMock()
    mock_response.status = status
    raw = text.encode("utf-8") if isinstance(text, str) else text
    mock_response.read = AsyncMock(return_value=raw)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = MagicMock()
    if side_effect is not None:
        mock_session.request = MagicMock(side_effect=side_effect)
    else:
        mock_session.request = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


# ============================================
# Configuration Tests
# ============================================


class TestClientConfig:
    """Test SurfsightClient configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SURFSIGHT_BASE_URL", raising=False)
        monkeypatch.delenv("SURFSIGHT_TIMEOUT_SECONDS", raising=False)

        client = SurfsightClient()

        assert client.base_url == DEFAULT_BASE_URL
        assert client.timeout_seconds == 30

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SURFSIGHT_BASE_URL", "https://surfsight.test/v2/")
        monkeypatch.setenv("SURFSIGHT_TIMEOUT_SECONDS", "5")

        client = SurfsightClient()

        assert client.base_url == "https://surfsight.test/v2"
        assert client.timeout_seconds == 5

    def test_malformed_timeout_raises(self, monkeypatch):
        monkeypatch.setenv("SURFSIGHT_TIMEOUT_SECONDS", "soon")

        with pytest.raises(ConfigurationError) as exc_info:
            SurfsightClient()

        assert "SURFSIGHT_TIMEOUT_SECONDS" in exc_info.value.details["invalid_keys"]

    def test_explicit_arguments_win(self, monkeypatch):
        monkeypatch.setenv("SURFSIGHT_TIMEOUT_SECONDS", "soon")

        client = SurfsightClient(base_url="https://other.test", timeout_seconds=2)

        assert client.base_url == "https://other.test"
        assert client.timeout_seconds == 2


# ============================================
# UpstreamResponse Tests
# ============================================


class TestUpstreamResponse:
    """Test UpstreamResponse helpers."""

    @pytest.mark.parametrize("status,expected", [(200, True), (204, True), (299, True), (199, False), (300, False), (404, False)])
    def test_ok_is_2xx(self, status, expected):
        assert UpstreamResponse(status=status).ok is expected

    def test_data_reads_data_envelope(self):
        response = UpstreamResponse(status=200, body={"data": {"token": "t"}})
        assert response.data == {"token": "t"}

    def test_data_empty_for_missing_or_non_dict(self):
        assert UpstreamResponse(status=200, body=None).data == {}
        assert UpstreamResponse(status=200, body={"data": ["x"]}).data == {}
        assert UpstreamResponse(status=200, body=["x"]).data == {}


# ============================================
# Request Tests
# ============================================


class TestRequest:
    """Test SurfsightClient.request."""

    @pytest.fixture
    def client(self):
        return SurfsightClient(base_url="https://surfsight.test/v2", timeout_seconds=3)

    @pytest.mark.asyncio
    async def test_builds_url_and_bearer_header(self, client):
        session = make_session(200, '{"data": {"billingStatus": "activated"}}')

        with patch("aiohttp.ClientSession", return_value=session):
            response = await client.get("/devices/123/billing-status", token="abc")

        kwargs = session.request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "https://surfsight.test/v2/devices/123/billing-status"
        assert kwargs["headers"]["Authorization"] == "Bearer abc"
        assert kwargs["headers"]["Accept"] == "application/json"
        assert "Content-Type" not in kwargs["headers"]
        assert response.ok
        assert response.data == {"billingStatus": "activated"}

    @pytest.mark.asyncio
    async def test_put_sends_json_body(self, client):
        session = make_session(200, "{}")

        with patch("aiohttp.ClientSession", return_value=session):
            await client.put("/devices/billing-status/suspended", {"imeis": ["1"]}, token="abc")

        kwargs = session.request.call_args.kwargs
        assert kwargs["method"] == "PUT"
        assert kwargs["json"] == {"imeis": ["1"]}
        assert kwargs["headers"]["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_no_token_no_authorization_header(self, client):
        session = make_session(200, "{}")

        with patch("aiohttp.ClientSession", return_value=session):
            await client.post("/authenticate", {"email": "a", "password": "b"})

        assert "Authorization" not in session.request.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_non_2xx_returned_not_raised(self, client):
        session = make_session(404, '{"message": "Device not found"}')

        with patch("aiohttp.ClientSession", return_value=session):
            response = await client.get("/devices/999/billing-status", token="abc")

        assert response.status == 404
        assert not response.ok
        assert response.body == {"message": "Device not found"}

    @pytest.mark.asyncio
    async def test_non_json_body_kept_as_text(self, client):
        session = make_session(502, "<html>Bad Gateway</html>")

        with patch("aiohttp.ClientSession", return_value=session):
            response = await client.get("/devices/1/billing-status", token="abc")

        assert response.status == 502
        assert response.body is None
        assert response.text == "<html>Bad Gateway</html>"

    @pytest.mark.asyncio
    async def test_invalid_utf8_body_is_returned_not_raised(self, client):
        session = make_session(200, b'{"data": {"token": "t\xff"}}')

        with patch("aiohttp.ClientSession", return_value=session):
            response = await client.post("/authenticate", {"email": "a", "password": "b"})

        assert response.ok
        assert response.data == {"token": "t\ufffd"}

    @pytest.mark.asyncio
    async def test_invalid_utf8_non_json_body(self, client):
        session = make_session(502, b"\xff\xfe gateway")

        with patch("aiohttp.ClientSession", return_value=session):
            response = await client.put("/devices/billing-status/suspended", {"imeis": ["1"]}, token="abc")

        assert response.status == 502
        assert response.body is None
        assert response.text.endswith(" gateway")

    @pytest.mark.asyncio
    async def test_empty_body(self, client):
        session = make_session(204, "")

        with patch("aiohttp.ClientSession", return_value=session):
            response = await client.put("/devices/1/data-profile/3", {}, token="abc")

        assert response.ok
        assert response.body is None
        assert response.data == {}

    @pytest.mark.asyncio
    async def test_one_session_per_call(self, client):
        with patch("aiohttp.ClientSession", return_value=make_session(200, "{}")) as session_cls:
            await client.get("/a")
            await client.get("/b")

        assert session_cls.call_count == 2
        timeout = session_cls.call_args.kwargs["timeout"]
        assert timeout.total == 3


# ============================================
# Transport Failure Tests
# ============================================


class TestTransportFailures:
    """Transport failures raise NetworkError subclasses."""

    @pytest.fixture
    def client(self):
        return SurfsightClient(base_url="https://surfsight.test/v2", timeout_seconds=3)

    @pytest.mark.asyncio
    async def test_connection_error(self, client):
        session = make_session(side_effect=aiohttp.ClientConnectionError("refused"))

        with patch("aiohttp.ClientSession", return_value=session):
            with pytest.raises(ConnectionError) as exc_info:
                await client.get("/devices/1/billing-status")

        assert exc_info.value.recoverable is True
        assert exc_info.value.details["host"] == "https://surfsight.test/v2"

    @pytest.mark.asyncio
    async def test_timeout(self, client):
        session = make_session(side_effect=asyncio.TimeoutError())

        with patch("aiohttp.ClientSession", return_value=session):
            with pytest.raises(TimeoutError) as exc_info:
                await client.get("/devices/1/billing-status")

        assert exc_info.value.details["timeout_seconds"] == 3

    @pytest.mark.asyncio
    async def test_other_client_error(self, client):
        session = make_session(side_effect=aiohttp.ClientPayloadError("truncated"))

        with patch("aiohttp.ClientSession", return_value=session):
            with pytest.raises(NetworkError) as exc_info:
                await client.get("/devices/1/billing-status")

        assert not isinstance(exc_info.value, (ConnectionError, TimeoutError))
        assert isinstance(exc_info.value.cause, aiohttp.ClientPayloadError)
