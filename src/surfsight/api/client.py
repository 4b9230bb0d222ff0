#!/usr/bin/env python3
"""HTTP Client for the SurfSight device API.

This module provides the thin transport layer every upstream call goes
through:

    - Bearer token header injection (token supplied per call by the caller)
    - One aiohttp session per request (no connection pooling)
    - Bounded per-call timeout
    - Typed exceptions for transport failures only

Design Philosophy:
    This client knows HOW to talk to SurfSight, but not WHAT to fetch.
    HTTP error statuses are ordinary return values; deciding what a 404 or
    a 400 means is left to DeviceManager and the batch layer.

Usage:
    client = SurfsightClient()
    response = await client.request(
        "GET", "/devices/357660101000000/billing-status", token=session.bearer_token
    )
    if response.status == 404:
        ...
"""
import asyncio
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from .exceptions import (
    ConfigurationError,
    ConnectionError,
    NetworkError,
    TimeoutError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api-prod.surfsight.net/v2"
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass
class UpstreamResponse:
    """Raw result of one upstream call.

    Attributes:
        status: HTTP status code
        body: Parsed JSON body, or None if the body was empty or not JSON
        text: Raw response text
    """
    status: int
    body: Optional[Any] = None
    text: str = ""

    @property
    def ok(self) -> bool:
        """True for any 2xx status."""
        return 200 <= self.status < 300

    @property
    def data(self) -> dict[str, Any]:
        """The ``data`` envelope of a JSON object body, or an empty dict."""
        if isinstance(self.body, dict) and isinstance(self.body.get("data"), dict):
            return self.body["data"]
        return {}


def _read_timeout_from_env() -> float:
    raw = os.getenv("SURFSIGHT_TIMEOUT_SECONDS", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(
            f"SURFSIGHT_TIMEOUT_SECONDS must be a number, got {raw!r}",
            invalid_keys=["SURFSIGHT_TIMEOUT_SECONDS"],
        )
    if value <= 0:
        raise ConfigurationError(
            "SURFSIGHT_TIMEOUT_SECONDS must be positive",
            invalid_keys=["SURFSIGHT_TIMEOUT_SECONDS"],
        )
    return value


class SurfsightClient:
    """Async HTTP client for the SurfSight API.

    Attributes:
        base_url: Base URL for API requests (e.g., "https://api-prod.surfsight.net/v2")
        timeout_seconds: Total timeout applied to each request
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """Initialize the SurfsightClient.

        Args:
            base_url: API base URL. Falls back to SURFSIGHT_BASE_URL, then the
                production URL.
            timeout_seconds: Per-request timeout. Falls back to
                SURFSIGHT_TIMEOUT_SECONDS, then 30 seconds.

        Raises:
            ConfigurationError: If SURFSIGHT_TIMEOUT_SECONDS is malformed.
        """
        self.base_url = (
            base_url or os.getenv("SURFSIGHT_BASE_URL") or DEFAULT_BASE_URL
        ).rstrip("/")
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else _read_timeout_from_env()
        )

    def _headers(self, token: Optional[str], has_body: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        token: Optional[str] = None,
        json_body: Optional[Any] = None,
    ) -> UpstreamResponse:
        """Make a single HTTP request.

        Non-2xx responses are returned, never raised.

        Args:
            method: HTTP method (GET, POST, PUT)
            endpoint: API endpoint path (e.g., "/devices/123/billing-status")
            token: Bearer token to attach, if any
            json_body: JSON request body

        Returns:
            UpstreamResponse with status, parsed body (or None) and raw text

        Raises:
            ConnectionError: If connection to server fails
            TimeoutError: If request times out
            NetworkError: For any other transport-level failure
        """
        url = f"{self.base_url}{endpoint}"
        headers = self._headers(token, json_body is not None)

        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as session:
                async with session.request(
                    method=method,
                    url=url,
                    headers=headers,
                    json=json_body,
                ) as response:
                    raw = await response.read()
                    status = response.status

        except aiohttp.ClientConnectionError as e:
            raise ConnectionError(
                f"Failed to connect to {self.base_url}",
                host=self.base_url,
                cause=e,
            )

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"Request to {endpoint} timed out",
                timeout_seconds=self.timeout_seconds,
                cause=e,
            )

        except aiohttp.ClientError as e:
            raise NetworkError(
                f"Network error during {method} {endpoint}: {e}",
                cause=e,
            )

        # Invalid UTF-8 becomes U+FFFD
        text = raw.decode("utf-8", errors="replace")
        body = None
        if text:
            try:
                body = json.loads(text)
            except ValueError:
                logger.debug(f"{method} {endpoint} returned non-JSON body (HTTP {status})")

        logger.debug(f"{method} {endpoint} -> HTTP {status}")
        return UpstreamResponse(status=status, body=body, text=text)

    async def get(self, endpoint: str, *, token: Optional[str] = None) -> UpstreamResponse:
        """Make a GET request."""
        return await self.request("GET", endpoint, token=token)

    async def post(
        self,
        endpoint: str,
        json_body: Optional[Any] = None,
        *,
        token: Optional[str] = None,
    ) -> UpstreamResponse:
        """Make a POST request."""
        return await self.request("POST", endpoint, token=token, json_body=json_body)

    async def put(
        self,
        endpoint: str,
        json_body: Optional[Any] = None,
        *,
        token: Optional[str] = None,
    ) -> UpstreamResponse:
        """Make a PUT request."""
        return await self.request("PUT", endpoint, token=token, json_body=json_body)
