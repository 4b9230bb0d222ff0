#!/usr/bin/env python3
"""Device Operations for the SurfSight API.

This module provides the DeviceManager class, which wraps the four upstream
endpoints this tool talks to and converts each raw response into one
normalized type at the boundary:

    Endpoint                                     Method  Result type
    /authenticate                                POST    AuthResult
    /devices/{imei}/billing-status               GET     BillingLookup
    /devices/billing-status/{billingStatus}      PUT     WriteResult  (bulk)
    /devices/{imei}/data-profile/{profileId}     PUT     WriteResult

The upstream API is inconsistent about where it puts things (``data.token``,
``data.billingStatus``, a flat ``message`` or ``error``, or nothing at all).
Those shapes are handled here so the batch layer never sees them.

Example:
    manager = DeviceManager(SurfsightClient())

    auth = await manager.authenticate("ops@example.com", "secret")
    lookup = await manager.get_billing_status(auth.token, "357660101000000")
    write = await manager.set_billing_status(
        auth.token, ["357660101000000"], "suspended"
    )
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

from .client import SurfsightClient, UpstreamResponse

logger = logging.getLogger(__name__)


# ============================================
# Data Types
# ============================================

@dataclass
class AuthResult:
    """Normalized response of the authenticate endpoint."""
    status: int
    token: Optional[str] = None
    organization_id: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class BillingLookup:
    """Normalized response of the per-device billing-status read.

    Attributes:
        status: HTTP status code
        billing_status_raw: ``data.billingStatus`` as sent upstream, None if absent
        parsed: False when a body was present but was not JSON
        message: Upstream ``message`` or ``error`` field, if any
    """
    status: int
    billing_status_raw: Optional[str] = None
    parsed: bool = True
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class WriteResult:
    """Normalized response of a billing or data-profile write."""
    status: int
    ok: bool
    message: Optional[str] = None


def extract_message(body: Any) -> Optional[str]:
    """Return the upstream ``message`` field, else ``error``, else None."""
    if not isinstance(body, dict):
        return None
    for key in ("message", "error"):
        value = body.get(key)
        if value:
            return str(value)
    return None


def _path_segment(value: Any) -> str:
    return quote(str(value), safe="")


# ============================================
# DeviceManager
# ============================================

class DeviceManager:
    """Typed access to the SurfSight device endpoints.

    Attributes:
        client: SurfsightClient instance for API communication
    """

    AUTH_ENDPOINT = "/authenticate"
    BILLING_STATUS_ENDPOINT = "/devices/{imei}/billing-status"
    BULK_BILLING_ENDPOINT = "/devices/billing-status/{billing_status}"
    DATA_PROFILE_ENDPOINT = "/devices/{imei}/data-profile/{profile_id}"

    def __init__(self, client: SurfsightClient):
        """Initialize DeviceManager.

        Args:
            client: Configured SurfsightClient instance
        """
        self.client = client

    async def authenticate(self, email: str, password: str) -> AuthResult:
        """Exchange account credentials for a bearer token.

        Returns:
            AuthResult; ``token`` is None when the response did not carry one.
        """
        response = await self.client.post(
            self.AUTH_ENDPOINT,
            json_body={"email": email, "password": password},
        )
        data = response.data
        token = data.get("token") if response.ok else None
        if not isinstance(token, str):
            token = None
        organization_id = data.get("organizationId")
        return AuthResult(
            status=response.status,
            token=token or None,
            organization_id=str(organization_id) if organization_id is not None else None,
            message=extract_message(response.body),
        )

    async def get_billing_status(self, token: str, imei: str) -> BillingLookup:
        """Read the billing status of one device."""
        endpoint = self.BILLING_STATUS_ENDPOINT.format(imei=_path_segment(imei))
        response = await self.client.get(endpoint, token=token)
        return self._to_billing_lookup(response)

    async def set_billing_status(
        self,
        token: str,
        imeis: list[str],
        billing_status: str,
    ) -> WriteResult:
        """Set one billing status on every listed device in a single call."""
        endpoint = self.BULK_BILLING_ENDPOINT.format(
            billing_status=_path_segment(billing_status)
        )
        logger.info(f"Setting billing status {billing_status} on {len(imeis)} device(s)")
        response = await self.client.put(
            endpoint,
            json_body={"imeis": list(imeis)},
            token=token,
        )
        return WriteResult(
            status=response.status,
            ok=response.ok,
            message=extract_message(response.body),
        )

    async def set_data_profile(self, token: str, imei: str, profile_id: int) -> WriteResult:
        """Assign a data-quality profile to one device."""
        endpoint = self.DATA_PROFILE_ENDPOINT.format(
            imei=_path_segment(imei),
            profile_id=_path_segment(profile_id),
        )
        response = await self.client.put(endpoint, json_body={}, token=token)
        return WriteResult(
            status=response.status,
            ok=response.ok,
            message=extract_message(response.body),
        )

    @staticmethod
    def _to_billing_lookup(response: UpstreamResponse) -> BillingLookup:
        parsed = response.body is not None or not response.text.strip()
        raw = response.data.get("billingStatus")
        return BillingLookup(
            status=response.status,
            billing_status_raw=str(raw) if raw else None,
            parsed=parsed,
            message=extract_message(response.body),
        )
