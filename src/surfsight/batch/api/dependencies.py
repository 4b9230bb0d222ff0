"""FastAPI dependency injection for the device operations API.

This module provides dependency injection functions that create
and return adapter instances for use in API endpoints.

Lifecycle Management:
- SurfSight client, DeviceManager and SessionStore: initialized at
  startup, shared across requests
- All are released at application shutdown (sessions are dropped)

Security:
- Every /api/devices endpoint requires a live session
- The session id travels in an HTTP-only cookie; the bearer token
  itself never leaves the server
"""

import logging
import os
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status

from ...api.client import SurfsightClient
from ...api.device_manager import DeviceManager
from ...api.exceptions import UnauthenticatedError
from ...api.session import Session, SessionStore
from ..adapters import SurfsightDeviceGateway
from ..domain.ports import IDeviceGateway
from ..use_cases import BatchOperationsUseCase

logger = logging.getLogger(__name__)

# ========== Session Cookie ==========

SESSION_COOKIE_NAME = "surfsight_sid"
SESSION_COOKIE_MAX_AGE = 24 * 60 * 60

NOT_AUTHENTICATED_MESSAGE = "Not authenticated with SurfSight."


def _cookie_secure() -> bool:
    return os.getenv("SESSION_COOKIE_SECURE", "").lower() == "true"


def set_session_cookie(response: Response, session_id: str) -> None:
    """Attach the session id cookie to a response."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        max_age=SESSION_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=_cookie_secure(),
    )


def clear_session_cookie(response: Response) -> None:
    """Expire the session id cookie."""
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=_cookie_secure(),
    )


# ========== Global State ==========

# Shared objects (initialized on startup)
_client: Optional[SurfsightClient] = None
_device_manager: Optional[DeviceManager] = None
_session_store: Optional[SessionStore] = None


async def init_surfsight():
    """Initialize the SurfSight client, DeviceManager and SessionStore.

    Should be called on application startup.

    Raises:
        ConfigurationError: If a numeric environment setting is malformed
    """
    global _client, _device_manager, _session_store

    _client = SurfsightClient()
    _device_manager = DeviceManager(_client)
    _session_store = SessionStore(_device_manager)

    logger.info(
        f"SurfSight client initialized (base_url={_client.base_url}, "
        f"timeout={_client.timeout_seconds}s, session_ttl={_session_store.ttl_seconds:.0f}s)"
    )


async def close_surfsight():
    """Drop every session and release the shared objects.

    Should be called on application shutdown.
    """
    global _client, _device_manager, _session_store

    if _session_store:
        dropped = _session_store.active_count
        if dropped:
            logger.info(f"Dropping {dropped} active session(s)")

    _client = None
    _device_manager = None
    _session_store = None

    logger.info("SurfSight client closed")


# ========== Dependency Functions ==========


def get_session_store() -> SessionStore:
    """Get the shared SessionStore."""
    if _session_store is None:
        raise RuntimeError(
            "SurfSight client not initialized. Call init_surfsight() first."
        )
    return _session_store


def get_gateway() -> IDeviceGateway:
    """Get a device gateway over the shared DeviceManager."""
    if _device_manager is None:
        raise RuntimeError(
            "SurfSight client not initialized. Call init_surfsight() first."
        )
    return SurfsightDeviceGateway(_device_manager)


def get_use_case(
    gateway: IDeviceGateway = Depends(get_gateway),
) -> BatchOperationsUseCase:
    """Get a batch use case bound to the gateway."""
    return BatchOperationsUseCase(gateway)


def get_session_id(request: Request) -> Optional[str]:
    """Read the session id cookie, if any."""
    return request.cookies.get(SESSION_COOKIE_NAME)


async def current_session(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> Session:
    """Resolve the caller's live session.

    Raises:
        HTTPException: 401 if there is no live session for the cookie
    """
    try:
        return store.require_session(session_id)
    except UnauthenticatedError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=NOT_AUTHENTICATED_MESSAGE,
        )
