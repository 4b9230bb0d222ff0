"""FastAPI router for SurfSight login/session endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from ...api.exceptions import (
    InvalidCredentialsError,
    NetworkError,
    UpstreamMalformedError,
)
from ...api.session import Session, SessionStore
from .dependencies import (
    clear_session_cookie,
    current_session,
    get_session_id,
    get_session_store,
    set_session_cookie,
)
from .schemas import AuthStatusResponse, ErrorResponse, LoginRequest, LoginResponse, OkResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    previous_session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    """Log in with a SurfSight account.

    On success the session id is set as an HTTP-only cookie. Logging in
    again from the same browser replaces the previous session.
    """
    if not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Email and password required.")

    try:
        session_id, session = await store.login(body.email, body.password)
    except InvalidCredentialsError:
        raise HTTPException(status_code=401, detail="Invalid SurfSight credentials.")
    except UpstreamMalformedError:
        raise HTTPException(status_code=500, detail="SurfSight returned no token.")
    except NetworkError as e:
        logger.error(f"Login for {body.email} failed: {e}")
        raise HTTPException(status_code=500, detail="Error contacting SurfSight API.")

    if previous_session_id:
        store.logout(previous_session_id)

    set_session_cookie(response, session_id)
    return LoginResponse(ok=True, organizationId=session.organization_id)


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(session: Session = Depends(current_session)):
    """Return the logged-in account, or 401."""
    return AuthStatusResponse(ok=True, **session.public_info())


@router.post("/logout", response_model=OkResponse)
async def logout(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    """Destroy the caller's session and clear the cookie."""
    store.logout(session_id)
    clear_session_cookie(response)
    return OkResponse(ok=True)
