#!/usr/bin/env python3
"""Session Management for the SurfSight API.

Each interactive client logs in once with its SurfSight account. The bearer
token returned by the authenticate endpoint is kept in a Session held by the
SessionStore, keyed by an opaque random session id. Only the id leaves the
server (in an HTTP-only cookie).

Features:
    - Fixed session lifetime (24h by default) checked on every access
    - Expired sessions are evicted lazily and via purge_expired()
    - Per-session asyncio.Lock so batches in one session run one at a time

Security Notes:
    - Tokens are held in memory only (never persisted to disk)
    - Log output uses token_id (SHA-256 prefix), never the token itself

Example:
    >>> store = SessionStore(DeviceManager(SurfsightClient()))
    >>> session_id, session = await store.login("ops@example.com", "secret")
    >>> session = store.require_session(session_id)
"""
import asyncio
import hashlib
import logging
import os
import secrets
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .device_manager import DeviceManager
from .exceptions import (
    ConfigurationError,
    InvalidCredentialsError,
    UnauthenticatedError,
    UpstreamMalformedError,
)

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_SECONDS = 24 * 60 * 60


@dataclass
class Session:
    """Credentials established by one login exchange.

    Attributes:
        account_email: Email of the SurfSight account that logged in.
        bearer_token: Token attached to every upstream device call.
        organization_id: Organization the account belongs to.
        created_at: Unix timestamp of the login.
        ttl_seconds: Lifetime from created_at.
    """
    account_email: str
    bearer_token: str
    organization_id: Optional[str] = None
    created_at: float = 0.0
    ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def __post_init__(self):
        if self.created_at == 0.0:
            self.created_at = time.time()

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl_seconds

    @property
    def token_id(self) -> str:
        """Safe identifier for logging (SHA-256 hash, first 8 chars)."""
        return hashlib.sha256(self.bearer_token.encode()).hexdigest()[:8]

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check whether the session has outlived its TTL."""
        current = time.time() if now is None else now
        return current >= self.expires_at

    def public_info(self) -> dict:
        """Account metadata that is safe to hand to the browser."""
        return {
            "email": self.account_email,
            "organizationId": self.organization_id,
        }


def _read_ttl_from_env() -> float:
    raw = os.getenv("SESSION_TTL_SECONDS", "").strip()
    if not raw:
        return DEFAULT_SESSION_TTL_SECONDS
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(
            f"SESSION_TTL_SECONDS must be a number, got {raw!r}",
            invalid_keys=["SESSION_TTL_SECONDS"],
        )
    if value <= 0:
        raise ConfigurationError(
            "SESSION_TTL_SECONDS must be positive",
            invalid_keys=["SESSION_TTL_SECONDS"],
        )
    return value


class SessionStore:
    """In-memory store of live sessions.

    One entry per interactive client. Entries are never shared between
    session ids and never written anywhere else.

    Attributes:
        device_manager: Used for the authenticate exchange.
        ttl_seconds: Lifetime of new sessions.
    """

    def __init__(
        self,
        device_manager: DeviceManager,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.device_manager = device_manager
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else _read_ttl_from_env()
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    @property
    def active_count(self) -> int:
        """Number of stored sessions that have not expired."""
        now = self._clock()
        return sum(1 for s in self._sessions.values() if not s.is_expired(now))

    async def login(self, email: str, password: str) -> tuple[str, Session]:
        """Authenticate upstream and store a new session.

        Args:
            email: SurfSight account email
            password: SurfSight account password

        Returns:
            (session_id, Session)

        Raises:
            InvalidCredentialsError: If upstream answers non-2xx
            UpstreamMalformedError: If the success response carries no token
            NetworkError: If upstream could not be reached
        """
        self.purge_expired()
        result = await self.device_manager.authenticate(email, password)

        if not result.ok:
            logger.warning(f"Login rejected for {email}: HTTP {result.status}")
            raise InvalidCredentialsError(
                status_code=result.status,
                details={"upstream_message": result.message} if result.message else None,
            )

        if not result.token:
            logger.error(f"Login for {email} returned HTTP {result.status} without a token")
            raise UpstreamMalformedError(
                "SurfSight returned no token",
                missing_field="data.token",
            )

        session = Session(
            account_email=email,
            bearer_token=result.token,
            organization_id=result.organization_id,
            created_at=self._clock(),
            ttl_seconds=self.ttl_seconds,
        )
        session_id = secrets.token_urlsafe(32)
        self._sessions[session_id] = session

        logger.info(
            f"Session created for {email} (org={session.organization_id}, "
            f"token_id={session.token_id}), expires in {self.ttl_seconds:.0f}s"
        )
        return session_id, session

    def require_session(self, session_id: Optional[str]) -> Session:
        """Return the live session for an id.

        Raises:
            UnauthenticatedError: If the id is missing, unknown or expired
        """
        if not session_id:
            raise UnauthenticatedError()

        session = self._sessions.get(session_id)
        if session is None:
            raise UnauthenticatedError()

        if session.is_expired(self._clock()):
            self._sessions.pop(session_id, None)
            logger.info(f"Session for {session.account_email} expired")
            raise UnauthenticatedError("SurfSight session expired")

        return session

    def logout(self, session_id: Optional[str]) -> bool:
        """Destroy a session. Returns True if one was removed."""
        if not session_id:
            return False
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info(f"Session for {session.account_email} logged out")
        return True

    def purge_expired(self) -> int:
        """Evict every expired session. Returns the number removed."""
        now = self._clock()
        expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired session(s)")
        return len(expired)
