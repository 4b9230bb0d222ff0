"""SurfSight API modules.

This package provides the upstream client, endpoint wrappers and session
store used to talk to the SurfSight device-management API.

Classes:
    SurfsightClient: HTTP transport; returns every HTTP status as a value
    DeviceManager: Typed wrappers for the authenticate/billing/data-profile endpoints
    SessionStore: In-memory store of logged-in sessions (bearer tokens)
    Session: Credentials established by one login

Exceptions:
    SurfsightError: Base exception for all errors
    ConfigurationError: Missing or invalid configuration
    InvalidCredentialsError: Upstream rejected the login
    UpstreamMalformedError: Success response missing an expected field
    UnauthenticatedError: No live session
    InvalidInputError: Bad batch request shape
    UpstreamRejectedError: Bulk call answered non-2xx
    NetworkError: Transport failure talking to upstream
"""
from .client import DEFAULT_BASE_URL, SurfsightClient, UpstreamResponse
from .device_manager import (
    AuthResult,
    BillingLookup,
    DeviceManager,
    WriteResult,
    extract_message,
)
from .error_sanitizer import ErrorSanitizer, sanitize_error_message
from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    InvalidCredentialsError,
    InvalidInputError,
    NetworkError,
    SurfsightError,
    TimeoutError,
    UnauthenticatedError,
    UpstreamMalformedError,
    UpstreamRejectedError,
)
from .session import DEFAULT_SESSION_TTL_SECONDS, Session, SessionStore

__all__ = [
    # Client
    "SurfsightClient",
    "UpstreamResponse",
    "DEFAULT_BASE_URL",
    # Endpoints
    "DeviceManager",
    "AuthResult",
    "BillingLookup",
    "WriteResult",
    "extract_message",
    # Sessions
    "Session",
    "SessionStore",
    "DEFAULT_SESSION_TTL_SECONDS",
    # Exceptions
    "SurfsightError",
    "ConfigurationError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "UpstreamMalformedError",
    "UnauthenticatedError",
    "InvalidInputError",
    "APIError",
    "UpstreamRejectedError",
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    # Error utilities
    "ErrorSanitizer",
    "sanitize_error_message",
]
