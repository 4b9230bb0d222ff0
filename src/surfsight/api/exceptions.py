#!/usr/bin/env python3
"""Exception Hierarchy for the SurfSight device API proxy.

This module provides a structured exception hierarchy for handling errors
across the upstream client, the session store, and the batch orchestrator.

Design Principles:
    - All exceptions inherit from SurfsightError base class
    - Exceptions preserve context (original error, timestamps, details)
    - Batch-level errors are raised; per-device errors become outcome records

Exception Hierarchy:
    SurfsightError (base)
    ├── ConfigurationError (unrecoverable - fix config)
    ├── AuthenticationError
    │   ├── InvalidCredentialsError
    │   ├── UpstreamMalformedError
    │   └── UnauthenticatedError
    ├── InvalidInputError
    ├── APIError
    │   └── UpstreamRejectedError
    └── NetworkError (transport failure)
        ├── ConnectionError
        └── TimeoutError
"""
from datetime import datetime, timezone
from typing import Any, Optional

# ============================================
# Base Exception
# ============================================

class SurfsightError(Exception):
    """Base exception for all SurfSight proxy errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "UNAUTHENTICATED")
        details: Additional context as a dictionary
        timestamp: When the error occurred
        cause: The original exception that caused this error
        recoverable: Whether the caller could succeed by trying again
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.cause = cause
        self.recoverable = recoverable

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.details:
            context = ", ".join(f"{key}={value}" for key, value in self.details.items())
            text = f"{text} ({context})"
        return text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"

    def to_dict(self) -> dict[str, Any]:
        """Structured form for log records and the CLI's --json output."""
        data: dict[str, Any] = {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
            "at": self.timestamp.isoformat(),
        }
        if self.details:
            data["details"] = dict(self.details)
        if self.cause is not None:
            data["cause"] = repr(self.cause)
        return data


# ============================================
# Configuration Errors (Unrecoverable)
# ============================================

class ConfigurationError(SurfsightError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        invalid_keys: Optional[list[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if invalid_keys:
            details["invalid_keys"] = invalid_keys
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )


# ============================================
# Authentication Errors
# ============================================

class AuthenticationError(SurfsightError):
    """Base class for authentication and session errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class InvalidCredentialsError(AuthenticationError):
    """Raised when the upstream authenticate call rejects the credentials."""

    def __init__(
        self,
        message: str = "Invalid SurfSight credentials",
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if status_code:
            details["status_code"] = status_code
        super().__init__(
            message,
            code="INVALID_CREDENTIALS",
            details=details,
            **kwargs,
        )
        self.status_code = status_code


class UpstreamMalformedError(AuthenticationError):
    """Raised when a success response lacks a field we depend on."""

    def __init__(
        self,
        message: str,
        missing_field: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if missing_field:
            details["missing_field"] = missing_field
        super().__init__(
            message,
            code="UPSTREAM_MALFORMED",
            details=details,
            **kwargs,
        )
        self.missing_field = missing_field


class UnauthenticatedError(AuthenticationError):
    """Raised when no live session exists (never logged in, logged out, or expired)."""

    def __init__(self, message: str = "Not authenticated with SurfSight", **kwargs):
        super().__init__(message, code="UNAUTHENTICATED", **kwargs)


# ============================================
# Input Errors
# ============================================

class InvalidInputError(SurfsightError):
    """Raised when a batch request has the wrong shape.

    Examples are an empty identifier list or an out-of-range quality level.
    Raised before any upstream call is made.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if field:
            details["field"] = field
        super().__init__(
            message,
            code="INVALID_INPUT",
            details=details,
            recoverable=False,
            **kwargs,
        )
        self.field = field


# ============================================
# API Errors
# ============================================

class APIError(SurfsightError):
    """Base class for upstream API response errors.

    Attributes:
        status_code: HTTP status code returned upstream
        endpoint: API endpoint that was called
        response_body: Raw response body (may be truncated)
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        endpoint: Optional[str] = None,
        response_body: Optional[str] = None,
        method: str = "GET",
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        if method:
            details["method"] = method
        if response_body:
            details["response_body"] = response_body[:500]

        kwargs.setdefault("recoverable", status_code in (429, 500, 502, 503, 504))
        kwargs.setdefault("code", f"API_ERROR_{status_code}")

        super().__init__(
            message,
            details=details,
            **kwargs,
        )
        self.status_code = status_code
        self.endpoint = endpoint
        self.response_body = response_body
        self.method = method


class UpstreamRejectedError(APIError):
    """Raised when a bulk call comes back non-2xx.

    The whole batch fails as a unit; no per-device records are produced.
    """

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="UPSTREAM_REJECTED", **kwargs)


# ============================================
# Network Errors (transport failures)
# ============================================

class NetworkError(SurfsightError):
    """Base class for transport-level failures talking to the upstream API."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)


class ConnectionError(NetworkError):
    """Raised when the connection to the upstream API fails."""

    def __init__(
        self,
        message: str = "Failed to connect to server",
        host: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if host:
            details["host"] = host
        super().__init__(
            message,
            code="CONNECTION_ERROR",
            details=details,
            **kwargs,
        )


class TimeoutError(NetworkError):
    """Raised when an upstream request times out."""

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(
            message,
            code="TIMEOUT_ERROR",
            details=details,
            **kwargs,
        )
