"""API layer for batch device operations.

Contains:
- FastAPI routers for auth and device endpoints
- Pydantic schemas for request/response validation
- Dependency wiring and session cookie handling
"""

from .auth_router import router as auth_router
from .router import router
from .schemas import (
    AuthStatusResponse,
    BatchResponse,
    BillingRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    QualityRequest,
    ValidateRequest,
)

__all__ = [
    "router",
    "auth_router",
    "LoginRequest",
    "LoginResponse",
    "AuthStatusResponse",
    "ValidateRequest",
    "BillingRequest",
    "QualityRequest",
    "BatchResponse",
    "ErrorResponse",
]
