"""Pydantic schemas for API request/response validation.

Field names follow the browser's JSON contract (camelCase) rather than
Python naming.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Auth Schemas
# =============================================================================


class LoginRequest(BaseModel):
    """SurfSight account credentials.

    Both fields are optional here so that a missing value produces the
    documented 400 message instead of a schema error.
    """

    email: Optional[str] = None
    password: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "ops@example.com",
                "password": "********",
            }
        }


class LoginResponse(BaseModel):
    """Successful login."""

    ok: bool = True
    organizationId: Optional[str] = None


class AuthStatusResponse(BaseModel):
    """The logged-in account."""

    ok: bool = True
    email: str
    organizationId: Optional[str] = None


class OkResponse(BaseModel):
    ok: bool = True


# =============================================================================
# Device Operation Schemas
# =============================================================================


class ValidateRequest(BaseModel):
    """IMEIs to look up."""

    imeis: Optional[list[Any]] = None

    class Config:
        json_schema_extra = {
            "example": {"imeis": ["357660101000198", "357660101000206"]}
        }


class BillingRequest(BaseModel):
    """IMEIs plus the billing status to apply to all of them."""

    imeis: Optional[list[Any]] = None
    billingStatus: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "imeis": ["357660101000198"],
                "billingStatus": "suspended",
            }
        }


class QualityRequest(BaseModel):
    """IMEIs plus the data-profile id to set on each.

    ``qualityLevel`` accepts any JSON value; range and type are checked
    by the use case so that the error message stays stable.
    """

    imeis: Optional[list[Any]] = None
    qualityLevel: Any = None

    class Config:
        json_schema_extra = {
            "example": {"imeis": ["357660101000198"], "qualityLevel": 4}
        }


class BatchSummaryDTO(BaseModel):
    """Counts for one batch."""

    operation: str
    total: int = 0
    succeeded: int = 0
    notFound: int = 0
    failed: int = 0
    durationSeconds: float = 0.0


class BatchResponse(BaseModel):
    """Ordered per-device results.

    Each entry carries ``imei``, ``outcome``, ``statusCode`` and ``detail``
    plus operation-specific fields (``found``, ``ok``, ``billingStatus``,
    ``billingStatusRaw``, ``qualityLevel``, ``message``).
    """

    results: list[dict[str, Any]] = Field(default_factory=list)
    summary: Optional[BatchSummaryDTO] = None


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
