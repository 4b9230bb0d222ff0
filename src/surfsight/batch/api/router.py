"""FastAPI router for batch device operation endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ...api.error_sanitizer import sanitize_error_message
from ...api.exceptions import InvalidInputError, NetworkError, UpstreamRejectedError
from ...api.session import Session
from ..use_cases import BatchOperationsUseCase
from .dependencies import current_session, get_use_case
from .schemas import (
    BatchResponse,
    BillingRequest,
    ErrorResponse,
    QualityRequest,
    ValidateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/devices",
    tags=["Device Operations"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/validate", response_model=BatchResponse)
async def validate_devices(
    body: ValidateRequest,
    session: Session = Depends(current_session),
    use_case: BatchOperationsUseCase = Depends(get_use_case),
):
    """Look up the billing status of each IMEI.

    Unknown devices come back with ``found: false`` and status 404; one
    device failing never fails the request.
    """
    if not body.imeis:
        raise HTTPException(status_code=400, detail="imei list is required.")

    try:
        result = await use_case.validate(session, body.imeis)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return result.to_dict()


@router.post("/billing", response_model=BatchResponse)
async def set_billing_status(
    body: BillingRequest,
    session: Session = Depends(current_session),
    use_case: BatchOperationsUseCase = Depends(get_use_case),
):
    """Apply one billing status to every IMEI with a single upstream call.

    The request succeeds or fails as a whole: an upstream rejection is
    returned with the upstream status code and message.
    """
    if not body.imeis:
        raise HTTPException(status_code=400, detail="imeis array required.")
    if not body.billingStatus:
        raise HTTPException(status_code=400, detail="billingStatus is required.")

    try:
        result = await use_case.set_billing_status(session, body.imeis, body.billingStatus)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except UpstreamRejectedError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=sanitize_error_message(e.message),
        )
    except NetworkError:
        raise HTTPException(status_code=500, detail="Server error contacting SurfSight.")

    return result.to_dict()


@router.post("/quality", response_model=BatchResponse)
async def set_quality_level(
    body: QualityRequest,
    session: Session = Depends(current_session),
    use_case: BatchOperationsUseCase = Depends(get_use_case),
):
    """Set the data-quality profile of each IMEI.

    ``qualityLevel`` is the upstream profile id (2-6, shown to users as
    Level 1-5). Each device is updated independently.
    """
    if not body.imeis:
        raise HTTPException(status_code=400, detail="IMEIs array is required.")

    try:
        result = await use_case.set_quality_level(session, body.imeis, body.qualityLevel)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return result.to_dict()
