"""Batch Operations use case.

Runs one user-initiated batch against the upstream device API:

- VALIDATE: one billing-status lookup per device
- BILLING: one bulk billing-status write for the whole list
- QUALITY: one data-profile write per device

The upstream interaction shape differs per operation on purpose. The bulk
billing endpoint answers once for the whole list, so it succeeds or fails
as a unit; the per-device operations record every device's outcome and
never let one failure stop the rest.

Devices are processed strictly in input order with one outstanding
upstream call at a time.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from ...api.exceptions import InvalidInputError, NetworkError, UpstreamRejectedError
from ...api.session import Session
from ..domain.entities import (
    MAX_IDENTIFIER_LENGTH,
    MAX_QUALITY_LEVEL,
    MIN_QUALITY_LEVEL,
    BatchResult,
    BillingStatus,
    OperationKind,
    OperationRequest,
    OutcomeRecord,
)
from ..domain.normalizer import billing_outcomes, quality_outcome, validation_outcome
from ..domain.ports import IDeviceGateway

logger = logging.getLogger(__name__)

QUALITY_RANGE_MESSAGE = "Quality level must be 1–5."


def clean_identifiers(identifiers: Any) -> list[str]:
    """Validate and strip an identifier list.

    Raises:
        InvalidInputError: If the list is empty or an entry is not a
            non-empty string of bounded length
    """
    if not isinstance(identifiers, (list, tuple)) or not identifiers:
        raise InvalidInputError("At least one IMEI is required", field="imeis")

    cleaned: list[str] = []
    for position, identifier in enumerate(identifiers):
        if not isinstance(identifier, str) or not identifier.strip():
            raise InvalidInputError(
                f"IMEI at position {position} must be a non-empty string",
                field="imeis",
            )
        value = identifier.strip()
        if len(value) > MAX_IDENTIFIER_LENGTH:
            raise InvalidInputError(
                f"IMEI at position {position} exceeds {MAX_IDENTIFIER_LENGTH} characters",
                field="imeis",
            )
        cleaned.append(value)
    return cleaned


def check_quality_level(level: Any) -> int:
    """Return the level if it is an accepted data-profile id.

    Raises:
        InvalidInputError: If level is not an int in [2, 6]
    """
    if (
        isinstance(level, bool)
        or not isinstance(level, int)
        or not MIN_QUALITY_LEVEL <= level <= MAX_QUALITY_LEVEL
    ):
        raise InvalidInputError(QUALITY_RANGE_MESSAGE, field="qualityLevel")
    return level


def check_billing_status(status: Any) -> BillingStatus:
    """Coerce a wire value to BillingStatus.

    Raises:
        InvalidInputError: If status is missing or not a writable status
    """
    if isinstance(status, BillingStatus):
        return status
    if not status:
        raise InvalidInputError("billingStatus is required.", field="billingStatus")
    try:
        return BillingStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in BillingStatus)
        raise InvalidInputError(
            f"billingStatus must be one of: {allowed}",
            field="billingStatus",
        )


class BatchOperationsUseCase:
    """Execute batch operations for one session.

    Batches issued within the same Session are serialized on the
    session's lock.
    """

    def __init__(self, gateway: IDeviceGateway):
        """Initialize the use case.

        Args:
            gateway: Port for upstream device calls
        """
        self.gateway = gateway

    async def execute(self, session: Session, request: OperationRequest) -> BatchResult:
        """Run an OperationRequest.

        Raises:
            InvalidInputError: Bad identifiers or parameter
            UpstreamRejectedError: Bulk billing call answered non-2xx
            NetworkError: Bulk billing call could not reach upstream
        """
        if request.kind == OperationKind.VALIDATE:
            return await self.validate(session, request.identifiers)
        if request.kind == OperationKind.BILLING:
            return await self.set_billing_status(
                session, request.identifiers, request.parameter
            )
        if request.kind == OperationKind.QUALITY:
            return await self.set_quality_level(
                session, request.identifiers, request.parameter
            )
        raise InvalidInputError(f"Unknown operation: {request.kind}", field="kind")

    # ----------------------------------------
    # Validate (per device, read-only)
    # ----------------------------------------

    async def validate(self, session: Session, identifiers: list[str]) -> BatchResult:
        """Look up the billing status of every device."""
        imeis = clean_identifiers(identifiers)
        async with session.lock:
            result = self._start(OperationKind.VALIDATE, imeis)
            for imei in imeis:
                result.records.append(await self._validate_one(session, imei))
            return self._finish(result)

    async def _validate_one(self, session: Session, imei: str) -> OutcomeRecord:
        try:
            lookup = await self.gateway.lookup_billing_status(session, imei)
        except Exception as e:
            logger.error(f"validate: lookup failed for {imei}: {e}")
            return validation_outcome(imei, e)

        record = validation_outcome(imei, lookup)
        if record.http_status == 0:
            logger.error(f"validate: unreadable response for {imei} (HTTP {lookup.status})")
        elif record.found is False and record.http_status != 404:
            logger.warning(f"validate: HTTP {lookup.status} for {imei}: {record.primary_detail}")
        return record

    # ----------------------------------------
    # Billing status (single bulk call)
    # ----------------------------------------

    async def set_billing_status(
        self,
        session: Session,
        identifiers: list[str],
        billing_status: Optional[Any],
    ) -> BatchResult:
        """Apply one billing status to every device with a single upstream call.

        Raises:
            UpstreamRejectedError: If upstream answers non-2xx; no records
                are produced
            NetworkError: If upstream cannot be reached; no records are
                produced
        """
        imeis = clean_identifiers(identifiers)
        status = check_billing_status(billing_status)

        async with session.lock:
            result = self._start(OperationKind.BILLING, imeis)
            try:
                write = await self.gateway.set_billing_status(session, imeis, status.value)
            except NetworkError as e:
                logger.error(
                    f"billing: bulk {status.value} for {len(imeis)} device(s) failed: {e}"
                )
                raise

            if not write.ok:
                message = write.message or f"SurfSight error ({write.status})"
                logger.error(
                    f"billing: upstream rejected {status.value} for {len(imeis)} device(s): "
                    f"HTTP {write.status} {message}"
                )
                raise UpstreamRejectedError(
                    message,
                    status_code=write.status,
                    endpoint=f"/devices/billing-status/{status.value}",
                    method="PUT",
                    details={"device_count": len(imeis)},
                )

            result.records.extend(billing_outcomes(imeis, status, write))
            return self._finish(result)

    # ----------------------------------------
    # Quality level (per device)
    # ----------------------------------------

    async def set_quality_level(
        self,
        session: Session,
        identifiers: list[str],
        level: Any,
    ) -> BatchResult:
        """Set the data-quality profile of every device.

        The level is checked before any upstream call is made.
        """
        imeis = clean_identifiers(identifiers)
        profile_id = check_quality_level(level)

        async with session.lock:
            result = self._start(OperationKind.QUALITY, imeis)
            for imei in imeis:
                result.records.append(await self._quality_one(session, imei, profile_id))
            return self._finish(result)

    async def _quality_one(self, session: Session, imei: str, level: int) -> OutcomeRecord:
        try:
            write = await self.gateway.set_quality_level(session, imei, level)
        except Exception as e:
            logger.error(f"quality: update failed for {imei}: {e}")
            return quality_outcome(imei, level, e)

        if not write.ok:
            logger.warning(f"quality: HTTP {write.status} for {imei}: {write.message}")
        return quality_outcome(imei, level, write)

    # ----------------------------------------
    # Helpers
    # ----------------------------------------

    def _start(self, kind: OperationKind, imeis: list[str]) -> BatchResult:
        logger.info(f"Starting {kind.value} batch for {len(imeis)} device(s)")
        return BatchResult(kind=kind, started_at=datetime.now())

    def _finish(self, result: BatchResult) -> BatchResult:
        result.completed_at = datetime.now()
        result.total_duration_seconds = (
            result.completed_at - result.started_at
        ).total_seconds()
        logger.info(
            f"{result.kind.value} complete in {result.total_duration_seconds:.1f}s: "
            f"{result.succeeded} succeeded, {result.not_found} not found, "
            f"{result.failed} failed"
        )
        return result
