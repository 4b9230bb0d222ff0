"""Result normalization.

Pure functions that turn one upstream response (or the transport error
raised instead of one) into OutcomeRecords. No I/O happens here.

Detail priority for every record: operation-specific status label, then
the upstream ``message``, then its ``error``, then "HTTP {code}".
"""

from typing import Optional, Union

from ...api.device_manager import BillingLookup, WriteResult
from .entities import BillingStatus, OutcomeRecord, OutcomeTag, quality_label

NOT_FOUND_DETAIL = "Device not found"
VALIDATION_ERROR_DETAIL = "Server error during validation"
QUALITY_ERROR_DETAIL = "Server error updating quality"

BILLING_STATUS_NOT_SET = "billingStatusNotSet"

_BILLING_LABELS = {
    "activated": "Activated",
    "pendingactivation": "Pending Activation",
    "suspended": "Suspended",
    "deactivated": "Deactivated",
    "billingstatusnotset": "Not Set",
}


def normalize_billing_status(raw: Optional[str]) -> str:
    """Map a raw upstream billing status to a display label.

    Matching is case-insensitive. Unknown values pass through unchanged;
    an absent value is "Not Set".
    """
    key = (raw or "").strip()
    if not key:
        return _BILLING_LABELS["billingstatusnotset"]
    return _BILLING_LABELS.get(key.lower(), raw)


def primary_detail(*candidates: Optional[str]) -> str:
    """First non-empty candidate, or an empty string."""
    for candidate in candidates:
        if candidate:
            return candidate
    return ""


def message_or_status(message: Optional[str], status: int) -> str:
    """Upstream message if present, else a synthesized "HTTP {code}"."""
    return primary_detail(message, f"HTTP {status}")


def validation_outcome(
    identifier: str,
    lookup: Union[BillingLookup, Exception],
) -> OutcomeRecord:
    """Outcome of one billing-status lookup."""
    if isinstance(lookup, Exception):
        return _validation_error(identifier, str(lookup))

    if lookup.status == 404:
        return OutcomeRecord(
            identifier=identifier,
            tag=OutcomeTag.NOT_FOUND,
            found=False,
            http_status=404,
            primary_detail=NOT_FOUND_DETAIL,
            raw_payload={"message": NOT_FOUND_DETAIL},
        )

    if lookup.ok:
        if not lookup.parsed:
            return _validation_error(identifier, "unparseable response body")
        raw = lookup.billing_status_raw or BILLING_STATUS_NOT_SET
        label = normalize_billing_status(raw)
        return OutcomeRecord(
            identifier=identifier,
            tag=OutcomeTag.OK,
            found=True,
            http_status=lookup.status,
            primary_detail=label,
            raw_payload={"billingStatus": label, "billingStatusRaw": raw},
        )

    detail = message_or_status(lookup.message, lookup.status)
    return OutcomeRecord(
        identifier=identifier,
        tag=OutcomeTag.FAILED,
        found=False,
        http_status=lookup.status,
        primary_detail=detail,
        raw_payload={"message": lookup.message},
    )


def _validation_error(identifier: str, error: str) -> OutcomeRecord:
    return OutcomeRecord(
        identifier=identifier,
        tag=OutcomeTag.FAILED,
        found=False,
        http_status=0,
        primary_detail=VALIDATION_ERROR_DETAIL,
        raw_payload={"message": VALIDATION_ERROR_DETAIL, "error": error},
    )


def quality_outcome(
    identifier: str,
    level: int,
    write: Union[WriteResult, Exception],
) -> OutcomeRecord:
    """Outcome of one data-profile write."""
    if isinstance(write, Exception):
        return OutcomeRecord(
            identifier=identifier,
            tag=OutcomeTag.FAILED,
            ok=False,
            http_status=500,
            primary_detail=QUALITY_ERROR_DETAIL,
            raw_payload={"qualityLevel": level, "message": QUALITY_ERROR_DETAIL},
        )

    if write.ok:
        detail = primary_detail(quality_label(level), write.message)
    else:
        detail = message_or_status(write.message, write.status)

    return OutcomeRecord(
        identifier=identifier,
        tag=OutcomeTag.OK if write.ok else OutcomeTag.FAILED,
        ok=write.ok,
        http_status=write.status,
        primary_detail=detail,
        raw_payload={"qualityLevel": level, "message": write.message},
    )


def billing_outcomes(
    identifiers: list[str],
    billing_status: BillingStatus,
    write: WriteResult,
) -> list[OutcomeRecord]:
    """One ok record per identifier for an accepted bulk billing write.

    The bulk endpoint answers once for the whole list, so every record
    carries the same status code.
    """
    return [
        OutcomeRecord(
            identifier=identifier,
            tag=OutcomeTag.OK,
            ok=True,
            http_status=write.status,
            primary_detail=billing_status.value,
            raw_payload={"billingStatus": billing_status.value, "message": None},
        )
        for identifier in identifiers
    ]
