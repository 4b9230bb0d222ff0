"""Domain entities for batch device operations.

These are pure domain objects with no infrastructure dependencies.
They represent the core concepts of a batch: what was asked for
(OperationRequest) and what happened to each device (OutcomeRecord).
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

# IMEIs are 15 digits (16-17 for IMEISV); leave headroom but keep it bounded
MAX_IDENTIFIER_LENGTH = 32

# Upstream data-profile ids accepted for the quality operation
MIN_QUALITY_LEVEL = 2
MAX_QUALITY_LEVEL = 6

_IDENTIFIER_SPLIT = re.compile(r"[\s,]+")


class OperationKind(str, Enum):
    """The three batch operations."""

    VALIDATE = "validate"
    BILLING = "billing"
    QUALITY = "quality"


class BillingStatus(str, Enum):
    """Billing statuses this tool can write.

    Values are the upstream wire values. "activated" is the implicit state
    of a device whose status was never changed and is not written here.
    """

    PENDING_ACTIVATION = "pendingActivation"
    DEACTIVATED = "deactivated"
    SUSPENDED = "suspended"


class OutcomeTag(str, Enum):
    """What happened to one device in a batch."""

    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"


def quality_label(level: int) -> str:
    """User-facing label for a data-profile id (profile 2 is "Level 1")."""
    return f"Level {level - 1}"


def parse_identifiers(text: str) -> list[str]:
    """Split free text into identifiers on commas and whitespace.

    Order and duplicates are preserved.
    """
    return [part for part in _IDENTIFIER_SPLIT.split(text or "") if part]


@dataclass
class OperationRequest:
    """One user-initiated batch."""

    kind: OperationKind
    identifiers: list[str]
    parameter: Optional[Union[BillingStatus, int]] = None


@dataclass
class OutcomeRecord:
    """Canonical per-device result.

    ``found`` is only set for validation, ``ok`` only for writes.
    ``raw_payload`` carries pass-through fields (billingStatus,
    billingStatusRaw, qualityLevel, message) for the browser.
    """

    identifier: str
    tag: OutcomeTag
    http_status: int
    primary_detail: str
    found: Optional[bool] = None
    ok: Optional[bool] = None
    raw_payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire shape returned by the device endpoints."""
        data: dict[str, Any] = {
            "imei": self.identifier,
            "outcome": self.tag.value,
        }
        if self.found is not None:
            data["found"] = self.found
        if self.ok is not None:
            data["ok"] = self.ok
        data["statusCode"] = self.http_status
        data["detail"] = self.primary_detail
        data.update(self.raw_payload)
        return data


@dataclass
class BatchResult:
    """Ordered outcome records for one batch plus summary statistics."""

    kind: OperationKind
    records: list[OutcomeRecord] = field(default_factory=list)

    # Timing
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_duration_seconds: float = 0.0

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.records if r.tag == OutcomeTag.OK)

    @property
    def not_found(self) -> int:
        return sum(1 for r in self.records if r.tag == OutcomeTag.NOT_FOUND)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.records if r.tag == OutcomeTag.FAILED)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "results": [r.to_dict() for r in self.records],
            "summary": {
                "operation": self.kind.value,
                "total": len(self.records),
                "succeeded": self.succeeded,
                "notFound": self.not_found,
                "failed": self.failed,
                "durationSeconds": round(self.total_duration_seconds, 3),
            },
        }
