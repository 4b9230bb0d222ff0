"""Domain layer for batch device operations.

Contains:
- Entities: Core business objects
- Normalizer: Upstream response -> OutcomeRecord mapping
- Ports: Interface definitions for infrastructure adapters
"""

from .entities import (
    MAX_IDENTIFIER_LENGTH,
    MAX_QUALITY_LEVEL,
    MIN_QUALITY_LEVEL,
    BatchResult,
    BillingStatus,
    OperationKind,
    OperationRequest,
    OutcomeRecord,
    OutcomeTag,
    parse_identifiers,
    quality_label,
)
from .normalizer import (
    billing_outcomes,
    normalize_billing_status,
    quality_outcome,
    validation_outcome,
)
from .ports import IDeviceGateway

__all__ = [
    # Entities
    "OperationKind",
    "BillingStatus",
    "OutcomeTag",
    "OperationRequest",
    "OutcomeRecord",
    "BatchResult",
    "parse_identifiers",
    "quality_label",
    "MAX_IDENTIFIER_LENGTH",
    "MIN_QUALITY_LEVEL",
    "MAX_QUALITY_LEVEL",
    # Normalizer
    "normalize_billing_status",
    "validation_outcome",
    "quality_outcome",
    "billing_outcomes",
    # Ports
    "IDeviceGateway",
]
