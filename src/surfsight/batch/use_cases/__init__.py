"""Use cases for batch device operations.

Each use case represents a single user action and orchestrates
domain logic without knowing about infrastructure details.
"""

from .run_batch import (
    QUALITY_RANGE_MESSAGE,
    BatchOperationsUseCase,
    check_billing_status,
    check_quality_level,
    clean_identifiers,
)

__all__ = [
    "BatchOperationsUseCase",
    "clean_identifiers",
    "check_quality_level",
    "check_billing_status",
    "QUALITY_RANGE_MESSAGE",
]
