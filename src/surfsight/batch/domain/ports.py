"""Port interfaces for batch device operations.

These are abstract interfaces (ports) that define how the domain
interacts with the upstream device API. The concrete implementation
(adapter) lives in the adapters module.

This follows the Hexagonal Architecture pattern.
"""

from abc import ABC, abstractmethod

from ...api.device_manager import BillingLookup, WriteResult
from ...api.session import Session


class IDeviceGateway(ABC):
    """Port for the upstream device calls a batch needs.

    Every method takes the caller's Session so credentials are never held
    by the gateway itself. Implementations return HTTP error statuses as
    values and raise only for transport failures.
    """

    @abstractmethod
    async def lookup_billing_status(self, session: Session, imei: str) -> BillingLookup:
        """Read one device's billing status.

        Args:
            session: Live session supplying the bearer token
            imei: Device identifier

        Returns:
            BillingLookup with the upstream status and raw billing status
        """
        ...

    @abstractmethod
    async def set_billing_status(
        self,
        session: Session,
        imeis: list[str],
        billing_status: str,
    ) -> WriteResult:
        """Set one billing status on all listed devices in a single call.

        Args:
            session: Live session supplying the bearer token
            imeis: Device identifiers, in order
            billing_status: Upstream billing status value

        Returns:
            WriteResult for the single bulk call
        """
        ...

    @abstractmethod
    async def set_quality_level(
        self,
        session: Session,
        imei: str,
        level: int,
    ) -> WriteResult:
        """Set one device's data-quality profile.

        Args:
            session: Live session supplying the bearer token
            imei: Device identifier
            level: Upstream data-profile id

        Returns:
            WriteResult for the call
        """
        ...
