"""SurfSight DeviceManager adapter.

This adapter wraps the DeviceManager class to implement the
IDeviceGateway interface, pulling the bearer token out of the
caller's Session for each call.
"""

import logging

from ...api.device_manager import BillingLookup, DeviceManager, WriteResult
from ...api.session import Session
from ..domain.ports import IDeviceGateway

logger = logging.getLogger(__name__)


class SurfsightDeviceGateway(IDeviceGateway):
    """Adapter wrapping DeviceManager."""

    def __init__(self, device_manager: DeviceManager):
        """Initialize with an existing DeviceManager.

        Args:
            device_manager: Configured DeviceManager instance
        """
        self.manager = device_manager

    async def lookup_billing_status(self, session: Session, imei: str) -> BillingLookup:
        return await self.manager.get_billing_status(session.bearer_token, imei)

    async def set_billing_status(
        self,
        session: Session,
        imeis: list[str],
        billing_status: str,
    ) -> WriteResult:
        logger.debug(f"Bulk billing call for {len(imeis)} device(s), token_id={session.token_id}")
        return await self.manager.set_billing_status(
            session.bearer_token, imeis, billing_status
        )

    async def set_quality_level(self, session: Session, imei: str, level: int) -> WriteResult:
        return await self.manager.set_data_profile(session.bearer_token, imei, level)
