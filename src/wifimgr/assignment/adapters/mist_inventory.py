"""Mist inventory adapter.

This adapter wraps the InventoryManager class to implement
the IInventoryPort interface.
"""

import logging
from typing import Optional

from ...api.exceptions import NotFoundError
from ...api.inventory import InventoryManager, Site
from ..domain.ports import IInventoryPort

logger = logging.getLogger(__name__)


class MistInventoryAdapter(IInventoryPort):
    """Adapter wrapping the existing InventoryManager.

    This adapter:
    - Turns 404 responses on site lookups into None
    - Applies the no-reassign setting to every assignment call
    - Lets every other error propagate unchanged
    """

    def __init__(self, manager: InventoryManager, no_reassign: bool = False):
        """Initialize with an existing InventoryManager.

        Args:
            manager: Configured InventoryManager instance
            no_reassign: Refuse to move devices already assigned to another site
        """
        self.manager = manager
        self.no_reassign = no_reassign

    async def get_site_by_id(self, site_id: str) -> Optional[Site]:
        try:
            return await self.manager.get_site(site_id)
        except NotFoundError:
            logger.debug(f"Site {site_id} not found")
            return None

    async def get_site_by_name(
        self,
        org_id: str,
        name: str,
        case_insensitive: bool = False,
    ) -> Optional[Site]:
        return await self.manager.get_site_by_name(org_id, name, case_insensitive)

    async def assign_devices(self, org_id: str, site_id: str, macs: list[str]) -> None:
        await self.manager.assign_devices(
            org_id,
            site_id,
            macs,
            no_reassign=self.no_reassign,
        )
