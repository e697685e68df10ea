"""Shared fixtures for wifimgr tests."""
from unittest.mock import AsyncMock

import pytest

from wifimgr.api.inventory import Site
from wifimgr.assignment.domain.ports import IInventoryPort


@pytest.fixture
def mock_inventory():
    """Inventory port with no sites and successful assignments."""
    inventory = AsyncMock(spec=IInventoryPort)
    inventory.get_site_by_id.return_value = None
    inventory.get_site_by_name.return_value = None
    inventory.assign_devices.return_value = None
    return inventory


@pytest.fixture
def sites_by_name(mock_inventory):
    """Register sites on mock_inventory by exact name; returns the dict to fill."""
    sites: dict[str, Site] = {}

    async def by_name(org_id, name, case_insensitive=False):
        if case_insensitive:
            for site in sites.values():
                if site.name.casefold() == name.casefold():
                    return site
            return None
        return sites.get(name)

    mock_inventory.get_site_by_name.side_effect = by_name
    return sites
