#!/usr/bin/env python3
"""Site and Inventory Operations for the Mist API.

This module provides the InventoryManager class, which knows the resource
endpoints the assignment workflow needs:

    - Look up a site by ID
    - List the sites of an organization / find one by name
    - Assign a batch of devices (by MAC) to a site

API Details:
    - GET  /api/v1/sites/{site_id}
    - GET  /api/v1/orgs/{org_id}/sites           (paginated, bare JSON list)
    - POST /api/v1/orgs/{org_id}/inventory/assign
      body: {"site_id": ..., "macs": [...], "no_reassign": bool}

    The assign call is atomic: it succeeds or fails as a whole and never
    reports per-MAC status.

Example:
    async with MistClient(settings) as client:
        manager = InventoryManager(client)

        site = await manager.get_site("4ac1dcf4-9d8b-7211-65c4-057819f0862b")
        site = await manager.get_site_by_name(org_id, "US-SFO-HQ1")

        await manager.assign_devices(org_id, site.id, ["00:11:22:33:44:55"])
"""
import logging
from dataclasses import dataclass
from typing import Optional

from . import macaddr
from .client import SITES_PAGINATION, MistClient
from .exceptions import APIError, ValidationError

logger = logging.getLogger(__name__)


# ============================================
# Data Types
# ============================================

@dataclass(frozen=True)
class Site:
    """A site as returned by the inventory.

    Attributes:
        id: Canonical site ID
        name: Display name (also holds site codes)
        org_id: Owning organization, if reported
    """
    id: str
    name: str
    org_id: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "Site":
        """Build a Site from an API record.

        Raises:
            APIError: If the record is not an object or has no ID
        """
        if not isinstance(data, dict) or not data.get("id"):
            raise APIError(
                f"malformed site record: {data!r}"[:200],
                status_code=200,
            )
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            org_id=data.get("org_id"),
        )


def names_match(candidate: str, wanted: str, case_insensitive: bool) -> bool:
    """Compare site names, honouring the case-insensitive setting.

    An empty name never matches, so a blank site field cannot select an
    unnamed site.
    """
    if not wanted or not candidate:
        return False
    if case_insensitive:
        return candidate.casefold() == wanted.casefold()
    return candidate == wanted


# ============================================
# InventoryManager
# ============================================

class InventoryManager:
    """Site lookups and device assignment on top of MistClient.

    Attributes:
        client: MistClient instance for API communication
    """

    SITE_ENDPOINT = "/api/v1/sites/{site_id}"
    ORG_SITES_ENDPOINT = "/api/v1/orgs/{org_id}/sites"
    ASSIGN_ENDPOINT = "/api/v1/orgs/{org_id}/inventory/assign"

    def __init__(self, client: MistClient):
        """Initialize InventoryManager.

        Args:
            client: Configured MistClient instance
        """
        self.client = client

    # ----------------------------------------
    # Sites
    # ----------------------------------------

    async def get_site(self, site_id: str) -> Site:
        """Fetch a single site by canonical ID.

        Raises:
            NotFoundError: If no site has this ID
        """
        data = await self.client.get(self.SITE_ENDPOINT.format(site_id=site_id))
        return Site.from_api(data)

    async def list_sites(self, org_id: str) -> list[Site]:
        """Fetch every site in an organization."""
        items = await self.client.fetch_all(
            self.ORG_SITES_ENDPOINT.format(org_id=org_id),
            config=SITES_PAGINATION,
        )
        return [Site.from_api(item) for item in items]

    async def get_site_by_name(
        self,
        org_id: str,
        name: str,
        case_insensitive: bool = False,
    ) -> Optional[Site]:
        """Find a site by exact (or case-insensitive) name.

        Returns:
            The first matching Site, or None
        """
        for site in await self.list_sites(org_id):
            if names_match(site.name, name, case_insensitive):
                return site
        return None

    # ----------------------------------------
    # Assignment
    # ----------------------------------------

    def _normalize_macs(self, macs: list[str]) -> list[str]:
        """Convert MACs to wire format.

        Raises:
            ValidationError: On the first invalid MAC (the batch is not sent)
        """
        if not macs:
            raise ValidationError(
                "At least one MAC address is required",
                field="macs",
                status_code=0,
            )

        normalized = []
        for mac in macs:
            try:
                normalized.append(macaddr.normalize(mac))
            except ValueError:
                raise ValidationError(
                    f"invalid MAC address {mac}",
                    field="macs",
                    status_code=0,
                )
        return normalized

    async def assign_devices(
        self,
        org_id: str,
        site_id: str,
        macs: list[str],
        no_reassign: bool = False,
    ) -> None:
        """Assign a batch of devices to a site in a single call.

        Args:
            org_id: Organization owning the inventory
            site_id: Canonical ID of the target site
            macs: Device MAC addresses, in any accepted style
            no_reassign: Refuse to move devices already assigned elsewhere

        Raises:
            ValidationError: If a MAC is invalid (nothing is sent)
            APIError / NetworkError: If the call fails
        """
        normalized = self._normalize_macs(macs)

        logger.debug(f"Assigning {len(normalized)} devices to site {site_id} in org {org_id}")

        await self.client.post(
            self.ASSIGN_ENDPOINT.format(org_id=org_id),
            json_body={
                "site_id": site_id,
                "macs": normalized,
                "no_reassign": no_reassign,
            },
        )

        logger.debug("Bulk device assignment successful")
