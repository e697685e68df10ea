"""Port interfaces for device assignment.

These are abstract interfaces (ports) that define how the domain
interacts with external systems. Concrete implementations (adapters)
are provided in the adapters module.

This follows the Hexagonal Architecture pattern.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ...api.inventory import Site
from .entities import BulkAssignmentReport, ParsedCsv


class IInventoryPort(ABC):
    """Port for the remote inventory.

    Lookups return None on a miss; any other failure is raised.
    """

    @abstractmethod
    async def get_site_by_id(self, site_id: str) -> Optional[Site]:
        """Look up a site by canonical ID.

        Args:
            site_id: Canonical site ID

        Returns:
            Site if it exists, None otherwise
        """
        ...

    @abstractmethod
    async def get_site_by_name(
        self,
        org_id: str,
        name: str,
        case_insensitive: bool = False,
    ) -> Optional[Site]:
        """Look up a site of an organization by name.

        Args:
            org_id: Organization to search
            name: Exact site name (or site code)
            case_insensitive: Compare names ignoring case

        Returns:
            First matching Site, None if no site matches
        """
        ...

    @abstractmethod
    async def assign_devices(self, org_id: str, site_id: str, macs: list[str]) -> None:
        """Assign a batch of devices to a site in a single atomic call.

        Raises:
            WifiMgrError: If the batch was rejected or the call failed
        """
        ...


class ISiteResolver(ABC):
    """Port for turning a user-supplied site identifier into a canonical ID."""

    @abstractmethod
    async def resolve(self, raw: str) -> str:
        """Resolve an identifier.

        Raises:
            SiteNotFoundError: If no site matches
            SiteLookupError: If the inventory could not be queried
        """
        ...


class IInputParser(ABC):
    """Port for input file parsing."""

    @abstractmethod
    def parse_mac_list(self, content: str, source: str) -> list[str]:
        """Parse newline-delimited MACs."""
        ...

    @abstractmethod
    def parse_mac_site_csv(self, content: str, source: str) -> ParsedCsv:
        """Parse MAC,SiteName lines."""
        ...


class IReportRenderer(ABC):
    """Port for report rendering."""

    @abstractmethod
    def render(self, report: BulkAssignmentReport) -> list:
        """Render a report as a list of ReportLine."""
        ...
