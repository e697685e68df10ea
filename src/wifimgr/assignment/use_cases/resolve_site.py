"""Resolve Site use case.

Turns a user-supplied site identifier into the canonical site ID the
inventory API requires. Identifiers are classified in a fixed order and
the first matching rule wins:

    1. Canonical ID      8-4-4-4-12 hex UUID (any case), or the synthetic
                         test forms ``site-<digits>`` and ``ap-<digits>``
                         -> looked up by ID
    2. Site code         XX-YYY-ZZZZZZZZZZ (ASCII word characters)
                         -> upper-cased once, looked up by name
    3. Anything else     -> looked up by name as entered

Each resolve() makes exactly one logical lookup against the inventory.
SiteResolver never caches; wrap it in CachingSiteResolver when repeated
identifiers should not be looked up twice.
"""

import logging
import re
from enum import Enum

from ...api.exceptions import SiteLookupError, SiteNotFoundError, WifiMgrError
from ..domain.ports import IInventoryPort, ISiteResolver

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
SYNTHETIC_ID_PATTERN = re.compile(r"^(site|ap)-\d+$", re.ASCII)
SITE_CODE_PATTERN = re.compile(r"^\w{2}-\w{3,4}-\w{1,10}$", re.ASCII)


class IdentifierKind(str, Enum):
    """How a raw site identifier is interpreted."""

    CANONICAL_ID = "canonical_id"
    SITE_CODE = "site_code"
    NAME = "name"


def classify(raw: str) -> IdentifierKind:
    """Classify a raw identifier. First matching rule wins."""
    if UUID_PATTERN.match(raw) or SYNTHETIC_ID_PATTERN.match(raw):
        return IdentifierKind.CANONICAL_ID
    if SITE_CODE_PATTERN.match(raw):
        return IdentifierKind.SITE_CODE
    return IdentifierKind.NAME


class SiteResolver(ISiteResolver):
    """Resolves site identifiers against the inventory.

    Usage:
        resolver = SiteResolver(inventory, org_id="...", case_insensitive=False)
        site_id = await resolver.resolve("us-sfo-hq1")
    """

    def __init__(
        self,
        inventory: IInventoryPort,
        org_id: str,
        case_insensitive: bool = False,
    ):
        """Initialize the resolver.

        Args:
            inventory: Inventory port used for lookups
            org_id: Organization whose sites are searched by name
            case_insensitive: Match free-text names ignoring case
        """
        self.inventory = inventory
        self.org_id = org_id
        self.case_insensitive = case_insensitive

    async def resolve(self, raw: str) -> str:
        """Resolve an identifier to a canonical site ID.

        Args:
            raw: Identifier exactly as the user supplied it

        Returns:
            Canonical site ID as reported by the inventory

        Raises:
            SiteNotFoundError: If no site matches
            SiteLookupError: If the inventory could not be queried
        """
        kind = classify(raw)
        logger.debug(f"Resolving site '{raw}' as {kind.value}")

        try:
            if kind == IdentifierKind.CANONICAL_ID:
                return await self._resolve_id(raw)
            if kind == IdentifierKind.SITE_CODE:
                return await self._resolve_name(raw.upper(), identifier_kind="code")
            return await self._resolve_name(
                raw,
                identifier_kind="name",
                case_insensitive=self.case_insensitive,
            )
        except SiteNotFoundError:
            raise
        except WifiMgrError as e:
            raise SiteLookupError(raw, cause=e)

    async def _resolve_id(self, raw: str) -> str:
        # Standard UUIDs are spelled lowercase by the inventory
        site_id = raw.lower() if UUID_PATTERN.match(raw) else raw
        site = await self.inventory.get_site_by_id(site_id)
        if site is None:
            raise SiteNotFoundError(raw, identifier_kind="id")
        return site.id

    async def _resolve_name(
        self,
        name: str,
        identifier_kind: str,
        case_insensitive: bool = False,
    ) -> str:
        site = await self.inventory.get_site_by_name(self.org_id, name, case_insensitive)
        if site is None:
            raise SiteNotFoundError(name, identifier_kind=identifier_kind)
        logger.debug(f"Resolved site '{name}' to {site.id}")
        return site.id


class CachingSiteResolver(ISiteResolver):
    """Memoises successful resolutions of another resolver.

    Keys are raw identifiers. Failures are not cached, so a retry after a
    lookup error goes back to the inventory.
    """

    def __init__(self, resolver: ISiteResolver):
        self.resolver = resolver
        self._cache: dict[str, str] = {}

    async def resolve(self, raw: str) -> str:
        if raw in self._cache:
            return self._cache[raw]
        site_id = await self.resolver.resolve(raw)
        self._cache[raw] = site_id
        return site_id

    def clear(self) -> None:
        self._cache.clear()
