"""Unit tests for InventoryManager and MAC normalization.

InventoryManager composes MistClient, so these tests mock MistClient
rather than aiohttp.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from wifimgr.api import macaddr
from wifimgr.api.client import SITES_PAGINATION, MistClient
from wifimgr.api.exceptions import APIError, NotFoundError, ValidationError
from wifimgr.api.inventory import InventoryManager, Site, names_match


@pytest.fixture
def mock_client():
    return MagicMock(spec=MistClient)


@pytest.fixture
def manager(mock_client):
    return InventoryManager(mock_client)


class TestMacAddr:
    """Test MAC validation and wire format."""

    @pytest.mark.parametrize(
        "mac",
        ["00:11:22:33:44:55", "00-11-22-33-44-55", "0011.2233.4455", "001122334455"],
    )
    def test_accepted_styles(self, mac):
        assert macaddr.normalize(mac) == "001122334455"

    def test_lowercases(self):
        assert macaddr.normalize("AA:BB:CC:DD:EE:FF") == "aabbccddeeff"

    @pytest.mark.parametrize("mac", ["", "00:11:22:33:44", "zz:11:22:33:44:55", "00:11-22:33:44:55"])
    def test_rejects_invalid(self, mac):
        assert not macaddr.is_valid(mac)
        with pytest.raises(ValueError):
            macaddr.normalize(mac)


class TestSiteLookups:
    """Test site retrieval."""

    def test_site_from_api(self):
        site = Site.from_api({"id": "abc", "name": "HQ", "org_id": "o1", "extra": 1})
        assert site == Site(id="abc", name="HQ", org_id="o1")

    def test_site_from_api_without_name(self):
        assert Site.from_api({"id": "abc"}).name == ""

    @pytest.mark.parametrize("record", [{"name": "HQ"}, {"id": "", "name": "HQ"}, ["abc"]])
    def test_site_from_api_rejects_malformed_record(self, record):
        with pytest.raises(APIError) as exc:
            Site.from_api(record)

        assert "malformed site record" in exc.value.message

    @pytest.mark.asyncio
    async def test_get_site(self, manager, mock_client):
        mock_client.get = AsyncMock(return_value={"id": "s1", "name": "HQ"})

        site = await manager.get_site("s1")

        mock_client.get.assert_awaited_once_with("/api/v1/sites/s1")
        assert site.id == "s1"

    @pytest.mark.asyncio
    async def test_get_site_not_found_propagates(self, manager, mock_client):
        mock_client.get = AsyncMock(side_effect=NotFoundError("Resource", "/api/v1/sites/s1"))

        with pytest.raises(NotFoundError):
            await manager.get_site("s1")

    @pytest.mark.asyncio
    async def test_list_sites_uses_site_pagination(self, manager, mock_client):
        mock_client.fetch_all = AsyncMock(return_value=[{"id": "1", "name": "A"}])

        sites = await manager.list_sites("org-1")

        mock_client.fetch_all.assert_awaited_once_with(
            "/api/v1/orgs/org-1/sites",
            config=SITES_PAGINATION,
        )
        assert sites == [Site(id="1", name="A")]

    @pytest.mark.asyncio
    async def test_get_site_by_name_exact(self, manager, mock_client):
        mock_client.fetch_all = AsyncMock(return_value=[
            {"id": "1", "name": "main office"},
            {"id": "2", "name": "Main Office"},
        ])

        site = await manager.get_site_by_name("org-1", "Main Office")

        assert site.id == "2"

    @pytest.mark.asyncio
    async def test_get_site_by_name_case_insensitive(self, manager, mock_client):
        mock_client.fetch_all = AsyncMock(return_value=[{"id": "1", "name": "Main Office"}])

        assert await manager.get_site_by_name("org-1", "MAIN OFFICE") is None
        site = await manager.get_site_by_name("org-1", "MAIN OFFICE", case_insensitive=True)
        assert site.id == "1"

    def test_names_match(self):
        assert names_match("HQ", "HQ", False)
        assert not names_match("HQ", "hq", False)
        assert names_match("HQ", "hq", True)

    def test_empty_name_never_matches(self):
        assert not names_match("", "", False)
        assert not names_match("", "", True)
        assert not names_match("HQ", "", True)

    @pytest.mark.asyncio
    async def test_blank_name_does_not_select_unnamed_site(self, manager, mock_client):
        mock_client.fetch_all = AsyncMock(return_value=[{"id": "s1"}, {"id": "s2", "name": "HQ"}])

        assert await manager.get_site_by_name("o1", "") is None


class TestAssignDevices:
    """Test the bulk assign call."""

    @pytest.mark.asyncio
    async def test_posts_normalized_macs(self, manager, mock_client):
        mock_client.post = AsyncMock(return_value=None)

        await manager.assign_devices(
            "org-1",
            "site-1",
            ["00:11:22:33:44:55", "AA-BB-CC-DD-EE-FF"],
            no_reassign=True,
        )

        mock_client.post.assert_awaited_once_with(
            "/api/v1/orgs/org-1/inventory/assign",
            json_body={
                "site_id": "site-1",
                "macs": ["001122334455", "aabbccddeeff"],
                "no_reassign": True,
            },
        )

    @pytest.mark.asyncio
    async def test_invalid_mac_rejects_whole_batch(self, manager, mock_client):
        mock_client.post = AsyncMock()

        with pytest.raises(ValidationError) as exc:
            await manager.assign_devices("org-1", "site-1", ["00:11:22:33:44:55", "not-a-mac"])

        assert "not-a-mac" in exc.value.message
        mock_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, manager, mock_client):
        mock_client.post = AsyncMock()

        with pytest.raises(ValidationError):
            await manager.assign_devices("org-1", "site-1", [])

        mock_client.post.assert_not_called()
