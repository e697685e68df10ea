#!/usr/bin/env python3
"""Generic HTTP Client for the Mist inventory API.

This module provides a reusable, composable HTTP client that handles the
common concerns of inventory API communication:

    - Token authentication header injection
    - Page-based pagination with configurable page sizes
    - Connection pooling via shared aiohttp session
    - Error handling with typed exceptions

Design Philosophy:
    This client knows HOW to talk to the API, but not WHAT to fetch.
    It has no knowledge of sites or devices. That knowledge belongs in
    InventoryManager, which composes this client.

    Requests are made exactly once. Retrying is left to the caller.

Usage:
    async with MistClient(settings) as client:
        site = await client.get("/api/v1/sites/abc")

        async for page in client.paginate("/api/v1/orgs/xyz/sites"):
            for item in page:
                process(item)
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional

import aiohttp

from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    NetworkError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

@dataclass
class PaginationConfig:
    """Configuration for paginated API requests.

    Attributes:
        page_size: Number of items per request
    """
    page_size: int = 100


SITES_PAGINATION = PaginationConfig(page_size=1000)


# ============================================
# The Client
# ============================================

class MistClient:
    """Async HTTP client for the Mist inventory API.

    This client is designed to be used as an async context manager to ensure
    proper session lifecycle management:

        async with MistClient(settings) as client:
            data = await client.get("/api/v1/sites/abc")

    Attributes:
        base_url: Base URL for API requests (e.g., "https://api.mist.com")
        timeout: Total timeout for a single request, in seconds
    """

    def __init__(self, settings: "Settings"):
        """Initialize the MistClient.

        Args:
            settings: Validated settings carrying token, base URL and timeout

        Raises:
            ConfigurationError: If no API token is configured
        """
        if not settings.api_token:
            raise ConfigurationError(
                "API token is required. Set MIST_API_TOKEN.",
                missing_keys=["MIST_API_TOKEN"],
            )

        self._token = settings.api_token
        self.base_url = settings.base_url
        self.timeout = settings.request_timeout

        # Session is created in __aenter__, closed in __aexit__
        self._session: Optional[aiohttp.ClientSession] = None

    # ----------------------------------------
    # Context Manager Protocol
    # ----------------------------------------

    async def __aenter__(self) -> "MistClient":
        """Enter async context: create the HTTP session."""
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=10,
                limit_per_host=10,
            ),
            timeout=aiohttp.ClientTimeout(
                total=self.timeout,
                connect=10,
            ),
            headers=self._auth_headers(),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context: close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    # ----------------------------------------
    # Low-Level Request Methods
    # ----------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Token {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """Make a single HTTP request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: API endpoint path (e.g., "/api/v1/sites/abc")
            params: Query parameters
            json_body: JSON request body

        Returns:
            Parsed JSON response (dict or list), or None for empty bodies

        Raises:
            APIError: If response status is not 2xx
            RuntimeError: If called outside of async context manager
            ConnectionError: If connection to server fails
            TimeoutError: If request times out
        """
        if not self._session:
            raise RuntimeError(
                "MistClient must be used as async context manager: "
                "async with MistClient(...) as client:"
            )

        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {endpoint} params={params}")

        try:
            async with self._session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
            ) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    raise self._create_api_error(
                        status=response.status,
                        method=method,
                        endpoint=endpoint,
                        response_body=error_text,
                    )

                body = await response.text()
                if not body.strip():
                    return None
                return json.loads(body)

        except aiohttp.ClientConnectionError as e:
            raise ConnectionError(
                f"Failed to connect to {self.base_url}",
                host=self.base_url,
                cause=e,
            )

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"Request to {endpoint} timed out",
                timeout_seconds=self.timeout,
                cause=e,
            )

        except aiohttp.ClientError as e:
            raise NetworkError(
                f"Network error during {method} {endpoint}: {e}",
                cause=e,
            )

    def _create_api_error(
        self,
        status: int,
        method: str,
        endpoint: str,
        response_body: str,
    ) -> APIError:
        """Create appropriate APIError subclass based on status code."""
        if status in (401, 403):
            return AuthenticationError(
                f"API token rejected for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                method=method,
                response_body=response_body,
            )

        if status == 404:
            return NotFoundError(
                resource_type="Resource",
                resource_id=endpoint,
                endpoint=endpoint,
                method=method,
                response_body=response_body,
            )

        if status in (400, 422):
            return ValidationError(
                f"Validation failed for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                method=method,
                response_body=response_body,
            )

        if status >= 500:
            return ServerError(
                f"Server error ({status}) for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                method=method,
                response_body=response_body,
            )

        return APIError(
            f"{method} {endpoint} failed",
            status_code=status,
            endpoint=endpoint,
            method=method,
            response_body=response_body,
        )

    # ----------------------------------------
    # High-Level Request Methods
    # ----------------------------------------

    async def get(
        self,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> Any:
        """Make a GET request.

        Args:
            endpoint: API endpoint path
            params: Query parameters

        Returns:
            Parsed JSON response
        """
        return await self._request("GET", endpoint, params=params)

    async def post(
        self,
        endpoint: str,
        json_body: Any,
        params: Optional[dict] = None,
    ) -> Any:
        """Make a POST request.

        Args:
            endpoint: API endpoint path
            json_body: Request body (will be JSON-encoded)
            params: Query parameters

        Returns:
            Parsed JSON response
        """
        return await self._request("POST", endpoint, params=params, json_body=json_body)

    # ----------------------------------------
    # Pagination Methods
    # ----------------------------------------

    async def paginate(
        self,
        endpoint: str,
        config: Optional[PaginationConfig] = None,
        params: Optional[dict] = None,
    ) -> AsyncIterator[list[dict]]:
        """Iterate through page-based API responses.

        List endpoints return a bare JSON array and accept ``limit`` and
        ``page`` (1-based). A page shorter than ``limit`` is the last one.

        Args:
            endpoint: API endpoint path
            config: Pagination configuration (page size)
            params: Additional query parameters

        Yields:
            List of items from each page
        """
        config = config or PaginationConfig()
        params = dict(params or {})  # Copy to avoid mutating caller's dict

        page = 1
        fetched_count = 0

        while True:
            params["limit"] = config.page_size
            params["page"] = page

            items = await self.get(endpoint, params=params) or []
            if not isinstance(items, list):
                raise APIError(
                    f"Expected a list from {endpoint}, got {type(items).__name__}",
                    status_code=200,
                    endpoint=endpoint,
                )

            if items:
                yield items

            fetched_count += len(items)
            logger.debug(f"Page {page} of {endpoint}: {len(items)} items")

            if len(items) < config.page_size:
                break

            page += 1

        logger.debug(f"Pagination complete: {fetched_count} items in {page} pages")

    async def fetch_all(
        self,
        endpoint: str,
        config: Optional[PaginationConfig] = None,
        params: Optional[dict] = None,
    ) -> list[dict]:
        """Fetch all items from a paginated endpoint.

        Args:
            endpoint: API endpoint path
            config: Pagination configuration
            params: Additional query parameters

        Returns:
            List of all items across all pages
        """
        all_items = []
        async for page in self.paginate(endpoint, config, params):
            all_items.extend(page)
        return all_items
