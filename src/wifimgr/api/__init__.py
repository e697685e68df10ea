"""Inventory API modules.

This package provides the HTTP client and resource operations for the
Mist inventory API.

Classes:
    MistClient: Generic async HTTP client with pagination and typed errors
    InventoryManager: Site lookups and device assignment
    Site: Site record as returned by the inventory

Exceptions:
    WifiMgrError: Base exception for all wifimgr errors
    ConfigurationError: Missing or invalid configuration
    APIError: API request failures
    NotFoundError / SiteNotFoundError: Lookup misses
    NetworkError: Network connectivity issues
    FormatError / InputFileError: Bad or unreadable input
    AssignmentError: Assignment batch rejected
"""
from .client import SITES_PAGINATION, MistClient, PaginationConfig
from .exceptions import (
    APIError,
    AssignmentError,
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    FormatError,
    InputError,
    InputFileError,
    NetworkError,
    NotFoundError,
    OperationCancelledError,
    ServerError,
    SiteLookupError,
    SiteNotFoundError,
    TimeoutError,
    ValidationError,
    WifiMgrError,
    error_message,
)
from .inventory import InventoryManager, Site

__all__ = [
    # Client
    "MistClient",
    "PaginationConfig",
    "SITES_PAGINATION",
    # Resources
    "InventoryManager",
    "Site",
    # Exceptions - Base
    "WifiMgrError",
    "ConfigurationError",
    "error_message",
    # Exceptions - API
    "APIError",
    "AuthenticationError",
    "NotFoundError",
    "SiteNotFoundError",
    "ValidationError",
    "ServerError",
    # Exceptions - Network
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    # Exceptions - Resolution / Input / Assignment
    "SiteLookupError",
    "InputError",
    "FormatError",
    "InputFileError",
    "AssignmentError",
    "OperationCancelledError",
]
