#!/usr/bin/env python3
"""Exception Hierarchy for wifimgr.

This module provides a structured exception hierarchy for handling errors
across the inventory client, identifier resolution, input parsing and bulk
assignment.

Design Principles:
    - All exceptions inherit from WifiMgrError base class
    - Exceptions preserve context (original error, details)
    - Every message carries the user-supplied text it is about
      (identifier, filename or offending line)

Exception Hierarchy:
    WifiMgrError (base)
    ├── ConfigurationError (fix config)
    ├── APIError
    │   ├── AuthenticationError
    │   ├── NotFoundError
    │   │   └── SiteNotFoundError
    │   ├── ValidationError
    │   └── ServerError
    ├── NetworkError
    │   ├── ConnectionError
    │   └── TimeoutError
    ├── SiteLookupError
    ├── InputError
    │   ├── FormatError
    │   └── InputFileError
    ├── AssignmentError
    └── OperationCancelledError
"""
from typing import Any, Optional

# ============================================
# Base Exception
# ============================================

class WifiMgrError(Exception):
    """Base exception for all wifimgr errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "SITE_NOT_FOUND")
        details: Additional context as a dictionary
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.cause = cause

        # Chain the original exception if provided
        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.insert(0, f"[{self.code}]")
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)


def error_message(error: BaseException) -> str:
    """Return the human-readable part of an error for report lines."""
    if isinstance(error, WifiMgrError):
        return error.message
    return str(error)


# ============================================
# Configuration Errors
# ============================================

class ConfigurationError(WifiMgrError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details=details,
            **kwargs,
        )


# ============================================
# API Errors
# ============================================

class APIError(WifiMgrError):
    """Base class for API response errors.

    Attributes:
        status_code: HTTP status code (0 for client-side rejections)
        endpoint: API endpoint that was called
        response_body: Raw response body (may be truncated)
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        endpoint: Optional[str] = None,
        response_body: Optional[str] = None,
        method: str = "GET",
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        if method:
            details["method"] = method
        if response_body:
            # Truncate large response bodies
            details["response_body"] = response_body[:500] if len(response_body) > 500 else response_body

        kwargs.setdefault("code", f"API_ERROR_{status_code}")

        super().__init__(
            message,
            details=details,
            **kwargs,
        )
        self.status_code = status_code
        self.endpoint = endpoint
        self.response_body = response_body
        self.method = method


class AuthenticationError(APIError):
    """Raised when the API token is rejected (HTTP 401/403)."""

    def __init__(self, message: str = "API token rejected", **kwargs):
        kwargs.setdefault("status_code", 401)
        super().__init__(
            message,
            code="AUTHENTICATION_ERROR",
            **kwargs,
        )


class NotFoundError(APIError):
    """Raised when requested resource is not found (HTTP 404)."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        **kwargs,
    ):
        if message is None:
            message = f"{resource_type} not found"
            if resource_id:
                message = f"{resource_type} '{resource_id}' not found"

        kwargs.setdefault("status_code", 404)
        kwargs.setdefault("code", "NOT_FOUND")
        details = kwargs.pop("details", {})
        details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message,
            details=details,
            **kwargs,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class SiteNotFoundError(NotFoundError):
    """Raised when a site identifier does not resolve to any site.

    Attributes:
        identifier: The value that was looked up (the raw input, or the
            upper-cased code for site codes)
        identifier_kind: "id", "code" or "name"
    """

    _MESSAGES = {
        "id": "no site found with ID '{}'",
        "code": "no site found matching code '{}'",
        "name": "no site found matching name '{}'",
    }

    def __init__(self, identifier: str, identifier_kind: str = "name", **kwargs):
        template = self._MESSAGES.get(identifier_kind, self._MESSAGES["name"])
        super().__init__(
            resource_type="Site",
            resource_id=identifier,
            message=template.format(identifier),
            code="SITE_NOT_FOUND",
            **kwargs,
        )
        self.identifier = identifier
        self.identifier_kind = identifier_kind


class ValidationError(APIError):
    """Raised when API validation fails (HTTP 400/422) or a request is
    rejected client-side before it is sent."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("status_code", 400)
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field

        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details=details,
            **kwargs,
        )


class ServerError(APIError):
    """Raised when server returns 5xx error."""

    def __init__(
        self,
        message: str = "Server error",
        **kwargs,
    ):
        kwargs.setdefault("status_code", 500)
        super().__init__(
            message,
            code="SERVER_ERROR",
            **kwargs,
        )


# ============================================
# Network Errors
# ============================================

class NetworkError(WifiMgrError):
    """Base class for network-related errors."""


class ConnectionError(NetworkError):
    """Raised when connection to server fails."""

    def __init__(
        self,
        message: str = "Failed to connect to server",
        host: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if host:
            details["host"] = host
        super().__init__(
            message,
            code="CONNECTION_ERROR",
            details=details,
            **kwargs,
        )


class TimeoutError(NetworkError):
    """Raised when request times out."""

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(
            message,
            code="TIMEOUT_ERROR",
            details=details,
            **kwargs,
        )


# ============================================
# Resolution Errors
# ============================================

class SiteLookupError(WifiMgrError):
    """Raised when the inventory could not be queried while resolving a site.

    Distinct from SiteNotFoundError: the lookup itself failed, so whether
    the site exists is unknown.
    """

    def __init__(self, identifier: str, cause: Exception, **kwargs):
        reason = error_message(cause)
        super().__init__(
            f"failed to look up site '{identifier}': {reason}",
            code="SITE_LOOKUP_ERROR",
            details={"identifier": identifier},
            cause=cause,
            **kwargs,
        )
        self.identifier = identifier


# ============================================
# Input Errors (always fatal to the whole parse)
# ============================================

class InputError(WifiMgrError):
    """Base class for problems with user-supplied input."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if source:
            details["file"] = source
        super().__init__(message, details=details, **kwargs)
        self.source = source


class FormatError(InputError):
    """Raised when input content is malformed or contains no entries.

    Attributes:
        line_number: 1-based line number of the offending line, if any
        line: The offending line as read, if any
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if line_number is not None:
            details["line_number"] = line_number
        if line is not None:
            details["line"] = line
        super().__init__(
            message,
            source=source,
            code="FORMAT_ERROR",
            details=details,
            **kwargs,
        )
        self.line_number = line_number
        self.line = line


class InputFileError(InputError):
    """Raised when an input file cannot be read."""

    def __init__(self, path: str, cause: Optional[Exception] = None, **kwargs):
        reason = f": {cause}" if cause else ""
        super().__init__(
            f"failed to read file {path}{reason}",
            source=path,
            code="INPUT_FILE_ERROR",
            cause=cause,
            **kwargs,
        )
        self.path = path


# ============================================
# Assignment Errors
# ============================================

class AssignmentError(WifiMgrError):
    """Raised when the inventory rejects an assignment batch.

    The remote call is atomic per batch, so one AssignmentError is recorded
    against every device in the batch.

    Attributes:
        site: The site identifier as the user supplied it
        site_id: Canonical site ID the batch targeted
        device_count: Number of devices in the failed batch
    """

    def __init__(
        self,
        site: str,
        site_id: str,
        device_count: int,
        cause: Exception,
        **kwargs,
    ):
        super().__init__(
            f"failed to assign devices to site '{site}': {error_message(cause)}",
            code="ASSIGNMENT_ERROR",
            details={"site_id": site_id, "device_count": device_count},
            cause=cause,
            **kwargs,
        )
        self.site = site
        self.site_id = site_id
        self.device_count = device_count


class OperationCancelledError(WifiMgrError):
    """Recorded for sites that were never started because the run was cancelled."""

    def __init__(self, site: str, **kwargs):
        super().__init__(
            f"operation cancelled before site '{site}' was processed",
            code="OPERATION_CANCELLED",
            details={"site": site},
            **kwargs,
        )
        self.site = site


# ============================================
# Exports
# ============================================

__all__ = [
    # Base
    "WifiMgrError",
    "error_message",
    # Configuration
    "ConfigurationError",
    # API
    "APIError",
    "AuthenticationError",
    "NotFoundError",
    "SiteNotFoundError",
    "ValidationError",
    "ServerError",
    # Network
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    # Resolution
    "SiteLookupError",
    # Input
    "InputError",
    "FormatError",
    "InputFileError",
    # Assignment
    "AssignmentError",
    "OperationCancelledError",
]
