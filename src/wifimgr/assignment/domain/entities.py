"""Domain entities for bulk device assignment.

These are pure domain objects with no infrastructure dependencies.
They represent the core concepts of the assignment workflow: where the
input came from, what was asked for, and what happened to each request.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from ...api.exceptions import error_message


class DeviceKind(str, Enum):
    """Kinds of managed devices that can be assigned to a site."""

    AP = "ap"
    SWITCH = "switch"
    GATEWAY = "gateway"

    @property
    def label(self) -> str:
        """Singular label used in report detail lines."""
        return _DEVICE_LABELS[self][0]

    @property
    def plural(self) -> str:
        """Plural label used in report summary lines."""
        return _DEVICE_LABELS[self][1]


_DEVICE_LABELS = {
    DeviceKind.AP: ("AP", "APs"),
    DeviceKind.SWITCH: ("Switch", "switches"),
    DeviceKind.GATEWAY: ("Gateway", "gateways"),
}


class SourceKind(str, Enum):
    """Where assignment requests come from."""

    INLINE = "inline"  # MACs given on the command line, one target site
    MAC_FILE = "mac_file"  # Newline-delimited MAC file, one target site
    CSV_FILE = "csv_file"  # MAC,SiteName per line, many target sites


class AssignmentMode(str, Enum):
    """Orchestration mode, derived from the source kind."""

    SINGLE_TARGET = "single_target"
    MULTI_TARGET = "multi_target"


class RequestState(str, Enum):
    """Lifecycle of a single assignment request.

    PENDING -> RESOLVED -> DISPATCHED -> SUCCEEDED | FAILED
    PENDING -> FAILED (resolution failed or run cancelled)
    """

    PENDING = "pending"
    RESOLVED = "resolved"
    DISPATCHED = "dispatched"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestState.SUCCEEDED, RequestState.FAILED)


ALLOWED_TRANSITIONS: dict[RequestState, frozenset[RequestState]] = {
    RequestState.PENDING: frozenset({RequestState.RESOLVED, RequestState.FAILED}),
    RequestState.RESOLVED: frozenset({RequestState.DISPATCHED, RequestState.FAILED}),
    RequestState.DISPATCHED: frozenset({RequestState.SUCCEEDED, RequestState.FAILED}),
    RequestState.SUCCEEDED: frozenset(),
    RequestState.FAILED: frozenset(),
}


_WHITESPACE = re.compile(r"\s+")


def normalize_mac(raw: str) -> str:
    """Trim a MAC string and drop any internal whitespace.

    Hex digit case is preserved.
    """
    return _WHITESPACE.sub("", raw)


# ============================================
# Sources (tagged by ``kind``)
# ============================================

@dataclass(frozen=True)
class InlineSource:
    """MAC addresses given directly, all for one site."""

    macs: tuple[str, ...]
    site: str
    kind: SourceKind = field(default=SourceKind.INLINE, init=False)


@dataclass(frozen=True)
class MacFileSource:
    """Path to a newline-delimited MAC file, all for one site."""

    path: str
    site: str
    kind: SourceKind = field(default=SourceKind.MAC_FILE, init=False)


@dataclass(frozen=True)
class CsvFileSource:
    """Path to a MAC,SiteName file."""

    path: str
    kind: SourceKind = field(default=SourceKind.CSV_FILE, init=False)


AssignmentSource = Union[InlineSource, MacFileSource, CsvFileSource]


# ============================================
# Requests and outcomes
# ============================================

@dataclass(frozen=True)
class AssignmentRequest:
    """One device to assign, as read from the input.

    Attributes:
        index: 1-based position among the input's entries
        mac: Normalized MAC string (case preserved)
        site: Target site identifier exactly as the user wrote it
        raw_mac: MAC field as it appeared in the input, trimmed
    """

    index: int
    mac: str
    site: str
    raw_mac: Optional[str] = None

    @property
    def original_mac(self) -> str:
        return self.raw_mac if self.raw_mac is not None else self.mac


@dataclass
class ParsedCsv:
    """Result of parsing a MAC,SiteName file.

    Attributes:
        requests: All requests in input order
        sites: Distinct site identifiers in first-appearance order
        requests_by_site: Requests grouped per site, input order kept
        macs_by_site: Original MAC strings per site, parallel to requests_by_site
    """

    requests: list[AssignmentRequest] = field(default_factory=list)
    sites: list[str] = field(default_factory=list)
    requests_by_site: dict[str, list[AssignmentRequest]] = field(default_factory=dict)
    macs_by_site: dict[str, list[str]] = field(default_factory=dict)

    def add(self, request: AssignmentRequest) -> None:
        if request.site not in self.requests_by_site:
            self.sites.append(request.site)
            self.requests_by_site[request.site] = []
            self.macs_by_site[request.site] = []
        self.requests.append(request)
        self.requests_by_site[request.site].append(request)
        self.macs_by_site[request.site].append(request.original_mac)


@dataclass
class AssignmentOutcome:
    """Final state of one AssignmentRequest.

    Produced exactly once per request.
    """

    request: AssignmentRequest
    state: RequestState
    site_id: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.state == RequestState.SUCCEEDED

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "index": self.request.index,
            "mac": self.request.mac,
            "site": self.request.site,
            "site_id": self.site_id,
            "success": self.success,
            "error": error_message(self.error) if self.error else None,
        }


@dataclass
class SiteSummary:
    """Per-site sub-aggregate for multi-site runs.

    Attributes:
        site: Site identifier as written in the input
        site_id: Canonical ID, if resolution succeeded
        total: Requests targeting this site
        succeeded: Requests assigned successfully
        failed: Requests that failed
        error: Resolution error or batch error for the site, if any
    """

    site: str
    site_id: Optional[str] = None
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    error: Optional[Exception] = None

    @property
    def resolved(self) -> bool:
        return self.site_id is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "site": self.site,
            "site_id": self.site_id,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "error": error_message(self.error) if self.error else None,
        }


@dataclass
class BulkAssignmentReport:
    """Deterministic report of a bulk assignment run.

    Invariant: succeeded + failed == total.
    """

    mode: AssignmentMode
    device_kind: DeviceKind = DeviceKind.AP
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0
    outcomes: list[AssignmentOutcome] = field(default_factory=list)
    sites: list[SiteSummary] = field(default_factory=list)
    # Batch-level error in single-target mode, surfaced as the call's error
    error: Optional[Exception] = None

    def __post_init__(self):
        if self.succeeded + self.failed != self.total:
            raise ValueError(
                f"Inconsistent report: {self.succeeded} succeeded + "
                f"{self.failed} failed != {self.total} total"
            )

    @property
    def site_count(self) -> int:
        return len(self.sites)

    @property
    def failures(self) -> list[AssignmentOutcome]:
        """Failed outcomes, ordered by input index."""
        return [o for o in self.outcomes if not o.success]

    def failures_for(self, site: str) -> list[AssignmentOutcome]:
        return [o for o in self.failures if o.request.site == site]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "mode": self.mode.value,
            "device_kind": self.device_kind.value,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "elapsed_seconds": round(self.elapsed_seconds, 6),
            "site_count": self.site_count,
            "sites": [s.to_dict() for s in self.sites],
            "outcomes": [o.to_dict() for o in self.outcomes],
            "error": error_message(self.error) if self.error else None,
        }
