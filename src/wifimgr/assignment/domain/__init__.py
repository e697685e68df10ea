"""Domain layer for device assignment.

Contains:
- Entities: Core business objects
- Ports: Interface definitions for infrastructure adapters
"""

from .entities import (
    ALLOWED_TRANSITIONS,
    AssignmentMode,
    AssignmentOutcome,
    AssignmentRequest,
    AssignmentSource,
    BulkAssignmentReport,
    CsvFileSource,
    DeviceKind,
    InlineSource,
    MacFileSource,
    ParsedCsv,
    RequestState,
    SiteSummary,
    SourceKind,
    normalize_mac,
)
from .ports import IInputParser, IInventoryPort, IReportRenderer, ISiteResolver

__all__ = [
    # Entities
    "DeviceKind",
    "SourceKind",
    "AssignmentMode",
    "RequestState",
    "ALLOWED_TRANSITIONS",
    "InlineSource",
    "MacFileSource",
    "CsvFileSource",
    "AssignmentSource",
    "AssignmentRequest",
    "ParsedCsv",
    "AssignmentOutcome",
    "SiteSummary",
    "BulkAssignmentReport",
    "normalize_mac",
    # Ports
    "IInventoryPort",
    "ISiteResolver",
    "IInputParser",
    "IReportRenderer",
]
