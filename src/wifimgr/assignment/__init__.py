"""Bulk Device Assignment Module.

This module assigns devices (APs, switches, gateways) to sites in bulk:
- Resolve site IDs, site codes and site names to canonical site IDs
- Read MACs from arguments, MAC list files or MAC,SiteName files
- Assign each site's devices in one atomic inventory call
- Aggregate per-device outcomes into a deterministic report

Architecture: Clean Architecture with Hexagonal (Ports & Adapters)
"""

from .adapters import MistInventoryAdapter, TextReportRenderer
from .domain import (
    AssignmentSource,
    BulkAssignmentReport,
    CsvFileSource,
    DeviceKind,
    InlineSource,
    MacFileSource,
)
from .use_cases import BulkAssignUseCase, CachingSiteResolver, SiteResolver

__all__ = [
    "BulkAssignUseCase",
    "SiteResolver",
    "CachingSiteResolver",
    "MistInventoryAdapter",
    "TextReportRenderer",
    "AssignmentSource",
    "InlineSource",
    "MacFileSource",
    "CsvFileSource",
    "DeviceKind",
    "BulkAssignmentReport",
]
