"""Use cases for device assignment.

Each use case represents a single user action and orchestrates
domain logic without knowing about infrastructure details.
"""

from .aggregator import ResultAggregator
from .bulk_assign import BulkAssignUseCase
from .resolve_site import CachingSiteResolver, IdentifierKind, SiteResolver, classify

__all__ = [
    "BulkAssignUseCase",
    "ResultAggregator",
    "SiteResolver",
    "CachingSiteResolver",
    "IdentifierKind",
    "classify",
]
