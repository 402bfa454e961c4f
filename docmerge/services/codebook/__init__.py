"""Code-book lookup service package."""

from .index import build_index, derive_padder
from .models import (
    PLACEHOLDERS,
    EmployeeRecord,
    LookupMiss,
    RenderContext,
    Resolution,
    RunTally,
)
from .resolver import build_context, lookup_miss, resolve_date, resolve_description

__all__ = [
    "PLACEHOLDERS",
    "EmployeeRecord",
    "LookupMiss",
    "RenderContext",
    "Resolution",
    "RunTally",
    "build_context",
    "build_index",
    "derive_padder",
    "lookup_miss",
    "resolve_date",
    "resolve_description",
]
