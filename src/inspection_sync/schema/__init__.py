"""Data model and section schemas for the inspection sync engine."""

from inspection_sync.schema.models import (
    AssetReference,
    DraftEntry,
    DraftStatus,
    ListCacheEntry,
    PaginationState,
    SectionDraft,
    SectionKind,
)
from inspection_sync.schema.sections import (
    SECTION_SCHEMAS,
    EntryRule,
    EntrySpec,
    FieldKind,
    FieldSpec,
    SectionSchema,
    get_schema,
)

__all__ = [
    # Models
    "AssetReference",
    "DraftEntry",
    "DraftStatus",
    "ListCacheEntry",
    "PaginationState",
    "SectionDraft",
    "SectionKind",
    # Schemas
    "SECTION_SCHEMAS",
    "EntryRule",
    "EntrySpec",
    "FieldKind",
    "FieldSpec",
    "SectionSchema",
    "get_schema",
]
