"""
Inspection Sync

Draft-cache synchronization engine for a multi-step vehicle inspection
workflow backed by a remote record store.

The engine provides:
- Durable per-section drafts that survive restarts
- Hydration from inconsistent remote records via declarative alias tables
- Draft-wins merge policy for in-progress work
- Tracking of superseded remote assets for server-side deletion
- TTL-cached, fully paginated list views
- Single-flight submission as a multipart form or JSON body

Quick Start:
    from inspection_sync import Settings, SyncEngine

    engine = await SyncEngine.create(Settings.from_env())

    session = await engine.open_section("4711", "engine")
    await session.set_value("radiator", "yes")
    await session.replace_asset("engine_image", "file:///sdcard/engine.jpg")
    remote_id = await session.save()
"""

__version__ = "0.1.0"

from inspection_sync.client import Page, RemoteClient, UploadPart
from inspection_sync.config import Settings
from inspection_sync.errors import (
    AssetUnavailable,
    InspectionSyncError,
    SectionNotLoaded,
    SectionReadOnly,
    TransportError,
    ValidationFailed,
)
from inspection_sync.schema import (
    AssetReference,
    DraftEntry,
    DraftStatus,
    ListCacheEntry,
    SectionDraft,
    SectionKind,
    get_schema,
)
from inspection_sync.storage import DictStore, DraftStore, ListCache, SQLiteStore
from inspection_sync.sync import (
    AliasResolver,
    AssetDeletionTracker,
    CancellationToken,
    MergePolicy,
    PaginatedAccumulator,
    SectionSession,
    SubmissionPipeline,
    SyncEngine,
)

__all__ = [
    # Version
    "__version__",
    # Config
    "Settings",
    # Errors
    "InspectionSyncError",
    "TransportError",
    "ValidationFailed",
    "SectionNotLoaded",
    "SectionReadOnly",
    "AssetUnavailable",
    # Schema
    "AssetReference",
    "DraftEntry",
    "DraftStatus",
    "ListCacheEntry",
    "SectionDraft",
    "SectionKind",
    "get_schema",
    # Storage
    "DictStore",
    "DraftStore",
    "ListCache",
    "SQLiteStore",
    # Transport
    "Page",
    "RemoteClient",
    "UploadPart",
    # Engine
    "AliasResolver",
    "AssetDeletionTracker",
    "CancellationToken",
    "MergePolicy",
    "PaginatedAccumulator",
    "SectionSession",
    "SubmissionPipeline",
    "SyncEngine",
]
