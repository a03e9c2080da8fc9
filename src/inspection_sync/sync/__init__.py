"""
Draft/remote synchronization for inspection sections.

Provides:
- Alias resolution of historical remote field spellings
- Paginated accumulation of remote collections
- Draft-versus-remote merge policy
- Pending asset deletion tracking
- Guarded multipart submission
"""

from inspection_sync.sync.aliases import MISSING, AliasResolver, normalize_choice, normalize_yes_no
from inspection_sync.sync.assets import AssetDeletionTracker
from inspection_sync.sync.cancellation import CancellationToken
from inspection_sync.sync.engine import ListResult, SectionSession, SyncEngine
from inspection_sync.sync.merge import MergePolicy
from inspection_sync.sync.pagination import PaginatedAccumulator
from inspection_sync.sync.remote import fetch_remote
from inspection_sync.sync.submission import SubmissionPipeline, read_local_asset

__all__ = [
    # Resolution
    "MISSING",
    "AliasResolver",
    "normalize_yes_no",
    "normalize_choice",
    "fetch_remote",
    # Lists
    "PaginatedAccumulator",
    "ListResult",
    # Drafts
    "MergePolicy",
    "AssetDeletionTracker",
    "SubmissionPipeline",
    "read_local_asset",
    # Engine
    "CancellationToken",
    "SectionSession",
    "SyncEngine",
]
