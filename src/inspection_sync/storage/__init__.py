"""Storage backends and caches for the inspection sync engine."""

from inspection_sync.storage.base import BaseStore
from inspection_sync.storage.dict_store import DictStore
from inspection_sync.storage.drafts import DraftStore, draft_key
from inspection_sync.storage.list_cache import ListCache
from inspection_sync.storage.sqlite_store import SQLiteStore

__all__ = [
    "BaseStore",
    "DictStore",
    "DraftStore",
    "ListCache",
    "SQLiteStore",
    "draft_key",
]
