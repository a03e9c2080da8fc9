"""
Core data model for section drafts, asset references and cached lists.

Everything here is plain JSON-serializable: assets are carried as URI
strings, never as bytes.
"""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field

REMOTE_SCHEMES = ("http://", "https://")


class SectionKind(str, Enum):
    """Logical units of the inspection workflow with their own schema."""

    ENGINE = "engine"
    FUNCTIONS = "functions"
    FRAMES = "frames"
    DEFECTS = "defective"
    ELECTRICAL = "electrical"
    EXTERIOR = "exterior"
    TEST_DRIVE = "testDrive"


class DraftStatus(str, Enum):
    """Where a draft stands relative to the remote store."""

    DRAFT = "draft"  # Edited locally since the last successful save
    PENDING_SYNC = "pending-sync"  # A submission is in flight
    SYNCED = "synced"  # Last submission was acknowledged


class AssetReference(BaseModel):
    """A photo or file, either device-local or already hosted remotely.

    Remoteness is decided by URL scheme. A reference may become remote after
    an upload (``as_uploaded``) but never goes back to local.
    """

    uri: str

    model_config = {"frozen": True}

    @computed_field
    @property
    def is_remote(self) -> bool:
        return self.uri.startswith(REMOTE_SCHEMES)

    @property
    def is_local(self) -> bool:
        return not self.is_remote

    @property
    def extension(self) -> str:
        tail = self.uri.rsplit("/", 1)[-1]
        if "." not in tail:
            return "jpg"
        return tail.rsplit(".", 1)[-1].lower() or "jpg"

    @property
    def mime_type(self) -> str:
        ext = self.extension
        if ext == "png":
            return "image/png"
        if ext in ("jpg", "jpeg"):
            return "image/jpeg"
        return "application/octet-stream"

    def as_uploaded(self, url: str) -> AssetReference:
        """Return the remote reference that replaced this local one."""
        if self.is_remote:
            raise ValueError(f"{self.uri} is already remote")
        ref = AssetReference(uri=url)
        if not ref.is_remote:
            raise ValueError(f"{url} is not a remote URL")
        return ref

    @classmethod
    def parse(cls, value: Any) -> AssetReference | None:
        """Coerce a stored value into a reference; blanks become ``None``."""
        if isinstance(value, AssetReference):
            return value
        if isinstance(value, str) and value.strip():
            return cls(uri=value.strip())
        return None


def _is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple)):
        return any(_is_filled(v) for v in value)
    if isinstance(value, dict):
        return any(_is_filled(v) for v in value.values())
    return True


class DraftEntry(BaseModel):
    """One row of a repeatable section (e.g. a single defect)."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    values: dict[str, Any] = Field(default_factory=dict)

    def has_content(self) -> bool:
        return any(_is_filled(v) for v in self.values.values())


class SectionDraft(BaseModel):
    """Locally held, possibly-unsaved state of one section for one entity."""

    entity_id: str
    section: SectionKind
    values: dict[str, Any] = Field(default_factory=dict)
    entries: list[DraftEntry] = Field(default_factory=list)
    deleted_files: list[str] = Field(default_factory=list)
    remote_id: str | None = None

    status: DraftStatus = DraftStatus.DRAFT
    last_sync_error: str | None = None
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def key(self) -> tuple[str, SectionKind]:
        return (self.entity_id, self.section)

    def has_content(self) -> bool:
        """True if any field or entry holds a non-empty value or asset."""
        if any(_is_filled(v) for v in self.values.values()):
            return True
        return any(entry.has_content() for entry in self.entries)

    def snapshot(self) -> str:
        """Structural fingerprint used to coalesce redundant writes."""
        return json.dumps(
            {
                "values": self.values,
                "entries": [e.model_dump() for e in self.entries],
                "deleted_files": self.deleted_files,
                "remote_id": self.remote_id,
                "status": self.status.value,
                "last_sync_error": self.last_sync_error,
            },
            sort_keys=True,
            default=str,
        )

    def touch(self) -> None:
        """Mark the draft as locally edited."""
        self.updated_at = datetime.now()
        self.status = DraftStatus.DRAFT

    def find_entry(self, entry_id: str) -> DraftEntry | None:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None


class ListCacheEntry(BaseModel):
    """A fetched collection plus the epoch-millisecond time it was fetched.

    ``fetched_at == 0`` marks the entry as invalidated.
    """

    items: list[Any] = Field(default_factory=list)
    fetched_at: int = 0


class PaginationState(BaseModel):
    """Transient bookkeeping for a single accumulation run."""

    page_size: int
    offset: int = 0
    items: list[Any] = Field(default_factory=list)
    reported_total: int | None = None
    requests: int = 0

    def absorb(self, page: list[Any], total: int | None) -> bool:
        """Record one page and return True when accumulation is complete."""
        self.requests += 1
        if total is not None and self.reported_total is None:
            self.reported_total = total
        self.items.extend(page)
        self.offset += self.page_size

        if len(page) < self.page_size:
            return True
        if self.reported_total is not None and len(self.items) >= self.reported_total:
            return True
        return False
