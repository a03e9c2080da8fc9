"""
Tracking of remote assets that must be deleted on the next save.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any, NamedTuple

from inspection_sync.schema.models import AssetReference, DraftEntry, SectionDraft
from inspection_sync.schema.sections import FieldKind, SectionSchema

logger = logging.getLogger(__name__)


class AssetSlot(NamedTuple):
    """Where an asset sits in a draft.

    ``index`` selects a slot of an asset list; ``row`` counts only entries
    with content, which is how uploads are numbered.
    """

    name: str
    index: int | None = None
    row: int | None = None


def _content_rows(draft: SectionDraft) -> list[DraftEntry]:
    return [row for row in draft.entries if row.has_content()]


def iter_assets(schema: SectionSchema, draft: SectionDraft) -> Iterator[tuple[AssetSlot, Any]]:
    """Yield every asset position of a draft with its current value."""
    for spec in schema.fields:
        if spec.kind == FieldKind.ASSET:
            yield AssetSlot(spec.name), draft.values.get(spec.name)
        elif spec.kind == FieldKind.ASSET_LIST:
            slots = draft.values.get(spec.name)
            for i, value in enumerate(slots if isinstance(slots, list) else []):
                yield AssetSlot(spec.name, index=i), value

    if schema.entry is not None:
        for i, row in enumerate(_content_rows(draft)):
            for spec in schema.entry.fields:
                if spec.is_asset:
                    yield AssetSlot(spec.name, row=i), row.values.get(spec.name)


def get_asset(draft: SectionDraft, slot: AssetSlot) -> Any:
    if slot.row is not None:
        rows = _content_rows(draft)
        return rows[slot.row].values.get(slot.name) if slot.row < len(rows) else None
    value = draft.values.get(slot.name)
    if slot.index is None:
        return value
    if isinstance(value, list) and slot.index < len(value):
        return value[slot.index]
    return None


def set_asset(draft: SectionDraft, slot: AssetSlot, uri: str | None) -> None:
    if slot.row is not None:
        _content_rows(draft)[slot.row].values[slot.name] = uri
    elif slot.index is None:
        draft.values[slot.name] = uri
    else:
        slots = list(draft.values[slot.name])
        slots[slot.index] = uri
        draft.values[slot.name] = slots


def referenced_assets(schema: SectionSchema, draft: SectionDraft) -> set[str]:
    """Remote URLs a draft still points at from any field, slot or entry."""
    urls: set[str] = set()
    for _, value in iter_assets(schema, draft):
        ref = AssetReference.parse(value)
        if ref is not None and ref.is_remote:
            urls.add(ref.uri)
    return urls


class AssetDeletionTracker:
    """
    Maintains a draft's pending-deletion set.

    Only remote references are ever recorded: a local file that was never
    uploaded has nothing to delete server-side. Remoteness is decided by
    URL scheme, so a remote store with a non-HTTP scheme is not tracked.
    A URL put back into a field is taken off the set again.
    """

    def on_replace(self, draft: SectionDraft, old: Any, new: Any) -> bool:
        """Record ``old`` if it was remote and is being superseded.

        Returns True if the pending-deletion set grew.
        """
        old_ref = AssetReference.parse(old)
        new_ref = AssetReference.parse(new)
        if new_ref is not None and new_ref.uri in draft.deleted_files:
            draft.deleted_files = [url for url in draft.deleted_files if url != new_ref.uri]
            logger.debug("Kept %s on %s/%s", new_ref.uri, draft.entity_id, draft.section.value)
        if old_ref is None or not old_ref.is_remote:
            return False
        if new_ref is not None and new_ref.uri == old_ref.uri:
            return False
        return self._add(draft, old_ref.uri)

    def on_discard(self, draft: SectionDraft, old: Any) -> bool:
        """Record a remote asset whose slot or entry was removed outright."""
        return self.on_replace(draft, old, None)

    def acknowledge(self, draft: SectionDraft, urls: Iterable[str]) -> None:
        """Drop URLs the server confirmed as deleted."""
        done = set(urls)
        if not done:
            return
        draft.deleted_files = [url for url in draft.deleted_files if url not in done]

    def _add(self, draft: SectionDraft, url: str) -> bool:
        if url in draft.deleted_files:
            return False
        draft.deleted_files.append(url)
        logger.debug("Queued %s for deletion on %s/%s", url, draft.entity_id, draft.section.value)
        return True
