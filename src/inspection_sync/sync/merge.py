"""
Decides whether a local draft or the remote record seeds the editing state.
"""

from __future__ import annotations

import logging

from inspection_sync.schema.models import DraftEntry, SectionDraft
from inspection_sync.schema.sections import SectionSchema
from inspection_sync.sync.assets import referenced_assets

logger = logging.getLogger(__name__)


class MergePolicy:
    """
    All-or-nothing choice between draft and remote projection.

    A draft with any non-empty field, entry value or asset wins in its
    entirety: remote values are never mixed into work the operator has
    started. Otherwise the remote projection becomes the initial state.
    Deletions queued on a blank draft carry over to it, minus any asset the
    remote state still shows.
    """

    def __init__(self, schema: SectionSchema):
        self.schema = schema

    def blank(self, entity_id: str) -> SectionDraft:
        """A fresh, empty draft for this section."""
        draft = SectionDraft(
            entity_id=entity_id,
            section=self.schema.kind,
            values=self.schema.empty_values(),
        )
        return self.ensure_entry(draft)

    def ensure_entry(self, draft: SectionDraft) -> SectionDraft:
        """Repeatable sections always hold at least one (possibly empty) entry."""
        if self.schema.is_repeatable and not draft.entries:
            draft.entries.append(DraftEntry(values=self.schema.empty_entry_values()))
        return draft

    def _fill_defaults(self, draft: SectionDraft) -> SectionDraft:
        for name, empty in self.schema.empty_values().items():
            draft.values.setdefault(name, empty)
        for entry in draft.entries:
            for name, empty in self.schema.empty_entry_values().items():
                entry.values.setdefault(name, empty)
        return self.ensure_entry(draft)

    def choose(
        self,
        entity_id: str,
        draft: SectionDraft | None,
        remote: SectionDraft | None,
    ) -> SectionDraft:
        """Produce the authoritative in-memory state for editing."""
        if draft is not None and draft.has_content():
            chosen = draft.model_copy(deep=True)
            if chosen.remote_id is None and remote is not None:
                chosen.remote_id = remote.remote_id
            logger.debug("Draft wins for %s/%s", entity_id, self.schema.kind.value)
            return self._fill_defaults(chosen)

        if remote is not None:
            chosen = remote.model_copy(deep=True, update={"entity_id": entity_id})
            if not chosen.deleted_files and draft is not None:
                # Only deletions of assets the remote state no longer shows.
                live = referenced_assets(self.schema, chosen)
                chosen.deleted_files = [url for url in draft.deleted_files if url not in live]
            if chosen.remote_id is None and draft is not None:
                chosen.remote_id = draft.remote_id
            logger.debug("Remote wins for %s/%s", entity_id, self.schema.kind.value)
            return self._fill_defaults(chosen)

        if draft is not None:
            return self._fill_defaults(draft.model_copy(deep=True))
        return self.blank(entity_id)
