"""
Durable per-entity cache of in-progress section drafts.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from inspection_sync.schema.models import SectionDraft, SectionKind
from inspection_sync.storage.base import BaseStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "inspection_draft"


def draft_key(entity_id: str, section: SectionKind | str) -> str:
    return f"{KEY_PREFIX}:{SectionKind(section).value}:{entity_id}"


class DraftStore:
    """
    Keyed by ``(entity_id, section)``, one JSON document per draft.

    Writes are coalesced: a draft whose structural snapshot matches the
    last persisted one is not written again. Drafts are never deleted by
    the engine; ``clear()`` exists for explicit operator resets only.
    """

    def __init__(self, backend: BaseStore):
        self._backend = backend
        self._persisted: dict[str, str] = {}

    async def get(self, entity_id: str, section: SectionKind | str) -> SectionDraft | None:
        """Load a draft, or None if absent or unreadable."""
        key = draft_key(entity_id, section)
        raw = await self._backend.get(key)
        if not raw:
            return None

        try:
            draft = SectionDraft.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable draft %s: %s", key, e)
            return None

        self._persisted[key] = draft.snapshot()
        return draft

    async def put(self, draft: SectionDraft) -> bool:
        """Persist a draft. Returns False when the write was coalesced away."""
        key = draft_key(draft.entity_id, draft.section)
        snapshot = draft.snapshot()
        if self._persisted.get(key) == snapshot:
            logger.debug("Draft %s unchanged, skipping write", key)
            return False

        await self._backend.set(key, draft.model_dump_json())
        self._persisted[key] = snapshot
        return True

    async def clear(self, entity_id: str, section: SectionKind | str) -> bool:
        """Erase a draft. Only called for an explicit reset."""
        key = draft_key(entity_id, section)
        self._persisted.pop(key, None)
        return await self._backend.delete(key)

    async def list_drafts(self) -> list[tuple[str, SectionKind]]:
        """All stored ``(entity_id, section)`` pairs."""
        pairs: list[tuple[str, SectionKind]] = []
        for key in await self._backend.keys(f"{KEY_PREFIX}:"):
            _, section, entity_id = key.split(":", 2)
            try:
                pairs.append((entity_id, SectionKind(section)))
            except ValueError:
                logger.warning("Ignoring draft with unknown section %s", key)
        return pairs
