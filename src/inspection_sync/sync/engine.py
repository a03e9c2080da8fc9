"""
Draft-cache synchronization engine.

Wires the draft store, list cache, alias resolver, merge policy, deletion
tracker and submission pipeline behind two entry points:

- ``SectionSession``: one form section for one entity, from hydration
  through edits to save.
- ``SyncEngine.load_slots``: the TTL-cached calendar list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from inspection_sync.client import SLOTS_ENDPOINT, RemoteClient
from inspection_sync.config import Settings
from inspection_sync.errors import InspectionSyncError, SectionNotLoaded, TransportError
from inspection_sync.schema.models import AssetReference, DraftEntry, SectionDraft, SectionKind
from inspection_sync.schema.sections import FieldKind, FieldSpec, SectionSchema, get_schema
from inspection_sync.slots import match_evaluator, visible_slots
from inspection_sync.storage.base import BaseStore
from inspection_sync.storage.drafts import DraftStore
from inspection_sync.storage.list_cache import ListCache
from inspection_sync.storage.sqlite_store import SQLiteStore
from inspection_sync.sync.aliases import (
    AliasResolver,
    normalize_choice,
    normalize_flag,
    normalize_yes_no,
)
from inspection_sync.sync.assets import AssetDeletionTracker
from inspection_sync.sync.cancellation import CancellationToken, is_cancelled
from inspection_sync.sync.merge import MergePolicy
from inspection_sync.sync.pagination import PaginatedAccumulator
from inspection_sync.sync.remote import fetch_remote
from inspection_sync.sync.submission import AssetReader, SubmissionPipeline, read_local_asset

logger = logging.getLogger(__name__)

SLOTS_CACHE_KEY = "calendar_slots"
EVALUATORS_ENDPOINT = "/api/view-evaluator-list"


@dataclass
class ListResult:
    """Items to render and where they came from.

    ``error`` is set when a refetch failed; ``items`` then holds the last
    cached list so the screen stays usable.
    """

    items: list[dict[str, Any]] = field(default_factory=list)
    from_cache: bool = False
    error: str | None = None


class SectionSession:
    """
    Editing state for one section of one entity.

    Every mutation persists through the draft store (unchanged drafts are
    not rewritten) and feeds replaced remote assets into the deletion
    tracker.
    """

    def __init__(
        self,
        engine: SyncEngine,
        entity_id: str,
        section: SectionKind | str,
        cancel: CancellationToken | None = None,
    ):
        self.engine = engine
        self.entity_id = entity_id
        self.schema: SectionSchema = get_schema(section)
        self.cancel = cancel or CancellationToken()
        self.policy = MergePolicy(self.schema)
        self.state: SectionDraft | None = None
        self.error: str | None = None

    async def open(self) -> SectionDraft | None:
        """Hydrate from the local draft, falling back to the remote record.

        Returns None if the session was cancelled while waiting.
        """
        drafts = self.engine.drafts
        draft = await drafts.get(self.entity_id, self.schema.kind)

        remote: SectionDraft | None = None
        if draft is None or not draft.has_content():
            try:
                remote = await fetch_remote(
                    self.engine.client, self.engine.resolver, self.schema, self.entity_id
                )
            except TransportError as e:
                logger.warning(
                    "Failed to prefill %s for %s: %s", self.schema.kind.value, self.entity_id, e
                )
                self.error = str(e)

        if is_cancelled(self.cancel):
            logger.debug("Dropping hydration of %s/%s", self.entity_id, self.schema.kind.value)
            return None

        state = self.policy.choose(self.entity_id, draft, remote)
        await drafts.put(state)
        self.state = state
        return state

    def close(self) -> None:
        """The view went away; results still in flight will be dropped."""
        self.cancel.cancel()

    def _require(self) -> SectionDraft:
        if self.state is None:
            raise SectionNotLoaded(f"{self.schema.kind.value} for {self.entity_id} is not open")
        return self.state

    async def _persist(self) -> None:
        state = self._require()
        state.touch()
        await self.engine.drafts.put(state)

    def _coerce(self, spec: FieldSpec, value: Any) -> Any:
        if spec.kind == FieldKind.YES_NO:
            return normalize_yes_no(value)
        if spec.kind == FieldKind.FLAG:
            return normalize_flag(value)
        if spec.kind in (FieldKind.CHOICE, FieldKind.CHOICE_LIST):
            return self._coerce_choice(spec, value)
        return "" if value is None else str(value)

    def _coerce_choice(self, spec: FieldSpec, value: Any) -> Any:
        items = value if isinstance(value, (list, tuple)) else [value]
        chosen = []
        for item in items:
            if item is None or str(item).strip() == "":
                continue
            choice = normalize_choice(spec, item)
            if not choice:
                raise ValueError(f"{item!r} is not one of {', '.join(spec.choices)}")
            chosen.append(choice)
        if spec.kind == FieldKind.CHOICE_LIST:
            return list(dict.fromkeys(chosen))
        if len(chosen) > 1:
            raise ValueError(f"{spec.name} takes a single choice")
        return chosen[0] if chosen else ""

    def _entry(self, entry_id: str) -> DraftEntry:
        entry = self._require().find_entry(entry_id)
        if entry is None:
            raise KeyError(f"No entry {entry_id!r} in {self.schema.kind.value}")
        return entry

    async def set_value(self, name: str, value: Any) -> bool:
        """Set a non-asset field. Returns False if nothing changed.

        Choice fields accept any spelling the hydration accepts and raise
        ``ValueError`` for an answer outside their choices.
        """
        state = self._require()
        spec = self.schema.get_field(name)
        if spec.is_asset:
            raise ValueError(f"{name} is an asset field, use replace_asset()")
        new = self._coerce(spec, value)
        if state.values.get(name) == new:
            return False
        state.values[name] = new
        await self._persist()
        return True

    async def replace_asset(self, name: str, uri: str | None, slot: int | None = None) -> bool:
        """Point an asset field (or one slot of an asset list) at ``uri``."""
        state = self._require()
        spec = self.schema.get_field(name)
        new = AssetReference.parse(uri)
        new_uri = new.uri if new else None

        if spec.kind == FieldKind.ASSET:
            old = state.values.get(name)
            if old == new_uri:
                return False
            self.engine.tracker.on_replace(state, old, new_uri)
            state.values[name] = new_uri
        elif spec.kind == FieldKind.ASSET_LIST:
            if slot is None or not 0 <= slot < spec.slots:
                raise IndexError(f"{name} has slots 0..{spec.slots - 1}")
            slots = list(state.values.get(name) or spec.empty_value())
            slots.extend([None] * (spec.slots - len(slots)))
            if slots[slot] == new_uri:
                return False
            self.engine.tracker.on_replace(state, slots[slot], new_uri)
            slots[slot] = new_uri
            state.values[name] = slots
        else:
            raise ValueError(f"{name} is not an asset field")

        await self._persist()
        return True

    async def add_entry(self) -> DraftEntry:
        state = self._require()
        if not self.schema.is_repeatable:
            raise ValueError(f"{self.schema.kind.value} has no repeatable entries")
        entry = DraftEntry(values=self.schema.empty_entry_values())
        state.entries.append(entry)
        await self._persist()
        return entry

    async def remove_entry(self, entry_id: str) -> bool:
        """Remove an entry; the last remaining one is always kept."""
        state = self._require()
        entry = self._entry(entry_id)
        if len(state.entries) <= 1:
            return False
        for spec in self.schema.entry.fields if self.schema.entry else ():
            if spec.is_asset:
                self.engine.tracker.on_discard(state, entry.values.get(spec.name))
        state.entries = [e for e in state.entries if e.id != entry_id]
        await self._persist()
        return True

    async def set_entry_value(self, entry_id: str, name: str, value: Any) -> bool:
        entry = self._entry(entry_id)
        spec = self.schema.get_field(name)
        if spec.is_asset:
            raise ValueError(f"{name} is an asset field, use replace_entry_asset()")
        new = self._coerce(spec, value)
        if entry.values.get(name) == new:
            return False
        entry.values[name] = new
        await self._persist()
        return True

    async def replace_entry_asset(self, entry_id: str, name: str, uri: str | None) -> bool:
        state = self._require()
        entry = self._entry(entry_id)
        new = AssetReference.parse(uri)
        new_uri = new.uri if new else None
        old = entry.values.get(name)
        if old == new_uri:
            return False
        self.engine.tracker.on_replace(state, old, new_uri)
        entry.values[name] = new_uri
        await self._persist()
        return True

    async def reset(self) -> SectionDraft:
        """Blank every field, keeping the remote id and deletion bookkeeping."""
        state = self._require()
        for spec in self.schema.fields:
            if spec.kind == FieldKind.ASSET:
                self.engine.tracker.on_discard(state, state.values.get(spec.name))
            elif spec.kind == FieldKind.ASSET_LIST:
                for uri in state.values.get(spec.name) or []:
                    self.engine.tracker.on_discard(state, uri)
        if self.schema.entry is not None:
            for entry in state.entries:
                for spec in self.schema.entry.fields:
                    if spec.is_asset:
                        self.engine.tracker.on_discard(state, entry.values.get(spec.name))

        state.values = self.schema.empty_values()
        state.entries = []
        self.policy.ensure_entry(state)
        await self._persist()
        return state

    async def save(self) -> str | None:
        """Submit the section; None if a save is already running.

        Raises ``ValidationFailed``, ``TransportError`` or ``SectionReadOnly``
        for the caller to show. Afterwards, failed or not, the session
        reflects what the store holds.
        """
        self._require()
        try:
            remote_id = await self.engine.pipeline.submit(self.entity_id, self.schema.kind)
        except InspectionSyncError:
            await self._reload()
            raise
        if remote_id is not None:
            await self._reload()
        return remote_id

    async def _reload(self) -> None:
        if is_cancelled(self.cancel):
            return
        stored = await self.engine.drafts.get(self.entity_id, self.schema.kind)
        if stored is not None:
            self.state = stored


class SyncEngine:
    """
    Entry point wiring storage, transport and policies together.

    Collaborators are injected so tests can pass in-memory fakes;
    ``SyncEngine.create`` builds the durable SQLite-backed setup.
    """

    def __init__(
        self,
        client: RemoteClient,
        drafts: DraftStore,
        list_cache: ListCache,
        settings: Settings | None = None,
        read_asset: AssetReader = read_local_asset,
        backend: BaseStore | None = None,
    ):
        self.settings = settings or Settings()
        self.client = client
        self.drafts = drafts
        self.list_cache = list_cache
        self.resolver = AliasResolver()
        self.tracker = AssetDeletionTracker()
        self.pipeline = SubmissionPipeline(client, drafts, self.tracker, read_asset, self.resolver)
        self._backend = backend

    @classmethod
    async def create(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> SyncEngine:
        backend = SQLiteStore(settings.database_path)
        await backend.initialize()
        return cls(
            client=RemoteClient.from_settings(settings, transport=transport),
            drafts=DraftStore(backend),
            list_cache=ListCache(backend),
            settings=settings,
            backend=backend,
        )

    async def close(self) -> None:
        if self._backend is not None:
            await self._backend.close()

    def session(
        self,
        entity_id: str,
        section: SectionKind | str,
        cancel: CancellationToken | None = None,
    ) -> SectionSession:
        return SectionSession(self, entity_id, section, cancel)

    async def open_section(
        self,
        entity_id: str,
        section: SectionKind | str,
        cancel: CancellationToken | None = None,
    ) -> SectionSession:
        session = self.session(entity_id, section, cancel)
        await session.open()
        return session

    async def submit(self, entity_id: str, section: SectionKind | str) -> str | None:
        return await self.pipeline.submit(entity_id, section)

    async def resolve_inspector(self, full_name: str | None) -> str | None:
        """Match the operator's name against the evaluator directory."""
        if not full_name:
            return None
        try:
            data = await self.client.fetch_json(EVALUATORS_ENDPOINT)
        except TransportError as e:
            logger.warning("Failed to load evaluators: %s", e)
            return full_name
        evaluators = data.get("evaluators")
        return match_evaluator(full_name, evaluators if isinstance(evaluators, list) else [])

    async def invalidate_slots(self) -> None:
        await self.list_cache.invalidate(SLOTS_CACHE_KEY)

    async def load_slots(
        self,
        inspector_name: str | None = None,
        is_admin: bool = False,
        refresh: bool = False,
        cancel: CancellationToken | None = None,
    ) -> ListResult | None:
        """Calendar slots, from cache while fresh, otherwise refetched in full.

        Returns None if cancelled mid-fetch. A failed fetch leaves the cache
        untouched and reports the error alongside the last cached items.
        """
        if refresh:
            await self.invalidate_slots()

        cached, is_fresh = await self.list_cache.read(SLOTS_CACHE_KEY, self.settings.list_ttl_ms)
        if is_fresh:
            logger.debug("Serving %d cached slots", len(cached))
            return ListResult(items=cached, from_cache=True)

        accumulator = PaginatedAccumulator(
            self.client.page_fetcher(SLOTS_ENDPOINT), page_size=self.settings.page_size
        )
        try:
            if not is_admin:
                inspector_name = await self.resolve_inspector(inspector_name)
            raw = await accumulator.fetch_all({"status": True}, cancel=cancel)
        except TransportError as e:
            logger.warning("Failed to load slots: %s", e)
            return ListResult(items=cached, from_cache=True, error=str(e))

        if raw is None or is_cancelled(cancel):
            return None

        items = [
            slot.model_dump(mode="json")
            for slot in visible_slots(raw, inspector_name=inspector_name, is_admin=is_admin)
        ]
        await self.list_cache.write(SLOTS_CACHE_KEY, items)
        return ListResult(items=items, from_cache=False)
