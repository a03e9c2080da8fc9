"""
Validation, payload assembly and guarded submission of a section.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

from inspection_sync.client import RemoteClient, UploadPart
from inspection_sync.errors import (
    AssetUnavailable,
    SectionReadOnly,
    TransportError,
    ValidationFailed,
)
from inspection_sync.schema.models import AssetReference, DraftStatus, SectionDraft, SectionKind
from inspection_sync.schema.sections import FieldKind, FieldSpec, SectionSchema, get_schema
from inspection_sync.storage.drafts import DraftStore
from inspection_sync.sync.aliases import AliasResolver
from inspection_sync.sync.assets import (
    AssetDeletionTracker,
    AssetSlot,
    get_asset,
    iter_assets,
    referenced_assets,
    set_asset,
)
from inspection_sync.sync.merge import MergePolicy
from inspection_sync.sync.remote import fetch_remote

logger = logging.getLogger(__name__)

AssetReader = Callable[[AssetReference], Awaitable[bytes]]


async def read_local_asset(ref: AssetReference) -> bytes:
    """Read a device-local file given as a path or ``file://`` URI."""
    path = Path(unquote(urlparse(ref.uri).path)) if ref.uri.startswith("file://") else Path(ref.uri)
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise AssetUnavailable(ref.uri, str(e)) from e


def _filled(spec: FieldSpec, value: Any) -> bool:
    if spec.kind == FieldKind.ASSET:
        return AssetReference.parse(value) is not None
    if spec.kind == FieldKind.ASSET_LIST:
        return isinstance(value, list) and any(AssetReference.parse(v) for v in value)
    if spec.kind == FieldKind.CHOICE_LIST:
        return isinstance(value, list) and any(value)
    return value is not None and str(value).strip() != ""


def _remote_uri(value: Any) -> str:
    ref = AssetReference.parse(value)
    return ref.uri if ref is not None and ref.is_remote else ""


class SubmissionPipeline:
    """
    Turns a stored draft into one write.

    Steps: validate (first missing field wins), upload local assets and
    reference remote ones by URL, attach the pending-deletion set, then
    write once, as a multipart form or, for JSON sections, a JSON body.
    Only one submission per ``(entity, section)`` may be in flight;
    re-entrant calls are dropped, not queued.

    On success the acknowledged deletions are cleared and the draft is
    otherwise kept so the screen still shows what was saved. Assets that
    went up are re-read from the server and swapped for their remote URLs
    so the next save does not upload them again. On failure the draft
    content is left exactly as it was and the error is recorded on it.
    """

    def __init__(
        self,
        client: RemoteClient,
        drafts: DraftStore,
        tracker: AssetDeletionTracker | None = None,
        read_asset: AssetReader = read_local_asset,
        resolver: AliasResolver | None = None,
    ):
        self._client = client
        self._drafts = drafts
        self._tracker = tracker or AssetDeletionTracker()
        self._read_asset = read_asset
        self._resolver = resolver or AliasResolver()
        self._in_flight: set[tuple[str, SectionKind]] = set()

    def is_in_flight(self, entity_id: str, section: SectionKind | str) -> bool:
        return (entity_id, SectionKind(section)) in self._in_flight

    # Validation

    def validate(self, schema: SectionSchema, draft: SectionDraft) -> None:
        """Raise ``ValidationFailed`` naming the first missing field."""
        for spec in schema.fields:
            if not spec.required or not spec.applies(draft.values):
                continue
            if not _filled(spec, draft.values.get(spec.name)):
                raise ValidationFailed(spec.missing_message(), field=spec.name)

        entry = schema.entry
        if entry is None:
            return
        if entry.min_filled_message and not any(e.has_content() for e in draft.entries):
            raise ValidationFailed(entry.min_filled_message)
        for rule in entry.rules:
            when_spec = schema.get_field(rule.when)
            then_spec = schema.get_field(rule.then)
            for row in draft.entries:
                if _filled(when_spec, row.values.get(rule.when)) and not _filled(
                    then_spec, row.values.get(rule.then)
                ):
                    raise ValidationFailed(rule.message, field=rule.then)

    # Payload

    def _report_value(self, spec: FieldSpec, value: Any) -> Any:
        if spec.kind == FieldKind.ASSET:
            return _remote_uri(value)
        if spec.kind == FieldKind.ASSET_LIST:
            slots = value if isinstance(value, list) else []
            return [uri for uri in (_remote_uri(v) for v in slots) if uri]
        if spec.kind == FieldKind.FLAG:
            return value == "Yes"
        if spec.kind == FieldKind.CHOICE_LIST:
            return list(value) if isinstance(value, list) else []
        text = "" if value is None else str(value)
        return text if text.strip() else spec.report_default

    def build_report(self, schema: SectionSchema, draft: SectionDraft) -> dict[str, Any]:
        """Nest canonical labels into the report the write endpoint expects."""
        report: dict[str, Any] = {}
        for spec in schema.fields:
            if spec.depends_on and draft.values.get(spec.depends_on) != "Yes":
                continue
            value = draft.values.get(spec.name)
            if not spec.applies(draft.values):
                value = spec.empty_value()
            target = report
            for group in spec.group:
                target = target.setdefault(group, {})
            target[spec.label] = self._report_value(spec, value)

        if schema.entry is not None:
            report[schema.entry.report_key] = [
                {
                    spec.label: self._report_value(spec, row.values.get(spec.name))
                    for spec in schema.entry.fields
                }
                for row in draft.entries
                if row.has_content()
            ]
        return report

    async def _upload(self, name: str, value: Any) -> UploadPart | None:
        ref = AssetReference.parse(value)
        if ref is None or ref.is_remote:
            return None
        content = await self._read_asset(ref)
        return UploadPart(
            name=name,
            filename=f"{name}.{ref.extension}",
            content=content,
            mime_type=ref.mime_type,
        )

    async def collect_uploads(self, schema: SectionSchema, draft: SectionDraft) -> list[UploadPart]:
        """Binary parts for every local asset, named by field role and index."""
        parts: list[UploadPart | None] = []
        for spec in schema.fields:
            if not spec.is_asset or not spec.upload_name:
                continue
            value = draft.values.get(spec.name)
            if spec.kind == FieldKind.ASSET:
                parts.append(await self._upload(spec.upload_name.format(index=1), value))
            else:
                for i, slot in enumerate(value if isinstance(value, list) else []):
                    parts.append(await self._upload(spec.upload_name.format(index=i + 1), slot))

        if schema.entry is not None:
            rows = [row for row in draft.entries if row.has_content()]
            for i, row in enumerate(rows):
                for spec in schema.entry.fields:
                    if spec.is_asset and spec.upload_name:
                        name = spec.upload_name.format(index=i + 1)
                        parts.append(await self._upload(name, row.values.get(spec.name)))

        return [part for part in parts if part is not None]

    def build_fields(
        self,
        schema: SectionSchema,
        draft: SectionDraft,
        deleted_files: list[str],
    ) -> dict[str, str]:
        return {
            "id": str(draft.remote_id or draft.entity_id),
            "sellCarId": draft.entity_id,
            "Reports": json.dumps(self.build_report(schema, draft)),
            "deletedFiles": json.dumps(deleted_files),
        }

    def build_body(self, schema: SectionSchema, draft: SectionDraft) -> dict[str, Any]:
        """JSON body for sections that are written without a form."""
        return {
            "id": str(draft.remote_id or draft.entity_id),
            "sellCarId": draft.entity_id,
            "Reports": self.build_report(schema, draft),
        }

    @staticmethod
    def _acknowledged_id(body: Mapping[str, Any], draft: SectionDraft) -> str:
        data = body.get("data")
        if isinstance(data, Mapping):
            for key in ("id", "inspectionId", "_id"):
                if data.get(key) not in (None, ""):
                    return str(data[key])
        return str(draft.remote_id or draft.entity_id)

    # Uploaded assets

    def uploaded_urls(
        self,
        schema: SectionSchema,
        submitted: SectionDraft,
        remote: SectionDraft,
        sent_deletions: list[str],
    ) -> dict[AssetSlot, str]:
        """Pair each local asset that went up with the URL the server now holds.

        Fields and entry rows pair by position. List slots pair in order with
        the remote URLs new to that list, because the report only carried its
        filled remote slots. URLs that were just deleted, or that the draft
        already pointed at, are never taken for an upload.
        """
        stale = set(sent_deletions) | referenced_assets(schema, submitted)
        remote_values = dict(iter_assets(schema, remote))
        fresh: dict[str, list[str]] = {}
        pairs: dict[AssetSlot, str] = {}

        for slot, value in iter_assets(schema, submitted):
            ref = AssetReference.parse(value)
            if ref is None or ref.is_remote:
                continue
            if slot.index is None:
                url = _remote_uri(remote_values.get(slot))
                if url and url not in stale:
                    pairs[slot] = url
                continue
            if slot.name not in fresh:
                held = remote.values.get(slot.name)
                fresh[slot.name] = [
                    url
                    for url in (_remote_uri(v) for v in (held if isinstance(held, list) else []))
                    if url and url not in stale
                ]
            if fresh[slot.name]:
                pairs[slot] = fresh[slot.name].pop(0)
        return pairs

    async def _reload_uploads(
        self,
        schema: SectionSchema,
        entity_id: str,
        submitted: SectionDraft,
        sent_deletions: list[str],
    ) -> dict[AssetSlot, str]:
        try:
            remote = await fetch_remote(self._client, self._resolver, schema, entity_id)
        except TransportError as e:
            logger.warning(
                "Saved %s for %s but could not reload uploaded assets: %s",
                schema.kind.value,
                entity_id,
                e,
            )
            return {}
        if remote is None:
            return {}
        return self.uploaded_urls(schema, submitted, remote, sent_deletions)

    @staticmethod
    def _adopt_uploads(
        latest: SectionDraft,
        submitted: SectionDraft,
        uploaded: dict[AssetSlot, str],
    ) -> None:
        for slot, url in uploaded.items():
            local = get_asset(submitted, slot)
            # Replaced again while the write was in flight
            if get_asset(latest, slot) != local:
                continue
            set_asset(latest, slot, AssetReference.parse(local).as_uploaded(url).uri)

    # Submission

    async def submit(self, entity_id: str, section: SectionKind | str) -> str | None:
        """Submit a stored draft and return the remote record id.

        Returns None, without touching the network, if a submission for the
        same section is already in flight.
        """
        schema = get_schema(section)
        key = (entity_id, schema.kind)
        if key in self._in_flight:
            logger.debug("Submission for %s/%s already in flight, ignoring", *key)
            return None

        self._in_flight.add(key)
        try:
            return await self._submit(schema, entity_id)
        finally:
            self._in_flight.discard(key)

    async def _write(
        self,
        schema: SectionSchema,
        draft: SectionDraft,
        uploads: list[UploadPart],
        deleted_files: list[str],
    ) -> dict[str, Any]:
        if schema.json_payload:
            return await self._client.submit_json(
                schema.write_endpoint, self.build_body(schema, draft)
            )
        fields = self.build_fields(schema, draft, deleted_files)
        return await self._client.submit(schema.write_endpoint, fields, uploads)

    async def _submit(self, schema: SectionSchema, entity_id: str) -> str:
        if not schema.is_submittable:
            raise SectionReadOnly(f"{schema.kind.value} is kept as a local draft only")

        draft = await self._drafts.get(entity_id, schema.kind)
        if draft is None:
            draft = MergePolicy(schema).blank(entity_id)

        self.validate(schema, draft)
        uploads = [] if schema.json_payload else await self.collect_uploads(schema, draft)
        sent_deletions = list(draft.deleted_files)
        submitted = draft.model_copy(deep=True)

        draft.status = DraftStatus.PENDING_SYNC
        await self._drafts.put(draft)

        try:
            body = await self._write(schema, draft, uploads, sent_deletions)
        except (Exception, asyncio.CancelledError) as e:
            latest = await self._drafts.get(entity_id, schema.kind) or draft
            latest.status = DraftStatus.DRAFT
            latest.last_sync_error = str(e) or e.__class__.__name__
            await self._drafts.put(latest)
            raise

        remote_id = self._acknowledged_id(body, draft)
        uploaded: dict[AssetSlot, str] = {}
        if uploads:
            uploaded = await self._reload_uploads(schema, entity_id, submitted, sent_deletions)

        latest = await self._drafts.get(entity_id, schema.kind) or draft
        self._tracker.acknowledge(latest, sent_deletions)
        latest.remote_id = remote_id
        latest.last_sync_error = None
        unchanged = latest.values == submitted.values and latest.entries == submitted.entries
        latest.status = DraftStatus.SYNCED if unchanged else DraftStatus.DRAFT
        self._adopt_uploads(latest, submitted, uploaded)
        await self._drafts.put(latest)

        logger.info("Saved %s for %s as %s", schema.kind.value, entity_id, remote_id)
        return remote_id
