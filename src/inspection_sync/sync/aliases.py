"""
Alias resolution: map heterogeneous remote field names onto section schemas.

The remote schema has changed shape over time without versioning, so
nothing here raises on a malformed fragment. Missing or oddly typed data
resolves to ``MISSING`` and then to the field's canonical empty value.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from inspection_sync.schema.models import DraftEntry, DraftStatus, SectionDraft
from inspection_sync.schema.sections import FieldKind, FieldSpec, SectionSchema

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel for a key that resolved to nothing."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

YES_VALUES = frozenset({"yes", "y", "true", "1"})
NO_VALUES = frozenset({"no", "n", "false", "0"})
FLAG_YES_VALUES = YES_VALUES | {"completed", "done"}
FLAG_NO_VALUES = NO_VALUES | {"incomplete", "not completed"}
CHOICE_VALUE_KEYS = ("value", "status", "condition")


def _norm_key(key: Any) -> str:
    return " ".join(str(key).split()).lower()


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def normalize_yes_no(value: Any) -> str:
    """Collapse the many spellings of a yes/no answer to "Yes", "No" or ""."""
    if value is None or value is MISSING:
        return ""
    text = str(value).strip().lower()
    if text in YES_VALUES:
        return "Yes"
    if text in NO_VALUES:
        return "No"
    return ""


def normalize_flag(value: Any) -> str:
    """Like ``normalize_yes_no`` but also reads booleans and completion words."""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if value is None or value is MISSING:
        return ""
    text = " ".join(str(value).split()).lower()
    if text in FLAG_YES_VALUES:
        return "Yes"
    if text in FLAG_NO_VALUES:
        return "No"
    return ""


def normalize_choice(spec: FieldSpec, value: Any) -> str:
    """Map a free-form answer onto one of ``spec.choices``.

    An exact (case-insensitive) match wins, then a yes/no spelling when the
    choices include "Yes" or "No", then the first hint whose substring
    occurs in the answer. Anything else becomes ``spec.choice_fallback``.
    """
    if value is None or value is MISSING or isinstance(value, (Mapping, list)):
        return ""
    text = " ".join(str(value).split())
    if not text:
        return ""
    lowered = text.lower()
    for choice in spec.choices:
        if lowered == choice.lower():
            return choice
    yes_no = normalize_yes_no(text)
    if yes_no and yes_no in spec.choices:
        return yes_no
    for hint, choice in spec.choice_hints:
        if hint in lowered:
            return choice
    return spec.choice_fallback


class AliasResolver:
    """
    Resolves canonical fields against a raw remote record.

    Each key is tried exactly first, then case- and whitespace-insensitively,
    before moving on to the next alias. Null and blank values count as
    absent so an older spelling further down the list can still match.
    """

    def pick(self, fragment: Any, keys: Iterable[str]) -> Any:
        """Return the first value found under any of ``keys``, or MISSING."""
        if not isinstance(fragment, Mapping):
            return MISSING

        normalized: dict[str, Any] | None = None
        for key in keys:
            value = fragment.get(key)
            if _present(value):
                return value

            if normalized is None:
                normalized = {}
                for raw_key, raw_value in fragment.items():
                    if _present(raw_value):
                        normalized.setdefault(_norm_key(raw_key), raw_value)
            value = normalized.get(_norm_key(key))
            if value is not None:
                return value

        return MISSING

    def pick_path(self, fragment: Any, path: Iterable[Iterable[str]]) -> Any:
        """Walk nested containers, each step given as its own alias list."""
        current = fragment
        for keys in path:
            current = self.pick(current, keys)
            if current is MISSING:
                return MISSING
        return current

    def section_container(self, schema: SectionSchema, payload: Any) -> Any:
        """Locate the section inside a detail payload.

        Tries the first inspection record, then the payload root. Wrapper
        keys listed in ``schema.section_unwrap`` are stepped into when present.
        """
        candidates: list[Any] = []
        if isinstance(payload, Mapping):
            inspections = payload.get("allInspections")
            if isinstance(inspections, list) and inspections:
                candidates.append(inspections[0])
            candidates.append(payload)

        for candidate in candidates:
            section = self.pick(candidate, schema.section_keys)
            if isinstance(section, Mapping):
                inner = self.pick(section, schema.section_unwrap)
                return inner if isinstance(inner, Mapping) else section
        return MISSING

    def remote_id(self, payload: Any, section: Any = MISSING) -> str | None:
        """Record id: first inspection, then payload root, then the section itself."""
        if not isinstance(payload, Mapping):
            return None
        inspections = payload.get("allInspections")
        if isinstance(inspections, list) and inspections and isinstance(inspections[0], Mapping):
            first_id = inspections[0].get("id")
            if first_id not in (None, ""):
                return str(first_id)
        top_id = payload.get("id")
        if top_id not in (None, ""):
            return str(top_id)
        if isinstance(section, Mapping) and section.get("id") not in (None, ""):
            return str(section["id"])
        return None

    def _containers(self, schema: SectionSchema, section: Any, spec: FieldSpec) -> list[Any]:
        # Full group path first, then each shorter suffix, then any extra
        # groups, then the section root.
        containers: list[Any] = []
        group = spec.group
        for start in range(len(group)):
            path = [schema.aliases_for_group(g) for g in group[start:]]
            container = self.pick_path(section, path)
            if isinstance(container, Mapping):
                containers.append(container)
        for extra in spec.also_in:
            container = self.pick(section, schema.aliases_for_group(extra))
            if isinstance(container, Mapping):
                containers.append(container)
        if not spec.group_only:
            containers.append(section)
        return containers

    def resolve(self, schema: SectionSchema, spec: FieldSpec, section: Any) -> Any:
        """Raw value of one field, looked up through its group aliases."""
        for container in self._containers(schema, section, spec):
            value = self.pick(container, spec.keys)
            if value is not MISSING:
                return value
        return MISSING

    def canonical(self, spec: FieldSpec, value: Any) -> Any:
        """Coerce a raw value to the field's type; MISSING becomes empty."""
        if value is MISSING or value is None:
            return spec.empty_value()

        if spec.kind == FieldKind.YES_NO:
            return normalize_yes_no(value)
        if spec.kind == FieldKind.FLAG:
            return normalize_flag(value)
        if spec.kind == FieldKind.CHOICE:
            if isinstance(value, Mapping):
                value = self.pick(value, CHOICE_VALUE_KEYS)
            return normalize_choice(spec, value)
        if spec.kind == FieldKind.CHOICE_LIST:
            items = value if isinstance(value, list) else [value]
            chosen = [normalize_choice(spec, item) for item in items]
            return list(dict.fromkeys(choice for choice in chosen if choice))
        if spec.kind == FieldKind.TEXT:
            if isinstance(value, (Mapping, list)):
                return ""
            return str(value)
        if spec.kind == FieldKind.ASSET:
            return value.strip() if isinstance(value, str) and value.strip() else None

        # Lists have also arrived keyed by position and as comma-joined text.
        if isinstance(value, Mapping):
            value = list(value.values())
        elif isinstance(value, str):
            value = value.split(",")
        slots = spec.empty_value()
        if isinstance(value, list):
            for i, item in enumerate(value[: spec.slots]):
                if isinstance(item, str) and item.strip():
                    slots[i] = item.strip()
        return slots

    def project(self, schema: SectionSchema, entity_id: str, payload: Any) -> SectionDraft | None:
        """Normalize a remote detail payload into a section draft.

        Returns None when the payload carries no trace of the section.
        """
        section = self.section_container(schema, payload)
        remote_id = self.remote_id(payload, section)
        if section is MISSING:
            logger.debug("No %s section in remote payload for %s", schema.kind.value, entity_id)
            if remote_id is None:
                return None
            return SectionDraft(
                entity_id=entity_id,
                section=schema.kind,
                values=schema.empty_values(),
                remote_id=remote_id,
                status=DraftStatus.SYNCED,
            )

        values = {
            spec.name: self.canonical(spec, self.resolve(schema, spec, section))
            for spec in schema.fields
        }

        entries: list[DraftEntry] = []
        if schema.entry is not None:
            rows = self.pick_path(section, [(key,) for key in schema.entry.path])
            if isinstance(rows, list):
                for row in rows:
                    if not isinstance(row, Mapping):
                        continue
                    entries.append(
                        DraftEntry(
                            values={
                                spec.name: self.canonical(spec, self.pick(row, spec.keys))
                                for spec in schema.entry.fields
                            }
                        )
                    )
            elif rows is not MISSING:
                logger.warning("Ignoring non-list %s entries for %s", schema.kind.value, entity_id)

        deleted_files: list[str] = []
        for container in (payload, section):
            found = self.pick(container, schema.deleted_files_keys)
            if isinstance(found, list) and found:
                deleted_files = [url for url in found if isinstance(url, str) and url]
                break

        return SectionDraft(
            entity_id=entity_id,
            section=schema.kind,
            values=values,
            entries=entries,
            deleted_files=list(dict.fromkeys(deleted_files)),
            remote_id=remote_id,
            status=DraftStatus.SYNCED,
        )
