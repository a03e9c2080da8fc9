"""
Fetching and projecting the remote record of one section.
"""

from __future__ import annotations

import logging

from inspection_sync.client import RemoteClient
from inspection_sync.errors import TransportError
from inspection_sync.schema.models import SectionDraft
from inspection_sync.schema.sections import SectionSchema
from inspection_sync.sync.aliases import MISSING, AliasResolver

logger = logging.getLogger(__name__)


async def fetch_remote(
    client: RemoteClient,
    resolver: AliasResolver,
    schema: SectionSchema,
    entity_id: str,
) -> SectionDraft | None:
    """Project the first detail endpoint whose payload carries the section.

    Later endpoints are only asked when an earlier one failed or came back
    without the section. If none carries it, the first usable projection
    (possibly just a remote id) is returned. Raises the last
    ``TransportError`` only when every endpoint failed.
    """
    fallback: SectionDraft | None = None
    error: TransportError | None = None
    answered = False

    for endpoint in schema.detail_endpoints:
        try:
            payload = await client.fetch_detail(endpoint, entity_id)
        except TransportError as e:
            logger.warning(
                "Failed to fetch %s for %s from %s: %s", schema.kind.value, entity_id, endpoint, e
            )
            error = e
            continue

        answered = True
        projection = resolver.project(schema, entity_id, payload)
        if resolver.section_container(schema, payload) is not MISSING:
            return projection
        if fallback is None:
            fallback = projection

    if not answered and error is not None:
        raise error
    return fallback
