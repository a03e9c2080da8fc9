"""
Paginated accumulation of a remote collection.
"""

from __future__ import annotations

import logging
from typing import Any

from inspection_sync.client import PageFetcher
from inspection_sync.schema.models import PaginationState
from inspection_sync.sync.cancellation import CancellationToken, is_cancelled

logger = logging.getLogger(__name__)


class PaginatedAccumulator:
    """
    Fetches fixed-size pages at increasing offsets until the collection is
    exhausted.

    After each page, in order: a short page ends the run; otherwise a total
    reported by the server ends it once reached. Pages are requested strictly
    one after another, since the total only arrives alongside the first page.
    Any failed page aborts the run and the error propagates; nothing
    accumulated so far is returned.
    """

    def __init__(self, fetch_page: PageFetcher, page_size: int = 25):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._fetch_page = fetch_page
        self.page_size = page_size

    async def fetch_all(
        self,
        filters: dict[str, Any] | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[Any] | None:
        """Return every item, or None if cancelled between pages."""
        state = PaginationState(page_size=self.page_size)
        params = dict(filters or {})

        while True:
            page = await self._fetch_page(params, state.page_size, state.offset)
            if is_cancelled(cancel):
                logger.debug("Accumulation cancelled at offset %d", state.offset)
                return None

            done = state.absorb(list(page.items), page.total)
            logger.debug(
                "Fetched page %d: %d items (accumulated %d, reported total %s)",
                state.requests,
                len(page.items),
                len(state.items),
                state.reported_total,
            )
            if done:
                return state.items
