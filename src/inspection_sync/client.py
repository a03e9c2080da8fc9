"""
HTTP client for the remote inspection record store.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from inspection_sync.config import Settings
from inspection_sync.errors import TransportError

logger = logging.getLogger(__name__)

SLOTS_ENDPOINT = "/api/view-inspection-slots"


@dataclass
class Page:
    """One page of a collection and the total count, if the server sent one."""

    items: list[Any] = field(default_factory=list)
    total: int | None = None


PageFetcher = Callable[[dict[str, Any], int, int], Awaitable[Page]]


@dataclass
class UploadPart:
    """One binary part of a multipart submission."""

    name: str
    filename: str
    content: bytes
    mime_type: str


def _count(value: Any) -> int | None:
    # bool is an int subclass; a flag is not a count
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


class RemoteClient:
    """
    Thin async wrapper over httpx for the three endpoint families:
    paginated collections, entity detail and writes (multipart or JSON).

    A bearer token is attached when configured. Transport failures and
    non-2xx responses surface as ``TransportError``; they are never retried
    here.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RemoteClient:
        return cls(
            base_url=settings.base_url,
            token=settings.token,
            timeout=settings.timeout,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "*/*"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        logger.debug("Request %s %s%s (token=%s)", method, self.base_url, path, bool(self.token))
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Request %s %s failed: %s", method, path, e)
            raise TransportError(str(e) or e.__class__.__name__) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            message = ""
            if isinstance(body, Mapping):
                message = str(body.get("message") or "")
            logger.warning(
                "Response error %s %s: status=%s body=%s",
                method,
                path,
                response.status_code,
                response.text[:500],
            )
            raise TransportError(
                message or f"Request failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        if not isinstance(body, Mapping):
            logger.warning("Non-JSON body from %s %s, treating as empty", method, path)
            return {}
        return dict(body)

    @staticmethod
    def _data(body: Mapping[str, Any]) -> dict[str, Any]:
        data = body.get("data")
        return dict(data) if isinstance(data, Mapping) else {}

    async def fetch_page(
        self,
        path: str,
        filters: Mapping[str, Any],
        limit: int,
        offset: int,
        items_key: str = "allSlots",
    ) -> Page:
        """Fetch one page of a collection."""
        params = {**filters, "limit": limit, "offset": offset}
        data = self._data(await self._request("GET", path, params=params))
        items = data.get(items_key)
        return Page(
            items=list(items) if isinstance(items, list) else [],
            total=_count(data.get("count")),
        )

    def page_fetcher(self, path: str, items_key: str = "allSlots") -> PageFetcher:
        """Bind a collection endpoint for use by the accumulator."""

        async def fetch(filters: dict[str, Any], limit: int, offset: int) -> Page:
            return await self.fetch_page(path, filters, limit, offset, items_key=items_key)

        return fetch

    async def fetch_detail(self, path: str, entity_id: str) -> dict[str, Any]:
        """Fetch the denormalized record for one entity (the ``data`` object)."""
        return self._data(await self._request("GET", path, params={"sellCarId": entity_id}))

    async def fetch_json(self, path: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Fetch an arbitrary JSON endpoint and return its ``data`` object."""
        return self._data(await self._request("GET", path, params=dict(params or {})))

    async def submit(
        self,
        path: str,
        fields: Mapping[str, str],
        uploads: list[UploadPart],
    ) -> dict[str, Any]:
        """POST a multipart form and return the decoded response body."""
        # Text fields go in as filename-less parts so the body is multipart
        # even when nothing is uploaded.
        parts: list[tuple[str, tuple[Any, ...]]] = [
            (name, (None, value)) for name, value in fields.items()
        ]
        parts.extend(
            (part.name, (part.filename, part.content, part.mime_type)) for part in uploads
        )
        logger.info("Submitting %s with %d upload(s)", path, len(uploads))
        return await self._request("POST", path, files=parts)

    async def submit_json(self, path: str, body: Mapping[str, Any]) -> dict[str, Any]:
        """POST a JSON body and return the decoded response body."""
        logger.info("Submitting %s as JSON", path)
        return await self._request("POST", path, json=dict(body))
