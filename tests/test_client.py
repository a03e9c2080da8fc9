"""Tests for the httpx-backed remote client."""

import json

import httpx
import pytest


def make_client(handler, token="t0k3n"):
    from inspection_sync.client import RemoteClient

    return RemoteClient("https://api.test/", token=token, transport=httpx.MockTransport(handler))


class TestRemoteClient:
    """Tests for RemoteClient requests and error mapping."""

    @pytest.mark.asyncio
    async def test_fetch_page(self):
        """Test paging params, headers and the count field."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"success": True, "data": {"allSlots": [{"id": 1}, {"id": 2}], "count": 60}},
            )

        page = await make_client(handler).fetch_page(
            "/api/view-inspection-slots", {"status": True}, limit=25, offset=50
        )

        assert page.items == [{"id": 1}, {"id": 2}]
        assert page.total == 60
        request = seen[0]
        assert request.url.path == "/api/view-inspection-slots"
        assert request.url.params["limit"] == "25"
        assert request.url.params["offset"] == "50"
        assert request.url.params["status"] == "true"
        assert request.headers["Authorization"] == "Bearer t0k3n"

    @pytest.mark.asyncio
    async def test_missing_or_bogus_count(self):
        """Test that an absent or non-integer count is treated as unknown."""
        bodies = iter(
            [
                {"data": {"allSlots": []}},
                {"data": {"allSlots": [], "count": True}},
                {"data": {"allSlots": "nope", "count": "60"}},
            ]
        )

        def handler(request):
            return httpx.Response(200, json=next(bodies))

        client = make_client(handler)
        for _ in range(3):
            page = await client.fetch_page("/api/view-inspection-slots", {}, 25, 0)
            assert page.items == []
            assert page.total is None

    @pytest.mark.asyncio
    async def test_no_token_no_auth_header(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {}})

        await make_client(handler, token=None).fetch_json("/api/view-evaluator-list")
        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_fetch_detail(self):
        """Test that the entity id is sent as sellCarId and data is unwrapped."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"id": "insp-9", "engine": {}}})

        data = await make_client(handler).fetch_detail("/api/view-inspection", "car-1")
        assert data == {"id": "insp-9", "engine": {}}
        assert seen[0].url.params["sellCarId"] == "car-1"

    @pytest.mark.asyncio
    async def test_error_status_uses_server_message(self):
        """Test that a non-2xx response raises with the server's message."""
        from inspection_sync.errors import TransportError

        def handler(request):
            return httpx.Response(400, json={"success": False, "message": "Invalid sellCarId"})

        with pytest.raises(TransportError) as exc:
            await make_client(handler).fetch_detail("/api/view-inspection", "x")
        assert str(exc.value) == "Invalid sellCarId"
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_error_status_without_body(self):
        from inspection_sync.errors import TransportError

        def handler(request):
            return httpx.Response(503, text="upstream down")

        with pytest.raises(TransportError) as exc:
            await make_client(handler).fetch_json("/api/view-evaluator-list")
        assert exc.value.status_code == 503
        assert exc.value.body == "upstream down"
        assert "503" in str(exc.value)

    @pytest.mark.asyncio
    async def test_network_error(self):
        """Test that connection failures surface as TransportError."""
        from inspection_sync.errors import TransportError

        def handler(request):
            raise httpx.ConnectError("Network unreachable", request=request)

        with pytest.raises(TransportError) as exc:
            await make_client(handler).fetch_json("/api/view-evaluator-list")
        assert exc.value.status_code is None
        assert isinstance(exc.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_non_json_success_is_empty(self):
        def handler(request):
            return httpx.Response(200, text="<html>ok</html>")

        assert await make_client(handler).fetch_json("/api/anything") == {}

    @pytest.mark.asyncio
    async def test_submit_multipart(self):
        """Test that text fields and uploads share one multipart body."""
        from inspection_sync.client import UploadPart

        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"success": True, "data": {"id": "remote-7"}})

        body = await make_client(handler).submit(
            "/api/add-engine-inspection",
            {"id": "insp-9", "sellCarId": "car-1", "Reports": json.dumps({"a": 1})},
            [UploadPart("engine", "engine.jpg", b"\xff\xd8", "image/jpeg")],
        )

        assert body["data"]["id"] == "remote-7"
        request = seen[0]
        assert request.method == "POST"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        content = request.read()
        assert b'name="sellCarId"' in content
        assert b'name="Reports"' in content
        assert b'name="engine"; filename="engine.jpg"' in content
        assert b"Content-Type: image/jpeg" in content

    @pytest.mark.asyncio
    async def test_submit_without_uploads_is_still_multipart(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {}})

        await make_client(handler).submit("/api/add-functions-inspection", {"id": "1"}, [])
        assert seen[0].headers["Content-Type"].startswith("multipart/form-data")

    @pytest.mark.asyncio
    async def test_page_fetcher(self):
        """Test a bound fetcher for use by the accumulator."""
        from inspection_sync.sync import PaginatedAccumulator

        items = [{"id": i} for i in range(30)]

        def handler(request):
            offset = int(request.url.params["offset"])
            limit = int(request.url.params["limit"])
            return httpx.Response(200, json={"data": {"allSlots": items[offset : offset + limit]}})

        fetcher = make_client(handler).page_fetcher("/api/view-inspection-slots")
        assert await PaginatedAccumulator(fetcher, page_size=25).fetch_all() == items
