"""Unit tests for the YouTube HTTP transport."""
import json

import httpx
import pytest

from livechat.ingest.client import LIVE_CHAT_PATH, YouTubeClient
from livechat.ingest.poller import is_transient_error
from livechat.schemas.options import ChatTarget, FetchOptions


def make_client(handler):
    return YouTubeClient(base_url="https://yt.test", transport=httpx.MockTransport(handler))


@pytest.mark.unit
class TestChatTarget:
    """Test target validation and page paths."""

    def test_requires_one_identity(self):
        with pytest.raises(ValueError):
            ChatTarget()

    def test_rejects_two_identities(self):
        with pytest.raises(ValueError):
            ChatTarget(live_id="abc", handle="@x")

    @pytest.mark.parametrize(
        "kwargs, path",
        [
            ({"channel_id": "UC123"}, "/channel/UC123/live"),
            ({"live_id": "abc123"}, "/watch?v=abc123"),
            ({"handle": "@someone"}, "/@someone/live"),
            ({"handle": "someone"}, "/@someone/live"),
        ],
    )
    def test_page_path(self, kwargs, path):
        assert ChatTarget(**kwargs).page_path() == path


@pytest.mark.unit
@pytest.mark.asyncio
class TestYouTubeClient:
    """Test YouTubeClient requests."""

    async def test_fetch_live_page(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text="<html>page</html>")

        client = make_client(handler)
        try:
            html = await client.fetch_live_page(ChatTarget(live_id="abc123"))
        finally:
            await client.aclose()

        assert html == "<html>page</html>"
        assert seen[0].method == "GET"
        assert seen[0].url.path == "/watch"
        assert seen[0].url.params["v"] == "abc123"
        assert "Mozilla" in seen[0].headers["User-Agent"]

    async def test_fetch_chat(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"continuationContents": {}})

        client = make_client(handler)
        try:
            data = await client.fetch_chat(
                FetchOptions(api_key="KEY", client_version="2.0", continuation="C0")
            )
        finally:
            await client.aclose()

        assert data == {"continuationContents": {}}
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == LIVE_CHAT_PATH
        assert request.url.params["key"] == "KEY"
        assert json.loads(request.content) == {
            "context": {"client": {"clientName": "WEB", "clientVersion": "2.0"}},
            "continuation": "C0",
        }

    async def test_503_is_transient(self):
        client = make_client(lambda request: httpx.Response(503))
        try:
            with pytest.raises(httpx.HTTPStatusError) as exc_info:
                await client.fetch_chat(
                    FetchOptions(api_key="KEY", client_version="2.0", continuation="C0")
                )
        finally:
            await client.aclose()

        assert is_transient_error(exc_info.value)

    async def test_404_is_not_transient(self):
        client = make_client(lambda request: httpx.Response(404))
        try:
            with pytest.raises(httpx.HTTPStatusError) as exc_info:
                await client.fetch_live_page(ChatTarget(handle="@gone"))
        finally:
            await client.aclose()

        assert not is_transient_error(exc_info.value)

    async def test_timeout_is_transient(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)
        try:
            with pytest.raises(httpx.TimeoutException) as exc_info:
                await client.fetch_chat(
                    FetchOptions(api_key="KEY", client_version="2.0", continuation="C0")
                )
        finally:
            await client.aclose()

        assert is_transient_error(exc_info.value)
