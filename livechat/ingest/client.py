"""
YouTube HTTP transport

Default page fetcher and batch fetcher for the poller. Both raise httpx
errors unchanged (httpx.TimeoutException, httpx.HTTPStatusError) so the
poller's retry policy can tell timeouts and 503s apart from other failures.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from livechat.config import settings
from livechat.schemas.options import ChatTarget, FetchOptions
from livechat.utils.logging import get_logger

logger = get_logger(__name__, category="http")

LIVE_CHAT_PATH = "/youtubei/v1/live_chat/get_live_chat"
CLIENT_NAME = "WEB"


class YouTubeClient:
    """Thin async client for the watch page and the get_live_chat endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Site root (defaults to settings.youtube_base_url)
            timeout: Request timeout in seconds (defaults to settings.request_timeout_seconds)
            transport: Optional httpx transport, used by tests to mock responses
        """
        self.base_url = (base_url or settings.youtube_base_url).rstrip("/")
        self.http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
            headers={"User-Agent": settings.user_agent},
            follow_redirects=True,
            transport=transport,
        )

    async def fetch_live_page(self, target: ChatTarget) -> str:
        """GET the page that carries the chat bootstrap data."""
        path = target.page_path()
        logger.debug(f"Fetching live page {path}")
        response = await self.http_client.get(path)
        response.raise_for_status()
        return response.text

    async def fetch_chat(self, options: FetchOptions) -> Dict[str, Any]:
        """POST one get_live_chat request for the current continuation."""
        payload = {
            "context": {
                "client": {
                    "clientName": CLIENT_NAME,
                    "clientVersion": options.client_version,
                }
            },
            "continuation": options.continuation,
        }
        response = await self.http_client.post(
            LIVE_CHAT_PATH, params={"key": options.api_key}, json=payload
        )
        response.raise_for_status()
        return response.json()

    async def aclose(self) -> None:
        await self.http_client.aclose()
