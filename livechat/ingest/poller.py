"""
Live Chat Poller

Bootstraps a chat session from the live page, then repeatedly fetches the
next batch of chat actions with the current continuation token.

Scheduling is timer driven: each timer fires exactly one tick, and the tick
arms the next timer only after its batch has been fully handled, so there is
never more than one pending timer or in-flight fetch per poller.

Error policy per tick:
- ChatEndedError: stop with "Chat ended."
- timeout / HTTP 503: retried up to max_retries times, delay = interval * attempt
- anything else: reported on the error channel and polling continues at the
  base interval (fail-open; a bad batch never ends the session by itself)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from livechat.config import settings
from livechat.errors import ActionParseError, ChatEndedError
from livechat.ingest.bootstrap import get_options_from_live_page
from livechat.ingest.client import YouTubeClient
from livechat.ingest.parser import parse_chat_data
from livechat.schemas.options import ChatTarget, FetchOptions
from livechat.utils.logging import get_logger

logger = get_logger(__name__, category="poller")

CHAT_ENDED_REASON = "Chat ended."
CONTINUATION_EXHAUSTED_REASON = "Continuation exhausted."

EVENTS = ("start", "chat", "end", "error")

PageFetcher = Callable[[ChatTarget], Awaitable[str]]
BatchFetcher = Callable[[FetchOptions], Awaitable[Dict[str, Any]]]


class Phase(str, Enum):
    IDLE = "idle"
    STARTING = "starting"  # page fetch / bootstrap in flight
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class PollerState:
    """Mutable session state, owned by a single LiveChat."""

    phase: Phase = Phase.IDLE
    options: Optional[FetchOptions] = None
    retry: int = 0
    timer: Optional[asyncio.TimerHandle] = None
    # Bumped on every start/stop; a tick started under an older value is stale
    generation: int = 0


def is_transient_error(err: BaseException) -> bool:
    """Timeouts and HTTP 503 are worth retrying with backoff."""
    if isinstance(err, (httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)):
        return True
    return isinstance(err, httpx.HTTPStatusError) and err.response.status_code == 503


class LiveChat:
    """
    Polls one YouTube live chat and emits its items to registered listeners.

    Events:
        start(live_id, details): session bootstrapped
        chat(item): one per chat item, in upstream order
        end(reason): session stopped
        error(err): bootstrap failure, fetch failure or malformed action

    Usage:
        chat = LiveChat(handle="@somechannel")
        chat.on("chat", lambda item: print(item.author.name, item.message))
        await chat.start()
    """

    def __init__(
        self,
        channel_id: Optional[str] = None,
        live_id: Optional[str] = None,
        handle: Optional[str] = None,
        *,
        interval: Optional[float] = None,
        max_retries: Optional[int] = None,
        page_fetcher: Optional[PageFetcher] = None,
        batch_fetcher: Optional[BatchFetcher] = None,
    ):
        """
        Initialize the poller.

        Args:
            channel_id: Channel whose current live stream should be followed
            live_id: Video id of the live stream
            handle: Channel handle, with or without the leading '@'
            interval: Base delay between fetches in seconds (defaults to settings.poll_interval_seconds)
            max_retries: Transient failures retried in a row (defaults to settings.max_retries)
            page_fetcher: Async callable returning the live page HTML for a target
            batch_fetcher: Async callable returning the get_live_chat JSON for fetch options

        Raises:
            ValueError: Not exactly one of channel_id, live_id, handle was given
        """
        self.target = ChatTarget(channel_id=channel_id, live_id=live_id, handle=handle)
        self.live_id: Optional[str] = self.target.live_id
        self.interval = interval if interval is not None else settings.poll_interval_seconds
        self.max_retries = max_retries if max_retries is not None else settings.max_retries

        # Only own an HTTP client when a default fetcher is needed
        self._client: Optional[YouTubeClient] = None
        if page_fetcher is None or batch_fetcher is None:
            self._client = YouTubeClient()
        self._page_fetcher: PageFetcher = page_fetcher or self._client.fetch_live_page
        self._batch_fetcher: BatchFetcher = batch_fetcher or self._client.fetch_chat

        self._state = PollerState()
        self._listeners: Dict[str, List[Callable[..., Any]]] = {name: [] for name in EVENTS}
        self._tick_task: Optional[asyncio.Task] = None

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def is_running(self) -> bool:
        return self._state.phase is Phase.RUNNING

    @property
    def retry(self) -> int:
        return self._state.retry

    @property
    def options(self) -> Optional[FetchOptions]:
        return self._state.options

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        """Register a synchronous listener for start, chat, end or error."""
        if event not in self._listeners:
            raise ValueError(f"Unknown event: {event}")
        self._listeners[event].append(callback)

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown event: {event}")
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def _emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(*args)
            except Exception:
                logger.exception(f"Listener for '{event}' raised")

    def _emit_soon(self, event: str, *args: Any) -> None:
        asyncio.get_running_loop().call_soon(self._emit, event, *args)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """
        Bootstrap the session and arm the first poll.

        Returns:
            True when polling started; False if already started or if the
            bootstrap failed (the failure is emitted as an error event)
        """
        if self._state.phase in (Phase.STARTING, Phase.RUNNING):
            return False

        self._state.phase = Phase.STARTING
        try:
            # A fetch left over from the previous session must not overlap the new one
            await self._cancel_tick()
            html = await self._page_fetcher(self.target)
            page = get_options_from_live_page(html)
        except asyncio.CancelledError:
            self._state.phase = Phase.IDLE
            raise
        except Exception as e:
            logger.error(f"Failed to start live chat for {self.target.page_path()}: {e}")
            self._state.phase = Phase.IDLE
            self._emit("error", e)
            return False

        self.live_id = page.live_id
        self._state.options = page.fetch_options()
        self._state.retry = 0
        self._state.generation += 1
        self._state.phase = Phase.RUNNING
        self._arm(self.interval)

        logger.info(f"Live chat started: {page.live_id} ({page.title})")
        self._emit("start", page.live_id, page.details)
        return True

    def stop(self, reason: Optional[str] = None) -> None:
        """Cancel the pending poll and emit end(reason). No-op unless running."""
        if self._state.phase is not Phase.RUNNING:
            return

        self._disarm()
        self._state.generation += 1
        self._state.phase = Phase.STOPPED
        logger.info(f"Live chat stopped: {self.live_id} ({reason or 'no reason'})")
        self._emit("end", reason)

    async def aclose(self) -> None:
        """Stop polling, cancel an in-flight tick and close the owned HTTP client."""
        self.stop()
        await self._cancel_tick()
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "LiveChat":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def _call_later(self, delay: float, callback: Callable[..., None], *args: Any) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback, *args)

    def _arm(self, delay: float) -> None:
        # Re-arming replaces the pending timer, never stacks a second one
        self._disarm()
        self._state.timer = self._call_later(delay, self._on_timer, self._state.generation)

    def _disarm(self) -> None:
        if self._state.timer is not None:
            self._state.timer.cancel()
            self._state.timer = None

    def _on_timer(self, generation: int) -> None:
        self._state.timer = None
        if generation != self._state.generation:
            return
        self._tick_task = asyncio.get_running_loop().create_task(self._execute(generation))

    async def _cancel_tick(self) -> None:
        task = self._tick_task
        self._tick_task = None
        if task is None or task.done() or task is asyncio.current_task():
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            # Only the tick's own cancellation is expected here
            if not task.cancelled():
                raise

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    async def _execute(self, generation: int) -> None:
        """Fetch and translate one batch, emit it, then arm the next poll."""
        state = self._state
        action_errors: List[ActionParseError] = []

        try:
            data = await self._batch_fetcher(state.options)
            chat_items, continuation = parse_chat_data(data, on_error=action_errors.append)
        except ChatEndedError:
            if generation == state.generation:
                self.stop(CHAT_ENDED_REASON)
            return
        except Exception as e:
            if generation != state.generation:
                logger.debug(f"Discarding failure from a stopped session: {e!r}")
                return

            if is_transient_error(e) and state.retry < self.max_retries:
                state.retry += 1
                logger.warning(
                    f"Transient error fetching chat ({e!r}), "
                    f"retry {state.retry}/{self.max_retries}"
                )
                self._arm(self.interval * state.retry)
                return

            # Fail-open: report and keep polling
            logger.error(f"Error fetching chat: {e!r}")
            self._emit_soon("error", e)
            self._arm(self.interval)
            return

        if generation != state.generation:
            logger.debug(f"Discarding batch of {len(chat_items)} items from a stopped session")
            return

        for chat_item in chat_items:
            self._emit("chat", chat_item)
            if generation != state.generation:
                # A listener stopped the session mid-batch
                return

        for err in action_errors:
            logger.warning(f"Skipping malformed chat action: {err}")
            self._emit_soon("error", err)

        state.retry = 0
        if not continuation:
            self.stop(CONTINUATION_EXHAUSTED_REASON)
            return

        state.options.continuation = continuation
        self._arm(self.interval)
