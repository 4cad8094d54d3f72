"""
livechat runner

Follows the live chat of the target configured in the environment
(TARGET_LIVE_ID, TARGET_CHANNEL_ID or TARGET_HANDLE) and logs every chat
item until the chat ends or the process is interrupted.

    TARGET_HANDLE=@somechannel python -m livechat.main
"""

import asyncio
from typing import Optional

from livechat.config import settings
from livechat.ingest.poller import LiveChat
from livechat.schemas.chat import ChatItem, EmojiRun, TextRun
from livechat.schemas.options import VideoDetails
from livechat.utils.logging import configure_logging, get_logger

logger = get_logger(__name__, category="system")
chat_logger = get_logger(f"{__name__}.chat", category="chat")


def format_runs(runs) -> str:
    parts = []
    for run in runs:
        if isinstance(run, TextRun):
            parts.append(run.text)
        elif isinstance(run, EmojiRun):
            parts.append(run.emoji_text)
    return "".join(parts)


def describe_chat_item(item: ChatItem) -> str:
    """One log line per chat item."""
    name = item.author.name or item.author.channel_id
    if item.type == "message":
        return f"{name}: {format_runs(item.message)}"
    if item.type == "superchat":
        return f"[{item.superchat.amount}] {name}: {format_runs(item.message)}"
    if item.type == "supersticker":
        return f"[{item.superchat.amount}] {name} sent {item.superchat.sticker.alt or 'a sticker'}"
    if item.type == "membership-join":
        return f"{name} joined: {format_runs(item.join_message)}"
    if item.type == "membership-milestone":
        return f"{name} {format_runs(item.milestone_message)}: {format_runs(item.message)}"
    if item.type == "membership-gift":
        return f"{name} {format_runs(item.gift_message)}"
    return f"{name} {format_runs(item.redeem_message)}"


async def run(chat: LiveChat) -> None:
    """Run one chat session to completion."""
    finished = asyncio.Event()

    def on_start(live_id: str, details: Optional[VideoDetails]) -> None:
        title = details.title if details else live_id
        logger.info(f"Following live chat of {title}")

    def on_end(reason: Optional[str]) -> None:
        logger.info(f"Live chat ended: {reason or 'stopped'}")
        finished.set()

    def on_error(err: Exception) -> None:
        logger.error(f"Live chat error: {err}")

    chat.on("start", on_start)
    chat.on("chat", lambda item: chat_logger.info(describe_chat_item(item)))
    chat.on("end", on_end)
    chat.on("error", on_error)

    async with chat:
        if not await chat.start():
            return
        await finished.wait()


async def main() -> None:
    configure_logging()
    chat = LiveChat(
        channel_id=settings.target_channel_id,
        live_id=settings.target_live_id,
        handle=settings.target_handle,
    )
    try:
        await run(chat)
    except asyncio.CancelledError:
        chat.stop("Interrupted.")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted")
