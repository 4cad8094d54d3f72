"""
Batch Translator

Turns one get_live_chat response into chat items plus the continuation
token for the next request.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from livechat.errors import ActionParseError, ChatEndedError
from livechat.ingest.renderers import parse_action_to_chat_item
from livechat.schemas.chat import ChatItem


def next_continuation(continuations: Optional[List[Dict[str, Any]]]) -> str:
    """Invalidation token first, then timed token, else empty string."""
    if not continuations:
        return ""

    data = continuations[0]
    if data.get("invalidationContinuationData"):
        return data["invalidationContinuationData"]["continuation"]
    if data.get("timedContinuationData"):
        return data["timedContinuationData"]["continuation"]
    return ""


def parse_chat_data(
    data: Dict[str, Any],
    on_error: Optional[Callable[[ActionParseError], None]] = None,
) -> Tuple[List[ChatItem], str]:
    """
    Translate a get_live_chat response.

    Args:
        data: Decoded JSON response
        on_error: Receives actions that fail to normalize so the rest of the
                  batch is kept. Without it the first failure propagates.

    Returns:
        (chat items in upstream order, next continuation token)

    Raises:
        ChatEndedError: The response has no live chat continuation
        ActionParseError: An action was malformed and on_error is None
    """
    live_chat = (data.get("continuationContents") or {}).get("liveChatContinuation")
    if not live_chat:
        raise ChatEndedError()

    chat_items: List[ChatItem] = []
    for action in live_chat.get("actions") or []:
        try:
            chat_item = parse_action_to_chat_item(action)
        except ActionParseError as e:
            if on_error is None:
                raise
            on_error(e)
            continue
        if chat_item is not None:
            chat_items.append(chat_item)

    return chat_items, next_continuation(live_chat.get("continuations"))
