"""
Renderer Normalizer

Converts one get_live_chat action into exactly one canonical chat item.
YouTube describes each chat entry with a renderer object whose key names its
kind (liveChatTextMessageRenderer, liveChatPaidMessageRenderer, ...). Only
addChatItemAction payloads with one of the handled renderer keys produce an
item; tickers, engagement messages and anything unknown map to None.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from livechat.errors import ActionParseError
from livechat.schemas.chat import (
    CHAT_ITEM_MODELS,
    Author,
    AuthorBadge,
    ChatItem,
    ChatItemType,
    EmojiRun,
    ImageItem,
    MessageItem,
    Superchat,
    Supersticker,
    TextRun,
)
from livechat.utils.logging import get_logger

logger = get_logger(__name__, category="chat")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# badge icon type -> chat item flag
BADGE_ICON_FLAGS = {
    "OWNER": "is_owner",
    "VERIFIED": "is_verified",
    "MODERATOR": "is_moderator",
}


def parse_thumbnail_to_image_item(thumbnails: Sequence[Dict[str, Any]], alt: str) -> ImageItem:
    """Pick the last (largest) thumbnail; empty list gives an empty image."""
    if not thumbnails:
        return ImageItem(url="", alt="")
    return ImageItem(url=thumbnails[-1]["url"], alt=alt)


def convert_color_to_hex6(color: int) -> str:
    """ARGB integer (signed or unsigned) -> '#RRGGBB'."""
    return f"#{int(color) & 0xFFFFFF:06X}"


def parse_timestamp(timestamp_usec: str) -> datetime:
    return EPOCH + timedelta(milliseconds=int(timestamp_usec) // 1000)


def parse_messages(runs: Sequence[Dict[str, Any]]) -> List[MessageItem]:
    """Convert message runs into text and emoji items, preserving order."""
    items: List[MessageItem] = []
    for run in runs:
        if "text" in run:
            items.append(TextRun(text=run["text"]))
            continue

        emoji = run["emoji"]
        thumbnails = emoji.get("image", {}).get("thumbnails") or []
        is_custom_emoji = bool(emoji.get("isCustomEmoji"))
        shortcuts = emoji.get("shortcuts") or []
        shortcut = shortcuts[0] if shortcuts else ""
        items.append(
            EmojiRun(
                url=thumbnails[0]["url"] if thumbnails else "",
                alt=shortcut,
                is_custom_emoji=is_custom_emoji,
                emoji_text=shortcut if is_custom_emoji else emoji["emojiId"],
            )
        )
    return items


def _runs(container: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not container:
        return []
    return container.get("runs") or []


def build_base_chat_item(renderer: Dict[str, Any], item_type: ChatItemType, **fields: Any) -> ChatItem:
    """
    Build a chat item of the given type from the fields every renderer shares.

    Args:
        renderer: Renderer payload (author, badges, id, timestamp)
        item_type: Chat item type tag
        **fields: Variant-specific fields

    Returns:
        Chat item model instance for item_type
    """
    author_name = (renderer.get("authorName") or {}).get("simpleText", "")
    author = Author(
        name=author_name,
        thumbnail=parse_thumbnail_to_image_item(
            renderer["authorPhoto"]["thumbnails"], author_name
        ),
        channel_id=renderer["authorExternalChannelId"],
    )
    flags = {
        "is_membership": False,
        "is_owner": False,
        "is_verified": False,
        "is_moderator": False,
    }

    for entry in renderer.get("authorBadges") or []:
        badge = entry["liveChatAuthorBadgeRenderer"]
        if badge.get("customThumbnail"):
            label = badge.get("tooltip", "")
            author.badge = AuthorBadge(
                thumbnail=parse_thumbnail_to_image_item(
                    badge["customThumbnail"]["thumbnails"], label
                ),
                label=label,
            )
            flags["is_membership"] = True
        else:
            icon_type = (badge.get("icon") or {}).get("iconType")
            flag = BADGE_ICON_FLAGS.get(icon_type)
            if flag:
                flags[flag] = True

    return CHAT_ITEM_MODELS[item_type](
        id=renderer["id"],
        author=author,
        timestamp=parse_timestamp(renderer["timestampUsec"]),
        **flags,
        **fields,
    )


def _text_message(renderer: Dict[str, Any]) -> ChatItem:
    return build_base_chat_item(
        renderer, "message", message=parse_messages(_runs(renderer["message"]))
    )


def _paid_message(renderer: Dict[str, Any]) -> ChatItem:
    return build_base_chat_item(
        renderer,
        "superchat",
        message=parse_messages(_runs(renderer.get("message"))),
        superchat=Superchat(
            amount=renderer["purchaseAmountText"]["simpleText"],
            color=convert_color_to_hex6(renderer["bodyBackgroundColor"]),
        ),
    )


def _paid_sticker(renderer: Dict[str, Any]) -> ChatItem:
    sticker = renderer["sticker"]
    return build_base_chat_item(
        renderer,
        "supersticker",
        superchat=Supersticker(
            amount=renderer["purchaseAmountText"]["simpleText"],
            color=convert_color_to_hex6(renderer["backgroundColor"]),
            sticker=parse_thumbnail_to_image_item(
                sticker["thumbnails"],
                sticker["accessibility"]["accessibilityData"]["label"],
            ),
        ),
    )


def _membership(renderer: Dict[str, Any]) -> ChatItem:
    if renderer.get("headerPrimaryText"):
        return build_base_chat_item(
            renderer,
            "membership-milestone",
            message=parse_messages(_runs(renderer.get("message"))),
            milestone_message=parse_messages(_runs(renderer["headerPrimaryText"])),
        )
    return build_base_chat_item(
        renderer,
        "membership-join",
        join_message=parse_messages(_runs(renderer["headerSubtext"])),
    )


def _gift_purchase(renderer: Dict[str, Any]) -> ChatItem:
    # Author fields live on the header renderer; outer keys win on conflict
    merged = {**renderer["header"]["liveChatSponsorshipsHeaderRenderer"], **renderer}
    return build_base_chat_item(
        merged,
        "membership-gift",
        gift_message=parse_messages(_runs(merged["primaryText"])),
    )


def _gift_redemption(renderer: Dict[str, Any]) -> ChatItem:
    return build_base_chat_item(
        renderer,
        "membership-redeem",
        redeem_message=parse_messages(_runs(renderer["message"])),
    )


# Checked in order; the first key present in the item wins
RENDERER_HANDLERS: Tuple[Tuple[str, Callable[[Dict[str, Any]], ChatItem]], ...] = (
    ("liveChatTextMessageRenderer", _text_message),
    ("liveChatPaidMessageRenderer", _paid_message),
    ("liveChatPaidStickerRenderer", _paid_sticker),
    ("liveChatMembershipItemRenderer", _membership),
    ("liveChatSponsorshipsGiftPurchaseAnnouncementRenderer", _gift_purchase),
    ("liveChatSponsorshipsGiftRedemptionAnnouncementRenderer", _gift_redemption),
)


def parse_action_to_chat_item(action: Dict[str, Any]) -> Optional[ChatItem]:
    """
    Normalize one action into a chat item.

    Args:
        action: One entry of liveChatContinuation.actions

    Returns:
        Chat item, or None when the action carries no handled renderer

    Raises:
        ActionParseError: The renderer was recognized but malformed
    """
    add_action = action.get("addChatItemAction")
    if not add_action:
        return None

    item = add_action.get("item") or {}
    try:
        for key, handler in RENDERER_HANDLERS:
            if key in item:
                return handler(item[key])
    except Exception as e:
        raise ActionParseError(
            json.dumps(item, ensure_ascii=False, default=str), cause=e
        ) from e

    logger.debug(f"Ignoring chat item with renderers: {', '.join(item) or 'none'}")
    return None
