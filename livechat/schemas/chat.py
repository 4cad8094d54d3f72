"""
Chat Item Schemas

Canonical chat records produced from YouTube's renderer payloads. Every
item carries the shared base fields plus the fields of exactly one variant,
selected by the ``type`` tag.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class ImageItem(BaseModel):
    """An image reference; empty strings when upstream had no thumbnail."""

    url: str = ""
    alt: str = ""


class TextRun(BaseModel):
    """Literal text fragment of a message."""

    text: str


class EmojiRun(ImageItem):
    """Emoji fragment of a message (standard or channel custom emoji)."""

    emoji_text: str
    is_custom_emoji: bool = False


MessageItem = Union[TextRun, EmojiRun]


class AuthorBadge(BaseModel):
    """Membership badge shown next to the author name."""

    thumbnail: ImageItem
    label: str


class Author(BaseModel):
    name: str = ""
    thumbnail: Optional[ImageItem] = None
    channel_id: str
    badge: Optional[AuthorBadge] = None


class BaseChatItem(BaseModel):
    """Fields shared by every chat item variant."""

    id: str
    author: Author
    is_membership: bool = False
    is_verified: bool = False
    is_owner: bool = False
    is_moderator: bool = False
    timestamp: datetime = Field(description="Send time, millisecond precision, UTC")


class Superchat(BaseModel):
    amount: str
    color: str = Field(description="Background color as #RRGGBB")


class Supersticker(Superchat):
    sticker: ImageItem


class MessageChatItem(BaseChatItem):
    type: Literal["message"] = "message"
    message: List[MessageItem] = Field(default_factory=list)


class SuperchatChatItem(BaseChatItem):
    type: Literal["superchat"] = "superchat"
    message: List[MessageItem] = Field(default_factory=list)
    superchat: Superchat


class SuperstickerChatItem(BaseChatItem):
    type: Literal["supersticker"] = "supersticker"
    superchat: Supersticker


class MembershipJoinChatItem(BaseChatItem):
    type: Literal["membership-join"] = "membership-join"
    join_message: List[MessageItem] = Field(default_factory=list)


class MembershipMilestoneChatItem(BaseChatItem):
    type: Literal["membership-milestone"] = "membership-milestone"
    message: List[MessageItem] = Field(default_factory=list)
    milestone_message: List[MessageItem] = Field(default_factory=list)


class MembershipGiftChatItem(BaseChatItem):
    type: Literal["membership-gift"] = "membership-gift"
    gift_message: List[MessageItem] = Field(default_factory=list)


class MembershipRedeemChatItem(BaseChatItem):
    type: Literal["membership-redeem"] = "membership-redeem"
    redeem_message: List[MessageItem] = Field(default_factory=list)


ChatItem = Annotated[
    Union[
        MessageChatItem,
        SuperchatChatItem,
        SuperstickerChatItem,
        MembershipJoinChatItem,
        MembershipMilestoneChatItem,
        MembershipGiftChatItem,
        MembershipRedeemChatItem,
    ],
    Field(discriminator="type"),
]

ChatItemType = Literal[
    "message",
    "superchat",
    "supersticker",
    "membership-join",
    "membership-milestone",
    "membership-gift",
    "membership-redeem",
]

# type tag -> model, used by the renderer normalizer's shared base builder
CHAT_ITEM_MODELS = {
    "message": MessageChatItem,
    "superchat": SuperchatChatItem,
    "supersticker": SuperstickerChatItem,
    "membership-join": MembershipJoinChatItem,
    "membership-milestone": MembershipMilestoneChatItem,
    "membership-gift": MembershipGiftChatItem,
    "membership-redeem": MembershipRedeemChatItem,
}
