"""
Ingest layer: live page bootstrap, batch translation and chat polling
"""

from .bootstrap import get_options_from_live_page
from .client import YouTubeClient
from .parser import parse_chat_data
from .poller import LiveChat, Phase
from .renderers import parse_action_to_chat_item

__all__ = [
    "get_options_from_live_page",
    "YouTubeClient",
    "parse_chat_data",
    "LiveChat",
    "Phase",
    "parse_action_to_chat_item",
]
