"""
Exception taxonomy for the live chat poller.

Bootstrap failures (ExtractionError and FinishedLiveError) abort start().
ChatEndedError is a terminal session condition, not a failure: the poller
stops cleanly when it sees it. ActionParseError wraps one malformed action.
"""

from __future__ import annotations

from typing import Optional


class LiveChatError(Exception):
    """Base class for every error raised by livechat."""


class ExtractionError(LiveChatError):
    """A required value could not be extracted from the live page."""


class NotFoundError(ExtractionError):
    def __init__(self, message: str = "Live Stream was not found"):
        super().__init__(message)


class ApiKeyNotFoundError(ExtractionError):
    def __init__(self, message: str = "API Key was not found"):
        super().__init__(message)


class ClientVersionNotFoundError(ExtractionError):
    def __init__(self, message: str = "Client Version was not found"):
        super().__init__(message)


class FailedExtractionError(ExtractionError):
    def __init__(self, message: str = "Failed to extract fetch options"):
        super().__init__(message)


class FinishedLiveError(LiveChatError):
    """The page belongs to a broadcast that already ended (a replay)."""

    def __init__(self, live_id: str):
        super().__init__(f"{live_id} is finished live")
        self.live_id = live_id


class ChatEndedError(LiveChatError):
    """The batch response no longer carries a live chat continuation."""

    def __init__(self, message: str = "Chat ended."):
        super().__init__(message)


class ActionParseError(LiveChatError):
    """
    Raised when a single chat action cannot be normalized.

    Attributes:
        item: JSON serialization of the offending renderer payload
    """

    def __init__(self, item: str, cause: Optional[BaseException] = None):
        super().__init__(f"Error while processing {item}")
        self.item = item
        self.cause = cause
