"""
Session Bootstrapper

Extracts the live id, title, innertube credentials and the first chat
continuation token from the HTML of a watch/live page.

The continuation lives inside a JSON-like blob embedded in script text. The
surrounding document is not JSON, so the blob is isolated by counting braces
from an anchor key and only that fragment is parsed (relaxed JSON via json5).
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

import json5

from livechat.errors import (
    ApiKeyNotFoundError,
    ClientVersionNotFoundError,
    FailedExtractionError,
    FinishedLiveError,
    NotFoundError,
)
from livechat.ingest.renderers import parse_thumbnail_to_image_item
from livechat.schemas.options import LivePageOptions, VideoDetails
from livechat.utils.logging import get_logger

logger = get_logger(__name__, category="bootstrap")

UNKNOWN_TITLE = "Unknown Stream"

LIVE_ID_RE = re.compile(r'<link rel="canonical" href="https://www\.youtube\.com/watch\?v=(.+?)">')
TITLE_RE = re.compile(r"<title>(.+?) - YouTube</title>")
REPLAY_RE = re.compile(r"""['"]isReplay['"]:\s*(true)""")
API_KEY_RE = re.compile(r"""['"]INNERTUBE_API_KEY['"]:\s*['"](.+?)['"]""")
CLIENT_VERSION_RE = re.compile(r"""['"]clientVersion['"]:\s*['"]([\d.]+?)['"]""")
BRACE_RE = re.compile(r"[{}]")

CONTINUATION_ANCHOR = "viewSelector"
VIDEO_DETAILS_ANCHOR = '"videoDetails"'


def extract_balanced_object(data: str, anchor: str) -> Optional[str]:
    """
    Return the brace-balanced {...} that starts at the first brace after anchor.

    Braces inside string literals are not special-cased.

    Args:
        data: Document text
        anchor: Literal text preceding the object

    Returns:
        The object text including both braces, or None if the anchor is missing,
        the first brace after it is a closing one, or the braces never balance
    """
    index = data.find(anchor)
    if index == -1:
        return None

    src = data[index:]
    matches = BRACE_RE.finditer(src)
    first = next(matches, None)
    if first is None or first.group() != "{":
        return None

    start = first.start()
    depth = 1
    for match in matches:
        depth += 1 if match.group() == "{" else -1
        if depth == 0:
            return src[start : match.start() + 1]
    return None


def extract_continuation(data: str) -> str:
    """First unselected chat sub-menu entry's reload continuation."""
    fragment = extract_balanced_object(data, CONTINUATION_ANCHOR)
    if fragment is None:
        raise FailedExtractionError()

    try:
        view_selector = json5.loads(fragment)
        sub_menu_items = view_selector["sortFilterSubMenuRenderer"]["subMenuItems"]
        unselected = [item for item in sub_menu_items if not item.get("selected")]
        return unselected[0]["continuation"]["reloadContinuationData"]["continuation"]
    except Exception as e:
        raise FailedExtractionError() from e


def extract_video_details(data: str) -> Optional[VideoDetails]:
    """Best-effort videoDetails extraction; None when absent or malformed."""
    fragment = extract_balanced_object(data, VIDEO_DETAILS_ANCHOR)
    if fragment is None:
        return None

    try:
        raw: Dict[str, Any] = dict(json5.loads(fragment))
        thumbnails = (raw.pop("thumbnail", None) or {}).get("thumbnails") or []
        return VideoDetails(
            **raw,
            thumbnail=parse_thumbnail_to_image_item(thumbnails, raw.get("title", "")),
        )
    except Exception as e:
        logger.debug(f"Ignoring unparsable videoDetails block: {e}")
        return None


def get_options_from_live_page(data: str) -> LivePageOptions:
    """
    Parse a live page into the options needed to poll its chat.

    Args:
        data: Raw HTML of the watch/live page

    Returns:
        LivePageOptions with live_id, title, api_key, client_version,
        continuation and optional video details

    Raises:
        NotFoundError: No canonical watch link (nothing is live)
        FinishedLiveError: The page is a replay of a finished broadcast
        ApiKeyNotFoundError: INNERTUBE_API_KEY missing
        ClientVersionNotFoundError: clientVersion missing
        FailedExtractionError: Continuation block missing or malformed
    """
    id_match = LIVE_ID_RE.search(data)
    if not id_match:
        raise NotFoundError()
    live_id = id_match.group(1)

    title_match = TITLE_RE.search(data)
    title = title_match.group(1) if title_match else UNKNOWN_TITLE

    if REPLAY_RE.search(data):
        raise FinishedLiveError(live_id)

    key_match = API_KEY_RE.search(data)
    if not key_match:
        raise ApiKeyNotFoundError()
    api_key = key_match.group(1)

    version_match = CLIENT_VERSION_RE.search(data)
    if not version_match:
        raise ClientVersionNotFoundError()
    client_version = version_match.group(1)

    continuation = extract_continuation(data)
    details = extract_video_details(data)

    logger.debug(f"Bootstrapped live {live_id} ({title}), client version {client_version}")

    return LivePageOptions(
        live_id=live_id,
        title=title,
        api_key=api_key,
        client_version=client_version,
        continuation=continuation,
        details=details,
    )
