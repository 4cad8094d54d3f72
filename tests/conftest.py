"""Shared payload builders for live page and get_live_chat fixtures."""
import json

import pytest


LIVE_ID = "abc123"
API_KEY = "KEY"
CLIENT_VERSION = "2.0"
CONTINUATION = "C0"


@pytest.fixture
def live_page():
    return build_live_page()


def build_live_page(
    live_id=LIVE_ID,
    api_key=API_KEY,
    client_version=CLIENT_VERSION,
    continuation=CONTINUATION,
    title="Test Stream",
    replay=False,
    video_details=None,
):
    """Build a minimal watch page carrying the markers the bootstrapper reads."""
    head = ["<html><head>"]
    if title is not None:
        head.append(f"<title>{title} - YouTube</title>")
    if live_id is not None:
        head.append(f'<link rel="canonical" href="https://www.youtube.com/watch?v={live_id}">')
    head.append("</head><body>")

    ytcfg = {"INNERTUBE_CONTEXT_CLIENT_NAME": 1}
    if api_key is not None:
        ytcfg["INNERTUBE_API_KEY"] = api_key
    if client_version is not None:
        ytcfg["INNERTUBE_CONTEXT"] = {"client": {"clientName": "WEB", "clientVersion": client_version}}
    scripts = [f"<script>ytcfg.set({json.dumps(ytcfg)});</script>"]

    if replay:
        scripts.append('<script>var ytInitialPlayerResponse = {"playabilityStatus": {"isReplay": true}};</script>')

    if continuation is not None:
        initial_data = {
            "contents": {
                "liveChatRenderer": {
                    "header": {
                        "liveChatHeaderRenderer": {
                            "viewSelector": {
                                "sortFilterSubMenuRenderer": {
                                    "subMenuItems": [
                                        {
                                            "title": "Top chat",
                                            "selected": True,
                                            "continuation": {"reloadContinuationData": {"continuation": "TOP"}},
                                        },
                                        {
                                            "title": "Live chat",
                                            "selected": False,
                                            "continuation": {"reloadContinuationData": {"continuation": continuation}},
                                        },
                                    ]
                                }
                            }
                        }
                    }
                }
            }
        }
        scripts.append(f"<script>var ytInitialData = {json.dumps(initial_data)};</script>")

    if video_details is not None:
        scripts.append(
            f"<script>var ytInitialPlayerResponse = {json.dumps({'videoDetails': video_details})};</script>"
        )

    return "".join(head) + "".join(scripts) + "</body></html>"


def make_renderer(
    id="msg-1",
    name="Alice",
    channel_id="UC_alice",
    timestamp_usec="1000000",
    badges=None,
    **fields,
):
    """Renderer payload with the fields shared by every chat renderer."""
    renderer = {
        "id": id,
        "authorName": {"simpleText": name},
        "authorPhoto": {
            "thumbnails": [
                {"url": "https://yt3.example/alice=s32", "width": 32, "height": 32},
                {"url": "https://yt3.example/alice=s64", "width": 64, "height": 64},
            ]
        },
        "authorExternalChannelId": channel_id,
        "timestampUsec": timestamp_usec,
    }
    if badges is not None:
        renderer["authorBadges"] = badges
    renderer.update(fields)
    return renderer


def add_chat_item(key, renderer):
    return {"addChatItemAction": {"item": {key: renderer}, "clientId": "client-1"}}


def text_action(text="hi", **kwargs):
    return add_chat_item(
        "liveChatTextMessageRenderer",
        make_renderer(message={"runs": [{"text": text}]}, **kwargs),
    )


def chat_response(actions=None, continuation="C1", kind="invalidationContinuationData"):
    """get_live_chat response wrapping the given actions."""
    continuations = []
    if continuation is not None:
        continuations.append({kind: {"timeoutMs": 5000, "continuation": continuation}})
    live_chat = {"continuations": continuations}
    if actions is not None:
        live_chat["actions"] = actions
    return {
        "responseContext": {},
        "continuationContents": {"liveChatContinuation": live_chat},
    }
