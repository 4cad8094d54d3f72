"""
livechat - YouTube live chat poller

Bootstraps a chat session from a watch/live page and polls YouTube's
internal live chat endpoint, emitting normalized chat items.
"""

__version__ = "0.1.0"
