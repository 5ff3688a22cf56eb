r"""streamchat -- live stream chat aggregation over Nostr.

Resolves a NIP-19 ``naddr`` into a relay set, subscribes to the stream's
metadata, live chat messages and zap receipts, deduplicates and decodes
them, resolves sender profiles once per identity, and exposes a single
chronologically merged feed.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
              services         Session orchestration, store, profiles
             /   |   \
          core  nips  utils    Logging/metrics/config, NIP codecs, transport
             \   |   /
              models           Pure frozen dataclasses (zero I/O)
```

Note:
    Top-level imports (``from streamchat import LiveChatSession``) use lazy
    loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("streamchat")

__all__ = [
    "ChatMessage",
    "FeedItem",
    "LiveActivity",
    "LiveChatSession",
    "Logger",
    "NostrSdkTransport",
    "Profile",
    "SessionConfig",
    "SessionState",
    "StreamAddress",
    "StreamChatError",
    "Transport",
    "ZapReceipt",
    "decode_stream_address",
    "format_sats",
    "parse_bolt11_amount",
    "resolve_relay_set",
    "shorten_pubkey",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("streamchat.core", "Logger"),
    "StreamChatError": ("streamchat.core", "StreamChatError"),
    "ChatMessage": ("streamchat.models", "ChatMessage"),
    "FeedItem": ("streamchat.models", "FeedItem"),
    "LiveActivity": ("streamchat.models", "LiveActivity"),
    "Profile": ("streamchat.models", "Profile"),
    "StreamAddress": ("streamchat.models", "StreamAddress"),
    "ZapReceipt": ("streamchat.models", "ZapReceipt"),
    "decode_stream_address": ("streamchat.nips", "decode_stream_address"),
    "parse_bolt11_amount": ("streamchat.nips", "parse_bolt11_amount"),
    "NostrSdkTransport": ("streamchat.utils", "NostrSdkTransport"),
    "Transport": ("streamchat.utils", "Transport"),
    "format_sats": ("streamchat.utils", "format_sats"),
    "resolve_relay_set": ("streamchat.utils", "resolve_relay_set"),
    "shorten_pubkey": ("streamchat.utils", "shorten_pubkey"),
    "LiveChatSession": ("streamchat.services", "LiveChatSession"),
    "SessionConfig": ("streamchat.services", "SessionConfig"),
    "SessionState": ("streamchat.services", "SessionState"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'streamchat' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
