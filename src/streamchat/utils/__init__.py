"""Utility layer: relay transport, relay set resolution, display formatting.

Depends on [streamchat.models][streamchat.models] and
[streamchat.core.exceptions][] only.

Attributes:
    transport: [Transport][streamchat.utils.transport.Transport] protocol
        and the nostr-sdk backed
        [NostrSdkTransport][streamchat.utils.transport.NostrSdkTransport].
    relays: [resolve_relay_set()][streamchat.utils.relays.resolve_relay_set].
    formatting: ``shorten_pubkey()`` and ``format_sats()``.
"""

from .formatting import format_sats, shorten_pubkey
from .relays import resolve_relay_set
from .transport import NostrSdkTransport, Subscription, SubscriptionHandler, Transport


__all__ = [
    "NostrSdkTransport",
    "Subscription",
    "SubscriptionHandler",
    "Transport",
    "format_sats",
    "resolve_relay_set",
    "shorten_pubkey",
]
