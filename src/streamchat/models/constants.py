"""Shared constants for the models layer.

Defines the Nostr event kinds consumed by the live chat engine and the
static default relay list. Placing them here lets the ``nips``, ``utils``
and ``services`` layers share them without circular imports.

See Also:
    [streamchat.nips.nip53][]: Builds subscription filters from
        [EventKind][streamchat.models.constants.EventKind] values.
    [streamchat.utils.relays][]: Uses
        [DEFAULT_RELAYS][streamchat.models.constants.DEFAULT_RELAYS] as the
        lowest-priority relay source.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class EventKind(IntEnum):
    """Well-known Nostr event kinds used by the live chat engine.

    Attributes:
        SET_METADATA: Kind 0 -- user profile metadata (NIP-01).
        ZAP_REQUEST: Kind 9734 -- zap request embedded in a receipt's
            ``description`` tag (NIP-57).
        ZAP_RECEIPT: Kind 9735 -- zap receipt published by the recipient's
            lightning node (NIP-57).
        LIVE_CHAT_MESSAGE: Kind 1311 -- chat message addressed to a live
            activity through an ``a`` tag (NIP-53).
        LIVE_EVENT: Kind 30311 -- parameterized replaceable live activity
            (NIP-53).
    """

    SET_METADATA = 0
    LIVE_CHAT_MESSAGE = 1_311
    ZAP_REQUEST = 9_734
    ZAP_RECEIPT = 9_735
    LIVE_EVENT = 30_311


class FeedItemKind(StrEnum):
    """Discriminant of a [FeedItem][streamchat.models.feed.FeedItem]."""

    MESSAGE = "message"
    ZAP = "zap"


EVENT_KIND_MAX = 65_535

# Lowest-priority relay source, merged after address hints and user relays.
DEFAULT_RELAYS: tuple[str, ...] = (
    "wss://relay.damus.io",
    "wss://relay.nostr.band",
    "wss://nos.lol",
    "wss://relay.snort.social",
    "wss://relay.primal.net",
    "wss://nostr.wine",
    "wss://relay.nostr.bg",
    "wss://nostr-pub.wellorder.net",
    "wss://offchain.pub",
    "wss://relay.current.fyi",
)
