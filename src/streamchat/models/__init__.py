"""Pure frozen dataclasses with zero I/O for live chat events and profiles.

The models layer is the foundation of the diamond DAG. It has **no
dependencies** on any other streamchat package. Every model uses
``@dataclass(frozen=True, slots=True)`` for immutability and memory
efficiency, and all validation happens in ``__post_init__`` so invalid
instances never escape the constructor.

Attributes:
    RawEvent: Read-only snapshot of a Nostr event handed over by the
        transport.
    StreamAddress: Decoded ``naddr`` (kind, author, identifier, relay hints)
        with the composite ``a`` tag.
    ChatMessage: Decoded kind 1311 chat message.
    ZapReceipt: Decoded kind 9735 zap receipt with amount in sats.
    Profile: Kind 0 display profile; a bare instance is the in-flight
        placeholder.
    LiveActivity: Decoded kind 30311 stream metadata.
    FeedItem: Tagged union of
        [MessageItem][streamchat.models.feed.MessageItem] and
        [ZapItem][streamchat.models.feed.ZapItem].
    EventKind: Nostr event kinds used by the engine.
    DEFAULT_RELAYS: Static lowest-priority relay list.

Note:
    Computed fields on frozen dataclasses are set with
    ``object.__setattr__`` in ``__post_init__``, which runs before the
    instance is exposed to external code.
"""

from .activity import LiveActivity
from .address import StreamAddress
from .chat import ChatMessage
from .constants import DEFAULT_RELAYS, EVENT_KIND_MAX, EventKind, FeedItemKind
from .feed import EnrichedChatMessage, EnrichedZapReceipt, FeedItem, MessageItem, ZapItem
from .profile import Profile
from .raw_event import RawEvent
from .zap import ZapReceipt


__all__ = [
    "DEFAULT_RELAYS",
    "EVENT_KIND_MAX",
    "ChatMessage",
    "EnrichedChatMessage",
    "EnrichedZapReceipt",
    "EventKind",
    "FeedItem",
    "FeedItemKind",
    "LiveActivity",
    "MessageItem",
    "Profile",
    "RawEvent",
    "StreamAddress",
    "ZapItem",
    "ZapReceipt",
]
