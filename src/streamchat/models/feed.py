"""
Feed item variants produced by the feed composer.

A feed item is a closed tagged union: either a
[MessageItem][streamchat.models.feed.MessageItem] or a
[ZapItem][streamchat.models.feed.ZapItem], discriminated by the ``kind``
field. Each variant carries its own enriched payload; there is no shared
mutable base. Items are derived on every read and never stored.

Examples:
    ```python
    for item in session.feed:
        match item:
            case MessageItem(data=msg):
                print(msg.display_name, msg.content)
            case ZapItem(data=zap):
                print(zap.sender_display_name, zap.amount)
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .constants import FeedItemKind


@dataclass(frozen=True, slots=True)
class EnrichedChatMessage:
    """A [ChatMessage][streamchat.models.chat.ChatMessage] with resolved display fields."""

    id: str
    pubkey: str
    content: str
    created_at: int
    display_name: str
    avatar: str | None = None


@dataclass(frozen=True, slots=True)
class EnrichedZapReceipt:
    """A [ZapReceipt][streamchat.models.zap.ZapReceipt] with resolved sender display fields."""

    id: str
    sender_pubkey: str
    recipient_pubkey: str
    amount: int
    content: str
    created_at: int
    sender_display_name: str
    sender_avatar: str | None = None


@dataclass(frozen=True, slots=True)
class MessageItem:
    """Feed entry wrapping a chat message."""

    data: EnrichedChatMessage
    kind: Literal[FeedItemKind.MESSAGE] = field(default=FeedItemKind.MESSAGE, init=False)

    @property
    def created_at(self) -> int:
        return self.data.created_at


@dataclass(frozen=True, slots=True)
class ZapItem:
    """Feed entry wrapping a zap receipt."""

    data: EnrichedZapReceipt
    kind: Literal[FeedItemKind.ZAP] = field(default=FeedItemKind.ZAP, init=False)

    @property
    def created_at(self) -> int:
        return self.data.created_at


FeedItem = MessageItem | ZapItem
