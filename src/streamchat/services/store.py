"""
Deduplicating event collections and the derived, enriched feed.

[EventStore][streamchat.services.store.EventStore] keeps decoded chat
messages and zap receipts in insertion order, keyed by event id. Relays
deliver out of order and repeat themselves; dedup by id is the only
correctness mechanism, so ingestion is idempotent regardless of arrival
order.

The feed is never stored. Every [feed()][streamchat.services.store.EventStore.feed]
call enriches both collections with the current profile cache and sorts
the result by ``created_at``; Python's sort is stable, so ties keep
collection order (messages before receipts, each in arrival order). A
profile resolved after a message was stored is therefore visible on the
next read without touching the message.
"""

from __future__ import annotations

from operator import attrgetter
from typing import TYPE_CHECKING

from streamchat.core.exceptions import MalformedReceiptError
from streamchat.core.logger import Logger
from streamchat.core.metrics import SessionMetrics
from streamchat.models.chat import ChatMessage
from streamchat.models.feed import (
    EnrichedChatMessage,
    EnrichedZapReceipt,
    FeedItem,
    MessageItem,
    ZapItem,
)
from streamchat.nips.nip57 import parse_zap_receipt
from streamchat.utils.formatting import shorten_pubkey


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from streamchat.models.raw_event import RawEvent
    from streamchat.models.zap import ZapReceipt

    from .profiles import ProfileResolver


class EventStore:
    """Chat messages and zap receipts of one session.

    Args:
        resolver: Profile resolver asked to fetch every stored author and
            zap sender; also the source of display fields for the feed.
        metrics: Recorder for ``events_duplicate`` / ``zaps_dropped`` and
            the ``messages`` / ``zaps`` gauges.
        on_change: Called after every successful insertion and after
            ``clear()``.
    """

    def __init__(
        self,
        resolver: ProfileResolver,
        *,
        metrics: SessionMetrics | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._resolver = resolver
        self._metrics = metrics or SessionMetrics()
        self._on_change = on_change
        self._messages: dict[str, ChatMessage] = {}
        self._zaps: dict[str, ZapReceipt] = {}
        self._logger = Logger("store")

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        """Stored chat messages in arrival order."""
        return tuple(self._messages.values())

    @property
    def zaps(self) -> tuple[ZapReceipt, ...]:
        """Stored zap receipts in arrival order."""
        return tuple(self._zaps.values())

    def add_chat_event(self, raw: RawEvent, relays: Iterable[str] = ()) -> ChatMessage | None:
        """Store a kind 1311 event and request its author's profile.

        Returns:
            The new message, or ``None`` if the id was already stored or
            the event is invalid.
        """
        if raw.id in self._messages:
            self._metrics.inc("events_duplicate")
            return None

        try:
            message = ChatMessage(
                id=raw.id,
                pubkey=raw.pubkey,
                content=raw.content,
                created_at=raw.created_at,
            )
        except (TypeError, ValueError) as e:
            self._logger.debug("message_dropped", id=raw.id, reason=str(e))
            return None

        self._messages[message.id] = message
        self._metrics.set("messages", len(self._messages))
        self._resolver.resolve_if_needed(message.pubkey, relays)
        self._changed()
        return message

    def add_zap_event(self, raw: RawEvent, relays: Iterable[str] = ()) -> ZapReceipt | None:
        """Decode and store a kind 9735 event, then request the sender's profile.

        Receipts without a usable embedded zap request are dropped and no
        profile fetch is issued for them.

        Returns:
            The new receipt, or ``None`` if it was a duplicate or dropped.
        """
        if raw.id in self._zaps:
            self._metrics.inc("events_duplicate")
            return None

        try:
            zap = parse_zap_receipt(raw)
        except MalformedReceiptError as e:
            self._metrics.inc("zaps_dropped")
            self._logger.debug("zap_dropped", id=raw.id, reason=str(e))
            return None

        self._zaps[zap.id] = zap
        self._metrics.set("zaps", len(self._zaps))
        self._resolver.resolve_if_needed(zap.sender_pubkey, relays)
        self._changed()
        return zap

    def _display_fields(self, pubkey: str) -> tuple[str, str | None]:
        profile = self._resolver.get(pubkey)
        if profile is None:
            return shorten_pubkey(pubkey), None
        name = profile.display_name or profile.name or shorten_pubkey(pubkey)
        return name, profile.picture

    def feed(self) -> list[FeedItem]:
        """Merged, enriched view of both collections sorted by ``created_at``."""
        items: list[FeedItem] = []
        for msg in self._messages.values():
            name, avatar = self._display_fields(msg.pubkey)
            items.append(
                MessageItem(
                    EnrichedChatMessage(
                        id=msg.id,
                        pubkey=msg.pubkey,
                        content=msg.content,
                        created_at=msg.created_at,
                        display_name=name,
                        avatar=avatar,
                    )
                )
            )
        for zap in self._zaps.values():
            name, avatar = self._display_fields(zap.sender_pubkey)
            items.append(
                ZapItem(
                    EnrichedZapReceipt(
                        id=zap.id,
                        sender_pubkey=zap.sender_pubkey,
                        recipient_pubkey=zap.recipient_pubkey,
                        amount=zap.amount,
                        content=zap.content,
                        created_at=zap.created_at,
                        sender_display_name=name,
                        sender_avatar=avatar,
                    )
                )
            )
        items.sort(key=attrgetter("created_at"))
        return items

    def clear(self) -> None:
        """Drop every stored message and receipt."""
        had_items = bool(self._messages or self._zaps)
        self._messages.clear()
        self._zaps.clear()
        self._metrics.set("messages", 0)
        self._metrics.set("zaps", 0)
        if had_items:
            self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
