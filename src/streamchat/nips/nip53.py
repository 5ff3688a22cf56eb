"""
NIP-53 live activity subscription filters.

A live activity (kind 30311) is addressed by its coordinate. The session
opens three subscriptions per stream:

* the activity itself: ``kinds=[kind]``, ``authors=[pubkey]``,
  ``#d=[identifier]``;
* live chat messages: ``kinds=[1311]``, ``#a=[<kind>:<pubkey>:<identifier>]``;
* zap receipts: ``kinds=[9735]``, ``#a=[<kind>:<pubkey>:<identifier>]``.

See Also:
    [LiveChatSession.connect()][streamchat.services.session.LiveChatSession.connect]:
        Opens one subscription per filter built here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nostr_sdk import Alphabet, Filter, Kind, PublicKey, SingleLetterTag

from streamchat.models.constants import EventKind


if TYPE_CHECKING:
    from streamchat.models.address import StreamAddress


def _a_tag_filter(kind: EventKind, a_tag: str) -> Filter:
    return Filter().kind(Kind(kind)).custom_tag(SingleLetterTag.lowercase(Alphabet.A), a_tag)


def live_activity_filter(address: StreamAddress) -> Filter:
    """Filter matching the activity metadata event the address points to."""
    return (
        Filter()
        .kind(Kind(address.kind))
        .author(PublicKey.parse(address.pubkey))
        .identifier(address.identifier)
    )


def live_chat_filter(address: StreamAddress) -> Filter:
    """Filter matching kind 1311 chat messages tagged with the activity coordinate."""
    return _a_tag_filter(EventKind.LIVE_CHAT_MESSAGE, address.a_tag)


def zap_receipt_filter(address: StreamAddress) -> Filter:
    """Filter matching kind 9735 zap receipts tagged with the activity coordinate."""
    return _a_tag_filter(EventKind.ZAP_RECEIPT, address.a_tag)
