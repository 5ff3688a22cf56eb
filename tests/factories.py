"""
Test doubles and raw event factories shared across the unit tests.

Importable from test modules (``tests`` is on ``pythonpath``)::

    from factories import FakeTransport, make_chat_event
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

from nostr_sdk import Coordinate, Keys, Kind, Nip19Coordinate, PublicKey, RelayUrl

from streamchat.core.exceptions import TransportOpenError
from streamchat.models import EventKind, RawEvent


HINT_RELAY = "wss://hint.example.com"
STREAM_ID = "stream-1"


# ============================================================================
# Fake Transport
# ============================================================================


class FakeSubscription:
    """Subscription handle recording whether it was closed."""

    def __init__(self, subscription_id: str, transport: FakeTransport) -> None:
        self._id = subscription_id
        self._transport = transport
        self.closed = False

    @property
    def id(self) -> str:
        return self._id

    async def close(self) -> None:
        self.closed = True
        gate = self._transport.close_gate
        if gate is not None:
            await gate.wait()


@dataclass
class OpenedSubscription:
    relays: tuple[str, ...]
    filter: dict[str, Any]
    handler: Any
    handle: FakeSubscription


@dataclass
class FakeTransport:
    """In-memory Transport.

    ``profiles`` maps a pubkey to the kind 0 event returned by ``get_one``.
    Setting ``fetch_gate`` holds every fetch until the event is set.
    ``subscribe_gate`` and ``close_gate`` do the same for ``subscribe`` and
    subscription ``close`` calls.
    ``fail_subscribe_at`` makes the n-th ``subscribe`` call (0-based) raise
    ``TransportOpenError``. Events in ``replay`` are delivered on the next
    loop iteration to every subscription whose filter targets their kind.
    """

    profiles: dict[str, RawEvent] = field(default_factory=dict)
    fetch_gate: asyncio.Event | None = None
    subscribe_gate: asyncio.Event | None = None
    close_gate: asyncio.Event | None = None
    fetch_error: Exception | None = None
    fail_subscribe_at: int | None = None
    replay: list[RawEvent] = field(default_factory=list)
    subscriptions: list[OpenedSubscription] = field(default_factory=list)
    fetches: list[tuple[tuple[str, ...], dict[str, Any], float | None]] = field(
        default_factory=list
    )
    shutdown_called: bool = False
    _subscribe_calls: int = 0

    async def subscribe(self, relays, event_filter, handler) -> FakeSubscription:
        index = self._subscribe_calls
        self._subscribe_calls += 1
        if self.subscribe_gate is not None:
            await self.subscribe_gate.wait()
        if self.fail_subscribe_at is not None and index == self.fail_subscribe_at:
            raise TransportOpenError("no relay reachable")
        handle = FakeSubscription(f"sub-{index}", self)
        parsed = json.loads(event_filter.as_json())
        self.subscriptions.append(
            OpenedSubscription(relays=tuple(relays), filter=parsed, handler=handler, handle=handle)
        )
        loop = asyncio.get_running_loop()
        for raw in self.replay:
            if raw.kind in parsed.get("kinds", []):
                loop.call_soon(handler.on_event, raw)
        return handle

    async def get_one(self, relays, event_filter, timeout=None) -> RawEvent | None:
        parsed = json.loads(event_filter.as_json())
        self.fetches.append((tuple(relays), parsed, timeout))
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.profiles.get(parsed["authors"][0])

    async def shutdown(self) -> None:
        self.shutdown_called = True

    def subscription_for(self, kind: int) -> OpenedSubscription:
        """Most recent subscription whose filter targets *kind*."""
        for opened in reversed(self.subscriptions):
            if kind in opened.filter.get("kinds", []):
                return opened
        raise LookupError(f"no subscription for kind {kind}")

    def deliver(self, kind: int, raw: RawEvent) -> None:
        self.subscription_for(kind).handler.on_event(raw)


# ============================================================================
# Keys and Addresses
# ============================================================================


def new_pubkey() -> str:
    """Hex public key of a freshly generated key pair."""
    return Keys.generate().public_key().to_hex()


def make_naddr(pubkey_hex: str, identifier: str = STREAM_ID, relays: tuple[str, ...] = ()) -> str:
    """Encode a kind 30311 coordinate as a NIP-19 naddr."""
    coordinate = Coordinate(Kind(EventKind.LIVE_EVENT), PublicKey.parse(pubkey_hex), identifier)
    return Nip19Coordinate(coordinate, [RelayUrl.parse(url) for url in relays]).to_bech32()


# ============================================================================
# Raw Event Factories
# ============================================================================


def event_id(n: int) -> str:
    return f"{n:064x}"


def make_chat_event(
    n: int,
    pubkey: str,
    content: str = "gm",
    created_at: int = 1_700_000_000,
    a_tag: str | None = None,
) -> RawEvent:
    tags = [["a", a_tag]] if a_tag else []
    return RawEvent(
        id=event_id(n),
        pubkey=pubkey,
        kind=EventKind.LIVE_CHAT_MESSAGE,
        created_at=created_at,
        content=content,
        tags=tags,
    )


def make_zap_event(
    n: int,
    sender: str,
    *,
    recipient: str | None = "ff" * 32,
    bolt11: str | None = "lnbc500u1pjexample",
    comment: str = "great stream",
    created_at: int = 1_700_000_000,
    description: str | None = None,
    include_description: bool = True,
) -> RawEvent:
    tags: list[list[str]] = []
    if recipient is not None:
        tags.append(["p", recipient])
    if bolt11 is not None:
        tags.append(["bolt11", bolt11])
    if include_description:
        if description is None:
            description = json.dumps(
                {"kind": EventKind.ZAP_REQUEST, "pubkey": sender, "content": comment, "tags": []}
            )
        tags.append(["description", description])
    return RawEvent(
        id=event_id(n),
        pubkey="ee" * 32,
        kind=EventKind.ZAP_RECEIPT,
        created_at=created_at,
        content="",
        tags=tags,
    )


def make_profile_event(n: int, pubkey: str, **fields: Any) -> RawEvent:
    return RawEvent(
        id=event_id(n),
        pubkey=pubkey,
        kind=EventKind.SET_METADATA,
        created_at=1_700_000_000,
        content=json.dumps(fields),
    )


def make_activity_event(
    n: int,
    pubkey: str,
    *,
    title: str = "Live coding",
    status: str = "live",
    created_at: int = 1_700_000_000,
) -> RawEvent:
    return RawEvent(
        id=event_id(n),
        pubkey=pubkey,
        kind=EventKind.LIVE_EVENT,
        created_at=created_at,
        content="",
        tags=[["d", STREAM_ID], ["title", title], ["status", status]],
    )
