"""
Live chat session: subscription lifecycle for one stream at a time.

[LiveChatSession][streamchat.services.session.LiveChatSession] decodes a
stream address, resolves its relay set, and opens three concurrent
subscriptions through the [Transport][streamchat.utils.transport.Transport]:
the activity metadata (kind 30311), live chat messages (kind 1311) and
zap receipts (kind 9735). Incoming events are routed to the
[EventStore][streamchat.services.store.EventStore], which in turn drives
the [ProfileResolver][streamchat.services.profiles.ProfileResolver].

Lifecycle:

```text
IDLE --connect()--> CONNECTING --3 subscriptions issued--> ACTIVE
  ^                     |                                    |
  +---- DecodeError ----+                                    |
  +---- TransportOpenError (re-raised) ----------------------+
  +---- disconnect() ----------------------------------------+
```

``connect()`` always disconnects first, so at most one stream is active
per session. ``disconnect()`` closes every subscription, clears both
collections and the current activity, but keeps the profile cache.

Examples:
    ```python
    async with LiveChatSession.from_yaml("config/session.yaml") as session:
        session.add_listener(lambda: render(session.feed))
        await session.connect("naddr1...")
        await asyncio.sleep(60)
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Self

from nostr_sdk import NostrSdkError

from streamchat.core.exceptions import DecodeError, StreamChatError, TransportOpenError
from streamchat.core.logger import Logger
from streamchat.core.metrics import SessionMetrics
from streamchat.core.yaml import load_yaml
from streamchat.models.activity import LiveActivity
from streamchat.nips.nip19 import parse_stream_address
from streamchat.nips.nip53 import live_activity_filter, live_chat_filter, zap_receipt_filter
from streamchat.utils.relays import resolve_relay_set
from streamchat.utils.transport import NostrSdkTransport

from .configs import SessionConfig
from .profiles import ProfileResolver
from .store import EventStore


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from types import TracebackType

    from streamchat.models.address import StreamAddress
    from streamchat.models.chat import ChatMessage
    from streamchat.models.feed import FeedItem
    from streamchat.models.profile import Profile
    from streamchat.models.raw_event import RawEvent
    from streamchat.models.zap import ZapReceipt
    from streamchat.utils.transport import Subscription, Transport


class SessionState(StrEnum):
    """Connection state of a [LiveChatSession][streamchat.services.session.LiveChatSession]."""

    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"


class _RoutingHandler:
    """Subscription handler forwarding events of one connection generation."""

    __slots__ = ("_generation", "_label", "_on_event", "_session")

    def __init__(
        self,
        session: LiveChatSession,
        label: str,
        on_event: Callable[[RawEvent], None],
    ) -> None:
        self._session = session
        self._label = label
        self._on_event = on_event
        self._generation = session._generation

    def on_event(self, event: RawEvent) -> None:
        # Late deliveries from a previous connection are ignored.
        if self._generation != self._session._generation:
            return
        self._session._metrics.inc("events_received")
        self._on_event(event)

    def on_eose(self, relay_url: str) -> None:
        self._session._logger.debug("eose_received", subscription=self._label, relay=relay_url)


class LiveChatSession:
    """Aggregates the chat, zaps and metadata of one live stream.

    Args:
        transport: Relay transport; a
            [NostrSdkTransport][streamchat.utils.transport.NostrSdkTransport]
            is built from ``config`` when omitted.
        config: Session configuration (defaults apply when omitted).

    Note:
        All methods must be called from the event loop that delivers the
        transport callbacks. Store and profile mutations happen only on
        that loop, so no locking is needed.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        config: SessionConfig | None = None,
    ) -> None:
        self._config = config or SessionConfig()
        self._transport: Transport = transport or NostrSdkTransport(
            connect_timeout=self._config.connect_timeout,
            fetch_timeout=self._config.profile_timeout,
        )
        self._logger = Logger("session")
        self._metrics = SessionMetrics(enabled=self._config.metrics.enabled)
        self._listeners: list[Callable[[], None]] = []
        self._resolver = ProfileResolver(
            self._transport,
            timeout=self._config.profile_timeout,
            metrics=self._metrics,
            on_change=self._notify,
        )
        self._store = EventStore(self._resolver, metrics=self._metrics, on_change=self._notify)
        self._subscriptions: list[Subscription] = []
        self._state = SessionState.IDLE
        self._generation = 0
        self._address: StreamAddress | None = None
        self._relays: tuple[str, ...] = ()
        self._activity: LiveActivity | None = None

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, config_path: str, transport: Transport | None = None) -> Self:
        """Create a session from a YAML configuration file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the file is not a valid YAML mapping.
            pydantic.ValidationError: If a value is invalid.
        """
        return cls.from_dict(load_yaml(config_path), transport=transport)

    @classmethod
    def from_dict(cls, data: dict[str, Any], transport: Transport | None = None) -> Self:
        """Create a session from a configuration dictionary."""
        return cls(transport, config=SessionConfig(**data))

    # -------------------------------------------------------------------------
    # Read Accessors
    # -------------------------------------------------------------------------

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        """Whether all three subscriptions of the current stream are open."""
        return self._state is SessionState.ACTIVE

    @property
    def address(self) -> StreamAddress | None:
        """Decoded address of the current stream, ``None`` when idle."""
        return self._address

    @property
    def relays(self) -> tuple[str, ...]:
        """Relay set of the current stream, empty when idle."""
        return self._relays

    @property
    def current_activity(self) -> LiveActivity | None:
        """Newest metadata event received for the current stream."""
        return self._activity

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return self._store.messages

    @property
    def zaps(self) -> tuple[ZapReceipt, ...]:
        return self._store.zaps

    @property
    def profiles(self) -> Mapping[str, Profile]:
        return self._resolver.profiles

    @property
    def feed(self) -> list[FeedItem]:
        """Chronological feed, recomputed on every read."""
        return self._store.feed()

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register *callback* to be called after any feed-affecting change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        """Unregister *callback*; unknown callbacks are ignored."""
        with contextlib.suppress(ValueError):
            self._listeners.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:  # Intentionally broad: a faulty listener must not stop ingestion
                self._logger.exception("listener_failed")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self, address: str, extra_relays: Iterable[str] = ()) -> None:
        """Start aggregating the stream identified by *address*.

        Any previous stream is disconnected first. An undecodable address
        is logged and leaves the session idle.

        Args:
            address: NIP-19 ``naddr`` string, optionally ``nostr:`` prefixed.
            extra_relays: Relays merged after the address hints and the
                configured ``relays``.

        Raises:
            TransportOpenError: If a subscription cannot be opened. Already
                opened subscriptions are closed and the session is idle.

        Note:
            A ``disconnect()``, ``close()`` or ``connect()`` issued while this
            call is still opening subscriptions supersedes it: the handle
            being opened is closed and the call returns without activating.
        """
        await self.disconnect()
        generation = self._generation

        try:
            decoded = parse_stream_address(address)
        except DecodeError as e:
            self._logger.warning("address_decode_failed", error=str(e))
            return

        relays = resolve_relay_set(
            decoded.relays,
            [*self._config.relays, *extra_relays],
            self._config.fallback_relays(),
        )
        self._state = SessionState.CONNECTING
        self._address = decoded
        self._relays = relays
        self._logger.info("session_connecting", a_tag=decoded.a_tag, relays=len(relays))

        subscriptions = (
            ("activity", live_activity_filter(decoded), self._on_activity_event),
            ("chat", live_chat_filter(decoded), self._on_chat_event),
            ("zaps", zap_receipt_filter(decoded), self._on_zap_event),
        )
        try:
            for label, event_filter, callback in subscriptions:
                handler = _RoutingHandler(self, label, callback)
                subscription = await self._transport.subscribe(relays, event_filter, handler)
                if self._generation != generation:
                    await self._close_subscription(subscription)
                    self._logger.info("session_connect_superseded", a_tag=decoded.a_tag)
                    return
                self._subscriptions.append(subscription)
        except TransportOpenError as e:
            self._logger.error("session_connect_failed", a_tag=decoded.a_tag, error=str(e))
            if self._generation == generation:
                await self.disconnect()
            raise
        except asyncio.CancelledError:
            if self._generation == generation:
                await self.disconnect()
            raise

        self._state = SessionState.ACTIVE
        self._metrics.set("connected", 1)
        self._logger.info("session_connected", a_tag=decoded.a_tag)
        self._notify()

    async def disconnect(self) -> None:
        """Close all subscriptions and reset the stream state. Idempotent.

        The profile cache survives, so reconnecting to a stream with the
        same participants does not refetch their profiles.
        """
        self._generation += 1
        generation = self._generation
        subscriptions, self._subscriptions = self._subscriptions, []
        for sub in subscriptions:
            await self._close_subscription(sub)
        if self._generation != generation:
            # A newer connect() or disconnect() owns the state now.
            return

        was_idle = self._state is SessionState.IDLE and self._address is None
        self._state = SessionState.IDLE
        self._address = None
        self._relays = ()
        self._activity = None
        self._store.clear()
        self._metrics.set("connected", 0)
        if not was_idle:
            self._logger.info("session_disconnected", closed=len(subscriptions))
            self._notify()

    async def _close_subscription(self, sub: Subscription) -> None:
        try:
            await sub.close()
        except (StreamChatError, NostrSdkError, OSError) as e:
            self._logger.warning("subscription_close_failed", id=sub.id, error=str(e))

    async def close(self) -> None:
        """Disconnect, cancel profile fetches and shut the transport down."""
        await self.disconnect()
        await self._resolver.aclose()
        await self._transport.shutdown()

    async def wait_profiles(self) -> None:
        """Wait until every profile fetch issued so far has finished."""
        await self._resolver.wait_idle()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Event Routing
    # -------------------------------------------------------------------------

    def _on_chat_event(self, raw: RawEvent) -> None:
        self._store.add_chat_event(raw, self._relays)

    def _on_zap_event(self, raw: RawEvent) -> None:
        self._store.add_zap_event(raw, self._relays)

    def _on_activity_event(self, raw: RawEvent) -> None:
        try:
            activity = LiveActivity.from_raw_event(raw)
        except (TypeError, ValueError) as e:
            self._logger.debug("activity_dropped", id=raw.id, reason=str(e))
            return
        if self._activity is not None and activity.created_at <= self._activity.created_at:
            return
        self._activity = activity
        self._logger.debug("activity_updated", title=activity.title, status=activity.status)
        self._notify()
