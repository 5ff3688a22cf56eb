"""
Relay transport used by the live chat engine.

The engine talks to relays through the small
[Transport][streamchat.utils.transport.Transport] protocol:

* ``subscribe(relays, filter, handler)`` opens a long-lived subscription
  and routes every matching event and end-of-stored-events signal to the
  handler until the returned
  [Subscription][streamchat.utils.transport.Subscription] is closed;
* ``get_one(relays, filter)`` performs a single-shot fetch with a timeout;
* ``shutdown()`` releases connections.

[NostrSdkTransport][streamchat.utils.transport.NostrSdkTransport]
implements it on top of a single ``nostr_sdk.Client``. Relays are added on
demand; a notification task dispatches incoming events by subscription id.
Any object with the same methods can be injected instead (the test suite
uses an in-memory fake).

Note:
    Subscription ids are generated locally and the handler is registered
    *before* the REQ is sent, so events delivered immediately after the
    subscription opens are never lost. Closing a subscription unregisters
    its handler before the CLOSE is sent, so no event is routed after
    ``close()`` starts.

Examples:
    ```python
    transport = NostrSdkTransport(connect_timeout=10.0)
    sub = await transport.subscribe(relays, live_chat_filter(address), handler)
    ...
    await sub.close()
    await transport.shutdown()
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Protocol

from nostr_sdk import ClientBuilder, HandleNotification, NostrSdkError, RelayUrl

from streamchat.core.exceptions import ConnectivityError, TransportOpenError
from streamchat.models.raw_event import RawEvent


if TYPE_CHECKING:
    from collections.abc import Sequence

    from nostr_sdk import Client, Filter, RelayMessage
    from nostr_sdk import Event as NostrEvent


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class SubscriptionHandler(Protocol):
    """Callbacks receiving the traffic of one subscription."""

    def on_event(self, event: RawEvent) -> None: ...

    def on_eose(self, relay_url: str) -> None: ...


class Subscription(Protocol):
    """Handle of an open subscription, owned by whoever opened it."""

    @property
    def id(self) -> str: ...

    async def close(self) -> None: ...


class Transport(Protocol):
    """Relay transport consumed by the session and the profile resolver.

    Implementations report failures as
    [StreamChatError][streamchat.core.exceptions.StreamChatError]
    subclasses, ``NostrSdkError``, ``TimeoutError`` or ``OSError``. Any
    other exception is treated as a bug and logged at error level.
    """

    async def subscribe(
        self,
        relays: Sequence[str],
        event_filter: Filter,
        handler: SubscriptionHandler,
    ) -> Subscription: ...

    async def get_one(
        self,
        relays: Sequence[str],
        event_filter: Filter,
        timeout: float | None = None,  # noqa: ASYNC109
    ) -> RawEvent | None: ...

    async def shutdown(self) -> None: ...


class _SdkSubscription:
    """[Subscription][streamchat.utils.transport.Subscription] backed by a nostr-sdk subscription id."""

    __slots__ = ("_closed", "_id", "_transport")

    def __init__(self, transport: NostrSdkTransport, subscription_id: str) -> None:
        self._transport = transport
        self._id = subscription_id
        self._closed = False

    @property
    def id(self) -> str:
        return self._id

    async def close(self) -> None:
        """Unsubscribe from every relay. Idempotent."""
        if self._closed:
            return
        self._closed = True
        await self._transport._unsubscribe(self._id)


class _NotificationDispatcher(HandleNotification):
    """Routes nostr-sdk notifications to the transport's registered handlers."""

    def __init__(self, transport: NostrSdkTransport) -> None:
        self._transport = transport

    async def handle(self, relay_url: RelayUrl, subscription_id: str, event: NostrEvent) -> None:
        self._transport._dispatch_event(str(relay_url), subscription_id, event)

    async def handle_msg(self, relay_url: RelayUrl, msg: RelayMessage) -> None:
        msg_enum = msg.as_enum()
        if msg_enum.is_end_of_stored_events():
            self._transport._dispatch_eose(str(relay_url), msg_enum.subscription_id)


class NostrSdkTransport:
    """[Transport][streamchat.utils.transport.Transport] built on one ``nostr_sdk.Client``.

    Args:
        connect_timeout: Seconds to wait for newly added relays to connect.
        fetch_timeout: Default timeout in seconds for
            [get_one()][streamchat.utils.transport.NostrSdkTransport.get_one].
        client: Pre-built client (a read-only client is built lazily
            otherwise).

    Raises:
        TransportOpenError: From ``subscribe()`` / ``get_one()`` when none
            of the requested relays can be reached or the REQ is rejected.
    """

    def __init__(
        self,
        *,
        connect_timeout: float = DEFAULT_TIMEOUT,
        fetch_timeout: float = DEFAULT_TIMEOUT,
        client: Client | None = None,
    ) -> None:
        self._connect_timeout = connect_timeout
        self._fetch_timeout = fetch_timeout
        self._client = client
        self._relays: set[str] = set()
        self._connected: set[str] = set()
        self._handlers: dict[str, SubscriptionHandler] = {}
        self._ids = itertools.count(1)
        self._relay_lock = asyncio.Lock()
        self._notifications_task: asyncio.Task[None] | None = None

    @property
    def relays(self) -> frozenset[str]:
        """Relay URLs added to the client so far."""
        return frozenset(self._relays)

    async def _ensure_relays(self, relays: Sequence[str]) -> Client:
        """Add unknown relays to the client and connect them.

        Raises:
            TransportOpenError: If no relay known to the client is connected
                after the attempt.
        """
        async with self._relay_lock:
            if self._client is None:
                self._client = ClientBuilder().build()

            added = []
            for url in relays:
                if url in self._relays:
                    continue
                try:
                    await self._client.add_relay(RelayUrl.parse(url))
                except NostrSdkError as e:
                    logger.warning("relay_add_failed relay=%s error=%s", url, e)
                    continue
                self._relays.add(url)
                added.append(url)

            if added:
                try:
                    output = await self._client.try_connect(
                        timedelta(seconds=self._connect_timeout)
                    )
                except NostrSdkError as e:
                    raise TransportOpenError(f"relay connection failed: {e}") from e
                self._connected.update(str(url) for url in output.success)
                for url, error in output.failed.items():
                    logger.debug("relay_connect_failed relay=%s error=%s", url, error)
                logger.debug(
                    "relays_connected added=%s connected=%s",
                    len(added),
                    len(self._connected),
                )

            if not self._connected:
                raise TransportOpenError(f"no relay reachable out of {len(relays)} requested")

            if self._notifications_task is None:
                self._notifications_task = asyncio.create_task(
                    self._client.handle_notifications(_NotificationDispatcher(self))
                )

            return self._client

    async def subscribe(
        self,
        relays: Sequence[str],
        event_filter: Filter,
        handler: SubscriptionHandler,
    ) -> Subscription:
        """Open a subscription and route its traffic to *handler*.

        The REQ is sent to every relay known to the client, which includes
        *relays*.
        """
        client = await self._ensure_relays(relays)
        subscription_id = f"streamchat-{next(self._ids)}"
        self._handlers[subscription_id] = handler
        try:
            await client.subscribe_with_id(subscription_id, event_filter, None)
        except NostrSdkError as e:
            self._handlers.pop(subscription_id, None)
            raise TransportOpenError(f"subscribe failed: {e}") from e
        logger.debug("subscription_opened id=%s", subscription_id)
        return _SdkSubscription(self, subscription_id)

    async def get_one(
        self,
        relays: Sequence[str],
        event_filter: Filter,
        timeout: float | None = None,  # noqa: ASYNC109
    ) -> RawEvent | None:
        """Fetch the newest event matching *event_filter*, or ``None``.

        Raises:
            TransportOpenError: If no relay can be reached.
            ConnectivityError: If the fetch itself fails.
        """
        client = await self._ensure_relays(relays)
        effective = self._fetch_timeout if timeout is None else timeout
        try:
            events = await client.fetch_events(event_filter, timedelta(seconds=effective))
        except NostrSdkError as e:
            raise ConnectivityError(f"fetch failed: {e}") from e

        newest: RawEvent | None = None
        for evt in events.to_vec():
            try:
                raw = RawEvent.from_nostr_event(evt)
            except (ValueError, TypeError) as e:
                logger.debug("fetched_event_invalid error=%s", e)
                continue
            if newest is None or raw.created_at > newest.created_at:
                newest = raw
        return newest

    async def _unsubscribe(self, subscription_id: str) -> None:
        self._handlers.pop(subscription_id, None)
        if self._client is None:
            return
        try:
            await self._client.unsubscribe(subscription_id)
        except NostrSdkError as e:
            logger.debug("unsubscribe_failed id=%s error=%s", subscription_id, e)
        logger.debug("subscription_closed id=%s", subscription_id)

    def _dispatch_event(self, relay_url: str, subscription_id: str, event: NostrEvent) -> None:
        handler = self._handlers.get(subscription_id)
        if handler is None:
            return
        try:
            raw = RawEvent.from_nostr_event(event)
        except (ValueError, TypeError) as e:
            logger.debug("event_invalid relay=%s error=%s", relay_url, e)
            return
        try:
            handler.on_event(raw)
        except Exception:  # Intentionally broad: one bad event must not stop the notification loop
            logger.exception("event_handler_failed relay=%s id=%s", relay_url, raw.id)

    def _dispatch_eose(self, relay_url: str, subscription_id: str) -> None:
        handler = self._handlers.get(subscription_id)
        if handler is not None:
            handler.on_eose(relay_url)

    async def shutdown(self) -> None:
        """Cancel notification dispatch and close all relay connections. Idempotent."""
        self._handlers.clear()
        if self._notifications_task is not None:
            self._notifications_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, NostrSdkError):
                await self._notifications_task
            self._notifications_task = None
        if self._client is not None:
            # nostr-sdk Rust FFI can raise arbitrary exception types during shutdown.
            with contextlib.suppress(Exception):
                await self._client.shutdown()
            self._client = None
        self._relays.clear()
        self._connected.clear()
