"""
Single-flight, memoized kind 0 profile resolution.

The resolver owns a mapping from public key to
[Profile][streamchat.models.profile.Profile] that doubles as result cache
and in-flight marker. Absence means the identity was never requested; a
[placeholder][streamchat.models.profile.Profile.placeholder] means a fetch
was issued and has not resolved (or failed); any other entry is final.

The placeholder is inserted synchronously, before the fetch task is
created, so concurrent ``resolve_if_needed()`` calls for one identity
issue at most one network request without a lock. Failed fetches keep
their placeholder and are never retried within the resolver's lifetime.

See Also:
    [profile_filter()][streamchat.nips.nip01.profile_filter],
    [parse_profile_event()][streamchat.nips.nip01.parse_profile_event]:
        Filter construction and kind 0 decoding.
    [EventStore][streamchat.services.store.EventStore]: Calls
        ``resolve_if_needed()`` for every stored author and zap sender.
"""

from __future__ import annotations

import asyncio
from functools import partial
from types import MappingProxyType
from typing import TYPE_CHECKING

from nostr_sdk import NostrSdkError

from streamchat.core.exceptions import ProfileFetchError, StreamChatError
from streamchat.core.logger import Logger
from streamchat.core.metrics import SessionMetrics
from streamchat.models.profile import Profile
from streamchat.nips.nip01 import parse_profile_event, profile_filter


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from streamchat.utils.transport import Transport


class ProfileResolver:
    """Fetches and caches display profiles exactly once per identity.

    Args:
        transport: Relay transport used for the single-shot fetch.
        timeout: Seconds passed to ``Transport.get_one()``.
        metrics: Recorder for ``profile_fetches`` / ``profile_failures``.
        on_change: Called after a placeholder is replaced by a resolved
            profile.

    Examples:
        ```python
        resolver = ProfileResolver(transport)
        resolver.resolve_if_needed(pubkey, relays)
        resolver.resolve_if_needed(pubkey, relays)  # no second fetch
        await resolver.wait_idle()
        resolver.get(pubkey)
        ```
    """

    def __init__(
        self,
        transport: Transport,
        *,
        timeout: float = 10.0,
        metrics: SessionMetrics | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._transport = transport
        self._timeout = timeout
        self._metrics = metrics or SessionMetrics()
        self._on_change = on_change
        self._profiles: dict[str, Profile] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._logger = Logger("profiles")

    @property
    def profiles(self) -> Mapping[str, Profile]:
        """Read-only live view of the cache, placeholders included."""
        return MappingProxyType(self._profiles)

    @property
    def pending(self) -> int:
        """Number of fetches currently in flight."""
        return len(self._tasks)

    def get(self, pubkey: str) -> Profile | None:
        """Cached profile for *pubkey*, a placeholder, or ``None`` if never requested."""
        return self._profiles.get(pubkey)

    def resolve_if_needed(self, pubkey: str, relays: Iterable[str]) -> None:
        """Schedule a profile fetch for *pubkey* unless one was already issued.

        Must be called from a running event loop. Returns immediately; the
        fetch runs as a background task.
        """
        if pubkey in self._profiles:
            return
        self._profiles[pubkey] = Profile.placeholder(pubkey)
        task = asyncio.create_task(self._fetch(pubkey, tuple(relays)))
        self._tasks.add(task)
        task.add_done_callback(partial(self._on_fetch_done, pubkey))

    def _on_fetch_done(self, pubkey: str, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        # Errors outside the Transport.get_one() contract land here.
        exc = task.exception()
        if exc is not None:
            self._metrics.inc("profile_failures")
            self._logger.error(
                "profile_fetch_crashed", pubkey=pubkey, error=f"{type(exc).__name__}: {exc}"
            )

    async def _fetch(self, pubkey: str, relays: tuple[str, ...]) -> None:
        self._metrics.inc("profile_fetches")
        try:
            event_filter = profile_filter(pubkey)
            raw = await self._transport.get_one(relays, event_filter, timeout=self._timeout)
            if raw is None:
                raise ProfileFetchError("no metadata event found")
            profile = parse_profile_event(raw, pubkey)
        except (StreamChatError, NostrSdkError, TimeoutError, OSError) as e:
            self._metrics.inc("profile_failures")
            self._logger.debug("profile_fetch_failed", pubkey=pubkey, error=str(e))
            return

        self._profiles[pubkey] = profile
        self._logger.debug("profile_resolved", pubkey=pubkey, name=profile.display_name or profile.name)
        if self._on_change is not None:
            self._on_change()

    async def wait_idle(self) -> None:
        """Wait until every fetch issued so far has finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel in-flight fetches. The cache is kept."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
