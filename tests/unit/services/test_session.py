"""Tests for services.session LiveChatSession."""

import asyncio
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from factories import (
    HINT_RELAY,
    FakeTransport,
    make_activity_event,
    make_chat_event,
    make_naddr,
    make_profile_event,
    make_zap_event,
    new_pubkey,
)
from pydantic import ValidationError

from streamchat.core.exceptions import ConfigurationError, TransportOpenError
from streamchat.models import DEFAULT_RELAYS, EventKind
from streamchat.services.configs import SessionConfig
from streamchat.services.session import LiveChatSession, SessionState


@pytest.fixture
def session(transport: FakeTransport, config: SessionConfig) -> LiveChatSession:
    return LiveChatSession(transport, config=config)


class TestConnect:
    """connect() lifecycle."""

    async def test_opens_three_subscriptions(self, session, transport, naddr, host_pubkey):
        await session.connect(naddr)

        assert session.is_connected
        assert session.state is SessionState.ACTIVE
        assert len(transport.subscriptions) == 3
        kinds = [opened.filter["kinds"] for opened in transport.subscriptions]
        assert kinds == [[30311], [1311], [9735]]
        a_tag = f"30311:{host_pubkey}:stream-1"
        assert session.address.a_tag == a_tag
        assert transport.subscription_for(EventKind.LIVE_CHAT_MESSAGE).filter["#a"] == [a_tag]
        assert transport.subscription_for(EventKind.ZAP_RECEIPT).filter["#a"] == [a_tag]

    async def test_relay_set_order(self, session, transport, naddr):
        await session.connect(naddr, ["wss://caller.example.com", "wss://extra.example.com"])
        relays = [url.rstrip("/") for url in session.relays]
        assert relays == [HINT_RELAY, "wss://extra.example.com", "wss://caller.example.com"]
        assert all(opened.relays == session.relays for opened in transport.subscriptions)

    async def test_default_relays_merged(self, transport, naddr):
        session = LiveChatSession(transport)
        await session.connect(naddr)
        assert session.relays[-len(DEFAULT_RELAYS) :] == DEFAULT_RELAYS

    async def test_invalid_address_stays_idle(self, session, transport):
        await session.connect("naddr1notvalid")
        assert not session.is_connected
        assert session.state is SessionState.IDLE
        assert session.address is None
        assert transport.subscriptions == []

    async def test_transport_failure_closes_opened_handles(self, session, transport, naddr):
        transport.fail_subscribe_at = 1
        with pytest.raises(TransportOpenError, match="no relay reachable"):
            await session.connect(naddr)
        assert not session.is_connected
        assert session.state is SessionState.IDLE
        assert transport.subscriptions[0].handle.closed

    async def test_reconnect_disconnects_previous(self, session, transport, naddr, alice):
        await session.connect(naddr)
        first = list(transport.subscriptions)
        transport.deliver(EventKind.LIVE_CHAT_MESSAGE, make_chat_event(1, alice))

        await session.connect(make_naddr(new_pubkey()))
        assert all(opened.handle.closed for opened in first)
        assert len(transport.subscriptions) == 6
        assert session.feed == []
        await session.wait_profiles()

    async def test_late_events_from_previous_stream_ignored(
        self, session, transport, naddr, alice
    ):
        await session.connect(naddr)
        old_chat = transport.subscription_for(EventKind.LIVE_CHAT_MESSAGE)
        await session.connect(make_naddr(new_pubkey()))

        old_chat.handler.on_event(make_chat_event(1, alice))
        assert session.messages == ()


class TestInterleavedLifecycle:
    """disconnect() / connect() landing while connect() awaits the transport."""

    @staticmethod
    async def _until_subscribe_calls(transport: FakeTransport, count: int) -> None:
        while transport._subscribe_calls < count:
            await asyncio.sleep(0)

    async def test_disconnect_during_connect(self, session, transport, naddr, alice):
        transport.subscribe_gate = asyncio.Event()
        pending = asyncio.create_task(session.connect(naddr))
        await self._until_subscribe_calls(transport, 1)

        await session.disconnect()
        transport.subscribe_gate.set()
        await pending

        assert not session.is_connected
        assert session.state is SessionState.IDLE
        assert session.address is None
        assert len(transport.subscriptions) == 1
        assert all(opened.handle.closed for opened in transport.subscriptions)

        transport.subscriptions[0].handler.on_event(make_chat_event(1, alice))
        assert session.messages == ()
        assert session.current_activity is None

    async def test_close_during_connect(self, session, transport, naddr):
        transport.subscribe_gate = asyncio.Event()
        pending = asyncio.create_task(session.connect(naddr))
        await self._until_subscribe_calls(transport, 1)

        await session.close()
        transport.subscribe_gate.set()
        await pending

        assert not session.is_connected
        assert transport.shutdown_called
        assert all(opened.handle.closed for opened in transport.subscriptions)

    async def test_second_connect_supersedes_first(self, session, transport, naddr, host_pubkey):
        other_host = new_pubkey()
        transport.subscribe_gate = asyncio.Event()
        first = asyncio.create_task(session.connect(naddr))
        await self._until_subscribe_calls(transport, 1)
        second = asyncio.create_task(session.connect(make_naddr(other_host)))
        await self._until_subscribe_calls(transport, 2)

        transport.subscribe_gate.set()
        await asyncio.gather(first, second)

        assert session.is_connected
        assert session.address.pubkey == other_host
        open_subs = [opened for opened in transport.subscriptions if not opened.handle.closed]
        closed_subs = [opened for opened in transport.subscriptions if opened.handle.closed]
        assert len(open_subs) == 3
        assert [opened.filter["authors"] for opened in closed_subs] == [[host_pubkey]]
        assert open_subs[0].filter["authors"] == [other_host]
        a_tag = f"30311:{other_host}:stream-1"
        assert all(opened.filter["#a"] == [a_tag] for opened in open_subs[1:])

    async def test_connect_during_slow_disconnect(self, session, transport, naddr):
        await session.connect(naddr)
        first = list(transport.subscriptions)
        gate = asyncio.Event()
        transport.close_gate = gate
        slow = asyncio.create_task(session.disconnect())
        while not first[0].handle.closed:
            await asyncio.sleep(0)

        transport.close_gate = None
        other_host = new_pubkey()
        await session.connect(make_naddr(other_host))
        gate.set()
        await slow

        assert session.is_connected
        assert session.address.pubkey == other_host
        assert all(opened.handle.closed for opened in first)
        assert not any(opened.handle.closed for opened in transport.subscriptions[3:])


class TestIngestion:
    """Events routed from subscriptions into the store."""

    async def test_chat_and_zaps_merged(self, session, transport, naddr, alice, bob):
        await session.connect(naddr)
        transport.deliver(EventKind.LIVE_CHAT_MESSAGE, make_chat_event(1, alice, created_at=20))
        transport.deliver(EventKind.ZAP_RECEIPT, make_zap_event(2, bob, created_at=10))
        transport.deliver(EventKind.LIVE_CHAT_MESSAGE, make_chat_event(1, alice, created_at=20))

        feed = session.feed
        assert [item.kind for item in feed] == ["zap", "message"]
        assert len(session.messages) == 1
        assert len(session.zaps) == 1
        await session.wait_profiles()

    async def test_profiles_resolved_on_session_relays(self, session, transport, naddr, alice):
        transport.profiles[alice] = make_profile_event(9, alice, display_name="Alice")
        await session.connect(naddr)
        transport.deliver(EventKind.LIVE_CHAT_MESSAGE, make_chat_event(1, alice))
        await session.wait_profiles()

        assert session.feed[0].data.display_name == "Alice"
        assert transport.fetches[0][0] == session.relays
        assert session.profiles[alice].display_name == "Alice"

    async def test_malformed_zap_dropped(self, session, transport, naddr, bob):
        await session.connect(naddr)
        transport.deliver(EventKind.ZAP_RECEIPT, make_zap_event(1, bob, include_description=False))
        assert session.zaps == ()
        assert bob not in session.profiles

    async def test_activity_newest_wins(self, session, transport, naddr, host_pubkey):
        await session.connect(naddr)
        transport.deliver(
            EventKind.LIVE_EVENT, make_activity_event(1, host_pubkey, title="new", created_at=200)
        )
        transport.deliver(
            EventKind.LIVE_EVENT, make_activity_event(2, host_pubkey, title="old", created_at=100)
        )
        assert session.current_activity.title == "new"
        assert session.current_activity.is_live
        assert session.is_connected

    async def test_eose_does_not_change_state(self, session, transport, naddr):
        await session.connect(naddr)
        transport.subscription_for(EventKind.LIVE_CHAT_MESSAGE).handler.on_eose(HINT_RELAY)
        assert session.is_connected


class TestDisconnect:
    """disconnect() reset semantics."""

    async def test_resets_state(self, session, transport, naddr, alice, host_pubkey):
        await session.connect(naddr)
        transport.deliver(EventKind.LIVE_CHAT_MESSAGE, make_chat_event(1, alice))
        transport.deliver(EventKind.LIVE_EVENT, make_activity_event(2, host_pubkey))
        await session.wait_profiles()

        await session.disconnect()

        assert session.feed == []
        assert not session.is_connected
        assert session.current_activity is None
        assert session.relays == ()
        assert all(opened.handle.closed for opened in transport.subscriptions)
        assert alice in session.profiles

    async def test_idempotent(self, session, naddr):
        await session.disconnect()
        await session.connect(naddr)
        await session.disconnect()
        await session.disconnect()
        assert session.state is SessionState.IDLE

    async def test_close_shuts_down_transport(self, session, transport, naddr):
        await session.connect(naddr)
        await session.close()
        assert transport.shutdown_called
        assert not session.is_connected

    async def test_context_manager(self, transport, config, naddr):
        async with LiveChatSession(transport, config=config) as session:
            await session.connect(naddr)
            assert session.is_connected
        assert transport.shutdown_called
        assert not session.is_connected


class TestListeners:
    """Change notification."""

    async def test_notified_on_message(self, session, transport, naddr, alice):
        listener = MagicMock()
        await session.connect(naddr)
        session.add_listener(listener)
        transport.deliver(EventKind.LIVE_CHAT_MESSAGE, make_chat_event(1, alice))
        listener.assert_called()
        await session.wait_profiles()

    async def test_removed_listener_not_called(self, session, transport, naddr, alice):
        listener = MagicMock()
        session.add_listener(listener)
        session.remove_listener(listener)
        session.remove_listener(listener)
        await session.connect(naddr)
        transport.deliver(EventKind.LIVE_CHAT_MESSAGE, make_chat_event(1, alice))
        listener.assert_not_called()
        await session.wait_profiles()

    async def test_faulty_listener_does_not_stop_ingestion(
        self, session, transport, naddr, alice
    ):
        session.add_listener(MagicMock(side_effect=RuntimeError("boom")))
        await session.connect(naddr)
        transport.deliver(EventKind.LIVE_CHAT_MESSAGE, make_chat_event(1, alice))
        assert len(session.messages) == 1
        await session.wait_profiles()


class TestFactories:
    """from_dict() / from_yaml() construction."""

    def test_from_dict(self, transport):
        session = LiveChatSession.from_dict({"profile_timeout": 5}, transport=transport)
        assert session.config.profile_timeout == 5

    def test_from_dict_invalid(self, transport):
        with pytest.raises(ValidationError):
            LiveChatSession.from_dict({"relays": ["ftp://x"]}, transport=transport)

    def test_from_yaml(self, tmp_path: Path, transport):
        path = tmp_path / "session.yaml"
        path.write_text("use_default_relays: false\nrelays:\n  - wss://a.example.com\n")
        session = LiveChatSession.from_yaml(str(path), transport=transport)
        assert session.config.relays == ["wss://a.example.com"]
        assert session.config.fallback_relays() == ()

    def test_from_yaml_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            LiveChatSession.from_yaml(str(tmp_path / "missing.yaml"))

    def test_from_yaml_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("- a\n")
        with pytest.raises(ConfigurationError):
            LiveChatSession.from_yaml(str(path))
