"""
Pytest configuration and shared fixtures for streamchat tests.

Provides:
- An in-memory transport (see ``factories.FakeTransport``)
- Real nostr-sdk public keys and a kind 30311 naddr
- A session config without default relays
"""

from __future__ import annotations

import logging

import pytest
from factories import HINT_RELAY, FakeTransport, make_naddr, new_pubkey

from streamchat.services.configs import SessionConfig


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def host_pubkey() -> str:
    return new_pubkey()


@pytest.fixture
def alice() -> str:
    return new_pubkey()


@pytest.fixture
def bob() -> str:
    return new_pubkey()


@pytest.fixture
def naddr(host_pubkey: str) -> str:
    return make_naddr(host_pubkey, relays=(HINT_RELAY,))


@pytest.fixture
def config() -> SessionConfig:
    """Config without default relays so relay sets stay small."""
    return SessionConfig(use_default_relays=False, relays=["wss://extra.example.com"])
