"""streamchat exception hierarchy.

Typed exceptions separate failures that abort a connection attempt from
failures that only drop a single event, so callers never need a bare
``except Exception`` and ``CancelledError`` propagates untouched.

Exception hierarchy:

```text
StreamChatError (base -- never raised directly)
├── ConfigurationError         -- config validation, bad YAML
├── DecodeError                -- malformed or non-naddr stream address
├── ProtocolError              -- per-event NIP decoding failures
│   └── MalformedReceiptError  -- zap receipt without a usable zap request
├── ProfileFetchError          -- kind 0 fetch or parse failure
└── ConnectivityError          -- relay/network failures
    └── TransportOpenError     -- no relay reachable, subscription not opened
```

Only [DecodeError][streamchat.core.exceptions.DecodeError] and
[TransportOpenError][streamchat.core.exceptions.TransportOpenError] can
abort [LiveChatSession.connect()][streamchat.services.session.LiveChatSession.connect];
the first is logged and swallowed at the session boundary, the second
propagates to the caller. Everything else is recovered per event.
"""

from __future__ import annotations


class StreamChatError(Exception):
    """Base exception for all streamchat errors.

    Never raised directly -- always use a specific subclass.
    """


class ConfigurationError(StreamChatError):
    """Invalid or missing configuration (YAML file, CLI flags)."""


class DecodeError(StreamChatError):
    """The stream address is malformed or does not encode a coordinate.

    Raised by
    [parse_stream_address()][streamchat.nips.nip19.parse_stream_address];
    the lenient
    [decode_stream_address()][streamchat.nips.nip19.decode_stream_address]
    turns it into ``None``.
    """


class ProtocolError(StreamChatError):
    """A single event could not be decoded according to its NIP."""


class MalformedReceiptError(ProtocolError):
    """Zap receipt lacks a ``description`` tag or embeds an unparseable zap request.

    Non-fatal: the receipt is dropped and ingestion continues.
    """


class ProfileFetchError(StreamChatError):
    """Fetching or parsing a kind 0 profile failed.

    Non-fatal: the placeholder stays in the cache and display falls back to
    the shortened public key. No retry within the session.
    """


class ConnectivityError(StreamChatError):
    """Base for relay/network connectivity errors."""


class TransportOpenError(ConnectivityError):
    """The transport could not reach any relay or open a subscription.

    Fatal to the connection attempt: propagated out of ``connect()`` with
    the connected flag left false.
    """
