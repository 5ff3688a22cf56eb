"""Tests for nips.nip19 naddr decoding."""

import logging

import pytest
from factories import HINT_RELAY, STREAM_ID, make_naddr, new_pubkey
from nostr_sdk import Keys

from streamchat.core.exceptions import DecodeError
from streamchat.models import EventKind
from streamchat.nips.nip19 import decode_stream_address, parse_stream_address


class TestParseStreamAddress:
    """parse_stream_address() strict decoding."""

    def test_round_trip(self):
        pubkey = new_pubkey()
        address = parse_stream_address(make_naddr(pubkey, relays=(HINT_RELAY,)))
        assert address.kind == EventKind.LIVE_EVENT
        assert address.pubkey == pubkey
        assert address.identifier == STREAM_ID
        assert [r.rstrip("/") for r in address.relays] == [HINT_RELAY]
        assert address.a_tag == f"30311:{pubkey}:{STREAM_ID}"

    def test_without_relay_hints(self):
        address = parse_stream_address(make_naddr(new_pubkey()))
        assert address.relays == ()

    def test_nostr_uri_prefix(self):
        pubkey = new_pubkey()
        address = parse_stream_address("nostr:" + make_naddr(pubkey))
        assert address.pubkey == pubkey

    def test_surrounding_whitespace(self):
        pubkey = new_pubkey()
        assert parse_stream_address(f"  {make_naddr(pubkey)}\n").pubkey == pubkey

    def test_uppercase_accepted(self):
        pubkey = new_pubkey()
        assert parse_stream_address(make_naddr(pubkey).upper()).pubkey == pubkey

    def test_npub_rejected(self):
        npub = Keys.generate().public_key().to_bech32()
        with pytest.raises(DecodeError, match="not an naddr"):
            parse_stream_address(npub)

    def test_garbage_rejected(self):
        with pytest.raises(DecodeError):
            parse_stream_address("hello world")

    def test_corrupted_checksum_rejected(self):
        naddr = make_naddr(new_pubkey())
        corrupted = naddr[:-1] + ("q" if naddr[-1] != "q" else "p")
        with pytest.raises(DecodeError, match="invalid naddr"):
            parse_stream_address(corrupted)

    def test_non_string_rejected(self):
        with pytest.raises(DecodeError, match="must be a str"):
            parse_stream_address(None)  # type: ignore[arg-type]


class TestDecodeStreamAddress:
    """decode_stream_address() lenient decoding."""

    def test_valid(self):
        assert decode_stream_address(make_naddr(new_pubkey())) is not None

    def test_invalid_returns_none_and_logs(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="streamchat.nips.nip19"):
            assert decode_stream_address("naddr1invalid") is None
        assert "naddr_decode_failed" in caplog.text
