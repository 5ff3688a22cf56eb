"""Tests for utils.relays module."""

from streamchat.models import DEFAULT_RELAYS
from streamchat.utils.relays import resolve_relay_set


class TestResolveRelaySet:
    """resolve_relay_set() merge order and dedup."""

    def test_priority_and_dedup(self):
        result = resolve_relay_set(["wss://a"], ["wss://b"], ["wss://c", "wss://a"])
        assert result == ("wss://a", "wss://b", "wss://c")

    def test_duplicates_within_source(self):
        assert resolve_relay_set(["wss://a", "wss://a"], [], []) == ("wss://a",)

    def test_whitespace_and_empty_entries(self):
        assert resolve_relay_set([" wss://a ", ""], ["  "], ["wss://a"]) == ("wss://a",)

    def test_all_empty(self):
        assert resolve_relay_set([], [], []) == ()

    def test_defaults_only(self):
        result = resolve_relay_set([], [], DEFAULT_RELAYS)
        assert result == DEFAULT_RELAYS
        assert len(result) == 10

    def test_no_normalization_beyond_strip(self):
        result = resolve_relay_set(["wss://a/"], ["wss://a"], [])
        assert result == ("wss://a/", "wss://a")

    def test_accepts_generators(self):
        result = resolve_relay_set((u for u in ["wss://a"]), iter(["wss://b"]), ())
        assert result == ("wss://a", "wss://b")
