"""Tests for models.profile module."""

import pytest

from streamchat.models import Profile


PUBKEY = "ab" * 32


class TestPlaceholder:
    """In-flight marker semantics."""

    def test_placeholder_has_only_pubkey(self):
        profile = Profile.placeholder(PUBKEY)
        assert profile.pubkey == PUBKEY
        assert profile.is_placeholder

    def test_resolved_profile_is_not_placeholder(self):
        assert not Profile(pubkey=PUBKEY, name="alice").is_placeholder


class TestFromContent:
    """Profile.from_content() kind 0 parsing."""

    def test_all_fields(self):
        profile = Profile.from_content(
            PUBKEY,
            '{"name": "alice", "display_name": "Alice", "picture": "https://x/a.png",'
            ' "nip05": "alice@example.com"}',
        )
        assert profile.name == "alice"
        assert profile.display_name == "Alice"
        assert profile.picture == "https://x/a.png"
        assert profile.nip05 == "alice@example.com"

    def test_legacy_display_name_key(self):
        profile = Profile.from_content(PUBKEY, '{"displayName": "Alice"}')
        assert profile.display_name == "Alice"

    def test_display_name_preferred_over_legacy(self):
        profile = Profile.from_content(PUBKEY, '{"display_name": "A", "displayName": "B"}')
        assert profile.display_name == "A"

    def test_absent_fields_tolerated(self):
        profile = Profile.from_content(PUBKEY, "{}")
        assert profile.is_placeholder

    def test_non_string_values_ignored(self):
        profile = Profile.from_content(PUBKEY, '{"name": 42, "picture": null, "nip05": ["x"]}')
        assert profile.name is None
        assert profile.picture is None
        assert profile.nip05 is None

    def test_invalid_json(self):
        with pytest.raises(ValueError, match="not valid JSON"):
            Profile.from_content(PUBKEY, "{not json")

    def test_non_object(self):
        with pytest.raises(ValueError, match="JSON object"):
            Profile.from_content(PUBKEY, '["alice"]')
