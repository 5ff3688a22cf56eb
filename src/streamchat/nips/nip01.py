"""NIP-01 user metadata (kind 0) lookup filter and decoding."""

from __future__ import annotations

from typing import TYPE_CHECKING

from nostr_sdk import Filter, Kind, PublicKey

from streamchat.core.exceptions import ProfileFetchError
from streamchat.models.constants import EventKind
from streamchat.models.profile import Profile


if TYPE_CHECKING:
    from streamchat.models.raw_event import RawEvent


def profile_filter(pubkey: str) -> Filter:
    """Filter matching the kind 0 metadata of a single author."""
    return Filter().kind(Kind(EventKind.SET_METADATA)).author(PublicKey.parse(pubkey)).limit(1)


def parse_profile_event(raw: RawEvent, pubkey: str) -> Profile:
    """Decode a kind 0 event fetched for *pubkey*.

    Raises:
        ProfileFetchError: If the event is not a kind 0 event by *pubkey*
            or its content is not a JSON object.
    """
    if raw.kind != EventKind.SET_METADATA:
        raise ProfileFetchError(f"expected kind 0, got kind {raw.kind}")
    if raw.pubkey.lower() != pubkey.lower():
        raise ProfileFetchError(f"metadata author mismatch: {raw.pubkey[:16]}...")
    try:
        return Profile.from_content(pubkey, raw.content)
    except ValueError as e:
        raise ProfileFetchError(str(e)) from e
