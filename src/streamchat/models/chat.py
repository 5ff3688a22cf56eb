"""Decoded live chat message (kind 1311)."""

from __future__ import annotations

from dataclasses import dataclass

from ._validation import validate_str_no_null, validate_str_not_empty, validate_timestamp


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """A chat message posted to a live activity.

    Created once on first receipt of the event and never mutated. Display
    fields are derived at feed time from the profile cache, see
    [EnrichedChatMessage][streamchat.models.feed.EnrichedChatMessage].

    Attributes:
        id: Hex event id.
        pubkey: Hex public key of the author.
        content: Message text.
        created_at: Unix timestamp in seconds.
    """

    id: str
    pubkey: str
    content: str
    created_at: int

    def __post_init__(self) -> None:
        validate_str_not_empty(self.id, "id")
        validate_str_not_empty(self.pubkey, "pubkey")
        validate_str_no_null(self.content, "content")
        validate_timestamp(self.created_at, "created_at")
