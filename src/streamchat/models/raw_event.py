"""
Immutable snapshot of a Nostr event as delivered by the transport.

The transport layer hands events to the engine as ``nostr_sdk.Event``
objects; [RawEvent][streamchat.models.raw_event.RawEvent] copies the six
fields the engine reads into a plain frozen dataclass so decoders and tests
never touch the Rust-backed SDK object directly.

See Also:
    [streamchat.utils.transport][]: Converts SDK events with
        [RawEvent.from_nostr_event()][streamchat.models.raw_event.RawEvent.from_nostr_event].
    [streamchat.services.store][]: Decodes raw events into chat messages
        and zap receipts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ._validation import (
    freeze_tags,
    validate_instance,
    validate_str_no_null,
    validate_str_not_empty,
    validate_timestamp,
)


if TYPE_CHECKING:
    from nostr_sdk import Event as NostrEvent


@dataclass(frozen=True, slots=True)
class RawEvent:
    """Read-only Nostr event with the fields used by the decoders.

    Attributes:
        id: Hex event id (content-derived, unique).
        pubkey: Hex public key of the author.
        kind: Integer event kind.
        created_at: Unix timestamp in seconds.
        content: Raw content string.
        tags: Ordered tags; each tag is a tuple whose first element is the
            tag name.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If ``id`` or ``pubkey`` is empty, or any string
            contains null bytes.

    Examples:
        ```python
        raw = RawEvent(
            id="ab" * 32,
            pubkey="cd" * 32,
            kind=1311,
            created_at=1700000000,
            content="gm",
            tags=[["a", "30311:cd...:stream"]],
        )
        raw.tag_value("a")  # '30311:cd...:stream'
        ```
    """

    id: str
    pubkey: str
    kind: int
    created_at: int
    content: str
    tags: tuple[tuple[str, ...], ...] = field(default=())

    def __post_init__(self) -> None:
        validate_str_not_empty(self.id, "id")
        validate_str_not_empty(self.pubkey, "pubkey")
        validate_instance(self.kind, int, "kind")
        validate_timestamp(self.created_at, "created_at")
        validate_str_no_null(self.content, "content")
        object.__setattr__(self, "tags", freeze_tags(self.tags, "tags"))

    def tag_value(self, name: str) -> str | None:
        """Return the first value of the first tag named *name*.

        Returns ``None`` when no such tag exists or the tag carries no
        value.
        """
        for tag in self.tags:
            if tag and tag[0] == name:
                return tag[1] if len(tag) > 1 else None
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawEvent:
        """Build a [RawEvent][streamchat.models.raw_event.RawEvent] from a NIP-01 JSON object.

        Unknown keys (``sig``) are ignored.

        Raises:
            KeyError: If a required key is missing.
        """
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            kind=data["kind"],
            created_at=data["created_at"],
            content=data.get("content", ""),
            tags=data.get("tags", ()),
        )

    @classmethod
    def from_nostr_event(cls, event: NostrEvent) -> RawEvent:
        """Copy the relevant fields out of a ``nostr_sdk.Event``."""
        return cls(
            id=event.id().to_hex(),
            pubkey=event.author().to_hex(),
            kind=event.kind().as_u16(),
            created_at=event.created_at().as_secs(),
            content=event.content(),
            tags=[list(tag.as_vec()) for tag in event.tags().to_vec()],
        )
