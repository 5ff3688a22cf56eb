"""Live activity metadata (kind 30311, NIP-53)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._validation import validate_optional_str, validate_str_not_empty, validate_timestamp


if TYPE_CHECKING:
    from .raw_event import RawEvent


@dataclass(frozen=True, slots=True)
class LiveActivity:
    """Stream metadata published by the activity author.

    Only the tags relevant for display are kept; every field except the
    event identity and ``identifier`` is optional.

    Attributes:
        id: Hex event id of the metadata event.
        pubkey: Hex public key of the activity author.
        identifier: The ``d`` tag value.
        created_at: Unix timestamp in seconds.
        title: ``title`` tag.
        summary: ``summary`` tag.
        image: ``image`` tag (preview URL).
        status: ``status`` tag (``planned``, ``live`` or ``ended``).
        streaming: ``streaming`` tag (media URL).
    """

    id: str
    pubkey: str
    identifier: str
    created_at: int
    title: str | None = None
    summary: str | None = None
    image: str | None = None
    status: str | None = None
    streaming: str | None = None

    def __post_init__(self) -> None:
        validate_str_not_empty(self.id, "id")
        validate_str_not_empty(self.pubkey, "pubkey")
        validate_timestamp(self.created_at, "created_at")
        for name in ("identifier", "title", "summary", "image", "status", "streaming"):
            validate_optional_str(getattr(self, name), name)

    @classmethod
    def from_raw_event(cls, raw: RawEvent) -> LiveActivity:
        """Read the display tags of a kind 30311 event."""
        return cls(
            id=raw.id,
            pubkey=raw.pubkey,
            identifier=raw.tag_value("d") or "",
            created_at=raw.created_at,
            title=raw.tag_value("title"),
            summary=raw.tag_value("summary"),
            image=raw.tag_value("image"),
            status=raw.tag_value("status"),
            streaming=raw.tag_value("streaming"),
        )

    @property
    def is_live(self) -> bool:
        """Whether the author marked the activity as currently live."""
        return self.status == "live"
