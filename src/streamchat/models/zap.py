"""Decoded zap receipt (kind 9735)."""

from __future__ import annotations

from dataclasses import dataclass

from ._validation import validate_str_no_null, validate_str_not_empty, validate_timestamp


@dataclass(frozen=True, slots=True)
class ZapReceipt:
    """A completed lightning payment attached to a live activity.

    The sender and comment come from the zap request embedded in the
    receipt's ``description`` tag, the amount from its ``bolt11`` invoice.

    Attributes:
        id: Hex id of the receipt event.
        sender_pubkey: Hex public key that signed the zap request.
        recipient_pubkey: Value of the receipt's ``p`` tag (may be empty).
        amount: Amount in satoshis (0 when the invoice is absent or
            unparseable).
        content: Comment from the zap request (may be empty).
        created_at: Unix timestamp of the receipt in seconds.
    """

    id: str
    sender_pubkey: str
    recipient_pubkey: str
    amount: int
    content: str
    created_at: int

    def __post_init__(self) -> None:
        validate_str_not_empty(self.id, "id")
        validate_str_not_empty(self.sender_pubkey, "sender_pubkey")
        validate_str_no_null(self.recipient_pubkey, "recipient_pubkey")
        validate_timestamp(self.amount, "amount")
        validate_str_no_null(self.content, "content")
        validate_timestamp(self.created_at, "created_at")
