"""
NIP-57 zap receipt decoding and BOLT11 amount extraction.

A zap receipt (kind 9735) is published by the recipient's lightning
service. The engine reads three of its tags:

* ``description`` -- the JSON-serialized zap request (kind 9734) signed
  by the sender; its ``pubkey`` is the sender and its ``content`` the
  comment. Required: receipts without it are dropped.
* ``bolt11`` -- the paid invoice, whose human-readable part carries the
  amount. Optional: a missing or unparseable invoice yields 0 sats.
* ``p`` -- the recipient public key. Optional.

The amount parser only reads the human-readable prefix of the invoice; it
does not validate the bech32 checksum or signature.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, NamedTuple

from streamchat.core.exceptions import MalformedReceiptError
from streamchat.models.constants import EventKind
from streamchat.models.zap import ZapReceipt


if TYPE_CHECKING:
    from streamchat.models.raw_event import RawEvent


SATS_PER_BTC = 100_000_000

_BOLT11_AMOUNT_RE = re.compile(r"lnbc(\d+)([munp]?)", re.IGNORECASE)


def parse_bolt11_amount(invoice: str) -> int:
    """Extract the amount in satoshis from a BOLT11 invoice.

    Multipliers follow BOLT11: ``m`` milli, ``u`` micro, ``n`` nano and
    ``p`` pico bitcoin; no multiplier means whole bitcoin. Sub-satoshi
    remainders are floored.

    Args:
        invoice: Invoice string, e.g. ``"lnbc500u1p..."``.

    Returns:
        Amount in satoshis, or ``0`` when no ``lnbc<digits>`` prefix is
        found or the digit run is too long to convert.

    Examples:
        ```python
        parse_bolt11_amount("lnbc100m1p...")   # 10_000_000
        parse_bolt11_amount("lnbc500u1p...")   # 50_000
        parse_bolt11_amount("lnbc25p1p...")    # 0
        parse_bolt11_amount("not-an-invoice")  # 0
        ```
    """
    match = _BOLT11_AMOUNT_RE.search(invoice)
    if not match:
        return 0

    try:
        amount = int(match.group(1))
    except ValueError:
        # digit run beyond the interpreter's int conversion limit
        return 0
    multiplier = match.group(2).lower()

    if multiplier == "m":
        return amount * 100_000
    if multiplier == "u":
        return amount * 100
    if multiplier == "n":
        return amount // 10
    if multiplier == "p":
        return amount // 10_000
    return amount * SATS_PER_BTC


class ZapRequest(NamedTuple):
    """Fields of the embedded zap request used by the feed."""

    pubkey: str
    content: str


def parse_zap_request(description: str) -> ZapRequest:
    """Parse the JSON zap request embedded in a receipt's ``description`` tag.

    Raises:
        MalformedReceiptError: If the value is not a JSON object, declares
            a kind other than 9734, or has no non-empty string ``pubkey``.
    """
    try:
        data: Any = json.loads(description)
    except json.JSONDecodeError as e:
        raise MalformedReceiptError(f"zap request is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedReceiptError(f"zap request must be an object, got {type(data).__name__}")

    kind = data.get("kind")
    if kind is not None and kind != EventKind.ZAP_REQUEST:
        raise MalformedReceiptError(f"embedded event is kind {kind}, not a zap request")

    pubkey = data.get("pubkey")
    if not isinstance(pubkey, str) or not pubkey:
        raise MalformedReceiptError("zap request has no pubkey")

    content = data.get("content")
    return ZapRequest(pubkey=pubkey, content=content if isinstance(content, str) else "")


def parse_zap_receipt(raw: RawEvent) -> ZapReceipt:
    """Decode a kind 9735 event into a [ZapReceipt][streamchat.models.zap.ZapReceipt].

    Raises:
        MalformedReceiptError: If the ``description`` tag is missing or
            empty, or the embedded zap request cannot be parsed.
    """
    description = raw.tag_value("description")
    if not description:
        raise MalformedReceiptError("missing description tag")

    request = parse_zap_request(description)

    try:
        return ZapReceipt(
            id=raw.id,
            sender_pubkey=request.pubkey,
            recipient_pubkey=raw.tag_value("p") or "",
            amount=parse_bolt11_amount(raw.tag_value("bolt11") or ""),
            content=request.content,
            created_at=raw.created_at,
        )
    except (TypeError, ValueError) as e:
        raise MalformedReceiptError(f"invalid zap receipt: {e}") from e
