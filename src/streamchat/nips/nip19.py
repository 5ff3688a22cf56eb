"""
NIP-19 ``naddr`` decoding into a [StreamAddress][streamchat.models.address.StreamAddress].

An ``naddr`` is a bech32 TLV encoding of a coordinate (kind, author,
``d`` identifier) plus optional relay hints. Decoding is delegated to
``nostr_sdk.Nip19Coordinate``; any other NIP-19 entity (``npub``,
``note``, ``nevent`` ...) is rejected as a wrong-type address.

Two entry points are provided:

* [parse_stream_address()][streamchat.nips.nip19.parse_stream_address]
  raises [DecodeError][streamchat.core.exceptions.DecodeError];
* [decode_stream_address()][streamchat.nips.nip19.decode_stream_address]
  logs the error and returns ``None``, so failures never cross the decoder
  boundary as exceptions.

Examples:
    ```python
    address = decode_stream_address("naddr1qq...")
    if address is not None:
        print(address.a_tag, address.relays)
    ```
"""

from __future__ import annotations

import logging

from nostr_sdk import Nip19Coordinate, NostrSdkError

from streamchat.core.exceptions import DecodeError
from streamchat.models.address import StreamAddress


logger = logging.getLogger(__name__)

_URI_PREFIX = "nostr:"
_NADDR_HRP = "naddr1"


def parse_stream_address(address: str) -> StreamAddress:
    """Decode an ``naddr`` (optionally ``nostr:`` prefixed) into a stream address.

    Args:
        address: Bech32 ``naddr`` string or ``nostr:naddr...`` URI.

    Returns:
        The decoded [StreamAddress][streamchat.models.address.StreamAddress].

    Raises:
        DecodeError: If the input is not a string, is not an ``naddr``, or
            its payload cannot be decoded.
    """
    if not isinstance(address, str):
        raise DecodeError(f"address must be a str, got {type(address).__name__}")

    value = address.strip()
    if value.lower().startswith(_URI_PREFIX):
        value = value[len(_URI_PREFIX) :]
    value = value.lower()

    if not value.startswith(_NADDR_HRP):
        raise DecodeError(f"not an naddr: {value[:16]!r}")

    try:
        decoded = Nip19Coordinate.from_bech32(value)
        coordinate = decoded.coordinate()
        return StreamAddress(
            kind=coordinate.kind().as_u16(),
            pubkey=coordinate.public_key().to_hex(),
            identifier=coordinate.identifier(),
            relays=tuple(str(relay) for relay in decoded.relays()),
        )
    except (NostrSdkError, ValueError, TypeError) as e:
        raise DecodeError(f"invalid naddr: {e}") from e


def decode_stream_address(address: str) -> StreamAddress | None:
    """Lenient form of [parse_stream_address()][streamchat.nips.nip19.parse_stream_address].

    Returns:
        The decoded address, or ``None`` if decoding failed (logged at
        WARNING level).
    """
    try:
        return parse_stream_address(address)
    except DecodeError as e:
        logger.warning("naddr_decode_failed error=%s", e)
        return None
