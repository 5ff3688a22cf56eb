"""Nostr Implementation Possibilities -- protocol-specific decoding and filters.

The NIPs layer sits in the middle of the diamond DAG, depending on
[streamchat.models][streamchat.models] and the dependency-free
[streamchat.core.exceptions][]. It performs no I/O: it turns addresses,
tags and invoices into models, and models into ``nostr_sdk.Filter``
objects for the transport.

Attributes:
    nip01: Kind 0 profile filter and decoding.
    nip19: ``naddr`` decoding into a
        [StreamAddress][streamchat.models.address.StreamAddress].
    nip53: Live activity, live chat and zap receipt subscription filters.
    nip57: Zap receipt decoding and BOLT11 amount extraction.
"""

from .nip01 import parse_profile_event, profile_filter
from .nip19 import decode_stream_address, parse_stream_address
from .nip53 import live_activity_filter, live_chat_filter, zap_receipt_filter
from .nip57 import ZapRequest, parse_bolt11_amount, parse_zap_receipt, parse_zap_request


__all__ = [
    "ZapRequest",
    "decode_stream_address",
    "live_activity_filter",
    "live_chat_filter",
    "parse_bolt11_amount",
    "parse_profile_event",
    "parse_stream_address",
    "parse_zap_receipt",
    "parse_zap_request",
    "profile_filter",
    "zap_receipt_filter",
]
