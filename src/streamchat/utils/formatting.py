"""Display helpers shared by the feed composer and the CLI."""

from __future__ import annotations


_SHORT_PUBKEY_MAX = 12
_SHORT_PUBKEY_EDGE = 6


def shorten_pubkey(pubkey: str) -> str:
    """Abbreviate a public key to ``first6...last6``; short keys are returned unchanged."""
    if len(pubkey) <= _SHORT_PUBKEY_MAX:
        return pubkey
    return f"{pubkey[:_SHORT_PUBKEY_EDGE]}...{pubkey[-_SHORT_PUBKEY_EDGE:]}"


def format_sats(sats: int) -> str:
    """Render a satoshi amount compactly: ``2.5M``, ``1.2k`` or ``999``."""
    if sats >= 1_000_000:
        return f"{sats / 1_000_000:.1f}M"
    if sats >= 1_000:
        return f"{sats / 1_000:.1f}k"
    return str(sats)
