"""Relay set resolution for a live chat session."""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable


def resolve_relay_set(
    hints: Iterable[str],
    extra: Iterable[str],
    defaults: Iterable[str],
) -> tuple[str, ...]:
    """Merge relay sources into one deduplicated connection set.

    Sources are taken in priority order: relay hints embedded in the
    address, then relays supplied by the caller, then the static defaults.
    The first occurrence of each URL wins, so the result is stable for a
    given input. Surrounding whitespace is stripped and empty entries are
    skipped; no other normalization is applied.

    Examples:
        ```python
        resolve_relay_set(["wss://a"], ["wss://b"], ["wss://c", "wss://a"])
        # ('wss://a', 'wss://b', 'wss://c')
        ```
    """
    seen: dict[str, None] = {}
    for source in (hints, extra, defaults):
        for url in source:
            cleaned = url.strip()
            if cleaned:
                seen.setdefault(cleaned, None)
    return tuple(seen)
