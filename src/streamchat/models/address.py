"""Decoded live activity address (NIP-19 ``naddr`` payload)."""

from __future__ import annotations

from dataclasses import dataclass, field

from ._validation import (
    validate_instance,
    validate_str_no_null,
    validate_str_not_empty,
)
from .constants import EVENT_KIND_MAX


@dataclass(frozen=True, slots=True)
class StreamAddress:
    """Immutable reference to a parameterized replaceable live activity event.

    Attributes:
        kind: Event kind of the referenced activity (normally 30311).
        pubkey: Hex public key of the activity author.
        identifier: The ``d`` tag value of the activity.
        relays: Relay hints embedded in the encoded address, in order.

    Examples:
        ```python
        address = StreamAddress(30311, "ab" * 32, "my-stream", ("wss://relay.example",))
        address.a_tag  # '30311:abab...ab:my-stream'
        ```
    """

    kind: int
    pubkey: str
    identifier: str
    relays: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        validate_instance(self.kind, int, "kind")
        if not 0 <= self.kind <= EVENT_KIND_MAX:
            raise ValueError(f"kind {self.kind} out of valid range (0-{EVENT_KIND_MAX})")
        validate_str_not_empty(self.pubkey, "pubkey")
        validate_str_no_null(self.identifier, "identifier")
        for relay in self.relays:
            validate_str_no_null(relay, "relays")
        object.__setattr__(self, "relays", tuple(self.relays))

    @property
    def a_tag(self) -> str:
        """Composite ``<kind>:<pubkey>:<identifier>`` value used in ``#a`` filters."""
        return f"{self.kind}:{self.pubkey}:{self.identifier}"
