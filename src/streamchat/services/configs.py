"""Live chat session configuration models.

[SessionConfig][streamchat.services.configs.SessionConfig] is loaded from
YAML by [LiveChatSession.from_yaml()][streamchat.services.session.LiveChatSession.from_yaml]
or built directly in code. Every field has a default, so an empty file is a
valid configuration.

See Also:
    [MetricsConfig][streamchat.core.metrics.MetricsConfig]: Embedded
        Prometheus endpoint settings.
    [resolve_relay_set()][streamchat.utils.relays.resolve_relay_set]:
        Merges ``relays`` and ``default_relays`` with the address hints.

Examples:
    ```yaml
    relays:
      - wss://relay.example.com
    use_default_relays: true
    profile_timeout: 5
    metrics:
      enabled: true
      port: 8000
    ```
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from rfc3986 import uri_reference
from rfc3986.exceptions import UnpermittedComponentError, ValidationError
from rfc3986.validators import Validator

from streamchat.core.metrics import MetricsConfig
from streamchat.models.constants import DEFAULT_RELAYS


def validate_relay_url(raw: str) -> str:
    """Check that *raw* is an absolute ``ws://`` or ``wss://`` URL.

    Returns:
        The URL with surrounding whitespace removed.

    Raises:
        ValueError: If the scheme is not ``ws``/``wss``, the host is missing,
            or the URL carries a query string or fragment.
    """
    url = raw.strip()
    uri = uri_reference(url).normalize()

    validator = (
        Validator()
        .require_presence_of("scheme", "host")
        .allow_schemes("ws", "wss")
        .check_validity_of("scheme", "host", "port", "path")
    )

    try:
        validator.validate(uri)
    except UnpermittedComponentError:
        raise ValueError("Invalid scheme: must be ws or wss") from None
    except ValidationError as e:
        raise ValueError(f"Invalid URL: {e}") from None

    if uri.query:
        raise ValueError(f"Relay URL must not contain a query string: ?{uri.query}")
    if uri.fragment:
        raise ValueError(f"Relay URL must not contain a fragment: #{uri.fragment}")
    return url


class SessionConfig(BaseModel):
    """Configuration for a [LiveChatSession][streamchat.services.session.LiveChatSession].

    Attributes:
        relays: Extra relay URLs added after the address hints.
        default_relays: Lowest-priority relays, defaults to
            [DEFAULT_RELAYS][streamchat.models.constants.DEFAULT_RELAYS].
        use_default_relays: Whether ``default_relays`` are merged at all.
        profile_timeout: Seconds to wait for a kind 0 profile fetch.
        connect_timeout: Seconds to wait for relays to connect.
        metrics: Prometheus metrics settings.
    """

    relays: list[str] = Field(
        default_factory=list,
        description="Extra relay URLs merged after the address relay hints",
    )
    default_relays: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RELAYS),
        description="Lowest-priority relay URLs",
    )
    use_default_relays: bool = Field(
        default=True,
        description="Merge default_relays into every session relay set",
    )
    profile_timeout: float = Field(
        default=10.0,
        ge=1.0,
        le=60.0,
        description="Timeout in seconds for a single profile fetch",
    )
    connect_timeout: float = Field(
        default=10.0,
        ge=1.0,
        le=60.0,
        description="Timeout in seconds for relay connection",
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig,
        description="Prometheus metrics configuration",
    )

    @field_validator("relays", "default_relays")
    @classmethod
    def validate_relay_urls(cls, v: list[str]) -> list[str]:
        """Validate that all relay URLs are valid WebSocket URLs."""
        validated = []
        for url in v:
            try:
                validated.append(validate_relay_url(url))
            except ValueError as e:
                raise ValueError(f"Invalid relay URL '{url}': {e}") from e
        return validated

    def fallback_relays(self) -> tuple[str, ...]:
        """Default relays to merge, or an empty tuple when disabled."""
        return tuple(self.default_relays) if self.use_default_relays else ()
