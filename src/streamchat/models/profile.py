"""
User profile decoded from a kind 0 metadata event.

The profile cache maps a public key to a
[Profile][streamchat.models.profile.Profile]. An entry carrying only the
public key is a placeholder: the fetch was issued but has not (or never
will) resolve.

See Also:
    [streamchat.services.profiles][]: The resolver that owns the cache.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ._validation import validate_optional_str, validate_str_not_empty


def _str_or_none(value: Any) -> str | None:
    """Return *value* if it is a string without null bytes, else ``None``."""
    if isinstance(value, str) and "\x00" not in value:
        return value
    return None


@dataclass(frozen=True, slots=True)
class Profile:
    """Display profile of a Nostr identity.

    Attributes:
        pubkey: Hex public key the profile belongs to.
        name: ``name`` field of the metadata document.
        display_name: ``display_name`` (or legacy ``displayName``) field.
        picture: Avatar URL.
        nip05: NIP-05 verified identifier.
    """

    pubkey: str
    name: str | None = None
    display_name: str | None = None
    picture: str | None = None
    nip05: str | None = None

    def __post_init__(self) -> None:
        validate_str_not_empty(self.pubkey, "pubkey")
        validate_optional_str(self.name, "name")
        validate_optional_str(self.display_name, "display_name")
        validate_optional_str(self.picture, "picture")
        validate_optional_str(self.nip05, "nip05")

    @classmethod
    def placeholder(cls, pubkey: str) -> Profile:
        """Return the in-flight marker inserted before a fetch is issued."""
        return cls(pubkey=pubkey)

    @property
    def is_placeholder(self) -> bool:
        """Whether no metadata field has been resolved for this identity."""
        return (
            self.name is None
            and self.display_name is None
            and self.picture is None
            and self.nip05 is None
        )

    @classmethod
    def from_content(cls, pubkey: str, content: str) -> Profile:
        """Parse the JSON content of a kind 0 event.

        Missing fields and fields with a non-string value are left as
        ``None``. ``display_name`` falls back to the legacy ``displayName``
        key when empty or absent.

        Raises:
            ValueError: If *content* is not valid JSON or not a JSON object.
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"profile content is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"profile content must be a JSON object, got {type(data).__name__}")

        display_name = _str_or_none(data.get("display_name")) or _str_or_none(
            data.get("displayName")
        )
        return cls(
            pubkey=pubkey,
            name=_str_or_none(data.get("name")),
            display_name=display_name,
            picture=_str_or_none(data.get("picture")),
            nip05=_str_or_none(data.get("nip05")),
        )
