"""Services layer: the live chat session and its collaborators.

Top of the diamond DAG; depends on every other layer.

Attributes:
    LiveChatSession: Subscription lifecycle for one stream. See
        [LiveChatSession][streamchat.services.session.LiveChatSession].
    SessionConfig: Pydantic configuration of a session.
    SessionState: ``IDLE`` / ``CONNECTING`` / ``ACTIVE``.
    EventStore: Deduplicating collections and the feed composer.
    ProfileResolver: Single-flight memoized profile fetch.
"""

from .configs import SessionConfig, validate_relay_url
from .profiles import ProfileResolver
from .session import LiveChatSession, SessionState
from .store import EventStore


__all__ = [
    "EventStore",
    "LiveChatSession",
    "ProfileResolver",
    "SessionConfig",
    "SessionState",
    "validate_relay_url",
]
