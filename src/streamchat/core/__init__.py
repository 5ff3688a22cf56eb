"""Core layer: logging, exceptions, configuration loading, metrics.

Sits in the middle of the diamond DAG -- depends on nothing inside
streamchat and is used by ``streamchat.services`` and the CLI.

Note:
    [streamchat.core.exceptions][] has no imports at all, so the
    ``nips`` and ``utils`` layers raise its typed errors without pulling
    in the rest of ``core``.

Attributes:
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][streamchat.core.logger.Logger].
    StructuredFormatter: Root handler formatter unifying ``Logger`` and
        plain ``logging`` output.
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
    MetricsConfig, MetricsServer, SessionMetrics: Prometheus metrics
        configuration, ``/metrics`` endpoint and recorder.
    StreamChatError: Root of the exception hierarchy, see
        [streamchat.core.exceptions][].
"""

from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    DecodeError,
    MalformedReceiptError,
    ProfileFetchError,
    ProtocolError,
    StreamChatError,
    TransportOpenError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .metrics import (
    SESSION_COUNTER,
    SESSION_GAUGE,
    MetricsConfig,
    MetricsServer,
    SessionMetrics,
)
from .yaml import load_yaml


__all__ = [
    "SESSION_COUNTER",
    "SESSION_GAUGE",
    "ConfigurationError",
    "ConnectivityError",
    "DecodeError",
    "Logger",
    "MalformedReceiptError",
    "MetricsConfig",
    "MetricsServer",
    "ProfileFetchError",
    "ProtocolError",
    "SessionMetrics",
    "StreamChatError",
    "StructuredFormatter",
    "TransportOpenError",
    "format_kv_pairs",
    "load_yaml",
]
