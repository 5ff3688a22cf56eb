"""
Prometheus metrics collection and HTTP exposition.

Module-level metric objects are singletons shared by every session in the
process. [SessionMetrics][streamchat.core.metrics.SessionMetrics] is the
thin recorder handed to the store, the profile resolver and the session;
it is a no-op when metrics are disabled so library users pay nothing.

[MetricsServer][streamchat.core.metrics.MetricsServer] exposes the
registry over an aiohttp endpoint for Prometheus scraping. It is started
by the CLI only when ``metrics.enabled`` is set.

Architecture:
    SESSION_COUNTER:  Cumulative totals (events_received, events_duplicate,
                      zaps_dropped, profile_fetches, profile_failures).
    SESSION_GAUGE:    Point-in-time values (messages, zaps, connected).
"""

from __future__ import annotations

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest
from pydantic import BaseModel, Field


class MetricsConfig(BaseModel):
    """Configuration for the Prometheus metrics endpoint.

    Set ``host`` to ``"0.0.0.0"`` in container environments to allow
    external scraping.
    """

    enabled: bool = Field(default=False, description="Enable metrics collection")
    port: int = Field(default=8000, ge=1024, le=65535, description="Metrics HTTP port")
    host: str = Field(default="127.0.0.1", description="Metrics HTTP bind address")
    path: str = Field(default="/metrics", description="Metrics endpoint path")


SESSION_GAUGE = Gauge(
    "streamchat_session_gauge",
    "Live chat session gauge values (point-in-time state)",
    ["name"],
)

SESSION_COUNTER = Counter(
    "streamchat_session_counter",
    "Live chat session counter values (cumulative totals)",
    ["name"],
)


class SessionMetrics:
    """Records session metrics when enabled, otherwise does nothing."""

    __slots__ = ("_enabled",)

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def inc(self, name: str, value: float = 1) -> None:
        """Increment the ``name`` counter."""
        if self._enabled:
            SESSION_COUNTER.labels(name=name).inc(value)

    def set(self, name: str, value: float) -> None:
        """Set the ``name`` gauge."""
        if self._enabled:
            SESSION_GAUGE.labels(name=name).set(value)


class MetricsServer:
    """Async HTTP server exposing a Prometheus-compatible metrics endpoint.

    Example:
        server = MetricsServer(MetricsConfig(enabled=True, port=8001))
        await server.start()
        # ... session runs ...
        await server.stop()
    """

    def __init__(self, config: MetricsConfig) -> None:
        self._config = config
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start listening for scrape requests; no-op when disabled.

        Raises:
            OSError: If the port is already in use or binding fails.
        """
        if not self._config.enabled:
            return

        app = web.Application()
        app.router.add_get(self._config.path, self._handle_metrics)

        self._runner = web.AppRunner(app, access_log=None)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.host, self._config.port)
        await site.start()

    async def stop(self) -> None:
        """Stop the HTTP server. Idempotent."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    @staticmethod
    async def _handle_metrics(_request: web.Request) -> web.Response:
        return web.Response(body=generate_latest(), headers={"Content-Type": CONTENT_TYPE_LATEST})
