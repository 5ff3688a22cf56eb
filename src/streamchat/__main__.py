"""CLI entry point: follow the chat of a live stream in the terminal.

Continuous mode prints every new feed item as it arrives until SIGINT or
SIGTERM, optionally serving Prometheus metrics. One-shot mode (``--once``)
collects events for ``--wait`` seconds, prints the feed snapshot and exits.

Examples:
    ```bash
    python -m streamchat naddr1...
    python -m streamchat naddr1... --relay wss://relay.example.com --log-level DEBUG
    python -m streamchat naddr1... --once --wait 5
    python -m streamchat naddr1... --config config/session.yaml
    ```
"""

import argparse
import asyncio
import logging
import signal
import sys
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from streamchat.core.exceptions import ConfigurationError, TransportOpenError
from streamchat.core.logger import Logger, StructuredFormatter
from streamchat.core.metrics import MetricsServer
from streamchat.models.feed import FeedItem, MessageItem
from streamchat.services.configs import validate_relay_url
from streamchat.services.session import LiveChatSession
from streamchat.utils.formatting import format_sats


DEFAULT_WAIT = 5.0

logger = Logger("cli")


def format_feed_item(item: FeedItem) -> str:
    """Render a feed item as one terminal line."""
    clock = datetime.fromtimestamp(item.created_at).strftime("%H:%M")  # noqa: DTZ006
    if isinstance(item, MessageItem):
        return f"{clock} {item.data.display_name}: {item.data.content}"
    zap = item.data
    line = f"{clock} ⚡ {zap.sender_display_name} zapped {format_sats(zap.amount)} sats"
    return f"{line}: {zap.content}" if zap.content else line


class FeedPrinter:
    """Session listener printing each feed item once, on first appearance."""

    def __init__(self, session: LiveChatSession) -> None:
        self._session = session
        self._printed: set[str] = set()

    def __call__(self) -> None:
        for item in self._session.feed:
            if item.data.id not in self._printed:
                self._printed.add(item.data.id)
                print(format_feed_item(item), flush=True)  # noqa: T201


async def run_session(
    session: LiveChatSession,
    address: str,
    extra_relays: list[str],
    *,
    once: bool,
    wait: float,
) -> int:
    """Connect *session* to *address* and print its feed.

    Returns:
        Exit code: 0 for success, 1 if the stream could not be opened.
    """
    try:
        await session.connect(address, extra_relays)
    except TransportOpenError as e:
        logger.error("connect_failed", error=str(e))
        return 1
    if not session.is_connected:
        logger.error("invalid_address", address=address)
        return 1

    activity = session.current_activity
    logger.info(
        "stream_opened",
        a_tag=session.address.a_tag if session.address else None,
        relays=len(session.relays),
        title=activity.title if activity else None,
    )

    # One-shot mode: collect, wait for pending profiles, print snapshot
    if once:
        await asyncio.sleep(wait)
        await session.wait_profiles()
        for item in session.feed:
            print(format_feed_item(item))  # noqa: T201
        logger.info("snapshot_completed", messages=len(session.messages), zaps=len(session.zaps))
        return 0

    # Continuous mode: print as events arrive until a shutdown signal
    printer = FeedPrinter(session)
    session.add_listener(printer)
    printer()

    stop = asyncio.Event()

    def handle_signal(sig: signal.Signals) -> None:
        logger.info("shutdown_signal", signal=sig.name)
        stop.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_signal, sig)

    try:
        await stop.wait()
    finally:
        session.remove_listener(printer)
    return 0


def _relay_url(value: str) -> str:
    try:
        return validate_relay_url(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="streamchat",
        description="Follow the live chat and zaps of a Nostr live stream",
    )

    parser.add_argument("address", help="NIP-19 naddr of the live activity")

    parser.add_argument(
        "--relay",
        dest="relays",
        action="append",
        type=_relay_url,
        default=[],
        metavar="URL",
        help="Extra relay URL (repeatable)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Session config path (YAML)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Print a feed snapshot and exit (default: follow continuously)",
    )

    parser.add_argument(
        "--wait",
        type=float,
        default=DEFAULT_WAIT,
        metavar="SECONDS",
        help=f"Seconds to collect events in --once mode (default: {DEFAULT_WAIT})",
    )

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure the root logger with structured formatting.

    Installs a ``StructuredFormatter`` on a stderr handler so that output
    from both ``Logger`` and plain ``logging.getLogger()`` calls in the
    lower layers is unified as ``level name message key=value ...`` and
    never mixes with the feed on stdout.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def build_session(config_path: Path | None) -> LiveChatSession:
    """Create the session from *config_path*, or with defaults when omitted."""
    if config_path is None:
        return LiveChatSession()
    return LiveChatSession.from_yaml(str(config_path))


async def main(argv: list[str] | None = None) -> int:
    """Main entry point: parse args, build the session, and run it."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        session = build_session(args.config)
    except (FileNotFoundError, ConfigurationError, ValidationError) as e:
        logger.error("config_invalid", path=str(args.config), error=str(e))
        return 1

    metrics_config = session.config.metrics
    metrics_server = MetricsServer(metrics_config)
    if not args.once:
        await metrics_server.start()
        if metrics_config.enabled:
            logger.info(
                "metrics_server_started",
                host=metrics_config.host,
                port=metrics_config.port,
                path=metrics_config.path,
            )

    try:
        async with session:
            return await run_session(
                session, args.address, args.relays, once=args.once, wait=args.wait
            )
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130
    finally:
        await metrics_server.stop()


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
