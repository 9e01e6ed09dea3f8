"""Torrent bridge daemon entry point.

This daemon long-polls Telegram for magnet links and media, lets the
user pick a destination through an inline keyboard, submits downloads to
qBittorrent and announces finished torrents.

Usage:
    python -m torrent_bridge.cli.daemon
    python -m torrent_bridge.cli.daemon --verbose
"""

import argparse
import logging
import signal
import sys
from typing import Optional

from torrent_bridge import __version__
from torrent_bridge.lib.config import (
    BridgeConfig,
    QBittorrentConfig,
    TelegramConfig,
    get_bridge_config,
    get_qbittorrent_config,
    get_telegram_config,
    validate_configuration,
)
from torrent_bridge.lib.exceptions import ConfigError
from torrent_bridge.services.completion.watcher import CompletionWatcher
from torrent_bridge.services.flow.controller import FlowController
from torrent_bridge.services.flow.finalizer import Finalizer
from torrent_bridge.services.presentation.status import StatusReporter
from torrent_bridge.services.qbittorrent.client import QBittorrentClient
from torrent_bridge.services.scheduler import BridgeLoop
from torrent_bridge.services.state.snapshot_store import SnapshotStore
from torrent_bridge.services.telegram.gateway import TelegramGateway

# Configure logging
logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure logging for the daemon."""
    level = logging.DEBUG if verbose else logging.INFO
    format_str = "[%(asctime)s] %(levelname)s: %(message)s"
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=level,
        format=format_str,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )
    # httpx logs every request at INFO, which floods the long-poll
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_bridge(
    telegram_config: TelegramConfig,
    qbittorrent_config: QBittorrentConfig,
    bridge_config: BridgeConfig,
) -> BridgeLoop:
    """Load persisted state and wire every component around it."""
    snapshots = SnapshotStore(bridge_config.state_path)
    state = snapshots.load_state()

    gateway = TelegramGateway(telegram_config)
    daemon = QBittorrentClient(qbittorrent_config)

    status_reporter = StatusReporter(gateway, daemon, state, bridge_config)
    finalizer = Finalizer(gateway, daemon, state, bridge_config)
    controller = FlowController(
        state,
        gateway,
        finalizer,
        status_reporter,
        snapshots,
        telegram_config,
        bridge_config,
    )
    watcher = CompletionWatcher(daemon, gateway, state, snapshots, bridge_config)

    return BridgeLoop(
        state,
        gateway,
        controller,
        watcher,
        snapshots,
        telegram_config,
        bridge_config,
    )


def signal_handler(signum: int, frame) -> None:
    """Handle shutdown signals gracefully."""
    logger.info(f"Received signal {signum}, initiating shutdown...")
    sys.exit(EXIT_SUCCESS)


def main() -> int:
    """Entry point for the daemon."""
    parser = argparse.ArgumentParser(
        prog="torrent-bridge",
        description="Telegram to qBittorrent bridge daemon",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args()

    telegram_config = get_telegram_config()
    qbittorrent_config = get_qbittorrent_config()
    bridge_config = get_bridge_config()

    setup_logging(verbose=args.verbose, log_file=bridge_config.log_file)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("=" * 60)
    logger.info(f"Torrent bridge {__version__}")
    logger.info("=" * 60)

    try:
        validate_configuration(telegram_config, qbittorrent_config, bridge_config)
    except ConfigError as e:
        for problem in e.problems:
            logger.error(problem)
        logger.error("Configuration validation failed. Exiting.")
        return EXIT_FAILURE

    logger.info(f"Telegram: {len(telegram_config.allowed_user_ids)} authorized user(s)")
    logger.info(f"qBittorrent: {qbittorrent_config.url}")
    logger.info(f"Disks: {', '.join(bridge_config.disks)}")
    logger.info(f"State file: {bridge_config.state_path.absolute()}")

    try:
        bridge = build_bridge(telegram_config, qbittorrent_config, bridge_config)
        bridge.run_forever()
    except Exception as e:
        logger.exception(f"Bridge failed with error: {e}")
        return EXIT_FAILURE

    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
