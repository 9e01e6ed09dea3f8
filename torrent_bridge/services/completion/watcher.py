"""Completion watcher.

Announces each finished torrent exactly once. The set of announced
hashes is persisted right after every announcement, so a crash or
restart never repeats a notification.
"""

import logging

from torrent_bridge.lib.config import BridgeConfig
from torrent_bridge.lib.messages import TORRENT_FINISHED
from torrent_bridge.lib.sanitize import strip_markdown
from torrent_bridge.models.torrent import Torrent
from torrent_bridge.services.qbittorrent.client import QBittorrentClient
from torrent_bridge.services.state.context import BridgeState
from torrent_bridge.services.state.snapshot_store import SnapshotStore
from torrent_bridge.services.telegram.gateway import TelegramGateway

logger = logging.getLogger(__name__)


class CompletionWatcher:
    """Polls qBittorrent for completed jobs and notifies every known chat."""

    def __init__(
        self,
        daemon: QBittorrentClient,
        gateway: TelegramGateway,
        state: BridgeState,
        snapshots: SnapshotStore,
        config: BridgeConfig,
    ):
        self.daemon = daemon
        self.gateway = gateway
        self.state = state
        self.snapshots = snapshots
        self.config = config

    def check(self) -> int:
        """
        Run one completion sweep.

        Returns:
            Number of newly announced torrents
        """
        torrents = self.daemon.list_torrents("completed")
        if torrents is None:
            logger.debug("Completion check skipped, qBittorrent unreachable")
            return 0

        announced = 0
        for torrent in torrents:
            if self.state.is_notified(torrent.hash):
                continue
            try:
                self._announce(torrent)
                announced += 1
            except Exception as e:
                logger.exception(f"Failed to process completed torrent {torrent.hash}: {e}")
        return announced

    def _announce(self, torrent: Torrent) -> None:
        self._apply_completion_action(torrent)

        text = TORRENT_FINISHED.format(name=strip_markdown(torrent.name))
        for chat_id in list(self.state.known_chats):
            self.gateway.send_message(chat_id, text, parse_mode="Markdown")

        self.state.mark_notified(torrent.hash)
        self.snapshots.save_state(self.state)
        logger.info(f"Torrent finished: {torrent.name} ({torrent.hash})")

    def _apply_completion_action(self, torrent: Torrent) -> None:
        if self.config.action_on_complete == "remove":
            result = self.daemon.remove(torrent.hash)
        else:
            result = self.daemon.pause(torrent.hash)

        if result is None:
            logger.warning(
                f"Could not {self.config.action_on_complete} completed torrent {torrent.hash}"
            )
