"""Live torrent status message per chat.

Each /status replaces the previous status messages of the chat instead
of piling new ones on top: recorded IDs are deleted first, then one
fresh message is sent and its ID recorded.
"""

import logging
from typing import Optional

from torrent_bridge.lib.config import BridgeConfig
from torrent_bridge.lib.messages import STATUS_EMPTY, STATUS_HEADER, STATUS_LINE
from torrent_bridge.lib.sanitize import strip_markdown
from torrent_bridge.models.torrent import Torrent
from torrent_bridge.services.qbittorrent.client import QBittorrentClient
from torrent_bridge.services.state.context import BridgeState
from torrent_bridge.services.telegram.gateway import TelegramGateway

logger = logging.getLogger(__name__)


def select_torrents(torrents: list[Torrent], status_filter: str, limit: int) -> list[Torrent]:
    """Apply the configured filter ('all' or 'downloading') and display limit (0 = none)."""
    if status_filter == "downloading":
        torrents = [t for t in torrents if t.is_downloading]
    if limit > 0:
        torrents = torrents[:limit]
    return torrents


def render_status(torrents: list[Torrent]) -> str:
    """Render the status block, or the empty-state text when there is nothing to show."""
    if not torrents:
        return STATUS_EMPTY

    lines = [
        STATUS_LINE.format(
            name=strip_markdown(t.name),
            progress=f"{t.percent:g}",
            state=t.state,
        )
        for t in torrents
    ]
    return STATUS_HEADER + "\n".join(lines)


class StatusReporter:
    """Renders and replaces the status message of a chat."""

    def __init__(
        self,
        gateway: TelegramGateway,
        daemon: QBittorrentClient,
        state: BridgeState,
        config: BridgeConfig,
    ):
        self.gateway = gateway
        self.daemon = daemon
        self.state = state
        self.config = config

    def report(self, chat_id: int) -> Optional[int]:
        """
        Replace the chat's status message.

        Returns:
            ID of the new status message, or None if nothing was sent
        """
        for message_id in self.state.status_ids(chat_id):
            # Best effort: the user may already have deleted it
            self.gateway.delete_message(chat_id, message_id)
        self.state.clear_status_ids(chat_id)

        torrents = self.daemon.list_torrents("all")
        if torrents is None:
            logger.warning(f"qBittorrent unreachable, no status sent to chat {chat_id}")
            return None

        shown = select_torrents(torrents, self.config.status_filter, self.config.status_limit)
        logger.info(f"Sending status with {len(shown)} of {len(torrents)} torrent(s) to chat {chat_id}")

        message_id = self.gateway.send_message(chat_id, render_status(shown), parse_mode="Markdown")
        if message_id is None:
            logger.error(f"Failed to send status message to chat {chat_id}")
            return None

        self.state.record_status_id(chat_id, message_id)
        return message_id
