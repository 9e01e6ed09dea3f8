"""Finalization of a pending download once its destination is chosen.

Magnets go straight to qBittorrent. Documents are fetched from Telegram,
uploaded as .torrent files and the staging copy removed. Videos and
photos are plain media: fetched and moved into the destination as is.
"""

import logging
import shutil
import time
from pathlib import Path
from typing import Callable, Optional

from torrent_bridge.lib.config import BridgeConfig
from torrent_bridge.lib.messages import (
    FETCH_FAILED,
    MAGNET_ADDED,
    MEDIA_SAVE_FAILED,
    MEDIA_SAVED,
    SUBMIT_FAILED,
    TORRENT_ADDED,
)
from torrent_bridge.lib.sanitize import safe_filename
from torrent_bridge.models.pending import ActionKind, PendingAction
from torrent_bridge.services.qbittorrent.client import QBittorrentClient
from torrent_bridge.services.state.context import BridgeState
from torrent_bridge.services.telegram.gateway import TelegramGateway

logger = logging.getLogger(__name__)


class Finalizer:
    """Carries out a consumed pending action."""

    def __init__(
        self,
        gateway: TelegramGateway,
        daemon: QBittorrentClient,
        state: BridgeState,
        config: BridgeConfig,
        clock: Callable[[], float] = time.time,
    ):
        self.gateway = gateway
        self.daemon = daemon
        self.state = state
        self.config = config
        self._clock = clock

    def finalize(self, chat_id: int, action: PendingAction, directory: str) -> None:
        """
        Submit or store the download and confirm to the user.

        The action has already been removed from the pending store; a
        failure here is reported but not undone.

        Args:
            chat_id: Chat to confirm to
            action: The consumed pending action
            directory: Destination directory (created if absent)
        """
        self._ensure_directory(directory)

        if action.kind == ActionKind.MAGNET:
            text = self._finalize_magnet(action, directory)
        else:
            text = self._finalize_file(chat_id, action, directory)

        if text is None:
            return

        message_id = self.gateway.send_message(chat_id, text, parse_mode="Markdown")
        if message_id is not None:
            expires_at = self._clock() + self.config.cleanup_seconds
            self.state.deletions.schedule(chat_id, message_id, expires_at)

    @staticmethod
    def _ensure_directory(directory: str) -> None:
        try:
            Path(directory).mkdir(mode=0o775, parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create {directory}: {e}")

    def _finalize_magnet(self, action: PendingAction, directory: str) -> str:
        result = self.daemon.add_magnet(action.payload, directory)
        if result is None:
            logger.error(f"qBittorrent did not accept magnet for {directory}")
            return SUBMIT_FAILED.format(directory=directory)

        logger.info(f"Magnet added to {directory}")
        return MAGNET_ADDED.format(directory=directory)

    def _finalize_file(self, chat_id: int, action: PendingAction, directory: str) -> Optional[str]:
        """
        Fetch a Telegram file and either upload it or move it into place.

        Returns:
            Confirmation text, or None when the failure was already reported
        """
        local = self._fetch(chat_id, action)
        if local is None:
            return None

        if action.kind.is_torrent:
            try:
                result = self.daemon.add_torrent_file(local, directory)
            finally:
                local.unlink(missing_ok=True)
            if result is None:
                logger.error(f"qBittorrent did not accept {action.display_name}")
                return SUBMIT_FAILED.format(directory=directory)
            logger.info(f"Torrent file {action.display_name} added to {directory}")
            return TORRENT_ADDED.format(directory=directory)

        target = Path(directory) / local.name
        try:
            shutil.move(str(local), str(target))
        except OSError as e:
            logger.error(f"Could not move {local} to {target}: {e}")
            local.unlink(missing_ok=True)
            return MEDIA_SAVE_FAILED.format(directory=directory)
        logger.info(f"Media {action.display_name} saved to {target}")
        return MEDIA_SAVED.format(directory=directory)

    def _fetch(self, chat_id: int, action: PendingAction) -> Optional[Path]:
        file_path = self.gateway.get_file(action.payload)
        local = self.config.staging_path / safe_filename(action.display_name)

        if file_path is None or not self.gateway.download_file(file_path, local):
            logger.warning(f"Could not fetch {action.display_name} from Telegram")
            self.gateway.send_message(chat_id, FETCH_FAILED)
            return None
        return local
