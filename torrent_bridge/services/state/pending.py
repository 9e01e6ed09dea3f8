"""In-memory store of pending downloads, one per chat."""

import logging
from typing import Optional

from torrent_bridge.models.pending import PendingAction

logger = logging.getLogger(__name__)


class PendingActionStore:
    """
    Map of chat ID to the download awaiting a destination.

    Holds at most one action per chat: setting a new one replaces the
    previous one. Nothing here is persisted, so a restart drops
    in-flight selections and the user has to resend.
    """

    def __init__(self) -> None:
        self._actions: dict[int, PendingAction] = {}

    def set(self, chat_id: int, action: PendingAction) -> None:
        if chat_id in self._actions:
            logger.debug(f"Replacing pending {self._actions[chat_id].kind.value} for chat {chat_id}")
        self._actions[chat_id] = action

    def get(self, chat_id: int) -> Optional[PendingAction]:
        return self._actions.get(chat_id)

    def update_disk_choice(self, chat_id: int, disk_index: int) -> bool:
        """
        Change the selected disk of a chat's pending action.

        Returns:
            False if the chat has nothing pending
        """
        action = self._actions.get(chat_id)
        if action is None:
            return False
        action.disk_index = disk_index
        return True

    def take(self, chat_id: int) -> Optional[PendingAction]:
        """Remove and return the chat's pending action."""
        return self._actions.pop(chat_id, None)

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._actions

    def __len__(self) -> int:
        return len(self._actions)
