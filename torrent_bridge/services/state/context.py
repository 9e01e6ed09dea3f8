"""Process-wide mutable state, owned by the scheduler loop."""

from dataclasses import dataclass, field

from torrent_bridge.models.snapshot import Snapshot
from torrent_bridge.services.state.deletions import DeferredDeletionQueue
from torrent_bridge.services.state.pending import PendingActionStore

MAX_STATUS_MESSAGES = 5


@dataclass
class BridgeState:
    """
    Everything the bridge remembers.

    Passed explicitly to each component. Only `known_chats`,
    `notified_torrents` and `status_message_ids` are persisted; the rest
    is lost on restart.

    Attributes:
        known_chats: Chats that sent at least one authorized message
        notified_torrents: Hashes already announced as finished (append-only)
        status_message_ids: Recent status message IDs per chat, oldest first
        pending: Downloads awaiting a destination
        deletions: Confirmations waiting to be deleted
        update_offset: ID of the last Telegram update handed to the controller
    """

    known_chats: list[int] = field(default_factory=list)
    notified_torrents: list[str] = field(default_factory=list)
    status_message_ids: dict[int, list[int]] = field(default_factory=dict)
    pending: PendingActionStore = field(default_factory=PendingActionStore)
    deletions: DeferredDeletionQueue = field(default_factory=DeferredDeletionQueue)
    update_offset: int = 0

    def remember_chat(self, chat_id: int) -> bool:
        """Add a chat to the known chats. Returns True if it was new."""
        if chat_id in self.known_chats:
            return False
        self.known_chats.append(chat_id)
        return True

    def is_notified(self, torrent_hash: str) -> bool:
        return torrent_hash in self.notified_torrents

    def mark_notified(self, torrent_hash: str) -> None:
        if torrent_hash not in self.notified_torrents:
            self.notified_torrents.append(torrent_hash)

    def status_ids(self, chat_id: int) -> list[int]:
        return list(self.status_message_ids.get(chat_id, []))

    def clear_status_ids(self, chat_id: int) -> None:
        self.status_message_ids[chat_id] = []

    def record_status_id(self, chat_id: int, message_id: int) -> None:
        """Append a status message ID, keeping only the newest MAX_STATUS_MESSAGES."""
        ids = self.status_message_ids.setdefault(chat_id, [])
        ids.append(message_id)
        if len(ids) > MAX_STATUS_MESSAGES:
            del ids[:-MAX_STATUS_MESSAGES]

    def to_snapshot(self, timestamp: int) -> Snapshot:
        return Snapshot(
            known_chats=list(dict.fromkeys(self.known_chats)),
            notified_torrents=list(self.notified_torrents),
            last_status_ids={chat: list(ids) for chat, ids in self.status_message_ids.items()},
            timestamp=timestamp,
        )

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "BridgeState":
        return cls(
            known_chats=list(dict.fromkeys(snapshot.known_chats)),
            notified_torrents=list(snapshot.notified_torrents),
            status_message_ids={
                chat: ids[-MAX_STATUS_MESSAGES:]
                for chat, ids in snapshot.last_status_ids.items()
            },
        )
