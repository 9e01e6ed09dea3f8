"""Queue of chat messages scheduled for deletion."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DeferredDeletion:
    """A sent message that should disappear once `expires_at` has passed."""

    chat_id: int
    message_id: int
    expires_at: float


class DeferredDeletionQueue:
    """Transient confirmations waiting to be cleaned up."""

    def __init__(self) -> None:
        self._entries: list[DeferredDeletion] = []

    def schedule(self, chat_id: int, message_id: int, expires_at: float) -> DeferredDeletion:
        entry = DeferredDeletion(chat_id=chat_id, message_id=message_id, expires_at=expires_at)
        self._entries.append(entry)
        return entry

    def pop_due(self, now: float) -> list[DeferredDeletion]:
        """Remove and return every entry whose expiry is at or before `now`."""
        due = [entry for entry in self._entries if now >= entry.expires_at]
        if due:
            self._entries = [entry for entry in self._entries if now < entry.expires_at]
        return due

    def has_due(self, now: float) -> bool:
        return any(now >= entry.expires_at for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))
