"""Pending download awaiting a destination choice."""

from dataclasses import dataclass
from enum import Enum


class ActionKind(str, Enum):
    """
    What the user sent.

    MAGNET and FILE end up as qBittorrent jobs; VIDEO and PHOTO are
    plain media moved straight into the destination directory.
    """

    MAGNET = "magnet"
    FILE = "file"
    VIDEO = "video"
    PHOTO = "photo"

    @property
    def is_torrent(self) -> bool:
        """Whether this kind is submitted to qBittorrent."""
        return self in (ActionKind.MAGNET, ActionKind.FILE)


@dataclass
class PendingAction:
    """
    One chat's in-flight download.

    Attributes:
        kind: What was sent
        payload: Magnet URI for MAGNET, Telegram file_id otherwise
        display_name: Name shown to the user and used for the local file
        disk_index: Index into the configured disks, changed by set_disk
    """

    kind: ActionKind
    payload: str
    display_name: str
    disk_index: int = 0
