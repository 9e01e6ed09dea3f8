"""Domain models for the torrent bridge."""

from torrent_bridge.models.credential import SessionCredential
from torrent_bridge.models.events import (
    CallbackEvent,
    CommandEvent,
    InboundEvent,
    MagnetEvent,
    MediaEvent,
    TextEvent,
)
from torrent_bridge.models.pending import ActionKind, PendingAction
from torrent_bridge.models.snapshot import Snapshot
from torrent_bridge.models.torrent import Torrent

__all__ = [
    "SessionCredential",
    "CallbackEvent",
    "CommandEvent",
    "InboundEvent",
    "MagnetEvent",
    "MediaEvent",
    "TextEvent",
    "ActionKind",
    "PendingAction",
    "Snapshot",
    "Torrent",
]
