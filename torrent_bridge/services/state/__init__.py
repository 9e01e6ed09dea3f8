"""Bridge state: pending actions, deferred deletions and the snapshot file."""

from torrent_bridge.services.state.context import BridgeState
from torrent_bridge.services.state.deletions import DeferredDeletion, DeferredDeletionQueue
from torrent_bridge.services.state.pending import PendingActionStore
from torrent_bridge.services.state.snapshot_store import SnapshotStore

__all__ = [
    "BridgeState",
    "DeferredDeletion",
    "DeferredDeletionQueue",
    "PendingActionStore",
    "SnapshotStore",
]
