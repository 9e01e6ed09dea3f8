"""Completion notifications for finished torrents."""

from torrent_bridge.services.completion.watcher import CompletionWatcher

__all__ = ["CompletionWatcher"]
