"""Shared utilities and configuration."""

from torrent_bridge.lib.config import BridgeConfig, QBittorrentConfig, TelegramConfig
from torrent_bridge.lib.exceptions import (
    BridgeError,
    ConfigError,
    PersistenceError,
    TransportError,
)

__all__ = [
    "BridgeConfig",
    "QBittorrentConfig",
    "TelegramConfig",
    "BridgeError",
    "ConfigError",
    "PersistenceError",
    "TransportError",
]
