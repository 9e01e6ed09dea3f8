"""qBittorrent Web API client package."""

from torrent_bridge.services.qbittorrent.client import QBittorrentClient

__all__ = ["QBittorrentClient"]
