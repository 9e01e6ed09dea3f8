"""Telegram to qBittorrent bridge."""

__version__ = "0.1.0"
