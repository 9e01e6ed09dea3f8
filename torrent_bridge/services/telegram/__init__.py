"""Telegram service package for bot communication."""

from torrent_bridge.services.telegram.adapter import normalize_update
from torrent_bridge.services.telegram.gateway import TelegramGateway
from torrent_bridge.services.telegram.keyboards import build_destination_keyboard

__all__ = ["normalize_update", "TelegramGateway", "build_destination_keyboard"]
