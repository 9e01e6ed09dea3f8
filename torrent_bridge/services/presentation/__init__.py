"""Presentation layer services for Telegram UX."""

from torrent_bridge.services.presentation.status import StatusReporter

__all__ = ["StatusReporter"]
