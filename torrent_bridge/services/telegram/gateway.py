"""Synchronous Telegram Bot API gateway using httpx.

The bridge runs one cooperative loop, so every Bot API call is a plain
blocking HTTPS request bounded by a timeout. Calls never raise on
network or API errors: they log and return None/False, and the caller
moves on to the next cycle.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import httpx
from telegram import InlineKeyboardMarkup

from torrent_bridge.lib.config import TelegramConfig
from torrent_bridge.lib.exceptions import TransportError

logger = logging.getLogger(__name__)


class TelegramGateway:
    """
    Thin wrapper over the Bot API methods the bridge uses.

    Implements: getUpdates, sendMessage, deleteMessage, editMessageText,
    answerCallbackQuery, getFile and the file download endpoint.
    """

    # Extra seconds on top of the long-poll timeout for the HTTP round trip
    POLL_GRACE_SECONDS = 5

    def __init__(self, config: TelegramConfig, transport: httpx.BaseTransport | None = None):
        """
        Initialize the gateway.

        Args:
            config: Bot token, API URL and poll timeout
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        base = config.api_url.rstrip("/")
        self._api_url = f"{base}/bot{config.bot_token}/"
        self._file_url = f"{base}/file/bot{config.bot_token}/"
        self._timeout = config.poll_timeout + self.POLL_GRACE_SECONDS
        self._transport = transport

    @property
    def service_name(self) -> str:
        return "telegram"

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self._timeout, transport=self._transport, follow_redirects=True)

    def request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """
        Call a Bot API method.

        Returns:
            The `result` field of a successful response, None otherwise
        """
        try:
            data = self._post(method, params or {})
        except TransportError as e:
            logger.warning(f"Telegram {method} failed: {e.message}")
            return None

        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else data
            logger.warning(f"Telegram {method} error: {description}")
            return None
        return data.get("result")

    def _post(self, method: str, params: dict[str, Any]) -> Any:
        try:
            with self._client() as client:
                response = client.post(self._api_url + method, json=params)
            return response.json()
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out after {self._timeout}s",
                service=self.service_name,
                original_error=e,
            )
        except httpx.HTTPError as e:
            raise TransportError(
                f"Network error: {str(e)}",
                service=self.service_name,
                original_error=e,
            )
        except ValueError as e:
            raise TransportError(
                "Response is not JSON",
                service=self.service_name,
                original_error=e,
            )

    # Bot API methods

    def get_updates(self, offset: int, timeout: int) -> list[dict]:
        """Long-poll for updates with ID >= offset."""
        result = self.request("getUpdates", {"offset": offset, "timeout": timeout})
        return result if isinstance(result, list) else []

    def send_message(
        self,
        chat_id: int,
        text: str,
        parse_mode: Optional[str] = None,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> Optional[int]:
        """
        Send text message to a chat.

        Returns:
            ID of the sent message, or None if sending failed
        """
        params: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            params["parse_mode"] = parse_mode
        if reply_markup is not None:
            params["reply_markup"] = reply_markup.to_dict()

        result = self.request("sendMessage", params)
        if isinstance(result, dict):
            return result.get("message_id")
        return None

    def delete_message(self, chat_id: int, message_id: int) -> bool:
        """Delete a message. Returns True if Telegram confirmed it."""
        return self.request("deleteMessage", {"chat_id": chat_id, "message_id": message_id}) is True

    def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> bool:
        params: dict[str, Any] = {"chat_id": chat_id, "message_id": message_id, "text": text}
        if reply_markup is not None:
            params["reply_markup"] = reply_markup.to_dict()
        return self.request("editMessageText", params) is not None

    def answer_callback(self, callback_id: str) -> bool:
        """Acknowledge a button press so the client stops showing a spinner."""
        return self.request("answerCallbackQuery", {"callback_query_id": callback_id}) is True

    def get_file(self, file_id: str) -> Optional[str]:
        """
        Resolve a file_id to a downloadable path.

        Returns:
            The file_path to pass to download_file, or None
        """
        result = self.request("getFile", {"file_id": file_id})
        if isinstance(result, dict):
            return result.get("file_path")
        return None

    def download_file(self, file_path: str, destination: Path) -> bool:
        """
        Stream a Telegram file to a local path.

        Returns:
            True if the file was written completely
        """
        try:
            with self._client() as client:
                with client.stream("GET", self._file_url + file_path) as response:
                    if response.status_code != 200:
                        logger.warning(
                            f"Telegram file download returned HTTP {response.status_code}"
                        )
                        return False
                    with open(destination, "wb") as f:
                        for chunk in response.iter_bytes():
                            f.write(chunk)
            return True
        except (httpx.HTTPError, OSError) as e:
            logger.warning(f"Failed to download {file_path} to {destination}: {e}")
            destination.unlink(missing_ok=True)
            return False
