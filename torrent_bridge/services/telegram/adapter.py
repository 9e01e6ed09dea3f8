"""Telegram event normalization layer.

Raw getUpdates payloads are parsed with python-telegram-bot's object
model and turned into the bridge's own event variants, isolating the
Telegram protocol details from the rest of the application.
"""

import logging
from typing import Optional

from telegram import CallbackQuery, Message, Update

from torrent_bridge.models.events import (
    CallbackEvent,
    CommandEvent,
    InboundEvent,
    MagnetEvent,
    MediaEvent,
    TextEvent,
)
from torrent_bridge.models.pending import ActionKind

logger = logging.getLogger(__name__)

MAGNET_PREFIX = "magnet:?"


def normalize_update(raw: dict) -> Optional[InboundEvent]:
    """
    Convert one raw update into an event.

    Args:
        raw: A single element of the getUpdates result

    Returns:
        The normalized event, or None for updates the bridge does not handle
        (edited messages, channel posts, inline queries, malformed payloads)
    """
    try:
        update = Update.de_json(raw, None)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Dropping malformed update {raw.get('update_id')}: {e}")
        return None

    if update is None:
        return None

    if update.callback_query is not None:
        return _from_callback(update.callback_query)

    if update.message is not None:
        return _from_message(update.message)

    logger.debug(f"Ignoring update {update.update_id} without message or callback")
    return None


def is_magnet(text: str) -> bool:
    """Case-insensitive check for a magnet URI."""
    return text.strip().lower().startswith(MAGNET_PREFIX)


def _from_callback(query: CallbackQuery) -> Optional[CallbackEvent]:
    if query.message is None or query.data is None:
        return None

    return CallbackEvent(
        chat_id=query.message.chat.id,
        user_id=query.from_user.id,
        message_id=query.message.message_id,
        callback_id=query.id,
        data=query.data,
    )


def _from_message(message: Message) -> Optional[InboundEvent]:
    if message.from_user is None:
        return None

    chat_id = message.chat.id
    user_id = message.from_user.id
    message_id = message.message_id
    text = message.text or ""

    if text.startswith("/"):
        parts = text.split(maxsplit=1)
        # "/status@my_bot" -> "status"
        command = parts[0][1:].split("@", 1)[0].lower()
        return CommandEvent(
            chat_id=chat_id,
            user_id=user_id,
            message_id=message_id,
            command=command,
            args=parts[1] if len(parts) > 1 else None,
        )

    if is_magnet(text):
        return MagnetEvent(chat_id=chat_id, user_id=user_id, message_id=message_id, uri=text.strip())

    media = _media_event(message, chat_id, user_id, message_id)
    if media is not None:
        return media

    return TextEvent(chat_id=chat_id, user_id=user_id, message_id=message_id, text=text)


def _media_event(
    message: Message,
    chat_id: int,
    user_id: int,
    message_id: int,
) -> Optional[MediaEvent]:
    if message.document is not None:
        document = message.document
        return MediaEvent(
            chat_id=chat_id,
            user_id=user_id,
            message_id=message_id,
            kind=ActionKind.FILE,
            file_id=document.file_id,
            file_name=document.file_name or "file",
            file_size=document.file_size or 0,
        )

    if message.video is not None:
        video = message.video
        return MediaEvent(
            chat_id=chat_id,
            user_id=user_id,
            message_id=message_id,
            kind=ActionKind.VIDEO,
            file_id=video.file_id,
            file_name=video.file_name or "video.mp4",
            file_size=video.file_size or 0,
        )

    if message.photo:
        # Telegram lists sizes smallest first
        photo = message.photo[-1]
        return MediaEvent(
            chat_id=chat_id,
            user_id=user_id,
            message_id=message_id,
            kind=ActionKind.PHOTO,
            file_id=photo.file_id,
            file_name=f"photo_{int(message.date.timestamp())}.jpg",
            file_size=photo.file_size or 0,
        )

    return None
