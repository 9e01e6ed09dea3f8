"""Normalized inbound events.

Raw Telegram updates are validated once at the boundary and turned into
one of the event variants below; nothing past the adapter sees the raw
update payload.
"""

from dataclasses import dataclass
from typing import Optional, Union

from torrent_bridge.models.pending import ActionKind


@dataclass(frozen=True)
class CommandEvent:
    """A `/command` text message.

    Attributes:
        chat_id: Telegram chat ID
        user_id: Sender's Telegram user ID
        message_id: ID of the command message (deleted after handling)
        command: Command name, lowercase, without slash or @botname
        args: Remaining text after the command, if any
    """

    chat_id: int
    user_id: int
    message_id: int
    command: str
    args: Optional[str] = None


@dataclass(frozen=True)
class MagnetEvent:
    """A text message holding a magnet URI."""

    chat_id: int
    user_id: int
    message_id: int
    uri: str


@dataclass(frozen=True)
class MediaEvent:
    """A document, video or photo attachment.

    Attributes:
        kind: FILE, VIDEO or PHOTO
        file_id: Telegram file ID used with getFile
        file_name: Display/target filename
        file_size: Size in bytes as reported by Telegram (0 when unknown)
    """

    chat_id: int
    user_id: int
    message_id: int
    kind: ActionKind
    file_id: str
    file_name: str
    file_size: int = 0


@dataclass(frozen=True)
class TextEvent:
    """Any other message from a user. Only relevant for chat discovery."""

    chat_id: int
    user_id: int
    message_id: int
    text: str = ""


@dataclass(frozen=True)
class CallbackEvent:
    """
    An inline keyboard button press.

    Callback data format:
    - dl:<category> to pick a category and finalize
    - set_disk:<index> to pick a disk
    """

    chat_id: int
    user_id: int
    message_id: Optional[int]
    callback_id: str
    data: str

    @property
    def action(self) -> str:
        """Prefix before the first colon (e.g. 'dl', 'set_disk')."""
        return self.data.split(":", 1)[0]

    @property
    def value(self) -> Optional[str]:
        """Everything after the first colon, or None."""
        parts = self.data.split(":", 1)
        return parts[1] if len(parts) > 1 else None


MessageEvent = Union[CommandEvent, MagnetEvent, MediaEvent, TextEvent]
InboundEvent = Union[CommandEvent, MagnetEvent, MediaEvent, TextEvent, CallbackEvent]
