"""Interactive flow controller.

Per-chat state machine driven by inbound events:

    Idle --magnet/media--> AwaitingDestination(disk=default)
    AwaitingDestination --set_disk:<i>--> AwaitingDestination(disk=i)
    AwaitingDestination --dl:<category>--> Finalizing --> Idle

The state of a chat is simply whether it has a pending action in the
store; /status is handled independently of it.
"""

import logging
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from torrent_bridge.lib.config import BridgeConfig, TelegramConfig
from torrent_bridge.lib.exceptions import PersistenceError
from torrent_bridge.lib.messages import (
    DISK_SELECTED,
    MAGNET_DETECTED,
    MEDIA_RECEIVED,
    MEDIA_TOO_LARGE,
)
from torrent_bridge.models.events import (
    CallbackEvent,
    CommandEvent,
    InboundEvent,
    MagnetEvent,
    MediaEvent,
    MessageEvent,
)
from torrent_bridge.models.pending import ActionKind, PendingAction
from torrent_bridge.services.flow.finalizer import Finalizer
from torrent_bridge.services.presentation.status import StatusReporter
from torrent_bridge.services.state.context import BridgeState
from torrent_bridge.services.state.snapshot_store import SnapshotStore
from torrent_bridge.services.telegram.gateway import TelegramGateway
from torrent_bridge.services.telegram.keyboards import (
    CALLBACK_DOWNLOAD,
    CALLBACK_SET_DISK,
    build_destination_keyboard,
)

logger = logging.getLogger(__name__)


def magnet_name(uri: str) -> str:
    """Display name from the magnet's `dn` parameter, or 'magnet'."""
    names = parse_qs(urlsplit(uri).query).get("dn")
    return names[0] if names and names[0] else "magnet"


class FlowController:
    """
    Routes inbound events to intake, destination selection and finalization.

    Collaborators are injected so the controller can be driven with fakes.
    """

    def __init__(
        self,
        state: BridgeState,
        gateway: TelegramGateway,
        finalizer: Finalizer,
        status_reporter: StatusReporter,
        snapshots: SnapshotStore,
        telegram_config: TelegramConfig,
        bridge_config: BridgeConfig,
    ):
        self.state = state
        self.gateway = gateway
        self.finalizer = finalizer
        self.status_reporter = status_reporter
        self.snapshots = snapshots
        self.telegram_config = telegram_config
        self.config = bridge_config

    def _is_authorized(self, user_id: int) -> bool:
        return user_id in self.telegram_config.allowed_user_ids

    def handle_event(self, event: InboundEvent) -> None:
        """Dispatch one normalized event."""
        if not self._is_authorized(event.user_id):
            logger.warning(
                f"Ignoring {type(event).__name__} from unauthorized user "
                f"{event.user_id} in chat {event.chat_id}"
            )
            return

        if isinstance(event, CallbackEvent):
            self._handle_callback(event)
        else:
            self._handle_message(event)

    # Messages

    def _handle_message(self, event: MessageEvent) -> None:
        if self.state.remember_chat(event.chat_id):
            logger.info(f"New chat {event.chat_id} registered")
            try:
                self.snapshots.save_state(self.state)
            except PersistenceError as e:
                # The chat stays in memory and goes out with the next snapshot
                logger.exception(f"Could not persist new chat {event.chat_id}: {e}")

        if isinstance(event, CommandEvent):
            self._handle_command(event)
        elif isinstance(event, MagnetEvent):
            self._handle_magnet(event)
        elif isinstance(event, MediaEvent):
            self._handle_media(event)

    def _handle_command(self, event: CommandEvent) -> None:
        if event.command != "status":
            logger.debug(f"Ignoring unknown command /{event.command}")
            return

        logger.info(f"Status command received from chat {event.chat_id}")
        self.gateway.delete_message(event.chat_id, event.message_id)
        self.status_reporter.report(event.chat_id)

    def _handle_magnet(self, event: MagnetEvent) -> None:
        action = PendingAction(
            kind=ActionKind.MAGNET,
            payload=event.uri,
            display_name=magnet_name(event.uri),
            disk_index=self.config.default_disk,
        )
        self.state.pending.set(event.chat_id, action)
        self.gateway.send_message(
            event.chat_id,
            MAGNET_DETECTED,
            parse_mode="Markdown",
            reply_markup=self._keyboard(action.disk_index),
        )

    def _handle_media(self, event: MediaEvent) -> None:
        limit = self.telegram_config.max_media_bytes
        if event.file_size > limit:
            logger.info(f"Rejecting {event.file_size} byte {event.kind.value} from chat {event.chat_id}")
            self.gateway.send_message(
                event.chat_id,
                MEDIA_TOO_LARGE.format(
                    size_mb=round(event.file_size / 1024 / 1024, 1),
                    limit_mb=f"{self.telegram_config.max_media_mb:g}",
                ),
                parse_mode="Markdown",
            )
            return

        action = PendingAction(
            kind=event.kind,
            payload=event.file_id,
            display_name=event.file_name,
            disk_index=self.config.default_disk,
        )
        self.state.pending.set(event.chat_id, action)
        self.gateway.send_message(
            event.chat_id,
            MEDIA_RECEIVED.format(name=event.file_name),
            parse_mode="Markdown",
            reply_markup=self._keyboard(action.disk_index),
        )

    # Callbacks

    def _handle_callback(self, event: CallbackEvent) -> None:
        self.gateway.answer_callback(event.callback_id)

        if event.action == CALLBACK_SET_DISK:
            self._handle_set_disk(event)
        elif event.action == CALLBACK_DOWNLOAD:
            self._handle_download(event)
        else:
            logger.debug(f"Ignoring unknown callback {event.data!r}")

    def _handle_set_disk(self, event: CallbackEvent) -> None:
        disk_index = self._parse_disk_index(event.value)
        if disk_index is None:
            logger.warning(f"Ignoring invalid disk selection {event.data!r}")
            return

        if not self.state.pending.update_disk_choice(event.chat_id, disk_index):
            logger.debug(f"No pending download for chat {event.chat_id}, stale disk button")
            return

        if event.message_id is not None:
            self.gateway.edit_message_text(
                event.chat_id,
                event.message_id,
                DISK_SELECTED.format(path=self.config.disks[disk_index]),
                reply_markup=self._keyboard(disk_index),
            )

    def _handle_download(self, event: CallbackEvent) -> None:
        category = event.value
        if not category or category not in self.config.categories:
            logger.warning(f"Ignoring unknown category in {event.data!r}")
            return

        action = self.state.pending.take(event.chat_id)
        if action is None:
            logger.debug(f"No pending download for chat {event.chat_id}, stale category button")
            return

        directory = self.config.destination_for(action.disk_index, category)
        if event.message_id is not None:
            self.gateway.delete_message(event.chat_id, event.message_id)

        logger.info(f"Finalizing {action.kind.value} for chat {event.chat_id} into {directory}")
        self.finalizer.finalize(event.chat_id, action, directory)

    def _parse_disk_index(self, value: Optional[str]) -> Optional[int]:
        try:
            disk_index = int(value or "")
        except ValueError:
            return None
        if not 0 <= disk_index < len(self.config.disks):
            return None
        return disk_index

    def _keyboard(self, disk_index: int):
        return build_destination_keyboard(self.config.categories, self.config.disks, disk_index)
