"""Shared pytest fixtures for all test types."""

from pathlib import Path
from typing import Optional

import pytest

from torrent_bridge.lib.config import BridgeConfig, QBittorrentConfig, TelegramConfig
from torrent_bridge.models.torrent import Torrent
from torrent_bridge.services.completion.watcher import CompletionWatcher
from torrent_bridge.services.flow.controller import FlowController
from torrent_bridge.services.flow.finalizer import Finalizer
from torrent_bridge.services.presentation.status import StatusReporter
from torrent_bridge.services.scheduler import BridgeLoop
from torrent_bridge.services.state.context import BridgeState
from torrent_bridge.services.state.snapshot_store import SnapshotStore

AUTHORIZED_USER = 42
UNAUTHORIZED_USER = 666
CHAT_ID = 1001
MESSAGE_DATE = 1760000000


# =============================================================================
# Raw Telegram payload builders
# =============================================================================


def make_user(user_id: int) -> dict:
    return {"id": user_id, "is_bot": False, "first_name": "Tester"}


def make_chat(chat_id: int) -> dict:
    return {"id": chat_id, "type": "private"}


def message_update(
    update_id: int,
    text: Optional[str] = None,
    chat_id: int = CHAT_ID,
    user_id: int = AUTHORIZED_USER,
    message_id: int = 1,
    **extra,
) -> dict:
    """Build a getUpdates entry carrying a message."""
    message = {
        "message_id": message_id,
        "date": MESSAGE_DATE,
        "chat": make_chat(chat_id),
        "from": make_user(user_id),
    }
    if text is not None:
        message["text"] = text
    message.update(extra)
    return {"update_id": update_id, "message": message}


def document_update(
    update_id: int,
    file_name: str = "ubuntu.torrent",
    file_size: int = 2048,
    **kwargs,
) -> dict:
    document = {
        "file_id": f"doc-{update_id}",
        "file_unique_id": f"udoc-{update_id}",
        "file_name": file_name,
        "file_size": file_size,
    }
    return message_update(update_id, document=document, **kwargs)


def video_update(update_id: int, file_size: int = 4096, **kwargs) -> dict:
    video = {
        "file_id": f"vid-{update_id}",
        "file_unique_id": f"uvid-{update_id}",
        "width": 640,
        "height": 480,
        "duration": 12,
        "file_name": "clip.mp4",
        "file_size": file_size,
    }
    return message_update(update_id, video=video, **kwargs)


def photo_update(update_id: int, **kwargs) -> dict:
    photo = [
        {"file_id": "small", "file_unique_id": "us", "width": 90, "height": 90, "file_size": 100},
        {"file_id": "large", "file_unique_id": "ul", "width": 1280, "height": 1280, "file_size": 9000},
    ]
    return message_update(update_id, photo=photo, **kwargs)


def callback_update(
    update_id: int,
    data: str,
    chat_id: int = CHAT_ID,
    user_id: int = AUTHORIZED_USER,
    message_id: int = 500,
) -> dict:
    """Build a getUpdates entry carrying an inline button press."""
    return {
        "update_id": update_id,
        "callback_query": {
            "id": f"cb-{update_id}",
            "from": make_user(user_id),
            "chat_instance": "instance",
            "data": data,
            "message": {
                "message_id": message_id,
                "date": MESSAGE_DATE,
                "chat": make_chat(chat_id),
            },
        },
    }


# =============================================================================
# Fakes
# =============================================================================


class FakeGateway:
    """In-memory stand-in for TelegramGateway recording every call."""

    def __init__(self):
        self.sent: list[dict] = []
        self.deleted: list[tuple[int, int]] = []
        self.edited: list[dict] = []
        self.answered: list[str] = []
        self.update_batches: list[list[dict]] = []
        self.poll_offsets: list[int] = []
        self.file_paths: dict[str, Optional[str]] = {}
        self.file_content = b"d8:announce0:e"
        self.delete_result = True
        self.send_fails = False
        self._next_message_id = 900

    def get_updates(self, offset: int, timeout: int) -> list[dict]:
        self.poll_offsets.append(offset)
        if self.update_batches:
            return self.update_batches.pop(0)
        return []

    def send_message(self, chat_id, text, parse_mode=None, reply_markup=None):
        if self.send_fails:
            return None
        self._next_message_id += 1
        self.sent.append(
            {
                "chat_id": chat_id,
                "text": text,
                "parse_mode": parse_mode,
                "reply_markup": reply_markup,
                "message_id": self._next_message_id,
            }
        )
        return self._next_message_id

    def delete_message(self, chat_id, message_id):
        self.deleted.append((chat_id, message_id))
        return self.delete_result

    def edit_message_text(self, chat_id, message_id, text, reply_markup=None):
        self.edited.append(
            {"chat_id": chat_id, "message_id": message_id, "text": text, "reply_markup": reply_markup}
        )
        return True

    def answer_callback(self, callback_id):
        self.answered.append(callback_id)
        return True

    def get_file(self, file_id):
        return self.file_paths.get(file_id, f"documents/{file_id}")

    def download_file(self, file_path, destination: Path) -> bool:
        destination.write_bytes(self.file_content)
        return True

    def texts(self, chat_id: Optional[int] = None) -> list[str]:
        return [m["text"] for m in self.sent if chat_id is None or m["chat_id"] == chat_id]


class FakeDaemon:
    """In-memory stand-in for QBittorrentClient."""

    def __init__(self):
        self.torrents: dict[str, Optional[list[Torrent]]] = {"all": [], "completed": []}
        self.magnets: list[tuple[str, str]] = []
        self.uploads: list[dict] = []
        self.removed: list[str] = []
        self.paused: list[str] = []
        self.accept = True

    def list_torrents(self, torrent_filter: str = "all"):
        return self.torrents.get(torrent_filter)

    def add_magnet(self, uri, save_path):
        self.magnets.append((uri, save_path))
        return "Ok." if self.accept else None

    def add_torrent_file(self, torrent_path: Path, save_path):
        self.uploads.append(
            {"name": torrent_path.name, "content": torrent_path.read_bytes(), "save_path": save_path}
        )
        return "Ok." if self.accept else None

    def remove(self, torrent_hash):
        self.removed.append(torrent_hash)
        return "" if self.accept else None

    def pause(self, torrent_hash):
        self.paused.append(torrent_hash)
        return "" if self.accept else None


class FakeClock:
    """Controllable wall clock."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def telegram_config() -> TelegramConfig:
    return TelegramConfig(
        bot_token="123:test",
        allowed_user_ids=[AUTHORIZED_USER],
        poll_timeout=1,
        max_media_mb=20,
    )


@pytest.fixture
def qbittorrent_config() -> QBittorrentConfig:
    return QBittorrentConfig(url="http://qbit.test:8080", username="admin", password="secret")


@pytest.fixture
def bridge_config(tmp_path: Path) -> BridgeConfig:
    staging = tmp_path / "staging"
    staging.mkdir()
    return BridgeConfig(
        disks=[str(tmp_path / "disk1"), str(tmp_path / "disk2")],
        categories={"movies": "🎬 Movies", "series": "📺 Series"},
        default_disk=0,
        check_interval=60,
        state_save_interval=300,
        cleanup_seconds=30,
        state_file=str(tmp_path / "state.json"),
        staging_dir=str(staging),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def daemon() -> FakeDaemon:
    return FakeDaemon()


@pytest.fixture
def state() -> BridgeState:
    return BridgeState()


@pytest.fixture
def snapshots(bridge_config: BridgeConfig, clock: FakeClock) -> SnapshotStore:
    return SnapshotStore(bridge_config.state_path, clock=lambda: int(clock()))


@pytest.fixture
def status_reporter(gateway, daemon, state, bridge_config) -> StatusReporter:
    return StatusReporter(gateway, daemon, state, bridge_config)


@pytest.fixture
def finalizer(gateway, daemon, state, bridge_config, clock) -> Finalizer:
    return Finalizer(gateway, daemon, state, bridge_config, clock=clock)


@pytest.fixture
def controller(
    state, gateway, finalizer, status_reporter, snapshots, telegram_config, bridge_config
) -> FlowController:
    return FlowController(
        state, gateway, finalizer, status_reporter, snapshots, telegram_config, bridge_config
    )


@pytest.fixture
def watcher(daemon, gateway, state, snapshots, bridge_config) -> CompletionWatcher:
    return CompletionWatcher(daemon, gateway, state, snapshots, bridge_config)


@pytest.fixture
def bridge_loop(
    state, gateway, controller, watcher, snapshots, telegram_config, bridge_config, clock
) -> BridgeLoop:
    return BridgeLoop(
        state,
        gateway,
        controller,
        watcher,
        snapshots,
        telegram_config,
        bridge_config,
        clock=clock,
        sleep=lambda seconds: None,
    )
