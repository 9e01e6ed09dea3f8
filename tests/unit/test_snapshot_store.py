"""Unit tests for the bridge state and its snapshot persistence."""

import json

import pytest

from torrent_bridge.lib.exceptions import PersistenceError
from torrent_bridge.models.snapshot import Snapshot
from torrent_bridge.services.state.context import MAX_STATUS_MESSAGES, BridgeState
from torrent_bridge.services.state.snapshot_store import SnapshotStore


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(tmp_path / "state.json", clock=lambda: 1700000000)


class TestBridgeState:
    """Tests for BridgeState bookkeeping."""

    def test_remember_chat_only_once(self):
        state = BridgeState()

        assert state.remember_chat(1) is True
        assert state.remember_chat(1) is False
        assert state.known_chats == [1]

    def test_mark_notified_is_idempotent(self):
        state = BridgeState()

        state.mark_notified("abc")
        state.mark_notified("abc")

        assert state.notified_torrents == ["abc"]
        assert state.is_notified("abc")

    def test_status_ids_capped(self):
        """At most MAX_STATUS_MESSAGES ids are kept, newest last."""
        state = BridgeState()

        for message_id in range(1, 9):
            state.record_status_id(1, message_id)

        assert state.status_ids(1) == [4, 5, 6, 7, 8]
        assert len(state.status_ids(1)) == MAX_STATUS_MESSAGES

    def test_status_ids_returns_copy(self):
        state = BridgeState()
        state.record_status_id(1, 10)

        state.status_ids(1).append(99)

        assert state.status_ids(1) == [10]

    def test_from_snapshot_trims_status_ids(self):
        snapshot = Snapshot(last_status_ids={1: list(range(10))})

        state = BridgeState.from_snapshot(snapshot)

        assert state.status_ids(1) == [5, 6, 7, 8, 9]


class TestSnapshotStore:
    """Tests for SnapshotStore load/save."""

    def test_missing_file_is_empty_state(self, store):
        snapshot = store.load()

        assert snapshot.known_chats == []
        assert snapshot.notified_torrents == []
        assert snapshot.last_status_ids == {}

    def test_save_writes_expected_layout(self, store):
        state = BridgeState(known_chats=[1, 2], notified_torrents=["abc"])
        state.record_status_id(1, 77)

        store.save_state(state)

        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["known_chats"] == [1, 2]
        assert data["notified_torrents"] == ["abc"]
        assert data["last_status_ids"] == {"1": [77]}
        assert data["timestamp"] == 1700000000
        assert store.save_count == 1

    def test_save_leaves_no_temp_files(self, store):
        store.save_state(BridgeState(known_chats=[1]))
        store.save_state(BridgeState(known_chats=[1, 2]))

        assert [p.name for p in store.path.parent.iterdir()] == ["state.json"]

    def test_restart_restores_persisted_fields(self, store):
        state = BridgeState(known_chats=[5], notified_torrents=["h1", "h2"])
        state.record_status_id(5, 300)
        store.save_state(state)

        restored = store.load_state()

        assert restored.known_chats == [5]
        assert restored.notified_torrents == ["h1", "h2"]
        assert restored.status_ids(5) == [300]
        assert len(restored.pending) == 0
        assert len(restored.deletions) == 0

    def test_restart_does_not_renotify(self, store):
        """A hash announced before a restart is still known after it."""
        state = BridgeState()
        state.mark_notified("deadbeef")
        store.save_state(state)

        assert store.load_state().is_notified("deadbeef")

    def test_legacy_single_status_id(self, store):
        """Older files stored one status message ID per chat."""
        store.path.write_text(
            json.dumps({"known_chats": [1], "notified_torrents": [], "last_status_ids": {"1": 42}}),
            encoding="utf-8",
        )

        state = store.load_state()

        assert state.status_ids(1) == [42]

    def test_unknown_fields_ignored(self, store):
        store.path.write_text(json.dumps({"known_chats": [3], "extra": True}), encoding="utf-8")

        assert store.load().known_chats == [3]

    def test_corrupt_file_is_empty_state(self, store):
        store.path.write_text("{not json", encoding="utf-8")

        state = store.load_state()

        assert state.known_chats == []

    def test_invalid_utf8_is_empty_state(self, store):
        store.path.write_bytes(b'{"known_chats": [1], "x": "\xff\xfe"}')

        assert store.load().known_chats == []

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        store = SnapshotStore(blocker / "state.json")

        with pytest.raises(PersistenceError) as exc_info:
            store.save_state(BridgeState())

        assert exc_info.value.operation == "write"
        assert store.save_count == 0
