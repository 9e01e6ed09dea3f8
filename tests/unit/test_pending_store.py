"""Unit tests for PendingActionStore."""

from torrent_bridge.models.pending import ActionKind, PendingAction
from torrent_bridge.services.state.pending import PendingActionStore


def _magnet(name: str = "a") -> PendingAction:
    return PendingAction(kind=ActionKind.MAGNET, payload=f"magnet:?dn={name}", display_name=name)


class TestPendingActionStore:
    """Tests for the per-chat pending action map."""

    def test_set_and_get(self):
        store = PendingActionStore()
        action = _magnet()

        store.set(1, action)

        assert store.get(1) is action
        assert 1 in store
        assert len(store) == 1

    def test_set_replaces_previous_action(self):
        """A chat holds at most one pending action."""
        store = PendingActionStore()
        store.set(1, _magnet("first"))

        store.set(1, _magnet("second"))

        assert store.get(1).display_name == "second"
        assert len(store) == 1

    def test_chats_are_independent(self):
        store = PendingActionStore()
        store.set(1, _magnet("one"))
        store.set(2, _magnet("two"))

        assert store.take(1).display_name == "one"
        assert store.get(2).display_name == "two"

    def test_update_disk_choice(self):
        store = PendingActionStore()
        store.set(1, _magnet())

        assert store.update_disk_choice(1, 2) is True
        assert store.get(1).disk_index == 2

    def test_update_disk_choice_without_pending(self):
        store = PendingActionStore()

        assert store.update_disk_choice(1, 2) is False
        assert 1 not in store

    def test_take_removes(self):
        store = PendingActionStore()
        store.set(1, _magnet())

        assert store.take(1) is not None
        assert store.take(1) is None
        assert store.get(1) is None


class TestActionKind:
    """Tests for ActionKind."""

    def test_torrent_kinds(self):
        assert ActionKind.MAGNET.is_torrent
        assert ActionKind.FILE.is_torrent
        assert not ActionKind.VIDEO.is_torrent
        assert not ActionKind.PHOTO.is_torrent
