"""Unit tests for CompletionWatcher."""

from torrent_bridge.models.torrent import Torrent


class TestCompletionWatcher:
    """Tests for the completion sweep."""

    def test_announces_only_new_completions(self, watcher, daemon, gateway, state, snapshots):
        """Two completed, one already notified: one broadcast, one save."""
        state.known_chats.extend([1, 2])
        state.mark_notified("old")
        daemon.torrents["completed"] = [
            Torrent(hash="old", name="Old", progress=1.0, state="pausedUP"),
            Torrent(hash="new", name="New_One", progress=1.0, state="uploading"),
        ]

        assert watcher.check() == 1

        assert [m["chat_id"] for m in gateway.sent] == [1, 2]
        assert gateway.sent[0]["text"] == "✅ *Finished:* `NewOne`"
        assert state.notified_torrents == ["old", "new"]
        assert snapshots.save_count == 1
        assert snapshots.load().notified_torrents == ["old", "new"]

    def test_name_stripped_of_markdown(self, watcher, daemon, gateway, state):
        state.known_chats.append(1)
        daemon.torrents["completed"] = [Torrent(hash="h", name="Best`Of_*2024*")]

        watcher.check()

        assert gateway.sent[0]["text"] == "✅ *Finished:* `BestOf2024`"

    def test_second_sweep_is_silent(self, watcher, daemon, gateway, state):
        state.known_chats.append(1)
        daemon.torrents["completed"] = [Torrent(hash="h", name="H")]

        watcher.check()
        watcher.check()

        assert len(gateway.sent) == 1

    def test_pauses_by_default(self, watcher, daemon):
        daemon.torrents["completed"] = [Torrent(hash="h", name="H")]

        watcher.check()

        assert daemon.paused == ["h"]
        assert daemon.removed == []

    def test_remove_action(self, watcher, daemon, bridge_config):
        bridge_config.action_on_complete = "remove"
        daemon.torrents["completed"] = [Torrent(hash="h", name="H")]

        watcher.check()

        assert daemon.removed == ["h"]
        assert daemon.paused == []

    def test_failed_action_still_announces(self, watcher, daemon, gateway, state):
        daemon.accept = False
        state.known_chats.append(1)
        daemon.torrents["completed"] = [Torrent(hash="h", name="H")]

        assert watcher.check() == 1
        assert state.is_notified("h")

    def test_daemon_unreachable(self, watcher, daemon, snapshots):
        daemon.torrents["completed"] = None

        assert watcher.check() == 0
        assert snapshots.save_count == 0

    def test_no_known_chats_still_marks(self, watcher, daemon, gateway, state):
        daemon.torrents["completed"] = [Torrent(hash="h", name="H")]

        watcher.check()

        assert gateway.sent == []
        assert state.is_notified("h")
