"""Snapshot storage with atomic JSON persistence.

The whole file is rewritten on every save using a temp file +
os.replace, so a crash during a write leaves the previous snapshot
intact.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from torrent_bridge.lib.exceptions import PersistenceError
from torrent_bridge.lib.timestamps import unix_now
from torrent_bridge.models.snapshot import Snapshot
from torrent_bridge.services.state.context import BridgeState

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Reads and writes the bridge state snapshot file."""

    def __init__(self, path: Path, clock: Callable[[], int] = unix_now):
        """
        Initialize snapshot storage.

        Args:
            path: Location of the JSON state file
            clock: Source of the snapshot timestamp
        """
        self.path = path
        self._clock = clock
        self.save_count = 0

    def load(self) -> Snapshot:
        """
        Read the snapshot.

        A missing file is an empty state. An unreadable or malformed file is
        logged and also treated as empty, so a damaged state file never keeps
        the bridge from starting.
        """
        if not self.path.exists():
            logger.info(f"No state file at {self.path}, starting empty")
            return Snapshot()

        try:
            content = self.path.read_text(encoding="utf-8")
            return Snapshot.model_validate_json(content)
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.error(f"Ignoring unreadable state file {self.path}: {e}")
            return Snapshot()

    def load_state(self) -> BridgeState:
        """Load the snapshot and build a fresh BridgeState from it."""
        snapshot = self.load()
        state = BridgeState.from_snapshot(snapshot)
        logger.info(
            f"Loaded state: {len(state.known_chats)} chat(s), "
            f"{len(state.notified_torrents)} notified torrent(s)"
        )
        return state

    def save(self, snapshot: Snapshot) -> None:
        """
        Persist the snapshot atomically.

        Raises:
            PersistenceError: If the file cannot be written
        """
        directory = self.path.parent
        json_content = snapshot.model_dump_json()

        try:
            directory.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=directory,
                prefix=".state_",
                suffix=".tmp",
            )
        except OSError as e:
            raise PersistenceError(
                f"Cannot create state file in {directory}: {e}",
                path=str(self.path),
                operation="write",
            ) from e

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(json_content)
                f.flush()
                os.fsync(f.fileno())

            os.replace(temp_path, self.path)
            self.save_count += 1
            logger.debug(f"Saved state snapshot to {self.path}")

        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise PersistenceError(
                f"Failed to save state to {self.path}: {e}",
                path=str(self.path),
                operation="write",
            ) from e

    def save_state(self, state: BridgeState) -> None:
        """Snapshot the persistent part of `state` and write it."""
        self.save(state.to_snapshot(self._clock()))
