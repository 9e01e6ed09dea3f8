"""Scheduler loop.

One cooperative thread interleaves the Telegram long-poll with three
timed background activities: completion sweeps, state snapshots and
deferred message deletions. Deciding what is due is a pure function of
the current time (`plan_tick`), so scheduling can be tested without real
clocks or sleeps.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from torrent_bridge.lib.config import BridgeConfig, TelegramConfig
from torrent_bridge.lib.exceptions import PersistenceError
from torrent_bridge.models.events import InboundEvent
from torrent_bridge.services.completion.watcher import CompletionWatcher
from torrent_bridge.services.flow.controller import FlowController
from torrent_bridge.services.state.context import BridgeState
from torrent_bridge.services.state.snapshot_store import SnapshotStore
from torrent_bridge.services.telegram.adapter import normalize_update
from torrent_bridge.services.telegram.gateway import TelegramGateway

logger = logging.getLogger(__name__)


class DueAction(str, Enum):
    """Background work that can become due after a poll."""

    COMPLETION_CHECK = "COMPLETION_CHECK"
    SNAPSHOT = "SNAPSHOT"
    DELETIONS = "DELETIONS"


@dataclass
class TickTimers:
    """When each interval-driven activity last ran (unix seconds)."""

    last_check: float = 0.0
    last_save: float = 0.0


def plan_tick(
    now: float,
    timers: TickTimers,
    check_interval: float,
    save_interval: float,
    deletions_due: bool,
) -> list[DueAction]:
    """
    Decide which background activities run after this tick's poll.

    Args:
        now: Current unix time
        timers: Last run times
        check_interval: Seconds between completion checks
        save_interval: Seconds between snapshots
        deletions_due: Whether any deferred deletion has expired

    Returns:
        Due actions in execution order
    """
    actions = []
    if now - timers.last_check >= check_interval:
        actions.append(DueAction.COMPLETION_CHECK)
    if now - timers.last_save >= save_interval:
        actions.append(DueAction.SNAPSHOT)
    if deletions_due:
        actions.append(DueAction.DELETIONS)
    return actions


class BridgeLoop:
    """
    Owner of the bridge state and driver of every component.

    Runs forever; only an exception outside `tick` (or process
    termination) ends it.
    """

    ERROR_BACKOFF_SECONDS = 2.0
    IDLE_SECONDS = 0.1

    def __init__(
        self,
        state: BridgeState,
        gateway: TelegramGateway,
        controller: FlowController,
        watcher: CompletionWatcher,
        snapshots: SnapshotStore,
        telegram_config: TelegramConfig,
        bridge_config: BridgeConfig,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.state = state
        self.gateway = gateway
        self.controller = controller
        self.watcher = watcher
        self.snapshots = snapshots
        self.telegram_config = telegram_config
        self.config = bridge_config
        self.timers = TickTimers()
        self._clock = clock
        self._sleep = sleep

    def poll(self) -> int:
        """
        Fetch and dispatch new updates in arrival order.

        The offset advances before each dispatch, so an update is never
        delivered twice even if handling it fails.

        Returns:
            Number of updates received
        """
        updates = self.gateway.get_updates(
            self.state.update_offset + 1,
            self.telegram_config.poll_timeout,
        )
        for raw in updates:
            update_id = raw.get("update_id")
            if isinstance(update_id, int):
                self.state.update_offset = update_id
            event = normalize_update(raw)
            if event is not None:
                self._dispatch_event(event)
        return len(updates)

    def _dispatch_event(self, event: InboundEvent) -> None:
        try:
            self.controller.handle_event(event)
        except Exception as e:
            logger.exception(f"Error handling event from chat {event.chat_id}: {e}")

    def run_due(self, now: float) -> list[DueAction]:
        """Run the background activities due at `now`."""
        actions = plan_tick(
            now,
            self.timers,
            self.config.check_interval,
            self.config.state_save_interval,
            self.state.deletions.has_due(now),
        )

        for action in actions:
            if action == DueAction.COMPLETION_CHECK:
                self.watcher.check()
                self.timers.last_check = now
            elif action == DueAction.SNAPSHOT:
                # A failed write waits for the next interval like a successful one
                self.timers.last_save = now
                try:
                    self.snapshots.save_state(self.state)
                except PersistenceError as e:
                    logger.exception(f"Periodic snapshot failed: {e}")
            elif action == DueAction.DELETIONS:
                for entry in self.state.deletions.pop_due(now):
                    self.gateway.delete_message(entry.chat_id, entry.message_id)
        return actions

    def tick(self) -> None:
        """One iteration: long-poll, then whatever background work is due."""
        self.poll()
        self.run_due(self._clock())

    def run_forever(self, max_ticks: Optional[int] = None) -> None:
        """
        Loop until terminated.

        Args:
            max_ticks: Stop after this many iterations (tests only)
        """
        logger.info("Bridge loop started")
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            ticks += 1
            try:
                self.tick()
            except Exception as e:
                logger.exception(f"Loop iteration failed: {e}")
                self._sleep(self.ERROR_BACKOFF_SECONDS)
            self._sleep(self.IDLE_SECONDS)
