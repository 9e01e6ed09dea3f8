"""Persisted subset of bridge state.

Only these fields survive a restart; pending actions, deferred deletions,
the update offset and the session cookie are rebuilt from scratch.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class Snapshot(BaseModel):
    """
    On-disk record written to the state file.

    JSON layout:
        {"known_chats": [int], "notified_torrents": [str],
         "last_status_ids": {"<chat_id>": [int]}, "timestamp": int}
    """

    known_chats: list[int] = Field(default_factory=list, description="Chats that talked to the bot")
    notified_torrents: list[str] = Field(
        default_factory=list, description="Hashes already announced as finished"
    )
    last_status_ids: dict[int, list[int]] = Field(
        default_factory=dict, description="Status message IDs per chat"
    )
    timestamp: int = Field(default=0, description="Unix time of the write")

    model_config = {
        "extra": "ignore",
    }

    @field_validator("last_status_ids", mode="before")
    @classmethod
    def accept_single_ids(cls, value: Any) -> Any:
        """Older state files stored one message ID per chat instead of a list."""
        if isinstance(value, dict):
            return {
                chat_id: ids if isinstance(ids, list) else [ids]
                for chat_id, ids in value.items()
            }
        return value
