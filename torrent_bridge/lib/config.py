"""Configuration management via environment variables and pydantic-settings."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from torrent_bridge.lib.exceptions import ConfigError


class TelegramConfig(BaseSettings):
    """Configuration for the Telegram side of the bridge."""

    bot_token: str = Field(
        default="",
        alias="TELEGRAM_BOT_TOKEN",
        description="Telegram bot token from @BotFather",
    )

    allowed_user_ids: list[int] = Field(
        default_factory=list,
        alias="TELEGRAM_ALLOWED_USER_IDS",
        description="JSON list of Telegram user IDs allowed to use the bot",
    )

    poll_timeout: int = Field(
        default=30,
        alias="TELEGRAM_POLL_TIMEOUT",
        description="Long-poll timeout for getUpdates in seconds",
    )

    max_media_mb: float = Field(
        default=20,
        alias="TELEGRAM_MAX_MEDIA_MB",
        description="Largest media attachment accepted, in megabytes (Bot API download limit)",
    )

    api_url: str = Field(
        default="https://api.telegram.org",
        alias="TELEGRAM_API_URL",
        description="Base URL of the Bot API server",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    def is_configured(self) -> bool:
        """Check if Telegram is properly configured."""
        return bool(self.bot_token) and len(self.allowed_user_ids) > 0

    @property
    def max_media_bytes(self) -> int:
        """Media size ceiling in bytes."""
        return int(self.max_media_mb * 1024 * 1024)


class QBittorrentConfig(BaseSettings):
    """Configuration for the qBittorrent Web API."""

    url: str = Field(
        default="",
        alias="QB_URL",
        description="qBittorrent Web UI base URL, e.g. http://localhost:8080",
    )

    username: str = Field(
        default="admin",
        alias="QB_USER",
        description="qBittorrent Web UI username",
    )

    password: str = Field(
        default="",
        alias="QB_PASS",
        description="qBittorrent Web UI password",
    )

    timeout: float = Field(
        default=15,
        alias="QB_TIMEOUT",
        description="Timeout for qBittorrent requests in seconds",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    def is_configured(self) -> bool:
        """Check if the daemon URL is set."""
        return bool(self.url)


class BridgeConfig(BaseSettings):
    """
    Behaviour of the bridge: destinations, timers and housekeeping.

    Priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Defaults defined here
    """

    disks: list[str] = Field(
        default_factory=list,
        alias="BRIDGE_DISKS",
        description="JSON list of download root directories, one per disk",
    )

    categories: dict[str, str] = Field(
        default_factory=dict,
        alias="BRIDGE_CATEGORIES",
        description="JSON object mapping category folder name to button label",
    )

    default_disk: int = Field(
        default=0,
        alias="BRIDGE_DEFAULT_DISK",
        description="Index into BRIDGE_DISKS preselected for new downloads",
    )

    check_interval: int = Field(
        default=60,
        alias="BRIDGE_CHECK_INTERVAL",
        description="Seconds between completion checks",
    )

    state_save_interval: int = Field(
        default=300,
        alias="BRIDGE_STATE_SAVE_INTERVAL",
        description="Seconds between periodic state snapshots",
    )

    status_filter: Literal["all", "downloading"] = Field(
        default="all",
        alias="BRIDGE_STATUS_FILTER",
        description="Torrents shown by /status: all or only downloading ones",
    )

    status_limit: int = Field(
        default=10,
        alias="BRIDGE_STATUS_LIMIT",
        description="Maximum torrents shown by /status (0 = unlimited)",
    )

    action_on_complete: Literal["remove", "pause"] = Field(
        default="pause",
        alias="BRIDGE_ACTION_ON_COMPLETE",
        description="What to do with a torrent once it completes",
    )

    cleanup_seconds: int = Field(
        default=60,
        alias="BRIDGE_CLEANUP_SECONDS",
        description="Lifetime of confirmation messages before they are deleted",
    )

    state_file: str = Field(
        default="./bot_state.json",
        alias="BRIDGE_STATE_FILE",
        description="Path of the JSON state snapshot",
    )

    staging_dir: str = Field(
        default=".",
        alias="BRIDGE_STAGING_DIR",
        description="Directory where Telegram files are downloaded before upload",
    )

    log_file: Optional[str] = Field(
        default=None,
        alias="BRIDGE_LOG_FILE",
        description="Optional log file in addition to stderr",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def state_path(self) -> Path:
        """Get the snapshot file as Path."""
        return Path(self.state_file)

    @property
    def staging_path(self) -> Path:
        """Get the staging directory as Path."""
        return Path(self.staging_dir)

    def destination_for(self, disk_index: int, category: str) -> str:
        """Build the save path for a disk index and category key."""
        return f"{self.disks[disk_index]}/{category}"


# Config instances (lazy loaded)
_telegram_config: TelegramConfig | None = None
_qbittorrent_config: QBittorrentConfig | None = None
_bridge_config: BridgeConfig | None = None


def get_telegram_config() -> TelegramConfig:
    """Get the Telegram configuration instance."""
    global _telegram_config
    if _telegram_config is None:
        _telegram_config = TelegramConfig()
    return _telegram_config


def get_qbittorrent_config() -> QBittorrentConfig:
    """Get the qBittorrent configuration instance."""
    global _qbittorrent_config
    if _qbittorrent_config is None:
        _qbittorrent_config = QBittorrentConfig()
    return _qbittorrent_config


def get_bridge_config() -> BridgeConfig:
    """Get the bridge configuration instance."""
    global _bridge_config
    if _bridge_config is None:
        _bridge_config = BridgeConfig()
    return _bridge_config


def reset_all_configs() -> None:
    """Reset all configuration instances (useful for testing)."""
    global _telegram_config, _qbittorrent_config, _bridge_config
    _telegram_config = None
    _qbittorrent_config = None
    _bridge_config = None


def validate_configuration(
    telegram: TelegramConfig,
    qbittorrent: QBittorrentConfig,
    bridge: BridgeConfig,
) -> None:
    """
    Validate that everything needed to run the bridge is present.

    Raises:
        ConfigError: Listing every problem found
    """
    problems = []

    if not telegram.bot_token:
        problems.append("Missing TELEGRAM_BOT_TOKEN.")
    if not telegram.allowed_user_ids:
        problems.append("TELEGRAM_ALLOWED_USER_IDS is empty; nobody could use the bot.")
    if not qbittorrent.is_configured():
        problems.append("Missing QB_URL.")
    if not bridge.disks:
        problems.append("BRIDGE_DISKS must list at least one directory.")
    elif not 0 <= bridge.default_disk < len(bridge.disks):
        problems.append(
            f"BRIDGE_DEFAULT_DISK={bridge.default_disk} is out of range "
            f"for {len(bridge.disks)} disk(s)."
        )
    if not bridge.categories:
        problems.append("BRIDGE_CATEGORIES must define at least one category.")

    if problems:
        raise ConfigError("Invalid configuration: " + " ".join(problems), problems=problems)
