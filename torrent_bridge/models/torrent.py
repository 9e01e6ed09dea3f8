"""qBittorrent job as returned by /api/v2/torrents/info."""

from pydantic import BaseModel, Field


class Torrent(BaseModel):
    """
    A download job tracked by qBittorrent.

    Only the fields the bridge uses are declared; the API returns many more,
    which are ignored.
    """

    hash: str = Field(..., min_length=1, description="Info hash, the job identifier")
    name: str = Field(default="", description="Torrent display name")
    progress: float = Field(default=0.0, ge=0.0, description="Completion ratio in [0, 1]")
    state: str = Field(default="unknown", description="Raw qBittorrent state label")

    model_config = {
        "extra": "ignore",
    }

    @property
    def is_downloading(self) -> bool:
        """True for every *DL state (stalledDL, metaDL, ...) and 'downloading'."""
        return "DL" in self.state or self.state == "downloading"

    @property
    def percent(self) -> float:
        """Progress as a percentage rounded to one decimal."""
        return round(self.progress * 100, 1)
