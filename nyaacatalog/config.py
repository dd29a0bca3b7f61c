from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TRACKERS = [
    "udp://tracker.doko.moe:6969",
    "udp://tracker.coppersurfer.tk:6969",
    "udp://zer0day.to:1337/announce",
    "udp://tracker.leechers-paradise.org:6969",
    "udp://explodie.org:6969",
    "udp://tracker.opentrackr.org:1337",
    "udp://tracker.internetwarriors.net:1337/announce",
    "http://mgtracker.org:6969/announce",
    "udp://ipv6.leechers-paradise.org:6969",
]


class Settings(BaseSettings):
    """Configuration settings for nyaacatalog."""

    model_config = SettingsConfigDict(env_prefix="NYAA_", case_sensitive=False)

    # Database
    db_path: str = Field(
        default="nyaacatalog.db", description="Path to SQLite database file"
    )
    torrents_table_name: str = Field(
        default="torrents", description="Name of the torrents table"
    )

    # Trackers
    trackers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TRACKERS),
        description="Default announce URLs used when a torrent has none",
    )
    needed_trackers: list[int] = Field(
        default_factory=lambda: [0],
        description="Indices into trackers that every torrent must announce to",
    )

    # Download links
    torrent_cache_link: str = Field(
        default="",
        description="Template for legacy torrent cache links, with one %s for the hash",
    )
    torrent_storage_link: str = Field(
        default="",
        description="Template for current torrent storage links, with one %s for the hash",
    )
    last_old_torrent_id: int = Field(
        default=923000,
        description="Highest torrent ID served from the legacy cache",
    )
    sukebei: bool = Field(
        default=False, description="Serve the adult (sukebei) catalog flavor"
    )

    # Search index
    elasticsearch_url: str = Field(
        default="http://localhost:9200", description="Search index base URL"
    )
    elasticsearch_index: str = Field(
        default="nyaapantsu", description="Search index name"
    )
    elasticsearch_type: str = Field(
        default="torrents", description="Search index document type"
    )
    index_timeout_seconds: float = Field(
        default=10.0, description="Timeout for search index requests in seconds"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @model_validator(mode="after")
    def check_needed_trackers(self) -> "Settings":
        for index in self.needed_trackers:
            if not 0 <= index < len(self.trackers):
                raise ValueError(
                    f"needed tracker index {index} is outside the tracker list "
                    f"(length {len(self.trackers)})"
                )
        return self

    def is_sukebei(self) -> bool:
        return self.sukebei


settings = Settings()
