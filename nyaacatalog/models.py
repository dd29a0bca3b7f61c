"""Pydantic models for torrent catalog records and their public documents."""

import logging
from enum import IntEnum

import bencodepy
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from whenever import Instant

from .config import Settings
from .trackers import decode_trackers, encode_trackers

logger = logging.getLogger(__name__)


class TorrentStatus(IntEnum):
    """Moderation status of a torrent."""

    NORMAL = 1
    REMAKE = 2
    TRUSTED = 3
    APLUS = 4
    BLOCKED = 5

    @classmethod
    def parse(cls, value: int) -> "TorrentStatus | None":
        """Return the status for a stored integer, or None if it is not one."""
        try:
            return cls(value)
        except ValueError:
            return None


class User(BaseModel):
    """Registered user, as far as torrents and comments need it."""

    model_config = ConfigDict(extra="forbid")

    id: int
    username: str
    md5: str = ""


class OldComment(BaseModel):
    """Comment imported from the legacy site, content already rendered."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    username: str
    content: str
    date: Instant


class Comment(BaseModel):
    """Comment in the current schema. user is None once the author is deleted."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    user: User | None = None
    content: str
    created_at: Instant


class File(BaseModel):
    """File inside a torrent."""

    model_config = ConfigDict(extra="forbid")

    bencoded_path: bytes
    filesize: int

    @staticmethod
    def encode_path(segments: list[str]) -> bytes:
        return bencodepy.encode([segment.encode() for segment in segments])

    @classmethod
    def from_path(cls, segments: list[str], filesize: int) -> "File":
        return cls(bencoded_path=cls.encode_path(segments), filesize=filesize)

    def path(self) -> list[str]:
        """Decode the stored path into its segments.

        Names are not required to be UTF-8; undecodable bytes are replaced.
        A corrupt path decodes to no segments.
        """
        try:
            segments = bencodepy.decode(self.bencoded_path)
        except (bencodepy.DecodingError, ValueError) as e:
            logger.warning(f"Corrupt bencoded file path {self.bencoded_path!r}: {e}")
            return []

        if not isinstance(segments, list) or not all(
            isinstance(segment, bytes) for segment in segments
        ):
            logger.warning(f"Bencoded file path is not a list of strings: {segments!r}")
            return []

        return [segment.decode(errors="replace") for segment in segments]

    def set_path(self, segments: list[str]) -> None:
        self.bencoded_path = self.encode_path(segments)


class Torrent(BaseModel):
    """Torrent record with its associations loaded."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    id: int
    name: str
    hash: str
    category: int = 0
    sub_category: int = 0
    status: int = int(TorrentStatus.NORMAL)
    hidden: bool = False
    date: Instant
    uploader_id: int = 0
    downloads: int = 0
    filesize: int = 0
    description: str = ""
    website_link: str = ""
    trackers: str = ""
    deleted_at: Instant | None = None

    uploader: User | None = None
    # Uploader name carried over from the legacy site, never persisted
    old_uploader: str = ""
    old_comments: list[OldComment] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)

    seeders: int = 0
    leechers: int = 0
    completed: int = 0
    last_scrape: Instant | None = None
    file_list: list[File] = Field(default_factory=list)

    @staticmethod
    def table_name(config: Settings) -> str:
        return config.torrents_table_name

    def identifier(self) -> str:
        return f"torrent_{self.id}"

    @property
    def status_kind(self) -> TorrentStatus | None:
        return TorrentStatus.parse(self.status)

    def is_normal(self) -> bool:
        return self.status_kind is TorrentStatus.NORMAL

    def is_remake(self) -> bool:
        return self.status_kind is TorrentStatus.REMAKE

    def is_trusted(self) -> bool:
        return self.status_kind is TorrentStatus.TRUSTED

    def is_aplus(self) -> bool:
        return self.status_kind is TorrentStatus.APLUS

    def is_blocked(self) -> bool:
        return self.status_kind is TorrentStatus.BLOCKED

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def parse_trackers(self, trackers: list[str], config: Settings) -> None:
        """Store trackers, adding the ones every torrent must announce to."""
        self.trackers = encode_trackers(trackers, config)

    def get_trackers_array(self) -> list[str]:
        return decode_trackers(self.trackers)


class CommentJSON(BaseModel):
    """Comment as exposed by the API."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    username: str = ""
    user_id: int = 0
    user_avatar: str = ""
    content: str = ""
    date: Instant

    @field_serializer("date")
    def serialize_date(self, date: Instant) -> str:
        return date.format_common_iso()


class FileJSON(BaseModel):
    """File entry as exposed by the API."""

    model_config = ConfigDict(extra="forbid")

    path: str
    filesize: int


class TorrentJSON(BaseModel):
    """Torrent document served by the API and stored in the search index.

    Magnet and download links are not stored, so they are generated here.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    id: int
    name: str
    status: int
    hash: str
    date: str
    filesize: int
    description: str
    comments: list[CommentJSON]
    sub_category: str
    category: str
    downloads: int
    uploader_id: int
    uploader_name: str
    uploader_old: str
    website_link: str
    magnet: str
    torrent: str
    seeders: int
    leechers: int
    completed: int
    last_scrape: Instant | None = None
    file_list: list[FileJSON]

    @field_serializer("last_scrape")
    def serialize_last_scrape(self, last_scrape: Instant | None) -> str | None:
        return last_scrape.format_common_iso() if last_scrape else None


class APIResultJSON(BaseModel):
    """Page of torrents returned by the search API."""

    model_config = ConfigDict(extra="forbid")

    torrents: list[TorrentJSON]
    queryRecordCount: int
    totalRecordCount: int


class Feed(BaseModel):
    """Entry of the torrent RSS feed."""

    model_config = ConfigDict(extra="forbid")

    id: int
    name: str
    hash: str
    magnet: str
    timestamp: str
