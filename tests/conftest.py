import httpx
import pytest
from whenever import Instant

from nyaacatalog.config import Settings
from nyaacatalog.database import Database
from nyaacatalog.index_sync import SearchIndex
from nyaacatalog.models import Comment, File, OldComment, Torrent, User


@pytest.fixture
def fixed_time():
    """Provide a fixed time for testing."""
    return Instant.from_utc(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def config():
    """Settings with a small tracker list and both download links configured."""
    return Settings(
        trackers=["udp://a", "udp://b"],
        needed_trackers=[0],
        torrent_cache_link="http://cache/%s",
        torrent_storage_link="https://storage/%s.torrent",
        last_old_torrent_id=100,
        sukebei=False,
        elasticsearch_url="http://es:9200",
    )


@pytest.fixture
def temp_db(fixed_time):
    """Create a temporary database for testing."""
    db = Database(":memory:", now_func=lambda: fixed_time)
    yield db


@pytest.fixture
def mock_client():
    """Create an HTTP client for testing."""
    return httpx.Client(timeout=30.0)


@pytest.fixture
def search_index(mock_client, config):
    """Create search index instance."""
    return SearchIndex.from_settings(mock_client, config)


@pytest.fixture
def uploader():
    return User(id=7, username="uploader", md5="d41d8cd98f00b204e9800998ecf8427e")


@pytest.fixture
def sample_torrent(uploader):
    """A torrent with comments of both schemas and a few files."""
    return Torrent(
        id=150,
        name="[Group] Show - 01 [1080p].mkv",
        hash=" ABCDEF1234567890ABCDEF1234567890ABCDEF12 ",
        category=3,
        sub_category=5,
        status=1,
        date=Instant.from_utc(2020, 1, 1, 10, 30, 0),
        uploader_id=uploader.id,
        uploader=uploader,
        downloads=42,
        filesize=1_500_000_000,
        description="**Episode 1**",
        website_link="https://group.example",
        seeders=10,
        leechers=2,
        completed=100,
        old_comments=[
            OldComment(
                username="oldtimer",
                content="<p>first</p>",
                date=Instant.from_utc(2020, 1, 2),
            ),
        ],
        comments=[
            Comment(
                user=uploader,
                content="thanks *all*",
                created_at=Instant.from_utc(2020, 1, 1, 12, 0, 0),
            ),
            Comment(user=None, content="gone", created_at=Instant.from_utc(2020, 1, 3)),
        ],
        file_list=[
            File.from_path(["Show", "b.mkv"], 200),
            File.from_path(["Show", "A.mkv"], 100),
        ],
    )
