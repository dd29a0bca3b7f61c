import pytest
from whenever import Instant

from nyaacatalog.config import Settings
from nyaacatalog.models import Torrent, TorrentStatus


def make_torrent(**overrides):
    values = {
        "id": 1,
        "name": "test",
        "hash": "abc",
        "date": Instant.from_utc(2020, 1, 1),
    }
    values.update(overrides)
    return Torrent(**values)


@pytest.mark.parametrize(
    "status,predicate",
    [
        (TorrentStatus.NORMAL, "is_normal"),
        (TorrentStatus.REMAKE, "is_remake"),
        (TorrentStatus.TRUSTED, "is_trusted"),
        (TorrentStatus.APLUS, "is_aplus"),
        (TorrentStatus.BLOCKED, "is_blocked"),
    ],
)
def test_status_predicates(status, predicate):
    """Test exactly one status predicate holds for each status."""
    torrent = make_torrent(status=int(status))
    predicates = ["is_normal", "is_remake", "is_trusted", "is_aplus", "is_blocked"]

    assert torrent.status_kind is status
    for name in predicates:
        assert getattr(torrent, name)() == (name == predicate)


def test_unknown_status_is_kept():
    """Test out-of-range statuses are stored as-is and match no predicate."""
    torrent = make_torrent(status=9)

    assert torrent.status == 9
    assert torrent.status_kind is None
    assert not any(
        [
            torrent.is_normal(),
            torrent.is_remake(),
            torrent.is_trusted(),
            torrent.is_aplus(),
            torrent.is_blocked(),
        ]
    )


def test_status_parse():
    """Test parsing stored status integers."""
    assert TorrentStatus.parse(3) is TorrentStatus.TRUSTED
    assert TorrentStatus.parse(0) is None
    assert TorrentStatus.parse(6) is None


def test_is_deleted_independent_of_status():
    """Test the soft-delete flag does not depend on status."""
    torrent = make_torrent(status=int(TorrentStatus.TRUSTED))
    assert not torrent.is_deleted()

    torrent.deleted_at = Instant.from_utc(2021, 1, 1)
    assert torrent.is_deleted()
    assert torrent.is_trusted()


def test_identifier_and_table_name():
    """Test torrent metadata for the persistence layer."""
    torrent = make_torrent(id=1234)

    assert torrent.identifier() == "torrent_1234"
    assert Torrent.table_name(Settings(torrents_table_name="sukebei_torrents")) == (
        "sukebei_torrents"
    )


def test_parse_trackers_adds_needed(config):
    """Test storing trackers on a torrent adds required trackers."""
    torrent = make_torrent()

    torrent.parse_trackers(["udp://mine"], config)

    assert torrent.trackers == "tr=udp%3A%2F%2Fmine&tr=udp%3A%2F%2Fa"
    assert torrent.get_trackers_array() == ["udp://mine", "udp://a"]


def test_get_trackers_array_empty():
    """Test a torrent without stored trackers."""
    assert make_torrent().get_trackers_array() == []
