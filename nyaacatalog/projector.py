"""Projection of torrent records into their public JSON documents."""

from .comments import merge_comments
from .config import Settings
from .files import project_file_list
from .links import resolve_torrent_link
from .magnet import info_hash_to_magnet
from .markup import markdown_to_html, safe_text, safe_url
from .models import APIResultJSON, Feed, Torrent, TorrentJSON
from .trackers import decode_trackers

# Shown instead of the uploader of hidden torrents
HIDDEN_UPLOADER_NAME = "れんちょん"


def format_date(torrent: Torrent) -> str:
    """RFC 3339 timestamp in UTC with second precision."""
    return torrent.date.round("second", mode="floor").format_common_iso()


def torrent_magnet(torrent: Torrent, config: Settings) -> str:
    if torrent.trackers:
        trackers = decode_trackers(torrent.trackers)
    else:
        trackers = config.trackers
    return info_hash_to_magnet(torrent.hash.strip(), torrent.name, trackers, config)


def torrent_to_json(torrent: Torrent, config: Settings) -> TorrentJSON:
    """Build the public document for a torrent."""
    uploader = ""
    uploader_id = 0
    if torrent.hidden:
        uploader = HIDDEN_UPLOADER_NAME
    elif torrent.uploader is not None:
        uploader = torrent.uploader.username
        uploader_id = torrent.uploader_id

    return TorrentJSON(
        id=torrent.id,
        name=torrent.name,
        status=torrent.status,
        hash=torrent.hash,
        date=format_date(torrent),
        filesize=torrent.filesize,
        description=markdown_to_html(torrent.description),
        comments=merge_comments(torrent.old_comments, torrent.comments),
        sub_category=str(torrent.sub_category),
        category=str(torrent.category),
        downloads=torrent.downloads,
        uploader_id=uploader_id,
        uploader_name=safe_text(uploader),
        uploader_old=safe_text(torrent.old_uploader),
        website_link=safe_url(torrent.website_link),
        magnet=torrent_magnet(torrent, config),
        torrent=safe_url(resolve_torrent_link(torrent.id, torrent.hash.strip(), config)),
        seeders=torrent.seeders,
        leechers=torrent.leechers,
        completed=torrent.completed,
        last_scrape=torrent.last_scrape,
        file_list=project_file_list(torrent.file_list),
    )


def torrents_to_json(torrents: list[Torrent], config: Settings) -> list[TorrentJSON]:
    return [torrent_to_json(t, config) for t in torrents]


def api_result(
    torrents: list[Torrent],
    config: Settings,
    query_record_count: int,
    total_record_count: int,
) -> APIResultJSON:
    """Wrap a page of search results for the API."""
    return APIResultJSON(
        torrents=torrents_to_json(torrents, config),
        queryRecordCount=query_record_count,
        totalRecordCount=total_record_count,
    )


def torrent_to_feed(torrent: Torrent, config: Settings) -> Feed:
    return Feed(
        id=torrent.id,
        name=torrent.name,
        hash=torrent.hash,
        magnet=torrent_magnet(torrent, config),
        timestamp=format_date(torrent),
    )
