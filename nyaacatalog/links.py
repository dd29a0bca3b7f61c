from .config import Settings


def _apply_template(template: str, info_hash: str) -> str:
    return template.replace("%s", info_hash, 1)


def resolve_torrent_link(torrent_id: int, info_hash: str, config: Settings) -> str:
    """Pick the .torrent download URL for a torrent, or "" when there is none.

    Torrents up to last_old_torrent_id live in the legacy cache, which never
    held the sukebei catalog. Newer torrents live in the current storage.
    """
    if torrent_id <= config.last_old_torrent_id:
        if not config.torrent_cache_link or config.is_sukebei():
            return ""
        return _apply_template(config.torrent_cache_link, info_hash)

    if not config.torrent_storage_link:
        return ""
    return _apply_template(config.torrent_storage_link, info_hash)
