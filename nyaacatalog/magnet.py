from urllib.parse import quote_plus

from .config import Settings


def info_hash_to_magnet(
    info_hash: str, name: str, trackers: list[str], config: Settings
) -> str:
    """Build a magnet URI, falling back to the default trackers when none are given."""
    if not trackers:
        trackers = config.trackers

    magnet = f"magnet:?xt=urn:btih:{info_hash.strip()}"
    if name:
        magnet += f"&dn={quote_plus(name)}"
    for tracker in trackers:
        magnet += f"&tr={quote_plus(tracker)}"
    return magnet
