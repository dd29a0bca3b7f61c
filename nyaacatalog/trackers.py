import logging
import re
from urllib.parse import parse_qs, urlencode

from .config import Settings

logger = logging.getLogger(__name__)

TRACKER_KEY = "tr"

# A '%' that does not start a two-digit hex escape
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_trackers(trackers: list[str], config: Settings) -> str:
    """Encode a tracker list to its stored query-string form.

    Trackers listed in config.needed_trackers are always present in the
    result: an empty list becomes the whole default list, otherwise the
    missing required trackers are appended after the given ones.
    """
    trackers = list(trackers)
    if config.needed_trackers:
        if not trackers:
            trackers = list(config.trackers)
        else:
            for index in config.needed_trackers:
                required = config.trackers[index]
                if required not in trackers:
                    trackers.append(required)

    return urlencode({TRACKER_KEY: trackers}, doseq=True)


def decode_trackers(value: str) -> list[str]:
    """Decode a stored tracker string back to a list of announce URLs."""
    if not value:
        return []

    if _BAD_ESCAPE.search(value):
        logger.warning(f"Malformed tracker string, bad percent escape: {value!r}")
        return []

    try:
        # Empty fields, as left by a trailing or doubled "&", are skipped
        parsed = parse_qs(value, keep_blank_values=True, errors="strict")
    except ValueError as e:
        logger.warning(f"Malformed tracker string {value!r}: {e}")
        return []

    return parsed.get(TRACKER_KEY, [])
