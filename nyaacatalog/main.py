"""Command-line access to torrent documents and the search index."""

import argparse
import json
import logging
import sys

import httpx

from .config import Settings, settings
from .database import Database
from .index_sync import SearchIndex
from .projector import torrent_magnet, torrent_to_json

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Project catalog torrents to JSON and keep the search index in sync"
    )
    parser.add_argument(
        "--db",
        type=str,
        default=settings.db_path,
        help=f"Path to SQLite database (default: {settings.db_path})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in [
        ("show", "Print the JSON document of a torrent"),
        ("magnet", "Print the magnet URI of a torrent"),
        ("index", "Add or update a torrent in the search index"),
        ("unindex", "Remove a torrent from the search index"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("torrent_id", type=int, help="Torrent ID")

    return parser


def run(args: argparse.Namespace, config: Settings, client: httpx.Client) -> int:
    """Execute one command. Returns the process exit status."""
    if args.command == "unindex":
        # Hard-deleted torrents are no longer in the database
        index = SearchIndex.from_settings(client, config)
        index.delete(args.torrent_id, config.index_timeout_seconds)
        logger.info(f"Removed torrent {args.torrent_id} from the search index")
        return 0

    db = Database(args.db, config.torrents_table_name)
    torrent = db.get_torrent(args.torrent_id, include_deleted=args.command == "show")
    if torrent is None:
        logger.error(f"Torrent not found: {args.torrent_id}")
        return 1

    if args.command == "show":
        doc = torrent_to_json(torrent, config)
        print(json.dumps(doc.model_dump(mode="json"), ensure_ascii=False, indent=2))
    elif args.command == "magnet":
        print(torrent_magnet(torrent, config))
    elif args.command == "index":
        index = SearchIndex.from_settings(client, config)
        index.add_torrent(torrent, config, config.index_timeout_seconds)
        logger.info(f"Indexed torrent {torrent.id}")

    return 0


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()

    client = httpx.Client(
        timeout=settings.index_timeout_seconds,
        headers={"User-Agent": "nyaacatalog/1.0 Index Sync"},
    )
    try:
        status = run(args, settings, client)
    except httpx.HTTPError as e:
        logger.error(f"Search index request failed: {e}")
        status = 1
    except Exception:
        logger.exception("Command failed with error:")
        status = 1
    finally:
        client.close()
    sys.exit(status)


if __name__ == "__main__":
    main()
