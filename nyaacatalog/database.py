import logging
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from whenever import Instant

from .models import Comment, File, OldComment, Torrent, User

logger = logging.getLogger(__name__)

# Torrent field -> column in the torrents table
TORRENT_COLUMNS = {
    "id": "torrent_id",
    "name": "torrent_name",
    "hash": "torrent_hash",
    "category": "category",
    "sub_category": "sub_category",
    "status": "status",
    "hidden": "hidden",
    "date": "date",
    "uploader_id": "uploader",
    "downloads": "downloads",
    "filesize": "filesize",
    "description": "description",
    "website_link": "website_link",
    "trackers": "trackers",
    "deleted_at": "deleted_at",
    "seeders": "seeders",
    "leechers": "leechers",
    "completed": "completed",
    "last_scrape": "last_scrape",
}

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    user_id INTEGER PRIMARY KEY,
    username TEXT NOT NULL,
    md5 TEXT DEFAULT ''
);

CREATE TABLE IF NOT EXISTS {torrents} (
    torrent_id INTEGER PRIMARY KEY,
    torrent_name TEXT NOT NULL,
    torrent_hash TEXT NOT NULL,
    category INTEGER DEFAULT 0,
    sub_category INTEGER DEFAULT 0,
    status INTEGER DEFAULT 1,
    hidden BOOLEAN DEFAULT 0,
    date TIMESTAMP NOT NULL,
    uploader INTEGER DEFAULT 0,
    downloads INTEGER DEFAULT 0,
    filesize INTEGER DEFAULT 0,
    description TEXT DEFAULT '',
    website_link TEXT DEFAULT '',
    trackers TEXT DEFAULT '',
    deleted_at TIMESTAMP,
    seeders INTEGER DEFAULT 0,
    leechers INTEGER DEFAULT 0,
    completed INTEGER DEFAULT 0,
    last_scrape TIMESTAMP
);

CREATE TABLE IF NOT EXISTS comments (
    comment_id INTEGER PRIMARY KEY AUTOINCREMENT,
    torrent_id INTEGER NOT NULL,
    user_id INTEGER,
    content TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL,
    FOREIGN KEY (torrent_id) REFERENCES {torrents}(torrent_id)
);

CREATE TABLE IF NOT EXISTS comments_old (
    comment_id INTEGER PRIMARY KEY AUTOINCREMENT,
    torrent_id INTEGER NOT NULL,
    username TEXT NOT NULL,
    content TEXT NOT NULL,
    date TIMESTAMP NOT NULL,
    FOREIGN KEY (torrent_id) REFERENCES {torrents}(torrent_id)
);

CREATE TABLE IF NOT EXISTS files (
    file_id INTEGER PRIMARY KEY AUTOINCREMENT,
    torrent_id INTEGER NOT NULL,
    path BLOB NOT NULL,
    filesize INTEGER NOT NULL,
    FOREIGN KEY (torrent_id) REFERENCES {torrents}(torrent_id)
);

CREATE INDEX IF NOT EXISTS idx_comments_torrent ON comments(torrent_id);
CREATE INDEX IF NOT EXISTS idx_comments_old_torrent ON comments_old(torrent_id);
CREATE INDEX IF NOT EXISTS idx_files_torrent ON files(torrent_id);
"""


class Database:
    def __init__(
        self,
        db_path: str = "nyaacatalog.db",
        torrents_table: str = "torrents",
        now_func: Callable[[], Instant] = Instant.now,
    ):
        self.db_path = db_path
        self.torrents_table = torrents_table
        self._memory_conn = None
        self.now_func = now_func
        self.init_db()

    def init_db(self) -> None:
        """Initialize the database with schema."""
        with self.get_conn() as conn:
            # Only enable WAL mode for file-based databases, not in-memory
            if self.db_path != ":memory:":
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=NORMAL")

            conn.executescript(SCHEMA.format(torrents=self.torrents_table))
            conn.commit()

    @contextmanager
    def get_conn(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection with row factory."""
        if self.db_path == ":memory:":
            # For in-memory databases, maintain a persistent connection
            if self._memory_conn is None:
                self._memory_conn = sqlite3.connect(
                    self.db_path, detect_types=sqlite3.PARSE_DECLTYPES
                )
                self._memory_conn.row_factory = sqlite3.Row
                self._register_adapters_converters()
            yield self._memory_conn
        else:
            conn = sqlite3.connect(self.db_path, detect_types=sqlite3.PARSE_DECLTYPES)
            conn.row_factory = sqlite3.Row
            self._register_adapters_converters()
            try:
                yield conn
            finally:
                conn.close()

    def _register_adapters_converters(self) -> None:
        """Store Instants as common ISO strings."""

        def adapt_instant(instant: Instant) -> str:
            return instant.format_common_iso()

        def convert_instant(s: bytes) -> Instant:
            return Instant.parse_common_iso(s.decode())

        sqlite3.register_adapter(Instant, adapt_instant)
        sqlite3.register_converter("TIMESTAMP", convert_instant)

    def insert_user(self, user: User) -> None:
        with self.get_conn() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO users (user_id, username, md5) VALUES (?, ?, ?)",
                (user.id, user.username, user.md5),
            )
            conn.commit()

    def insert_torrent(self, torrent: Torrent) -> None:
        """Insert a torrent row. Associations are inserted separately."""
        fields = list(TORRENT_COLUMNS)
        columns = ", ".join(TORRENT_COLUMNS[f] for f in fields)
        placeholders = ", ".join("?" for _ in fields)
        with self.get_conn() as conn:
            conn.execute(
                f"INSERT INTO {self.torrents_table} ({columns}) VALUES ({placeholders})",
                tuple(getattr(torrent, f) for f in fields),
            )
            conn.commit()

    def insert_comment(self, torrent_id: int, comment: Comment) -> None:
        with self.get_conn() as conn:
            conn.execute(
                """
                INSERT INTO comments (torrent_id, user_id, content, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (
                    torrent_id,
                    comment.user.id if comment.user else None,
                    comment.content,
                    comment.created_at,
                ),
            )
            conn.commit()

    def insert_old_comment(self, torrent_id: int, comment: OldComment) -> None:
        with self.get_conn() as conn:
            conn.execute(
                """
                INSERT INTO comments_old (torrent_id, username, content, date)
                VALUES (?, ?, ?, ?)
                """,
                (torrent_id, comment.username, comment.content, comment.date),
            )
            conn.commit()

    def insert_file(self, torrent_id: int, file: File) -> None:
        with self.get_conn() as conn:
            conn.execute(
                "INSERT INTO files (torrent_id, path, filesize) VALUES (?, ?, ?)",
                (torrent_id, file.bencoded_path, file.filesize),
            )
            conn.commit()

    def get_torrent(self, torrent_id: int, include_deleted: bool = False) -> Torrent | None:
        """Load a torrent with its uploader, comments and files."""
        select = ", ".join(
            f"{column} AS {field}" for field, column in TORRENT_COLUMNS.items()
        )
        query = f"SELECT {select} FROM {self.torrents_table} WHERE torrent_id = ?"
        if not include_deleted:
            query += " AND deleted_at IS NULL"

        with self.get_conn() as conn:
            row = conn.execute(query, (torrent_id,)).fetchone()
            if row is None:
                return None

            data = dict(row)
            data["hidden"] = bool(data["hidden"])
            data["uploader"] = self._get_user(conn, data["uploader_id"])
            data["comments"] = self._get_comments(conn, torrent_id)
            data["old_comments"] = self._get_old_comments(conn, torrent_id)
            data["file_list"] = self._get_files(conn, torrent_id)
            return Torrent(**data)

    def _get_user(self, conn: sqlite3.Connection, user_id: int | None) -> User | None:
        if not user_id:
            return None
        row = conn.execute(
            "SELECT user_id, username, md5 FROM users WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        return User(id=row["user_id"], username=row["username"], md5=row["md5"] or "")

    def _get_comments(self, conn: sqlite3.Connection, torrent_id: int) -> list[Comment]:
        cursor = conn.execute(
            """
            SELECT c.content, c.created_at, u.user_id, u.username, u.md5
            FROM comments c
            LEFT JOIN users u ON u.user_id = c.user_id
            WHERE c.torrent_id = ?
            ORDER BY c.comment_id
            """,
            (torrent_id,),
        )
        comments = []
        for row in cursor.fetchall():
            # The author row is gone once the user was deleted
            user = None
            if row["user_id"] is not None:
                user = User(
                    id=row["user_id"], username=row["username"], md5=row["md5"] or ""
                )
            comments.append(
                Comment(user=user, content=row["content"], created_at=row["created_at"])
            )
        return comments

    def _get_old_comments(
        self, conn: sqlite3.Connection, torrent_id: int
    ) -> list[OldComment]:
        cursor = conn.execute(
            """
            SELECT username, content, date FROM comments_old
            WHERE torrent_id = ?
            ORDER BY comment_id
            """,
            (torrent_id,),
        )
        return [OldComment(**dict(row)) for row in cursor.fetchall()]

    def _get_files(self, conn: sqlite3.Connection, torrent_id: int) -> list[File]:
        cursor = conn.execute(
            "SELECT path, filesize FROM files WHERE torrent_id = ? ORDER BY file_id",
            (torrent_id,),
        )
        return [
            File(bencoded_path=bytes(row["path"]), filesize=row["filesize"])
            for row in cursor.fetchall()
        ]

    def update_scrape(
        self,
        torrent_id: int,
        seeders: int,
        leechers: int,
        completed: int,
        timestamp: Instant | None = None,
    ) -> None:
        """Record tracker scrape results for a torrent."""
        if timestamp is None:
            timestamp = self.now_func()

        with self.get_conn() as conn:
            conn.execute(
                f"""
                UPDATE {self.torrents_table}
                SET seeders = ?, leechers = ?, completed = ?, last_scrape = ?
                WHERE torrent_id = ?
                """,
                (seeders, leechers, completed, timestamp, torrent_id),
            )
            conn.commit()

    def soft_delete(self, torrent_id: int) -> None:
        """Mark a torrent as deleted without removing it."""
        with self.get_conn() as conn:
            conn.execute(
                f"UPDATE {self.torrents_table} SET deleted_at = ? WHERE torrent_id = ?",
                (self.now_func(), torrent_id),
            )
            conn.commit()
        logger.info(f"Soft-deleted torrent {torrent_id}")

    def delete_torrent(self, torrent_id: int) -> None:
        """Remove a torrent and everything attached to it."""
        with self.get_conn() as conn:
            for table in ("comments", "comments_old", "files"):
                conn.execute(f"DELETE FROM {table} WHERE torrent_id = ?", (torrent_id,))
            conn.execute(
                f"DELETE FROM {self.torrents_table} WHERE torrent_id = ?",
                (torrent_id,),
            )
            conn.commit()
        logger.info(f"Deleted torrent {torrent_id}")

    def vacuum(self) -> None:
        """Vacuum the database for maintenance."""
        with self.get_conn() as conn:
            conn.execute("VACUUM")
            conn.commit()
