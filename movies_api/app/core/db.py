"""
SQLite database integration and simple migration system.

``Database`` wraps a single SQLite connection.  It is constructed by
the application factory, opened on startup and closed on shutdown, and
handed to the data adapter explicitly; nothing in the code base reaches
for a module‑level connection.  To switch to another DBMS you would
replace this class and adapt the SQL in the adapter.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple


logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"

DEFAULT_GENRES = (
    "Action",
    "Comedy",
    "Drama",
    "Horror",
    "Science Fiction",
    "Thriller",
    "Animation",
    "Documentary",
)

MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS movies (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            year INTEGER NOT NULL,
            rating REAL NOT NULL,
            director TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS genres (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS actors (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS movie_genres (
            movie_id INTEGER NOT NULL,
            genre_id INTEGER NOT NULL,
            PRIMARY KEY (movie_id, genre_id),
            FOREIGN KEY(movie_id) REFERENCES movies(id) ON DELETE CASCADE,
            FOREIGN KEY(genre_id) REFERENCES genres(id)
        );

        CREATE TABLE IF NOT EXISTS movie_actors (
            movie_id INTEGER NOT NULL,
            actor_id INTEGER NOT NULL,
            PRIMARY KEY (movie_id, actor_id),
            FOREIGN KEY(movie_id) REFERENCES movies(id) ON DELETE CASCADE,
            FOREIGN KEY(actor_id) REFERENCES actors(id)
        );
        """,
    ),
    # Migration 2: lookups by association target
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_movie_genres_genre_id ON movie_genres(genre_id);
        CREATE INDEX IF NOT EXISTS idx_movie_actors_actor_id ON movie_actors(actor_id);
        """,
    ),
]


def resolve_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    ``:memory:`` and absolute paths are returned unchanged; anything
    else is resolved relative to the ``movies_api`` package root.
    """
    if database_url == MEMORY_DATABASE or os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # movies_api/
    return str((base_dir / database_url).resolve())


class Database:
    """Owner of the SQLite connection used by the data adapter."""

    def __init__(self, database_url: str) -> None:
        self.path = resolve_database_path(database_url)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database is not open")
        return self._conn

    def open(self) -> None:
        """Connect and apply pending migrations.

        The connection may be used from the server's worker threads, so
        the same‑thread check is disabled; requests are served one at a
        time on the event loop.
        """
        if self._conn is not None:
            return
        conn = sqlite3.connect(self.path, check_same_thread=False)
        # Return rows as dict‑like objects keyed by column name
        conn.row_factory = sqlite3.Row
        # Foreign keys are off by default in SQLite and must be enabled
        # per connection, otherwise association rows are not checked.
        conn.execute("PRAGMA foreign_keys = ON")
        self._conn = conn
        self.migrate()
        logger.info("Opened database %s", self.path)

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Closed database %s", self.path)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor; commit on success and roll back on error."""
        conn = self.connection
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            cursor.close()

    def migrate(self) -> None:
        """Apply pending migrations and seed reference data.

        Creates the ``migrations`` table if it does not exist, checks
        the current schema version and applies any newer entry of
        ``MIGRATIONS``.  When adding a migration, append it with an
        incremented version number.
        """
        with self.transaction() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) as version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    cursor.executescript(sql)
                    cursor.execute(
                        "INSERT INTO migrations (version) VALUES (?)", (version,)
                    )
                    logger.info("Applied migration %s", version)
                    current_version = version

            cursor.executemany(
                "INSERT OR IGNORE INTO genres (name) VALUES (?)",
                [(name,) for name in DEFAULT_GENRES],
            )
