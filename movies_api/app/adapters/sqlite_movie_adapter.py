"""
SQLite implementation of the ``MovieRepository`` port.

The adapter translates the repository operations into SQL against an
injected ``Database`` and normalises every outcome into a result
variant: success, not found, conflict, invalid reference or internal
failure.  It owns no business rules; validation and the friendly
duplicate‑name check happen in ``MovieService``.  The UNIQUE constraint on
``movies.name`` is still reported as a conflict here, because two
concurrent creates can both pass the service check.

All queries use parameterized statements.
"""

import logging
import sqlite3
from typing import Dict, List, Optional, Tuple

from ..core.db import Database
from ..core.results import Conflict, Internal, Invalid, Message, NotFound, Ok, Result
from ..schemas.movie import MAX_STORED_ID, MovieCreate, MovieRead, MovieUpdate

logger = logging.getLogger(__name__)

MOVIE_COLUMNS = ("name", "year", "rating", "director")
SELECT_MOVIE = "SELECT id, name, year, rating, director FROM movies"
UNKNOWN_REFERENCE_MESSAGE = "genre_ids/actor_ids - unknown identifier"

Relations = Dict[int, Tuple[List[int], List[int]]]


class RecordNotFound(Exception):
    """Raised inside a transaction when the targeted row does not exist."""


def not_found_by_id(movie_id: int) -> NotFound:
    return NotFound(f"Movie with ID {movie_id} not found")


def storable_id(movie_id: int) -> bool:
    """False for ids SQLite cannot represent; no such movie can exist."""
    return -MAX_STORED_ID - 1 <= movie_id <= MAX_STORED_ID


def not_found_by_name(name: str) -> NotFound:
    return NotFound(f"Movie with name {name} not found")


def already_exists(name: str) -> Conflict:
    return Conflict(f"Movie {name} already exists")


class SqliteMovieAdapter:
    """Movie persistence on top of SQLite."""

    def __init__(self, database: Database) -> None:
        self.database = database

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _handle_error(operation: str, exc: Exception) -> Internal:
        """Log an unexpected store failure and hide it from the caller."""
        logger.error(
            "%s failed: %s (%s): %s",
            operation,
            type(exc).__name__,
            getattr(exc, "sqlite_errorname", "no error code"),
            exc,
        )
        return Internal()

    def _integrity_result(
        self, operation: str, exc: sqlite3.IntegrityError, name: Optional[str], movie_id: Optional[int]
    ) -> Result:
        message = str(exc)
        if "movies.name" in message:
            logger.warning("%s rejected, name %r already taken", operation, name)
            return already_exists(name)
        if "movies.id" in message:
            logger.warning("%s rejected, id %s already taken", operation, movie_id)
            return Conflict(f"Movie with ID {movie_id} already exists")
        if "FOREIGN KEY" in message:
            logger.warning("%s rejected, unknown genre or actor reference", operation)
            return Invalid([UNKNOWN_REFERENCE_MESSAGE])
        return self._handle_error(operation, exc)

    @staticmethod
    def _load_relations(cursor: sqlite3.Cursor, movie_id: Optional[int] = None) -> Relations:
        """Collect genre and actor ids per movie (all movies if no id)."""
        relations: Relations = {}
        for table, column, slot in (
            ("movie_genres", "genre_id", 0),
            ("movie_actors", "actor_id", 1),
        ):
            query = f"SELECT movie_id, {column} AS ref_id FROM {table}"
            params: tuple = ()
            if movie_id is not None:
                query += " WHERE movie_id = ?"
                params = (movie_id,)
            query += f" ORDER BY movie_id, {column}"
            for row in cursor.execute(query, params).fetchall():
                relations.setdefault(row["movie_id"], ([], []))[slot].append(row["ref_id"])
        return relations

    @staticmethod
    def _write_relations(
        cursor: sqlite3.Cursor,
        movie_id: int,
        genre_ids: Optional[List[int]],
        actor_ids: Optional[List[int]],
    ) -> None:
        """Replace the association sets that were supplied (``None`` keeps them)."""
        if genre_ids is not None:
            cursor.execute("DELETE FROM movie_genres WHERE movie_id = ?", (movie_id,))
            cursor.executemany(
                "INSERT INTO movie_genres (movie_id, genre_id) VALUES (?, ?)",
                [(movie_id, genre_id) for genre_id in genre_ids],
            )
        if actor_ids is not None:
            cursor.execute("DELETE FROM movie_actors WHERE movie_id = ?", (movie_id,))
            cursor.executemany(
                "INSERT INTO movie_actors (movie_id, actor_id) VALUES (?, ?)",
                [(movie_id, actor_id) for actor_id in actor_ids],
            )

    @staticmethod
    def _row_to_movie(row: sqlite3.Row, relations: Relations) -> MovieRead:
        genre_ids, actor_ids = relations.get(row["id"], ([], []))
        return MovieRead(
            id=row["id"],
            name=row["name"],
            year=row["year"],
            rating=row["rating"],
            director=row["director"],
            genre_ids=genre_ids,
            actor_ids=actor_ids,
        )

    def _fetch_one(self, cursor: sqlite3.Cursor, movie_id: int) -> Optional[MovieRead]:
        row = cursor.execute(f"{SELECT_MOVIE} WHERE id = ?", (movie_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_movie(row, self._load_relations(cursor, movie_id))

    # ------------------------------------------------------------------
    # MovieRepository
    # ------------------------------------------------------------------

    async def get_movies(self) -> Result:
        try:
            with self.database.transaction() as cursor:
                rows = cursor.execute(f"{SELECT_MOVIE} ORDER BY id").fetchall()
                relations = self._load_relations(cursor)
            return Ok([self._row_to_movie(row, relations) for row in rows])
        except Exception as exc:
            return self._handle_error("get_movies", exc)

    async def get_movie_by_id(self, movie_id: int) -> Result:
        if not storable_id(movie_id):
            return not_found_by_id(movie_id)
        try:
            with self.database.transaction() as cursor:
                movie = self._fetch_one(cursor, movie_id)
        except Exception as exc:
            return self._handle_error("get_movie_by_id", exc)
        if movie is None:
            return not_found_by_id(movie_id)
        return Ok(movie)

    async def get_movie_by_name(self, name: str) -> Result:
        try:
            with self.database.transaction() as cursor:
                row = cursor.execute(
                    f"{SELECT_MOVIE} WHERE name = ? ORDER BY id LIMIT 1", (name,)
                ).fetchone()
                movie = None
                if row is not None:
                    movie = self._row_to_movie(row, self._load_relations(cursor, row["id"]))
        except Exception as exc:
            return self._handle_error("get_movie_by_name", exc)
        if movie is None:
            return not_found_by_name(name)
        return Ok(movie)

    async def add_movie(self, data: MovieCreate, movie_id: Optional[int] = None) -> Result:
        """Insert a movie with its associations.

        ``movie_id`` (or ``data.id``) pins the identifier; otherwise
        SQLite assigns the next one.
        """
        explicit_id = movie_id if movie_id is not None else data.id
        values = [data.name, data.year, data.rating, data.director]
        try:
            with self.database.transaction() as cursor:
                if explicit_id is None:
                    cursor.execute(
                        "INSERT INTO movies (name, year, rating, director) VALUES (?, ?, ?, ?)",
                        values,
                    )
                else:
                    cursor.execute(
                        "INSERT INTO movies (id, name, year, rating, director) VALUES (?, ?, ?, ?, ?)",
                        [explicit_id, *values],
                    )
                new_id = cursor.lastrowid
                self._write_relations(cursor, new_id, data.genre_ids, data.actor_ids)
                movie = self._fetch_one(cursor, new_id)
        except sqlite3.IntegrityError as exc:
            return self._integrity_result("add_movie", exc, data.name, explicit_id)
        except Exception as exc:
            return self._handle_error("add_movie", exc)
        logger.info("Created movie %s (%s)", movie.id, movie.name)
        return Ok(movie)

    async def update_movie(self, data: MovieUpdate, movie_id: int) -> Result:
        """Apply a partial update; unspecified fields remain unchanged."""
        if not storable_id(movie_id):
            return not_found_by_id(movie_id)
        changes = data.changes()
        columns = {k: v for k, v in changes.items() if k in MOVIE_COLUMNS}
        assignments = [f"{column} = ?" for column in columns]
        assignments.append("updated_at = CURRENT_TIMESTAMP")
        try:
            with self.database.transaction() as cursor:
                cursor.execute(
                    f"UPDATE movies SET {', '.join(assignments)} WHERE id = ?",
                    (*columns.values(), movie_id),
                )
                if cursor.rowcount == 0:
                    raise RecordNotFound(movie_id)
                self._write_relations(
                    cursor, movie_id, changes.get("genre_ids"), changes.get("actor_ids")
                )
                movie = self._fetch_one(cursor, movie_id)
        except RecordNotFound:
            return not_found_by_id(movie_id)
        except sqlite3.IntegrityError as exc:
            return self._integrity_result("update_movie", exc, changes.get("name"), movie_id)
        except Exception as exc:
            return self._handle_error("update_movie", exc)
        logger.info("Updated movie %s", movie_id)
        return Ok(movie)

    async def delete_movie_by_id(self, movie_id: int) -> Result:
        if not storable_id(movie_id):
            return not_found_by_id(movie_id)
        try:
            with self.database.transaction() as cursor:
                cursor.execute("DELETE FROM movies WHERE id = ?", (movie_id,))
                if cursor.rowcount == 0:
                    raise RecordNotFound(movie_id)
        except RecordNotFound:
            return not_found_by_id(movie_id)
        except Exception as exc:
            return self._handle_error("delete_movie_by_id", exc)
        logger.info("Deleted movie %s", movie_id)
        return Message(f"Movie {movie_id} has been deleted")
