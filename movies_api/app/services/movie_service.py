"""
Business logic for movies.

``MovieService`` sits between the HTTP routes and the
``MovieRepository`` port.  It validates request payloads, enforces
unique movie names, delegates persistence to the repository and, after
every successful mutation, hands the movie to the event notifier.

Validation always runs before any store access, so an invalid payload
is reported as 400 even when its name would also conflict.  All
operations return a ``Result`` variant; nothing here raises for an
expected failure.
"""

import logging
from typing import Any, List, Optional, Protocol

from pydantic import ValidationError

from ..core.results import Conflict, Invalid, Message, NotFound, Ok, Result
from ..schemas.movie import MovieCreate, MovieRead, MovieUpdate
from .movie_repository import MovieRepository

logger = logging.getLogger(__name__)


class EventNotifier(Protocol):
    def notify(self, movie: MovieRead, action: str) -> Any:
        ...


def validation_messages(exc: Any) -> List[str]:
    """Flatten pydantic style errors into ``"<path> - <message>"`` strings.

    Works for ``pydantic.ValidationError`` and FastAPI's
    ``RequestValidationError`` alike.
    """
    messages = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"])
        messages.append(f"{path} - {err['msg']}" if path else err["msg"])
    return messages


def validate_payload(schema: type, payload: Any):
    """Return ``(model, None)`` or ``(None, Invalid)`` for a raw payload."""
    try:
        return schema.model_validate(payload), None
    except ValidationError as exc:
        return None, Invalid(validation_messages(exc))


class MovieService:
    """Movie use cases on top of an injected repository and notifier."""

    def __init__(self, repository: MovieRepository, notifier: EventNotifier) -> None:
        self.repository = repository
        self.notifier = notifier

    async def list_movies(self, name: Optional[str] = None) -> Result:
        """Return every movie, or only the one called ``name``."""
        if name is not None:
            return await self.repository.get_movie_by_name(name)
        return await self.repository.get_movies()

    async def get_movie_by_id(self, movie_id: int) -> Result:
        return await self.repository.get_movie_by_id(movie_id)

    async def get_movie_by_name(self, name: str) -> Result:
        return await self.repository.get_movie_by_name(name)

    async def add_movie(self, payload: Any, movie_id: Optional[int] = None) -> Result:
        """Create a movie.

        ``movie_id`` (or an ``id`` inside the payload) pins the new
        identifier, which test fixtures rely on.  Returns 400 for schema
        violations, 409 if the name is taken, and the created movie
        otherwise.
        """
        data, invalid = validate_payload(MovieCreate, payload)
        if invalid is not None:
            logger.debug("Rejected movie payload: %s", invalid.error)
            return invalid

        existing = await self.repository.get_movie_by_name(data.name)
        if isinstance(existing, Ok):
            logger.info("Rejected movie %r, name already taken", data.name)
            return Conflict(f"Movie {data.name} already exists")
        if not isinstance(existing, NotFound):
            return existing

        result = await self.repository.add_movie(data, movie_id)
        if isinstance(result, Ok):
            self.notifier.notify(result.data, "created")
        return result

    async def update_movie(self, payload: Any, movie_id: int) -> Result:
        """Apply a partial update to an existing movie."""
        data, invalid = validate_payload(MovieUpdate, payload)
        if invalid is not None:
            return invalid

        current = await self.repository.get_movie_by_id(movie_id)
        if not isinstance(current, Ok):
            return current

        new_name = data.changes().get("name")
        if new_name is not None and new_name != current.data.name:
            other = await self.repository.get_movie_by_name(new_name)
            if isinstance(other, Ok):
                return Conflict(f"Movie {new_name} already exists")
            if not isinstance(other, NotFound):
                return other

        result = await self.repository.update_movie(data, movie_id)
        if isinstance(result, Ok):
            self.notifier.notify(result.data, "updated")
        return result

    async def delete_movie_by_id(self, movie_id: int) -> Result:
        """Delete a movie; the event carries the movie as it was."""
        current = await self.repository.get_movie_by_id(movie_id)
        if not isinstance(current, Ok):
            return current

        result = await self.repository.delete_movie_by_id(movie_id)
        if isinstance(result, Message):
            self.notifier.notify(current.data, "deleted")
        return result
