"""
The data‑access port used by ``MovieService``.

The service only depends on this protocol; whether the movies live in
SQLite, behind another HTTP API or in a dictionary (as in the unit
tests) is decided by whoever constructs the service.
"""

from typing import Optional, Protocol

from ..core.results import Result
from ..schemas.movie import MovieCreate, MovieUpdate


class MovieRepository(Protocol):
    async def get_movies(self) -> Result:
        ...

    async def get_movie_by_id(self, movie_id: int) -> Result:
        ...

    async def get_movie_by_name(self, name: str) -> Result:
        ...

    async def add_movie(self, data: MovieCreate, movie_id: Optional[int] = None) -> Result:
        ...

    async def update_movie(self, data: MovieUpdate, movie_id: int) -> Result:
        ...

    async def delete_movie_by_id(self, movie_id: int) -> Result:
        ...
