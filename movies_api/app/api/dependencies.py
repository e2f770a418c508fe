"""
FastAPI dependencies shared by the routers.

The service is built once by ``create_app`` and stored on
``app.state``; routes obtain it through ``get_movie_service`` so tests
can build an application around any repository or notifier.
"""

from fastapi import HTTPException, Request, status

from ..services.movie_service import MovieService

INVALID_MOVIE_ID_MESSAGE = "Invalid movie ID provided"


def get_movie_service(request: Request) -> MovieService:
    return request.app.state.movie_service


def validate_movie_id(movie_id: str) -> int:
    """Parse the ``{movie_id}`` path segment, rejecting non‑integers with 400."""
    try:
        return int(movie_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=INVALID_MOVIE_ID_MESSAGE,
        ) from None
