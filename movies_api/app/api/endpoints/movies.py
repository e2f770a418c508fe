"""
Movie endpoints.

Handlers only translate HTTP into ``MovieService`` calls and the
service result into the response envelope.  Every route requires a
fresh bearer token (see ``core.security``), and routes with a
``{movie_id}`` segment reject non‑numeric ids with 400 before the
service is called.

Request bodies are accepted as raw JSON: the service validates them so
that schema violations are reported as 400 with the list of problems.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from movies_api.app.api.dependencies import get_movie_service, validate_movie_id
from movies_api.app.core.responses import format_response
from movies_api.app.core.security import require_fresh_token
from movies_api.app.schemas.movie import (
    ErrorResponse,
    MessageResponse,
    MovieCreate,
    MovieListResponse,
    MovieResponse,
    MovieUpdate,
)
from movies_api.app.services.movie_service import MovieService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_fresh_token)])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid movie id or payload"},
    401: {"model": ErrorResponse, "description": "Missing or stale token"},
    404: {"model": ErrorResponse, "description": "Movie not found"},
    409: {"model": ErrorResponse, "description": "Movie name already exists"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


def _request_body(schema) -> dict:
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": schema.model_json_schema()}},
        }
    }


@router.get("", response_model=MovieListResponse, responses=ERROR_RESPONSES)
async def list_movies(
    name: Optional[str] = Query(None, description="Return only the movie with this name"),
    service: MovieService = Depends(get_movie_service),
) -> JSONResponse:
    """List all movies, or look a single movie up by ``name``."""
    return format_response(await service.list_movies(name))


@router.post(
    "",
    response_model=MovieResponse,
    responses=ERROR_RESPONSES,
    openapi_extra=_request_body(MovieCreate),
)
async def create_movie(
    payload: Any = Body(None),
    service: MovieService = Depends(get_movie_service),
) -> JSONResponse:
    """Create a movie.  Responds 409 if the name is already taken."""
    logger.debug("Received body: %s", payload)
    return format_response(await service.add_movie(payload))


@router.get("/{movie_id}", response_model=MovieResponse, responses=ERROR_RESPONSES)
async def get_movie(
    movie_id: int = Depends(validate_movie_id),
    service: MovieService = Depends(get_movie_service),
) -> JSONResponse:
    return format_response(await service.get_movie_by_id(movie_id))


@router.put(
    "/{movie_id}",
    response_model=MovieResponse,
    responses=ERROR_RESPONSES,
    openapi_extra=_request_body(MovieUpdate),
)
async def update_movie(
    movie_id: int = Depends(validate_movie_id),
    payload: Any = Body(None),
    service: MovieService = Depends(get_movie_service),
) -> JSONResponse:
    """Partially update a movie; unspecified fields remain unchanged."""
    return format_response(await service.update_movie(payload, movie_id))


@router.delete("/{movie_id}", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def delete_movie(
    movie_id: int = Depends(validate_movie_id),
    service: MovieService = Depends(get_movie_service),
) -> JSONResponse:
    return format_response(await service.delete_movie_by_id(movie_id))
