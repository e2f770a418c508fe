"""
Top‑level router of the API.

Aggregates the domain routers.  When new endpoints are added, include
their routers here.
"""

from fastapi import APIRouter

from .endpoints import auth, movies

router = APIRouter()

router.include_router(movies.router, prefix="/movies", tags=["movies"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
