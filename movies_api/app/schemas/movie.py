"""
Pydantic models for movie data.

``MovieCreate`` and ``MovieUpdate`` describe request bodies and are
validated by ``MovieService`` rather than by FastAPI, so violations
come back in the response envelope.  Both are strict: ``"2010"`` is
not accepted where a year is expected.  ``MovieRead`` is what the
adapter returns and what clients receive.  The ``*Response`` models
only document the response envelope in the OpenAPI schema.
"""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_YEAR = 1900
MAX_YEAR = 2024

# Largest value an SQLite INTEGER column can hold.
MAX_STORED_ID = 2**63 - 1

Identifier = Annotated[int, Field(gt=0, le=MAX_STORED_ID)]

# Columns that cannot be cleared by sending ``null`` in an update.
NON_NULLABLE_FIELDS = ("name", "year", "rating", "genre_ids", "actor_ids")


def _unique_ids(v: Optional[List[int]]) -> Optional[List[int]]:
    if v is None:
        return None
    return sorted(set(v))


class MovieBase(BaseModel):
    name: str = Field(..., min_length=1, description="Movie name", examples=["Inception"])
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR, description="Release year", examples=[2010])
    rating: float = Field(..., allow_inf_nan=False, description="Rating", examples=[7.5])
    director: Optional[str] = Field(None, description="Director name", examples=["Christopher Nolan"])
    genre_ids: List[Identifier] = Field(default_factory=list, description="Identifiers of tagged genres", examples=[[3, 5]])
    actor_ids: List[Identifier] = Field(default_factory=list, description="Identifiers of tagged actors", examples=[[]])


class MovieCreate(MovieBase):
    """Schema for creating a movie.

    ``id`` is optional and only meant for deterministic test fixtures;
    normally the store assigns it.
    """

    model_config = ConfigDict(strict=True)

    id: Optional[Identifier] = Field(None, description="Movie ID", examples=[1])

    @field_validator("genre_ids", "actor_ids")
    @classmethod
    def dedupe_ids(cls, v):
        return _unique_ids(v)


class MovieUpdate(BaseModel):
    """Schema for updating a movie.

    All fields are optional; only provided fields will be updated.  The
    identifier of a movie never changes, so ``id`` is accepted and
    ignored.
    """

    model_config = ConfigDict(strict=True)

    id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1)
    year: Optional[int] = Field(None, ge=MIN_YEAR, le=MAX_YEAR)
    rating: Optional[float] = Field(None, allow_inf_nan=False)
    director: Optional[str] = None
    genre_ids: Optional[List[Identifier]] = None
    actor_ids: Optional[List[Identifier]] = None

    @field_validator("genre_ids", "actor_ids")
    @classmethod
    def dedupe_ids(cls, v):
        return _unique_ids(v)

    def changes(self) -> Dict[str, Any]:
        """Return the supplied fields, minus ``id`` and meaningless nulls."""
        updates = self.model_dump(exclude_unset=True, exclude={"id"})
        return {
            k: v for k, v in updates.items()
            if not (v is None and k in NON_NULLABLE_FIELDS)
        }


class MovieRead(MovieBase):
    """Schema for reading a movie from the API."""

    id: int

    model_config = {
        "from_attributes": True,
    }


class MovieResponse(BaseModel):
    status: int = Field(200, examples=[200])
    data: MovieRead


class MovieListResponse(BaseModel):
    status: int = Field(200, examples=[200])
    data: List[MovieRead]


class MessageResponse(BaseModel):
    status: int = Field(200, examples=[200])
    message: str = Field(..., examples=["Movie 1 has been deleted"])


class ErrorResponse(BaseModel):
    status: int = Field(..., examples=[404])
    error: str = Field(..., examples=["Movie with ID 1 not found"])
